"""
Thin-slice sample.

Provides the :class:`ThinSliceSample` class, which holds every histogram of one
physical sample (a particle species or interaction category) in a thin-slice
cross-section fit: one fine histogram per selection channel, the reconstructed
and true incident-energy histograms, the raw list of incident energies, and
coarse rebinned mirrors of the selection and incident histograms. It also keeps
the normalization bookkeeping (nominal flux, data/MC scale and fit factor).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

import hist
import numpy as np

from thinslice.axes import AxisBinning, AxisBinnings
from thinslice.exceptions import (
    DivisionByZeroFactor,
    InvalidDimension,
    NotInitialized,
    UnknownChannel,
)
from thinslice.histograms import ChannelHist, as_values, rebin
from thinslice.selections import SelectionConfig, SelectionConfigs
from thinslice.utils import sample_hist_name

log = logging.getLogger(__name__)


class ThinSliceSample:
    """
    Histograms and normalization of one sample in a thin-slice fit.

    The fine histograms are filled during the event loop. Once filling is done,
    :meth:`make_rebinned_hists` allocates the coarse mirrors, and
    :meth:`refill_rebinned_hists` resynchronizes them from the fine histograms
    after every change of normalization.

    Parameters:
        name: sample name
        flux_type: integer tag of the particle/interaction category
        selections: selection channel configurations, one histogram is made per entry
        incident_bins: bin edges of the reconstructed incident-energy histogram
        true_incident_bins: bin edges of the true incident-energy histogram
        beam_energy_bin: which beam-energy binning to use for channels whose
            binning depends on the beam energy
        is_signal: whether this is a signal sample
        signal_range: kinematic range ``(low, high]`` of a signal sample

    Raises:
        InvalidDimension: if a selection declares fewer than 1 or more than 3 axes
    """

    def __init__(
        self,
        name: str,
        flux_type: int,
        selections: Iterable[SelectionConfig | Mapping[str, Any]] | SelectionConfigs,
        incident_bins: Sequence[float],
        true_incident_bins: Sequence[float],
        beam_energy_bin: int,
        is_signal: bool = False,
        signal_range: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self._name = name
        self._flux_type = flux_type
        self._is_signal = is_signal
        self._range = (float(signal_range[0]), float(signal_range[1]))
        self._beam_energy_bin = beam_energy_bin

        self._factor = 1.0
        self._nominal_flux = 0.0
        self._data_mc_scale = 1.0

        if not isinstance(selections, SelectionConfigs):
            selections = SelectionConfigs.model_validate(list(selections))
        self._selections = selections

        self._selection_hists: dict[int, ChannelHist] = {}
        for selection in self._selections:
            axes = selection.fine_axes(beam_energy_bin)
            if not 1 <= len(axes) <= 3:
                raise InvalidDimension(
                    len(axes),
                    f"Selection '{selection.name}' ({selection.id}) declares {len(axes)} axes, "
                    "histograms must have between 1 and 3 axes",
                )
            self._selection_hists[selection.id] = ChannelHist.from_axes(
                axes, name=self._hist_name(selection.name)
            )

        self._incident_hist = ChannelHist.from_axes(
            AxisBinnings([AxisBinning.from_edges(incident_bins, "Reconstructed KE (MeV)")]),
            name=self._hist_name("incident"),
        )
        self._true_incident_hist = ChannelHist.from_axes(
            AxisBinnings([AxisBinning.from_edges(true_incident_bins, "True KE (MeV)")]),
            name=self._hist_name("true_incident"),
        )

        self._incident_energies: list[tuple[float, float]] = []

        self._selection_hists_rebinned: dict[int, ChannelHist] = {}
        self._incident_hist_rebinned: ChannelHist | None = None
        self._made_rebinned = False

        log.debug(
            "Built sample %s (flux type %d) with selections %s",
            self._name,
            self._flux_type,
            list(self._selection_hists),
        )

    def _hist_name(self, suffix: str) -> str:
        return sample_hist_name(
            self._name, suffix, self._range if self._is_signal else None
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, flux_type={self._flux_type}, "
            f"is_signal={self._is_signal}, selections={list(self._selection_hists)})"
        )

    # Accessors

    @property
    def name(self) -> str:
        return self._name

    @property
    def flux_type(self) -> int:
        return self._flux_type

    @property
    def nominal_flux(self) -> float:
        return self._nominal_flux

    @property
    def factor(self) -> float:
        return self._factor

    @property
    def data_mc_scale(self) -> float:
        return self._data_mc_scale

    @property
    def beam_energy_bin(self) -> int:
        return self._beam_energy_bin

    @property
    def selections(self) -> SelectionConfigs:
        return self._selections

    @property
    def selection_ids(self) -> list[int]:
        return list(self._selection_hists)

    @property
    def made_rebinned(self) -> bool:
        return self._made_rebinned

    @property
    def selection_hists(self) -> Mapping[int, hist.Hist]:
        """Copies of the fine selection histograms, keyed by channel id."""
        return MappingProxyType(
            {key: h.copy() for key, h in self._selection_hists.items()}
        )

    def selection_hist(self, selection_id: int) -> hist.Hist:
        """
        Copy of the fine histogram of a selection channel.

        Raises:
            UnknownChannel: if the sample has no such channel
        """
        if selection_id not in self._selection_hists:
            raise UnknownChannel(selection_id)
        return self._selection_hists[selection_id].copy()

    def rebinned_selection_hist(self, selection_id: int) -> hist.Hist:
        """
        Copy of the rebinned histogram of a selection channel.

        Raises:
            NotInitialized: if :meth:`make_rebinned_hists` was not called yet
            UnknownChannel: if the sample has no such channel
        """
        self._check_made_rebinned()
        if selection_id not in self._selection_hists_rebinned:
            raise UnknownChannel(selection_id)
        return self._selection_hists_rebinned[selection_id].copy()

    @property
    def incident_hist(self) -> hist.Hist:
        return self._incident_hist.copy()

    @property
    def true_incident_hist(self) -> hist.Hist:
        return self._true_incident_hist.copy()

    @property
    def rebinned_incident_hist(self) -> hist.Hist:
        self._check_made_rebinned()
        assert self._incident_hist_rebinned is not None
        return self._incident_hist_rebinned.copy()

    @property
    def incident_energies(self) -> tuple[tuple[float, float], ...]:
        """Stored ``(energy, weight)`` pairs, in insertion order."""
        return tuple(self._incident_energies)

    # Signal definition

    @property
    def is_signal(self) -> bool:
        return self._is_signal

    def check_is_signal(self) -> bool:
        return self._is_signal

    def check_in_signal_range(self, val: float) -> bool:
        """Whether ``val`` lies in ``(low, high]``: the low end is excluded, the high end included."""
        return self._range[0] < val <= self._range[1]

    @property
    def signal_range(self) -> tuple[float, float]:
        return self._range

    @property
    def range_low_end(self) -> float:
        return self._range[0]

    @property
    def range_high_end(self) -> float:
        return self._range[1]

    # Filling

    def add_flux(self, val: float = 1.0) -> None:
        self._nominal_flux += val

    def fill_selection_hist(
        self, selection_id: int, value: float | Sequence[float]
    ) -> None:
        """
        Fill one event into the histogram of a selection channel.

        Unknown channel ids are ignored.

        Args:
            selection_id: channel id
            value: a single value, or one value per histogram axis

        Raises:
            InvalidDimension: if ``value`` does not hold 1 to 3 values, or the
                number of values does not match the channel histogram
        """
        values = as_values(value)
        channel = self._selection_hists.get(selection_id)
        if channel is None:
            log.debug(
                "Sample %s has no selection %s, skipping fill", self._name, selection_id
            )
            return
        channel.fill(values)

    def fill_incident_hist(self, vals: Iterable[float]) -> None:
        self._incident_hist.fill_many(list(vals))

    def fill_true_incident_hist(self, vals: Iterable[float]) -> None:
        self._true_incident_hist.fill_many(list(vals))

    def add_incident_energies(self, vals: Iterable[float]) -> None:
        """Store each value with unit weight, without filling any histogram."""
        self._incident_energies.extend((float(v), 1.0) for v in vals)

    def fill_hist_from_incident_energies(self, h: hist.Hist) -> None:
        """
        Fill an external histogram with the stored incident energies.

        Every entry is weighted with the current :attr:`factor`, not with its
        stored weight.
        """
        if not self._incident_energies:
            return
        energies = np.fromiter(
            (energy for energy, _ in self._incident_energies), dtype=float
        )
        h.fill(energies, weight=self._factor)

    # Normalization

    def scale_hists(self, val: float) -> None:
        """Scale the incident, selection and true incident histograms by ``val``."""
        self._incident_hist.scale(val)
        for channel in self._selection_hists.values():
            channel.scale(val)
        self._true_incident_hist.scale(val)

    def scale_incident_energies(self, val: float) -> None:
        self._incident_energies = [
            (energy, weight * val) for energy, weight in self._incident_energies
        ]

    def set_data_mc_scale(self, val: float) -> None:
        """Apply a data/MC scale to the histograms and the nominal flux."""
        self._data_mc_scale = val
        self.scale_hists(val)
        self._nominal_flux *= val
        log.debug("Sample %s: data/MC scale set to %s", self._name, val)

    def set_factor(self, val: float) -> None:
        """Set the factor without rescaling anything."""
        self._factor = val

    def set_factor_and_scale(self, val: float) -> None:
        """
        Replace the current factor with ``val`` and rescale accordingly.

        The previous factor is undone first, so repeated calls with the same
        value scale the histograms and flux by ``val`` relative to the
        unscaled baseline only once.
        """
        self.reset_factor()
        self._factor = val
        self._nominal_flux *= val
        self.scale_hists(val)
        log.debug("Sample %s: factor set to %s", self._name, val)

    def reset_factor(self) -> None:
        """
        Undo the current factor and set it back to 1.

        Raises:
            DivisionByZeroFactor: if the current factor is 0
        """
        if self._factor == 0:
            msg = f"Sample {self._name}: cannot reset a factor of 0"
            raise DivisionByZeroFactor(msg)
        inverse = 1.0 / self._factor
        self.scale_hists(inverse)
        self._nominal_flux *= inverse
        self._factor = 1.0

    # Rebinning

    def make_rebinned_hists(
        self,
        coarse_bins: Mapping[int, Sequence[Sequence[float]]] | None = None,
        incident_bins: Sequence[float] | None = None,
    ) -> None:
        """
        Allocate the coarse rebinned histograms and fill them.

        Any previously made rebinned histograms are discarded.

        Args:
            coarse_bins: per channel id, one list of edges per axis. Channels
                missing from the mapping use the coarse binning of their
                configuration.
            incident_bins: edges of the rebinned incident-energy histogram,
                defaults to the edges of the fine incident histogram

        Raises:
            InvalidDimension: if the coarse binning of a channel has a different
                number of axes than its fine histogram
            UnknownChannel: if ``coarse_bins`` names a channel id the sample
                does not have
        """
        coarse_bins = coarse_bins or {}
        for key in coarse_bins:
            if key not in self._selection_hists:
                raise UnknownChannel(key)
        rebinned: dict[int, ChannelHist] = {}
        for selection in self._selections:
            if selection.id in coarse_bins:
                axes = AxisBinnings(
                    [
                        AxisBinning.from_edges(edges, fine.title)
                        for edges, fine in zip(
                            coarse_bins[selection.id],
                            selection.coarse_axes(self._beam_energy_bin),
                            strict=False,
                        )
                    ]
                )
                n_axes = len(coarse_bins[selection.id])
            else:
                axes = selection.coarse_axes(self._beam_energy_bin)
                n_axes = len(axes)
            fine = self._selection_hists[selection.id]
            if n_axes != fine.dimension:
                msg = (
                    f"Selection '{selection.name}' ({selection.id}) has {int(fine.dimension)} axes, "
                    f"got coarse binning for {n_axes}"
                )
                raise InvalidDimension(n_axes, msg)
            rebinned[selection.id] = ChannelHist.from_axes(
                axes, name=f"{fine.name}_rebinned"
            )

        if incident_bins is None:
            incident_bins = list(self._incident_hist.hist.axes[0].edges)
        incident_rebinned = ChannelHist.from_axes(
            AxisBinnings(
                [AxisBinning.from_edges(incident_bins, "Reconstructed KE (MeV)")]
            ),
            name=f"{self._incident_hist.name}_rebinned",
        )

        self._selection_hists_rebinned = rebinned
        self._incident_hist_rebinned = incident_rebinned
        self._made_rebinned = True
        log.debug("Sample %s: made rebinned histograms", self._name)
        self.refill_rebinned_hists()

    def refill_rebinned_hists(self) -> None:
        """
        Rederive every rebinned histogram from its fine histogram.

        Raises:
            NotInitialized: if :meth:`make_rebinned_hists` was not called yet
        """
        self._check_made_rebinned()
        assert self._incident_hist_rebinned is not None
        for selection_id, coarse in self._selection_hists_rebinned.items():
            rebin(self._selection_hists[selection_id], coarse)
        rebin(self._incident_hist, self._incident_hist_rebinned)

    def _check_made_rebinned(self) -> None:
        if not self._made_rebinned:
            msg = f"Sample {self._name}: rebinned histograms were not made, call make_rebinned_hists first"
            raise NotInitialized(msg)


__all__ = ("ThinSliceSample",)
