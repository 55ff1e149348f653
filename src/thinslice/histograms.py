"""
Histogram storage for the sample bank.

Wraps ``hist.Hist`` objects in a small tagged variant, :class:`ChannelHist`,
whose :class:`Dimension` tag decides how fills, scales and rebinning are
dispatched. All histograms use weighted storage.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import IntEnum

import hist
import numpy as np
import numpy.typing as npt

from thinslice.axes import AxisBinnings
from thinslice.exceptions import InvalidDimension

log = logging.getLogger(__name__)

HistAxis = hist.axis.Regular | hist.axis.Variable


class Dimension(IntEnum):
    """
    Supported histogram dimensionalities.
    """

    ONE_D = 1
    TWO_D = 2
    THREE_D = 3

    @classmethod
    def from_ndim(cls, ndim: int) -> Dimension:
        """Map an axis count onto a dimension, raising InvalidDimension otherwise."""
        try:
            return cls(ndim)
        except ValueError:
            raise InvalidDimension(ndim) from None


def as_values(value: float | Sequence[float]) -> tuple[float, ...]:
    """
    Normalize a fill argument into a tuple of 1 to 3 coordinates.

    Raises:
        InvalidDimension: if the number of coordinates is not 1, 2 or 3
    """
    if np.ndim(value) == 0:
        return (float(value),)  # type: ignore[arg-type]
    values = tuple(float(v) for v in value)
    Dimension.from_ndim(len(values))
    return values


def make_hist(
    axes: Sequence[HistAxis], name: str = "", label: str = ""
) -> hist.Hist:
    """Create an empty weighted histogram over the given axes."""
    return hist.Hist(*axes, storage=hist.storage.Weight(), name=name, label=label)


class ChannelHist:
    """
    A 1-, 2- or 3-dimensional histogram tagged with its dimensionality.

    Parameters:
        h: the underlying weighted histogram

    Raises:
        InvalidDimension: if ``h`` does not have 1 to 3 axes
    """

    def __init__(self, h: hist.Hist) -> None:
        self.dimension = Dimension.from_ndim(h.ndim)
        self._hist = h

    @classmethod
    def from_axes(cls, axes: AxisBinnings, name: str = "") -> ChannelHist:
        Dimension.from_ndim(len(axes))
        return cls(make_hist(axes.to_hist(), name=name))

    @property
    def hist(self) -> hist.Hist:
        """The underlying histogram (owned by this object)."""
        return self._hist

    @property
    def name(self) -> str:
        return self._hist.name or ""

    def fill(self, values: Sequence[float]) -> None:
        """
        Fill one entry.

        Args:
            values: one coordinate per axis

        Raises:
            InvalidDimension: if the number of coordinates does not match the tag
        """
        if len(values) != self.dimension:
            msg = f"Histogram '{self.name}' has {int(self.dimension)} axes, got {len(values)} values to fill"
            raise InvalidDimension(len(values), msg)
        self._hist.fill(*values)

    def fill_many(self, values: Sequence[float]) -> None:
        """Fill one entry per value into a 1-D histogram."""
        if self.dimension != Dimension.ONE_D:
            msg = f"Histogram '{self.name}' has {int(self.dimension)} axes, cannot fill it from a flat list"
            raise InvalidDimension(int(self.dimension), msg)
        self._hist.fill(np.asarray(values, dtype=float))

    def scale(self, factor: float) -> None:
        """Multiply contents by ``factor`` and variances by ``factor**2``."""
        self._hist *= factor

    def reset(self) -> None:
        self._hist.reset()

    def sum(self) -> float:
        """Total content, flow bins included."""
        return float(self._hist.sum(flow=True).value)

    def copy(self) -> hist.Hist:
        return self._hist.copy(deep=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, dimension={int(self.dimension)})"


def flow_index_map(fine: HistAxis, coarse: HistAxis) -> npt.NDArray[np.intp]:
    """
    Map every fine bin, flow bins included, onto a coarse flow index.

    Index 0 is the underflow bin and ``size + 1`` the overflow bin on both
    axes. Fine underflow and overflow stay in the coarse underflow and
    overflow. A regular fine bin goes to the coarse bin containing its center,
    using the histogram's own lookup (lower edge inclusive, upper edge exclusive).
    """
    centers = np.asarray(fine.centers, dtype=float)
    inner = np.asarray(coarse.index(centers), dtype=np.intp) + 1
    return np.concatenate(
        ([0], np.clip(inner, 0, coarse.size + 1), [coarse.size + 1])
    ).astype(np.intp)


def _accumulate(
    fine: hist.Hist, coarse: hist.Hist, index: tuple[npt.NDArray[np.intp], ...]
) -> None:
    fine_view = fine.view(flow=True)
    values = np.zeros(coarse.view(flow=True).shape, dtype=float)
    variances = np.zeros_like(values)
    np.add.at(values, index, fine_view["value"])
    np.add.at(variances, index, fine_view["variance"])
    coarse.view(flow=True)["value"] = values
    coarse.view(flow=True)["variance"] = variances


def rebin_1d(fine: hist.Hist, coarse: hist.Hist) -> None:
    """Sum every fine bin of a 1-D histogram into the covering coarse bin."""
    ix = flow_index_map(fine.axes[0], coarse.axes[0])
    _accumulate(fine, coarse, (ix,))


def rebin_2d(fine: hist.Hist, coarse: hist.Hist) -> None:
    """Sum every fine bin of a 2-D histogram into the covering coarse bin."""
    ix = flow_index_map(fine.axes[0], coarse.axes[0])
    iy = flow_index_map(fine.axes[1], coarse.axes[1])
    _accumulate(fine, coarse, (ix[:, None], iy[None, :]))


def rebin_3d(fine: hist.Hist, coarse: hist.Hist) -> None:
    """Sum every fine bin of a 3-D histogram into the covering coarse bin."""
    ix = flow_index_map(fine.axes[0], coarse.axes[0])
    iy = flow_index_map(fine.axes[1], coarse.axes[1])
    iz = flow_index_map(fine.axes[2], coarse.axes[2])
    _accumulate(fine, coarse, (ix[:, None, None], iy[None, :, None], iz[None, None, :]))


REBINNERS: dict[Dimension, Callable[[hist.Hist, hist.Hist], None]] = {
    Dimension.ONE_D: rebin_1d,
    Dimension.TWO_D: rebin_2d,
    Dimension.THREE_D: rebin_3d,
}


def rebin(fine: ChannelHist, coarse: ChannelHist) -> None:
    """
    Overwrite ``coarse`` with the contents of ``fine`` aggregated into its bins.

    Raises:
        InvalidDimension: if the two histograms have different dimensionality
    """
    if fine.dimension != coarse.dimension:
        msg = (
            f"Cannot rebin {int(fine.dimension)}-D histogram '{fine.name}' "
            f"into {int(coarse.dimension)}-D histogram '{coarse.name}'"
        )
        raise InvalidDimension(int(coarse.dimension), msg)
    coarse.reset()
    REBINNERS[fine.dimension](fine.hist, coarse.hist)
    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            "rebinned %s (%.6g) into %s (%.6g)",
            fine.name,
            fine.sum(),
            coarse.name,
            coarse.sum(),
        )


__all__ = (
    "ChannelHist",
    "Dimension",
    "as_values",
    "flow_index_map",
    "make_hist",
    "rebin",
    "rebin_1d",
    "rebin_2d",
    "rebin_3d",
)
