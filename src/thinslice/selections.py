"""
Selection channel configuration.

Provides Pydantic classes describing the selection channels a sample is split
into. Each channel declares an id, a name and, per axis, the fine binning used
when filling and the coarse analysis binning used by the rebinning engine.
The binning can optionally depend on the beam-energy bin of the sample.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, RootModel, model_validator

from thinslice.axes import AxisBinning, AxisBinnings


class SelectionBinning(BaseModel):
    """
    Fine and coarse binning of one axis of a selection channel.

    Attributes:
        fine: binning of the histogram filled event by event
        coarse: analysis binning the fine histogram is rebinned into.
            Defaults to the fine binning.
    """

    model_config = ConfigDict(frozen=True)

    fine: AxisBinning
    coarse: AxisBinning | None = Field(default=None, repr=False)

    @property
    def analysis(self) -> AxisBinning:
        """The coarse binning, falling back to the fine one."""
        return self.coarse if self.coarse is not None else self.fine


class SelectionConfig(BaseModel):
    """
    Configuration record of one selection channel.

    Exactly one of ``axes`` or ``beam_energy_axes`` must be given. The number
    of axes is not checked here; the sample raises
    :class:`~thinslice.exceptions.InvalidDimension` when it allocates the histogram.

    Attributes:
        id: unique channel identifier
        name: human readable channel name, used in histogram names
        axes: per-axis binning, independent of the beam energy
        beam_energy_axes: per-axis binning for each beam-energy bin
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    axes: list[SelectionBinning] | None = Field(default=None, repr=False)
    beam_energy_axes: list[list[SelectionBinning]] | None = Field(
        default=None, repr=False
    )

    @model_validator(mode="after")
    def check_binning_source(self) -> SelectionConfig:
        """Validate that the binning comes from exactly one source."""
        if (self.axes is None) == (self.beam_energy_axes is None):
            msg = f"Selection '{self.name}' must specify exactly one of 'axes' or 'beam_energy_axes'"
            raise ValueError(msg)
        if self.beam_energy_axes is not None and len(self.beam_energy_axes) == 0:
            msg = f"Selection '{self.name}' must provide binning for at least one beam energy bin"
            raise ValueError(msg)
        return self

    @property
    def is_beam_energy_dependent(self) -> bool:
        return self.beam_energy_axes is not None

    def binning_for(self, beam_energy_bin: int) -> list[SelectionBinning]:
        """
        Resolve the per-axis binning for a beam-energy bin.

        Args:
            beam_energy_bin: index into ``beam_energy_axes``; ignored when the
                binning does not depend on the beam energy

        Returns:
            list[SelectionBinning]: one entry per histogram axis
        """
        if self.beam_energy_axes is None:
            assert self.axes is not None
            return self.axes
        if not 0 <= beam_energy_bin < len(self.beam_energy_axes):
            msg = (
                f"Selection '{self.name}' has binning for {len(self.beam_energy_axes)} "
                f"beam energy bins, requested bin {beam_energy_bin}"
            )
            raise ValueError(msg)
        return self.beam_energy_axes[beam_energy_bin]

    def fine_axes(self, beam_energy_bin: int) -> AxisBinnings:
        """Fine binning of every axis."""
        return AxisBinnings([b.fine for b in self.binning_for(beam_energy_bin)])

    def coarse_axes(self, beam_energy_bin: int) -> AxisBinnings:
        """Coarse analysis binning of every axis."""
        return AxisBinnings([b.analysis for b in self.binning_for(beam_energy_bin)])


class SelectionConfigs(RootModel[list[SelectionConfig]]):
    """
    Collection of selection channel configurations.

    Provides dict-like access by channel id and list-like iteration. Channel
    ids must be unique.
    """

    root: list[SelectionConfig] = Field(default_factory=list)
    _map: dict[int, SelectionConfig] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def check_unique_ids(self) -> SelectionConfigs:
        """Reject duplicate channel ids."""
        duplicates = sorted(
            key for key, count in Counter(s.id for s in self.root).items() if count > 1
        )
        if duplicates:
            msg = f"Duplicate selection ids: {duplicates}"
            raise ValueError(msg)
        return self

    def model_post_init(self, __context: Any, /) -> None:
        """Initialize the id lookup after Pydantic validation."""
        self._map = {selection.id: selection for selection in self.root}

    def __getitem__(self, item: int) -> SelectionConfig:
        return self._map[item]

    def __contains__(self, item: int) -> bool:
        return item in self._map

    def __iter__(self) -> Iterator[SelectionConfig]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({[item.id for item in self]})"


__all__ = ("SelectionBinning", "SelectionConfig", "SelectionConfigs")
