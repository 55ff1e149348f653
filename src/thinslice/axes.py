"""
Axis binning models.

Provides Pydantic classes describing how a single histogram axis is binned,
either with regular binning (nbins/min/max) or irregular binning (edges).
The models convert themselves into ``hist.axis`` objects.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from itertools import pairwise
from typing import Annotated, Any

import hist
from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    RootModel,
    Tag,
    model_validator,
)

from thinslice.exceptions import custom_error_msg


class Axis(BaseModel):
    """
    Base axis specification.

    Attributes:
        title: Axis title used as the ``hist`` axis label
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", repr=True)


class RegularAxis(Axis):
    """
    Attributes:
        title: Axis title
        min: Lower edge
        max: Upper edge
        nbins: Number of uniform bins
    """

    min: float = Field(..., repr=False)
    max: float = Field(..., repr=False)
    nbins: int = Field(repr=False)

    @model_validator(mode="after")
    def check_binning(self) -> RegularAxis:
        """Validate that max > min and that there is at least one bin."""
        if self.max <= self.min:
            msg = f"Axis '{self.title}': max ({self.max}) must be > min ({self.min})"
            raise ValueError(msg)
        if self.nbins <= 0:
            msg = f"RegularAxis '{self.title}' must have positive number of bins, got {self.nbins}"
            raise ValueError(msg)
        return self

    def to_hist(self) -> hist.axis.Regular:
        """
        Convert this axis to a hist.axis object.

        Returns:
            A hist.axis.Regular object
        """
        return hist.axis.Regular(self.nbins, self.min, self.max, label=self.title)


class IrregularAxis(Axis):
    """
    Attributes:
        title: Axis title
        edges: Bin edges array (length n+1)
    """

    edges: list[float] = Field(repr=False)

    @model_validator(mode="after")
    def validate_binning(self) -> IrregularAxis:
        """Ensure at least one bin and strictly ascending edges."""
        if len(self.edges) < 2:
            msg = f"IrregularAxis '{self.title}' must have at least 2 edges"
            raise ValueError(msg)
        for prev, curr in pairwise(self.edges):
            if curr <= prev:
                msg = f"IrregularAxis '{self.title}' edges must be in ascending order"
                raise ValueError(msg)
        return self

    def to_hist(self) -> hist.axis.Variable:
        """
        Convert this axis to a hist.axis object.

        Returns:
            A hist.axis.Variable object
        """
        return hist.axis.Variable(self.edges, label=self.title)


def binned_axis_discriminator(v: Any) -> str | None:
    if isinstance(v, dict):
        if "edges" in v and "nbins" not in v:
            return "irregular"
        if "nbins" in v and "edges" not in v:
            return "regular"
        return None

    if isinstance(v, IrregularAxis):
        return "irregular"
    if isinstance(v, RegularAxis):
        return "regular"

    return None


AxisBinningUnion = Annotated[
    (
        Annotated[RegularAxis, Tag("regular")]
        | Annotated[IrregularAxis, Tag("irregular")]
    ),
    Discriminator(binned_axis_discriminator),
    custom_error_msg(
        {
            "union_tag_not_found": "Unknown axis binning {input}. You must specify either regular binning (nbins/min/max) or irregular binning (edges).",
        }
    ),
]


class AxisBinning(RootModel[AxisBinningUnion]):
    """
    Binning of one histogram axis.

    Supports both regular binning (min/max/nbins) and irregular binning (edges)
    through a discriminated union. The discriminator selects the type based on
    the presence of 'nbins' or 'edges' fields.
    """

    root: AxisBinningUnion

    @property
    def title(self) -> str:
        """Get the axis title."""
        return self.root.title

    def to_hist(self) -> hist.axis.Variable | hist.axis.Regular:
        """Convert this axis to a hist.axis object."""
        return self.root.to_hist()

    @classmethod
    def from_edges(cls, edges: Sequence[float], title: str = "") -> AxisBinning:
        """Build an irregular axis binning from a list of edges."""
        return cls.model_validate({"title": title, "edges": [float(x) for x in edges]})


class AxisBinnings(RootModel[list[AxisBinning]]):
    """
    Ordered collection of axis binnings, one per histogram dimension.
    """

    root: list[AxisBinning] = Field(default_factory=list)

    def __getitem__(self, index: int) -> AxisBinning:
        """Get axis by index."""
        return self.root[index]

    def __len__(self) -> int:
        """Get number of axes."""
        return len(self.root)

    def __iter__(self) -> Iterator[AxisBinning]:  # type: ignore[override]  # https://github.com/pydantic/pydantic/issues/8872
        """Iterate over axes."""
        return iter(self.root)

    def to_hist(self) -> list[hist.axis.Variable | hist.axis.Regular]:
        """Convert every axis to a hist.axis object."""
        return [axis.to_hist() for axis in self.root]


__all__ = (
    "Axis",
    "AxisBinning",
    "AxisBinnings",
    "IrregularAxis",
    "RegularAxis",
    "binned_axis_discriminator",
)
