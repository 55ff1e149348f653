"""
thinslice: sample histograms and rebinning for thin-slice cross-section fits
"""

from __future__ import annotations

from thinslice._version import version as __version__
from thinslice.exceptions import (
    DivisionByZeroFactor,
    InvalidDimension,
    NotInitialized,
    ThinSliceException,
    UnknownChannel,
)
from thinslice.sample import ThinSliceSample
from thinslice.selections import SelectionBinning, SelectionConfig, SelectionConfigs

__all__ = [
    "DivisionByZeroFactor",
    "InvalidDimension",
    "NotInitialized",
    "SelectionBinning",
    "SelectionConfig",
    "SelectionConfigs",
    "ThinSliceException",
    "ThinSliceSample",
    "UnknownChannel",
    "__version__",
]
