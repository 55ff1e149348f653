"""Small formatting helpers."""

from __future__ import annotations


def precise_to_string(val: float, n: int = 2) -> str:
    """
    Format a float with a fixed number of decimals.

    >>> precise_to_string(1.23456)
    '1.23'
    >>> precise_to_string(2, n=3)
    '2.000'
    """
    return f"{val:.{n}f}"


def sample_hist_name(
    sample: str, suffix: str, signal_range: tuple[float, float] | None = None
) -> str:
    """
    Build the name of a histogram owned by a sample.

    Signal samples carry their kinetic-energy range in the name so that samples
    split by range stay distinguishable.

    >>> sample_hist_name("Abs", "incident")
    'sample_Abs_incident'
    >>> sample_hist_name("Abs", "incident", (100.0, 200.0))
    'sample_Abs_100.00_200.00_incident'
    """
    name = f"sample_{sample}"
    if signal_range is not None:
        name += f"_{precise_to_string(signal_range[0])}_{precise_to_string(signal_range[1])}"
    return f"{name}_{suffix}"


__all__ = ("precise_to_string", "sample_hist_name")
