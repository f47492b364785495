"""
Profile down-sampling into fixed-width bins.

A position p belongs to bin floor(p / size) and the bin is reported at
position bin * size. Bins are anchored to absolute genomic coordinates, not
to the window start, so two windows binned with the same size share bin
positions wherever they overlap.
"""

from __future__ import annotations

import logging
import numbers

import pandas as pd

from ..core.options import WindowMode

logger = logging.getLogger(__name__)


def validate_window_size(size) -> int:
    """
    Check a bin width.

    Raises:
        TypeError: If size is not an integer
        ValueError: If size is smaller than 1
    """
    if isinstance(size, bool) or not isinstance(size, numbers.Integral):
        raise TypeError(f"Window size must be an integer, got {size!r}")
    if size < 1:
        raise ValueError(f"Window size must be >= 1, got {size}")
    return int(size)


def window_profile(
    profile: pd.DataFrame, size: int, mode: WindowMode | str = WindowMode.MAX
) -> pd.DataFrame:
    """
    Aggregate a per-position profile into bins.

    Args:
        profile: Profile with pos/val columns
        size: Bin width in base pairs
        mode: Reducer applied within each bin: "max", "mean" or "median"

    Returns:
        New profile with one row per bin, ordered by ascending bin

    Raises:
        InvalidWindowModeError: If mode is not max, mean or median
    """
    size = validate_window_size(size)
    mode = WindowMode.parse(mode)

    bins = profile["pos"] // size
    binned = profile["val"].groupby(bins, sort=True).agg(mode.value)

    logger.debug(f"Binned {len(profile):,} positions into {len(binned):,} {mode} bins")
    return pd.DataFrame(
        {"pos": binned.index.to_numpy() * size, "val": binned.to_numpy()}
    )
