"""
Profile normalization for cross-sample comparison.

- PM (per million): values divided by the group's total interval count in
  millions. The count covers every interval of every member sample, not
  only those overlapping the target, so it acts like a library size.
- max: values divided by the profile's own maximum.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd

from ..core.genome_interval import IntervalCollection
from ..core.options import NormMode

logger = logging.getLogger(__name__)


def library_size(member_collections: Iterable[IntervalCollection]) -> int:
    """Total interval count across a group's unfiltered member samples."""
    return sum(len(collection) for collection in member_collections)


def normalize(
    profile: pd.DataFrame,
    mode: NormMode | str,
    member_collections: Iterable[IntervalCollection] = (),
) -> pd.DataFrame:
    """
    Rescale a profile's values.

    Args:
        profile: Profile with pos/val columns
        mode: "PM", "max" or "none"
        member_collections: The group's member samples (used by "PM")

    Returns:
        New profile; the input is left untouched. A zero denominator
        (no intervals for "PM", an all-zero profile for "max") leaves the
        values at zero instead of dividing by zero.

    Raises:
        InvalidNormError: If mode is not PM, max or none
    """
    mode = NormMode.parse(mode)
    result = profile.copy()

    if mode is NormMode.NONE:
        return result

    values = result["val"].astype(float)
    if mode is NormMode.PM:
        total = library_size(member_collections)
        if total == 0:
            logger.warning("Group has no intervals; PM normalization skipped")
            result["val"] = values
            return result
        result["val"] = values / total * 1e6
    else:
        peak = values.max() if len(values) else 0.0
        if peak == 0:
            logger.debug("All-zero profile; max normalization left it unchanged")
            result["val"] = values
            return result
        result["val"] = values / peak

    return result
