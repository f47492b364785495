"""
Fragment conversion - turn sequenced fragments into Tn5 cut sites or
footprints.

Each fragment has two Tn5 insertion events, one at each end:
- cuts: the two single-base end positions [s, s] and [e, e]
- footprints: a fixed-width window around each insertion approximating the
  ~19 bp region protected by the transposase, [s - 10, s + 19] and
  [e - 18, e + 10]

Conversion is applied per sample and always produces new collections.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np
import pandas as pd

from ..core.genome_interval import IntervalCollection
from ..core.options import ConversionMode

logger = logging.getLogger(__name__)

# Footprint offsets relative to the 5' (start) and 3' (end) cut
FOOTPRINT_START_UPSTREAM = 10
FOOTPRINT_START_DOWNSTREAM = 19
FOOTPRINT_END_UPSTREAM = 18
FOOTPRINT_END_DOWNSTREAM = 10


def _ends_frame(
    fragments: pd.DataFrame,
    five_prime: tuple[np.ndarray, np.ndarray],
    three_prime: tuple[np.ndarray, np.ndarray],
) -> pd.DataFrame:
    prime5 = fragments.assign(start=five_prime[0], end=five_prime[1])
    prime3 = fragments.assign(start=three_prime[0], end=three_prime[1])
    return pd.concat([prime5, prime3], ignore_index=True)


def to_cuts(fragments: IntervalCollection) -> IntervalCollection:
    """Convert fragments to their two end positions, sorted."""
    df = fragments.to_frame()
    starts = df["start"].to_numpy()
    ends = df["end"].to_numpy()
    both = _ends_frame(df, (starts, starts), (ends, ends))
    return IntervalCollection.from_frame(both, name=fragments.name).sort()


def to_footprints(fragments: IntervalCollection) -> IntervalCollection:
    """
    Convert fragments to Tn5 footprint windows, sorted.

    Starts that would fall below position 1 are clamped to 1.
    """
    df = fragments.to_frame()
    starts = df["start"].to_numpy()
    ends = df["end"].to_numpy()
    both = _ends_frame(
        df,
        (starts - FOOTPRINT_START_UPSTREAM, starts + FOOTPRINT_START_DOWNSTREAM),
        (ends - FOOTPRINT_END_UPSTREAM, ends + FOOTPRINT_END_DOWNSTREAM),
    )

    clamped = both["start"] < 1
    if clamped.any():
        logger.debug(
            f"Clamped {int(clamped.sum()):,} footprint starts to position 1"
            + (f" in sample '{fragments.name}'" if fragments.name else "")
        )
        both.loc[clamped, "start"] = 1

    return IntervalCollection.from_frame(both, name=fragments.name).sort()


def convert(
    fragments: IntervalCollection, mode: ConversionMode | str
) -> IntervalCollection:
    """
    Convert one sample's fragments to cut sites or footprints.

    Args:
        fragments: Fragment intervals of one sample
        mode: "cuts" or "footprints"

    Returns:
        New collection with two intervals per fragment, sorted by position

    Raises:
        InvalidModeError: If mode is neither cuts nor footprints
    """
    mode = ConversionMode.parse(mode)
    if mode is ConversionMode.CUTS:
        return to_cuts(fragments)
    return to_footprints(fragments)


def convert_fragment_list(
    fragment_list: Mapping[str, IntervalCollection], mode: ConversionMode | str
) -> dict[str, IntervalCollection]:
    """
    Convert every sample in a sample -> fragments mapping.

    Returns:
        New mapping with the same sample ids, in the same order

    Example:
        >>> cuts = convert_fragment_list({"s1": fragments}, "cuts")
        >>> len(cuts["s1"]) == 2 * len(fragments)
        True
    """
    mode = ConversionMode.parse(mode)
    converted = {}
    for sample_id, fragments in fragment_list.items():
        converted[sample_id] = convert(fragments, mode)
        logger.debug(
            f"Converted {len(fragments):,} fragments of '{sample_id}' to {mode}"
        )
    logger.info(f"Converted {len(converted)} samples to {mode}")
    return converted
