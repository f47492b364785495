"""
Coverage calculation - per-position overlap depth over a target window.

Depth is accumulated as run-length coverage, a sequence of
(run_length, depth) pairs covering the window, built from a sweep over the
interval start/end events. It is expanded to one value per position only
when the profile DataFrame is built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..core.genome_interval import IntervalCollection, TargetWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunLengthCoverage:
    """Overlap depth over a window as runs of equal depth."""

    lengths: np.ndarray
    values: np.ndarray

    @classmethod
    def empty(cls, width: int) -> RunLengthCoverage:
        return cls(np.array([width], dtype=np.int64), np.array([0], dtype=np.int64))

    @classmethod
    def from_intervals(
        cls, starts: np.ndarray, ends: np.ndarray, window: TargetWindow
    ) -> RunLengthCoverage:
        """
        Sweep interval start/end events into run-length coverage.

        Intervals are 1-based inclusive and are clipped to the window by
        the sweep itself. Event coordinates are window offsets: an interval
        adds one at the offset of its start and removes one just past the
        offset of its end.

        Args:
            starts: Interval starts (genomic positions)
            ends: Interval ends (genomic positions, inclusive)
            window: Window the coverage spans

        Returns:
            Runs whose lengths sum to window.width
        """
        width = window.width
        opens = np.clip(window.to_offset(starts), 0, width)
        closes = np.clip(window.to_offset(ends) + 1, 0, width)

        # Coordinate compression over every event plus the window edges
        edges = np.unique(np.concatenate([[0, width], opens, closes]))
        deltas = np.zeros(edges.size, dtype=np.int64)
        np.add.at(deltas, np.searchsorted(edges, opens), 1)
        np.add.at(deltas, np.searchsorted(edges, closes), -1)

        lengths = np.diff(edges)
        values = np.cumsum(deltas)[:-1]
        return cls._merged(lengths, values)

    @classmethod
    def _merged(cls, lengths: np.ndarray, values: np.ndarray) -> RunLengthCoverage:
        # Join neighbouring runs that ended up with the same depth
        keep = np.r_[True, values[1:] != values[:-1]]
        run_ids = np.cumsum(keep) - 1
        merged_lengths = np.bincount(run_ids, weights=lengths).astype(np.int64)
        return cls(merged_lengths, values[keep].astype(np.int64))

    @property
    def width(self) -> int:
        return int(self.lengths.sum())

    def expand(self) -> np.ndarray:
        """One depth value per window position."""
        return np.repeat(self.values, self.lengths)

    def max(self) -> int:
        return int(self.values.max()) if self.values.size else 0

    def total(self) -> int:
        """Sum of depth over all positions."""
        return int((self.lengths * self.values).sum())

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return zip(self.lengths.tolist(), self.values.tolist())

    def __len__(self) -> int:
        return len(self.lengths)


def empty_profile(window: TargetWindow) -> pd.DataFrame:
    """All-zero profile with one row per window position."""
    return pd.DataFrame(
        {"pos": window.positions(), "val": np.zeros(window.width, dtype=np.int64)}
    )


def profile_from_runs(runs: RunLengthCoverage, window: TargetWindow) -> pd.DataFrame:
    """
    Expand run-length coverage into a profile in genomic coordinates.

    Offset 0 of the runs is window.start.
    """
    if runs.width != window.width:
        raise ValueError(
            f"Coverage spans {runs.width} positions but window {window} "
            f"has {window.width}"
        )
    offsets = np.arange(window.width, dtype=np.int64)
    return pd.DataFrame({"pos": window.to_position(offsets), "val": runs.expand()})


def coverage(
    intervals: IntervalCollection,
    chrom: str,
    window: TargetWindow,
    filtered: bool = False,
) -> pd.DataFrame:
    """
    Per-position overlap depth of intervals over a window.

    Args:
        intervals: Intervals from one or more samples (any chromosomes)
        chrom: Chromosome to restrict intervals to
        window: Target window; positions window.start..window.end
        filtered: The intervals are already restricted to those on chrom
            overlapping window, so the subsetting pass is skipped

    Returns:
        Profile DataFrame with pos/val columns, one row per window
        position. The value at a position is the number of intervals whose
        start <= pos <= end.
    """
    if chrom != window.chrom:
        window = TargetWindow(chrom, window.start, window.end)

    overlapping = intervals if filtered else intervals.subset_by_overlaps(window)
    if len(overlapping) == 0:
        logger.debug(f"No intervals overlap {window}")
        return empty_profile(window)

    runs = RunLengthCoverage.from_intervals(
        overlapping.starts, overlapping.ends, window
    )
    logger.debug(
        f"{len(overlapping):,} intervals over {window} -> {len(runs)} runs, "
        f"max depth {runs.max()}"
    )
    return profile_from_runs(runs, window)
