"""
Pileup engine - grouped coverage profiles over one target locus.

For every group of samples the engine:
1. restricts each member sample to intervals overlapping the target
2. drops members with nothing left
3. pools the remaining intervals and computes per-position coverage
4. optionally bins the profile (max / mean / median)
5. normalizes it (per million, max, or none)

Groups are independent of each other, so they can be computed on a process
pool; the result is the same as sequential computation.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import pandas as pd

from ..core.exceptions import EmptyTargetError
from ..core.genome_interval import IntervalCollection, TargetWindow, parse_locus
from ..core.grouping import Grouping, resolve_grouping
from ..core.options import NormMode, WindowMode
from .coverage import coverage
from .normalizer import normalize
from .windower import validate_window_size, window_profile

logger = logging.getLogger(__name__)

Target = Union[TargetWindow, str]
PileupResult = Union[pd.DataFrame, dict[Hashable, pd.DataFrame]]


@dataclass
class PileupConfig:
    """Configuration for grouped pileups."""

    norm: NormMode = NormMode.PM
    window_size: Optional[int] = None  # None keeps single-base resolution
    window_mode: WindowMode = WindowMode.MAX
    workers: int = 1  # Process pool size for per-group computation

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.norm = NormMode.parse(self.norm)
        self.window_mode = WindowMode.parse(self.window_mode)
        if self.window_size is not None:
            self.window_size = validate_window_size(self.window_size)
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")


def resolve_target(target: Union[Target, Sequence[Target]]) -> TargetWindow:
    """
    Resolve the target locus.

    Only one locus is honoured: when a sequence is given its first element
    is used.

    Raises:
        EmptyTargetError: If no target is given
        LocusFormatError: If a locus string cannot be parsed
    """
    if target is None:
        raise EmptyTargetError("No target window given")
    if isinstance(target, (TargetWindow, str)):
        candidates = [target]
    else:
        candidates = list(target)
    if not candidates:
        raise EmptyTargetError("No target window given")
    if len(candidates) > 1:
        logger.warning(
            f"{len(candidates)} target windows given; only the first is used"
        )

    first = candidates[0]
    if isinstance(first, str):
        return parse_locus(first)
    if not isinstance(first, TargetWindow):
        raise EmptyTargetError(f"Cannot resolve target window from {first!r}")
    return first


def pileup_group(
    members: Sequence[IntervalCollection],
    target: TargetWindow,
    config: PileupConfig,
) -> pd.DataFrame:
    """
    Compute one group's profile.

    Args:
        members: The group's sample collections (unfiltered)
        target: Target window
        config: Windowing and normalization settings

    Returns:
        Profile with pos/val columns
    """
    overlapping = []
    for collection in members:
        on_target = collection.subset_by_overlaps(target)
        if len(on_target) > 0:
            overlapping.append(on_target)

    pooled = IntervalCollection.concat(overlapping)
    pile = coverage(pooled, target.chrom, target, filtered=True)

    if config.window_size is not None:
        pile = window_profile(pile, config.window_size, config.window_mode)

    return normalize(pile, config.norm, members)


class PileupEngine:
    """
    Grouped pileup over one target locus.

    Example:
        >>> engine = PileupEngine(PileupConfig(norm="max", window_size=50))
        >>> piles = engine.pileup(
        ...     {"a": frags_a, "b": frags_b, "c": frags_c},
        ...     "chr1:10,000-12,000",
        ...     gr_groups={"a": "wt", "b": "wt", "c": "ko"},
        ... )
        >>> list(piles)
        ['wt', 'ko']
    """

    def __init__(self, config: Optional[PileupConfig] = None) -> None:
        self.config = config or PileupConfig()

    def pileup(
        self,
        gr_list: Mapping[str, IntervalCollection],
        target: Union[Target, Sequence[Target]],
        gr_groups: Optional[Union[Grouping, Mapping[str, Hashable], Sequence[Hashable]]] = None,
    ) -> PileupResult:
        """
        Compute a profile per group.

        Args:
            gr_list: Sample id -> IntervalCollection
            target: TargetWindow or locus string, or a sequence of them
                (only the first is used)
            gr_groups: None to pool all samples, or sample -> group labels
                (mapping, or sequence parallel to gr_list)

        Returns:
            Mapping of group label -> profile, in order of first appearance.
            When there is exactly one group its profile is returned directly.

        Raises:
            EmptyTargetError: If the target cannot be resolved
            InvalidGroupingError: If group labels do not match the samples
        """
        window = resolve_target(target)
        sample_ids = list(gr_list)
        grouping = resolve_grouping(gr_groups, sample_ids)
        groups = grouping.members(sample_ids)

        logger.info(
            f"Pileup of {len(sample_ids)} samples in {len(groups)} groups over {window}"
        )

        results = self._run_groups(gr_list, groups, window)

        if len(results) == 1:
            return next(iter(results.values()))
        return results

    def _run_groups(
        self,
        gr_list: Mapping[str, IntervalCollection],
        groups: dict[Hashable, list[str]],
        window: TargetWindow,
    ) -> dict[Hashable, pd.DataFrame]:
        members = {
            label: [gr_list[sample_id] for sample_id in sample_ids]
            for label, sample_ids in groups.items()
        }

        if self.config.workers == 1 or len(groups) == 1:
            results = {}
            for label, collections in members.items():
                results[label] = pileup_group(collections, window, self.config)
                logger.debug(f"Group '{label}': {len(results[label]):,} rows")
            return results

        workers = min(self.config.workers, len(groups))
        logger.info(f"Computing {len(groups)} groups with {workers} workers")
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {
                label: executor.submit(pileup_group, collections, window, self.config)
                for label, collections in members.items()
            }
            # Collected in group order so the result does not depend on timing
            return {label: future.result() for label, future in futures.items()}


def pileup_gr_list(
    gr_list: Mapping[str, IntervalCollection],
    gr_target: Union[Target, Sequence[Target]],
    gr_groups: Optional[Union[Mapping[str, Hashable], Sequence[Hashable]]] = None,
    norm: NormMode | str = NormMode.PM,
    window_size: Optional[int] = None,
    window_mode: WindowMode | str = WindowMode.MAX,
    workers: int = 1,
) -> PileupResult:
    """
    Pile up intervals over a target region, one profile per group.

    Functional form of PileupEngine.pileup().
    """
    config = PileupConfig(
        norm=norm, window_size=window_size, window_mode=window_mode, workers=workers
    )
    return PileupEngine(config).pileup(gr_list, gr_target, gr_groups)


def _as_mapping(result: PileupResult) -> dict[Hashable, pd.DataFrame]:
    if isinstance(result, pd.DataFrame):
        return {"all": result}
    return dict(result)


def stack_profiles(result: PileupResult) -> pd.DataFrame:
    """
    Combine pileup output into one long table with group/pos/val columns.

    A single profile is labelled "all".
    """
    frames = [
        profile.assign(group=label)[["group", "pos", "val"]]
        for label, profile in _as_mapping(result).items()
    ]
    if not frames:
        return pd.DataFrame(columns=["group", "pos", "val"])
    return pd.concat(frames, ignore_index=True)


def shared_maximum(result: PileupResult) -> float:
    """Largest value across all profiles; the default vertical scale for tracks."""
    maxima = [
        float(profile["val"].max())
        for profile in _as_mapping(result).values()
        if len(profile)
    ]
    return float(np.max(maxima)) if maxima else 0.0
