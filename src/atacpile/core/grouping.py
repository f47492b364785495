"""
Sample grouping for the pileup pipeline.

Samples are either pooled into one implicit group (SingleGroup) or assigned
to labelled groups (ExplicitGrouping). The choice is resolved once, when a
pileup starts, by resolve_grouping().
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

from .exceptions import InvalidGroupingError

logger = logging.getLogger(__name__)

SINGLE_GROUP_LABEL = "all"


@dataclass(frozen=True)
class SingleGroup:
    """All samples form one implicit group."""

    label: Hashable = SINGLE_GROUP_LABEL

    def members(self, sample_ids: Sequence[str]) -> dict[Hashable, list[str]]:
        return {self.label: list(sample_ids)}


@dataclass(frozen=True)
class ExplicitGrouping:
    """Each sample carries a group label."""

    labels: Mapping[str, Hashable] = field(default_factory=dict)

    def members(self, sample_ids: Sequence[str]) -> dict[Hashable, list[str]]:
        """
        Group sample ids by label.

        Returns:
            Mapping of label to sample ids. Labels appear in order of first
            appearance among sample_ids; samples keep their input order.
        """
        groups: dict[Hashable, list[str]] = {}
        for sample_id in sample_ids:
            groups.setdefault(self.labels[sample_id], []).append(sample_id)
        return groups


Grouping = Union[SingleGroup, ExplicitGrouping]


def resolve_grouping(
    gr_groups: Optional[Union[Grouping, Mapping[str, Hashable], Sequence[Hashable]]],
    sample_ids: Sequence[str],
) -> Grouping:
    """
    Turn caller-supplied group labels into a Grouping.

    Args:
        gr_groups: None (one implicit group), an existing Grouping, a
            mapping of sample id to label, or a sequence of labels parallel
            to sample_ids
        sample_ids: Sample ids in pipeline order

    Returns:
        SingleGroup or ExplicitGrouping

    Raises:
        InvalidGroupingError: If labels are missing for some samples, name
            unknown samples, or a label sequence has the wrong length
    """
    if gr_groups is None:
        return SingleGroup()
    if isinstance(gr_groups, (SingleGroup, ExplicitGrouping)):
        grouping = gr_groups
    elif isinstance(gr_groups, Mapping):
        grouping = ExplicitGrouping(dict(gr_groups))
    elif isinstance(gr_groups, (str, bytes)):
        raise InvalidGroupingError(
            f"Group labels must be a mapping or a sequence, got {gr_groups!r}"
        )
    else:
        labels = list(gr_groups)
        if len(labels) != len(sample_ids):
            raise InvalidGroupingError(
                f"Got {len(labels)} group labels for {len(sample_ids)} samples"
            )
        grouping = ExplicitGrouping(dict(zip(sample_ids, labels)))

    if isinstance(grouping, ExplicitGrouping):
        unlabelled = [s for s in sample_ids if s not in grouping.labels]
        if unlabelled:
            raise InvalidGroupingError(f"Samples without a group label: {unlabelled}")
        unknown = [s for s in grouping.labels if s not in set(sample_ids)]
        if unknown:
            raise InvalidGroupingError(f"Group labels for unknown samples: {unknown}")
        logger.debug(
            f"Resolved {len(set(grouping.labels.values()))} groups "
            f"over {len(sample_ids)} samples"
        )
    return grouping
