"""Tests for grouped pileups."""

import numpy as np
import pandas as pd
import pytest

from atacpile.core.exceptions import (
    EmptyTargetError,
    InvalidGroupingError,
    InvalidNormError,
    InvalidWindowModeError,
    LocusFormatError,
)
from atacpile.core.genome_interval import IntervalCollection, TargetWindow
from atacpile.core.grouping import ExplicitGrouping, SingleGroup, resolve_grouping
from atacpile.pileup.engine import (
    PileupConfig,
    PileupEngine,
    pileup_gr_list,
    resolve_target,
    shared_maximum,
    stack_profiles,
)

TARGET = TargetWindow("chr1", 1, 10)


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def test_resolve_grouping_none_is_single_group():
    grouping = resolve_grouping(None, ["a", "b"])
    assert isinstance(grouping, SingleGroup)
    assert grouping.members(["a", "b"]) == {"all": ["a", "b"]}


def test_resolve_grouping_from_sequence_keeps_first_appearance_order():
    grouping = resolve_grouping(["ko", "wt", "ko"], ["a", "b", "c"])
    assert isinstance(grouping, ExplicitGrouping)
    assert grouping.members(["a", "b", "c"]) == {"ko": ["a", "c"], "wt": ["b"]}


@pytest.mark.parametrize(
    "labels",
    [["wt"], {"a": "wt"}, {"a": "wt", "b": "wt", "zz": "ko"}, "wt"],
)
def test_resolve_grouping_rejects_mismatched_labels(labels):
    with pytest.raises(InvalidGroupingError):
        resolve_grouping(labels, ["a", "b"])


# ---------------------------------------------------------------------------
# Targets and configuration
# ---------------------------------------------------------------------------


def test_resolve_target_honours_first_only():
    first = TargetWindow("chr1", 1, 10)
    assert resolve_target([first, TargetWindow("chr2", 5, 50)]) is first
    assert resolve_target("chr1:1-10") == first


@pytest.mark.parametrize("target", [[], None, [42]])
def test_resolve_target_rejects_empty(target):
    with pytest.raises(EmptyTargetError):
        resolve_target(target)


def test_resolve_target_rejects_bad_locus():
    with pytest.raises(LocusFormatError):
        resolve_target("chr1-10")


def test_config_validates_options():
    with pytest.raises(InvalidNormError):
        PileupConfig(norm="CPM")
    with pytest.raises(InvalidWindowModeError):
        PileupConfig(window_mode="min")
    with pytest.raises(TypeError):
        PileupConfig(window_size=2.5)
    with pytest.raises(ValueError):
        PileupConfig(workers=0)


# ---------------------------------------------------------------------------
# Pileups
# ---------------------------------------------------------------------------


def test_single_group_returns_one_profile(gr_list):
    pile = pileup_gr_list(gr_list, TARGET, norm="none")
    assert isinstance(pile, pd.DataFrame)
    np.testing.assert_array_equal(pile["pos"], np.arange(1, 11))
    # a: [3,5]; b: [4,8]; c: [1,2], [9,12]
    np.testing.assert_array_equal(pile["val"], [1, 1, 1, 2, 2, 1, 1, 1, 1, 1])


def test_two_groups_are_independent(gr_list):
    piles = pileup_gr_list(gr_list, TARGET, gr_groups={"a": "wt", "b": "wt", "c": "ko"}, norm="none")
    assert list(piles) == ["wt", "ko"]
    np.testing.assert_array_equal(piles["wt"]["val"], [0, 0, 1, 2, 2, 1, 1, 1, 0, 0])
    np.testing.assert_array_equal(piles["ko"]["val"], [1, 1, 0, 0, 0, 0, 0, 0, 1, 1])


def test_single_group_equals_pooled_computation(gr_list):
    grouped = pileup_gr_list(gr_list, TARGET, norm="none")
    pooled = {"pooled": IntervalCollection.concat(gr_list.values())}
    pd.testing.assert_frame_equal(grouped, pileup_gr_list(pooled, TARGET, norm="none"))


def test_same_label_for_all_samples_returns_one_profile(gr_list):
    pile = pileup_gr_list(gr_list, TARGET, gr_groups=["x", "x", "x"], norm="none")
    assert isinstance(pile, pd.DataFrame)


def test_group_without_overlaps_is_all_zero(gr_list):
    gr_list["far"] = IntervalCollection.from_arrays("chr1", [5000], [5100])
    piles = pileup_gr_list(
        gr_list, TARGET, gr_groups={"a": "g", "b": "g", "c": "g", "far": "far"}, norm="PM"
    )
    assert (piles["far"]["val"] == 0).all()
    assert len(piles["far"]) == TARGET.width


def test_pm_uses_unfiltered_member_counts(gr_list):
    piles = pileup_gr_list(gr_list, TARGET, gr_groups=["wt", "wt", "ko"], norm="PM")
    # wt members hold 4 intervals in total, including ones off target
    np.testing.assert_allclose(piles["wt"]["val"], np.array([0, 0, 1, 2, 2, 1, 1, 1, 0, 0]) / 4 * 1e6)


def test_max_norm_with_windows(gr_list):
    pile = pileup_gr_list(gr_list, TARGET, norm="max", window_size=4, window_mode="max")
    assert pile["pos"].tolist() == [0, 4, 8]
    np.testing.assert_allclose(pile["val"], [0.5, 1.0, 0.5])


def test_median_windows_are_reachable(gr_list):
    pile = pileup_gr_list(gr_list, TARGET, norm="none", window_size=5, window_mode="median")
    # bins: 0 -> 1..4, 5 -> 5..9, 10 -> 10
    np.testing.assert_allclose(pile["val"], [1.0, 1.0, 1.0])
    assert pile["pos"].tolist() == [0, 5, 10]


def test_other_chromosome_target(gr_list):
    pile = pileup_gr_list(gr_list, "chr2:1-5", norm="none")
    assert pile["val"].tolist() == [1, 1, 1, 1, 1]


def test_inputs_are_not_mutated(gr_list):
    before = {k: v.to_frame() for k, v in gr_list.items()}
    pileup_gr_list(gr_list, TARGET, gr_groups=["a", "b", "c"], norm="max", window_size=3)
    for sample_id, frame in before.items():
        pd.testing.assert_frame_equal(gr_list[sample_id].to_frame(), frame)


def test_failing_group_raises(gr_list):
    with pytest.raises(InvalidGroupingError):
        PileupEngine().pileup(gr_list, TARGET, {"a": "wt"})


def test_parallel_matches_sequential(gr_list):
    groups = {"a": "g1", "b": "g2", "c": "g3"}
    sequential = pileup_gr_list(gr_list, TARGET, groups, norm="PM", window_size=3)
    parallel = pileup_gr_list(gr_list, TARGET, groups, norm="PM", window_size=3, workers=2)
    assert list(parallel) == list(sequential)
    for label in sequential:
        pd.testing.assert_frame_equal(parallel[label], sequential[label])


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def test_stack_profiles_labels_groups(gr_list):
    piles = pileup_gr_list(gr_list, TARGET, gr_groups=["wt", "wt", "ko"], norm="none")
    table = stack_profiles(piles)
    assert list(table.columns) == ["group", "pos", "val"]
    assert table["group"].unique().tolist() == ["wt", "ko"]
    assert len(table) == 2 * TARGET.width


def test_stack_single_profile_is_labelled_all(gr_list):
    table = stack_profiles(pileup_gr_list(gr_list, TARGET, norm="none"))
    assert set(table["group"]) == {"all"}


def test_shared_maximum(gr_list):
    piles = pileup_gr_list(gr_list, TARGET, gr_groups=["wt", "wt", "ko"], norm="none")
    assert shared_maximum(piles) == 2.0
    assert shared_maximum({}) == 0.0


def test_pileup_builds_no_interval_trees(gr_list):
    pileup_gr_list(gr_list, TARGET, gr_groups=["wt", "wt", "ko"], norm="PM")
    assert all(collection._trees == {} for collection in gr_list.values())


def test_large_sample_pileup_matches_direct_count():
    rng = np.random.default_rng(3)
    starts = rng.integers(1, 2_000_000, size=200_000)
    ends = starts + rng.integers(0, 500, size=200_000)
    sample = IntervalCollection.from_arrays("chr1", starts, ends)
    window = TargetWindow("chr1", 1_000_001, 1_000_200)

    pile = pileup_gr_list({"s": sample}, window, norm="none")
    positions = window.positions()
    near = (starts <= window.end) & (ends >= window.start)
    expected = (
        (starts[near, None] <= positions) & (ends[near, None] >= positions)
    ).sum(axis=0)
    np.testing.assert_array_equal(pile["val"], expected)
