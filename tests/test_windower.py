"""Tests for binning profiles into fixed-width windows."""

import numpy as np
import pandas as pd
import pytest

from atacpile.core.exceptions import InvalidWindowModeError
from atacpile.core.genome_interval import IntervalCollection, TargetWindow
from atacpile.pileup.coverage import coverage
from atacpile.pileup.windower import window_profile


@pytest.fixture
def profile():
    # Positions 8..17: bins of size 5 are 1 (8-9), 2 (10-14), 3 (15-17)
    return pd.DataFrame({"pos": np.arange(8, 18), "val": [4, 1, 0, 2, 2, 9, 1, 3, 3, 6]})


def test_bins_are_anchored_to_multiples_of_size(profile):
    binned = window_profile(profile, 5, "max")
    assert binned["pos"].tolist() == [5, 10, 15]


@pytest.mark.parametrize(
    "mode,expected",
    [
        ("max", [4, 9, 6]),
        ("mean", [2.5, 2.8, 4.0]),
        ("median", [2.5, 2.0, 3.0]),
    ],
)
def test_each_reducer_is_reachable(profile, mode, expected):
    binned = window_profile(profile, 5, mode)
    np.testing.assert_allclose(binned["val"], expected)


def test_median_differs_from_max(profile):
    assert not window_profile(profile, 5, "median")["val"].equals(
        window_profile(profile, 5, "max")["val"]
    )


def test_bin_positions_independent_of_window_start():
    intervals = IntervalCollection.from_arrays("chr1", [105, 130], [140, 160])
    wide = coverage(intervals, "chr1", TargetWindow("chr1", 91, 200))
    narrow = coverage(intervals, "chr1", TargetWindow("chr1", 100, 200))

    binned_wide = window_profile(wide, 20, "mean")
    binned_narrow = window_profile(narrow, 20, "mean")
    assert all(pos % 20 == 0 for pos in binned_wide["pos"])
    # Bins fully inside both windows agree exactly
    shared = binned_wide.merge(binned_narrow, on="pos", suffixes=("_w", "_n"))
    shared = shared[shared["pos"] >= 100]
    np.testing.assert_allclose(shared["val_w"], shared["val_n"])
    assert shared["pos"].tolist() == [100, 120, 140, 160, 180, 200]


def test_window_profile_does_not_mutate_input(profile):
    before = profile.copy()
    window_profile(profile, 3, "mean")
    pd.testing.assert_frame_equal(profile, before)


def test_window_size_one_keeps_positions(profile):
    binned = window_profile(profile, 1, "max")
    assert binned["pos"].tolist() == profile["pos"].tolist()
    assert binned["val"].tolist() == profile["val"].tolist()


def test_invalid_window_mode(profile):
    with pytest.raises(InvalidWindowModeError):
        window_profile(profile, 5, "sum")


@pytest.mark.parametrize("size,error", [(0, ValueError), (-5, ValueError), (2.5, TypeError), ("10", TypeError)])
def test_invalid_window_size(profile, size, error):
    with pytest.raises(error):
        window_profile(profile, size, "max")
