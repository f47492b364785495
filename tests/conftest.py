"""Shared fixtures for atacpile tests."""

import pytest

from atacpile.core.genome_interval import IntervalCollection, TargetWindow


@pytest.fixture
def fragments():
    """Three fragments on chr1 and one on chr2."""
    return IntervalCollection.from_arrays(
        ["chr1", "chr1", "chr1", "chr2"],
        [100, 150, 400, 120],
        [180, 300, 450, 200],
        name="sample_a",
    )


@pytest.fixture
def window():
    return TargetWindow("chr1", 1, 10)


@pytest.fixture
def gr_list():
    """Three samples: a and b share a group, c is alone."""
    return {
        "a": IntervalCollection.from_arrays("chr1", [3, 20], [5, 30], name="a"),
        "b": IntervalCollection.from_arrays(
            ["chr1", "chr2"], [4, 1], [8, 10], name="b"
        ),
        "c": IntervalCollection.from_arrays("chr1", [1, 9], [2, 12], name="c"),
    }
