"""
Genomic intervals, per-sample interval collections and target windows.

All coordinates in this module are 1-based and inclusive, matching the
conventions of UCSC locus strings and Bioconductor ranges:

- GenomicInterval: one immutable interval (fragment, cut site or footprint)
- IntervalCollection: the ordered intervals of one sample, stored
  column-wise in a DataFrame; window subsetting is vectorised and
  repeated overlap queries use lazily built interval trees
- TargetWindow: the locus a profile is computed over, plus the explicit
  transformation between genomic positions and window offsets
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from intervaltree import IntervalTree

from .exceptions import EmptyTargetError, LocusFormatError

logger = logging.getLogger(__name__)

COLUMNS = ["chrom", "start", "end", "strand"]
STRANDS = ("+", "-", ".")

_LOCUS_PATTERN = re.compile(r"^\s*([^:\s]+):([\d,]+)-([\d,]+)\s*$")


@dataclass(slots=True, frozen=True)
class GenomicInterval:
    """Immutable genomic interval, 1-based and inclusive on both ends."""

    chrom: str
    start: int
    end: int
    strand: str = "."

    def __post_init__(self) -> None:
        """Validate interval coordinates."""
        if self.start < 1:
            raise ValueError(f"Start position must be >= 1: {self.start}")
        if self.end < self.start:
            raise ValueError(
                f"End position ({self.end}) must not be less than "
                f"start position ({self.start})"
            )
        if self.strand not in STRANDS:
            raise ValueError(f"Invalid strand: {self.strand}")

    @property
    def width(self) -> int:
        """Return interval width in base pairs."""
        return self.end - self.start + 1

    def overlaps(self, other: GenomicInterval) -> bool:
        """Check if this interval shares at least one base with another."""
        if self.chrom != other.chrom:
            return False
        return self.start <= other.end and other.start <= self.end

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.end

    def to_bed_string(self) -> str:
        """Convert to a 0-based half-open BED line."""
        return f"{self.chrom}\t{self.start - 1}\t{self.end}\t.\t0\t{self.strand}"


def _validate_frame(df: pd.DataFrame) -> None:
    if (df["start"] < 1).any():
        bad = df.loc[df["start"] < 1, "start"].iloc[0]
        raise ValueError(f"Start position must be >= 1: {bad}")
    if (df["end"] < df["start"]).any():
        row = df.loc[df["end"] < df["start"]].iloc[0]
        raise ValueError(
            f"End position ({row['end']}) must not be less than "
            f"start position ({row['start']})"
        )
    if not df["strand"].isin(STRANDS).all():
        bad = df.loc[~df["strand"].isin(STRANDS), "strand"].iloc[0]
        raise ValueError(f"Invalid strand: {bad}")


class IntervalCollection:
    """
    Ordered, read-only collection of intervals for one sample.

    Collections may mix chromosomes; restriction to a chromosome happens at
    query time. Every transformation returns a new collection.

    Example:
        >>> fragments = IntervalCollection.from_arrays("chr1", [100, 250], [180, 400])
        >>> [iv.start for iv in fragments.find_overlaps("chr1", 150, 260)]
        [100, 250]
    """

    def __init__(
        self, intervals: Iterable[GenomicInterval] = (), name: str = ""
    ) -> None:
        """
        Build a collection from GenomicInterval objects.

        Args:
            intervals: Intervals in the order they should be kept
            name: Optional sample name, used in log messages
        """
        rows = [(iv.chrom, iv.start, iv.end, iv.strand) for iv in intervals]
        self._frame = self._coerce(pd.DataFrame(rows, columns=COLUMNS))
        self.name = name
        # Interval trees are built per chromosome on first query
        self._trees: dict[str, IntervalTree] = {}

    @staticmethod
    def _coerce(df: pd.DataFrame) -> pd.DataFrame:
        df = df.reset_index(drop=True)
        return df.astype(
            {"chrom": object, "start": np.int64, "end": np.int64, "strand": object}
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame, name: str = "") -> IntervalCollection:
        """
        Build a collection from a DataFrame with chrom/start/end columns.

        A missing strand column is filled with '.'. The frame is copied and
        validated row by row.

        Raises:
            ValueError: If any row is not a valid 1-based interval
        """
        missing = {"chrom", "start", "end"} - set(df.columns)
        if missing:
            raise ValueError(f"Missing interval columns: {sorted(missing)}")
        frame = df.copy()
        if "strand" not in frame.columns:
            frame["strand"] = "."
        frame["chrom"] = frame["chrom"].astype(str)
        frame = cls._coerce(frame[COLUMNS])
        _validate_frame(frame)

        obj = cls.__new__(cls)
        obj._frame = frame
        obj.name = name
        obj._trees = {}
        return obj

    @classmethod
    def from_arrays(
        cls,
        chrom: str | Sequence[str],
        starts: Sequence[int],
        ends: Sequence[int],
        name: str = "",
    ) -> IntervalCollection:
        """Build a collection from parallel start/end arrays."""
        starts = np.asarray(starts, dtype=np.int64)
        ends = np.asarray(ends, dtype=np.int64)
        if isinstance(chrom, str):
            chrom = [chrom] * len(starts)
        df = pd.DataFrame({"chrom": list(chrom), "start": starts, "end": ends})
        return cls.from_frame(df, name=name)

    @classmethod
    def concat(
        cls, collections: Iterable[IntervalCollection], name: str = ""
    ) -> IntervalCollection:
        """Concatenate collections into one multiset, keeping order."""
        frames = [c._frame for c in collections]
        if not frames:
            return cls(name=name)
        return cls._wrap(pd.concat(frames, ignore_index=True), name)

    @classmethod
    def _wrap(cls, frame: pd.DataFrame, name: str) -> IntervalCollection:
        # Rows are already validated; skip the checks in from_frame
        obj = cls.__new__(cls)
        obj._frame = cls._coerce(frame[COLUMNS])
        obj.name = name
        obj._trees = {}
        return obj

    def __len__(self) -> int:
        return len(self._frame)

    def __iter__(self) -> Iterator[GenomicInterval]:
        for chrom, start, end, strand in self._frame.itertuples(index=False):
            yield GenomicInterval(chrom, int(start), int(end), strand)

    def __getitem__(self, index: int) -> GenomicInterval:
        chrom, start, end, strand = self._frame.iloc[index]
        return GenomicInterval(chrom, int(start), int(end), strand)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalCollection):
            return NotImplemented
        return self._frame.equals(other._frame)

    @property
    def starts(self) -> np.ndarray:
        return self._frame["start"].to_numpy()

    @property
    def ends(self) -> np.ndarray:
        return self._frame["end"].to_numpy()

    def to_frame(self) -> pd.DataFrame:
        """Return a copy of the underlying chrom/start/end/strand table."""
        return self._frame.copy()

    def chromosomes(self) -> list[str]:
        """Chromosome names in order of first appearance."""
        return list(pd.unique(self._frame["chrom"]))

    def on_chromosome(self, chrom: str) -> IntervalCollection:
        """Return the intervals on one chromosome (empty if it is absent)."""
        frame = self._frame[self._frame["chrom"] == chrom]
        return self._wrap(frame, self.name)

    def sort(self) -> IntervalCollection:
        """
        Return a sorted copy.

        Chromosomes keep their order of first appearance; within one
        chromosome intervals are ordered by start, then end. The sort is
        stable, so ties keep their input order.
        """
        order = {chrom: i for i, chrom in enumerate(self.chromosomes())}
        frame = self._frame.assign(_rank=self._frame["chrom"].map(order))
        frame = frame.sort_values(["_rank", "start", "end"], kind="stable")
        return self._wrap(frame, self.name)

    def _tree(self, chrom: str) -> IntervalTree:
        tree = self._trees.get(chrom)
        if tree is None:
            on_chrom = self._frame.index[self._frame["chrom"] == chrom]
            # IntervalTree is half-open, so the inclusive end is shifted by one
            tree = IntervalTree.from_tuples(
                (int(s), int(e) + 1, int(i))
                for i, s, e in zip(
                    on_chrom,
                    self._frame.loc[on_chrom, "start"],
                    self._frame.loc[on_chrom, "end"],
                )
            )
            self._trees[chrom] = tree
            logger.debug(
                f"Indexed {len(tree):,} intervals on '{chrom}'"
                + (f" for sample '{self.name}'" if self.name else "")
            )
        return tree

    def _overlap_rows(self, chrom: str, start: int, end: int) -> list[int]:
        tree = self._tree(chrom)
        if not tree:
            return []
        return sorted(iv.data for iv in tree.overlap(start, end + 1))

    def find_overlaps(self, chrom: str, start: int, end: int) -> list[GenomicInterval]:
        """
        Find all intervals sharing at least one base with chrom:start-end.

        Returns:
            Overlapping intervals in collection order; an empty list if the
            chromosome is not present (no KeyError)
        """
        rows = self._overlap_rows(chrom, start, end)
        return [self[i] for i in rows]

    def subset_by_overlaps(self, window: TargetWindow) -> IntervalCollection:
        """
        Keep the intervals overlapping a window.

        Partial overlaps are kept whole; nothing is clipped to the window.
        A single window is answered with one vectorised pass over the
        columns, so no interval tree is built.
        """
        frame = self._frame
        mask = (
            (frame["chrom"] == window.chrom)
            & (frame["start"] <= window.end)
            & (frame["end"] >= window.start)
        )
        return self._wrap(frame[mask], self.name)

    def __repr__(self) -> str:
        """String representation."""
        label = f"{self.name!r}, " if self.name else ""
        return (
            f"IntervalCollection({label}chromosomes={len(self.chromosomes())}, "
            f"intervals={len(self)})"
        )


@dataclass(slots=True, frozen=True)
class TargetWindow:
    """
    Locus a profile is computed over, 1-based and inclusive.

    Offsets are 0-based positions inside the window: offset 0 is
    ``start`` and offset ``width - 1`` is ``end``.
    """

    chrom: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if not self.chrom:
            raise EmptyTargetError("Target window has no chromosome")
        if self.start < 1:
            raise EmptyTargetError(f"Target start must be >= 1: {self.start}")
        if self.end < self.start:
            raise EmptyTargetError(
                f"Target end ({self.end}) is before target start ({self.start})"
            )

    @classmethod
    def from_locus(
        cls, locus: str, padding: tuple[int, int] = (0, 0)
    ) -> TargetWindow:
        """Parse a UCSC-style locus and pad it (upstream, downstream)."""
        window = parse_locus(locus)
        upstream, downstream = padding
        if upstream or downstream:
            window = window.padded(upstream, downstream)
        return window

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def positions(self) -> np.ndarray:
        """Every genomic position in the window, ascending."""
        return np.arange(self.start, self.end + 1, dtype=np.int64)

    def to_offset(self, position):
        """Map genomic position(s) to 0-based window offset(s)."""
        return np.asarray(position, dtype=np.int64) - self.start

    def to_position(self, offset):
        """Map 0-based window offset(s) back to genomic position(s)."""
        return np.asarray(offset, dtype=np.int64) + self.start

    def padded(self, upstream: int, downstream: int) -> TargetWindow:
        """Extend the window; the start never drops below 1."""
        return TargetWindow(
            self.chrom, max(1, self.start - int(upstream)), self.end + int(downstream)
        )

    def overlaps(self, interval: GenomicInterval) -> bool:
        return (
            interval.chrom == self.chrom
            and interval.start <= self.end
            and self.start <= interval.end
        )

    def __str__(self) -> str:
        return f"{self.chrom}:{self.start:,}-{self.end:,}"


def parse_locus(locus: str) -> TargetWindow:
    """
    Parse a UCSC-style locus string into a TargetWindow.

    Thousands separators are stripped.

    Args:
        locus: Locus such as "chr1:533,235-552,687"

    Returns:
        The parsed TargetWindow

    Raises:
        LocusFormatError: If the string is not of the form chrom:start-end
        EmptyTargetError: If the coordinates do not form a valid window

    Example:
        >>> parse_locus("chr1:533,235-552,687")
        TargetWindow(chrom='chr1', start=533235, end=552687)
    """
    match = _LOCUS_PATTERN.match(locus)
    if match is None:
        raise LocusFormatError(f"Locus must look like chrom:start-end, got {locus!r}")
    chrom, start, end = match.groups()
    return TargetWindow(chrom, int(start.replace(",", "")), int(end.replace(",", "")))
