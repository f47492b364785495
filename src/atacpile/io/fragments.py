"""
Fragment loading and writing.

Reads per-sample fragments into IntervalCollections and writes converted
intervals and profiles back out:
- BED / 10x-style fragment files (chrom, start, end, ...), optionally
  gzipped, 0-based half-open
- paired-end BAM files, one fragment per properly paired read pair
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable
from pathlib import Path
from typing import Optional

import pandas as pd
import pysam

from ..core.genome_interval import IntervalCollection
from ..pileup.engine import PileupResult, stack_profiles

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIXES = (".gz", ".bed", ".tsv", ".txt", ".fragments", ".bam")
GROUPS_HEADER = ["sample", "group"]


def sample_id_from_path(path: Path) -> str:
    """
    Derive a sample id from a file name by dropping fragment suffixes.

    Example:
        >>> sample_id_from_path(Path("data/K562.fragments.tsv.gz"))
        'K562'
    """
    name = path.name
    stripped = True
    while stripped:
        stripped = False
        for suffix in FRAGMENT_SUFFIXES:
            if name.endswith(suffix) and len(name) > len(suffix):
                name = name[: -len(suffix)]
                stripped = True
    return name


def read_fragment_file(path: Path, name: Optional[str] = None) -> IntervalCollection:
    """
    Load a BED or fragment file.

    Only the first three columns are used. Lines starting with '#' are
    skipped. A file without any intervals gives an empty collection.

    Args:
        path: File path (plain or gzip-compressed)
        name: Sample name (default: derived from the file name)

    Returns:
        IntervalCollection in 1-based inclusive coordinates
    """
    name = name or sample_id_from_path(path)
    try:
        df = pd.read_csv(
            path,
            sep="\t",
            comment="#",
            header=None,
            usecols=[0, 1, 2],
            dtype={0: str, 1: "int64", 2: "int64"},
        ).rename(columns={0: "chrom", 1: "start", 2: "end"})
    except pd.errors.EmptyDataError:
        logger.warning(f"No fragments in {path}")
        return IntervalCollection(name=name)
    # BED start is 0-based
    df["start"] = df["start"] + 1

    collection = IntervalCollection.from_frame(df, name=name)
    logger.info(f"Loaded {len(collection):,} fragments from {path}")
    return collection


def read_bam_fragments(
    path: Path, min_mapq: int = 0, name: Optional[str] = None
) -> IntervalCollection:
    """
    Build fragments from a paired-end BAM file.

    Each properly paired, primary, mapped read pair yields one fragment,
    taken from the leftmost mate (positive template length).

    Args:
        path: BAM file path
        min_mapq: Minimum mapping quality of the leftmost mate
        name: Sample name (default: derived from the file name)

    Returns:
        IntervalCollection of fragments in 1-based inclusive coordinates
    """
    chroms, starts, ends = [], [], []
    with pysam.AlignmentFile(str(path), "rb") as bam:
        for read in bam.fetch(until_eof=True):
            if not _is_fragment_read(read, min_mapq):
                continue
            chroms.append(read.reference_name)
            starts.append(read.reference_start + 1)
            ends.append(read.reference_start + read.template_length)

    collection = IntervalCollection.from_arrays(
        chroms, starts, ends, name=name or sample_id_from_path(path)
    )
    logger.info(f"Loaded {len(collection):,} fragments from {path}")
    return collection


def _is_fragment_read(read: pysam.AlignedSegment, min_mapq: int) -> bool:
    if read.is_unmapped or read.is_secondary or read.is_supplementary:
        return False
    if not read.is_paired or not read.is_proper_pair:
        return False
    if read.template_length <= 0:
        return False
    return read.mapping_quality >= min_mapq


def read_fragments(path: Path, min_mapq: int = 0) -> IntervalCollection:
    """Load fragments from a BAM or BED-like file, chosen by extension."""
    if path.suffix == ".bam":
        return read_bam_fragments(path, min_mapq=min_mapq)
    return read_fragment_file(path)


def load_samples(
    paths: Iterable[Path], min_mapq: int = 0
) -> dict[str, IntervalCollection]:
    """
    Load several fragment files keyed by sample id.

    Raises:
        ValueError: If two files map to the same sample id
    """
    samples: dict[str, IntervalCollection] = {}
    for path in paths:
        collection = read_fragments(path, min_mapq=min_mapq)
        if collection.name in samples:
            raise ValueError(f"Duplicate sample id '{collection.name}' from {path}")
        samples[collection.name] = collection
    return samples


def read_groups_file(path: Path) -> dict[str, Hashable]:
    """
    Read sample group labels from a two-column TSV (sample, group).

    Lines starting with '#' are ignored, as is a leading "sample<TAB>group"
    header line.
    """
    df = pd.read_csv(
        path, sep="\t", comment="#", header=None, names=["sample", "group"], dtype=str
    )
    if len(df) and df.iloc[0].str.strip().str.lower().tolist() == GROUPS_HEADER:
        df = df.iloc[1:]
    return dict(zip(df["sample"], df["group"]))


def write_bed(collection: IntervalCollection, output_path: Path) -> None:
    """Write intervals as a BED6 file (0-based half-open)."""
    with open(output_path, "w") as f:
        for interval in collection:
            f.write(interval.to_bed_string() + "\n")

    logger.info(f"Wrote {len(collection):,} intervals to {output_path}")


def write_profiles(result: PileupResult, output_path: Path) -> None:
    """Write pileup profiles as a group/pos/val TSV."""
    table = stack_profiles(result)
    table.to_csv(output_path, sep="\t", index=False)
    logger.info(f"Saved {len(table):,} profile rows to {output_path}")
