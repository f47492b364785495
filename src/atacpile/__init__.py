"""
atacpile: grouped pileup profiles for chromatin accessibility assays

Computes per-position fragment, cut-site or footprint density over a
genomic locus, grouped by sample and normalized for comparison.
"""

__version__ = "0.1.0"

from atacpile.conversion.fragment_converter import convert, convert_fragment_list
from atacpile.core.genome_interval import (
    GenomicInterval,
    IntervalCollection,
    TargetWindow,
    parse_locus,
)
from atacpile.core.options import ConversionMode, NormMode, WindowMode
from atacpile.pileup.engine import PileupConfig, PileupEngine, pileup_gr_list

__all__ = [
    "ConversionMode",
    "GenomicInterval",
    "IntervalCollection",
    "NormMode",
    "PileupConfig",
    "PileupEngine",
    "TargetWindow",
    "WindowMode",
    "convert",
    "convert_fragment_list",
    "parse_locus",
    "pileup_gr_list",
]
