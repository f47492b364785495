"""Core data structures and utilities."""

from atacpile.core.exceptions import (
    AtacPileError,
    EmptyTargetError,
    InvalidGroupingError,
    InvalidModeError,
    InvalidNormError,
    InvalidWindowModeError,
    LocusFormatError,
)
from atacpile.core.genome_interval import (
    GenomicInterval,
    IntervalCollection,
    TargetWindow,
    parse_locus,
)
from atacpile.core.grouping import ExplicitGrouping, SingleGroup, resolve_grouping
from atacpile.core.options import ConversionMode, NormMode, WindowMode

__all__ = [
    "AtacPileError",
    "ConversionMode",
    "EmptyTargetError",
    "ExplicitGrouping",
    "GenomicInterval",
    "IntervalCollection",
    "InvalidGroupingError",
    "InvalidModeError",
    "InvalidNormError",
    "InvalidWindowModeError",
    "LocusFormatError",
    "NormMode",
    "SingleGroup",
    "TargetWindow",
    "WindowMode",
    "parse_locus",
    "resolve_grouping",
]
