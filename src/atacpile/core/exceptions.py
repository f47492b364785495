"""
Exception taxonomy for atacpile.

Every error that validates an enumerated option or a target locus derives
from both AtacPileError and ValueError, so callers can catch either.
"""

from __future__ import annotations


class AtacPileError(Exception):
    """Base class for all atacpile errors."""


class InvalidModeError(AtacPileError, ValueError):
    """Unknown fragment conversion mode."""


class InvalidNormError(AtacPileError, ValueError):
    """Unknown normalization mode."""


class InvalidWindowModeError(AtacPileError, ValueError):
    """Unknown window aggregation mode."""


class InvalidGroupingError(AtacPileError, ValueError):
    """Group labels that do not line up with the samples."""


class EmptyTargetError(AtacPileError, ValueError):
    """Target window that cannot be resolved to a chromosome interval."""


class LocusFormatError(AtacPileError, ValueError):
    """Locus string that is not of the form chrom:start-end."""
