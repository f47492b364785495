"""Coverage, windowing, normalization and grouped pileups."""

from atacpile.pileup.coverage import RunLengthCoverage, coverage
from atacpile.pileup.engine import (
    PileupConfig,
    PileupEngine,
    pileup_gr_list,
    shared_maximum,
    stack_profiles,
)
from atacpile.pileup.normalizer import normalize
from atacpile.pileup.windower import window_profile

__all__ = [
    "PileupConfig",
    "PileupEngine",
    "RunLengthCoverage",
    "coverage",
    "normalize",
    "pileup_gr_list",
    "shared_maximum",
    "stack_profiles",
    "window_profile",
]
