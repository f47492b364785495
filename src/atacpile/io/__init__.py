"""Fragment file loaders and writers."""

from atacpile.io.fragments import (
    load_samples,
    read_bam_fragments,
    read_fragment_file,
    read_groups_file,
    write_bed,
    write_profiles,
)

__all__ = [
    "load_samples",
    "read_bam_fragments",
    "read_fragment_file",
    "read_groups_file",
    "write_bed",
    "write_profiles",
]
