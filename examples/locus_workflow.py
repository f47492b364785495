"""
Complete working example: grouped cut-site pileups over one locus.

This example loads fragment files for a set of samples, converts them to
Tn5 cut sites, and computes per-million normalized profiles for each
condition, binned to 50 bp.
"""

from pathlib import Path
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def locus_workflow(
    # Input files
    fragment_files: list[Path],
    groups_file: Path,
    # Target
    locus: str,
    # Output directory
    output_dir: Path,
    # Optional parameters
    padding: tuple[int, int] = (10_000, 10_000),
    window_size: int = 50,
) -> dict:
    """
    Cut-site pileups for every condition over a padded locus.

    This workflow:
    1. Loads fragments per sample
    2. Converts fragments to cut sites
    3. Computes PM-normalized, binned profiles per group
    4. Writes the profiles and a small summary

    Args:
        fragment_files: Fragment files (BED/fragments TSV or BAM), one per sample
        groups_file: Two-column TSV assigning samples to groups
        locus: Target locus, e.g. "chr1:533,235-552,687"
        output_dir: Output directory for results
        padding: Upstream and downstream padding around the locus (bp)
        window_size: Bin width (bp)

    Returns:
        Dictionary with summary statistics
    """
    from atacpile.conversion.fragment_converter import convert_fragment_list
    from atacpile.core.genome_interval import TargetWindow
    from atacpile.io.fragments import load_samples, read_groups_file, write_profiles
    from atacpile.pileup.engine import PileupConfig, PileupEngine, shared_maximum

    output_dir.mkdir(parents=True, exist_ok=True)

    target = TargetWindow.from_locus(locus, padding=padding)
    logger.info(f"Target window: {target}")

    # Step 1: load fragments
    samples = load_samples(fragment_files)
    groups = read_groups_file(groups_file)

    # Step 2: fragments -> cut sites
    cuts = convert_fragment_list(samples, "cuts")

    # Step 3: grouped pileups
    engine = PileupEngine(PileupConfig(norm="PM", window_size=window_size, window_mode="max"))
    piles = engine.pileup(cuts, target, groups)

    # Step 4: outputs
    profiles_output = output_dir / "profiles.tsv"
    write_profiles(piles, profiles_output)

    summary = {
        'locus': str(target),
        'samples': len(samples),
        'fragments': sum(len(c) for c in samples.values()),
        'groups': len(set(groups.values())),
        'max_value': shared_maximum(piles),
        'profiles_file': str(profiles_output),
    }
    for key, value in summary.items():
        logger.info(f"  {key}: {value}")

    return summary


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 5:
        print(
            "Usage: python locus_workflow.py <locus> <groups.tsv> <output_dir> "
            "<fragments> [<fragments> ...]"
        )
        sys.exit(1)

    locus_workflow(
        fragment_files=[Path(p) for p in sys.argv[4:]],
        groups_file=Path(sys.argv[2]),
        locus=sys.argv[1],
        output_dir=Path(sys.argv[3]),
    )
