"""
CLI for grouped pileups.

Usage:
    atacpile pileup <fragment files...> --locus chr1:533,235-552,687
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from ..conversion.fragment_converter import convert_fragment_list
from ..core.exceptions import AtacPileError
from ..core.genome_interval import TargetWindow
from ..core.options import ConversionMode, NormMode, WindowMode
from ..io.fragments import load_samples, read_groups_file, write_profiles
from ..pileup.engine import PileupConfig, PileupEngine, shared_maximum, stack_profiles
from . import console, setup_logging

logger = logging.getLogger(__name__)


def pileup(
    fragment_files: List[Path] = typer.Argument(
        ..., help="Fragment files (BED/fragments TSV, optionally gzipped, or BAM)"
    ),
    locus: str = typer.Option(..., "--locus", "-l", help="Target locus, e.g. chr1:533,235-552,687"),
    padding: Tuple[int, int] = typer.Option(
        (0, 0), help="Upstream and downstream padding around the locus (bp)"
    ),
    groups: Optional[Path] = typer.Option(
        None, help="Two-column TSV of sample<TAB>group, optional header line (default: one group)"
    ),
    norm: NormMode = typer.Option(NormMode.PM, help="Per-group normalization"),
    window_size: Optional[int] = typer.Option(
        None, min=1, help="Bin width for down-sampling (default: single base)"
    ),
    window_mode: WindowMode = typer.Option(WindowMode.MAX, help="Reducer within each bin"),
    convert: Optional[ConversionMode] = typer.Option(
        None, "--convert", help="Convert fragments to cuts or footprints first"
    ),
    min_mapq: int = typer.Option(0, help="Minimum mapping quality for BAM input"),
    workers: int = typer.Option(1, min=1, help="Number of parallel processes across groups"),
    output: Path = typer.Option(
        Path("pileup.tsv"), "--output", "-o", help="Output TSV (group, pos, val)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Pile up fragments, cut sites or footprints over a locus.

    Writes one row per position (or bin) per group.

    Example:
        atacpile pileup wt1.fragments.tsv.gz wt2.fragments.tsv.gz ko1.fragments.tsv.gz \\
            --locus chr1:533,235-552,687 --padding 10000 10000 \\
            --groups groups.tsv --convert cuts --window-size 50 \\
            --output locus_pileup.tsv
    """
    setup_logging(verbose)

    console.print("[bold blue]atacpile - Pileup[/bold blue]")

    missing = [path for path in fragment_files if not path.exists()]
    if missing:
        for path in missing:
            console.print(f"[bold red]Error:[/bold red] Fragment file not found: {path}")
        raise typer.Exit(1)

    try:
        target = TargetWindow.from_locus(locus, padding=padding)
        config = PileupConfig(
            norm=norm, window_size=window_size, window_mode=window_mode, workers=workers
        )
        gr_groups = read_groups_file(groups) if groups is not None else None
    except (AtacPileError, ValueError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"Target: {target} ({target.width:,} bp)")

    console.print("[yellow]Loading fragments...[/yellow]")
    try:
        samples = load_samples(fragment_files, min_mapq=min_mapq)
    except Exception as e:
        console.print(f"[bold red]Error loading fragments:[/bold red] {e}")
        logger.exception("Loading failed")
        raise typer.Exit(1)

    if convert is not None:
        samples = convert_fragment_list(samples, convert)

    console.print("[yellow]Computing pileups...[/yellow]")
    try:
        result = PileupEngine(config).pileup(samples, target, gr_groups)
    except AtacPileError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[bold red]Error during pileup:[/bold red] {e}")
        logger.exception("Pileup failed")
        raise typer.Exit(1)

    write_profiles(result, output)

    table = stack_profiles(result)
    console.print("\n[bold green]Pileup complete![/bold green]")
    console.print(f"Groups: {table['group'].nunique()}")
    console.print(f"Rows: {len(table):,}")
    console.print(f"Maximum value: {shared_maximum(result):.4g}")
    console.print(f"Output saved to: {output}")
