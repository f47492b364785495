"""
CLI for fragment conversion.

Usage:
    atacpile convert <fragment file> --to cuts
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ..conversion.fragment_converter import convert as convert_fragments
from ..core.options import ConversionMode
from ..io.fragments import read_fragments, sample_id_from_path, write_bed
from . import console, setup_logging

logger = logging.getLogger(__name__)


def convert(
    fragment_file: Path = typer.Argument(
        ..., help="Fragment file (BED/fragments TSV, optionally gzipped, or BAM)"
    ),
    to: ConversionMode = typer.Option(..., "--to", help="Target representation"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output BED (default: <sample>.<mode>.bed)"
    ),
    min_mapq: int = typer.Option(0, help="Minimum mapping quality for BAM input"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Convert fragments to Tn5 cut sites or footprints.

    Example:
        atacpile convert K562.fragments.tsv.gz --to footprints \\
            --output K562.footprints.bed
    """
    setup_logging(verbose)

    console.print("[bold blue]atacpile - Fragment Conversion[/bold blue]")
    console.print(f"Input: {fragment_file}")

    if not fragment_file.exists():
        console.print(f"[bold red]Error:[/bold red] Fragment file not found: {fragment_file}")
        raise typer.Exit(1)

    if output is None:
        output = fragment_file.parent / f"{sample_id_from_path(fragment_file)}.{to}.bed"

    try:
        fragments = read_fragments(fragment_file, min_mapq=min_mapq)
        converted = convert_fragments(fragments, to)
    except Exception as e:
        console.print(f"[bold red]Error during conversion:[/bold red] {e}")
        logger.exception("Conversion failed")
        raise typer.Exit(1)

    write_bed(converted, output)

    console.print("\n[bold green]Conversion complete![/bold green]")
    console.print(f"Fragments: {len(fragments):,}")
    console.print(f"Intervals written: {len(converted):,}")
    console.print(f"Output saved to: {output}")
