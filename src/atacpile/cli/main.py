"""
atacpile command line entry point.

Usage:
    atacpile pileup <fragment files...> --locus <chrom:start-end>
    atacpile convert <fragment file> --to cuts|footprints
"""

from __future__ import annotations

import typer

from .convert import convert
from .pileup import pileup

app = typer.Typer(help="Pileup profiles for chromatin accessibility fragments")

app.command()(pileup)
app.command()(convert)


if __name__ == "__main__":
    app()
