"""Command line interface."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Shared rich console for output and log records
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
