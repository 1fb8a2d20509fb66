"""Shared CLI helpers."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from chatshell.config import BotConfig, load_config
from chatshell.errors import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

    from chatshell.pipeline.models import PreparedCommand

console = Console()


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG when *verbose*."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_or_exit(path: Path | None) -> BotConfig:
    """Load the config file, printing the error and exiting on failure."""
    try:
        return load_config(path)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(1)


def print_intent(prepared: PreparedCommand) -> None:
    """Pretty-print the parse result of ``chatshell check``."""
    intent = prepared.intent
    table = Table(title="Parsed command", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("command", escape(prepared.command))
    table.add_row("resource hint", prepared.resource_hint or "-")
    if intent is None:
        table.add_row("output", "plain text")
    else:
        table.add_row("format", intent.output_ext)
        table.add_row("save", intent.full_filename if intent.persist else "no")

    console.print(table)
