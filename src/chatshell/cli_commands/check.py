"""``chatshell check``: sanitize and parse a command without running it."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.markup import escape

from chatshell.cli_commands._output import console, load_or_exit, print_intent


@click.command()
@click.argument("command")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path), default=None)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
def check(command: str, config_path: Path | None, as_json: bool) -> None:
    """Validate COMMAND and show how it would be executed."""
    from chatshell.errors import CommandRejectedError
    from chatshell.pipeline.pipeline import prepare_command
    from chatshell.pipeline.sanitizer import CommandSanitizer
    from chatshell.pipeline.save_intent import SaveIntentParser

    cfg = load_or_exit(config_path)

    try:
        prepared = prepare_command(command, CommandSanitizer(cfg.pipeline), SaveIntentParser())
    except CommandRejectedError as exc:
        if as_json:
            console.print_json(json.dumps({"rejected": exc.reason}))
        else:
            console.print(f"[red]Rejected:[/red] {escape(exc.reason)}")
        sys.exit(1)

    if as_json:
        console.print_json(prepared.model_dump_json())
        return

    print_intent(prepared)
