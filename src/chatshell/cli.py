"""chatshell CLI entrypoint."""

from __future__ import annotations

import click

from chatshell import __version__


@click.group()
@click.version_option(version=__version__, prog_name="chatshell")
def main() -> None:
    """chatshell: run chat commands in disposable sandboxes."""


# Register subcommands
from chatshell.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
