"""``chatshell run``: execute one command through the full pipeline."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.markup import escape

from chatshell.cli_commands._output import console, load_or_exit, setup_logging


@click.command()
@click.argument("command")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path), default=None)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Where saved files are written when delivering to the console.",
)
@click.option("--channel", default=None, help="Destination channel (defaults to the configured Slack channel).")
@click.option("--shared", is_flag=True, help="Treat the destination as a shared channel.")
@click.option("--slack", "use_slack", is_flag=True, help="Deliver to Slack instead of the console.")
@click.option("--slack-token", envvar="SLACK_BOT_TOKEN", default=None, help="Slack bot token.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Print trace spans to the console.")
def run(
    command: str,
    config_path: Path | None,
    output_dir: Path,
    channel: str | None,
    shared: bool,
    use_slack: bool,
    slack_token: str | None,
    verbose: bool,
    telemetry: bool,
) -> None:
    """Run COMMAND in a fresh sandbox and deliver the result."""
    from chatshell.chat.console import ConsoleChatClient
    from chatshell.chat.models import ChatDestination
    from chatshell.chat.slack import SlackWebClient
    from chatshell.pipeline.models import CommandRequest
    from chatshell.pipeline.pipeline import CommandPipeline
    from chatshell.sandbox.docker_runtime import DockerRuntime

    setup_logging(verbose)
    cfg = load_or_exit(config_path)

    if telemetry:
        from chatshell.utils.telemetry import configure_telemetry

        configure_telemetry()

    token = slack_token or cfg.slack.bot_token
    target = channel or cfg.slack.default_channel or "console"
    if use_slack and not token:
        console.print("[red]A Slack token is required with --slack.[/red]")
        sys.exit(1)

    request = CommandRequest(
        raw_text=command,
        caller_id="cli",
        destination=ChatDestination(channel=target, shared=shared),
    )

    async def _run() -> str:
        async with DockerRuntime(cfg.sandbox) as runtime:
            if use_slack:
                async with SlackWebClient(token) as slack:
                    pipeline = CommandPipeline(runtime, slack, config=cfg.pipeline, sandbox_config=cfg.sandbox)
                    outcome = await pipeline.run(request)
            else:
                chat = ConsoleChatClient(output_dir, console=console)
                pipeline = CommandPipeline(runtime, chat, config=cfg.pipeline, sandbox_config=cfg.sandbox)
                outcome = await pipeline.run(request)
        return outcome.kind

    try:
        kind = asyncio.run(_run())
    except Exception as exc:
        console.print(f"[red]Execution error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if verbose:
        console.print(f"[dim]outcome: {kind}[/dim]")
