"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import chatshell

    assert chatshell.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from chatshell.cli import main

    assert callable(main)


def test_subpackage_exports() -> None:
    from chatshell.chat import ChatClient, ConsoleChatClient, SlackWebClient
    from chatshell.pipeline import CommandPipeline, CommandSanitizer, SaveIntentParser
    from chatshell.sandbox import DockerRuntime, SandboxLifecycle

    assert all(
        obj is not None
        for obj in (
            ChatClient,
            ConsoleChatClient,
            SlackWebClient,
            CommandPipeline,
            CommandSanitizer,
            SaveIntentParser,
            DockerRuntime,
            SandboxLifecycle,
        )
    )


def test_lazy_import_from_chatshell() -> None:
    import chatshell

    assert chatshell.CommandPipeline is not None
