"""Tests for ConsoleChatClient."""

from pathlib import Path

import pytest
from rich.console import Console

from chatshell.chat.client import ChatClient
from chatshell.chat.console import ConsoleChatClient
from chatshell.chat.models import ChatDestination
from chatshell.errors import UploadError

_DEST = ChatDestination(channel="console")


def _client(tmp_path: Path) -> tuple[ConsoleChatClient, Console]:
    console = Console(record=True, width=120)
    return ConsoleChatClient(tmp_path / "out", console=console), console


class TestConsoleChatClient:
    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        assert isinstance(ConsoleChatClient(tmp_path), ChatClient)

    async def test_send_message_prints_verbatim(self, tmp_path: Path) -> None:
        client, console = _client(tmp_path)
        await client.send_message(_DEST, "```\n[bold]x[/bold]\n```")

        assert client.messages == ["```\n[bold]x[/bold]\n```"]
        assert "[bold]x[/bold]" in console.export_text()

    async def test_upload_writes_file(self, tmp_path: Path) -> None:
        client, _ = _client(tmp_path)
        uploaded = await client.upload_file(_DEST, b"a,b", "report.csv", "csv")

        path = tmp_path / "out" / "report.csv"
        assert path.read_bytes() == b"a,b"
        assert uploaded.permalink == path.resolve().as_uri()
        assert uploaded.title == "report.csv"

    async def test_upload_cannot_escape_output_dir(self, tmp_path: Path) -> None:
        client, _ = _client(tmp_path)
        await client.upload_file(_DEST, b"x", "../../evil.txt", "txt")
        assert (tmp_path / "out" / "evil.txt").exists()

    async def test_upload_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a dir")
        client = ConsoleChatClient(blocker, console=Console(record=True))
        with pytest.raises(UploadError):
            await client.upload_file(_DEST, b"x", "a.txt", "txt")
