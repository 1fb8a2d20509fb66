"""ConsoleChatClient: renders results on the terminal for ``chatshell run``."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from chatshell.chat.models import ChatDestination, UploadedFile
from chatshell.errors import UploadError


class ConsoleChatClient:
    """Prints messages and writes "uploads" into *output_dir*.

    Satisfies the :class:`~chatshell.chat.client.ChatClient` protocol.
    """

    def __init__(self, output_dir: Path, *, console: Console | None = None) -> None:
        self._output_dir = output_dir
        self._console = console or Console()
        self.messages: list[str] = []

    async def send_message(self, destination: ChatDestination, text: str) -> None:
        self.messages.append(text)
        self._console.print(f"[dim]#{escape(destination.channel)}[/dim]")
        self._console.print(escape(text), highlight=False)

    async def upload_file(
        self,
        destination: ChatDestination,
        content: bytes,
        filename: str,
        file_type: str,
    ) -> UploadedFile:
        path = self._output_dir / Path(filename).name
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise UploadError(str(exc)) from exc
        self._console.print(f"[green]Saved {file_type} file:[/green] {escape(str(path))}")
        return UploadedFile(permalink=path.resolve().as_uri(), title=path.name)
