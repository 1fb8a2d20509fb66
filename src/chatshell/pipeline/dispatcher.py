"""ResultDispatcher: inline message or file upload, never both."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chatshell.pipeline.models import (
    DispatchOutcome,
    InlineOutcome,
    PipelineConfig,
    ProcessedOutput,
    SaveIntent,
    UploadedOutcome,
    UploadFailedOutcome,
)

if TYPE_CHECKING:
    from chatshell.chat.client import ChatClient
    from chatshell.chat.models import ChatDestination

logger = logging.getLogger(__name__)

NO_OUTPUT = "(no output)"


def code_block(text: str) -> str:
    """Wrap *text* in a preformatted block."""
    return f"```\n{text}\n```"


class ResultDispatcher:
    """Deliver processed output through a :class:`ChatClient`."""

    def __init__(self, chat: ChatClient, config: PipelineConfig | None = None) -> None:
        self._chat = chat
        self._config = config or PipelineConfig()

    async def dispatch(
        self,
        intent: SaveIntent | None,
        output: ProcessedOutput,
        destination: ChatDestination,
    ) -> DispatchOutcome:
        """Send *output* inline, or upload it when *intent* asks to persist.

        Empty output is always reported inline; there is nothing to upload.
        """
        if intent is None or not intent.persist or not output.text.strip():
            return await self.send_inline(output, destination)
        return await self._upload(intent, output, destination)

    async def send_inline(self, output: ProcessedOutput, destination: ChatDestination) -> InlineOutcome:
        """Send the escaped text as one preformatted message."""
        body = output.escaped.rstrip() if output.text.strip() else NO_OUTPUT
        text = code_block(body)
        await self._chat.send_message(destination, text)
        return InlineOutcome(text=text)

    async def _upload(
        self,
        intent: SaveIntent,
        output: ProcessedOutput,
        destination: ChatDestination,
    ) -> DispatchOutcome:
        try:
            uploaded = await self._chat.upload_file(
                destination,
                output.text.rstrip().encode("utf-8"),
                intent.full_filename,
                intent.file_ext,
            )
        except Exception:
            logger.warning("Upload of %s failed", intent.full_filename, exc_info=True)
            await self._chat.send_message(destination, self._config.upload_failed_message)
            return UploadFailedOutcome()

        if not (destination.shared and self._config.suppress_link_in_channel):
            try:
                await self._chat.send_message(destination, uploaded.as_link())
            except Exception as exc:
                logger.warning("Link message for %s failed: %s", uploaded.permalink, exc)
        return UploadedOutcome(permalink=uploaded.permalink, title=uploaded.title)
