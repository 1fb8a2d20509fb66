"""ChatClient protocol: the two capabilities the pipeline needs from a chat platform."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chatshell.chat.models import ChatDestination, UploadedFile


@runtime_checkable
class ChatClient(Protocol):
    """Delivers messages and files to a chat destination."""

    async def send_message(self, destination: ChatDestination, text: str) -> None:
        """Post *text* (platform markup) to *destination*."""
        ...

    async def upload_file(
        self,
        destination: ChatDestination,
        content: bytes,
        filename: str,
        file_type: str,
    ) -> UploadedFile:
        """Upload *content* as *filename* and return its permalink.

        Raises:
            UploadError: When the platform refuses the upload.
        """
        ...
