"""SlackWebClient: posts messages and uploads files via the Slack Web API."""

from __future__ import annotations

from typing import Any

import httpx

from chatshell.chat.models import ChatDestination, UploadedFile
from chatshell.errors import ChatError, UploadError

SLACK_API_URL = "https://slack.com/api"


class SlackWebClient:
    """Minimal Slack Web API client.

    Satisfies the :class:`~chatshell.chat.client.ChatClient` protocol.

    Usage::

        async with SlackWebClient(token) as slack:
            await slack.send_message(ChatDestination(channel="C123"), "hi")
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = SLACK_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> SlackWebClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._token}"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "SlackWebClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def send_message(self, destination: ChatDestination, text: str) -> None:
        """``chat.postMessage`` with mrkdwn enabled."""
        await self._call(
            "chat.postMessage",
            json={"channel": destination.channel, "text": text, "mrkdwn": True},
        )

    async def upload_file(
        self,
        destination: ChatDestination,
        content: bytes,
        filename: str,
        file_type: str,
    ) -> UploadedFile:
        """Upload through Slack's external upload flow.

        1. ``files.getUploadURLExternal`` reserves an upload URL.
        2. The bytes are POSTed to that URL.
        3. ``files.completeUploadExternal`` shares the file to the channel.
        """
        try:
            reserved = await self._call(
                "files.getUploadURLExternal",
                data={"filename": filename, "length": str(len(content))},
            )
            response = await self._http().post(
                reserved["upload_url"],
                content=content,
                headers={"Content-Type": "application/octet-stream"},
            )
            response.raise_for_status()
            completed = await self._call(
                "files.completeUploadExternal",
                json={
                    "files": [{"id": reserved["file_id"], "title": filename}],
                    "channel_id": destination.channel,
                },
            )
        except (ChatError, httpx.HTTPError, KeyError) as exc:
            raise UploadError(str(exc)) from exc

        files = completed.get("files") or []
        if not files:
            raise UploadError("no file in completeUploadExternal response")
        uploaded = files[0]
        return UploadedFile(
            permalink=uploaded.get("permalink", ""),
            title=uploaded.get("title") or uploaded.get("name") or filename,
        )

    async def _call(self, method: str, **kwargs: Any) -> dict[str, Any]:
        """Invoke a Web API *method* and return the payload when ``ok``."""
        try:
            response = await self._http().post(f"/{method}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ChatError(f"{method}: {exc}") from exc

        payload: dict[str, Any] = response.json()
        if not payload.get("ok"):
            raise ChatError(f"{method}: {payload.get('error', 'unknown error')}")
        return payload
