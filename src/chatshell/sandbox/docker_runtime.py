"""DockerRuntime: talks to the Docker Engine API over its unix socket.

The engine API (rather than the ``docker`` CLI) is used because exec output
comes back as one multiplexed byte stream that the lifecycle reads to the
end, framed with the engine's 8-byte stream headers.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from chatshell.sandbox.models import SandboxConfig

logger = logging.getLogger(__name__)


class DockerRuntime:
    """Docker Engine API client.

    Satisfies the :class:`~chatshell.sandbox.runtime.SandboxRuntime`
    protocol.

    Usage::

        async with DockerRuntime(config) as runtime:
            lifecycle = SandboxLifecycle(runtime, config)
            result = await lifecycle.run("ls | to json")
    """

    def __init__(
        self,
        config: SandboxConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or SandboxConfig()
        self._transport = transport or httpx.AsyncHTTPTransport(uds=self._config.docker_socket)
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> DockerRuntime:
        self._client = httpx.AsyncClient(
            transport=self._transport,
            base_url=f"http://docker/{self._config.api_version}",
            timeout=httpx.Timeout(30.0, read=None),
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "DockerRuntime must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def create(self, image: str, user: str) -> str:
        body = {
            "Image": image,
            "User": user,
            # Keep the default interpreter alive so exec has something to attach to.
            "Tty": True,
            "OpenStdin": True,
            "HostConfig": {"AutoRemove": False},
        }
        data = await self._post_json("/containers/create", json=body)
        handle = str(data["Id"])
        logger.debug("Created container %s from %s", handle[:12], image)
        return handle

    async def start(self, handle: str) -> None:
        await self._post(f"/containers/{handle}/start")

    async def exec(
        self,
        handle: str,
        argv: list[str],
        env: dict[str, str] | None = None,
    ) -> AsyncIterator[bytes]:
        body: dict[str, Any] = {
            "User": self._config.user,
            "Cmd": argv,
            "AttachStdout": True,
            "AttachStderr": True,
            "Tty": False,
        }
        if env:
            body["Env"] = [f"{key}={value}" for key, value in env.items()]
        data = await self._post_json(f"/containers/{handle}/exec", json=body)
        exec_id = data["Id"]

        async with self._http().stream(
            "POST",
            f"/exec/{exec_id}/start",
            json={"Detach": False, "Tty": False},
        ) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                yield chunk

    async def stop(self, handle: str) -> None:
        await self._post(f"/containers/{handle}/stop", params={"t": self._config.stop_timeout})

    async def remove(self, handle: str) -> None:
        response = await self._http().delete(f"/containers/{handle}", params={"force": "true"})
        # Already gone counts as removed.
        if response.status_code != 404:
            response.raise_for_status()

    async def _post(self, path: str, **kwargs: Any) -> httpx.Response:
        response = await self._http().post(path, **kwargs)
        # 304: container already in the requested state.
        if response.status_code != 304:
            response.raise_for_status()
        return response

    async def _post_json(self, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._post(path, **kwargs)
        return response.json()
