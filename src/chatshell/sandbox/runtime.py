"""SandboxRuntime protocol: the container runtime the lifecycle drives."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class SandboxRuntime(Protocol):
    """Creates, runs commands in, and removes disposable environments.

    Handles are opaque strings owned by the caller between ``create()`` and
    ``remove()``.  Implementations may raise any exception; the lifecycle
    maps failures to :class:`~chatshell.errors.SandboxError`.
    """

    async def create(self, image: str, user: str) -> str:
        """Allocate an environment from *image* and return its handle."""
        ...

    async def start(self, handle: str) -> None:
        """Bring the environment to a running state."""
        ...

    def exec(
        self,
        handle: str,
        argv: list[str],
        env: dict[str, str] | None = None,
    ) -> AsyncIterator[bytes]:
        """Run *argv* and yield the combined stdout/stderr stream."""
        ...

    async def stop(self, handle: str) -> None:
        """Stop the environment."""
        ...

    async def remove(self, handle: str) -> None:
        """Delete the environment."""
        ...
