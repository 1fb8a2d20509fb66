"""SandboxLifecycle: one disposable environment for one command.

``Created -> Started -> Executing -> TornDown``.  Teardown (stop, then
remove) runs in a ``finally`` block on every exit path and its failures are
logged and discarded: by then the command result is already decided.
"""

from __future__ import annotations

import asyncio
import logging
import struct
from collections.abc import Awaitable
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from chatshell.errors import SandboxError, SandboxStage, SandboxTimeoutError
from chatshell.sandbox.models import ExecutionResult, SandboxConfig
from chatshell.utils.telemetry import ATTR_SANDBOX_STAGE, ATTR_SANDBOX_TRUNCATED, get_tracer

if TYPE_CHECKING:
    from chatshell.sandbox.runtime import SandboxRuntime

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_T = TypeVar("_T")

HEADER_SIZE = 8
_STDERR = 2


class SandboxState(str, Enum):
    NEW = "new"
    CREATED = "created"
    STARTED = "started"
    EXECUTING = "executing"
    TORN_DOWN = "torn_down"


def demultiplex(raw: bytes) -> tuple[bytes, bool]:
    """Strip the engine's stream framing from *raw*.

    Each frame is ``[type, 0, 0, 0, size(4, big-endian)]`` followed by
    *size* payload bytes.  When *raw* does not open with a valid header the
    first 8 bytes are dropped and the rest is taken as-is.

    Returns the payload and whether any stderr frame was seen.
    """
    if len(raw) < HEADER_SIZE or not _is_header(raw):
        return raw[HEADER_SIZE:], False

    payload = bytearray()
    saw_stderr = False
    offset = 0
    while offset + HEADER_SIZE <= len(raw) and _is_header(raw, offset):
        stream_type = raw[offset]
        (size,) = struct.unpack_from(">I", raw, offset + 4)
        start = offset + HEADER_SIZE
        payload += raw[start : start + size]
        saw_stderr = saw_stderr or stream_type == _STDERR
        offset = start + size
    if len(raw) - offset >= HEADER_SIZE:
        # Unframed trailing bytes. A shorter remainder is a header cut off
        # at the output cap and is dropped.
        payload += raw[offset:]
    return bytes(payload), saw_stderr


def _is_header(raw: bytes, offset: int = 0) -> bool:
    return raw[offset] in (0, 1, 2) and raw[offset + 1 : offset + 4] == b"\x00\x00\x00"


class SandboxLifecycle:
    """Run exactly one command in a fresh environment from *runtime*.

    Instances are single-use; the handle is never shared with another
    request.
    """

    def __init__(self, runtime: SandboxRuntime, config: SandboxConfig | None = None) -> None:
        self._runtime = runtime
        self._config = config or SandboxConfig()
        self._handle: str | None = None
        self.state = SandboxState.NEW

    @property
    def handle(self) -> str | None:
        return self._handle

    async def run(self, command: str) -> ExecutionResult:
        """Create, start, execute *command*, capture output, tear down.

        Raises:
            SandboxError: When create, start or exec fails.
            SandboxTimeoutError: When exec and capture exceed ``timeout``.
        """
        if self.state is not SandboxState.NEW:
            msg = "SandboxLifecycle instances run a single command"
            raise RuntimeError(msg)

        cfg = self._config
        with _tracer.start_as_current_span("chatshell.sandbox.run") as span:
            try:
                self._handle = await self._step(SandboxStage.CREATE, self._runtime.create(cfg.image, cfg.user))
                self.state = SandboxState.CREATED
                await self._step(SandboxStage.START, self._runtime.start(self._handle))
                self.state = SandboxState.STARTED

                self.state = SandboxState.EXECUTING
                logger.debug("Executing in %s: %r", self._handle[:12], command)
                try:
                    result = await asyncio.wait_for(
                        self._capture(self._handle, cfg.build_argv(command)),
                        timeout=cfg.timeout,
                    )
                except TimeoutError:
                    raise SandboxTimeoutError(cfg.timeout)
                span.set_attribute(ATTR_SANDBOX_TRUNCATED, result.truncated)
                return result
            except SandboxError as exc:
                span.set_attribute(ATTR_SANDBOX_STAGE, exc.stage.value)
                raise
            finally:
                await self._teardown()

    async def _capture(self, handle: str, argv: list[str]) -> ExecutionResult:
        """Read the exec stream to end-of-stream, bounded by ``max_output_bytes``."""
        limit = self._config.max_output_bytes + HEADER_SIZE
        chunks: list[bytes] = []
        received = 0
        truncated = False

        stream = self._runtime.exec(handle, argv)
        try:
            async for chunk in stream:
                chunks.append(chunk)
                received += len(chunk)
                if received > limit:
                    truncated = True
                    break
        except Exception as exc:
            raise SandboxError(SandboxStage.EXEC, str(exc)) from exc
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        raw = b"".join(chunks)
        if truncated:
            raw = raw[:limit]
            logger.warning("Output exceeded %d bytes; truncated", self._config.max_output_bytes)
        payload, saw_stderr = demultiplex(raw)
        return ExecutionResult(raw_output=payload, exited_with_error=saw_stderr, truncated=truncated)

    async def _teardown(self) -> None:
        """Stop then remove the environment, discarding failures."""
        handle = self._handle
        if handle is not None:
            for name in ("stop", "remove"):
                try:
                    await getattr(self._runtime, name)(handle)
                except Exception as exc:
                    logger.warning("Sandbox teardown (%s) failed for %s: %s", name, handle[:12], exc)
        self.state = SandboxState.TORN_DOWN

    @staticmethod
    async def _step(stage: SandboxStage, awaitable: Awaitable[_T]) -> _T:
        try:
            return await awaitable
        except Exception as exc:
            raise SandboxError(stage, str(exc)) from exc
