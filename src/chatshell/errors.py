"""Error taxonomy for chatshell.

Every error here is caught at the pipeline boundary and converted into a
single outbound chat message.  Nothing is retried.
"""

from __future__ import annotations

from enum import Enum


class ChatShellError(Exception):
    """Base error for all chatshell failures."""


class ConfigError(ChatShellError):
    """Configuration could not be read or validated."""


class CommandRejectedError(ChatShellError):
    """The sanitizer refused the command.  The reason is shown verbatim."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class SandboxStage(str, Enum):
    """Lifecycle step that failed."""

    CREATE = "create"
    START = "start"
    EXEC = "exec"
    TIMEOUT = "timeout"


class SandboxError(ChatShellError):
    """A sandbox lifecycle step could not complete."""

    def __init__(self, stage: SandboxStage, detail: str = "") -> None:
        self.stage = stage
        self.detail = detail
        super().__init__(f"Sandbox {stage.value} failed" + (f": {detail}" if detail else ""))


class SandboxTimeoutError(SandboxError):
    """Execution or output capture exceeded the configured timeout."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(SandboxStage.TIMEOUT, f"execution timed out after {timeout}s")


class CommandError(ChatShellError):
    """The interpreter produced output carrying the error sentinel."""

    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(output)


class ChatError(ChatShellError):
    """The chat platform rejected a request."""


class UploadError(ChatError):
    """A file upload to the chat platform failed."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Upload failed" + (f": {detail}" if detail else ""))
