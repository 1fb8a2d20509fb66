"""Data models for the sandbox subsystem."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

COMMAND_PLACEHOLDER = "{command}"


class SandboxConfig(BaseModel):
    """Configuration for the disposable execution environment."""

    image: str = Field(default="nushell/nu", description="Runtime image every sandbox is created from.")
    user: str = Field(default="nushell", description="Unprivileged identity the interpreter runs as.")
    exec_template: list[str] = Field(
        default_factory=lambda: ["nu", "-c", COMMAND_PLACEHOLDER],
        description="Interpreter argv; the '{command}' element is replaced by the command.",
    )
    timeout: float = Field(default=60.0, gt=0, description="Max seconds for exec plus output capture.")
    max_output_bytes: int = Field(default=1024 * 1024, gt=0, description="Output beyond this is truncated.")
    stop_timeout: int = Field(default=1, ge=0, description="Seconds Docker waits before killing on stop.")
    docker_socket: str = Field(default="/var/run/docker.sock", description="Docker Engine API socket.")
    api_version: str = Field(default="v1.43", description="Docker Engine API version prefix.")

    @field_validator("exec_template")
    @classmethod
    def _single_placeholder(cls, value: list[str]) -> list[str]:
        if value.count(COMMAND_PLACEHOLDER) != 1:
            msg = f"exec_template must contain exactly one {COMMAND_PLACEHOLDER!r} element"
            raise ValueError(msg)
        return value

    def build_argv(self, command: str) -> list[str]:
        """Return the interpreter argv with *command* as a single argument."""
        return [command if part == COMMAND_PLACEHOLDER else part for part in self.exec_template]


class ExecutionResult(BaseModel):
    """Captured output of one sandboxed command."""

    raw_output: bytes = Field(default=b"", description="Demultiplexed stdout and stderr bytes.")
    exited_with_error: bool = Field(default=False, description="Whether the interpreter wrote to stderr.")
    truncated: bool = Field(default=False, description="Whether output exceeded max_output_bytes.")
