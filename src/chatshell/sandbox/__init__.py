"""Sandbox subsystem: one disposable container per command."""

from chatshell.sandbox.docker_runtime import DockerRuntime
from chatshell.sandbox.lifecycle import SandboxLifecycle, SandboxState, demultiplex
from chatshell.sandbox.models import ExecutionResult, SandboxConfig
from chatshell.sandbox.runtime import SandboxRuntime

__all__ = [
    "DockerRuntime",
    "ExecutionResult",
    "SandboxConfig",
    "SandboxLifecycle",
    "SandboxRuntime",
    "SandboxState",
    "demultiplex",
]
