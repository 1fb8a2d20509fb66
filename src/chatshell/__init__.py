"""chatshell: run chat-submitted commands in disposable sandboxes."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from chatshell.pipeline.pipeline import CommandPipeline as CommandPipeline

_PIPELINE_EXPORTS = {
    "CommandPipeline": "chatshell.pipeline.pipeline",
}


def __getattr__(name: str) -> object:
    module_path = _PIPELINE_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'chatshell' has no attribute {name!r}")
