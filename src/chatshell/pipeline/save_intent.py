"""SaveIntentParser: detect a trailing ``to <format> | save [name[.ext]]``."""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable, Iterable

from chatshell.pipeline.models import SaveIntent

_FLAGS = r"(?:\s+--?[\w-]+)*"
_SAVE_SUFFIX = re.compile(
    r"(?:^|[\s|])to\s+(\w+)"
    r"(?:\s*\|\s*(save)" + _FLAGS + r"(?:\s+(\w[\w-]*)(?:\.(\w+)[^\s|]*)?)?" + _FLAGS + r")?$"
)
# Any pipeline stage that invokes the interpreter's own `save`.
_SAVE_STAGE = re.compile(r"(?:^|[|;])\s*save\b")
_LEADING_TOKEN = re.compile(r"^\s*(\w+)")


def _unique_token() -> str:
    return uuid.uuid4().hex[:12]


class SaveIntentParser:
    """Parse the output-format and save directive at the end of a command.

    The interpreter's own ``save`` is never run: when a save stage is
    present the caller strips it (see :meth:`strip_save`) and the pipeline
    uploads the output itself.
    """

    def __init__(self, token_factory: Callable[[], str] = _unique_token) -> None:
        self._token_factory = token_factory

    def parse(self, command: str, resource_hint: str | None = None) -> SaveIntent | None:
        """Return the :class:`SaveIntent` for *command*, or ``None`` for plain text."""
        match = _SAVE_SUFFIX.search(command.strip())
        if match is None:
            return None

        output_ext, save, name, ext = match.group(1, 2, 3, 4)
        if save is None:
            return SaveIntent(output_ext=output_ext)

        return SaveIntent(
            output_ext=output_ext,
            persist=True,
            filename=name or resource_hint or self._token_factory(),
            file_ext=ext or output_ext,
        )

    @staticmethod
    def strip_save(command: str) -> str:
        """Drop the final ``| save ...`` stage from *command*."""
        return command[: command.rindex("|")].rstrip()

    @staticmethod
    def has_save_stage(command: str) -> bool:
        """Return whether *command* still calls the interpreter's ``save``."""
        return _SAVE_STAGE.search(command) is not None

    @staticmethod
    def resource_hint(command: str, known: Iterable[str]) -> str | None:
        """Return the leading token of *command* when it names a known resource."""
        match = _LEADING_TOKEN.match(command)
        if match is None:
            return None
        token = match.group(1)
        return token if token in set(known) else None
