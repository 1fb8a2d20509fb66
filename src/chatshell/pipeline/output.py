"""OutputProcessor: turn captured interpreter bytes into chat-ready text."""

from __future__ import annotations

import codecs
import logging
import re

from chatshell.pipeline.models import PipelineConfig, ProcessedOutput, SaveIntent

logger = logging.getLogger(__name__)

# Port of the widely used ``ansi-regex`` pattern: OSC sequences terminated by
# BEL, and CSI / single-character escapes (colours, cursor movement,
# bracketed-paste toggles).
ANSI_PATTERN = re.compile(
    r"[\x1b\x9b][\[\]()#;?]*"
    r"(?:"
    r"(?:(?:(?:;[-a-zA-Z\d/#&.:=?%@~_]+)*|[a-zA-Z\d]+(?:;[-a-zA-Z\d/#&.:=?%@~_]*)*)?\x07)"
    r"|(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PR-TZcf-nq-uy=><~])"
    r")"
)

ERROR_SENTINEL = "Error: "
TRUNCATION_MARKER = "\n… [output truncated]"


def strip_ansi(text: str) -> str:
    """Remove terminal control sequences from *text*."""
    return ANSI_PATTERN.sub("", text)


class OutputProcessor:
    """Clean output and refine save filenames."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self._config = config or PipelineConfig()
        self._id_patterns = {
            hint: re.compile(pattern, re.MULTILINE)
            for hint, pattern in self._config.identifier_patterns.items()
        }

    def process(self, raw: bytes, *, truncated: bool = False) -> ProcessedOutput:
        if truncated:
            # The cap can split a multi-byte character; leave the partial tail out.
            text = codecs.getincrementaldecoder("utf-8")(errors="replace").decode(raw)
        else:
            text = raw.decode("utf-8", errors="replace")
        if self._config.strip_ansi:
            text = strip_ansi(text)
        if truncated:
            text = text.rstrip() + TRUNCATION_MARKER
        return ProcessedOutput(text=text, looks_like_error=text.startswith(ERROR_SENTINEL))

    def refine_filename(self, intent: SaveIntent, text: str, resource_hint: str | None) -> SaveIntent:
        """Append a labelled identifier found in *text* to the filename.

        Best-effort: returns *intent* unchanged when the hint has no pattern
        or nothing matches.
        """
        if not intent.persist or resource_hint is None:
            return intent
        pattern = self._id_patterns.get(resource_hint)
        if pattern is None:
            return intent
        match = pattern.search(text)
        if match is None:
            return intent
        identifier = match.group(1)
        logger.debug("Found %s identifier %s", resource_hint, identifier)
        return intent.model_copy(update={"filename": f"{resource_hint}-{identifier}"})
