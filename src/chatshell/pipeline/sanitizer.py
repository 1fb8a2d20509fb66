"""CommandSanitizer: pattern-based checks on the raw command text.

Pure logic, no I/O.  The sanitizer first folds multi-line pastes into a
single sequential command, then walks the ``deny_rules`` list (first match
wins).  It is a deny-list, not a parser: both false positives and false
negatives are possible, so it must not be treated as the only barrier
between a caller and the sandbox.
"""

from __future__ import annotations

import logging
import re

from chatshell.errors import CommandRejectedError
from chatshell.pipeline.models import DenyRule, PipelineConfig

logger = logging.getLogger(__name__)

# A newline run that does not follow an opening '{', '(' or '|' and is not
# followed by a continuation pipe ends a statement.
_STATEMENT_BREAK = re.compile(r"([^{|(])(\s*\n+\s*[^|])")

_SEPARATOR = ";"

EMPTY_COMMAND = "Nothing to run"


class CommandSanitizer:
    """Validate and rewrite a raw command against a :class:`PipelineConfig`."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self._config = config or PipelineConfig()
        self._rules = [(re.compile(rule.pattern), rule) for rule in self._config.deny_rules]

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def sanitize(self, raw: str) -> str:
        """Return the command to hand to the interpreter.

        Raises:
            CommandRejectedError: When a deny rule matches.
        """
        command = self.normalize(raw)
        if not command:
            raise CommandRejectedError(EMPTY_COMMAND)

        if not self._config.allow_multiline and _SEPARATOR in command:
            command = command[: command.index(_SEPARATOR)].rstrip()

        rule = self.match(command)
        if rule is not None:
            logger.info("Rejected command (%s): %r", rule.pattern, command)
            raise CommandRejectedError(rule.reason)

        return command

    def match(self, command: str) -> DenyRule | None:
        """Return the first deny rule matching *command*, if any."""
        for pattern, rule in self._rules:
            if pattern.search(command):
                return rule
        return None

    @staticmethod
    def normalize(raw: str) -> str:
        """Turn statement-ending newlines into ``;`` separators.

        Newlines inside an open block, after a pipe, or before a pipe are
        kept so the interpreter still sees them as continuations.  Trailing
        blank lines are dropped.
        """

        def _replace(match: re.Match[str]) -> str:
            head, tail = match.group(1), match.group(2)
            if not tail.strip():
                return head
            return head + _SEPARATOR + tail

        return _STATEMENT_BREAK.sub(_replace, raw.strip())
