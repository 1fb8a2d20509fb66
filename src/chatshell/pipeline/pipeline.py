"""CommandPipeline: raw chat text in, exactly one chat message or file out.

Control flow::

    raw text -> CommandSanitizer -> SaveIntentParser -> SandboxLifecycle
             -> OutputProcessor -> ResultDispatcher -> ChatClient

Every failure is converted into a single inline message at this boundary;
nothing is retried and nothing escapes to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chatshell.errors import CommandError, CommandRejectedError, SandboxError
from chatshell.pipeline.dispatcher import ResultDispatcher, code_block
from chatshell.pipeline.models import (
    CommandRequest,
    DispatchOutcome,
    InlineOutcome,
    PipelineConfig,
    PreparedCommand,
    ProcessedOutput,
)
from chatshell.pipeline.output import OutputProcessor
from chatshell.pipeline.sanitizer import CommandSanitizer
from chatshell.pipeline.save_intent import SaveIntentParser
from chatshell.sandbox.lifecycle import SandboxLifecycle
from chatshell.sandbox.models import SandboxConfig
from chatshell.utils.telemetry import (
    ATTR_CALLER,
    ATTR_OUTCOME,
    ATTR_PERSIST,
    ATTR_REJECTED,
    ATTR_RESOURCE_HINT,
    get_tracer,
)

if TYPE_CHECKING:
    from opentelemetry.trace import Span

    from chatshell.chat.client import ChatClient
    from chatshell.chat.models import ChatDestination
    from chatshell.sandbox.runtime import SandboxRuntime

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

UNSUPPORTED_SAVE = "Output can only be saved with a final 'to FORMAT | save [NAME[.EXT]]' stage"


class CommandPipeline:
    """Run chat commands, one fresh sandbox per request.

    The pipeline holds no per-request state, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        runtime: SandboxRuntime,
        chat: ChatClient,
        *,
        config: PipelineConfig | None = None,
        sandbox_config: SandboxConfig | None = None,
        parser: SaveIntentParser | None = None,
    ) -> None:
        self._runtime = runtime
        self._chat = chat
        self._config = config or PipelineConfig()
        self._sandbox_config = sandbox_config or SandboxConfig()
        self._sanitizer = CommandSanitizer(self._config)
        self._parser = parser or SaveIntentParser()
        self._processor = OutputProcessor(self._config)
        self._dispatcher = ResultDispatcher(chat, self._config)

    @property
    def config(self) -> PipelineConfig:
        return self._config

    async def run(self, request: CommandRequest) -> DispatchOutcome:
        """Execute *request* and deliver its result to ``request.destination``."""
        with _tracer.start_as_current_span("chatshell.pipeline.run") as span:
            span.set_attribute(ATTR_CALLER, request.caller_id)
            try:
                outcome = await self._execute(request, span)
            except CommandRejectedError as exc:
                span.set_attribute(ATTR_REJECTED, True)
                outcome = await self._report(request.destination, f"```{exc.reason}```")
            except CommandError as exc:
                logger.info("Command failed: %s", exc.output.strip())
                outcome = await self._report(request.destination, _escaped_block(exc.output))
            except SandboxError as exc:
                logger.error("Sandbox failure for %r: %s", request.raw_text, exc)
                message = f"{self._config.sandbox_failed_message} ({exc.stage.value})"
                outcome = await self._report(request.destination, _escaped_block(message))
            except Exception as exc:
                logger.exception("Unexpected failure for %r", request.raw_text)
                outcome = await self._report(request.destination, _escaped_block(str(exc)))
            span.set_attribute(ATTR_OUTCOME, outcome.kind)
            return outcome

    async def _execute(self, request: CommandRequest, span: Span) -> DispatchOutcome:
        prepared = prepare_command(request.raw_text, self._sanitizer, self._parser)
        hint, intent = prepared.resource_hint, prepared.intent
        if hint is not None:
            span.set_attribute(ATTR_RESOURCE_HINT, hint)
        span.set_attribute(ATTR_PERSIST, prepared.persist)

        result = await SandboxLifecycle(self._runtime, self._sandbox_config).run(prepared.command)

        output = self._processor.process(result.raw_output, truncated=result.truncated)
        if output.looks_like_error:
            raise CommandError(output.text)
        if result.exited_with_error:
            logger.debug("Interpreter wrote to stderr without the error sentinel")

        if intent is not None:
            intent = self._processor.refine_filename(intent, output.text, hint)
        return await self._dispatcher.dispatch(intent, output, request.destination)

    async def _report(self, destination: ChatDestination, text: str) -> InlineOutcome:
        """Send a failure message; a failed send is logged, not raised."""
        try:
            await self._chat.send_message(destination, text)
        except Exception:
            logger.exception("Could not deliver failure message to %s", destination.channel)
        return InlineOutcome(text=text)


def _escaped_block(text: str) -> str:
    return code_block(ProcessedOutput(text=text).escaped.rstrip())


def prepare_command(
    raw_text: str,
    sanitizer: CommandSanitizer,
    parser: SaveIntentParser,
) -> PreparedCommand:
    """Sanitize *raw_text*, resolve its resource hint and save intent.

    Resource commands get the configured entry-command prefix.  A trailing
    ``| save ...`` is stripped because the pipeline uploads the output
    itself.

    Raises:
        CommandRejectedError: When the sanitizer refuses the command or a
            save stage remains that cannot be handled here.
    """
    config = sanitizer.config
    command = sanitizer.sanitize(raw_text)

    hint = parser.resource_hint(command, config.resource_hints)
    prefix = config.command_prefix
    if hint is not None and prefix and not command.startswith(prefix):
        command = f"{prefix} {command}"

    intent = parser.parse(command, hint)
    if intent is not None and intent.persist:
        command = parser.strip_save(command)
    if parser.has_save_stage(command):
        logger.info("Rejected command (unsupported save): %r", command)
        raise CommandRejectedError(UNSUPPORTED_SAVE)
    return PreparedCommand(command=command, resource_hint=hint, intent=intent)
