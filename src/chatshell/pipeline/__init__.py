"""Command execution pipeline: sanitize, parse, run, clean, deliver."""

from chatshell.pipeline.dispatcher import ResultDispatcher
from chatshell.pipeline.models import (
    CommandRequest,
    DenyRule,
    DispatchOutcome,
    InlineOutcome,
    PipelineConfig,
    PreparedCommand,
    ProcessedOutput,
    SaveIntent,
    UploadedOutcome,
    UploadFailedOutcome,
)
from chatshell.pipeline.output import OutputProcessor, strip_ansi
from chatshell.pipeline.pipeline import CommandPipeline, prepare_command
from chatshell.pipeline.sanitizer import CommandSanitizer
from chatshell.pipeline.save_intent import SaveIntentParser

__all__ = [
    "CommandPipeline",
    "CommandRequest",
    "CommandSanitizer",
    "DenyRule",
    "DispatchOutcome",
    "InlineOutcome",
    "OutputProcessor",
    "PipelineConfig",
    "PreparedCommand",
    "ProcessedOutput",
    "ResultDispatcher",
    "SaveIntent",
    "SaveIntentParser",
    "UploadFailedOutcome",
    "UploadedOutcome",
    "prepare_command",
    "strip_ansi",
]
