"""Data models for the command execution pipeline."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator

from chatshell.chat.models import ChatDestination

ESCAPES = (("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"))


class CommandRequest(BaseModel):
    """One inbound command invocation."""

    model_config = {"frozen": True}

    raw_text: str
    caller_id: str = ""
    destination: ChatDestination


class SaveIntent(BaseModel):
    """Output-format conversion and optional persist-as-file request."""

    output_ext: str
    persist: bool = False
    filename: str = ""
    file_ext: str = ""

    @model_validator(mode="after")
    def _persist_needs_name(self) -> SaveIntent:
        if self.persist and not (self.filename and self.file_ext):
            msg = "persisted intent requires filename and file_ext"
            raise ValueError(msg)
        return self

    @property
    def full_filename(self) -> str:
        return f"{self.filename}.{self.file_ext}"


class ProcessedOutput(BaseModel):
    """Cleaned interpreter output."""

    text: str
    looks_like_error: bool = False

    @property
    def escaped(self) -> str:
        """Text with markup-significant characters escaped, ampersand first."""
        out = self.text
        for char, entity in ESCAPES:
            out = out.replace(char, entity)
        return out


class InlineOutcome(BaseModel):
    kind: Literal["inline"] = "inline"
    text: str


class UploadedOutcome(BaseModel):
    kind: Literal["uploaded"] = "uploaded"
    permalink: str
    title: str = ""


class UploadFailedOutcome(BaseModel):
    kind: Literal["upload_failed"] = "upload_failed"


DispatchOutcome = Annotated[
    InlineOutcome | UploadedOutcome | UploadFailedOutcome,
    Field(discriminator="kind"),
]


class DenyRule(BaseModel):
    """A pattern that rejects a command, with the message shown to the caller."""

    pattern: str = Field(..., description="Regular expression searched in the command.")
    reason: str = Field(..., description="Rejection message surfaced verbatim.")


def _default_deny_rules() -> list[DenyRule]:
    return [
        DenyRule(pattern=r"\$env", reason="Using environment variables is not supported"),
        DenyRule(pattern=r"\.env\.nu", reason="Not allowed to access .env.nu files"),
        DenyRule(pattern=r"\^\w+", reason="Not allowed to use ^ core override commands"),
    ]


class PipelineConfig(BaseModel):
    """Switches that used to be separate copies of the command handler."""

    strip_ansi: bool = Field(default=True, description="Remove terminal control sequences from output.")
    resource_hints: set[str] = Field(
        default_factory=set,
        description="Leading command tokens recognised as resources.",
    )
    command_prefix: str | None = Field(
        default=None,
        description="Entry command prepended to resource commands that lack it.",
    )
    suppress_link_in_channel: bool = Field(
        default=True,
        description="Skip the permalink message for uploads to shared channels.",
    )
    allow_multiline: bool = Field(
        default=True,
        description="Keep every statement of a multi-line command; otherwise only the first.",
    )
    deny_rules: list[DenyRule] = Field(default_factory=_default_deny_rules)
    identifier_patterns: dict[str, str] = Field(
        default_factory=lambda: {"invoices": r'"?DocumentNumber"?:?\s*"?(\d+)"?'},
        description="Resource hint -> regex with one numeric group, used to refine save filenames.",
    )
    upload_failed_message: str = "Failed to upload file"
    sandbox_failed_message: str = "Command could not be executed"


class PreparedCommand(BaseModel):
    """A sanitized command ready for the sandbox, with its save intent."""

    command: str
    resource_hint: str | None = None
    intent: SaveIntent | None = None

    @property
    def persist(self) -> bool:
        return self.intent is not None and self.intent.persist
