"""Data models for the chat adapters."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChatDestination(BaseModel):
    """Where a result is delivered."""

    model_config = {"frozen": True}

    channel: str = Field(..., description="Channel, DM or user identifier.")
    shared: bool = Field(
        default=False,
        description="True for a shared channel context (the platform surfaces upload links itself).",
    )


class UploadedFile(BaseModel):
    """Result of a successful file upload."""

    permalink: str
    title: str = ""

    def as_link(self) -> str:
        """Render as a chat markup link ``<url|title>``."""
        return f"<{self.permalink}|{self.title or self.permalink}>"
