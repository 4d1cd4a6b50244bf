"""Script DTOs exchanged over HTTP."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from ..domain.script import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_TONE,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    Script,
    Tone,
)


class GenerateScriptRequest(BaseModel):
    symptoms: list[str] = Field(..., min_length=1)
    tone: Tone = DEFAULT_TONE
    duration: int = Field(DEFAULT_DURATION_MINUTES, ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES)
    title: str | None = None

    @field_validator("symptoms")
    @classmethod
    def _symptoms_not_blank(cls, value: list[str]) -> list[str]:
        stripped = [item.strip() for item in value]
        if any(not item for item in stripped):
            raise ValueError("each symptom must be a non-empty string")
        return stripped

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class ScriptOut(BaseModel):
    script_id: str
    owner_id: str
    title: str
    symptom_tags: list[str]
    tone: str
    duration_minutes: int
    body: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, script: Script) -> "ScriptOut":
        return cls(
            script_id=script.script_id,
            owner_id=script.owner_id,
            title=script.title,
            symptom_tags=list(script.symptom_tags),
            tone=script.tone,
            duration_minutes=script.duration_minutes,
            body=script.body,
            created_at=script.created_at,
            updated_at=script.updated_at,
        )


class ScriptListResponse(BaseModel):
    scripts: list[ScriptOut]
    total: int


class MessageResponse(BaseModel):
    message: str
