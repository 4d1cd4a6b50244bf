"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .script import DEFAULT_DURATION_MINUTES, DEFAULT_TONE


@dataclass(slots=True)
class GenerateScriptInput:
    """Caller-supplied parameters for a new script, before validation."""

    symptom_tags: Sequence[str] = field(default_factory=list)
    tone: str = DEFAULT_TONE.value
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    title: str | None = None
