from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 60
DEFAULT_DURATION_MINUTES = 20


class Tone(str, Enum):
    calm = "calm"
    authoritative = "authoritative"
    compassionate = "compassionate"
    energising = "energising"


DEFAULT_TONE = Tone.calm


@dataclass(frozen=True, slots=True)
class Script:
    """Generated session text owned by a single account. Immutable once stored."""

    script_id: str
    owner_id: str
    title: str
    symptom_tags: tuple[str, ...]
    tone: str
    duration_minutes: int
    body: str
    created_at: datetime
    updated_at: datetime
