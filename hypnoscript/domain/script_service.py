"""Script workflows scoped to the identified account."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from .contracts import GenerateScriptInput
from .errors import GenerationError, NotFoundError, ValidationFailedError
from .script import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES, Script, Tone
from ..generation import ScriptGenerator
from ..store.base import RecordStore, utcnow

logger = logging.getLogger(__name__)


class ScriptService:
    """Generate, list, fetch, and delete scripts on behalf of their owner."""

    def __init__(
        self,
        store: RecordStore,
        generator: ScriptGenerator,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._generator = generator
        self._clock = clock

    def _default_title(self) -> str:
        return f"Session {self._clock():%Y-%m-%d}"

    @staticmethod
    def _validate(payload: GenerateScriptInput) -> tuple[list[str], Tone, int]:
        if isinstance(payload.symptom_tags, str) or not payload.symptom_tags:
            raise ValidationFailedError("symptoms must be a non-empty list")
        tags: list[str] = []
        for tag in payload.symptom_tags:
            if not isinstance(tag, str) or not tag.strip():
                raise ValidationFailedError("each symptom must be a non-empty string")
            tags.append(tag.strip())

        try:
            tone = Tone(payload.tone)
        except ValueError as exc:
            allowed = " | ".join(t.value for t in Tone)
            raise ValidationFailedError(f"tone must be {allowed}") from exc

        duration = payload.duration_minutes
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ValidationFailedError("duration must be an integer number of minutes")
        if not MIN_DURATION_MINUTES <= duration <= MAX_DURATION_MINUTES:
            raise ValidationFailedError(
                f"duration must be {MIN_DURATION_MINUTES}-{MAX_DURATION_MINUTES} minutes"
            )
        return tags, tone, duration

    def generate(self, owner_id: str, payload: GenerateScriptInput) -> Script:
        """Validate the request, generate the body, and persist the resulting script.

        Generation and persistence run one after the other without a shared
        transaction; a failure in either step leaves no script behind.
        """
        tags, tone, duration = self._validate(payload)
        title = (payload.title or "").strip() or self._default_title()

        try:
            body = self._generator(tags, tone.value, duration)
        except Exception as exc:
            logger.exception("script generation failed for account %s", owner_id)
            raise GenerationError("script generation failed") from exc
        if not body:
            raise GenerationError("script generation returned no text")

        script = self._store.create_script(
            owner_id=owner_id,
            title=title,
            symptom_tags=tags,
            tone=tone.value,
            duration_minutes=duration,
            body=body,
        )
        logger.info("account %s created script %s", owner_id, script.script_id)
        return script

    def list(self, owner_id: str) -> list[Script]:
        return self._store.list_scripts(owner_id)

    def get(self, owner_id: str, script_id: str) -> Script:
        script = self._store.get_script(owner_id, script_id)
        if script is None:
            raise NotFoundError("script not found")
        return script

    def delete(self, owner_id: str, script_id: str) -> None:
        if not self._store.delete_script(owner_id, script_id):
            raise NotFoundError("script not found")
        logger.info("account %s deleted script %s", owner_id, script_id)
