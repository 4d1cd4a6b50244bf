"""Text generation providers for hypnotherapy session scripts.

A provider is any callable ``(symptom_tags, tone, duration_minutes) -> str``.
It must not touch the record store; swapping providers never changes the
service contract.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

ScriptGenerator = Callable[[Sequence[str], str, int], str]

WORDS_PER_MINUTE = 130


def stub_generate(symptom_tags: Sequence[str], tone: str, duration_minutes: int) -> str:
    """Render a fixed markdown session template for the requested parameters."""
    symptom_list = ", ".join(symptom_tags)
    focus = symptom_tags[0] if symptom_tags else "the challenges you face"
    word_count = duration_minutes * WORDS_PER_MINUTE

    return f"""# Hypnotherapy Script: {tone.capitalize()} Approach
*Approx. {duration_minutes} minutes | Generated for: {symptom_list}*

---

## Induction

Close your eyes and take a slow, deep breath in... and out.
With every breath, you feel your body becoming more relaxed, more at ease.
Let go of any tension you may be holding in your shoulders... your jaw... your hands.

You are safe here. There is nothing you need to do except breathe and listen.

---

## Deepening

As I count from 10 to 1, you will drift deeper into a state of calm, focused relaxation.

10... 9... each number takes you deeper...
8... 7... your thoughts slow, like leaves floating on a gentle stream...
6... 5... halfway there, feeling wonderfully heavy and peaceful...
4... 3... almost there now...
2... 1... completely relaxed, completely at ease.

---

## Therapeutic Suggestions ({symptom_list})

Your mind is remarkably capable of healing itself.
Every session strengthens your ability to manage {focus}.
You are calm, in control, and growing stronger each day.

---

## Awakening

In a moment, I will count from 1 to 5 and you will return, fully alert, refreshed, and positive.

1... beginning to return...
2... aware of the room around you...
3... feeling energised...
4... almost there...
5... eyes open, fully awake and feeling wonderful.

---

*Script length: ~{word_count} words | Tone: {tone}*"""


PROVIDERS: dict[str, ScriptGenerator] = {
    "stub": stub_generate,
}


def get_generator(provider: str) -> ScriptGenerator:
    """Return the generator registered under ``provider``, defaulting to the stub."""
    generator = PROVIDERS.get(provider)
    if generator is None:
        logger.warning("unknown generation provider %r, using stub", provider)
        return stub_generate
    return generator
