from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def normalize_email(email: str) -> str:
    """Return the canonical login key for ``email``."""
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class Account:
    """Registered user identity; ``credential_hash`` never leaves the service layer."""

    account_id: str
    email: str
    credential_hash: str
    created_at: datetime
