"""The record store contract shared by every storage backing."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

from ..domain.account import Account
from ..domain.script import Script


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class RecordStore(Protocol):
    """
    Sole owner of durable account and script state.

    Implementations must:
    - hand out immutable value objects, never live references;
    - make each call atomic with respect to other calls on the same record;
    - report "not found" as ``None``/``False`` and reserve ``StorageError``
      for failures of the backing medium.
    """

    def create_account(self, email: str, credential_hash: str) -> Account:
        """Persist a new account; raise ``ConflictError`` if the normalized email is taken."""

        ...

    def find_account_by_email(self, email: str) -> Optional[Account]:
        """Return the account registered under the normalized ``email``."""

        ...

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        """Return the account with the given ID, or None if not found."""

        ...

    def delete_account(self, account_id: str) -> bool:
        """Remove the account together with all of its scripts in one operation."""

        ...

    def create_script(
        self,
        owner_id: str,
        title: str,
        symptom_tags: Sequence[str],
        tone: str,
        duration_minutes: int,
        body: str,
    ) -> Script:
        """Persist a script for ``owner_id``; raise ``NotFoundError`` if the owner is unknown."""

        ...

    def list_scripts(self, owner_id: str) -> list[Script]:
        """Return the owner's scripts, most recently created first."""

        ...

    def get_script(self, owner_id: str, script_id: str) -> Optional[Script]:
        """
        Return the script only if it exists and belongs to ``owner_id``.

        Missing and foreign scripts are indistinguishable.
        """

        ...

    def delete_script(self, owner_id: str, script_id: str) -> bool:
        """Return True iff a script matching both ``script_id`` and ``owner_id`` was removed."""

        ...
