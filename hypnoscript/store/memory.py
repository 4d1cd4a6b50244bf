"""In-process record store backing."""

from __future__ import annotations

import itertools
import logging
from datetime import datetime
from threading import RLock
from typing import Callable, Optional, Sequence

from ..domain.account import Account, normalize_email
from ..domain.errors import ConflictError, NotFoundError
from ..domain.script import Script
from .base import new_id, utcnow

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """
    Volatile implementation of `RecordStore`.

    State lives in process-local dicts behind a single re-entrant lock, so
    every operation is atomic with respect to every other one. Nothing
    survives a restart.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        """Initialise empty account and script tables and the lock guarding them."""
        self._clock = clock
        self._id_factory = id_factory
        self._lock = RLock()
        self._accounts: dict[str, Account] = {}
        self._account_ids_by_email: dict[str, str] = {}
        # script_id -> (insertion sequence, script)
        self._scripts: dict[str, tuple[int, Script]] = {}
        self._sequence = itertools.count()

    def create_account(self, email: str, credential_hash: str) -> Account:
        """Persist a new account under its normalized email, rejecting duplicates."""
        normalized = normalize_email(email)
        with self._lock:
            if normalized in self._account_ids_by_email:
                raise ConflictError("email already registered")
            account = Account(
                account_id=self._id_factory(),
                email=normalized,
                credential_hash=credential_hash,
                created_at=self._clock(),
            )
            self._accounts[account.account_id] = account
            self._account_ids_by_email[normalized] = account.account_id
        return account

    def find_account_by_email(self, email: str) -> Optional[Account]:
        """Return the account registered under the normalized ``email``."""
        with self._lock:
            account_id = self._account_ids_by_email.get(normalize_email(email))
            if account_id is None:
                return None
            return self._accounts[account_id]

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        """Return the account with the given ID, or None if not found."""
        with self._lock:
            return self._accounts.get(account_id)

    def delete_account(self, account_id: str) -> bool:
        """Remove the account and every script it owns under one lock acquisition."""
        with self._lock:
            account = self._accounts.pop(account_id, None)
            if account is None:
                return False
            del self._account_ids_by_email[account.email]
            owned = [sid for sid, (_, s) in self._scripts.items() if s.owner_id == account_id]
            for script_id in owned:
                del self._scripts[script_id]
        logger.debug("deleted account %s with %d scripts", account_id, len(owned))
        return True

    def create_script(
        self,
        owner_id: str,
        title: str,
        symptom_tags: Sequence[str],
        tone: str,
        duration_minutes: int,
        body: str,
    ) -> Script:
        """Persist a script for an existing owner."""
        with self._lock:
            if owner_id not in self._accounts:
                raise NotFoundError("account not found")
            now = self._clock()
            script = Script(
                script_id=self._id_factory(),
                owner_id=owner_id,
                title=title,
                symptom_tags=tuple(symptom_tags),
                tone=tone,
                duration_minutes=duration_minutes,
                body=body,
                created_at=now,
                updated_at=now,
            )
            self._scripts[script.script_id] = (next(self._sequence), script)
        return script

    def list_scripts(self, owner_id: str) -> list[Script]:
        """Return the owner's scripts, newest first, ties broken by insertion order."""
        with self._lock:
            owned = [entry for entry in self._scripts.values() if entry[1].owner_id == owner_id]
        owned.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return [script for _, script in owned]

    def get_script(self, owner_id: str, script_id: str) -> Optional[Script]:
        """Return the script only when it belongs to ``owner_id``."""
        with self._lock:
            entry = self._scripts.get(script_id)
        if entry is None or entry[1].owner_id != owner_id:
            return None
        return entry[1]

    def delete_script(self, owner_id: str, script_id: str) -> bool:
        """Remove the script if it belongs to ``owner_id``; report whether anything was removed."""
        with self._lock:
            entry = self._scripts.get(script_id)
            if entry is None or entry[1].owner_id != owner_id:
                return False
            del self._scripts[script_id]
            return True
