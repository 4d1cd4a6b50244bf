"""SQLite-backed record store."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Callable, Iterator, Optional, Sequence

from ..domain.account import Account, normalize_email
from ..domain.errors import ConflictError, NotFoundError, StorageError
from ..domain.script import Script
from .base import new_id, utcnow

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        account_id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        credential_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS scripts (
        script_id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL REFERENCES accounts (account_id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        symptom_tags TEXT NOT NULL,
        tone TEXT NOT NULL,
        duration_minutes INTEGER NOT NULL,
        body TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_scripts_owner_created
    ON scripts (owner_id, created_at)
    """,
)

_ACCOUNT_COLUMNS = "account_id, email, credential_hash, created_at"
_SCRIPT_COLUMNS = (
    "script_id, owner_id, title, symptom_tags, tone, duration_minutes, body, created_at, updated_at"
)


def _encode_timestamp(value: datetime) -> str:
    # fixed width so lexical order in SQL matches chronological order
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _decode_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SqliteRecordStore:
    """
    Durable implementation of `RecordStore` on an SQLite file.

    The database runs in WAL mode so readers never block on the writer;
    writers are additionally serialized in-process by a lock. Each call opens
    its own short-lived connection and commits before returning.
    """

    def __init__(
        self,
        db_path: str,
        *,
        busy_timeout: float = 5.0,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._db_path = db_path
        self._busy_timeout = busy_timeout
        self._clock = clock
        self._id_factory = id_factory
        self._write_lock = Lock()
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._busy_timeout)
        except sqlite3.Error as exc:
            raise StorageError("record store unavailable") from exc
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("sqlite operation failed on %s", self._db_path)
            raise StorageError("record store operation failed") from exc
        finally:
            conn.close()

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        with self._write_lock:
            with self._connect() as conn:
                yield conn

    def _ensure_schema(self) -> None:
        with self._write() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            for statement in _SCHEMA:
                conn.execute(statement)

    @staticmethod
    def _to_account(row: tuple) -> Account:
        return Account(
            account_id=row[0],
            email=row[1],
            credential_hash=row[2],
            created_at=_decode_timestamp(row[3]),
        )

    @staticmethod
    def _to_script(row: tuple) -> Script:
        return Script(
            script_id=row[0],
            owner_id=row[1],
            title=row[2],
            symptom_tags=tuple(json.loads(row[3])),
            tone=row[4],
            duration_minutes=int(row[5]),
            body=row[6],
            created_at=_decode_timestamp(row[7]),
            updated_at=_decode_timestamp(row[8]),
        )

    def create_account(self, email: str, credential_hash: str) -> Account:
        normalized = normalize_email(email)
        try:
            with self._write() as conn:
                taken = conn.execute(
                    "SELECT 1 FROM accounts WHERE email = ?", (normalized,)
                ).fetchone()
                if taken:
                    # checked before an id is drawn, as the in-memory store does
                    raise ConflictError("email already registered")
                account = Account(
                    account_id=self._id_factory(),
                    email=normalized,
                    credential_hash=credential_hash,
                    created_at=self._clock(),
                )
                conn.execute(
                    f"INSERT INTO accounts ({_ACCOUNT_COLUMNS}) VALUES (?, ?, ?, ?)",
                    (
                        account.account_id,
                        account.email,
                        account.credential_hash,
                        _encode_timestamp(account.created_at),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            if "accounts.email" in str(exc):
                raise ConflictError("email already registered") from exc
            raise StorageError("record store operation failed") from exc
        return account

    def find_account_by_email(self, email: str) -> Optional[Account]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = ?",
                (normalize_email(email),),
            ).fetchone()
        if not row:
            return None
        return self._to_account(row)

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = ?",
                (account_id,),
            ).fetchone()
        if not row:
            return None
        return self._to_account(row)

    def delete_account(self, account_id: str) -> bool:
        # scripts go with the account through ON DELETE CASCADE, in the same transaction
        with self._write() as conn:
            cur = conn.execute("DELETE FROM accounts WHERE account_id = ?", (account_id,))
            return cur.rowcount > 0

    def create_script(
        self,
        owner_id: str,
        title: str,
        symptom_tags: Sequence[str],
        tone: str,
        duration_minutes: int,
        body: str,
    ) -> Script:
        try:
            with self._write() as conn:
                owner = conn.execute(
                    "SELECT 1 FROM accounts WHERE account_id = ?", (owner_id,)
                ).fetchone()
                if not owner:
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
                conn.execute(
                    f"INSERT INTO scripts ({_SCRIPT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        script.script_id,
                        script.owner_id,
                        script.title,
                        json.dumps(list(script.symptom_tags)),
                        script.tone,
                        script.duration_minutes,
                        script.body,
                        _encode_timestamp(script.created_at),
                        _encode_timestamp(script.updated_at),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            if "FOREIGN KEY" in str(exc):
                raise NotFoundError("account not found") from exc
            raise StorageError("record store operation failed") from exc
        return script

    def list_scripts(self, owner_id: str) -> list[Script]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_SCRIPT_COLUMNS}
                FROM scripts
                WHERE owner_id = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (owner_id,),
            ).fetchall()
        return [self._to_script(row) for row in rows]

    def get_script(self, owner_id: str, script_id: str) -> Optional[Script]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_SCRIPT_COLUMNS} FROM scripts WHERE script_id = ? AND owner_id = ?",
                (script_id, owner_id),
            ).fetchone()
        if not row:
            return None
        return self._to_script(row)

    def delete_script(self, owner_id: str, script_id: str) -> bool:
        with self._write() as conn:
            cur = conn.execute(
                "DELETE FROM scripts WHERE script_id = ? AND owner_id = ?",
                (script_id, owner_id),
            )
            return cur.rowcount > 0
