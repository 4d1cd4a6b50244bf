"""Shared pytest fixtures: deterministic clocks and ids, both store backings, fast hashing."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from hypnoscript.domain.script_service import ScriptService
from hypnoscript.domain.service import AccountService
from hypnoscript.generation import stub_generate
from hypnoscript.security.passwords import PasswordHasher
from hypnoscript.security.tokens import TokenIssuer
from hypnoscript.store import InMemoryRecordStore, SqliteRecordStore

TEST_SECRET = "test-secret"
START = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class SequentialIds:
    """Deterministic UUID-shaped identifiers."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"00000000-0000-4000-8000-{next(self._counter):012d}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_store(backend: str, tmp_path, clock, id_factory=None):
    kwargs = {"clock": clock}
    if id_factory is not None:
        kwargs["id_factory"] = id_factory
    if backend == "memory":
        return InMemoryRecordStore(**kwargs)
    return SqliteRecordStore(str(tmp_path / f"{backend}.db"), **kwargs)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path, clock):
    """Every contract test runs once per backing."""
    return make_store(request.param, tmp_path, clock)


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens(clock) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, clock=clock)


@pytest.fixture
def account_service(store, hasher, tokens) -> AccountService:
    return AccountService(store, hasher, tokens)


@pytest.fixture
def script_service(store, clock) -> ScriptService:
    return ScriptService(store, stub_generate, clock=clock)
