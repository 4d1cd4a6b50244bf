from __future__ import annotations

import pytest

from hypnoscript.domain.contracts import GenerateScriptInput
from hypnoscript.domain.errors import (
    ConflictError,
    GenerationError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationFailedError,
)
from hypnoscript.domain.script_service import ScriptService
from hypnoscript.domain.service import AccountService


def test_register_then_lookup_by_normalized_email(account_service, store):
    result = account_service.register("  New.User@Example.com ", "password1")
    assert result.account.email == "new.user@example.com"
    assert store.find_account_by_email("NEW.USER@example.com") == result.account
    assert result.account.credential_hash != "password1"


def test_register_duplicate_email_conflicts(account_service):
    account_service.register("a@x.com", "password1")
    with pytest.raises(ConflictError):
        account_service.register("A@X.com", "password2")


def test_register_issues_no_token_when_persistence_fails(store, hasher, tokens, monkeypatch):
    issued = []
    monkeypatch.setattr(tokens, "issue", lambda *args: issued.append(args) or "token")

    def broken_create(email, credential_hash):
        raise StorageError("disk full")

    monkeypatch.setattr(store, "create_account", broken_create)
    service = AccountService(store, hasher, tokens)
    with pytest.raises(StorageError):
        service.register("a@x.com", "password1")
    assert issued == []


def test_login_is_case_insensitive_and_identifies(account_service):
    registered = account_service.register("a@x.com", "password1")
    result = account_service.login("A@X.com", "password1")
    assert result.account.account_id == registered.account.account_id
    assert account_service.identify(result.token).account_id == registered.account.account_id


def test_login_failures_are_indistinguishable(account_service):
    account_service.register("a@x.com", "password1")
    with pytest.raises(UnauthorizedError) as wrong_password:
        account_service.login("a@x.com", "password2")
    with pytest.raises(UnauthorizedError) as unknown_email:
        account_service.login("b@x.com", "password1")
    assert str(wrong_password.value) == str(unknown_email.value)


def test_identify_rejects_invalid_token(account_service):
    with pytest.raises(UnauthorizedError):
        account_service.identify("not-a-token")


def test_identify_rejects_expired_token(account_service, clock):
    token = account_service.register("a@x.com", "password1").token
    clock.advance(days=8)
    with pytest.raises(UnauthorizedError):
        account_service.identify(token)


def test_identify_rejects_token_for_deleted_account(account_service, store):
    result = account_service.register("a@x.com", "password1")
    store.delete_account(result.account.account_id)
    with pytest.raises(UnauthorizedError):
        account_service.identify(result.token)


def test_identify_resolves_current_record_not_embedded_email(account_service, store, tokens):
    result = account_service.register("a@x.com", "password1")
    stale = tokens.issue(result.account.account_id, "old@x.com")
    assert account_service.identify(stale).email == "a@x.com"


def test_token_survives_logout_until_expiry(account_service, clock):
    # no revocation: discarding a token client-side does not invalidate it server-side
    token = account_service.login(*_registered(account_service)).token
    clock.advance(days=6)
    assert account_service.identify(token).email == "a@x.com"


def _registered(service):
    service.register("a@x.com", "password1")
    return "a@x.com", "password1"


@pytest.fixture
def owner(account_service):
    return account_service.register("owner@x.com", "password1").account


def test_generate_persists_script(script_service, store, owner):
    script = script_service.generate(
        owner.account_id,
        GenerateScriptInput(symptom_tags=["insomnia"], tone="calm", duration_minutes=20),
    )
    assert script.duration_minutes == 20
    assert script.tone == "calm"
    assert script.body
    assert "insomnia" in script.body
    assert store.get_script(owner.account_id, script.script_id) == script


def test_generate_applies_defaults(script_service, owner):
    script = script_service.generate(owner.account_id, GenerateScriptInput(symptom_tags=[" stress "]))
    assert script.tone == "calm"
    assert script.duration_minutes == 20
    assert script.title == "Session 2026-01-15"
    assert script.symptom_tags == ("stress",)


def test_generate_keeps_given_title(script_service, owner):
    script = script_service.generate(
        owner.account_id,
        GenerateScriptInput(symptom_tags=["focus"], tone="energising", duration_minutes=5, title=" Morning "),
    )
    assert script.title == "Morning"
    assert script.tone == "energising"


@pytest.mark.parametrize(
    "payload",
    [
        GenerateScriptInput(symptom_tags=["insomnia"], duration_minutes=0),
        GenerateScriptInput(symptom_tags=["insomnia"], duration_minutes=90),
        GenerateScriptInput(symptom_tags=["insomnia"], duration_minutes=4),
        GenerateScriptInput(symptom_tags=["insomnia"], duration_minutes=61),
        GenerateScriptInput(symptom_tags=[]),
        GenerateScriptInput(symptom_tags=["insomnia", "  "]),
        GenerateScriptInput(symptom_tags="insomnia"),
        GenerateScriptInput(symptom_tags=["insomnia"], tone="sleepy"),
    ],
)
def test_generate_rejects_invalid_input_before_store(store, clock, owner, payload, monkeypatch):
    calls = []
    monkeypatch.setattr(store, "create_script", lambda **kwargs: calls.append(kwargs))
    service = ScriptService(store, lambda *args: calls.append(args) or "text", clock=clock)
    with pytest.raises(ValidationFailedError):
        service.generate(owner.account_id, payload)
    assert calls == []


def test_generator_failure_leaves_no_script(store, clock, owner):
    def failing(tags, tone, duration):
        raise RuntimeError("provider down")

    service = ScriptService(store, failing, clock=clock)
    with pytest.raises(GenerationError):
        service.generate(owner.account_id, GenerateScriptInput(symptom_tags=["insomnia"]))
    assert store.list_scripts(owner.account_id) == []


def test_storage_failure_after_generation_is_reported(store, clock, owner, monkeypatch):
    def broken_create(**kwargs):
        raise StorageError("disk full")

    monkeypatch.setattr(store, "create_script", broken_create)
    service = ScriptService(store, lambda *args: "text", clock=clock)
    with pytest.raises(StorageError):
        service.generate(owner.account_id, GenerateScriptInput(symptom_tags=["insomnia"]))


def test_generator_receives_validated_arguments(store, clock, owner):
    seen = []

    def recording(tags, tone, duration):
        seen.append((list(tags), tone, duration))
        return "text"

    ScriptService(store, recording, clock=clock).generate(
        owner.account_id,
        GenerateScriptInput(symptom_tags=[" a ", "b"], tone="compassionate", duration_minutes=30),
    )
    assert seen == [(["a", "b"], "compassionate", 30)]


def test_get_and_delete_are_scoped_to_owner(script_service, account_service, owner):
    other = account_service.register("other@x.com", "password1").account
    script = script_service.generate(owner.account_id, GenerateScriptInput(symptom_tags=["insomnia"]))

    with pytest.raises(NotFoundError):
        script_service.get(other.account_id, script.script_id)
    with pytest.raises(NotFoundError):
        script_service.delete(other.account_id, script.script_id)
    assert script_service.list(other.account_id) == []

    assert script_service.get(owner.account_id, script.script_id) == script
    script_service.delete(owner.account_id, script.script_id)
    with pytest.raises(NotFoundError):
        script_service.get(owner.account_id, script.script_id)
    with pytest.raises(NotFoundError):
        script_service.delete(owner.account_id, script.script_id)


def test_list_returns_newest_first(script_service, owner, clock):
    first = script_service.generate(owner.account_id, GenerateScriptInput(symptom_tags=["a"], title="S1"))
    clock.advance(minutes=1)
    second = script_service.generate(owner.account_id, GenerateScriptInput(symptom_tags=["b"], title="S2"))
    assert script_service.list(owner.account_id) == [second, first]
