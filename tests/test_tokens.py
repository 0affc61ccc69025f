# tests/test_tokens.py

from __future__ import annotations

import time

import pytest
from jose import jwt

from taskit.core.errors import AuthenticationError
from taskit.core.jwt_handler import JWTHandler
from taskit.models.account import Account
from taskit.services.credentials import CredentialStore
from taskit.services.tokens import TokenService


@pytest.fixture()
def account(db, account_fields):
    return CredentialStore(db).create(account_fields)


@pytest.fixture()
def tokens(db, jwt_handler) -> TokenService:
    return TokenService(db, jwt_handler)


def test_issued_token_validates_and_is_recorded(tokens, account) -> None:
    token = tokens.issue(account)

    assert tokens.validate(token).id == account.id
    assert tokens.active_tokens(account) == [token]


def test_tokens_are_non_expiring_by_default(tokens, account) -> None:
    token = tokens.issue(account)
    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == str(account.id)
    assert "exp" not in claims


def test_configured_expiry_adds_exp_claim() -> None:
    handler = JWTHandler("test-secret", expires_minutes=5)
    claims = jwt.get_unverified_claims(handler.create_access_token(1))
    assert claims["exp"] > claims["iat"]


def test_tokens_for_same_account_are_distinct(tokens, account) -> None:
    first = tokens.issue(account)
    second = tokens.issue(account)

    assert first != second
    assert tokens.active_tokens(account) == [first, second]
    assert tokens.validate(first).id == tokens.validate(second).id == account.id


def test_revoke_removes_only_that_session(tokens, account) -> None:
    first = tokens.issue(account)
    second = tokens.issue(account)

    tokens.revoke(account, first)

    with pytest.raises(AuthenticationError):
        tokens.validate(first)
    assert tokens.validate(second).id == account.id
    assert tokens.active_tokens(account) == [second]


def test_revoke_all_invalidates_every_session(tokens, account) -> None:
    issued = [tokens.issue(account) for _ in range(3)]

    tokens.revoke_all(account)

    for token in issued:
        with pytest.raises(AuthenticationError):
            tokens.validate(token)
    assert tokens.active_tokens(account) == []


def test_forged_revoked_and_orphaned_tokens_fail_alike(db, tokens, account, account_fields) -> None:
    forged = JWTHandler("other-secret").create_access_token(account.id)

    revoked = tokens.issue(account)
    tokens.revoke(account, revoked)

    # Correctly signed, but never issued through the store
    unissued = tokens.jwt_handler.create_access_token(account.id)

    ghost = CredentialStore(db).create({**account_fields, "email": "ghost@x.com"})
    orphaned = tokens.issue(ghost)
    db.delete(ghost)
    db.commit()

    messages = set()
    for token in (forged, revoked, unissued, orphaned, "not-a-jwt", ""):
        with pytest.raises(AuthenticationError) as exc:
            tokens.validate(token)
        messages.add(str(exc.value))
    assert messages == {"Please authenticate."}


def test_tampered_token_is_rejected(tokens, account) -> None:
    token = tokens.issue(account)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])

    with pytest.raises(AuthenticationError):
        tokens.validate(tampered)


def test_token_for_one_account_does_not_unlock_another(db, tokens, account, account_fields) -> None:
    other = CredentialStore(db).create({**account_fields, "email": "b@x.com"})
    token = tokens.issue(account)
    # Same string presented with a forged subject claim
    forged = jwt.encode({"sub": str(other.id)}, "test-secret", algorithm="HS256")

    assert tokens.validate(token).id == account.id
    with pytest.raises(AuthenticationError):
        tokens.validate(forged)


def _updated_at(db, account_id):
    db.expire_all()
    return db.get(Account, account_id).updated_at


def test_session_changes_touch_account_updated_at(db, tokens, account) -> None:
    account_id = account.id
    before = _updated_at(db, account_id)

    time.sleep(0.01)
    token = tokens.issue(account)
    after_issue = _updated_at(db, account_id)
    assert after_issue > before

    time.sleep(0.01)
    tokens.revoke(db.get(Account, account_id), token)
    after_revoke = _updated_at(db, account_id)
    assert after_revoke > after_issue

    time.sleep(0.01)
    tokens.revoke_all(db.get(Account, account_id))
    assert _updated_at(db, account_id) > after_revoke


def test_concurrent_logins_keep_both_tokens(session_factory, jwt_handler, tokens, account) -> None:
    account_id = account.id
    first_session = session_factory()
    second_session = session_factory()
    try:
        # Both requests read the account and its token list before either writes
        first_view = first_session.get(Account, account_id)
        second_view = second_session.get(Account, account_id)
        assert first_view.tokens == [] and second_view.tokens == []

        first = TokenService(first_session, jwt_handler).issue(first_view)
        second = TokenService(second_session, jwt_handler).issue(second_view)
    finally:
        first_session.close()
        second_session.close()

    check = session_factory()
    try:
        service = TokenService(check, jwt_handler)
        assert service.validate(first).id == account_id
        assert service.validate(second).id == account_id
        assert sorted(service.active_tokens(check.get(Account, account_id))) == sorted([first, second])
    finally:
        check.close()
