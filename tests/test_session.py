import time

import pytest

from refman.auth import session
from refman.auth.session import issue_token, load_secret, verify_token
from refman.errors import InvalidTokenError

USER = {"_id": "64b7f0c2a1b2c3d4e5f60718", "username": "ab1"}


def test_issue_then_verify_returns_claims():
    token = issue_token(USER)
    claims = verify_token(token)
    assert claims.subject_id == USER["_id"]
    assert claims.username == "ab1"
    assert claims.expires_at - claims.issued_at == 60 * 60 * 24 * 30


def test_token_expires_after_ttl(monkeypatch):
    token = issue_token(USER)
    later = time.time() + 60 * 60 * 24 * 30 + 5
    monkeypatch.setattr(time, "time", lambda: later)
    with pytest.raises(InvalidTokenError):
        verify_token(token)


def test_short_ttl_is_enforced_by_expiry_claim(monkeypatch):
    token = issue_token(USER, ttl=10)
    assert verify_token(token).username == "ab1"
    later = time.time() + 11
    monkeypatch.setattr(time, "time", lambda: later)
    with pytest.raises(InvalidTokenError):
        verify_token(token)


def _flip(token: str, idx: int) -> str:
    c = token[idx]
    repl = "A" if c != "A" else "B"
    return token[:idx] + repl + token[idx + 1:]


def test_tampered_payload_is_rejected():
    token = issue_token(USER)
    with pytest.raises(InvalidTokenError):
        verify_token(_flip(token, 0))


def test_tampered_signature_is_rejected():
    token = issue_token(USER)
    sig_start = token.rindex(".") + 1
    middle = sig_start + (len(token) - sig_start) // 2
    with pytest.raises(InvalidTokenError):
        verify_token(_flip(token, middle))


def test_token_signed_with_other_secret_is_rejected():
    token = issue_token(USER, secret="some-other-secret")
    with pytest.raises(InvalidTokenError):
        verify_token(token)


@pytest.mark.parametrize("bad", ["", "garbage", "a.b.c", "...."])
def test_malformed_tokens_are_rejected(bad):
    with pytest.raises(InvalidTokenError):
        verify_token(bad)


def test_signed_payload_without_claims_is_rejected():
    token = session._serializer().dumps({"u": "ab1"})
    with pytest.raises(InvalidTokenError):
        verify_token(token)


def test_missing_secret_is_fatal(monkeypatch):
    monkeypatch.delenv("REFMAN_SECRET_KEY", raising=False)
    monkeypatch.delenv("SECRET_KEY", raising=False)
    session.reset_secret()
    with pytest.raises(RuntimeError):
        load_secret()


def test_secret_is_cached_after_load(monkeypatch):
    load_secret()
    token = issue_token(USER)
    monkeypatch.setenv("REFMAN_SECRET_KEY", "rotated")
    assert verify_token(token).subject_id == USER["_id"]
