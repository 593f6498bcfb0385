# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stateless session tokens.

A token is an itsdangerous timed signature over ``{sub, u, iat, exp}``. It is
valid iff the signature verifies against the current secret and the current
time is before ``exp``. Nothing is stored server-side, so logout cannot revoke
a token that was copied elsewhere; it stays valid until it expires.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from itsdangerous import BadData, URLSafeTimedSerializer

from refman.config import secret_key, session_max_age, session_salt
from refman.errors import InvalidTokenError

_SECRET: Optional[str] = None


@dataclass(frozen=True)
class SessionClaims:
    subject_id: str
    username: str
    issued_at: int
    expires_at: int


def load_secret() -> str:
    """Read the signing secret from the environment (once, at startup)."""
    global _SECRET
    secret = secret_key()
    if not secret:
        raise RuntimeError("Falta REFMAN_SECRET_KEY (o SECRET_KEY) en entorno")
    _SECRET = secret
    return secret


def reset_secret() -> None:
    global _SECRET
    _SECRET = None


def _serializer(secret: Optional[str] = None) -> URLSafeTimedSerializer:
    key = secret or _SECRET or load_secret()
    return URLSafeTimedSerializer(secret_key=key, salt=session_salt())


def issue_token(user: Mapping[str, Any], *, secret: Optional[str] = None, ttl: Optional[int] = None) -> str:
    """Sign a token for a user document (needs ``_id`` and ``username``)."""
    now = int(time.time())
    max_age = session_max_age() if ttl is None else int(ttl)
    payload = {
        "sub": str(user["_id"]),
        "u": str(user["username"]),
        "iat": now,
        "exp": now + max_age,
    }
    return _serializer(secret).dumps(payload)


def verify_token(token: str, *, secret: Optional[str] = None) -> SessionClaims:
    """Return the claims of a valid token.

    Bad signature, malformed payload and expiry all raise the same
    InvalidTokenError.
    """
    if not token:
        raise InvalidTokenError()
    try:
        data = _serializer(secret).loads(token, max_age=session_max_age())
    except BadData as e:
        raise InvalidTokenError() from e

    if not isinstance(data, dict):
        raise InvalidTokenError()
    sub = str(data.get("sub") or "").strip()
    username = str(data.get("u") or "").strip()
    iat, exp = data.get("iat"), data.get("exp")
    if not sub or not username or not isinstance(iat, int) or not isinstance(exp, int):
        raise InvalidTokenError()
    if int(time.time()) >= exp:
        raise InvalidTokenError()
    return SessionClaims(subject_id=sub, username=username, issued_at=iat, expires_at=exp)
