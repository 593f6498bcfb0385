# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session gate.

One verification path (``authenticate``) with two adapters:
- ``perimeter_redirect``: page-level filter, redirects to /login.
- ``require_claims``: FastAPI dependency for the JSON API, raises a 401.
"""

from __future__ import annotations

from typing import Iterable, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse

from refman.auth.session import SessionClaims, verify_token
from refman.config import cookie_name, cookie_secure, protected_paths, session_max_age
from refman.errors import InvalidTokenError

LOGIN_PATH = "/login"


def read_token(request: Request) -> str:
    return request.cookies.get(cookie_name(), "")


def authenticate(request: Request) -> SessionClaims:
    """Verify the session cookie; InvalidTokenError when missing or invalid."""
    return verify_token(read_token(request))


def claims_optional(request: Request) -> Optional[SessionClaims]:
    try:
        return authenticate(request)
    except InvalidTokenError:
        return None


def require_claims(request: Request) -> SessionClaims:
    return authenticate(request)


def path_is_protected(path: str, patterns: Optional[Iterable[str]] = None) -> bool:
    """Match a path against patterns: exact, or prefix when ending in ``*``."""
    for pat in protected_paths() if patterns is None else patterns:
        if pat.endswith("*"):
            if path.startswith(pat[:-1]):
                return True
        elif path == pat or (pat != "/" and path.rstrip("/") == pat):
            return True
    return False


def perimeter_redirect(request: Request) -> Optional[RedirectResponse]:
    """Return a redirect to the login page when a protected path lacks a valid session."""
    if not path_is_protected(request.url.path):
        return None
    if claims_optional(request) is not None:
        return None
    return RedirectResponse(url=LOGIN_PATH, status_code=302)


def cookie_settings() -> dict:
    return {"httponly": True, "samesite": "strict", "secure": cookie_secure(), "path": "/"}


def session_cookie_kwargs(token: str) -> dict:
    return {"key": cookie_name(), "value": token, "max_age": session_max_age(), **cookie_settings()}


def cleared_cookie_kwargs() -> dict:
    return {"key": cookie_name(), "value": "", "max_age": 0, **cookie_settings()}
