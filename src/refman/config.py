# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime settings, read from the environment.

Values are read on each call so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os
from typing import List

_TRUTHY = {"1", "true", "yes", "y"}

DEFAULT_PROTECTED_PATHS = ["/", "/articles", "/articles/*", "/search"]


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def secret_key() -> str:
    return os.getenv("REFMAN_SECRET_KEY") or os.getenv("SECRET_KEY") or ""


def session_salt() -> str:
    return os.getenv("REFMAN_SESSION_SALT", "refman.session.v1")


def session_max_age() -> int:
    return int(os.getenv("REFMAN_SESSION_MAX_AGE", str(60 * 60 * 24 * 30)))  # 30 days


def cookie_name() -> str:
    return os.getenv("REFMAN_COOKIE_NAME", "refman_session")


def is_production() -> bool:
    return os.getenv("REFMAN_ENV", "development").strip().lower() == "production"


def cookie_secure() -> bool:
    return is_production() or env_flag("REFMAN_COOKIE_SECURE")


def protected_paths() -> List[str]:
    raw = os.getenv("REFMAN_PROTECTED_PATHS")
    if raw is None:
        return list(DEFAULT_PROTECTED_PATHS)
    return [p.strip() for p in raw.split(",") if p.strip()]


def mongodb_uri() -> str:
    return os.getenv("MONGODB_URI", "")


def mongodb_database() -> str:
    return os.getenv("MONGODB_DATABASE", "refman")


def mongodb_timeout_ms() -> int:
    return int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))


def log_level() -> str:
    return os.getenv("REFMAN_LOG_LEVEL", "INFO").strip().upper()
