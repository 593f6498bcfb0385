# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from refman.auth.passwords import hash_password, verify_password
from refman.errors import DuplicateUsernameError, UserNotFoundError, ValidationError, WrongPasswordError
from refman.infra import user_repo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    first_name: str
    last_name: str
    password_hash: str

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "UserRecord":
        return cls(
            id=str(doc["_id"]),
            username=str(doc.get("username") or ""),
            first_name=str(doc.get("first_name") or ""),
            last_name=str(doc.get("last_name") or ""),
            password_hash=str(doc.get("password_hash") or ""),
        )

    def as_token_subject(self) -> Dict[str, str]:
        return {"_id": self.id, "username": self.username}

    def public(self) -> Dict[str, str]:
        return {"id": self.id, "username": self.username, "first_name": self.first_name, "last_name": self.last_name}


def register(first_name: str, last_name: str, username: str, password: str) -> UserRecord:
    """Create a user with an argon2 password hash.

    Raises ValidationError on missing fields and DuplicateUsernameError when
    the username is taken (checked first, then enforced by the unique index).
    """
    first_name = str(first_name or "").strip()
    last_name = str(last_name or "").strip()
    username = str(username or "").strip()
    if not (first_name and last_name and username and password):
        raise ValidationError("Todos los campos son obligatorios")

    if user_repo.find_by_username(username) is not None:
        raise DuplicateUsernameError()

    doc = user_repo.insert_user(
        {
            "first_name": first_name,
            "last_name": last_name,
            "username": username,
            "password_hash": hash_password(password),
        }
    )
    logger.info("Registered user %s", username)
    return UserRecord.from_doc(doc)


def verify_credentials(username: str, password: str) -> UserRecord:
    """Return the user when the password matches.

    Unknown usernames and wrong passwords raise different errors.
    """
    u = str(username or "").strip()
    doc = user_repo.find_by_username(u) if u else None
    if doc is None:
        raise UserNotFoundError()
    user = UserRecord.from_doc(doc)
    if not verify_password(user.password_hash, password):
        raise WrongPasswordError()
    return user


def get_user(user_id: str) -> Optional[UserRecord]:
    doc = user_repo.find_by_id(user_id)
    return UserRecord.from_doc(doc) if doc else None
