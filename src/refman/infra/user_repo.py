# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError, PyMongoError

from refman.errors import DuplicateUsernameError, UpstreamError
from refman.infra.db import USERS, collection

logger = logging.getLogger(__name__)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value or "").strip())
    except (InvalidId, TypeError):
        return None


def find_by_username(username: str) -> Optional[Dict[str, Any]]:
    try:
        return collection(USERS).find_one({"username": username})
    except PyMongoError as e:
        logger.exception("User lookup failed")
        raise UpstreamError() from e


def find_by_id(user_id: Any) -> Optional[Dict[str, Any]]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    try:
        return collection(USERS).find_one({"_id": oid})
    except PyMongoError as e:
        logger.exception("User lookup failed")
        raise UpstreamError() from e


def insert_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a user document; the unique index backs the username pre-check."""
    now = datetime.now(timezone.utc)
    row = {**doc, "created_at": now, "updated_at": now}
    try:
        res = collection(USERS).insert_one(row)
    except DuplicateKeyError as e:
        raise DuplicateUsernameError() from e
    except PyMongoError as e:
        logger.exception("User insert failed")
        raise UpstreamError() from e
    row["_id"] = res.inserted_id
    return row
