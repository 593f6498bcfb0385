# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process-wide MongoDB handle.

The client is created lazily on first use and reused for the lifetime of the
process. ``set_client`` lets callers (tests, scripts) inject a ready client.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from refman.config import mongodb_database, mongodb_timeout_ms, mongodb_uri
from refman.errors import UpstreamError

logger = logging.getLogger(__name__)

USERS = "users"
ARTICLES = "articles"

_LOCK = threading.Lock()
_CLIENT: Optional[Any] = None
_INDEXED = False


def _ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("username", ASCENDING)], unique=True, name="username_unique")
    db[ARTICLES].create_index([("doi", ASCENDING)], unique=True, name="doi_unique")
    db[ARTICLES].create_index([("owner_user_id", ASCENDING)], name="owner_idx")


def get_client() -> Any:
    """Return the shared client, connecting once if needed."""
    global _CLIENT
    if _CLIENT is not None:
        return _CLIENT
    with _LOCK:
        if _CLIENT is None:
            uri = mongodb_uri()
            if not uri:
                logger.error("MONGODB_URI is not set; cannot reach the store")
                raise UpstreamError()
            _CLIENT = MongoClient(uri, serverSelectionTimeoutMS=mongodb_timeout_ms())
            logger.info("MongoDB client created (database=%s)", mongodb_database())
    return _CLIENT


def set_client(client: Any) -> None:
    """Replace the shared client (indexes are re-ensured on next use)."""
    global _CLIENT, _INDEXED
    with _LOCK:
        _CLIENT = client
        _INDEXED = False


def close_client() -> None:
    global _CLIENT, _INDEXED
    with _LOCK:
        if _CLIENT is not None:
            _CLIENT.close()
        _CLIENT = None
        _INDEXED = False


def get_db() -> Database:
    global _INDEXED
    db = get_client()[mongodb_database()]
    if not _INDEXED:
        with _LOCK:
            if not _INDEXED:
                try:
                    _ensure_indexes(db)
                except PyMongoError as e:
                    logger.exception("Could not ensure MongoDB indexes")
                    raise UpstreamError() from e
                _INDEXED = True
    return db


def collection(name: str) -> Collection:
    return get_db()[name]
