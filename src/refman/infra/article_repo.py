# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Article persistence.

Every function takes the owner id and puts it in the query filter: there is
no way to read or write an article here without naming its owner.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from refman.errors import DuplicateDoiError, UpstreamError
from refman.infra.db import ARTICLES, collection

logger = logging.getLogger(__name__)


def _owned(owner_id: ObjectId, **extra: Any) -> Dict[str, Any]:
    return {"owner_user_id": owner_id, **extra}


def find_for_owner(owner_id: ObjectId) -> List[Dict[str, Any]]:
    try:
        return list(collection(ARTICLES).find(_owned(owner_id)))
    except PyMongoError as e:
        logger.exception("Article listing failed")
        raise UpstreamError("Error al obtener los artículos") from e


def find_one_for_owner(owner_id: ObjectId, article_id: ObjectId) -> Optional[Dict[str, Any]]:
    try:
        return collection(ARTICLES).find_one(_owned(owner_id, _id=article_id))
    except PyMongoError as e:
        logger.exception("Article lookup failed")
        raise UpstreamError("Error al obtener los artículos") from e


def search_for_owner(owner_id: ObjectId, field: str, term: str) -> List[Dict[str, Any]]:
    """Case-insensitive substring match on one field (term is matched literally)."""
    query = _owned(owner_id, **{field: {"$regex": re.escape(term), "$options": "i"}})
    try:
        return list(collection(ARTICLES).find(query))
    except PyMongoError as e:
        logger.exception("Article search failed")
        raise UpstreamError("Error al buscar artículos") from e


def insert_for_owner(owner_id: ObjectId, fields: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    row = {**fields, "owner_user_id": owner_id, "created_at": now, "updated_at": now}
    try:
        res = collection(ARTICLES).insert_one(row)
    except DuplicateKeyError as e:
        raise DuplicateDoiError() from e
    except PyMongoError as e:
        logger.exception("Article insert failed")
        raise UpstreamError("Error al crear el artículo") from e
    row["_id"] = res.inserted_id
    return row


def update_for_owner(owner_id: ObjectId, article_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a partial update; None when no article matches id AND owner."""
    changes = {**fields, "updated_at": datetime.now(timezone.utc)}
    try:
        return collection(ARTICLES).find_one_and_update(
            _owned(owner_id, _id=article_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as e:
        raise DuplicateDoiError() from e
    except PyMongoError as e:
        logger.exception("Article update failed")
        raise UpstreamError("Error al actualizar el artículo") from e


def delete_for_owner(owner_id: ObjectId, article_id: ObjectId) -> bool:
    try:
        res = collection(ARTICLES).delete_one(_owned(owner_id, _id=article_id))
    except PyMongoError as e:
        logger.exception("Article delete failed")
        raise UpstreamError("Error al eliminar el artículo") from e
    return res.deleted_count == 1
