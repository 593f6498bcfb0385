# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Owner-scoped article operations.

Every function takes the verified subject id first. The owner of a new
article is always that subject; owner fields in the payload are dropped by
``clean_fields``. An article owned by someone else is reported exactly like a
missing one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from bson import ObjectId

from refman.core.articles import SEARCH_FIELDS, clean_fields, to_json
from refman.errors import InvalidTokenError, NotFoundError, ValidationError
from refman.infra import article_repo
from refman.infra.user_repo import to_object_id

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Artículo no encontrado o no accesible para este usuario"


def _owner(subject_id: str) -> ObjectId:
    oid = to_object_id(subject_id)
    if oid is None:
        # Only reachable with a token we signed for a non-ObjectId subject.
        raise InvalidTokenError()
    return oid


def _article_id(article_id: Any) -> ObjectId:
    oid = to_object_id(article_id)
    if oid is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return oid


def list_articles(subject_id: str) -> List[Dict[str, Any]]:
    return [to_json(d) for d in article_repo.find_for_owner(_owner(subject_id))]


def get_article(subject_id: str, article_id: Any) -> Dict[str, Any]:
    doc = article_repo.find_one_for_owner(_owner(subject_id), _article_id(article_id))
    if doc is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return to_json(doc)


def create_article(subject_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    fields = clean_fields(payload)
    doc = article_repo.insert_for_owner(_owner(subject_id), fields)
    logger.info("Article %s created by %s", doc["_id"], subject_id)
    return to_json(doc)


def update_article(subject_id: str, article_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
    owner = _owner(subject_id)
    oid = _article_id(article_id)
    fields = clean_fields(payload, partial=True)
    if not fields:
        doc = article_repo.find_one_for_owner(owner, oid)
    else:
        doc = article_repo.update_for_owner(owner, oid, fields)
    if doc is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info("Article %s updated by %s (%s)", oid, subject_id, ", ".join(sorted(fields)) or "no changes")
    return to_json(doc)


def delete_article(subject_id: str, article_id: Any) -> None:
    oid = _article_id(article_id)
    if not article_repo.delete_for_owner(_owner(subject_id), oid):
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info("Article %s deleted by %s", oid, subject_id)


def search_articles(subject_id: str, term: str, field: str) -> List[Dict[str, Any]]:
    """Case-insensitive substring search on title or doi, own articles only."""
    term = str(term or "").strip()
    field = str(field or "").strip().lower()
    if not term:
        raise ValidationError("Faltan parámetros de búsqueda", field="term")
    if field not in SEARCH_FIELDS:
        raise ValidationError("Tipo de búsqueda no válido", field="searchBy")
    docs = article_repo.search_for_owner(_owner(subject_id), field, term)
    return [to_json(d) for d in docs]
