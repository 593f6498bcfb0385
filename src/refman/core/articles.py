# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Article field rules: cleaning, validation and JSON rendering.

Centralising this keeps routes and services free of field-level knowledge.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from refman.errors import ValidationError

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "abstract", "journal", "doi")
LIST_FIELDS = ("authors", "keywords", "pages")
DATE_FIELDS = ("publication_date",)
EDITABLE_FIELDS = TEXT_FIELDS + LIST_FIELDS + DATE_FIELDS

REQUIRED_FIELDS = ("title", "authors", "publication_date", "doi")

# Never accepted from a request body: ownership comes from the verified token.
PROTECTED_FIELDS = {"_id", "id", "user", "owner", "owner_user_id", "created_at", "updated_at", "createdAt", "updatedAt"}

SEARCH_FIELDS = ("title", "doi")


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _clean_list(field: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        # Plain strings come from form inputs: "a; b; c" or "a, b".
        sep = ";" if ";" in value else ","
        value = value.split(sep)
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"El campo '{field}' debe ser una lista.", field=field)
    return [s for s in (_clean_text(v) for v in value) if s]


def parse_publication_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date (or datetime) string into a midnight datetime.

    BSON has no pure date type, so dates are stored as datetimes.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = str(value).strip()
    try:
        if len(s) == 10:
            d = date.fromisoformat(s)
            return datetime(d.year, d.month, d.day)
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Fecha de publicación no válida: '{s}'.", field="publication_date")


def clean_fields(payload: Dict[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    """Return the editable subset of payload, trimmed and typed.

    - Unknown and protected keys are dropped.
    - With partial=False the required fields must be present and non-empty.
    - With partial=True only the keys present are returned, but required
      fields still cannot be blanked.
    """
    if not isinstance(payload, dict):
        raise ValidationError("El cuerpo de la petición debe ser un objeto JSON.")

    ignored = sorted(PROTECTED_FIELDS.intersection(payload.keys()))
    if ignored:
        logger.debug("Ignoring protected article fields: %s", ", ".join(ignored))

    out: Dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in payload:
            continue
        raw = payload.get(key)
        if key in TEXT_FIELDS:
            out[key] = _clean_text(raw)
        elif key in LIST_FIELDS:
            out[key] = _clean_list(key, raw)
        else:
            out[key] = parse_publication_date(raw)

    check = [k for k in REQUIRED_FIELDS if k in out] if partial else list(REQUIRED_FIELDS)
    missing = [k for k in check if not out.get(k)]
    if missing:
        raise ValidationError(f"Faltan campos obligatorios: {', '.join(missing)}", field=missing[0])
    return out


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_json(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Render a stored article document as a JSON-safe dict."""
    pub = doc.get("publication_date")
    return {
        "id": str(doc.get("_id")),
        "title": doc.get("title", ""),
        "authors": list(doc.get("authors") or []),
        "publication_date": pub.date().isoformat() if isinstance(pub, datetime) else pub,
        "keywords": list(doc.get("keywords") or []),
        "abstract": doc.get("abstract", ""),
        "journal": doc.get("journal", ""),
        "doi": doc.get("doi", ""),
        "pages": list(doc.get("pages") or []),
        "owner_user_id": str(doc.get("owner_user_id")),
        "created_at": _iso(doc.get("created_at")),
        "updated_at": _iso(doc.get("updated_at")),
    }
