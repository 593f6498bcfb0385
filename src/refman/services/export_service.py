# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
from fastapi.responses import StreamingResponse

from refman.core.utils import df_to_csv_stream, df_to_xlsx_stream, join_multivalue
from refman.errors import ValidationError
from refman.services.article_service import list_articles

EXPORT_COLUMNS = [
    "title",
    "authors",
    "publication_date",
    "journal",
    "doi",
    "pages",
    "keywords",
    "abstract",
    "created_at",
    "updated_at",
]

EXPORT_FORMATS = ("csv", "xlsx")


def articles_frame(articles: List[Dict[str, Any]]) -> pd.DataFrame:
    """Flatten article dicts into a table; list fields become '; '-joined text."""
    rows = []
    for a in articles:
        row = {c: a.get(c) for c in EXPORT_COLUMNS}
        for col in ("authors", "pages", "keywords"):
            row[col] = join_multivalue(a.get(col) or [])
        rows.append(row)
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_articles(subject_id: str, fmt: str) -> StreamingResponse:
    fmt = str(fmt or "").strip().lower()
    if fmt not in EXPORT_FORMATS:
        raise ValidationError(f"Formato de exportación no soportado: '{fmt}'")
    df = articles_frame(list_articles(subject_id))
    if fmt == "xlsx":
        return df_to_xlsx_stream(df, filename="articles.xlsx", sheet_name="Articles")
    return df_to_csv_stream(df, filename="articles.csv")
