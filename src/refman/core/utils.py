# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import io
from typing import Iterable

import pandas as pd
from fastapi.responses import StreamingResponse

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def df_to_csv_stream(df: pd.DataFrame, filename: str = "export.csv") -> StreamingResponse:
    """Stream a dataframe as CSV without writing to disk."""
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    return StreamingResponse(iter([buf.getvalue()]), media_type="text/csv", headers=_attachment(filename))


def df_to_xlsx_stream(df: pd.DataFrame, filename: str = "export.xlsx", sheet_name: str = "Sheet1") -> StreamingResponse:
    """Stream a dataframe as an Excel workbook (openpyxl engine)."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    buf.seek(0)
    return StreamingResponse(iter([buf.getvalue()]), media_type=XLSX_MEDIA_TYPE, headers=_attachment(filename))


def join_multivalue(values: Iterable[str], sep: str = "; ") -> str:
    return sep.join(str(v) for v in (values or []) if str(v).strip())
