"""
Spreadsheet import/export for candidate records (openpyxl).
Export flattens skills to a ", "-joined cell; import checks the required columns.
"""
from __future__ import annotations

import io
import json
from collections.abc import Mapping
from typing import Any, Iterable, Sequence

import openpyxl

from resume_parser.app.core.config import (
    SKILLS_DELIMITER,
    SPREADSHEET_REQUIRED_COLUMNS,
    SPREADSHEET_SHEET_NAME,
)
from resume_parser.app.schemas.candidate import CandidateRecord
from resume_parser.app.services.field_cleaning import clean_candidate_fields


class MissingColumnsError(ValueError):
    def __init__(self, missing: list[str], expected: Sequence[str]):
        super().__init__(f"Missing required columns: {', '.join(missing)}")
        self.missing = missing
        self.expected = list(expected)


def _cell_text(value: Any) -> Any:
    # Spreadsheets hand phone numbers back as ints
    if value is None or isinstance(value, (str, list, tuple)):
        return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def record_from_row(row: Mapping[str, Any]) -> CandidateRecord:
    """Rehydrate a spreadsheet/JSON row. skills may be a joined string or a list."""
    raw = {key: _cell_text(value) for key, value in row.items()}
    skills = raw.get("skills")
    if isinstance(skills, str):
        raw["skills"] = skills.split(SKILLS_DELIMITER.strip())
    return clean_candidate_fields(raw, filename=raw.get("filename") or "")


def flatten_row(row: Mapping[str, Any]) -> dict[str, Any]:
    flat = dict(row)
    skills = flat.get("skills")
    if isinstance(skills, (list, tuple)):
        flat["skills"] = SKILLS_DELIMITER.join(str(s) for s in skills)
    return flat


def merge_rows(
    data: Sequence[Mapping[str, Any]],
    existing: Sequence[Mapping[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """Existing rows first; new rows whose filename is already present are dropped."""
    if not existing:
        return [dict(r) for r in data]
    existing_filenames = {r.get("filename") for r in existing}
    merged = [dict(r) for r in existing]
    merged.extend(dict(r) for r in data if r.get("filename") not in existing_filenames)
    return merged


def _collect_headers(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    headers: list[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    return headers


def _excel_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value)


def write_workbook(rows: Sequence[Mapping[str, Any]]) -> bytes:
    """Serialize rows to xlsx bytes, one header row built from all keys in first-seen order."""
    flat_rows = [flatten_row(r) for r in rows]
    headers = _collect_headers(flat_rows)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SPREADSHEET_SHEET_NAME
    if headers:
        ws.append(headers)
    for row in flat_rows:
        ws.append([_excel_value(row.get(h)) for h in headers])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def read_workbook(content: bytes) -> tuple[list[dict[str, Any]], list[str]]:
    """
    Read the first sheet into row dicts keyed by the header row.
    Raises MissingColumnsError when a required column is absent.
    """
    wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True)
    try:
        ws = wb.worksheets[0]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()

    headers = [str(h).strip() if h is not None else "" for h in rows[0]] if rows else []
    columns = [h for h in headers if h]

    missing = [col for col in SPREADSHEET_REQUIRED_COLUMNS if col not in columns]
    if missing:
        raise MissingColumnsError(missing, SPREADSHEET_REQUIRED_COLUMNS)

    data: list[dict[str, Any]] = []
    for row in rows[1:]:
        if all(v is None for v in row):
            continue
        data.append({h: v for h, v in zip(headers, row) if h and v is not None})
    return data, columns
