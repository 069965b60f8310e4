from __future__ import annotations

import logging
import re
import unicodedata
from typing import IO

import pandas as pd

from section_planner.core.exceptions import RosterImportError
from section_planner.schemas.scheduling import Student, TimePreference
from section_planner.services.catalog import CatalogContext

logger = logging.getLogger(__name__)

_INVISIBLE_CHARS = re.compile(r"[\u00A0\u200B-\u200D\uFEFF]")

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "code": ("code", "código", "codigo"),
    "course": ("course", "curso"),
    "name": ("name", "nombre"),
    "subject": ("subject", "asignatura"),
    "preference": ("preference", "preferencia"),
    "sections": ("preassigned sections", "secciones asignadas"),
}
REQUIRED_COLUMNS = ("code", "course", "name", "subject")

PREFERENCE_ALIASES: dict[str, TimePreference] = {
    "morning": "morning",
    "mañana": "morning",
    "afternoon": "afternoon",
    "tarde": "afternoon",
}


def clean_cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    text = _INVISIBLE_CHARS.sub(" ", str(value))
    return unicodedata.normalize("NFC", text).strip()


def _locate_columns(header: list[object]) -> dict[str, int]:
    normalized = [clean_cell(cell).lower() for cell in header]
    located: dict[str, int] = {}
    for column, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in normalized:
                located[column] = normalized.index(alias)
                break
    missing = [column for column in REQUIRED_COLUMNS if column not in located]
    if missing:
        raise RosterImportError(f"Missing required columns: {', '.join(missing)}.")
    return located


def parse_roster_rows(rows: list[list[object]], context: CatalogContext) -> list[Student]:
    """Turn a header row plus one row per enrollment into students.

    Rows missing any required value are skipped. A subject that does not match
    the catalog (case-insensitively) aborts the import.
    """
    if len(rows) < 2:
        raise RosterImportError("Roster data is empty or invalid.")

    columns = _locate_columns(rows[0])
    subjects_by_key = {clean_cell(subject.name).upper(): subject.name for subject in context.subjects}
    min_width = max(columns[column] for column in REQUIRED_COLUMNS) + 1

    order: list[str] = []
    records: dict[str, dict] = {}
    for row_number, row in enumerate(rows[1:], start=2):
        if len(row) < min_width:
            continue
        code = clean_cell(row[columns["code"]]).upper()
        course = clean_cell(row[columns["course"]])
        name = clean_cell(row[columns["name"]])
        raw_subject = row[columns["subject"]]
        subject_key = clean_cell(raw_subject).upper()
        if not code or not name or not subject_key or not course:
            continue

        subject_name = subjects_by_key.get(subject_key)
        if subject_name is None:
            valid = ", ".join(f'"{subject.name}"' for subject in context.subjects)
            raise RosterImportError(
                f"Subject '{raw_subject}' in row {row_number} is not valid. Configured subjects are: {valid}."
            )

        record = records.get(code)
        if record is None:
            record = {"code": code, "name": name, "course": course, "subjects": [], "preference": None, "sections": []}
            records[code] = record
            order.append(code)
        if subject_name not in record["subjects"]:
            record["subjects"].append(subject_name)

        if "preference" in columns and columns["preference"] < len(row):
            preference = PREFERENCE_ALIASES.get(clean_cell(row[columns["preference"]]).lower())
            if preference is not None:
                record["preference"] = preference

        if "sections" in columns and columns["sections"] < len(row):
            section_ids = [part.strip() for part in clean_cell(row[columns["sections"]]).split(",") if part.strip()]
            if section_ids:
                record["sections"] = section_ids

    students = [
        Student(
            code=records[code]["code"],
            name=records[code]["name"],
            course=records[code]["course"],
            subjects=records[code]["subjects"],
            preference=records[code]["preference"],
            preassigned_sections=records[code]["sections"],
        )
        for code in order
    ]
    logger.info("Parsed roster | rows=%s students=%s", len(rows) - 1, len(students))
    return students


def read_roster_csv(source: str | IO, context: CatalogContext) -> list[Student]:
    frame = pd.read_csv(source, dtype=str, keep_default_na=False)
    rows: list[list[object]] = [list(frame.columns)] + frame.values.tolist()
    return parse_roster_rows(rows, context)
