"""BOM catalog import supporting CSV, JSON and XLSX sources."""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from typing import List

from openpyxl import load_workbook
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session, select

from ..models import BomEntry


logger = logging.getLogger(__name__)

BOM_TEMPLATE_HEADERS = ["part_code", "location", "description"]

SAMPLE_BOM = [
    ("RES-001", "R1", "1K Ohm Resistor"),
    ("CAP-001", "C1", "10uF Capacitor"),
    ("IC-001", "U1", "Microcontroller"),
    ("LED-001", "D1", "Red LED"),
    ("CONN-001", "J1", "Power Connector"),
]


class ImportReport(BaseModel):
    total: int
    inserted: int
    skipped: int
    errors: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Header handling


def _norm(s: str) -> str:
    """Normalize a header name by stripping, lowering and removing symbols."""
    return re.sub(r"[^a-z0-9]+", "", s.strip().lower())


HEADER_MAP = {
    "part_code": {"partcode", "pn", "partnumber", "part", "code"},
    "location": {"loc", "reference", "refdes", "designator", "position"},
    "description": {"desc", "descr", "value", "component"},
}


def validate_headers(headers: List[str]) -> dict[str, int]:
    """Validate headers and return a mapping of canonical name to index."""

    col_map: dict[str, int] = {}
    for idx, h in enumerate(headers):
        hn = _norm(h)
        for canon, variants in HEADER_MAP.items():
            norm_set = {_norm(canon)} | {_norm(v) for v in variants}
            if hn in norm_set and canon not in col_map:
                col_map[canon] = idx
                break
    missing = [c for c in ("part_code", "location") if c not in col_map]
    if missing:
        raise ValueError(f"Missing columns: {', '.join(missing)}")
    return col_map


# ---------------------------------------------------------------------------
# Row schema


class BomRow(BaseModel):
    part_code: str
    location: str
    description: str | None = None

    @field_validator("part_code", "location")
    @classmethod
    def _req_upper(cls, v):
        v = (v or "").strip().upper()
        if not v:
            raise ValueError("required")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _desc_trim(cls, v):
        return str(v or "").strip() or None


# ---------------------------------------------------------------------------
# File parsing helpers


def _is_xlsx(data: bytes) -> bool:
    return data[:2] == b"PK"


def _json_rows(text: str) -> tuple[list[str], list[list[str]]]:
    """Flatten a JSON array of ``{part_code, location, description}`` objects."""
    items = json.loads(text)
    if not isinstance(items, list):
        raise ValueError("JSON BOM must be an array of objects")
    headers = list(BOM_TEMPLATE_HEADERS)
    rows: list[list[str]] = []
    for n, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"JSON item {n} is not an object")
        rows.append(["" if item.get(h) is None else str(item.get(h)) for h in headers])
    return headers, rows


def _iter_rows(data: bytes) -> tuple[list[str], list[list[str]]]:
    if _is_xlsx(data):
        wb = load_workbook(filename=io.BytesIO(data), read_only=True, data_only=True)
        try:
            rows = [list(r) for r in wb.active.iter_rows(values_only=True)]
        finally:
            wb.close()
        headers = [str(x or "") for x in rows[0]] if rows else []
        return headers, [["" if x is None else str(x) for x in r] for r in rows[1:]]
    text = data.decode("utf-8-sig", errors="ignore")
    if text.lstrip().startswith("["):
        return _json_rows(text)
    rows = list(csv.reader(io.StringIO(text)))
    headers = rows[0] if rows else []
    return headers, rows[1:]


# ---------------------------------------------------------------------------
# Importer


def import_bom_catalog(data: bytes, session: Session) -> ImportReport:
    """Add the rows of a CSV, JSON or XLSX BOM file to the catalog.

    Pairs already in the catalog, or repeated within the file, are skipped
    rather than overwritten.
    """
    errors: List[str] = []
    try:
        headers, raw_rows = _iter_rows(data)
        col_map = validate_headers(headers)
    except Exception as exc:
        errors.append(str(exc))
        return ImportReport(total=0, inserted=0, skipped=0, errors=errors)

    total = inserted = skipped = 0
    seen: set[tuple[str, str]] = set()

    for i, row in enumerate(raw_rows, start=2):
        if not any(cell.strip() for cell in row):
            continue
        data_map = {key: row[idx] if idx < len(row) else "" for key, idx in col_map.items()}
        if not data_map.get("part_code", "").strip() or not data_map.get("location", "").strip():
            errors.append(f"Row {i}: missing part_code or location")
            continue
        bom_row = BomRow(**data_map)

        total += 1
        key = (bom_row.part_code, bom_row.location)
        existing = session.exec(
            select(BomEntry.id).where(
                BomEntry.part_code == bom_row.part_code,
                BomEntry.location == bom_row.location,
            )
        ).first()
        if key in seen or existing is not None:
            skipped += 1
            continue
        seen.add(key)
        session.add(
            BomEntry(
                part_code=bom_row.part_code,
                location=bom_row.location,
                description=bom_row.description,
            )
        )
        inserted += 1

    session.commit()
    logger.info("BOM import: %s rows, %s inserted, %s skipped", total, inserted, skipped)
    return ImportReport(total=total, inserted=inserted, skipped=skipped, errors=errors)


def seed_sample_bom(session: Session) -> int:
    """Insert the sample catalog; returns how many entries were new."""
    added = 0
    for part_code, location, description in SAMPLE_BOM:
        existing = session.exec(
            select(BomEntry.id).where(
                BomEntry.part_code == part_code, BomEntry.location == location
            )
        ).first()
        if existing is None:
            session.add(BomEntry(part_code=part_code, location=location, description=description))
            added += 1
        logger.info("Added/Verified: %s@%s - %s", part_code, location, description)
    session.commit()
    return added


__all__ = [
    "BOM_TEMPLATE_HEADERS",
    "SAMPLE_BOM",
    "ImportReport",
    "validate_headers",
    "import_bom_catalog",
    "seed_sample_bom",
]
