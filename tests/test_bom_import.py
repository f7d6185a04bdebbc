import io
import json

import pytest
from openpyxl import Workbook
from pydantic import ValidationError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from repair_bom.models import BomEntry
from repair_bom.services import bom_import
from repair_bom.services.bom_import import BomRow
from repair_bom.services import (
    SAMPLE_BOM,
    import_bom_catalog,
    seed_sample_bom,
    validate_headers,
)


def setup_db():
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


def test_validate_headers_aliases():
    assert validate_headers(["PN", "Ref Des", "Desc"]) == {
        "part_code": 0,
        "location": 1,
        "description": 2,
    }
    with pytest.raises(ValueError):
        validate_headers(["foo", "bar"])
    with pytest.raises(ValueError):
        validate_headers(["part_code", "description"])


def test_import_csv():
    engine = setup_db()
    data = (
        "part_code,location,description\n"
        "res-001, r1 ,1K Ohm Resistor\n"
        "CAP-001,C1,10uF Capacitor\n"
        "CAP-001,C1,duplicate\n"
        ",C2,missing part code\n"
        "\n"
    ).encode()
    with Session(engine) as session:
        report = import_bom_catalog(data, session)
        assert report.total == 3
        assert report.inserted == 2
        assert report.skipped == 1
        assert report.errors == ["Row 5: missing part_code or location"]

        entries = session.exec(select(BomEntry).order_by(BomEntry.part_code)).all()
        assert [(e.part_code, e.location, e.description) for e in entries] == [
            ("CAP-001", "C1", "10uF Capacitor"),
            ("RES-001", "R1", "1K Ohm Resistor"),
        ]


def test_import_keeps_existing_entries():
    engine = setup_db()
    with Session(engine) as session:
        session.add(BomEntry(part_code="RES-001", location="R1", description="original"))
        session.commit()
        report = import_bom_catalog(b"part_code,location,description\nRES-001,R1,new\n", session)
        assert report.inserted == 0
        assert report.skipped == 1
        entry = session.exec(select(BomEntry)).one()
        assert entry.description == "original"


def test_import_bad_headers():
    engine = setup_db()
    with Session(engine) as session:
        report = import_bom_catalog(b"foo,bar\n1,2\n", session)
        assert report.total == 0
        assert report.errors and "Missing columns" in report.errors[0]


def test_import_xlsx():
    wb = Workbook()
    ws = wb.active
    ws.append(["Part Code", "Location", "Description"])
    ws.append([971040, "R1", "100K 1/4W 5%"])
    ws.append(["971039", "R2", None])
    buf = io.BytesIO()
    wb.save(buf)

    engine = setup_db()
    with Session(engine) as session:
        report = import_bom_catalog(buf.getvalue(), session)
        assert report.inserted == 2
        entries = {
            (e.part_code, e.location): e.description
            for e in session.exec(select(BomEntry)).all()
        }
        assert entries == {("971040", "R1"): "100K 1/4W 5%", ("971039", "R2"): None}


def test_seed_sample_is_idempotent():
    engine = setup_db()
    with Session(engine) as session:
        assert seed_sample_bom(session) == len(SAMPLE_BOM)
        assert seed_sample_bom(session) == 0
        assert len(session.exec(select(BomEntry)).all()) == len(SAMPLE_BOM)


def test_seeded_entries_carry_aware_timestamps():
    engine = setup_db()
    assert BomEntry(part_code="RES-001", location="R1").created_at.tzinfo is not None
    with Session(engine) as session:
        assert seed_sample_bom(session) == len(SAMPLE_BOM)
    with Session(engine) as session:
        entries = session.exec(select(BomEntry)).all()
        assert len(entries) == len(SAMPLE_BOM)
        assert all(e.created_at is not None for e in entries)


def test_import_json():
    engine = setup_db()
    data = json.dumps(
        [
            {"part_code": "x-1", "location": " r5 ", "description": "100K"},
            {"part_code": "X-1", "location": "R5"},
            {"part_code": "Y-2", "location": "C3", "description": None},
            {"part_code": "", "location": "C4"},
        ]
    ).encode()
    with Session(engine) as session:
        report = import_bom_catalog(b"  " + data, session)
        assert report.total == 3
        assert report.inserted == 2
        assert report.skipped == 1
        assert report.errors == ["Row 5: missing part_code or location"]
        entries = {
            (e.part_code, e.location): e.description
            for e in session.exec(select(BomEntry)).all()
        }
        assert entries == {("X-1", "R5"): "100K", ("Y-2", "C3"): None}


@pytest.mark.parametrize(
    "payload, message",
    [
        (b'[{"part_code": "X-1", "location": "R5"}, "R6"]', "JSON item 2 is not an object"),
        (b"[not json", "Expecting value"),
    ],
)
def test_import_json_rejects_malformed(payload, message):
    engine = setup_db()
    with Session(engine) as session:
        report = import_bom_catalog(payload, session)
        assert report.total == 0
        assert report.inserted == 0
        assert report.errors and message in report.errors[0]
        assert session.exec(select(BomEntry)).all() == []


def test_bom_row_normalizes_fields():
    row = BomRow(part_code=" res-001 ", location="r1", description="  ")
    assert (row.part_code, row.location, row.description) == ("RES-001", "R1", None)
    assert BomRow(part_code="X", location="Y", description=" 10K ").description == "10K"
    with pytest.raises(ValidationError):
        BomRow(part_code="  ", location="R1")


def test_xlsx_workbook_closed_when_reading_fails(monkeypatch):
    closed = []

    class _Sheet:
        def iter_rows(self, values_only=True):
            raise ValueError("corrupt sheet")

    class _Workbook:
        active = _Sheet()

        def close(self):
            closed.append(True)

    monkeypatch.setattr(bom_import, "load_workbook", lambda **kwargs: _Workbook())
    engine = setup_db()
    with Session(engine) as session:
        report = import_bom_catalog(b"PK\x03\x04", session)
    assert closed == [True]
    assert report.errors == ["corrupt sheet"]
