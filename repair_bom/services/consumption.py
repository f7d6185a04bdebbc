"""Consumption validation service used by the API and the CLI."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import Session, select

from ..domain.bom_validation import (
    ValidatedComponent,
    format_validated_components,
    validate_consumption,
)
from ..models import BomEntry
from .bom_catalog import SqlBomCatalog


class ValidatedComponentRead(BaseModel):
    part_code: str
    location: str
    description: str
    is_valid: bool

    @classmethod
    def from_component(cls, component: ValidatedComponent) -> "ValidatedComponentRead":
        return cls(
            part_code=component.part_code,
            location=component.location,
            description=component.description,
            is_valid=component.is_valid,
        )


class ConsumptionValidationRead(BaseModel):
    is_valid: bool
    formatted_components: str
    error_message: Optional[str] = None
    components: List[ValidatedComponentRead] = []


def validate_bom_components(
    session: Session, analysis_text: str, part_code: Optional[str] = None
) -> ConsumptionValidationRead:
    """Validate ``analysis_text`` against the catalog stored in ``session``.

    ``part_code`` is the board variant selected for the repair; it lets the
    technician type bare locations. Catalog failures are not caught here.
    """

    outcome = validate_consumption(SqlBomCatalog(session), analysis_text, part_code)
    return ConsumptionValidationRead(
        is_valid=outcome.is_valid,
        formatted_components=format_validated_components(outcome.components),
        error_message=outcome.error_message,
        components=[ValidatedComponentRead.from_component(c) for c in outcome.components],
    )


def list_bom_entries(
    session: Session,
    location: Optional[str] = None,
    part_code: Optional[str] = None,
) -> List[BomEntry]:
    """Return catalog entries optionally filtered by location and part code."""

    stmt = select(BomEntry)
    if location:
        stmt = stmt.where(BomEntry.location == location.strip().upper())
    if part_code:
        stmt = stmt.where(BomEntry.part_code == part_code.strip().upper())
    stmt = stmt.order_by(BomEntry.part_code, BomEntry.location)
    return session.exec(stmt).all()
