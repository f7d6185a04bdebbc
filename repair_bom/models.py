from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
import sqlalchemy as sa
from sqlmodel import SQLModel, Field

if SQLModel.metadata.tables:
    SQLModel.metadata.clear()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BomEntry(SQLModel, table=True):
    """One component slot of a board: a part code fitted at a location."""

    __tablename__ = "bom"
    __table_args__ = (
        sa.UniqueConstraint("part_code", "location", name="uq_bom_part_code_location"),
        sa.Index("ix_bom_location", "location"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    part_code: str = Field(nullable=False, max_length=64)
    location: str = Field(nullable=False, max_length=64)
    description: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text, nullable=True))
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=False),
    )
