"""BOM catalog implementations used by the consumption validator."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..domain.bom_validation import CatalogUnavailableError
from ..models import BomEntry

logger = logging.getLogger(__name__)


class SqlBomCatalog:
    """Catalog backed by the ``bom`` table of an open SQLModel ``Session``."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _first(self, stmt):
        try:
            return self._session.exec(stmt.limit(1)).first()
        except SQLAlchemyError as exc:
            logger.error("BOM catalog query failed: %s", exc)
            raise CatalogUnavailableError("BOM catalog is unavailable") from exc

    def lookup(self, part_code: str, location: str) -> Optional[str]:
        return self._first(
            select(BomEntry.description).where(
                BomEntry.part_code == part_code, BomEntry.location == location
            )
        )

    def location_exists(self, location: str) -> bool:
        return self._first(select(BomEntry.id).where(BomEntry.location == location)) is not None

    def check_component_for_part_code(
        self, part_code: str, location: str, context_part_code: str
    ) -> bool:
        # Same query as lookup(); context_part_code is not yet part of the
        # catalog schema.
        row = self._first(
            select(BomEntry.id).where(
                BomEntry.part_code == part_code, BomEntry.location == location
            )
        )
        return row is not None


CatalogRows = Union[Mapping[Tuple[str, str], str], Iterable[Tuple[str, str, str]]]


class InMemoryBomCatalog:
    """Dict-backed catalog, e.g. for tests or a preloaded BOM snapshot."""

    def __init__(self, entries: CatalogRows = ()) -> None:
        self._entries: Dict[Tuple[str, str], str] = {}
        items = entries.items() if isinstance(entries, Mapping) else (
            ((pc, loc), desc) for pc, loc, desc in entries
        )
        for (part_code, location), description in items:
            self._entries[(part_code, location)] = description
        self._locations = {location for _, location in self._entries}

    def lookup(self, part_code: str, location: str) -> Optional[str]:
        return self._entries.get((part_code, location))

    def location_exists(self, location: str) -> bool:
        return location in self._locations

    def check_component_for_part_code(
        self, part_code: str, location: str, context_part_code: str
    ) -> bool:
        return (part_code, location) in self._entries


__all__ = ["SqlBomCatalog", "InMemoryBomCatalog"]
