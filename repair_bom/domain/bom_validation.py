"""Validate consumed components against the BOM catalog.

A technician lists replaced parts as ``PARTCODE@LOCATION`` references or, when
the board variant is already known from the surrounding workflow, as bare
locations. Bare locations are only accepted when the context part code is
actually fitted at that location; otherwise the component is reported as
ambiguous instead of guessing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Sequence

from ..logic.component_text import (
    ComponentReference,
    normalize_analysis_text,
    parse_reference,
    split_components,
)

logger = logging.getLogger(__name__)

NOT_FOUND_DESCRIPTION = "NA"
AMBIGUOUS_LOCATION_MESSAGE = (
    "Location found with multiple components. Please specify part code."
)


class CatalogUnavailableError(RuntimeError):
    """Raised when the BOM catalog cannot be queried."""


class BomCatalog(Protocol):
    def lookup(self, part_code: str, location: str) -> Optional[str]:
        ...

    def location_exists(self, location: str) -> bool:
        ...

    def check_component_for_part_code(
        self, part_code: str, location: str, context_part_code: str
    ) -> bool:
        ...


@dataclass(frozen=True, slots=True)
class ValidatedComponent:
    part_code: str
    location: str
    description: str
    is_valid: bool

    def __post_init__(self) -> None:
        if self.is_valid and not (self.part_code and self.location and self.description):
            raise ValueError(
                "a valid component needs part code, location and description"
            )


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    components: tuple[ValidatedComponent, ...] = field(default_factory=tuple)
    is_valid: bool = True
    error_message: Optional[str] = None


def _ambiguous(location: str) -> ValidatedComponent:
    return ValidatedComponent(
        part_code="",
        location=location,
        description=AMBIGUOUS_LOCATION_MESSAGE,
        is_valid=False,
    )


class ComponentResolver:
    """Resolve parsed references against a :class:`BomCatalog`."""

    def __init__(self, catalog: BomCatalog) -> None:
        self._catalog = catalog

    def resolve(
        self, reference: ComponentReference, context_part_code: Optional[str] = None
    ) -> ValidatedComponent:
        part_code, location = reference.part_code, reference.location

        if not part_code:
            if not self._catalog.location_exists(location):
                # Not a known location: the token may be a part code on its own.
                part_code, location = location, ""
            elif context_part_code is None:
                logger.debug("location %s needs a part code", location)
                return _ambiguous(location)
            elif not self._catalog.lookup(context_part_code, location):
                logger.debug(
                    "part code %s is not fitted at %s", context_part_code, location
                )
                return _ambiguous(location)
            else:
                part_code = context_part_code

        description = self._catalog.lookup(part_code, location)
        is_valid = bool(description and part_code and location)
        if is_valid and context_part_code is not None:
            confirmed = self._catalog.check_component_for_part_code(
                part_code, location, context_part_code
            )
            if not confirmed:
                logger.warning(
                    "catalog did not confirm %s@%s for part code %s",
                    part_code,
                    location,
                    context_part_code,
                )
        return ValidatedComponent(
            part_code=part_code,
            location=location,
            description=description if is_valid else NOT_FOUND_DESCRIPTION,
            is_valid=is_valid,
        )


def _clean_context(context_part_code: Optional[str]) -> Optional[str]:
    if context_part_code is None:
        return None
    return context_part_code.strip() or None


def _error_for(
    token: str, component: ValidatedComponent, context_part_code: Optional[str]
) -> str:
    if component.description != NOT_FOUND_DESCRIPTION:
        return component.description
    message = f'Component "{token}" not found in BOM'
    if context_part_code:
        message += f" for Part Code {context_part_code}"
    return message


def validate_consumption(
    catalog: BomCatalog,
    analysis_text: str | None,
    context_part_code: Optional[str] = None,
) -> ValidationOutcome:
    """Validate every component listed in ``analysis_text``.

    The same context part code applies to every token. Components are
    resolved in input order so the error message always names the first
    failing one. Catalog failures propagate as :class:`CatalogUnavailableError`.
    """

    context = _clean_context(context_part_code)
    resolver = ComponentResolver(catalog)
    components: List[ValidatedComponent] = []
    error_message: Optional[str] = None

    for token in split_components(normalize_analysis_text(analysis_text)):
        component = resolver.resolve(parse_reference(token), context)
        components.append(component)
        if not component.is_valid and error_message is None:
            error_message = _error_for(token, component, context)

    is_valid = all(c.is_valid for c in components)
    if not is_valid:
        logger.info("consumption rejected: %s", error_message)
    return ValidationOutcome(
        components=tuple(components),
        is_valid=is_valid,
        error_message=error_message,
    )


def format_validated_components(components: Iterable[ValidatedComponent]) -> str:
    lines: Sequence[str] = [
        f"{c.part_code}@{c.location} - {c.description if c.is_valid else NOT_FOUND_DESCRIPTION}"
        for c in components
    ]
    return "\n".join(lines)


__all__ = [
    "AMBIGUOUS_LOCATION_MESSAGE",
    "NOT_FOUND_DESCRIPTION",
    "BomCatalog",
    "CatalogUnavailableError",
    "ComponentResolver",
    "ValidatedComponent",
    "ValidationOutcome",
    "format_validated_components",
    "validate_consumption",
]
