"""Component-consumption validation for the repair workflow."""

from .domain.bom_validation import (
    BomCatalog,
    CatalogUnavailableError,
    ValidatedComponent,
    ValidationOutcome,
    format_validated_components,
    validate_consumption,
)

__all__ = [
    "BomCatalog",
    "CatalogUnavailableError",
    "ValidatedComponent",
    "ValidationOutcome",
    "format_validated_components",
    "validate_consumption",
]
