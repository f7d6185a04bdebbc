"""Service layer for business logic.

Each function is UI agnostic and operates directly on a SQLModel ``Session``
instance; the FastAPI routes and the command line are thin wrappers around
these helpers.
"""

from .bom_catalog import InMemoryBomCatalog, SqlBomCatalog
from .bom_import import (
    BOM_TEMPLATE_HEADERS,
    SAMPLE_BOM,
    ImportReport,
    import_bom_catalog,
    seed_sample_bom,
    validate_headers,
)
from .consumption import (
    ConsumptionValidationRead,
    ValidatedComponentRead,
    list_bom_entries,
    validate_bom_components,
)

__all__ = [
    "BOM_TEMPLATE_HEADERS",
    "ConsumptionValidationRead",
    "ImportReport",
    "SAMPLE_BOM",
    "InMemoryBomCatalog",
    "SqlBomCatalog",
    "ValidatedComponentRead",
    "import_bom_catalog",
    "list_bom_entries",
    "seed_sample_bom",
    "validate_bom_components",
    "validate_headers",
]
