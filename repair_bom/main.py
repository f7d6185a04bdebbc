from __future__ import annotations

"""FastAPI application entrypoint.

Re-exports the API application and makes sure logging is configured and the
catalog table exists before serving requests.
"""

from .api import app as app
from .database import ensure_schema
from .logging_setup import configure_logging


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    ensure_schema()
