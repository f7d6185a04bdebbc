from __future__ import annotations

import logging
import sys
import traceback
from datetime import datetime, timezone

from .config import LOG_DIR, LOG_LEVEL, TRACEBACK_LOG_PATH

_configured = False


def _excepthook(exc_type, exc_value, exc_tb) -> None:  # pragma: no cover - environment dependent
    try:
        with open(TRACEBACK_LOG_PATH, "a", encoding="utf-8") as f:
            f.write(
                "\n===== Unhandled exception at "
                + datetime.now(timezone.utc).isoformat()
                + " =====\n"
            )
            traceback.print_exception(exc_type, exc_value, exc_tb, file=f)
    except OSError:
        pass
    traceback.print_exception(exc_type, exc_value, exc_tb)


def configure_logging(level: str | None = None) -> None:
    """Log to the terminal and keep unhandled tracebacks in LOG_DIR."""
    global _configured
    if _configured:
        return
    name = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        logging.getLogger(__name__).warning("log directory %s is not writable", LOG_DIR)
    sys.excepthook = _excepthook
    _configured = True
