"""
Film Ledger — Logging Configuration
===================================

What:  Root logger setup plus a correlation id for reconcile passes.
How:   setup_logging() configures the root logger once; PassIdFilter copies
       the current `pass_id_var` value onto every record so the format can
       print it.
Who:   create_core() calls setup_logging(); CounterReconciler sets
       `pass_id_var` at the start of every pass.

Why a ContextVar:
    Several passes can run concurrently in one event loop (one per listing
    request). A ContextVar gives each task its own id, so every line written
    while reconciling one page shares the same id.

Format:
    2024-01-15T12:00:00 [WARNING] film_ledger.services.counter_reconciler [a1b2c3d4]: ...
"""

import logging
import sys
import uuid
from contextvars import ContextVar

from film_ledger.config import Settings, settings as default_settings

# Coroutine-local id of the reconcile pass being executed ("-" outside one)
pass_id_var: ContextVar[str] = ContextVar("pass_id", default="-")


def new_pass_id() -> str:
    """Short random id; 8 chars is enough to correlate log lines."""
    return str(uuid.uuid4())[:8]


class PassIdFilter(logging.Filter):
    """Attaches `pass_id` to each record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.pass_id = pass_id_var.get()
        return True


def setup_logging(config: Settings = None) -> None:
    """
    Configure logging for the whole process.

    When:    Called once by create_core(), before any other initialization.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(pass_id)s]: %(message)s
    """
    config = config or default_settings
    log_format = "%(asctime)s [%(levelname)s] %(name)s [%(pass_id)s]: %(message)s"

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(PassIdFilter())

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,  # Override any existing logging config
    )

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
