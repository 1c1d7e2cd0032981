"""Runtime configuration for the form wizard.

Values are read from the environment (and a local ``.env`` file) on every
call so tests and long-running apps pick up changes without a reload.

``FORMWIZARD_STORAGE`` selects the default storage backend (``session`` |
``memory``), ``FORMWIZARD_LOG_LEVEL`` sets the root log level used by
:func:`formwizard.utils.logging_context.configure_logging` and
``FORMWIZARD_SUBMIT_METHODS`` lists the HTTP methods that count as a form
submission.
"""

from __future__ import annotations

import logging
import os
from enum import StrEnum

from dotenv import load_dotenv

from formwizard.constants.keys import QueryKeys

load_dotenv()

logger = logging.getLogger(__name__)

STEP_QUERY_PARAM = QueryKeys.STEP
DEFAULT_SUBMIT_METHODS: tuple[str, ...] = ("POST",)


class StorageBackend(StrEnum):
    """Enumerate the bundled wizard storage backends."""

    SESSION = "session"
    MEMORY = "memory"


def get_storage_backend() -> StorageBackend:
    """Return the configured storage backend, falling back to the session."""

    raw = os.getenv("FORMWIZARD_STORAGE", "").strip().lower()
    if not raw:
        return StorageBackend.SESSION
    try:
        return StorageBackend(raw)
    except ValueError:
        logger.warning("Unknown FORMWIZARD_STORAGE value %r, using session storage.", raw)
        return StorageBackend.SESSION


def get_log_level() -> int:
    raw = os.getenv("FORMWIZARD_LOG_LEVEL", "").strip().upper()
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw)
    if isinstance(level, int):
        return level
    return logging.INFO


def get_submit_methods() -> tuple[str, ...]:
    """Return the request methods treated as form submissions."""

    raw = os.getenv("FORMWIZARD_SUBMIT_METHODS")
    if raw is None:
        return DEFAULT_SUBMIT_METHODS
    methods = tuple(part.strip().upper() for part in raw.split(",") if part.strip())
    return methods or DEFAULT_SUBMIT_METHODS
