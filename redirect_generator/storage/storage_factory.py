"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend (in-memory vs DB)
so the rest of the app can stay ignorant of where redirects live.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- REDIRECT_STORAGE_BACKEND: "memory" (default) or "postgres"
- REDIRECT_DB_DSN:          DSN string if backend=="postgres"
- REDIRECT_TABLE:           CMS redirects table (default "sys_redirect")
"""

import logging
import os
from typing import Optional

from redirect_generator.storage.base import BaseStorage
from redirect_generator.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a row store based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default) or "postgres". If omitted, reads REDIRECT_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend constructor. For postgres, use dsn="..." and table="...".

    Raises
    ------
    ValueError
        On an unknown backend or a missing DSN for postgres.
    """
    be = (backend or os.getenv("REDIRECT_STORAGE_BACKEND", "memory")).strip().lower()
    log.debug("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("REDIRECT_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env REDIRECT_DB_DSN)")
        table = kwargs.get("table") or os.getenv("REDIRECT_TABLE", "sys_redirect")
        # Local import to avoid hard dependency when not using postgres
        from redirect_generator.storage.db_storage import DBStorage

        return DBStorage(dsn=dsn, table=table)

    raise ValueError(f"Unknown storage backend: {be!r}")
