"""
Storage factory – pick the storage engine from configuration
============================================================

This module centralizes selection of the storage engine so the rest of the
app stays ignorant of where data lives.

Selection
---------
| input                              | engine        |
|------------------------------------|---------------|
| non-empty DSN, pool opened         | DBStorage     |
| empty DSN, non-empty file path     | FileStorage   |
| otherwise                          | MemoryStorage |

A DSN that fails to connect is logged and falls through to the file/memory
branch, so the service still starts.

Environment variables (read lazily through `load_settings`)
-----------------------------------------------------------
- DATABASE_DSN      : selects the database engine
- FILE_STORAGE_PATH : selects the file engine when DATABASE_DSN is empty

LLM Prompt
----------
You are extending storage engines. Keep defaults safe ("memory"). Read env lazily
inside the factory function. Don't import heavy DB modules unless needed.
"""

import logging
from typing import Optional

from shortener.storage.base import BaseStorage
from shortener.storage.errors import StorageIOError
from shortener.storage.file_storage import FileStorage
from shortener.storage.storage import MemoryStorage

logger = logging.getLogger(__name__)


def get_storage(dsn: Optional[str] = None, file_path: Optional[str] = None) -> BaseStorage:
    """
    Return a storage engine based on configuration.

    Parameters
    ----------
    dsn : str, optional
        PostgreSQL DSN. If omitted, reads DATABASE_DSN.
    file_path : str, optional
        Path of the JSON-lines log. If omitted, reads FILE_STORAGE_PATH.
    """
    # Read env **now** to avoid capturing stale values at import time
    if dsn is None or file_path is None:
        from shortener.config import load_settings

        current = load_settings()
        dsn = current.DATABASE_DSN if dsn is None else dsn
        file_path = current.FILE_STORAGE_PATH if file_path is None else file_path

    if dsn:
        # Local import to avoid hard dependency when not using postgres
        from shortener.storage.database import DatabaseManager
        from shortener.storage.db_storage import DBStorage

        try:
            manager = DatabaseManager(dsn)
        except StorageIOError as exc:
            logger.warning("Failed to connect to database, falling back: %s", exc)
        else:
            logger.info("Selected storage engine: database")
            return DBStorage(manager.pool)

    if file_path:
        logger.info("Selected storage engine: file (%s)", file_path)
        return FileStorage(file_path)

    logger.info("Selected storage engine: memory")
    return MemoryStorage()
