"""
Base storage interface for the URL shortener.

Purpose:
    Define one narrow contract that the memory, file and PostgreSQL engines
    implement, so handlers and the URL manager never care where data lives.

Error contract:
    Methods raise the exceptions from `shortener.storage.errors`; they never
    signal failure through return values.

Deadlines:
    Every data method takes an optional keyword-only `deadline`, an absolute
    `time.monotonic()` value. Engines that talk to a server bound their work
    by it and raise `StorageIOError` once it has passed; local engines may
    ignore it.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.

LLM Prompt Example:
    "Show how a narrow, explicit storage interface enables dependency
    injection and easy backend swapping without touching service code."
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from .models import URLRecord


class StorageType(str, Enum):
    MEMORY = "memory"
    FILE = "file"
    DATABASE = "database"


class BaseStorage(ABC):
    """Abstract base class for storage engines."""

    @abstractmethod  # pragma: no cover
    def add_url(self, token: str, url: str, user_id: str, *, deadline: Optional[float] = None) -> None:
        """
        Store a new token -> url mapping owned by `user_id`.

        Raises:
            InvalidInputError: token or url is empty.
            TokenTakenError: the token is already used.
            URLExistsError: a live record already stores `url`.
            StorageIOError: the backend failed.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_url(self, token: str, *, deadline: Optional[float] = None) -> str:
        """
        Return the original URL for a token.

        Raises:
            NotFoundError: unknown token.
            URLDeletedError: the record is tombstoned.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_token_by_url(self, url: str, *, deadline: Optional[float] = None) -> str:
        """
        Return the token stored for `url`.

        Raises:
            NotFoundError: no record for this URL.

        LLM Prompt Example:
            "Show how to ensure global uniqueness on long URLs using a secondary index."
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_user_urls(self, user_id: str, *, deadline: Optional[float] = None) -> List[URLRecord]:
        """Return every record created by `user_id`, tombstones included."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def add_url_batch(self, urls: Mapping[str, str], user_id: str = "", *, deadline: Optional[float] = None) -> Any:
        """Insert many token -> url pairs in one operation."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_urls(self, user_id: str, tokens: Iterable[str], *, deadline: Optional[float] = None) -> None:
        """
        Tombstone every token in `tokens` owned by `user_id`.

        Unknown or foreign tokens are skipped. An empty list is a no-op.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_storage_type(self) -> StorageType:
        raise NotImplementedError

    # ---- Engine-specific hooks (no-ops unless overridden) ------------------

    def save_to_file(self) -> None:
        return None

    def load_from_file(self, path: str) -> None:
        return None

    def set_db_pool(self, pool: Any) -> None:
        return None

    def get_db_pool(self) -> Optional[Any]:
        return None

    def close(self) -> None:
        return None
