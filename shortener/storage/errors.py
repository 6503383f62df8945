"""
Storage error kinds for the URL shortener.

Every engine raises the same small set of exceptions so the HTTP layer can
map failures to status codes without knowing which backend is active.

Kinds:
    - INVALID_INPUT : empty token or URL at the storage boundary   -> 400
    - TOKEN_TAKEN   : token already used by another record         -> 500 (retried by URLManager)
    - URL_EXISTS    : a live record already holds this original URL -> 409
    - URL_DELETED   : record is tombstoned                          -> 410
    - NOT_FOUND     : no record for this token/URL                  -> 400/404
    - IO            : disk, network or deadline failure             -> 500

LLM Prompt Example:
    "Show how a closed enum of error kinds plus one exception class per kind
    lets handlers dispatch on `err.kind` instead of parsing messages."
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    TOKEN_TAKEN = "token_taken"
    URL_EXISTS = "url_exists"
    URL_DELETED = "url_deleted"
    NOT_FOUND = "not_found"
    IO = "io"


class StorageError(Exception):
    """Base class for all storage failures; `kind` drives HTTP status mapping."""

    kind: ErrorKind = ErrorKind.IO
    default_message = "storage error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class InvalidInputError(StorageError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "token and URL cannot be empty"


class TokenTakenError(StorageError):
    kind = ErrorKind.TOKEN_TAKEN
    default_message = "token already exists"


class URLExistsError(StorageError):
    """Raised when a live record already stores the same original URL.

    Callers resolve the existing token with `get_token_by_url` and answer 409.
    """

    kind = ErrorKind.URL_EXISTS
    default_message = "URL already exists"


class URLDeletedError(StorageError):
    kind = ErrorKind.URL_DELETED
    default_message = "URL was deleted"


class NotFoundError(StorageError):
    kind = ErrorKind.NOT_FOUND
    default_message = "URL not found"


class StorageIOError(StorageError):
    kind = ErrorKind.IO
    default_message = "storage I/O failure"


__all__ = [
    "ErrorKind",
    "StorageError",
    "InvalidInputError",
    "TokenTakenError",
    "URLExistsError",
    "URLDeletedError",
    "NotFoundError",
    "StorageIOError",
]
