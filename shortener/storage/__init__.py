"""Storage engines and the contract they share."""

from .base import BaseStorage, StorageType
from .errors import (
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    StorageError,
    StorageIOError,
    TokenTakenError,
    URLDeletedError,
    URLExistsError,
)
from .models import URLRecord

__all__ = [
    "BaseStorage",
    "StorageType",
    "URLRecord",
    "ErrorKind",
    "StorageError",
    "InvalidInputError",
    "TokenTakenError",
    "URLExistsError",
    "URLDeletedError",
    "NotFoundError",
    "StorageIOError",
]
