"""URL lifecycle helpers and background jobs on top of the storage engines."""

from .tokens import generate_token
from .url_manager import URLManager

__all__ = ["URLManager", "generate_token"]
