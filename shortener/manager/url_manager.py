"""
URLManager module for the URL shortener.

Responsibilities:
    - Encode long URLs into random short tokens (single and batch)
    - Apply the "already exists" rule: one token per long URL
    - Retry on the rare token collision
    - Decode tokens back to long URLs
    - Validate URL syntax for the plain-text endpoint

Design notes:
    - The reverse index (`get_token_by_url`) is consulted first; a hit is the
      authoritative short form and is reported with `exists=True` so the HTTP
      layer can answer 409 Conflict.
    - If another writer inserts the same URL between the lookup and the insert,
      storage raises `URLExistsError` and the lookup is repeated.
    - `TokenTakenError` triggers up to `max_attempts` fresh tokens.
    - Storage is an injected dependency; any `BaseStorage` engine works.

LLM Prompt Example:
    "Explain how a thin lifecycle layer over a storage interface can keep
    encode idempotent while tolerating concurrent writers and random token
    collisions."
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..storage.base import BaseStorage
from ..storage.errors import NotFoundError, TokenTakenError, URLDeletedError, URLExistsError
from .tokens import generate_token

logger = logging.getLogger(__name__)

TokenFactory = Callable[[], str]

URLPattern = re.compile(
    r"^((http|https)://)?([a-zA-Z0-9.-]+(\.[a-zA-Z]{2,})+)(/[a-zA-Z0-9\-._~:?#@!$&'()*+,;=/%]*)?$"
)


def is_valid_url(url: str) -> bool:
    """
    Check that `url` looks like a web address: optional http(s) scheme,
    dotted host with an alphabetic TLD of two or more letters, optional path.
    """
    return bool(URLPattern.match(url))


class URLManager:
    """
    Coordinates token creation and lookup on top of a storage engine.

    Args:
        storage (BaseStorage): Active storage engine.
        token_factory (TokenFactory): Produces candidate tokens (default: random 6-9 chars).
        max_attempts (int): How many tokens to try when storage reports a collision.
    """

    def __init__(
        self,
        storage: BaseStorage,
        token_factory: TokenFactory = generate_token,
        max_attempts: int = 3,
    ) -> None:
        self.storage = storage
        self.token_factory = token_factory
        self.max_attempts = max(1, max_attempts)

    def _existing_token(self, url: str, deadline: Optional[float] = None) -> Optional[str]:
        try:
            return self.storage.get_token_by_url(url, deadline=deadline)
        except NotFoundError:
            return None

    def _token_in_use(self, token: str, deadline: Optional[float] = None) -> bool:
        try:
            self.storage.get_url(token, deadline=deadline)
        except NotFoundError:
            return False
        except URLDeletedError:
            return True
        return True

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def encode(self, url: str, user_id: str, *, deadline: Optional[float] = None) -> Tuple[str, bool]:
        """
        Return the token for `url`, creating one owned by `user_id` if needed.

        Returns:
            Tuple[str, bool]: `(token, exists)`. `exists` is True when the URL
            was already shortened; the token is then the existing one.

        `deadline` (absolute `time.monotonic()`) is passed to every storage call.

        Raises:
            InvalidInputError: `url` is empty.
            TokenTakenError: every attempted token collided.
            StorageIOError: the engine failed or the deadline passed.
        """
        existing = self._existing_token(url, deadline)
        if existing is not None:
            return existing, True

        for attempt in range(1, self.max_attempts + 1):
            token = self.token_factory()
            try:
                self.storage.add_url(token, url, user_id, deadline=deadline)
            except URLExistsError:
                return self.storage.get_token_by_url(url, deadline=deadline), True
            except TokenTakenError:
                logger.warning("Token collision on attempt %d/%d", attempt, self.max_attempts)
                if attempt == self.max_attempts:
                    raise
                continue
            return token, False
        raise TokenTakenError()  # pragma: no cover

    def encode_batch(self, urls: Sequence[str], user_id: str, *, deadline: Optional[float] = None) -> List[str]:
        """
        Encode many URLs with one `add_url_batch` call.

        URLs that already have a token keep it; duplicates inside the batch
        share one token. Candidate tokens already present in storage (live or
        deleted) are never handed to `add_url_batch`. Returns tokens in the
        order of `urls`.
        """
        for attempt in range(1, self.max_attempts + 1):
            tokens: Dict[str, str] = {}
            pending: Dict[str, str] = {}
            for url in urls:
                if url in tokens or url in pending:
                    continue
                existing = self._existing_token(url, deadline)
                if existing is not None:
                    tokens[url] = existing
                    continue
                token = self.token_factory()
                while token in pending.values() or self._token_in_use(token, deadline):
                    token = self.token_factory()
                pending[url] = token

            if not pending:
                return [tokens[url] for url in urls]
            try:
                self.storage.add_url_batch(
                    {token: url for url, token in pending.items()}, user_id, deadline=deadline
                )
            except TokenTakenError:
                logger.warning("Token collision in batch on attempt %d/%d", attempt, self.max_attempts)
                if attempt == self.max_attempts:
                    raise
                continue
            for url in pending:
                # The engine may have kept an earlier token for this URL.
                tokens[url] = self.storage.get_token_by_url(url, deadline=deadline)
            return [tokens[url] for url in urls]
        raise TokenTakenError()  # pragma: no cover

    def decode(self, token: str, *, deadline: Optional[float] = None) -> str:
        """
        Resolve a token.

        Raises:
            NotFoundError: unknown token.
            URLDeletedError: the link was deleted by its owner.
        """
        return self.storage.get_url(token, deadline=deadline)
