"""
Storage module for the URL shortener (in-memory implementation).

Responsibilities:
    - Save short links with their owner
    - Resolve tokens to original URLs, honouring tombstones
    - Reverse lookups by original URL
    - Per-user listing and soft delete

Design:
    - Wraps one `BaseIndex` (token -> record, url -> token).
    - Keeps a third map of *live* URLs so duplicate detection ignores
      tombstoned records without scanning the whole index.
    - A single re-entrant lock covers all three maps. The file engine
      reuses the same lock for its log writes.

LLM Prompt Example:
    "Explain how this in-memory storage can be swapped for a database-backed layer
     (Postgres/Redis) without changing the manager or API code, by adhering to a
     narrow, explicit BaseStorage interface."
"""

import threading
from typing import Dict, Iterable, List, Mapping, Optional

from .base import BaseStorage, StorageType
from .errors import InvalidInputError, NotFoundError, TokenTakenError, URLDeletedError, URLExistsError
from .index import BaseIndex
from .models import URLRecord


class MemoryStorage(BaseStorage):
    def __init__(self) -> None:
        """
        Initialize empty storage.

        Internal schema:
            self.index.forward = {token: URLRecord}
            self.index.reverse = {original_url: token}
            self.live_urls     = {original_url: token}   # non-deleted only
        """
        self.index = BaseIndex()
        self.live_urls: Dict[str, str] = {}
        self.lock = threading.RLock()

    # `deadline` is part of the contract; in-memory calls ignore it.

    def add_url(self, token: str, url: str, user_id: str, *, deadline: Optional[float] = None) -> None:
        """
        Store a new mapping.

        Rules:
            - Empty token or URL is rejected.
            - A token can be used once, even after its record was deleted.
            - A URL can have one live record; tombstoned records don't count.
        """
        if not token or not url:
            raise InvalidInputError()
        with self.lock:
            if token in self.index:
                raise TokenTakenError()
            if url in self.live_urls:
                raise URLExistsError()
            self.restore(URLRecord(token=token, original_url=url, user_id=user_id))

    def get_url(self, token: str, *, deadline: Optional[float] = None) -> str:
        with self.lock:
            record, found = self.index.get(token)
        if not found:
            raise NotFoundError()
        if record.is_deleted:
            raise URLDeletedError()
        return record.original_url

    def get_token_by_url(self, url: str, *, deadline: Optional[float] = None) -> str:
        with self.lock:
            token, found = self.index.get_token_by_url(url)
        if not found:
            raise NotFoundError("url not found")
        return token

    def get_user_urls(self, user_id: str, *, deadline: Optional[float] = None) -> List[URLRecord]:
        with self.lock:
            return [record for record in self.index.records() if record.user_id == user_id]

    def add_url_batch(
        self, urls: Mapping[str, str], user_id: str = "", *, deadline: Optional[float] = None
    ) -> List[URLRecord]:
        """
        Insert every pair, best-effort.

        Duplicate tokens or URLs are not rejected here; the last write for a
        token wins, and a replaced record no longer answers lookups by its
        URL. Returns the records that were written.
        """
        written: List[URLRecord] = []
        with self.lock:
            for token, url in urls.items():
                record = URLRecord(token=token, original_url=url, user_id=user_id)
                self.restore(record)
                written.append(record)
        return written

    def delete_urls(self, user_id: str, tokens: Iterable[str], *, deadline: Optional[float] = None) -> None:
        tokens = list(tokens)
        if not tokens:
            return
        with self.lock:
            for token in tokens:
                record, found = self.index.get(token)
                if not found or record.user_id != user_id or record.is_deleted:
                    continue
                self.restore(record.tombstoned())

    def get_storage_type(self) -> StorageType:
        return StorageType.MEMORY

    # ---- Helpers shared with the file engine ------------------------------

    def restore(self, record: URLRecord) -> None:
        """
        Write a record into every index exactly as given (no validation).

        When the token already held a different URL, that URL stops pointing
        at the token in the live map.
        """
        with self.lock:
            previous, found = self.index.get(record.token)
            if found and previous.original_url != record.original_url:
                if self.live_urls.get(previous.original_url) == record.token:
                    del self.live_urls[previous.original_url]
            self.index.set(record.token, record)
            if record.is_deleted:
                if self.live_urls.get(record.original_url) == record.token:
                    del self.live_urls[record.original_url]
            else:
                self.live_urls[record.original_url] = record.token

    def snapshot(self) -> List[URLRecord]:
        with self.lock:
            return list(self.index.records())

    def clear(self) -> None:
        with self.lock:
            self.index.clear()
            self.live_urls.clear()
