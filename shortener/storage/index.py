"""
In-memory index reused by the memory and file engines.

Two mappings:
    forward : token -> URLRecord
    reverse : original_url -> token (last token written for that URL)
              an entry is dropped when its token is rewritten with another URL

No locking happens here; the engine wrapping the index owns concurrency.
"""

from typing import Dict, Iterator, Optional, Tuple

from .models import URLRecord


class BaseIndex:
    def __init__(self) -> None:
        self.forward: Dict[str, URLRecord] = {}
        self.reverse: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self.forward)

    def __contains__(self, token: object) -> bool:
        return token in self.forward

    def get(self, token: str) -> Tuple[Optional[URLRecord], bool]:
        record = self.forward.get(token)
        return record, record is not None

    def set(self, token: str, record: URLRecord) -> None:
        previous = self.forward.get(token)
        if previous is not None and previous.original_url != record.original_url:
            if self.reverse.get(previous.original_url) == token:
                del self.reverse[previous.original_url]
        self.forward[token] = record
        self.reverse[record.original_url] = token

    def get_token_by_url(self, url: str) -> Tuple[str, bool]:
        token = self.reverse.get(url)
        if token is None:
            return "", False
        return token, True

    def records(self) -> Iterator[URLRecord]:
        return iter(list(self.forward.values()))

    def clear(self) -> None:
        self.forward.clear()
        self.reverse.clear()
