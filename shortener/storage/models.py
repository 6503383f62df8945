"""
Record model shared by every storage engine.

One `URLRecord` describes one short link. The file engine persists records
as one JSON object per line using the keys below:

    {"uuid": "...", "short_url": "AbC123", "original_url": "https://...",
     "user_id": "...", "is_deleted": false}

Older logs may omit `user_id` / `is_deleted`; they default to "" / False.
"""

import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class URLRecord:
    token: str
    original_url: str
    user_id: str = ""
    is_deleted: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: Optional[datetime] = None

    @property
    def is_live(self) -> bool:
        return not self.is_deleted

    def tombstoned(self) -> "URLRecord":
        """Return a copy of this record with `is_deleted` set."""
        return replace(self, is_deleted=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uuid": str(self.id),
            "short_url": self.token,
            "original_url": self.original_url,
            "user_id": self.user_id,
            "is_deleted": self.is_deleted,
        }

    def to_json(self) -> str:
        """Encode as a single log line (no trailing newline)."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "URLRecord":
        """
        Build a record from a decoded log entry.

        Raises:
            ValueError: If `short_url` or `original_url` is missing, or `uuid` is malformed.
        """
        token = data.get("short_url")
        original_url = data.get("original_url")
        if not isinstance(token, str) or not isinstance(original_url, str):
            raise ValueError("record requires short_url and original_url")
        raw_id = data.get("uuid")
        return cls(
            token=token,
            original_url=original_url,
            user_id=data.get("user_id") or "",
            is_deleted=bool(data.get("is_deleted", False)),
            id=uuid.UUID(str(raw_id)) if raw_id else uuid.uuid4(),
        )

    @classmethod
    def from_json(cls, line: str) -> "URLRecord":
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("record line must be a JSON object")
        return cls.from_dict(data)
