"""
FileStorage – append-only JSON-lines persistence on top of MemoryStorage
=======================================================================

The file engine *has* a memory engine and a log path. All reads are served
from memory; writes go to memory first and are then appended to the log.

Log format
----------
One UTF-8 JSON object per line, LF-terminated:

    {"uuid": "...", "short_url": "...", "original_url": "...", "user_id": "...", "is_deleted": false}

Durability rules
----------------
- Startup replays the log; malformed lines are skipped, an unreadable file
  leaves the engine empty. Neither is fatal.
- `add_url` / `add_url_batch` append one line per new record. Append errors
  are logged and swallowed: the in-memory write already succeeded.
- `delete_urls` rewrites the whole log as a snapshot; this is the only
  compaction.
- `save_to_file` writes a snapshot and raises `StorageIOError` on failure.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from .base import BaseStorage, StorageType
from .errors import StorageIOError
from .models import URLRecord
from .storage import MemoryStorage

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


class FileStorage(BaseStorage):
    """Memory engine plus an append-only record log at `file_path`."""

    def __init__(self, file_path: str = "", memory: Optional[MemoryStorage] = None) -> None:
        self.memory = memory or MemoryStorage()
        self.file_path = file_path
        if file_path:
            try:
                self._replay()
            except OSError as exc:
                logger.warning("Could not load URL log %s, starting empty: %s", file_path, exc)

    # ---- Contract methods -------------------------------------------------
    # `deadline` is part of the contract; local I/O ignores it.

    def add_url(self, token: str, url: str, user_id: str, *, deadline: Optional[float] = None) -> None:
        with self.memory.lock:
            self.memory.add_url(token, url, user_id)
            record, _ = self.memory.index.get(token)
            self._append([record])

    def get_url(self, token: str, *, deadline: Optional[float] = None) -> str:
        return self.memory.get_url(token)

    def get_token_by_url(self, url: str, *, deadline: Optional[float] = None) -> str:
        return self.memory.get_token_by_url(url)

    def get_user_urls(self, user_id: str, *, deadline: Optional[float] = None) -> List[URLRecord]:
        return self.memory.get_user_urls(user_id)

    def add_url_batch(
        self, urls: Mapping[str, str], user_id: str = "", *, deadline: Optional[float] = None
    ) -> List[URLRecord]:
        with self.memory.lock:
            written = self.memory.add_url_batch(urls, user_id)
            self._append(written)
        return written

    def delete_urls(self, user_id: str, tokens: Iterable[str], *, deadline: Optional[float] = None) -> None:
        tokens = list(tokens)
        if not tokens:
            return
        with self.memory.lock:
            self.memory.delete_urls(user_id, tokens)
            try:
                self._write_snapshot()
            except OSError as exc:
                logger.warning("Could not rewrite URL log %s after delete: %s", self.file_path, exc)

    def get_storage_type(self) -> StorageType:
        return StorageType.FILE

    def save_to_file(self) -> None:
        if not self.file_path:
            return
        with self.memory.lock:
            try:
                self._write_snapshot()
            except OSError as exc:
                raise StorageIOError(f"could not write snapshot to {self.file_path}: {exc}") from exc

    def load_from_file(self, path: str) -> None:
        self.file_path = path
        try:
            self._replay()
        except OSError as exc:
            raise StorageIOError(f"could not load URL log {path}: {exc}") from exc

    # ---- Internal helpers -------------------------------------------------

    def _ensure_parent(self) -> Path:
        path = Path(self.file_path)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def _open(self, flags: int, mode: str):
        fd = os.open(self._ensure_parent(), flags, FILE_MODE)
        if "b" in mode:
            return os.fdopen(fd, mode)
        return os.fdopen(fd, mode, encoding="utf-8", newline="\n")

    def _replay(self) -> None:
        """Load every well-formed line; nothing is applied if the file can't be read."""
        records: List[URLRecord] = []
        skipped = 0
        with self._open(os.O_RDONLY | os.O_CREAT, "rb") as fh:
            for lineno, raw in enumerate(fh, start=1):
                try:
                    line = raw.decode("utf-8").strip()
                    if not line:
                        continue
                    records.append(URLRecord.from_json(line))
                except ValueError as exc:  # includes UnicodeDecodeError
                    skipped += 1
                    logger.warning("Skipping malformed line %d in %s: %s", lineno, self.file_path, exc)
        with self.memory.lock:
            for record in records:
                self.memory.restore(record)
        logger.info("Replayed %d records from %s (%d skipped)", len(records), self.file_path, skipped)

    def _append(self, records: List[URLRecord]) -> None:
        if not self.file_path or not records:
            return
        try:
            with self._open(os.O_WRONLY | os.O_CREAT | os.O_APPEND, "a") as fh:
                for record in records:
                    fh.write(record.to_json() + "\n")
        except OSError as exc:
            logger.warning("Could not append to URL log %s: %s", self.file_path, exc)

    def _write_snapshot(self) -> None:
        if not self.file_path:
            return
        with self._open(os.O_WRONLY | os.O_CREAT | os.O_TRUNC, "w") as fh:
            for record in self.memory.snapshot():
                fh.write(record.to_json() + "\n")
