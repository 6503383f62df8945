"""
Background deletes for `DELETE /api/user/urls`.

The handler answers 202 Accepted before the delete runs, so the work has to
outlive the request. Instead of one unsupervised thread per request, jobs go
to a bounded `ThreadPoolExecutor`:

    - at most `max_pending` jobs may be queued or running; beyond that
      `submit` returns False and the handler answers 503;
    - jobs for the same user never run concurrently (per-user lock);
    - failures are logged and dropped (the client already got its 202);
    - with `job_timeout` set, each job gets a storage deadline that far past
      the moment it starts running.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence, Set

from ..storage.base import BaseStorage
from ..storage.errors import StorageError

logger = logging.getLogger(__name__)


class DeleteWorker:
    def __init__(
        self,
        storage: BaseStorage,
        max_workers: int = 4,
        max_pending: int = 1024,
        job_timeout: Optional[float] = None,
    ) -> None:
        self.storage = storage
        self.job_timeout = job_timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="url-delete")
        self._slots = threading.BoundedSemaphore(max_pending)
        self._user_locks: Dict[str, threading.Lock] = {}
        self._user_refs: Dict[str, int] = {}
        self._guard = threading.Lock()
        self._futures: Set[Future] = set()
        self._closed = False

    def submit(self, user_id: str, tokens: Sequence[str]) -> bool:
        """Queue a delete job; returns False when the queue is full or shut down."""
        if self._closed or not self._slots.acquire(blocking=False):
            return False
        with self._guard:
            lock = self._user_locks.setdefault(user_id, threading.Lock())
            self._user_refs[user_id] = self._user_refs.get(user_id, 0) + 1
        try:
            future = self._executor.submit(self._run, user_id, list(tokens), lock)
        except RuntimeError:
            self._release(user_id)
            return False
        with self._guard:
            self._futures.add(future)
        future.add_done_callback(self._forget)
        return True

    def _run(self, user_id: str, tokens: List[str], lock: threading.Lock) -> None:
        try:
            with lock:
                deadline = None if self.job_timeout is None else time.monotonic() + self.job_timeout
                self.storage.delete_urls(user_id, tokens, deadline=deadline)
            logger.info("Deleted %d tokens for user %s", len(tokens), user_id)
        except StorageError as exc:
            logger.error("Error deleting URLs for user %s: %s", user_id, exc)
        except Exception:
            logger.exception("Unexpected error deleting URLs for user %s", user_id)
        finally:
            self._release(user_id)

    def _release(self, user_id: str) -> None:
        with self._guard:
            left = self._user_refs.get(user_id, 1) - 1
            if left <= 0:
                self._user_refs.pop(user_id, None)
                self._user_locks.pop(user_id, None)
            else:
                self._user_refs[user_id] = left
        self._slots.release()

    def _forget(self, future: Future) -> None:
        with self._guard:
            self._futures.discard(future)

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until every job submitted so far has finished."""
        with self._guard:
            pending = list(self._futures)
        wait(pending, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)
