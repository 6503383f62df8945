"""
Unit tests for the background delete worker.

Covers:
    - submitted jobs tombstone the caller's tokens
    - backpressure: submit() returns False once max_pending jobs are in flight
    - jobs for the same user run one at a time
    - storage failures are logged, not raised
    - no submissions after shutdown
    - per-job storage deadline from job_timeout
"""

import logging
import threading
import time

import pytest

from shortener.manager.delete_worker import DeleteWorker
from shortener.storage.errors import StorageIOError, URLDeletedError
from shortener.storage.storage import MemoryStorage


class BlockingStorage(MemoryStorage):
    """delete_urls waits on an event; tracks peak concurrency per user."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.active = 0
        self.peak = 0
        self._count_lock = threading.Lock()

    def delete_urls(self, user_id, tokens, *, deadline=None):
        with self._count_lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            self.release.wait(timeout=5)
            time.sleep(0.01)
            super().delete_urls(user_id, tokens)
        finally:
            with self._count_lock:
                self.active -= 1


class FailingStorage(MemoryStorage):
    def delete_urls(self, user_id, tokens, *, deadline=None):
        raise StorageIOError("disk on fire")


def test_submit_runs_delete(memory_storage):
    memory_storage.add_url("a1", "https://a.example", "u1")
    worker = DeleteWorker(memory_storage, max_workers=2)
    try:
        assert worker.submit("u1", ["a1"]) is True
        worker.join(timeout=5)
        with pytest.raises(URLDeletedError):
            memory_storage.get_url("a1")
    finally:
        worker.shutdown()


def test_queue_full_rejects():
    storage = BlockingStorage()
    worker = DeleteWorker(storage, max_workers=1, max_pending=2)
    try:
        assert worker.submit("u1", ["a"]) is True
        assert worker.submit("u2", ["b"]) is True
        assert worker.submit("u3", ["c"]) is False
    finally:
        storage.release.set()
        worker.shutdown()
    # slots come back once jobs finish
    assert worker._slots.acquire(blocking=False)


def test_same_user_jobs_do_not_overlap():
    storage = BlockingStorage()
    worker = DeleteWorker(storage, max_workers=4)
    try:
        for i in range(4):
            assert worker.submit("u1", [f"t{i}"])
        storage.release.set()
        worker.join(timeout=5)
    finally:
        worker.shutdown()
    assert storage.peak == 1


def test_storage_error_is_logged(caplog):
    worker = DeleteWorker(FailingStorage(), max_workers=1)
    with caplog.at_level(logging.ERROR, logger="shortener.manager.delete_worker"):
        assert worker.submit("u1", ["a1"])
        worker.join(timeout=5)
        worker.shutdown()
    assert any("disk on fire" in rec.getMessage() for rec in caplog.records)


def test_submit_after_shutdown(memory_storage):
    worker = DeleteWorker(memory_storage)
    worker.shutdown()
    assert worker.submit("u1", ["a1"]) is False


class DeadlineCapturingStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.deadlines = []

    def delete_urls(self, user_id, tokens, *, deadline=None):
        self.deadlines.append(deadline)
        super().delete_urls(user_id, tokens)


def test_job_timeout_sets_deadline():
    storage = DeadlineCapturingStorage()
    worker = DeleteWorker(storage, max_workers=1, job_timeout=30)
    before = time.monotonic()
    try:
        worker.submit("u1", ["a1"])
        worker.join(timeout=5)
    finally:
        worker.shutdown()
    (deadline,) = storage.deadlines
    assert before + 30 <= deadline <= time.monotonic() + 30


def test_no_job_timeout_means_no_deadline():
    storage = DeadlineCapturingStorage()
    worker = DeleteWorker(storage, max_workers=1)
    try:
        worker.submit("u1", ["a1"])
        worker.join(timeout=5)
    finally:
        worker.shutdown()
    assert storage.deadlines == [None]
