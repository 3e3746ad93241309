"""
Tests for the QueueStore.

The pending list is FIFO for fresh jobs, but a retried job goes back to
the FRONT. These tests pin down both halves plus the owner operations.
"""

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from models.enums import JobStatus
from scheduler.job import QueuedJob
from scheduler.store import QueueStore
from tests.helpers import RecordingHandler


def _make_job(owner_id="u1", **kwargs) -> QueuedJob:
    return QueuedJob(owner_id=owner_id, payload={}, handler=RecordingHandler(), **kwargs)


def test_dequeue_order_matches_enqueue_order():
    store = QueueStore()
    a, b, c = _make_job(), _make_job(), _make_job()
    for job in (a, b, c):
        store.enqueue(job)

    assert store.dequeue_front() is a
    assert store.dequeue_front() is b
    assert store.dequeue_front() is c


def test_dequeue_from_empty_returns_none():
    assert QueueStore().dequeue_front() is None


def test_requeue_front_jumps_the_line():
    store = QueueStore()
    a, b, c = _make_job(), _make_job(), _make_job()
    store.enqueue(a)
    store.enqueue(b)
    store.enqueue(c)

    job = store.dequeue_front()
    store.requeue_front(job)

    assert store.dequeue_front() is a
    assert store.dequeue_front() is b


def test_remove_by_owner_drops_all_their_pending_jobs():
    store = QueueStore()
    store.enqueue(_make_job("alice"))
    store.enqueue(_make_job("bob"))
    store.enqueue(_make_job("alice"))

    assert store.remove_by_owner("alice") is True
    assert store.size() == 1
    assert store.dequeue_front().owner_id == "bob"


def test_remove_by_owner_with_nothing_pending():
    store = QueueStore()
    store.enqueue(_make_job("bob"))
    assert store.remove_by_owner("alice") is False
    assert store.size() == 1


def test_remove_by_owner_leaves_current_job_alone():
    store = QueueStore()
    running = _make_job("alice")
    store.set_current(running)

    assert store.remove_by_owner("alice") is False
    assert store.current is running


def test_position_of_is_one_based_first_match():
    store = QueueStore()
    store.enqueue(_make_job("bob"))
    store.enqueue(_make_job("alice"))
    store.enqueue(_make_job("alice"))

    assert store.position_of("bob") == 1
    assert store.position_of("alice") == 2
    assert store.position_of("carol") == 0


def test_snapshot_reports_wait_time_and_positions():
    store = QueueStore()
    submitted = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    store.enqueue(_make_job("alice", submitted_at=submitted))
    store.enqueue(_make_job("bob", submitted_at=submitted + timedelta(seconds=30)))

    views = store.snapshot(now=submitted + timedelta(seconds=90))

    assert [v.position for v in views] == [1, 2]
    assert [v.owner_id for v in views] == ["alice", "bob"]
    assert views[0].wait_seconds == 90
    assert views[1].wait_seconds == 60


def test_snapshot_marks_retried_jobs():
    store = QueueStore()
    fresh = _make_job("alice")
    retried = _make_job("bob")
    retried.attempts = 1
    store.enqueue(fresh)
    store.requeue_front(retried)

    views = store.snapshot()

    assert [(v.owner_id, v.status) for v in views] == [
        ("bob", JobStatus.RETRYING),
        ("alice", JobStatus.QUEUED),
    ]


def test_snapshot_is_detached_from_the_store():
    store = QueueStore()
    store.enqueue(_make_job())

    views = store.snapshot()
    views.clear()
    assert store.size() == 1

    view = store.snapshot()[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        view.attempts = 99


def test_clear_returns_count():
    store = QueueStore()
    store.enqueue(_make_job())
    store.enqueue(_make_job())

    assert store.clear() == 2
    assert store.size() == 0
    assert store.clear() == 0


def test_job_rejects_zero_max_attempts():
    with pytest.raises(ValueError, match="max_attempts"):
        _make_job(max_attempts=0)
