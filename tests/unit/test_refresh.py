import threading
from datetime import date
from typing import List

import pytest

from copilot_metrics.core.refresh import RefreshCoordinator, RefreshFailurePolicy
from copilot_metrics.core.store import RecordStore
from copilot_metrics.domain.exceptions import RefreshError
from copilot_metrics.domain.models import DailyRecord
from copilot_metrics.reporting.compiler import REPORT_CATALOG, ReportCompiler


class _FakeLogger:
    def __init__(self):
        self.messages: List[str] = []
        self.joined = threading.Event()

    def _record(self, msg, *_, **__):
        self.messages.append(msg)
        if msg == "refresh_joined":
            self.joined.set()

    info = debug = warning = error = _record


class _StaticSource:
    def __init__(self, records):
        self.records = records
        self.calls = 0

    def load(self):
        self.calls += 1
        return self.records


class _FailingSource:
    def load(self):
        raise ConnectionError("upstream down")


class _BlockingSource:
    def __init__(self, records):
        self.records = records
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    def load(self):
        self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        return self.records


def _records():
    return [DailyRecord(day=date(2026, 1, 1), daily_active_users=3)]


def test_refresh_swaps_in_records_and_reports():
    store = RecordStore()
    logger = _FakeLogger()
    coordinator = RefreshCoordinator(
        _StaticSource(_records()), ReportCompiler(), store, logger=logger
    )

    snapshot = coordinator.refresh()

    assert store.snapshot() is snapshot
    assert len(store.records()) == 1
    assert set(store.current_reports()) == {info.id for info in REPORT_CATALOG}
    assert logger.messages == ["refresh_started", "refresh_completed"]
    assert coordinator.in_progress is False


def test_concurrent_callers_share_one_refresh():
    source = _BlockingSource(_records())
    logger = _FakeLogger()
    coordinator = RefreshCoordinator(source, ReportCompiler(), RecordStore(), logger=logger)
    results = []

    leader = threading.Thread(target=lambda: results.append(coordinator.refresh()))
    leader.start()
    assert source.entered.wait(timeout=5)

    follower = threading.Thread(target=lambda: results.append(coordinator.refresh()))
    follower.start()
    assert logger.joined.wait(timeout=5)

    source.release.set()
    leader.join(timeout=5)
    follower.join(timeout=5)

    assert source.calls == 1
    assert len(results) == 2
    assert results[0] is results[1]


def test_failure_keeps_last_good_snapshot_by_default():
    store = RecordStore()
    good = RefreshCoordinator(_StaticSource(_records()), ReportCompiler(), store)
    good.refresh()
    previous = store.snapshot()
    logger = _FakeLogger()
    failing = RefreshCoordinator(
        _FailingSource(), ReportCompiler(), store, logger=logger
    )

    with pytest.raises(RefreshError) as excinfo:
        failing.refresh()

    assert store.snapshot() is previous
    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert excinfo.value.context["policy"] == "keep_last_good"
    assert "refresh_failed" in logger.messages


def test_failure_with_swap_empty_policy_clears_store():
    store = RecordStore()
    RefreshCoordinator(_StaticSource(_records()), ReportCompiler(), store).refresh()
    failing = RefreshCoordinator(
        _FailingSource(),
        ReportCompiler(),
        store,
        policy=RefreshFailurePolicy.SWAP_EMPTY,
    )

    with pytest.raises(RefreshError):
        failing.refresh()

    assert store.records() == ()
    assert set(store.current_reports()) == {info.id for info in REPORT_CATALOG}


def test_failure_reaches_every_waiter():
    class _BlockingFailure(_BlockingSource):
        def load(self):
            super().load()
            raise ConnectionError("boom")

    source = _BlockingFailure([])
    logger = _FakeLogger()
    coordinator = RefreshCoordinator(source, ReportCompiler(), RecordStore(), logger=logger)
    errors = []

    def call():
        try:
            coordinator.refresh()
        except RefreshError as exc:
            errors.append(exc)

    leader = threading.Thread(target=call)
    leader.start()
    assert source.entered.wait(timeout=5)
    follower = threading.Thread(target=call)
    follower.start()
    assert logger.joined.wait(timeout=5)
    source.release.set()
    leader.join(timeout=5)
    follower.join(timeout=5)

    assert len(errors) == 2
    assert source.calls == 1


def test_next_refresh_runs_after_previous_completes():
    source = _StaticSource(_records())
    coordinator = RefreshCoordinator(source, ReportCompiler(), RecordStore())

    coordinator.refresh()
    coordinator.refresh()

    assert source.calls == 2


def test_policy_accepts_string_value():
    coordinator = RefreshCoordinator(
        _StaticSource([]), ReportCompiler(), RecordStore(), policy="swap_empty"
    )
    assert coordinator.policy is RefreshFailurePolicy.SWAP_EMPTY
