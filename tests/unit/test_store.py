from datetime import date

import pytest

from copilot_metrics.core.store import RecordStore, Snapshot
from copilot_metrics.domain.models import DailyRecord, Report


def _report(report_id: str) -> Report:
    return Report(id=report_id, title=report_id, markdown="")


def test_store_starts_empty():
    store = RecordStore()

    assert store.records() == ()
    assert dict(store.current_reports()) == {}
    assert store.snapshot().is_empty
    assert store.snapshot().refreshed_at is None


def test_replace_swaps_records_and_reports_together():
    store = RecordStore()
    before = store.snapshot()

    after = store.replace([DailyRecord(day=date(2026, 1, 1))], {"a": _report("a")})

    assert store.snapshot() is after
    assert before.records == ()
    assert len(after.records) == 1
    assert list(after.reports) == ["a"]
    assert after.refreshed_at is not None


def test_exposed_collections_are_read_only():
    store = RecordStore()
    reports = {"a": _report("a")}
    store.replace([], reports)
    reports["b"] = _report("b")

    assert "b" not in store.current_reports()
    assert isinstance(store.records(), tuple)
    with pytest.raises(TypeError):
        store.current_reports()["c"] = _report("c")  # type: ignore[index]


def test_store_can_be_seeded_with_snapshot():
    snapshot = Snapshot(records=(DailyRecord(day=date(2026, 1, 1)),))
    assert RecordStore(snapshot).records() == snapshot.records
