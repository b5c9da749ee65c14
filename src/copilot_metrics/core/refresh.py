"""Single-flight refresh of the record store."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from enum import Enum
from typing import Optional

from copilot_metrics.domain.exceptions import RefreshError
from copilot_metrics.domain.interfaces import IRecordSource, IReportCompiler

from .store import RecordStore, Snapshot


class RefreshFailurePolicy(str, Enum):
    """What the store holds after a failed refresh."""

    KEEP_LAST_GOOD = "keep_last_good"
    SWAP_EMPTY = "swap_empty"


class RefreshCoordinator:
    """Loads records, compiles reports and swaps them into the store.

    At most one refresh runs at a time. Callers arriving while a refresh is in
    flight wait on the same future and receive its snapshot or its error.
    """

    def __init__(
        self,
        source: IRecordSource,
        compiler: IReportCompiler,
        store: RecordStore,
        *,
        policy: RefreshFailurePolicy = RefreshFailurePolicy.KEEP_LAST_GOOD,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._source = source
        self._compiler = compiler
        self._store = store
        self._policy = RefreshFailurePolicy(policy)
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None

    @property
    def policy(self) -> RefreshFailurePolicy:
        return self._policy

    @property
    def in_progress(self) -> bool:
        return self._inflight is not None

    def refresh(self) -> Snapshot:
        with self._lock:
            future = self._inflight
            leader = future is None
            if leader:
                future = Future()
                self._inflight = future

        if not leader:
            self._logger.debug("refresh_joined")
            return future.result()

        try:
            snapshot = self._run()
        except BaseException as exc:
            self._settle(future)
            future.set_exception(exc)
            raise
        self._settle(future)
        future.set_result(snapshot)
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run(self) -> Snapshot:
        self._logger.info("refresh_started", extra={"policy": self._policy.value})
        started = time.perf_counter()
        try:
            records = list(self._source.load())
            reports = self._compiler.compile(records)
        except Exception as exc:
            self._logger.error(
                "refresh_failed",
                extra={"policy": self._policy.value, "error": str(exc)},
            )
            if self._policy is RefreshFailurePolicy.SWAP_EMPTY:
                self._store.replace((), self._compiler.compile(()))
            raise RefreshError(
                context={"policy": self._policy.value, "error": str(exc)}
            ) from exc

        snapshot = self._store.replace(records, reports)
        self._logger.info(
            "refresh_completed",
            extra={
                "record_count": len(snapshot.records),
                "report_count": len(snapshot.reports),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return snapshot

    def _settle(self, future: Future) -> None:
        with self._lock:
            if self._inflight is future:
                self._inflight = None
