"""Domain-level interfaces defining contracts for metrics collaborators."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from .models import DailyRecord, QueryResponse, Report


class IRecordSource(Protocol):
    """Produces the deduplicated record collection for the active window."""

    def load(self) -> Sequence[DailyRecord]:
        """Fetch and return one record per (scope, day)."""


class IRecordReader(Protocol):
    """Read-only access to the current record snapshot."""

    def records(self) -> Sequence[DailyRecord]:
        """Return an immutable view of the current records."""


class IReportCompiler(Protocol):
    """Turns a record snapshot into the full set of named reports."""

    def compile(self, records: Sequence[DailyRecord]) -> Mapping[str, Report]:
        """Return a fresh report mapping for the supplied records."""


class IQueryDispatcher(Protocol):
    """Answers free-text questions from the current snapshot."""

    def dispatch(self, prompt: str) -> QueryResponse:
        """Classify the prompt and build the matching response."""


class IQueryAgent(Protocol):
    """External conversational component that may answer before the rules do."""

    def answer(self, prompt: str) -> QueryResponse:
        """Return a response, or raise to defer to the rule-based dispatcher."""
