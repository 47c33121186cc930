"""Tests for the occurrence review workflow."""

from __future__ import annotations

import pytest

from constforge.analysis.review import MigrationCandidate, MigrationPlan
from constforge.analysis.schemas import DetectedOccurrence, ScanReport
from constforge.constants import OccurrenceState
from constforge.errors import InvalidTransitionError


def _occurrence(file_path: str = "a.ts", line: int = 1) -> DetectedOccurrence:
    return DetectedOccurrence(
        file_path=file_path,
        line=line,
        column=1,
        matched_literal="30000",
        matched_atomic_id="time_ms:30000",
        context_snippet="30000",
    )


class TestMigrationCandidate:
    def test_happy_path(self) -> None:
        candidate = MigrationCandidate(_occurrence())
        candidate.review("swap for REQUEST_TIMEOUT_MS")
        candidate.apply()
        assert candidate.state is OccurrenceState.APPLIED
        assert candidate.is_terminal
        assert candidate.history == [
            OccurrenceState.DISCOVERED,
            OccurrenceState.REVIEWED,
            OccurrenceState.APPLIED,
        ]
        assert candidate.note == "swap for REQUEST_TIMEOUT_MS"

    def test_reject_records_reason(self) -> None:
        candidate = MigrationCandidate(_occurrence())
        candidate.review()
        candidate.reject("HTTP status, not a timeout")
        assert candidate.state is OccurrenceState.REJECTED
        assert candidate.note == "HTTP status, not a timeout"

    def test_cannot_apply_unreviewed(self) -> None:
        candidate = MigrationCandidate(_occurrence())
        with pytest.raises(InvalidTransitionError, match="discovered"):
            candidate.apply()

    def test_terminal_states_are_final(self) -> None:
        candidate = MigrationCandidate(_occurrence())
        candidate.review()
        candidate.reject()
        with pytest.raises(InvalidTransitionError):
            candidate.review()


class TestMigrationPlan:
    def test_counts_and_completion(self) -> None:
        report = ScanReport(
            occurrences=[_occurrence("a.ts", 1), _occurrence("a.ts", 2),
                         _occurrence("b.py", 1)]
        )
        plan = MigrationPlan.from_report(report)
        assert len(plan) == 3
        assert len(plan.for_file("a.ts")) == 2
        assert not plan.is_complete

        for candidate in plan.candidates:
            candidate.review()
        first, second, third = plan.candidates
        first.apply()
        second.reject()
        assert plan.counts() == {
            OccurrenceState.DISCOVERED: 0,
            OccurrenceState.REVIEWED: 1,
            OccurrenceState.APPLIED: 1,
            OccurrenceState.REJECTED: 1,
        }
        assert plan.by_state(OccurrenceState.REVIEWED) == [third]

        third.apply()
        assert plan.is_complete

    def test_empty_plan_is_complete(self) -> None:
        assert MigrationPlan([]).is_complete
