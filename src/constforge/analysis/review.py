"""Review workflow for detected literals.

Each occurrence moves DISCOVERED → REVIEWED → APPLIED | REJECTED.
APPLIED and REJECTED are terminal. The workflow only records human
decisions; applying a change to source files is left to the reviewer.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from constforge.analysis.schemas import DetectedOccurrence, ScanReport
from constforge.constants import OccurrenceState
from constforge.errors import InvalidTransitionError

_TRANSITIONS: dict[OccurrenceState, frozenset[OccurrenceState]] = {
    OccurrenceState.DISCOVERED: frozenset({OccurrenceState.REVIEWED}),
    OccurrenceState.REVIEWED: frozenset({
        OccurrenceState.APPLIED,
        OccurrenceState.REJECTED,
    }),
    OccurrenceState.APPLIED: frozenset(),
    OccurrenceState.REJECTED: frozenset(),
}


@dataclass
class MigrationCandidate:
    """One occurrence under review."""

    occurrence: DetectedOccurrence
    state: OccurrenceState = OccurrenceState.DISCOVERED
    note: str = ""
    history: list[OccurrenceState] = field(
        default_factory=lambda: [OccurrenceState.DISCOVERED]
    )

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def review(self, note: str = "") -> None:
        self._transition(OccurrenceState.REVIEWED)
        if note:
            self.note = note

    def apply(self) -> None:
        self._transition(OccurrenceState.APPLIED)

    def reject(self, reason: str = "") -> None:
        self._transition(OccurrenceState.REJECTED)
        if reason:
            self.note = reason

    def _transition(self, target: OccurrenceState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)
        self.state = target
        self.history.append(target)


class MigrationPlan:
    """All candidates from one scan, with per-state bookkeeping."""

    def __init__(self, occurrences: Iterable[DetectedOccurrence]) -> None:
        self._candidates = [MigrationCandidate(o) for o in occurrences]

    @classmethod
    def from_report(cls, report: ScanReport) -> MigrationPlan:
        return cls(report.occurrences)

    @property
    def candidates(self) -> list[MigrationCandidate]:
        return list(self._candidates)

    def by_state(self, state: OccurrenceState) -> list[MigrationCandidate]:
        return [c for c in self._candidates if c.state is state]

    def for_file(self, file_path: str) -> list[MigrationCandidate]:
        return [
            c for c in self._candidates
            if c.occurrence.file_path == file_path
        ]

    def counts(self) -> dict[OccurrenceState, int]:
        tally = Counter(c.state for c in self._candidates)
        return {state: tally.get(state, 0) for state in OccurrenceState}

    @property
    def is_complete(self) -> bool:
        """True once every candidate reached APPLIED or REJECTED."""
        return all(c.is_terminal for c in self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)
