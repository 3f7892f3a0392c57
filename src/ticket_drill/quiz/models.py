"""Data structures for statements, tickets and practice sessions.

A :class:`Ticket` owns its own selection rules (quota-bounded marking and
one-way reveal); a :class:`Session` is the plain aggregate the state machine
mutates and the store snapshots. Both convert to and from JSON-ready dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, MutableMapping

__all__ = [
    "Phase",
    "SettingsError",
    "SnapshotError",
    "SessionSettings",
    "Statement",
    "StatementVerdict",
    "Ticket",
    "Session",
    "SNAPSHOT_VERSION",
]

SNAPSHOT_VERSION = 1

Hint = Literal["missed", "wrong_mark"]


class SettingsError(RuntimeError):
    """Raised when session sizing options are inconsistent."""


class SnapshotError(RuntimeError):
    """Raised when a stored payload does not describe a valid session."""


class Phase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


@dataclass(frozen=True)
class SessionSettings:
    """How many tickets to build and how each one is composed."""

    ticket_count: int = 40
    ticket_size: int = 3
    min_true: int = 1
    max_true: int = 2
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.ticket_count < 1:
            raise SettingsError("ticket_count must be at least 1.")
        if self.ticket_size < 1:
            raise SettingsError("ticket_size must be at least 1.")
        if not 1 <= self.min_true <= self.max_true <= self.ticket_size:
            raise SettingsError(
                "Expected 1 <= min_true <= max_true <= ticket_size, got "
                f"min_true={self.min_true}, max_true={self.max_true}, "
                f"ticket_size={self.ticket_size}."
            )

    @property
    def total_possible(self) -> int:
        return self.ticket_count * self.ticket_size


@dataclass(frozen=True)
class Statement:
    """A single true/false claim from the pool."""

    id: str
    text: str
    is_true: bool

    def to_dict(self) -> MutableMapping[str, Any]:
        return {"id": self.id, "text": self.text, "is_true": self.is_true}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Statement":
        label = payload.get("is_true")
        if not isinstance(label, bool):
            raise SnapshotError("Statement is missing a boolean 'is_true'.")
        if "id" not in payload:
            raise SnapshotError("Statement is missing an 'id'.")
        return cls(
            id=str(payload["id"]),
            text=str(payload.get("text", "")),
            is_true=label,
        )


@dataclass(frozen=True)
class StatementVerdict:
    """Post-reveal feedback for one statement of a ticket."""

    statement: Statement
    marked: bool
    correct: bool
    hint: Hint | None = None


@dataclass
class Ticket:
    """A fixed group of statements judged and scored together."""

    statements: list[Statement]
    true_required: int
    selections: list[bool] = field(default_factory=list)
    revealed: bool = False
    score: int | None = None

    def __post_init__(self) -> None:
        if not self.selections:
            self.selections = [False] * len(self.statements)
        if len(self.selections) != len(self.statements):
            raise SnapshotError(
                "Ticket selections must align with its statements."
            )

    @property
    def size(self) -> int:
        return len(self.statements)

    @property
    def marked_count(self) -> int:
        return sum(1 for marked in self.selections if marked)

    @property
    def is_ready(self) -> bool:
        return self.marked_count == self.true_required

    def mark(self, index: int) -> bool:
        """Toggle the mark on ``index``; return ``False`` when rejected.

        Unmarking is always allowed before reveal. A new mark is refused once
        ``true_required`` statements are already marked.
        """

        if self.revealed or not 0 <= index < self.size:
            return False
        if self.selections[index]:
            self.selections[index] = False
            return True
        if self.marked_count >= self.true_required:
            return False
        self.selections[index] = True
        return True

    def reveal(self) -> bool:
        """Freeze selections and score the ticket.

        Returns ``True`` only for the call that performed the transition, so
        callers can fold the score into a running total exactly once.
        """

        if self.revealed or not self.is_ready:
            return False
        self.score = sum(
            1
            for statement, marked in zip(self.statements, self.selections)
            if marked == statement.is_true
        )
        self.revealed = True
        return True

    def verdicts(self) -> list[StatementVerdict]:
        if not self.revealed:
            return []
        result: list[StatementVerdict] = []
        for statement, marked in zip(self.statements, self.selections):
            hint: Hint | None = None
            if statement.is_true and not marked:
                hint = "missed"
            elif marked and not statement.is_true:
                hint = "wrong_mark"
            result.append(
                StatementVerdict(
                    statement=statement,
                    marked=marked,
                    correct=marked == statement.is_true,
                    hint=hint,
                )
            )
        return result

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "statements": [item.to_dict() for item in self.statements],
            "true_required": self.true_required,
            "selections": list(self.selections),
            "revealed": self.revealed,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Ticket":
        raw_statements = payload.get("statements")
        raw_selections = payload.get("selections")
        if not isinstance(raw_statements, list) or not raw_statements:
            raise SnapshotError("Ticket must contain a list of statements.")
        if not isinstance(raw_selections, list):
            raise SnapshotError("Ticket must contain a list of selections.")
        if not all(isinstance(item, Mapping) for item in raw_statements):
            raise SnapshotError("Ticket statements must be objects.")
        if len(raw_selections) != len(raw_statements):
            raise SnapshotError(
                "Ticket selections must align with its statements."
            )
        if not all(isinstance(item, bool) for item in raw_selections):
            raise SnapshotError("Ticket selections must be booleans.")
        true_required = payload.get("true_required")
        if not _is_int(true_required):
            raise SnapshotError("Ticket 'true_required' must be an integer.")
        revealed = payload.get("revealed", False)
        if not isinstance(revealed, bool):
            raise SnapshotError("Ticket 'revealed' must be a boolean.")
        score = payload.get("score")
        if revealed and not _is_int(score):
            raise SnapshotError("Revealed ticket must carry an integer score.")
        statements = [Statement.from_dict(item) for item in raw_statements]
        if len({item.id for item in statements}) != len(statements):
            raise SnapshotError("Ticket repeats a statement id.")
        ticket = cls(
            statements=statements,
            true_required=true_required,
            selections=list(raw_selections),
            revealed=revealed,
            score=score if revealed else None,
        )
        if ticket.marked_count > ticket.true_required:
            raise SnapshotError("Ticket has more marks than its quota.")
        return ticket


@dataclass
class Session:
    """Progress through one ordered run of tickets."""

    phase: Phase = Phase.IDLE
    tickets: list[Ticket] = field(default_factory=list)
    current_index: int = 0
    running_score: int = 0
    total_possible: int = 0

    @classmethod
    def idle(cls, settings: SessionSettings) -> "Session":
        return cls(total_possible=settings.total_possible)

    @property
    def current_ticket(self) -> Ticket | None:
        if self.phase is Phase.IDLE or not self.tickets:
            return None
        if not 0 <= self.current_index < len(self.tickets):
            return None
        return self.tickets[self.current_index]

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "phase": self.phase.value,
            "current_index": self.current_index,
            "running_score": self.running_score,
            "total_possible": self.total_possible,
            "tickets": [ticket.to_dict() for ticket in self.tickets],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Session":
        if not isinstance(payload, Mapping):
            raise SnapshotError("Session snapshot must be an object.")
        tickets = payload.get("tickets")
        if not isinstance(tickets, list):
            raise SnapshotError("Session snapshot has no ticket list.")
        if not all(isinstance(item, Mapping) for item in tickets):
            raise SnapshotError("Session tickets must be objects.")
        current_index = payload.get("current_index")
        if not _is_int(current_index):
            raise SnapshotError("Session 'current_index' must be an integer.")
        try:
            phase = Phase(payload.get("phase", Phase.IDLE.value))
        except ValueError as exc:
            raise SnapshotError(f"Unknown session phase: {exc}") from exc
        running_score = payload.get("running_score", 0)
        total_possible = payload.get("total_possible", 0)
        if not _is_int(running_score) or not _is_int(total_possible):
            raise SnapshotError("Session scores must be integers.")
        return cls(
            phase=phase,
            tickets=[Ticket.from_dict(item) for item in tickets],
            current_index=current_index,
            running_score=running_score,
            total_possible=total_possible,
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
