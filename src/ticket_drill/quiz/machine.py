"""Quiz state machine driving a practice session.

The machine is the only writer of its :class:`Session`. Every public
operation either performs a valid transition and persists the result, or
returns ``False`` and leaves the session untouched.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from .builder import build_tickets
from .models import Phase, Session, SessionSettings, Ticket
from .pool import PoolProvider, parse_statements
from .store import SessionStore

__all__ = ["QuizStateMachine", "SessionSummary"]

_LOGGER = logging.getLogger("ticket_drill.quiz.machine")


@dataclass(frozen=True)
class SessionSummary:
    """Aggregate outcome shown once a session is finished."""

    correct: int
    total: int
    percent: int
    perfect_tickets: int
    ticket_count: int


class QuizStateMachine:
    """Own a :class:`Session` and expose the learner-facing operations."""

    def __init__(
        self,
        settings: SessionSettings,
        pool_provider: PoolProvider,
        store: SessionStore | None = None,
        *,
        session: Session | None = None,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._pool_provider = pool_provider
        self._store = store
        self._rng = rng or random.Random(settings.seed)
        self._logger = logger or _LOGGER
        self._session = session or Session.idle(settings)

    @classmethod
    def restore(
        cls,
        settings: SessionSettings,
        pool_provider: PoolProvider,
        store: SessionStore,
        *,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> "QuizStateMachine":
        """Resume from ``store`` or start idle when nothing usable is saved."""

        log = logger or _LOGGER
        session = store.restore()
        if session is not None and session.phase is Phase.IDLE:
            session = None
        if session is not None and not _fits(session, settings):
            log.info(
                "Ignoring saved session that does not match settings",
                extra={
                    "phase": session.phase.value,
                    "tickets": len(session.tickets),
                    "expected": settings.ticket_count,
                },
            )
            session = None
        return cls(
            settings,
            pool_provider,
            store,
            session=session,
            rng=rng,
            logger=logger,
        )

    # Read-only views -------------------------------------------------

    @property
    def settings(self) -> SessionSettings:
        return self._settings

    @property
    def phase(self) -> Phase:
        return self._session.phase

    @property
    def current_index(self) -> int:
        return self._session.current_index

    @property
    def current_ticket(self) -> Optional[Ticket]:
        if self._session.phase is not Phase.ACTIVE:
            return None
        return self._session.current_ticket

    @property
    def ticket_count(self) -> int:
        return len(self._session.tickets)

    @property
    def running_score(self) -> int:
        return self._session.running_score

    @property
    def total_possible(self) -> int:
        return self._session.total_possible

    @property
    def is_last_ticket(self) -> bool:
        return self._session.current_index == len(self._session.tickets) - 1

    @property
    def can_advance(self) -> bool:
        ticket = self.current_ticket
        if ticket is None:
            return False
        return ticket.revealed or ticket.is_ready

    def snapshot(self) -> Session:
        """Return a detached copy of the session for inspection."""

        return Session.from_dict(self._session.to_dict())

    def summary(self) -> SessionSummary:
        session = self._session
        total = session.total_possible
        percent = round(session.running_score * 100 / total) if total else 0
        perfect = sum(
            1
            for ticket in session.tickets
            if ticket.revealed and ticket.score == ticket.size
        )
        return SessionSummary(
            correct=session.running_score,
            total=total,
            percent=percent,
            perfect_tickets=perfect,
            ticket_count=len(session.tickets),
        )

    # Transitions -----------------------------------------------------

    def start(self) -> bool:
        """Build a fresh set of tickets and enter the active phase.

        Pool and settings errors propagate to the caller before anything is
        changed, so a failed start leaves the current session as it was.
        """

        if self._session.phase is Phase.ACTIVE:
            self._logger.debug("start ignored while a session is active")
            return False
        statements = parse_statements(self._pool_provider())
        tickets = build_tickets(statements, self._settings, self._rng)
        self._session = Session(
            phase=Phase.ACTIVE,
            tickets=tickets,
            current_index=0,
            running_score=0,
            total_possible=self._settings.ticket_count
            * self._settings.ticket_size,
        )
        self._logger.info(
            "Session started",
            extra={
                "tickets": len(tickets),
                "pool_size": len(statements),
                "total_possible": self._session.total_possible,
            },
        )
        self._persist()
        return True

    def toggle_selection(self, index: int) -> bool:
        ticket = self.current_ticket
        if ticket is None or ticket.revealed:
            return False
        if not ticket.mark(index):
            return False
        self._persist()
        return True

    def advance(self) -> bool:
        """Reveal the current ticket, or move past an already revealed one."""

        ticket = self.current_ticket
        if ticket is None:
            return False
        session = self._session

        if not ticket.revealed:
            if not ticket.reveal():
                return False
            session.running_score += ticket.score or 0
            self._logger.info(
                "Ticket revealed",
                extra={
                    "ticket": session.current_index,
                    "score": ticket.score,
                    "running_score": session.running_score,
                },
            )
        elif self.is_last_ticket:
            session.phase = Phase.FINISHED
            self._logger.info(
                "Session finished",
                extra={
                    "running_score": session.running_score,
                    "total_possible": session.total_possible,
                },
            )
        else:
            session.current_index += 1
        self._persist()
        return True

    def reset(self) -> None:
        self._session = Session.idle(self._settings)
        self._logger.info("Session reset")
        self._persist()

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self._session)


def _fits(session: Session, settings: SessionSettings) -> bool:
    if len(session.tickets) != settings.ticket_count:
        return False
    if not 0 <= session.current_index < len(session.tickets):
        return False
    earned = sum(
        ticket.score or 0 for ticket in session.tickets if ticket.revealed
    )
    return earned == session.running_score
