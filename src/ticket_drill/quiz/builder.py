"""Ticket generation: quota-constrained sampling and session assembly."""

from __future__ import annotations

import random
from typing import Dict, List, Sequence, TypeVar

from .models import SessionSettings, Statement, Ticket
from .pool import PoolTooSmallError, partition

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""

    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def sample_statements(
    trues: Sequence[Statement],
    falses: Sequence[Statement],
    true_count: int,
    false_count: int,
    rng: random.Random,
) -> List[Statement]:
    """Pick ``true_count`` true and ``false_count`` false statements.

    Draws are uniform with replacement; an id already taken for this ticket is
    drawn again. Quotas larger than the number of distinct ids on either side
    raise :class:`PoolTooSmallError` before any drawing starts.
    """

    _require_distinct(trues, true_count, "true")
    _require_distinct(falses, false_count, "false")

    picked: Dict[str, Statement] = {}
    for source, quota in ((trues, true_count), (falses, false_count)):
        # Ids shared between the two sides would otherwise never be accepted.
        fresh = {item.id for item in source} - picked.keys()
        if len(fresh) < quota:
            raise PoolTooSmallError(
                "Pool ids overlap between true and false statements; cannot "
                f"fill a quota of {quota}."
            )
        taken = 0
        while taken < quota:
            candidate = rng.choice(source)
            if candidate.id in picked:
                continue
            picked[candidate.id] = candidate
            taken += 1
    return shuffled(list(picked.values()), rng)


def build_tickets(
    statements: Sequence[Statement],
    settings: SessionSettings,
    rng: random.Random,
) -> List[Ticket]:
    """Build ``settings.ticket_count`` tickets in play order.

    Every ticket samples from the whole pool, so a statement can show up in
    several tickets but never twice within one.
    """

    trues, falses = partition(statements)
    quotas = sorted({settings.min_true, settings.max_true})
    # Fail before drawing anything if the largest quota cannot be met.
    _require_distinct(trues, quotas[-1], "true")
    _require_distinct(falses, settings.ticket_size - quotas[0], "false")

    tickets: List[Ticket] = []
    for _ in range(settings.ticket_count):
        true_required = rng.choice(quotas)
        chosen = sample_statements(
            trues,
            falses,
            true_required,
            settings.ticket_size - true_required,
            rng,
        )
        tickets.append(Ticket(statements=chosen, true_required=true_required))
    return tickets


def _require_distinct(
    source: Sequence[Statement], quota: int, label: str
) -> None:
    available = len({item.id for item in source})
    if available < quota:
        raise PoolTooSmallError(
            f"A ticket needs {quota} {label} statement(s) but the pool only "
            f"has {available} distinct one(s)."
        )
