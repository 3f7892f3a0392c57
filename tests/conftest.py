from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Callable

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import PoolBuilder, make_records  # noqa: E402
from ticket_drill.quiz import (  # noqa: E402
    QuizStateMachine,
    SessionSettings,
    SessionStore,
)


@pytest.fixture(autouse=True)
def _isolated_workspace(tmp_path: Path, monkeypatch) -> Path:
    """Keep every test away from the real ~/.ticket-drill directory."""

    home = tmp_path / "drill-home"
    monkeypatch.setenv("TICKET_DRILL_HOME", str(home))
    for key in (
        "TICKET_DRILL_CONFIG",
        "TICKET_DRILL_POOL",
        "TICKET_DRILL_STATE_FILE",
        "TICKET_DRILL_TICKET_COUNT",
        "TICKET_DRILL_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def records() -> list[dict[str, object]]:
    """Five true and five false statements in the on-disk record shape."""

    return make_records(trues=5, falses=5)


@pytest.fixture
def pools(tmp_path: Path) -> PoolBuilder:
    return PoolBuilder(tmp_path / "pools")


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
    return SessionStore(tmp_path / "state" / "session.json")


@pytest.fixture
def machine_factory(
    records, store
) -> Callable[..., QuizStateMachine]:
    def _factory(**settings_kwargs) -> QuizStateMachine:
        settings_kwargs.setdefault("ticket_count", 3)
        settings = SessionSettings(**settings_kwargs)
        return QuizStateMachine(
            settings,
            lambda: records,
            store,
            rng=random.Random(7),
        )

    return _factory
