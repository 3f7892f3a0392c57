from .builder import build_tickets, sample_statements, shuffled
from .config import (
    ConfigOverrides,
    LoadResult,
    QuizConfig,
    QuizConfigError,
    load_config,
)
from .machine import QuizStateMachine, SessionSummary
from .models import (
    Phase,
    Session,
    SessionSettings,
    SettingsError,
    SnapshotError,
    Statement,
    StatementVerdict,
    Ticket,
)
from .pool import (
    PoolError,
    PoolLoadError,
    PoolTooSmallError,
    PoolValidationError,
    file_provider,
    parse_statements,
    partition,
    read_pool_file,
)
from .store import SessionStore
from .view import parse_command, run_session

__all__ = [
    "build_tickets",
    "sample_statements",
    "shuffled",
    "ConfigOverrides",
    "LoadResult",
    "QuizConfig",
    "QuizConfigError",
    "load_config",
    "QuizStateMachine",
    "SessionSummary",
    "Phase",
    "Session",
    "SessionSettings",
    "SettingsError",
    "SnapshotError",
    "Statement",
    "StatementVerdict",
    "Ticket",
    "PoolError",
    "PoolLoadError",
    "PoolTooSmallError",
    "PoolValidationError",
    "file_provider",
    "parse_statements",
    "partition",
    "read_pool_file",
    "SessionStore",
    "parse_command",
    "run_session",
]
