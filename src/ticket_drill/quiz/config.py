"""Configuration loader for practice sessions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from ticket_drill.core import config as core_config
from ticket_drill.core import workspace as workspace_mod

from .models import SessionSettings, SettingsError

CONFIG_FILENAME = "drill.toml"
CONFIG_ENV = "TICKET_DRILL_CONFIG"
ENV_PREFIX = "TICKET_DRILL_"

POOL_FILENAME = "questions.json"
STATE_FILENAME = "session.json"

_DEFAULT_LOG_LEVEL = "INFO"


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved options for a practice run."""

    settings: SessionSettings
    pool_path: Path
    state_path: Path
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """Command-line values that win over env and file options."""

    pool: Optional[Path] = None
    state_file: Optional[Path] = None
    ticket_count: Optional[int] = None
    seed: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Resolve options with precedence CLI > env > TOML > defaults.

    A missing default config file is fine; a config file named explicitly
    (argument or ``TICKET_DRILL_CONFIG``) must exist.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    explicit = config_path or _env_path(env_map, "CONFIG")
    requested = (
        explicit.expanduser()
        if explicit is not None
        else layout.path_for("config") / CONFIG_FILENAME
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(table, core_config.load_toml(requested))
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
        loaded_path = requested
    elif explicit is not None:
        raise QuizConfigError(f"Config file not found: {requested}")

    session_table = table["session"]
    ticket_count = _first(
        overrides.ticket_count,
        _env_int(env_map, "TICKET_COUNT"),
        session_table["ticket_count"],
    )
    try:
        settings = SessionSettings(
            ticket_count=_as_int(ticket_count, "session.ticket_count"),
            ticket_size=_as_int(
                session_table["ticket_size"], "session.ticket_size"
            ),
            min_true=_as_int(session_table["min_true"], "session.min_true"),
            max_true=_as_int(session_table["max_true"], "session.max_true"),
            seed=overrides.seed,
        )
    except SettingsError as exc:
        raise QuizConfigError(str(exc)) from exc

    pool_path = _resolve_path(
        _first(
            overrides.pool,
            _env_path(env_map, "POOL"),
            _optional_path(table["paths"]["pool"], "paths.pool"),
        ),
        layout=layout,
        default=layout.path_for("pools") / POOL_FILENAME,
    )
    state_path = _resolve_path(
        _first(
            overrides.state_file,
            _env_path(env_map, "STATE_FILE"),
            _optional_path(table["paths"]["state_file"], "paths.state_file"),
        ),
        layout=layout,
        default=layout.path_for("state") / STATE_FILENAME,
    )
    log_level = _first(
        overrides.log_level,
        _env_string(env_map, "LOG_LEVEL"),
        table["logging"]["level"],
    )
    if not isinstance(log_level, str) or not log_level.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")

    config = QuizConfig(
        settings=settings,
        pool_path=pool_path,
        state_path=state_path,
        log_level=log_level.strip().upper(),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    defaults = SessionSettings()
    return {
        "session": {
            "ticket_count": defaults.ticket_count,
            "ticket_size": defaults.ticket_size,
            "min_true": defaults.min_true,
            "max_true": defaults.max_true,
        },
        "paths": {"pool": None, "state_file": None},
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_path(
    candidate: object, *, layout: workspace_mod.WorkspaceLayout, default: Path
) -> Path:
    if candidate is None:
        return default
    path = Path(candidate).expanduser()
    if not path.is_absolute():
        path = layout.home / path
    return path.resolve()


def _optional_path(value: object, key: str) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, str):
        return Path(value) if value.strip() else None
    raise QuizConfigError(f"{key} must be a string when provided.")


def _as_int(value: object, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuizConfigError(f"{key} must be an integer.")
    return value


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    return raw.strip() or None


def _env_path(env_map: Mapping[str, str], key: str) -> Optional[Path]:
    raw = _env_string(env_map, key)
    return Path(raw).expanduser() if raw is not None else None


def _env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got {raw!r}."
        ) from exc


def _first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
