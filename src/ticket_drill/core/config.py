"""Reading, merging and writing ``drill.toml`` style documents."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when a TOML document cannot be read, parsed, merged or written."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Parse the TOML document at ``path``.

    Missing, unreadable, non-UTF-8 and malformed files all surface as
    :class:`TomlConfigError`.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise TomlConfigError(f"Config file {path} is not UTF-8 text.") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse {path}: {exc}") from exc
    except OSError as exc:
        raise TomlConfigError(f"Unable to read config {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Merge ``override`` into the defaults table ``base`` in place.

    Keys must already exist in ``base``. Tables merge recursively; a scalar
    must keep the type of its default (``ticket_count = "40"`` is rejected
    for an integer default). A ``None`` default accepts any value and leaves
    validation to the caller.
    """

    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        current = base[key]
        if isinstance(current, MutableMapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"Expected table for '{dotted}', found "
                    f"{type(value).__name__}."
                )
            merge_defaults(current, value, path=f"{dotted}.")
            continue
        if current is not None and not _same_kind(current, value):
            raise TomlConfigError(
                f"Expected {type(current).__name__} for '{dotted}', found "
                f"{type(value).__name__}."
            )
        base[key] = value


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path`` unless it exists and ``overwrite`` is off."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(template, encoding="utf-8")
    except OSError as exc:
        raise TomlConfigError(f"Could not write config {path}: {exc}") from exc
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _same_kind(default: object, value: object) -> bool:
    # bool is an int subclass; keep the two apart.
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(default, bool) and isinstance(value, bool)
    return isinstance(value, type(default))
