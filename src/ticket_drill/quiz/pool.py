"""Loading and validating the statement pool."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, List, Mapping, Sequence, Tuple

from .models import Statement

PoolProvider = Callable[[], Sequence[Mapping[str, Any]]]

_LABEL_KEYS = ("isTrue", "is_true")


class PoolError(RuntimeError):
    """Base class for pool configuration problems."""


class PoolLoadError(PoolError):
    """The pool file is missing or is not valid JSON."""


class PoolValidationError(PoolError):
    """A pool record lacks a boolean true/false label."""


class PoolTooSmallError(PoolError):
    """The pool cannot satisfy a ticket's true/false quotas."""


def read_pool_file(path: Path) -> List[Mapping[str, Any]]:
    """Read raw pool records from a JSON array or a JSON-lines file."""

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PoolLoadError(f"Question pool not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise PoolLoadError(f"Question pool {path} is not UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise PoolLoadError(f"Unable to read question pool {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".jsonl":
            records = [
                json.loads(line) for line in text.splitlines() if line.strip()
            ]
        else:
            records = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise PoolLoadError(f"Question pool {path} is not valid JSON: {exc}") from exc

    if not isinstance(records, list):
        raise PoolLoadError(
            f"Question pool {path} must hold a list of statements."
        )
    return records


def file_provider(path: Path) -> PoolProvider:
    """Return a provider that re-reads ``path`` on every call."""

    def _provide() -> Sequence[Mapping[str, Any]]:
        return read_pool_file(path)

    return _provide


def parse_statements(records: Sequence[object]) -> List[Statement]:
    """Convert raw records into statements, rejecting unlabeled ones.

    Every record must carry a real boolean under ``isTrue`` (or
    ``is_true``); strings such as ``"true"`` are rejected rather than guessed.
    """

    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        raise PoolValidationError("Question pool must be a list of records.")
    statements: List[Statement] = []
    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise PoolValidationError(
                f"Pool record #{position} is not an object."
            )
        label = _label_of(record)
        if not isinstance(label, bool):
            raise PoolValidationError(
                f"Pool record #{position} needs a true/false 'isTrue' field."
            )
        statements.append(
            Statement(
                id=str(record.get("id", position)),
                text=str(record.get("text", "")).strip(),
                is_true=label,
            )
        )
    return statements


def partition(
    statements: Sequence[Statement],
) -> Tuple[List[Statement], List[Statement]]:
    trues = [item for item in statements if item.is_true]
    falses = [item for item in statements if not item.is_true]
    return trues, falses


def _label_of(record: Mapping[str, Any]) -> object:
    for key in _LABEL_KEYS:
        if key in record:
            return record[key]
    return None
