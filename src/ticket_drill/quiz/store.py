"""Best-effort snapshot persistence for the practice session.

The snapshot is local convenience state: a failed save only loses progress,
and an unreadable snapshot is treated as if none existed. Neither case raises.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from .models import Session, SnapshotError

__all__ = ["SessionStore"]

SNAPSHOT_FILENAME = "session.json"

_LOGGER = logging.getLogger("ticket_drill.quiz.store")


class SessionStore:
    """Read and overwrite a single JSON snapshot of a :class:`Session`."""

    def __init__(
        self, path: Path, *, logger: logging.Logger | None = None
    ) -> None:
        self._path = Path(path)
        self._logger = logger or _LOGGER

    @property
    def path(self) -> Path:
        return self._path

    def save(self, session: Session) -> bool:
        try:
            _atomic_write_json(self._path, session.to_dict())
        except (OSError, TypeError, ValueError) as exc:
            self._logger.warning(
                "Could not save session snapshot",
                extra={"path": self._path, "error": str(exc)},
            )
            return False
        self._logger.debug(
            "Saved session snapshot",
            extra={"path": self._path, "phase": session.phase.value},
        )
        return True

    def restore(self) -> Optional[Session]:
        payload = self._read_payload()
        if payload is None:
            return None
        try:
            return Session.from_dict(payload)
        except SnapshotError as exc:
            self._logger.warning(
                "Discarding invalid session snapshot",
                extra={"path": self._path, "error": str(exc)},
            )
            return None

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            self._logger.warning(
                "Could not remove session snapshot",
                extra={"path": self._path, "error": str(exc)},
            )

    def _read_payload(self) -> Optional[Mapping[str, Any]]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            self._logger.warning(
                "Could not read session snapshot",
                extra={"path": self._path, "error": str(exc)},
            )
            return None
        if not raw.strip():
            return None
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as exc:
            self._logger.warning(
                "Session snapshot is not valid JSON",
                extra={"path": self._path, "error": str(exc)},
            )
            return None
        if not isinstance(payload, dict):
            return None
        return payload


def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
        prefix=f".{path.name}.",
    )
    try:
        try:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        finally:
            handle.close()
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
