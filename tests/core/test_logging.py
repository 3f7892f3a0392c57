from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

import pytest

from ticket_drill.core import logging as core_logging


@pytest.fixture
def cleanup_logger():
    names: list[str] = []

    def _register(name: str) -> str:
        names.append(name)
        return name

    yield _register

    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [
        handler
        for handler in logger.handlers
        if getattr(handler, "_ticket_drill_console", False)
    ]


def test_configure_logger_writes_json(tmp_path, cleanup_logger):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        cleanup_logger("ticket_drill.test"),
        log_dir=log_dir,
        level="INFO",
        filename="test.log",
    )

    logger.debug("filtered out")
    logger.info("session started", extra={"tickets": 3, "pool": log_dir})

    class _Opaque:
        def __repr__(self):  # noqa: D401
            return "opaque"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={"detail": {"ids": ("t0", "f1")}, "obj": _Opaque()},
        )
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2

    first = json.loads(lines[0])
    assert first["message"] == "session started"
    assert first["level"] == "INFO"
    assert first["logger"] == "ticket_drill.test"
    assert first["extra"] == {"tickets": 3, "pool": str(log_dir)}

    last = json.loads(lines[-1])
    assert "ValueError: boom" in last["exception"]
    assert last["extra"]["detail"] == {"ids": ["t0", "f1"]}
    assert last["extra"]["obj"] == "opaque"


def test_configure_logger_defaults_filename_from_logger_name(
    tmp_path, cleanup_logger
):
    _, log_path = core_logging.configure_logger(
        cleanup_logger("ticket_drill.quizlog"),
        log_dir=tmp_path,
    )

    assert log_path.name == "quizlog.log"


def test_configure_logger_reuses_file_handler_for_same_path(
    tmp_path, cleanup_logger
):
    name = cleanup_logger("ticket_drill.test_reuse")
    logger, first = core_logging.configure_logger(
        name, log_dir=tmp_path / "a", filename="drill.log"
    )
    core_logging.configure_logger(
        name, log_dir=tmp_path / "a", filename="drill.log"
    )
    assert len(logger.handlers) == 1

    _, second = core_logging.configure_logger(
        name, log_dir=tmp_path / "b", filename="drill.log"
    )

    assert len(logger.handlers) == 1
    assert second != first
    assert second.parent == tmp_path / "b"


def test_console_handler_toggle(tmp_path, cleanup_logger):
    name = cleanup_logger("ticket_drill.test_toggle")
    log_dir = tmp_path / "logs"

    logger, _ = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(_console_handlers(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(_console_handlers(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=False, filename="toggle.log"
    )
    assert not _console_handlers(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch, cleanup_logger):
    target = tmp_path / "blocked"
    fallback = tmp_path / "fallback-logs"
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    _, log_path = core_logging.configure_logger(
        cleanup_logger("ticket_drill.test_blocked"),
        log_dir=target,
        filename="blocked.log",
    )

    assert log_path.parent == fallback
    assert log_path.exists()


def test_configure_logger_rotating_handler_fallback(
    tmp_path, monkeypatch, cleanup_logger
):
    calls = {"count": 0}
    fallback_dir = tmp_path / "rotate-fallback"
    original_handler = core_logging.RotatingFileHandler

    def fake_handler(path, *args, **kwargs):  # noqa: ANN001
        calls["count"] += 1
        if calls["count"] == 1:
            raise PermissionError("denied")
        return original_handler(path, *args, **kwargs)

    monkeypatch.setattr(core_logging, "RotatingFileHandler", fake_handler)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback_dir)

    _, log_path = core_logging.configure_logger(
        cleanup_logger("ticket_drill.test_rotating_fallback"),
        log_dir=tmp_path / "primary",
        filename="rotate.log",
    )

    assert log_path.parent == fallback_dir
    assert calls["count"] == 2


def test_fallback_log_dir_uses_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))

    assert core_logging._fallback_log_dir() == tmp_path / "ticket-drill-logs"


@pytest.mark.parametrize(
    ("name", "expected"),
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("bogus", logging.INFO)],
)
def test_level_from_name(name, expected):
    assert core_logging._level_from_name(name) == expected
