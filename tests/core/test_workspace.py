from __future__ import annotations

from pathlib import Path

import pytest

from ticket_drill.core import workspace


def test_ensure_workspace_creates_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert {name for name, _ in layout.items()} == {
        "config",
        "logs",
        "pools",
        "state",
    }
    for name, path in layout.items():
        assert path.is_dir()
        assert layout.created[name] is True
    assert layout.created["home"] is True


def test_ensure_workspace_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "existing"))

    first = workspace.ensure_workspace()
    second = workspace.ensure_workspace()

    assert first.home == second.home
    assert all(not created for created in second.created.values())


def test_ensure_workspace_prefers_explicit_path(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "env"))
    custom = tmp_path / "custom-root"

    layout = workspace.ensure_workspace(path=custom)

    assert layout.home == custom.resolve()
    assert not (tmp_path / "env").exists()


def test_ensure_workspace_without_create(tmp_path):
    root = tmp_path / "deferred"

    layout = workspace.ensure_workspace(
        env={workspace.WORKSPACE_ENV: str(root)}, create=False
    )

    assert layout.home == root.resolve()
    assert not root.exists()
    assert all(not created for created in layout.created.values())


def test_ensure_workspace_errors_when_path_is_file(tmp_path):
    root = tmp_path / "file"
    root.write_text("not a dir", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=root)


def test_path_for_unknown_key_errors(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "ws", create=False)

    with pytest.raises(KeyError):
        layout.path_for("unknown")


def test_default_workspace_falls_back_on_permission(tmp_path, monkeypatch):
    default = tmp_path / "locked-home"
    fallback = tmp_path / "fallback"
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", default)
    monkeypatch.setattr(workspace, "_fallback_base", lambda: fallback)
    real_ensure_dir = workspace._ensure_dir

    def fake_ensure_dir(path: Path) -> bool:
        if path == default.resolve():
            raise PermissionError("denied")
        return real_ensure_dir(path)

    monkeypatch.setattr(workspace, "_ensure_dir", fake_ensure_dir)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == fallback.resolve()
    assert layout.created["home"] is True


def test_explicit_workspace_does_not_fall_back(tmp_path, monkeypatch):
    monkeypatch.setattr(workspace, "_fallback_base", lambda: tmp_path / "fb")

    def deny(path: Path) -> bool:  # noqa: D401
        raise PermissionError("nope")

    monkeypatch.setattr(workspace, "_ensure_dir", deny)

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=tmp_path / "explicit")
    assert not (tmp_path / "fb").exists()
