from __future__ import annotations

from ticket_drill.workspace import cli


def test_drill_init_creates_workspace_from_env(_isolated_workspace, capsys):
    code = cli.main([])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    assert "(created)" in captured.out
    for name in ("config", "logs", "pools", "state"):
        assert (_isolated_workspace / name).is_dir()


def test_drill_init_supports_custom_path(tmp_path, capsys):
    target = tmp_path / "custom"

    code = cli.main(["--path", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert target.is_dir()
    assert str(target) in captured.out
    assert "questions.json" in captured.out


def test_drill_init_reports_existing_directories(tmp_path, capsys):
    target = tmp_path / "again"
    cli.main(["--path", str(target), "--quiet"])
    assert capsys.readouterr().out == ""

    cli.main(["--path", str(target)])

    assert "(exists)" in capsys.readouterr().out


def test_drill_init_fails_cleanly_when_path_is_file(tmp_path, capsys):
    target = tmp_path / "occupied"
    target.write_text("not a directory", encoding="utf-8")

    code = cli.main(["--path", str(target)])

    assert code == 1
    assert "not a directory" in capsys.readouterr().err
