import pytest

from ticket_drill import cli


@pytest.fixture(autouse=True)
def fixed_version(monkeypatch):
    def fake_version(name: str) -> str:
        assert name == "ticket-drill"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_command(capsys):
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "0.0-test"


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    assert code == 0
    assert capsys.readouterr().out.strip() == "unknown"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: drill" in captured.out
    assert "Available commands:" in captured.out


def test_list_outputs_command_table(capsys):
    assert cli.main(["list"]) == 0
    out = capsys.readouterr().out
    assert "init" in out
    assert "play" in out
    assert "(TUI)" in out


def test_help_known_and_unknown_command(capsys):
    assert cli.main(["help", "play"]) == 0
    assert "Run `drill play --help`" in capsys.readouterr().out

    assert cli.main(["help", "nope"]) == 2
    assert "Unknown command 'nope'." in capsys.readouterr().err


def test_unknown_command_returns_error(capsys):
    assert cli.main(["bogus"]) == 2
    assert "Unknown command 'bogus'." in capsys.readouterr().err


def test_dispatches_to_workspace_init(tmp_path, capsys):
    target = tmp_path / "ws"

    code = cli.main(["init", "--path", str(target)])

    assert code == 0
    assert target.is_dir()
    assert "Workspace ready" in capsys.readouterr().out


def test_dispatch_normalizes_system_exit(capsys):
    code = cli.main(["play", "--help"])

    assert code == 0
    assert "drill play" in capsys.readouterr().out


def test_dispatch_reports_argparse_errors(capsys):
    code = cli.main(["play", "--tickets", "many"])

    assert code == 2
    assert "invalid int value" in capsys.readouterr().err
