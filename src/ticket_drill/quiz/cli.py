"""CLI entry point for interactive practice sessions."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from rich.console import Console

from ticket_drill.core import config_templates
from ticket_drill.core import workspace as workspace_mod
from ticket_drill.core.config_templates import ConfigTemplateError
from ticket_drill.core.logging import configure_logger
from ticket_drill.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
)
from .machine import QuizStateMachine
from .models import Phase
from .pool import file_provider
from .store import SessionStore
from .view import run_session

LOGGER_NAME = "ticket_drill.quiz"


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to drill.toml (defaults to the workspace config directory).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (TICKET_DRILL_HOME).",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        help="Where session progress is saved.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drill play",
        description=(
            "Work through tickets of true/false statements, marking the true "
            "ones. Progress is saved after every action."
        ),
        epilog=(
            "Other actions: `drill play status`, `drill play reset`, "
            "`drill play config init`."
        ),
    )
    _add_common_options(parser)
    parser.add_argument(
        "--pool",
        type=Path,
        help="Question pool (JSON array or JSONL of isTrue-labelled records).",
    )
    parser.add_argument(
        "--tickets",
        type=int,
        dest="ticket_count",
        help="Number of tickets per session.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed the ticket generator for a reproducible session.",
    )
    parser.add_argument("--log-level", help="Logging level (default INFO).")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    load_dotenv()

    head = args_list[:1]
    if head == ["config"]:
        return _handle_config(args_list[1:])
    if head == ["status"]:
        return _handle_status(args_list[1:])
    if head == ["reset"]:
        return _handle_reset(args_list[1:])

    parser = _build_parser()
    args = parser.parse_args(args_list)

    overrides = ConfigOverrides(
        pool=args.pool,
        state_file=args.state_file,
        ticket_count=args.ticket_count,
        seed=args.seed,
        log_level=args.log_level,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))

    machine = _restore_machine(load_result, verbose=args.verbose)
    console = Console()
    run_session(machine, console, console.input)
    return 0


def _restore_machine(
    load_result: LoadResult, *, verbose: bool = False
) -> QuizStateMachine:
    config = load_result.config
    logger, _ = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=verbose,
        filename="drill.log",
    )
    store = SessionStore(config.state_path, logger=logger.getChild("store"))
    machine = QuizStateMachine.restore(
        config.settings,
        file_provider(config.pool_path),
        store,
        logger=logger.getChild("machine"),
    )
    logger.debug(
        "drill play invoked",
        extra={
            "pool": config.pool_path,
            "state": config.state_path,
            "phase": machine.phase.value,
        },
    )
    return machine


def _build_simple_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    _add_common_options(parser)
    return parser


def _load_for(parser: argparse.ArgumentParser, args: argparse.Namespace):
    try:
        return load_config(
            config_path=args.config,
            overrides=ConfigOverrides(state_file=args.state_file),
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))


def _handle_status(argv: Sequence[str]) -> int:
    parser = _build_simple_parser(
        "drill play status", "Show saved practice progress."
    )
    args = parser.parse_args(argv)
    load_result = _load_for(parser, args)
    machine = _restore_machine(load_result)

    if machine.phase is Phase.IDLE:
        sys.stdout.write("No session in progress.\n")
        return 0
    if machine.phase is Phase.FINISHED:
        summary = machine.summary()
        lines = [
            "Session finished.",
            f"  correct:         {summary.correct}/{summary.total}",
            f"  accuracy:        {summary.percent}%",
            f"  perfect tickets: "
            f"{summary.perfect_tickets}/{summary.ticket_count}",
        ]
    else:
        lines = [
            "Session in progress.",
            f"  ticket: {machine.current_index + 1}/{machine.ticket_count}",
            f"  score:  {machine.running_score}/{machine.total_possible}",
        ]
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


def _handle_reset(argv: Sequence[str]) -> int:
    parser = _build_simple_parser(
        "drill play reset", "Discard saved practice progress."
    )
    args = parser.parse_args(argv)
    load_result = _load_for(parser, args)
    machine = _restore_machine(load_result)
    machine.reset()
    sys.stdout.write(
        f"Progress cleared ({load_result.config.state_path}).\n"
    )
    return 0


def _handle_config(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="drill play config",
        description="Manage the drill.toml configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    init_parser = subparsers.add_parser(
        "init", help="Write the default drill.toml template."
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help="Destination (defaults to the workspace config directory).",
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used to resolve the default destination.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config.",
    )
    args = parser.parse_args(argv)

    try:
        if args.path is not None:
            target = args.path.expanduser().absolute()
        else:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
            target = layout.path_for("config") / CONFIG_FILENAME
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = config_templates.get_template("drill").write(
            target, overwrite=args.force
        )
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote drill config to {written}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
