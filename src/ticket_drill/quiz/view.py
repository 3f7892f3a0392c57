"""Rich terminal front-end driving a :class:`QuizStateMachine`.

Rendering and input handling stay thin: every learner action is mapped to
one machine operation, and the screen is redrawn from the machine's
read-only views afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .machine import QuizStateMachine
from .models import Phase, Ticket
from .pool import PoolError

InputProvider = Callable[[], str]
ExitAction = Literal["quit", "interrupted"]

_HINTS = {
    "missed": "Should have been marked.",
    "wrong_mark": "Should not be marked.",
}


@dataclass(frozen=True)
class Command:
    """A parsed learner command."""

    type: Literal["start", "toggle", "advance", "reset", "quit"]
    index: int | None = None


def parse_command(raw: str | None, phase: Phase) -> Command | None:
    """Map raw input to a command valid for ``phase``.

    An empty line advances during play. Digits are 1-based statement
    numbers.
    """

    if raw is None:
        return None
    text = raw.strip().lower()
    if text in {"q", "quit", "exit"}:
        return Command("quit")
    if text in {"r", "reset"}:
        return Command("reset")
    if phase is Phase.ACTIVE:
        if text in {"", "n", "next"}:
            return Command("advance")
        if text.isdigit() and int(text) > 0:
            return Command("toggle", int(text) - 1)
        return None
    if text in {"s", "start", "a", "again"}:
        return Command("start")
    return None


def run_session(
    machine: QuizStateMachine,
    console: Console,
    input_provider: InputProvider,
) -> ExitAction:
    """Loop until the learner quits or input runs out."""

    while True:
        render(machine, console)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted; progress saved.[/]")
            return "interrupted"
        command = parse_command(raw, machine.phase)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("[bold yellow]Bye! Progress is saved.[/]")
            return "quit"
        _apply(command, machine, console)


def _apply(
    command: Command, machine: QuizStateMachine, console: Console
) -> None:
    if command.type == "reset":
        machine.reset()
        console.print("[yellow]Progress cleared.[/]")
    elif command.type == "start":
        try:
            machine.start()
        except PoolError as exc:
            console.print(f"[red]Cannot start: {escape(str(exc))}[/]")
    elif command.type == "toggle" and command.index is not None:
        ticket = machine.current_ticket
        if not machine.toggle_selection(command.index) and ticket is not None:
            if ticket.revealed:
                console.print("[dim]This ticket is already checked.[/]")
            elif command.index >= ticket.size:
                console.print(
                    f"[red]Pick a number from 1 to {ticket.size}.[/]"
                )
            else:
                console.print(
                    "[red]Selection limit reached; unmark a statement "
                    "first.[/]"
                )
    elif command.type == "advance":
        if not machine.advance():
            ticket = machine.current_ticket
            needed = ticket.true_required if ticket else 0
            console.print(f"[red]Mark exactly {needed} statement(s) first.[/]")


def render(machine: QuizStateMachine, console: Console) -> None:
    if machine.phase is Phase.ACTIVE:
        render_ticket(machine, console)
    elif machine.phase is Phase.FINISHED:
        render_summary(machine, console)
    else:
        render_idle(console)


def render_idle(console: Console) -> None:
    console.print(
        Panel(
            "Pick the true statements in each ticket.\n"
            "Commands: s (start), r (reset), q (quit)",
            title="Ticket Drill",
            border_style="cyan",
        )
    )


def task_text(ticket: Ticket) -> str:
    if ticket.true_required == 1:
        return "Which statement is true?"
    return "Which statements are true?"


def render_ticket(machine: QuizStateMachine, console: Console) -> None:
    ticket = machine.current_ticket
    if ticket is None:
        return
    header = Text.assemble(
        (f"Ticket {machine.current_index + 1}", "bold cyan"),
        (f" / {machine.ticket_count}", "dim"),
        ("   Score: ", "dim"),
        (f"{machine.running_score}/{machine.total_possible}", "bold"),
    )
    console.print()
    console.rule(header)
    console.print(Text(task_text(ticket), style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Statement", overflow="fold")
    if ticket.revealed:
        table.add_column("Result")
        for idx, verdict in enumerate(ticket.verdicts(), start=1):
            label = "True" if verdict.statement.is_true else "False"
            style = "green" if verdict.statement.is_true else "red"
            result = Text(label, style=f"bold {style}")
            if verdict.hint:
                result.append(f"  {_HINTS[verdict.hint]}", style="dim")
            table.add_row(
                str(idx),
                _statement_text(verdict.statement.text, verdict.marked),
                result,
            )
    else:
        for idx, (statement, marked) in enumerate(
            zip(ticket.statements, ticket.selections), start=1
        ):
            table.add_row(str(idx), _statement_text(statement.text, marked))
    console.print(table)

    if ticket.revealed:
        console.print(
            Text(f"{ticket.score}/{ticket.size}", style="bold magenta")
        )
        action = "finish" if machine.is_last_ticket else "next ticket"
        hint = f"Commands: Enter/n ({action}), r (reset), q (quit)"
    else:
        hint = (
            f"Marked {ticket.marked_count}/{ticket.true_required} | "
            f"Commands: 1-{ticket.size} (toggle), Enter/n (check), "
            "r (reset), q (quit)"
        )
    console.print(Text(hint, style="dim"))


def _statement_text(text: str, marked: bool) -> Text:
    marker = "[x] " if marked else "[ ] "
    line = Text(marker)
    line.append(text, style="bold green" if marked else "")
    return line


def render_summary(machine: QuizStateMachine, console: Console) -> None:
    summary = machine.summary()
    console.print()
    console.rule(Text("Done!", style="bold magenta"))
    table = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Correct", f"{summary.correct}/{summary.total}")
    table.add_row("Accuracy", f"{summary.percent}%")
    table.add_row(
        "Perfect tickets", f"{summary.perfect_tickets}/{summary.ticket_count}"
    )
    console.print(table)
    console.print(
        Text("Commands: a (again), r (reset), q (quit)", style="dim")
    )
