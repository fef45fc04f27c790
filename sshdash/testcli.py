"""Developer test CLI: fake output rendering."""

from __future__ import annotations

import typer
from rich.console import Console

from .config import ConfigError
from .output import (
    StepPrinter,
    print_config_error,
    print_diagnosis,
    print_human_outcome,
)
from .resolution import ResolutionStep, StepStatus
from .testdata import alternate_outcome, direct_outcome, failed_outcomes

_console = Console()

app = typer.Typer(
    name="sshdash-test",
    help="sshdash developer test CLI",
    no_args_is_help=True,
)


@app.command()
def output() -> None:
    """Render all human output functions with fake data."""
    _show_steps()
    _show_outcomes()
    _show_diagnoses()
    _show_config_error()


@app.command()
def steps() -> None:
    """Render the progress lines of every step and status."""
    _show_steps()


def _header(title: str) -> None:
    _console.print()
    _console.rule(title)


def _show_steps() -> None:
    _header("Steps")
    printer = StepPrinter(_console)
    for step in ResolutionStep:
        for status in StepStatus:
            printer.on_step_start(step)
            detail = "192.168.1.50" if status is StepStatus.PASS else None
            printer.on_step_end(step, status, detail)


def _show_outcomes() -> None:
    _header("Resolved outcomes")
    print_human_outcome(direct_outcome(), console=_console)
    print_human_outcome(alternate_outcome(), console=_console)


def _show_diagnoses() -> None:
    _header("Diagnoses")
    for outcome in failed_outcomes():
        print_diagnosis(outcome, console=_console)


def _show_config_error() -> None:
    _header("Config error")
    print_config_error(
        ConfigError("Invalid YAML in config.yaml: bad indentation"),
        console=_console,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
