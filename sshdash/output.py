"""CLI output formatting."""

from __future__ import annotations

import enum

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import ConfigError
from .resolution import (
    Diagnosis,
    ResolutionOutcome,
    ResolutionStep,
    StepStatus,
)

STEP_WIDTH = 40

_STEP_LABELS = {
    ResolutionStep.CONFIG_WRITE: "Adding Host to Config...",
    ResolutionStep.PRIMARY_PROBE: "Testing Host...",
    ResolutionStep.INVENTORY_LOOKUP: "Checking Inventory...",
    ResolutionStep.ALTERNATE_PROBE: "Testing Alternate Host...",
}

_STATUS_STYLES = {
    StepStatus.PASS: "green",
    StepStatus.FAIL: "red",
    StepStatus.ERROR: "red",
    StepStatus.NONE: "yellow",
}


class OutputFormat(str, enum.Enum):
    """Output format for CLI commands."""

    HUMAN = "human"
    JSON = "json"


def _status_label(
    step: ResolutionStep, status: StepStatus, detail: str | None
) -> str:
    match step, status:
        case ResolutionStep.INVENTORY_LOOKUP, StepStatus.PASS if detail:
            return f"[{detail}]"
        case ResolutionStep.CONFIG_WRITE, StepStatus.PASS:
            return "[SUCCESS]"
        case _:
            return f"[{status.name}]"


class StepPrinter:
    """Prints ``Label...  [STATUS]`` lines for engine progress."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console()

    def start(self, label: str) -> None:
        self.console.print(Text(label.ljust(STEP_WIDTH)), end="")

    def end(self, text: str, style: str) -> None:
        self.console.print(Text(text, style=style))

    def on_step_start(self, step: ResolutionStep) -> None:
        self.start(_STEP_LABELS[step])

    def on_step_end(
        self,
        step: ResolutionStep,
        status: StepStatus,
        detail: str | None,
    ) -> None:
        self.end(_status_label(step, status, detail), _STATUS_STYLES[status])


def diagnosis_message(diagnosis: Diagnosis, fqdn: str) -> str:
    """The single user-facing message for a failed resolution."""
    match diagnosis:
        case Diagnosis.HOST_ONLINE_SSH_REFUSED:
            return (
                f"The host {fqdn} is online, "
                "but is not accepting SSH connections"
            )
        case Diagnosis.CHECK_VPN:
            return (
                "Local network resources cannot be reached. "
                "Should you be connected to the VPN?"
            )
        case Diagnosis.NO_INTERNET:
            return (
                "You may not have access to the internet. "
                "Please verify this, then try again."
            )
        case Diagnosis.HOST_UNREACHABLE:
            return f"The host {fqdn} cannot be reached."


def print_diagnosis(
    outcome: ResolutionOutcome,
    *,
    console: Console | None = None,
) -> None:
    """Print the diagnosis of a failed resolution to stderr."""
    if outcome.diagnosis is None:
        return
    if console is None:
        console = Console(stderr=True)
    console.print()
    console.print(
        Text(diagnosis_message(outcome.diagnosis, outcome.fqdn), style="red")
    )
    console.print()


def print_human_outcome(
    outcome: ResolutionOutcome,
    *,
    console: Console | None = None,
) -> None:
    """Print a summary table of a resolution."""
    if console is None:
        console = Console()

    table = Table(title="Probes:")
    table.add_column("Target", style="bold")
    table.add_column("TCP 22")
    table.add_column("ICMP")
    for probe in outcome.probes:
        table.add_row(
            probe.target,
            _yes_no(probe.reachable_tcp22),
            _yes_no(probe.reachable_icmp),
        )
    console.print(table)

    if outcome.endpoint is not None:
        via = " (via inventory)" if outcome.endpoint.via_alternate else ""
        console.print(
            Text(f"Resolved: {outcome.endpoint.fqdn_or_ip}{via}", "green")
        )
    elif outcome.diagnosis is not None:
        console.print(
            Text(diagnosis_message(outcome.diagnosis, outcome.fqdn), "red")
        )


def _yes_no(value: bool) -> Text:
    return Text("yes", style="green") if value else Text("no", style="red")


def print_error(message: str, *, console: Console | None = None) -> None:
    if console is None:
        console = Console(stderr=True)
    console.print(Text(message, style="red"))


def print_config_error(
    e: ConfigError,
    *,
    console: Console | None = None,
) -> None:
    """Print a ConfigError as a Rich panel to stderr."""
    if console is None:
        console = Console(stderr=True)
    cause = e.__cause__
    match cause:
        case ValidationError():
            lines: list[str] = []
            for err in cause.errors():
                loc = " → ".join(str(p) for p in err["loc"])
                msg = err["msg"]
                if msg.startswith("Value error, "):
                    prefix_len = len("Value error, ")
                    msg = msg[prefix_len:]
                if loc:
                    lines.append(f"{loc}: {msg}")
                else:
                    lines.append(msg)
            body = "\n".join(lines)
        case _:
            body = str(e)
    console.print(Panel(body, title="Config error", style="red"))
