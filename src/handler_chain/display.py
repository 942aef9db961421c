# display.py
# All terminal output for the handler chain.
#
# This module owns presentation entirely. The engine, the chain and the
# emitters never format strings; they call named functions here.
#
# Colour language:
#   cyan    — chain structure / routing events
#   green   — success / completed runs
#   red     — failures, halts, emitter breakage
#   yellow  — diagnostics that are not failures
#   magenta — per-step internals (phase / input / output)

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from handler_chain.models import ExecutionTrace, Phase

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


def _payload(data: bytes | None, max_len: int = 40) -> str:
    if data is None:
        return "∅"
    return escape(_mono(repr(data), max_len))


# ---------------------------------------------------------------------------
# Chain structure
# ---------------------------------------------------------------------------


def chain_built(names: list[str]) -> None:
    console.print()
    flow = escape(" → ".join(names)) if names else "(empty)"
    console.print(_label("CHAIN", "cyan"), f"[cyan] {flow}[/cyan]")


def out_of_range(operation: str, position: int, length: int) -> None:
    console.print(
        _label("CHAIN", "yellow"),
        f"[yellow] {operation}({position}) outside 0..{length - 1}; "
        "applied the out-of-range policy.[/yellow]",
    )


# ---------------------------------------------------------------------------
# Execution trace
# ---------------------------------------------------------------------------


def trace_rendered(trace: ExecutionTrace) -> None:
    console.print()
    console.print(Rule(f"[cyan]EXECUTION TRACE — {len(trace.steps)} step(s)[/cyan]", style="cyan"))

    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="dim",
        show_header=True,
        header_style="bold magenta",
        padding=(0, 1),
    )
    table.add_column("#", justify="center", width=4)
    table.add_column("Phase", justify="center", width=6)
    table.add_column("Handler", style="bold white", width=18)
    table.add_column("Input", style="dim white")
    table.add_column("Output", style="white")
    table.add_column("Error", style="red")

    for i, step in enumerate(trace.steps):
        arrow = "↓" if step.phase is Phase.PRE else "↑"
        table.add_row(
            str(i),
            f"{arrow} {step.phase.value}",
            escape(step.handler_name),
            _payload(step.input_payload),
            _payload(step.output_payload),
            "" if step.error is None else escape(_mono(repr(step.error), 60)),
        )

    if trace.succeeded:
        title, color = _label("RUN COMPLETE ✓", "green"), "green"
    else:
        title, color = _label("RUN HALTED ✗", "red"), "red"

    console.print(Panel(table, title=title, border_style=color, padding=(0, 1)))


# ---------------------------------------------------------------------------
# Emitter failures
# ---------------------------------------------------------------------------


def emitter_failed(emitter: str, exc: BaseException) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold red]Trace emitter {emitter!r} failed.[/bold red]\n"
            f"[white]{escape(_mono(repr(exc), 200))}[/white]\n"
            "[dim]The run result is unaffected; the trace was not delivered.[/dim]",
            title=_label("EMITTER FAILURE ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def emitter_dropped(dropped: int) -> None:
    console.print(
        _label("EMITTER", "yellow"),
        f"[yellow] Queue full — trace dropped ({dropped} total).[/yellow]",
    )


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------


def final_result(result: bytes | None) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]{_payload(result, 400)}[/white]",
            title=_label("RESULT", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(reason)}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()
