"""Utility functions for terminal UI."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..client.models import Verdict
from ..workspace.renderer import Banner, OutputView

console = Console()


def create_table(title: str, headers: list) -> Table:
    """Create a formatted table for display."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for header in headers:
        table.add_column(header)
    return table


def format_verdict_color(verdict: Verdict) -> str:
    """Format a verdict with appropriate color."""
    if verdict is Verdict.PASSED:
        return f"[green]{verdict.value}[/green]"
    elif verdict is Verdict.FAILED:
        return f"[red]{verdict.value}[/red]"
    else:
        return f"[magenta]{verdict.value}[/magenta]"


def format_banner(banner: Banner) -> str:
    if banner is Banner.POSITIVE:
        return f"[bold green]✔ {banner.value}[/bold green]"
    return f"[bold red]✘ {banner.value}[/bold red]"


def print_output(view: OutputView, out: Console = None) -> None:
    """Print an output panel view."""
    out = out or console

    if view.state in ("loading", "idle"):
        out.print(f"[dim]{view.text}[/dim]")
        return

    subtitle = None
    if view.runtime is not None:
        subtitle = f"Runtime: {view.runtime}"
        if view.memory:
            subtitle += f"  Memory: {view.memory}"

    style = "red" if view.is_error else "white"
    # Program output is shown literally, never parsed as markup
    body = Text(view.text) if view.text else Text("(no output)", style="dim")
    if view.state == "waiting":
        body = Text(view.text, style="dim")
    out.print(
        Panel(body, title="Console", subtitle=subtitle, style=style, expand=True)
    )

    if view.cases:
        table = Table(title="Test Cases", show_header=True, header_style="bold magenta")
        table.add_column("#", style="cyan")
        table.add_column("Input", style="white")

        for case in view.cases:
            if case.hidden:
                table.add_row(str(case.ordinal), "[italic dim]Hidden test case[/italic dim]")
            else:
                table.add_row(str(case.ordinal), Text(case.input_text))

        out.print(table)

    if view.banner is not None:
        out.print(format_banner(view.banner))

    if view.submission_id:
        out.print(f"[bold]Submission:[/bold] {view.submission_id}")
