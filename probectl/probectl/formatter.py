"""
Output formatting utilities
"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from rich import box
import json

from .client import ProbeOutcome


console = Console()


def print_success(message: str):
    """Print success message"""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str):
    """Print error message"""
    console.print(f"[red]✗[/red] {message}", style="red")


def print_warning(message: str):
    """Print warning message"""
    console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")


def print_info(message: str):
    """Print info message"""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_json(data, title: str | None = None):
    """Print JSON data"""
    json_str = json.dumps(data, indent=2, ensure_ascii=False)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)

    if title:
        console.print(Panel(syntax, title=title, border_style="blue"))
    else:
        console.print(syntax)


def print_probe_outcome(outcome: ProbeOutcome):
    """Print a probe result, one row per failed check"""
    if outcome.healthy:
        print_success(f"{outcome.endpoint}: OK")
        return

    print_error(f"{outcome.endpoint}: HTTP {outcome.status_code}")

    failures = outcome.failures
    if not failures:
        console.print(f"  {outcome.body.strip()}", style="dim")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Failed check", style="cyan")

    for i, tag in enumerate(failures, start=1):
        table.add_row(str(i), f"[red]{tag}[/red]")

    console.print(table)
