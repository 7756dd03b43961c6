"""
Rich terminal display utilities for CLI.

Provides formatted output using the Rich library for:
- Progress indicators
- Token tables
- Error messages
- Statistics tables
- Success/failure indicators
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from prefix_guard.types import Token


console = Console()


def print_header(title: str) -> None:
    """Print a formatted header."""
    console.print()
    console.print(f"[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))
    console.print()


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message with X mark."""
    console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info line. ``message`` is Rich markup; escape user text."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_separator() -> None:
    """Print a visual separator line."""
    console.print("[dim]" + "─" * 70 + "[/dim]")


def print_generated_text(text: str, prefix: str, title: str = "Generated Text") -> None:
    """
    Print generated text in a panel with the prefix highlighted.

    Args:
        text: Full generated text
        prefix: Requested prefix (highlighted if the text starts with it)
        title: Panel title
    """
    rendered = Text()
    if text.startswith(prefix):
        rendered.append(prefix, style="bold green")
        rendered.append(text[len(prefix):])
    else:
        rendered.append(text)

    console.print(Panel(rendered, title=f"[bold]{title}[/bold]", border_style="cyan"))


def print_tokens(tokens: Sequence[Token], title: str = "Tokens") -> None:
    """
    Print tokens as a table with logprob and metadata columns.

    Args:
        tokens: Token sequence
        title: Table title
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Value", style="white")
    table.add_column("Logprob", justify="right", width=10)
    table.add_column("Metadata", style="dim")

    for i, token in enumerate(tokens):
        metadata = ", ".join(f"{k}={v}" for k, v in token.metadata)
        table.add_row(str(i), escape(repr(token.value)), f"{token.logprob:.3f}", escape(metadata))

    console.print()
    console.print(table)


def print_json(data: Any, title: Optional[str] = None) -> None:
    """Print JSON data with syntax highlighting."""
    json_str = data if isinstance(data, str) else json.dumps(data, indent=2)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)

    if title:
        console.print(Panel(syntax, title=f"[bold]{title}[/bold]", border_style="cyan"))
    else:
        console.print(syntax)


def print_result_stats(
    is_success: bool,
    token_count: int,
    logprob: float,
    provider_calls: int,
    latency_ms: float,
    stop_reason: Optional[str] = None
) -> None:
    """
    Print generation statistics in a table.

    Args:
        is_success: Whether generation succeeded
        token_count: Number of tokens generated
        logprob: Total log-probability
        provider_calls: Candidates requested from the provider
        latency_ms: Generation latency in milliseconds
        stop_reason: Why generation stopped
    """
    table = Table(title="Generation Statistics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="white", width=30)

    status = Text("✓ Success", style="green bold") if is_success else Text("✗ Failed", style="red bold")
    table.add_row("Status", status)

    if stop_reason:
        table.add_row("Stop Reason", stop_reason)
    table.add_row("Tokens Generated", str(token_count))
    table.add_row("Total Logprob", f"{logprob:.3f}")
    table.add_row("Provider Calls", str(provider_calls))
    table.add_row("Latency", f"{latency_ms:.1f} ms")

    console.print()
    console.print(table)
    console.print()


def print_check_result(
    prefix: str,
    generated: str,
    remaining: Optional[str],
    candidate: Optional[str],
    accepted: Optional[bool]
) -> None:
    """Print the outcome of the check command."""
    table = Table(title="Prefix Check", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="cyan", width=20)
    table.add_column("Value", style="white")

    table.add_row("Prefix", escape(repr(prefix)))
    table.add_row("Generated", escape(repr(generated)))
    table.add_row("Remaining", "satisfied" if remaining is None else escape(repr(remaining)))

    if candidate is not None:
        table.add_row("Candidate", escape(repr(candidate)))
        verdict = Text("✓ accept", style="green bold") if accepted else Text("✗ reject", style="red bold")
        table.add_row("Decision", verdict)

    console.print()
    console.print(table)
    console.print()


def print_benchmark_results(results: List[Dict[str, Any]]) -> None:
    """
    Print benchmark results and a summary table.

    Args:
        results: List of result dictionaries with keys:
            - prefix: Requested prefix
            - is_success: Whether generation succeeded
            - error_type: Error class name (None on success)
            - token_count: Tokens generated
            - provider_calls: Provider calls made
            - latency_ms: Generation latency
    """
    table = Table(title="Benchmark Results", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Prefix", style="cyan", width=20)
    table.add_column("OK", justify="center", width=4)
    table.add_column("Tokens", justify="right", width=8)
    table.add_column("Calls", justify="right", width=8)
    table.add_column("Latency (ms)", justify="right", width=12)
    table.add_column("Error", style="red")

    for i, result in enumerate(results, 1):
        icon = "[green]✓[/green]" if result["is_success"] else "[red]✗[/red]"
        table.add_row(
            str(i),
            escape(repr(result["prefix"])),
            icon,
            str(result["token_count"]),
            str(result["provider_calls"]),
            f"{result['latency_ms']:.1f}",
            result.get("error_type") or ""
        )

    console.print()
    console.print(table)
    console.print()

    summary = summarize_benchmark(results)

    summary_table = Table(title="Summary", show_header=True, header_style="bold green")
    summary_table.add_column("Metric", style="cyan", width=25)
    summary_table.add_column("Value", style="white", width=25)

    summary_table.add_row(
        "Success Rate",
        f"{summary['success_rate']:.1f}% ({summary['successes']}/{summary['total']})"
    )
    summary_table.add_row("Average Tokens", f"{summary['avg_tokens']:.2f}")
    summary_table.add_row("Average Provider Calls", f"{summary['avg_provider_calls']:.2f}")
    summary_table.add_row("Average Latency", f"{summary['avg_latency_ms']:.1f} ms")
    for error_type, count in sorted(summary["errors"].items()):
        summary_table.add_row(f"Errors: {error_type}", str(count), style="red")

    console.print(summary_table)
    console.print()


def summarize_benchmark(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Aggregate benchmark rows into summary statistics."""
    total = len(results)
    successes = sum(1 for r in results if r["is_success"])

    errors: Dict[str, int] = {}
    for r in results:
        if r.get("error_type"):
            errors[r["error_type"]] = errors.get(r["error_type"], 0) + 1

    def average(key: str) -> float:
        return sum(r[key] for r in results) / total if total > 0 else 0.0

    return {
        "total": total,
        "successes": successes,
        "success_rate": (successes / total * 100) if total > 0 else 0.0,
        "avg_tokens": average("token_count"),
        "avg_provider_calls": average("provider_calls"),
        "avg_latency_ms": average("latency_ms"),
        "errors": errors,
    }


def create_progress_spinner() -> Progress:
    """Create a progress spinner for long-running operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    )
