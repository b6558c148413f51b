"""Rich formatting helpers for the jj-forge CLI.

Provides functions that format operation results for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from jj_forge.models.results import OpenResult, SubmitResult, UploadResult


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def get_error_console() -> Console:
    """Console for progress logging, kept off stdout."""
    return Console(stderr=True)


def format_upload_result(result: UploadResult, console: Console) -> None:
    """Summarize an upload: what was pushed, then what was skipped."""
    if result.pushed or result.trailers_updated:
        console.print(
            f"Pushed [green]{result.pushed}[/green] change(s), "
            f"updated [green]{result.trailers_updated}[/green] trailer(s)",
            highlight=False,
        )
    if result.skipped:
        console.print(
            f"[dim]Skipped {result.skipped} change(s) "
            f"(empty: {result.skipped_empty}, anonymous: {result.skipped_anonymous}, "
            f"synced: {result.skipped_synced})[/dim]",
            highlight=False,
        )
    if not (result.pushed or result.trailers_updated or result.skipped):
        console.print("[dim]Nothing to upload.[/dim]")


def format_submit_result(result: SubmitResult, console: Console) -> None:
    console.print(f"Submitted [green]{result.submitted}[/green] change(s)", highlight=False)
    if result.already_landed:
        console.print(
            f"[dim]{result.already_landed} change(s) were already on the remote branch[/dim]",
            highlight=False,
        )


def format_open_result(result: OpenResult, console: Console) -> None:
    console.print(
        f"Opened review [yellow]#{result.number}[/yellow] for {escape(result.change_id)}",
        highlight=False,
    )
    console.print(f"  {escape(result.url)}", highlight=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
