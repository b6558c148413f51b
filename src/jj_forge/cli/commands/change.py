"""jj-forge change -- upload and submit stacks of changes."""

from __future__ import annotations

import click


@click.group()
def change() -> None:
    """Work with stacks of changes."""


@change.command()
@click.argument("revset")
@click.option(
    "--remote",
    default="og",
    show_default=True,
    envvar="JJ_FORGE_REMOTE",
    help="Remote to push changes to.",
)
@click.pass_context
def upload(ctx: click.Context, revset: str, remote: str) -> None:
    """Update forge-parent trailers and push every change in REVSET."""
    from jj_forge.cli import _jj_session
    from jj_forge.cli.formatting import format_upload_result
    from jj_forge.operations.upload import upload as run_upload

    with _jj_session(ctx) as (client, console):
        result = run_upload(client, revset, remote)
        format_upload_result(result, console)


@change.command()
@click.argument("revset")
@click.option(
    "--remote",
    default="og",
    show_default=True,
    envvar="JJ_FORGE_REMOTE",
    help="Remote holding the target branch.",
)
@click.option(
    "--branch",
    default="main",
    show_default=True,
    envvar="JJ_FORGE_BRANCH",
    help="Branch to fast-forward.",
)
@click.pass_context
def submit(ctx: click.Context, revset: str, remote: str, branch: str) -> None:
    """Land the linear stack REVSET on BRANCH, one change at a time."""
    from jj_forge.cli import _jj_session
    from jj_forge.cli.formatting import format_error, format_submit_result
    from jj_forge.exceptions import RemoteStateError
    from jj_forge.operations.submit import submit as run_submit

    with _jj_session(ctx) as (client, console):
        try:
            result = run_submit(client, revset, remote, branch)
        except RemoteStateError as e:
            format_error(str(e), console)
            console.print(f"[dim]{e.submitted} change(s) were pushed before the failure.[/dim]")
            raise SystemExit(1) from None
        format_submit_result(result, console)
