"""jj-forge review -- open forge reviews for uploaded changes."""

from __future__ import annotations

import click


@click.group()
def review() -> None:
    """Manage forge reviews."""


@review.command("open")
@click.argument("rev")
@click.option("--reviewer", "reviewers", multiple=True, help="Reviewer username (repeatable).")
@click.option(
    "--upstream-remote",
    default="up",
    show_default=True,
    help="Remote the review is opened against.",
)
@click.option(
    "--fork-remote",
    default="og",
    show_default=True,
    envvar="JJ_FORGE_REMOTE",
    help="Remote the change was uploaded to.",
)
@click.pass_context
def open_(
    ctx: click.Context,
    rev: str,
    reviewers: tuple[str, ...],
    upstream_remote: str,
    fork_remote: str,
) -> None:
    """Open a review for the uploaded change REV.

    Reviewers default to forge.default-reviewer from the repo config.
    """
    from jj_forge.cli import _jj_session
    from jj_forge.cli.formatting import format_open_result
    from jj_forge.forge.config import ConfigManager
    from jj_forge.operations.review import OpenParams, open_review

    with _jj_session(ctx) as (client, console):
        config = ConfigManager(client)
        if not reviewers:
            default = config.get_default_reviewer()
            reviewers = (default,) if default else ()
        params = OpenParams(
            rev=rev,
            reviewers=reviewers,
            upstream_remote=upstream_remote,
            fork_remote=fork_remote,
        )
        forge = _get_forge(ctx)
        try:
            result = open_review(client, forge, config, params)
        finally:
            close = getattr(forge, "close", None)
            if close is not None:
                close()
        format_open_result(result, console)


def _get_forge(ctx: click.Context):
    """Return the forge client, or a test double from ``ctx.obj["forge"]``."""
    forge = ctx.obj.get("forge")
    if forge is None:
        from jj_forge.forge.github import GitHubClient

        forge = GitHubClient()
    return forge
