"""jj-forge CLI -- stacked changes and code review for jj repositories.

This module is NEVER imported from jj_forge/__init__.py.
It is only loaded via the ``jj-forge`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from rich.logging import RichHandler

from jj_forge.cli.formatting import format_error, get_console, get_error_console
from jj_forge.exceptions import ForgeError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from jj_forge.jj.client import JJClient


def _configure_logging(verbose: bool) -> None:
    """Route jj_forge log records to stderr through rich."""
    handler = RichHandler(
        console=get_error_console(),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger("jj_forge")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False


@click.group()
@click.option(
    "-R",
    "--repo",
    default=None,
    envvar="JJ_FORGE_REPO",
    help="Path to the jj repository (discovered by jj if omitted).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every jj command.")
@click.version_option(package_name="jj-forge")
@click.pass_context
def cli(ctx: click.Context, repo: str | None, verbose: bool) -> None:
    """jj-forge: stacked changes and code review on top of jj."""
    ctx.ensure_object(dict)
    ctx.obj["repo"] = repo
    _configure_logging(verbose)


def _get_client(ctx: click.Context) -> JJClient:
    """Build a JJClient from Click context.

    Tests may place a ready client under ``ctx.obj["client"]``.
    """
    from jj_forge.jj.client import JJClient

    client = ctx.obj.get("client")
    if client is None:
        client = JJClient(repository=ctx.obj["repo"])
    return client


@contextmanager
def _jj_session(ctx: click.Context) -> Iterator[tuple[JJClient, Console]]:
    """Yield (client, console) and turn ForgeErrors into CLI errors.

    Commands with special exception handling can catch specific errors inside
    the ``with`` block before this context manager's generic handler runs.
    """
    console = get_console()
    try:
        yield _get_client(ctx), console
    except SystemExit:
        raise
    except ForgeError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from jj_forge.cli.commands.change import change  # noqa: E402
from jj_forge.cli.commands.review import review  # noqa: E402

cli.add_command(change)
cli.add_command(review)
