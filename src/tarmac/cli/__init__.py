"""
Tarmac CLI.

The main Click group is defined here and command groups are
registered from their own modules.

Entry point: tarmac.cli:main
"""

from __future__ import annotations

from typing import Optional

import click

from .. import API_KEY_ENV, AUTH_ENV, __version__
from ._common import GlobalOptions, configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="tarmac")
@click.option(
    "--auth",
    envvar=AUTH_ENV,
    default=None,
    help="The .ROBLOSECURITY cookie to authenticate with.",
)
@click.option(
    "--api-key",
    envvar=API_KEY_ENV,
    show_envvar=True,
    default=None,
    help="The Open Cloud API key to authenticate with.",
)
@click.option(
    "--verbose", "-v", "verbosity", count=True,
    help="Increase log output. Repeat for more.",
)
@click.pass_context
def main(
    ctx: click.Context,
    auth: Optional[str],
    api_key: Optional[str],
    verbosity: int,
):
    """Tarmac: upload and track image assets for Roblox projects."""
    if auth and api_key:
        raise click.UsageError("--auth and --api-key cannot be used together.")

    configure_logging(verbosity)
    ctx.obj = GlobalOptions(auth=auth, api_key=api_key, verbosity=verbosity)


# ---------------------------------------------------------------------------
# Register all commands from modular files
# ---------------------------------------------------------------------------

from .images import register_image_commands
from .project import register_project_commands

register_image_commands(main)
register_project_commands(main)
