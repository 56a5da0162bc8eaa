"""Shared utilities for all CLI command modules.

Provides the Rich console, global option handling, and the wrapper
that runs a command coroutine and turns failures into exit codes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Optional

import click
from pydantic import BaseModel, SecretStr
from rich.console import Console
from rich.markup import escape

from ..manifest import ManifestError
from ..roblox_api import RobloxApiError, RobloxCredentials
from ..studio import StudioNotFoundError
from ..sync import SyncBackendError

console = Console()
logger = logging.getLogger("tarmac.cli")

COMMAND_ERRORS = (
    RobloxApiError,
    ManifestError,
    SyncBackendError,
    StudioNotFoundError,
    OSError,
)


class GlobalOptions(BaseModel):
    """Options shared by every command."""

    auth: Optional[SecretStr] = None
    api_key: Optional[SecretStr] = None
    verbosity: int = 0

    def credentials(
        self,
        use_api_key: bool = True,
        user_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> RobloxCredentials:
        return RobloxCredentials(
            token=self.auth,
            api_key=self.api_key if use_api_key else None,
            user_id=user_id,
            group_id=group_id,
        )


def configure_logging(verbosity: int) -> None:
    """Map ``-v`` counts to log levels: warning, info, debug."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")
    if verbosity < 3:
        logging.getLogger("urllib3").setLevel(max(level, logging.INFO))


def project_path(path: Optional[str]) -> Path:
    return Path(path).expanduser() if path else Path(os.getcwd())


def run_command(coro: Awaitable[Any]) -> Any:
    """Run a command coroutine, reporting known failures and exiting 1."""
    try:
        return asyncio.run(coro)
    except COMMAND_ERRORS as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[bold red]error:[/] {escape(str(exc))}")
        raise SystemExit(1)


def global_options(ctx: click.Context) -> GlobalOptions:
    return ctx.find_object(GlobalOptions) or GlobalOptions()
