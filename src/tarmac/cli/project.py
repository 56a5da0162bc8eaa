"""Project commands: create-cache-map, asset-list."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..asset_list import write_asset_list
from ..cache_map import create_cache_map
from ..manifest import Manifest
from ..roblox_api import get_preferred_client
from ._common import console, global_options, project_path, run_command


def register_project_commands(main: click.Group) -> None:
    """Register commands that work from a project's manifest."""

    @main.command("create-cache-map")
    @click.argument("project", required=False, type=click.Path(file_okay=False))
    @click.option(
        "--cache-dir", required=True, type=click.Path(file_okay=False, path_type=Path),
        help="Directory to put downloaded packed images in.",
    )
    @click.option(
        "--index-file", required=True, type=click.Path(dir_okay=False, path_type=Path),
        help="File to write the id-to-path mapping to.",
    )
    @click.pass_context
    def create_cache_map_cmd(
        ctx: click.Context,
        project: Optional[str],
        cache_dir: Path,
        index_file: Path,
    ):
        """Download packed spritesheets and map asset IDs to file paths.

        Only works with a .ROBLOSECURITY cookie passed via --auth.

        Examples:

            tarmac --auth COOKIE create-cache-map --cache-dir cache --index-file cache/index.json
        """
        options = global_options(ctx)

        async def _create():
            client = get_preferred_client(options.credentials(use_api_key=False))
            manifest = Manifest.read_from_folder(project_path(project))
            return await create_cache_map(manifest, client, cache_dir, index_file)

        index = run_command(_create())
        console.print(
            f"Mapped [bold]{len(index)}[/] asset(s) into [cyan]{index_file}[/]"
        )

    @main.command("asset-list")
    @click.argument("project", required=False, type=click.Path(file_okay=False))
    @click.option(
        "--output", required=True, type=click.Path(dir_okay=False, path_type=Path),
        help="File to write the asset list to.",
    )
    def asset_list_cmd(project: Optional[str], output: Path):
        """List every asset ID the project depends on, one per line."""

        async def _list():
            manifest = Manifest.read_from_folder(project_path(project))
            return write_asset_list(manifest, output)

        asset_ids = run_command(_list())
        console.print(f"Listed [bold]{len(asset_ids)}[/] asset(s) in [cyan]{output}[/]")
