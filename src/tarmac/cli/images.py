"""Single-image commands: upload-image, download-image."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from .. import DEFAULT_DESCRIPTION
from ..roblox_api import ImageUploadData, get_preferred_client
from ._common import console, global_options, run_command


def register_image_commands(main: click.Group) -> None:
    """Register the single-image commands."""

    @main.command("upload-image")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option("--name", required=True, help="Name to give the resulting Decal.")
    @click.option(
        "--description", default=DEFAULT_DESCRIPTION, show_default=True,
        help="Description to give the resulting Decal.",
    )
    @click.option(
        "--user-id", type=click.IntRange(min=0), default=None,
        help="User to upload as. Only used with an API key.",
    )
    @click.option(
        "--group-id", type=click.IntRange(min=0), default=None,
        help="Group to upload to.",
    )
    @click.pass_context
    def upload_image(
        ctx: click.Context,
        path: Path,
        name: str,
        description: str,
        user_id: Optional[int],
        group_id: Optional[int],
    ):
        """Upload a single image to Roblox and print its asset ID.

        Examples:

            tarmac upload-image icon.png --name Icon

            tarmac --api-key KEY upload-image icon.png --name Icon --user-id 1234
        """
        options = global_options(ctx)
        if user_id is not None and options.api_key is None:
            raise click.UsageError("--user-id requires --api-key.")

        async def _upload():
            client = get_preferred_client(
                options.credentials(user_id=user_id, group_id=group_id)
            )
            return await client.upload_image(
                ImageUploadData(
                    image_data=path.read_bytes(),
                    name=name,
                    description=description,
                )
            )

        response = run_command(_upload())

        console.print("[green]Image uploaded successfully![/]")
        console.print(f"Asset ID: [cyan]rbxassetid://{response.backing_asset_id}[/]")
        console.print(
            f"[dim]Visit https://create.roblox.com/store/asset/"
            f"{response.backing_asset_id} to see it[/]"
        )

    @main.command("download-image")
    @click.argument("asset_id", type=click.IntRange(min=0))
    @click.option(
        "--output", "-o", required=True, type=click.Path(dir_okay=False, path_type=Path),
        help="Where to write the image.",
    )
    @click.pass_context
    def download_image(ctx: click.Context, asset_id: int, output: Path):
        """Download a single image from Roblox."""
        options = global_options(ctx)

        async def _download():
            client = get_preferred_client(options.credentials(use_api_key=False))
            contents = await client.download_image(asset_id)
            output.write_bytes(contents)
            return contents

        contents = run_command(_download())
        console.print(f"Wrote {len(contents)} bytes to [cyan]{output}[/]")
