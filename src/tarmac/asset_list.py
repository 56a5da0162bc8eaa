"""Asset list -- every Roblox id a project depends on."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .manifest import Manifest

logger = logging.getLogger("tarmac.asset_list")


def collect_asset_ids(manifest: Manifest) -> list[int]:
    """Distinct uploaded ids across all inputs, ascending."""
    return sorted(
        {
            input_manifest.uploaded_id
            for input_manifest in manifest.inputs.values()
            if input_manifest.uploaded_id is not None
        }
    )


def write_asset_list(manifest: Manifest, output: Union[str, Path]) -> list[int]:
    """Write one id per line to ``output``.

    Returns:
        The ids written.
    """
    asset_ids = collect_asset_ids(manifest)
    output = Path(output)

    with output.open("w", encoding="utf-8", newline="\n") as f:
        for asset_id in asset_ids:
            f.write(f"{asset_id}\n")

    logger.info("Wrote %d asset ids to %s", len(asset_ids), output)
    return asset_ids
