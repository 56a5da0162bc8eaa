"""
Cache map -- resolve every uploaded id back to local content.

An id uploaded from a single input maps straight to that input. An id
shared by several inputs is a packed spritesheet, which only exists on
Roblox, so it is downloaded once into the cache directory and mapped to
the downloaded file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from .asset_name import AssetName
from .manifest import Manifest
from .roblox_api import RobloxApiClient

logger = logging.getLogger("tarmac.cache_map")


def group_uploaded_inputs(manifest: Manifest) -> dict[int, list[AssetName]]:
    """Group inputs by the id they were uploaded as.

    Returns:
        Ids in ascending order, each with its contributing inputs sorted.
    """
    uploaded: dict[int, list[AssetName]] = {}
    for name, input_manifest in manifest.inputs.items():
        if input_manifest.uploaded_id is not None:
            uploaded.setdefault(input_manifest.uploaded_id, []).append(name)

    return {asset_id: sorted(uploaded[asset_id]) for asset_id in sorted(uploaded)}


async def build_cache_map(
    manifest: Manifest,
    api_client: RobloxApiClient,
    cache_dir: Union[str, Path],
) -> dict[int, str]:
    """Map every uploaded id to a local path, downloading packed sheets.

    Args:
        manifest: Project manifest.
        api_client: Client used to download packed sheets.
        cache_dir: Where downloaded sheets are stored, one file per id.

    Returns:
        Id to path string, ascending by id.
    """
    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)

    index: dict[int, str] = {}
    for asset_id, contributors in group_uploaded_inputs(manifest).items():
        if len(contributors) == 1:
            index[asset_id] = str(contributors[0])
            continue

        logger.info(
            "Downloading packed asset %d (%d inputs)", asset_id, len(contributors)
        )
        contents = await api_client.download_image(asset_id)
        path = cache_dir / str(asset_id)
        path.write_bytes(contents)
        index[asset_id] = str(path)

    return index


def write_cache_index(index: dict[int, str], index_file: Union[str, Path]) -> Path:
    """Write a cache map as pretty-printed JSON keyed by id."""
    index_file = Path(index_file).resolve()
    index_file.parent.mkdir(parents=True, exist_ok=True)

    ordered = {str(asset_id): index[asset_id] for asset_id in sorted(index)}
    index_file.write_text(json.dumps(ordered, indent=2), encoding="utf-8")

    logger.info("Wrote cache map with %d entries to %s", len(ordered), index_file)
    return index_file


async def create_cache_map(
    manifest: Manifest,
    api_client: RobloxApiClient,
    cache_dir: Union[str, Path],
    index_file: Union[str, Path],
) -> dict[int, str]:
    """Build the cache map for a manifest and write it to ``index_file``."""
    index = await build_cache_map(manifest, api_client, cache_dir)
    write_cache_index(index, index_file)
    return index
