"""Tests for the cache map and asset list builders."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from tarmac.asset_list import collect_asset_ids, write_asset_list
from tarmac.cache_map import (
    build_cache_map,
    create_cache_map,
    group_uploaded_inputs,
    write_cache_index,
)
from tarmac.manifest import InputManifest, Manifest
from tarmac.roblox_api import RobloxApiClient


@pytest.fixture
def manifest(project_dir: Path) -> Manifest:
    return Manifest.read_from_folder(project_dir)


@pytest.fixture
def api_client() -> MagicMock:
    client = MagicMock(spec=RobloxApiClient)
    client.download_image = AsyncMock(return_value=b"packed sheet")
    return client


class TestGroupUploadedInputs:
    def test_groups_by_id(self, manifest: Manifest):
        grouped = group_uploaded_inputs(manifest)

        assert list(grouped) == [100, 200]
        assert grouped[100] == ["assets/icon.png"]
        assert grouped[200] == ["assets/ui/a.png", "assets/ui/b.png"]

    def test_skips_inputs_never_uploaded(self, manifest: Manifest):
        grouped = group_uploaded_inputs(manifest)
        assert all("assets/new.png" not in names for names in grouped.values())


class TestBuildCacheMap:
    """Tests for resolving ids to local paths."""

    @pytest.mark.asyncio
    async def test_unique_id_maps_to_input(self, tmp_path: Path, api_client):
        manifest = Manifest(inputs={"solo.png": InputManifest(uploaded_id=5)})

        index = await build_cache_map(manifest, api_client, tmp_path / "cache")

        assert index == {5: "solo.png"}
        api_client.download_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_shared_id_downloaded_once(self, manifest: Manifest, tmp_path: Path, api_client):
        cache_dir = tmp_path / "cache"

        index = await build_cache_map(manifest, api_client, cache_dir)

        api_client.download_image.assert_awaited_once_with(200)
        assert (cache_dir / "200").read_bytes() == b"packed sheet"
        assert index == {100: "assets/icon.png", 200: str(cache_dir / "200")}

    @pytest.mark.asyncio
    async def test_creates_nested_cache_dir(self, manifest: Manifest, tmp_path: Path, api_client):
        cache_dir = tmp_path / "deep" / "nested" / "cache"

        await build_cache_map(manifest, api_client, cache_dir)

        assert cache_dir.is_dir()

    @pytest.mark.asyncio
    async def test_existing_cache_dir_is_fine(self, manifest: Manifest, tmp_path: Path, api_client):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "200").write_bytes(b"stale")

        await build_cache_map(manifest, api_client, cache_dir)

        assert (cache_dir / "200").read_bytes() == b"packed sheet"

    @pytest.mark.asyncio
    async def test_empty_manifest(self, tmp_path: Path, api_client):
        assert await build_cache_map(Manifest(), api_client, tmp_path) == {}


class TestCacheIndex:
    """Tests for writing the JSON index."""

    def test_json_keys_are_ids(self, tmp_path: Path):
        index_file = write_cache_index({20: "b.png", 3: "a.png"}, tmp_path / "index.json")

        text = index_file.read_text(encoding="utf-8")
        assert json.loads(text) == {"3": "a.png", "20": "b.png"}
        assert text.index('"3"') < text.index('"20"')
        assert '\n  "3": "a.png"' in text

    def test_creates_missing_parents(self, tmp_path: Path):
        index_file = write_cache_index({1: "a.png"}, tmp_path / "a" / "b" / "index.json")

        assert index_file.is_file()
        assert index_file == (tmp_path / "a" / "b" / "index.json").resolve()

    @pytest.mark.asyncio
    async def test_create_writes_index(self, manifest: Manifest, tmp_path: Path, api_client):
        index_file = tmp_path / "out" / "index.json"

        index = await create_cache_map(manifest, api_client, tmp_path / "cache", index_file)

        assert json.loads(index_file.read_text(encoding="utf-8")) == {
            str(asset_id): path for asset_id, path in index.items()
        }


class TestAssetList:
    """Tests for listing the ids a project depends on."""

    def test_distinct_sorted_ids(self, manifest: Manifest):
        assert collect_asset_ids(manifest) == [100, 200]

    def test_file_format(self, manifest: Manifest, tmp_path: Path):
        output = tmp_path / "assets.txt"

        written = write_asset_list(manifest, output)

        assert written == [100, 200]
        assert output.read_bytes() == b"100\n200\n"

    def test_empty_manifest(self, tmp_path: Path):
        output = tmp_path / "assets.txt"

        assert write_asset_list(Manifest(), output) == []
        assert output.read_text(encoding="utf-8") == ""
