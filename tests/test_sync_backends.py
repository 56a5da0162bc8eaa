"""Tests for the sync backends and the retry wrapper."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tarmac.roblox_api import ApiError, ResponseError, RobloxApiClient, UploadResponse
from tarmac.studio import StudioNotFoundError
from tarmac.sync import (
    AssetId,
    LocalSyncBackend,
    NoneBackendError,
    NoneSyncBackend,
    RateLimitedError,
    RetryBackend,
    RobloxSyncBackend,
    SyncBackend,
    SyncTarget,
    UploadInfo,
    create_backend,
)
from tarmac.sync import UploadResponse as SyncUploadResponse


def _info(name: str = "icon") -> UploadInfo:
    return UploadInfo(name=name, contents=b"\x89PNG data", hash="abc123")


def _api_client(**kwargs) -> MagicMock:
    client = MagicMock(spec=RobloxApiClient)
    client.upload_image = AsyncMock(**kwargs)
    return client


@pytest.fixture
def no_sleep():
    with patch("tarmac.sync.backends.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


# ---------------------------------------------------------------------------
# AssetId
# ---------------------------------------------------------------------------


class TestAssetId:
    def test_id_form(self):
        assert str(AssetId.from_id(123)) == "rbxassetid://123"

    def test_path_form(self):
        asset_id = AssetId.from_path(PurePosixPath(".tarmac/icon.png"))
        assert str(asset_id) == "rbxasset://.tarmac/icon.png"

    def test_requires_exactly_one(self):
        with pytest.raises(ValueError):
            AssetId()
        with pytest.raises(ValueError):
            AssetId(id=1, path=PurePosixPath("a.png"))


# ---------------------------------------------------------------------------
# Roblox backend
# ---------------------------------------------------------------------------


class TestRobloxBackend:
    """Tests for uploading through an API client."""

    @pytest.mark.asyncio
    async def test_returns_backing_id(self):
        client = _api_client(return_value=UploadResponse(asset_id=10, backing_asset_id=9))
        backend = RobloxSyncBackend(client)

        result = await backend.upload(_info())

        assert result.id == AssetId.from_id(9)
        sent = client.upload_image.call_args.args[0]
        assert sent.name == "icon"
        assert sent.image_data == b"\x89PNG data"
        assert sent.description == "Uploaded by Tarmac."

    @pytest.mark.asyncio
    async def test_too_many_requests_is_rate_limited(self):
        backend = RobloxSyncBackend(_api_client(side_effect=ResponseError(429, "slow")))

        with pytest.raises(RateLimitedError):
            await backend.upload(_info())

    @pytest.mark.asyncio
    async def test_other_status_passes_through(self):
        backend = RobloxSyncBackend(_api_client(side_effect=ResponseError(500, "boom")))

        with pytest.raises(ResponseError) as exc_info:
            await backend.upload(_info())
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_api_error_passes_through(self):
        backend = RobloxSyncBackend(_api_client(side_effect=ApiError("bad name")))

        with pytest.raises(ApiError):
            await backend.upload(_info())


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------


class TestLocalBackend:
    """Tests for writing into the Studio content folder."""

    @pytest.mark.asyncio
    async def test_writes_under_tarmac_folder(self, tmp_path: Path):
        backend = LocalSyncBackend(content_path=tmp_path)

        result = await backend.upload(_info())

        assert (tmp_path / ".tarmac" / "icon.png").read_bytes() == b"\x89PNG data"
        assert str(result.id) == "rbxasset://.tarmac/icon.png"

    @pytest.mark.asyncio
    async def test_scope_adds_subfolder(self, tmp_path: Path):
        backend = LocalSyncBackend(scope="game-ui", content_path=tmp_path)

        result = await backend.upload(_info("button"))

        assert (tmp_path / ".tarmac" / "game-ui" / "button.png").is_file()
        assert result.id.path == PurePosixPath(".tarmac/game-ui/button.png")

    @pytest.mark.asyncio
    async def test_overwrites_existing_file(self, tmp_path: Path):
        backend = LocalSyncBackend(content_path=tmp_path)
        await backend.upload(_info())
        await backend.upload(UploadInfo(name="icon", contents=b"new", hash="def"))

        assert (tmp_path / ".tarmac" / "icon.png").read_bytes() == b"new"

    def test_content_path_from_environment(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("ROBLOX_STUDIO_CONTENT_PATH", str(tmp_path))

        assert LocalSyncBackend().content_path == tmp_path

    def test_no_studio_install(self, monkeypatch):
        monkeypatch.delenv("ROBLOX_STUDIO_CONTENT_PATH", raising=False)
        with patch("tarmac.studio.platform.system", return_value="Linux"):
            with pytest.raises(StudioNotFoundError):
                LocalSyncBackend()


# ---------------------------------------------------------------------------
# None backend
# ---------------------------------------------------------------------------


class TestNoneBackend:
    @pytest.mark.asyncio
    async def test_always_fails(self):
        with pytest.raises(NoneBackendError):
            await NoneSyncBackend().upload(_info())


# ---------------------------------------------------------------------------
# Retry wrapper
# ---------------------------------------------------------------------------


def _inner(*outcomes) -> MagicMock:
    inner = MagicMock(spec=SyncBackend)
    inner.upload = AsyncMock(side_effect=list(outcomes))
    inner.name = "fake"
    return inner


_OK = SyncUploadResponse(id=AssetId.from_id(1))


class TestRetryBackend:
    """Tests for retrying a wrapped backend."""

    @pytest.mark.asyncio
    async def test_exhausts_all_attempts(self, no_sleep):
        """max_retries=2 gives exactly three attempts, then the last error."""
        inner = _inner(RateLimitedError(), RateLimitedError(), RateLimitedError())
        backend = RetryBackend(inner, max_retries=2, delay=5.0)

        with pytest.raises(RateLimitedError):
            await backend.upload(_info())

        assert inner.upload.await_count == 3
        assert [c.args[0] for c in no_sleep.call_args_list] == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_stops_on_success(self, no_sleep):
        inner = _inner(RateLimitedError(), _OK)
        backend = RetryBackend(inner, max_retries=3, delay=1.0)

        result = await backend.upload(_info())

        assert result == _OK
        assert inner.upload.await_count == 2
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_zero_retries_is_single_attempt(self, no_sleep):
        inner = _inner(RateLimitedError())
        backend = RetryBackend(inner, max_retries=0)

        with pytest.raises(RateLimitedError):
            await backend.upload(_info())

        assert inner.upload.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_raises_last_error(self, no_sleep):
        """The surfaced error is the final one, whatever its kind."""
        inner = _inner(RateLimitedError(), ResponseError(500, "down"))
        backend = RetryBackend(inner, max_retries=1, delay=0.0)

        with pytest.raises(ResponseError):
            await backend.upload(_info())

    def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            RetryBackend(NoneSyncBackend(), max_retries=-1)

    def test_name_is_inner_name(self):
        assert RetryBackend(NoneSyncBackend(), max_retries=1).name == "none"


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestCreateBackend:
    """Tests for the backend factory."""

    def test_roblox(self):
        backend = create_backend(SyncTarget.ROBLOX, api_client=_api_client())
        assert isinstance(backend, RobloxSyncBackend)

    def test_roblox_requires_client(self):
        with pytest.raises(ValueError):
            create_backend(SyncTarget.ROBLOX)

    def test_local(self, tmp_path: Path):
        backend = create_backend("local", content_path=tmp_path, scope="ui")
        assert isinstance(backend, LocalSyncBackend)
        assert backend.scope == "ui"

    def test_none(self):
        assert isinstance(create_backend("none"), NoneSyncBackend)

    def test_unknown_target(self):
        with pytest.raises(ValueError):
            create_backend("ftp")

    def test_retries_wrap(self):
        backend = create_backend("none", retries=2, retry_delay=3.0)

        assert isinstance(backend, RetryBackend)
        assert isinstance(backend.inner, NoneSyncBackend)
        assert backend.attempts == 3
        assert backend.delay == 3.0
