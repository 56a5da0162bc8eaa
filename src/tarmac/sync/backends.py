"""
Sync backends -- where uploaded images end up.

Each backend knows how to take one image and return a reference to it.
The caller picks which one to use based on the sync target.

Roblox: Upload through a Roblox API client.
Local: Write into the Roblox Studio content folder.
None: Refuse every upload. For projects with no destination.
Retry: Wrap another backend and try again after a pause.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from http import HTTPStatus
from pathlib import Path, PurePosixPath
from typing import Optional

from .. import DEFAULT_DESCRIPTION
from ..roblox_api import ImageUploadData, ResponseError, RobloxApiClient
from ..studio import locate_studio_content
from .models import AssetId, SyncTarget, UploadInfo, UploadResponse

logger = logging.getLogger("tarmac.sync.backends")

DEFAULT_RETRY_DELAY = 60.0


class SyncBackendError(Exception):
    """Base class for backend upload failures."""


class NoneBackendError(SyncBackendError):
    def __init__(self):
        super().__init__("Cannot upload assets with the 'none' target.")


class RateLimitedError(SyncBackendError):
    def __init__(self):
        super().__init__(
            "Tarmac was rate-limited trying to upload assets. "
            "Try again in a little bit."
        )


class SyncBackend(ABC):
    """Abstract upload destination."""

    @abstractmethod
    async def upload(self, data: UploadInfo) -> UploadResponse:
        """Upload one image.

        Args:
            data: Name, contents, and content hash of the image.

        Returns:
            Reference to the uploaded asset.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""


class RobloxSyncBackend(SyncBackend):
    """Uploads to Roblox through an API client."""

    def __init__(self, api_client: RobloxApiClient):
        self.api_client = api_client

    @property
    def name(self) -> str:
        return "roblox"

    async def upload(self, data: UploadInfo) -> UploadResponse:
        logger.info("Uploading %s to Roblox", data.name)

        try:
            response = await self.api_client.upload_image(
                ImageUploadData(
                    image_data=data.contents,
                    name=data.name,
                    description=DEFAULT_DESCRIPTION,
                )
            )
        except ResponseError as exc:
            if exc.status == HTTPStatus.TOO_MANY_REQUESTS:
                raise RateLimitedError() from exc
            raise

        logger.info("Uploaded %s to ID %d", data.name, response.backing_asset_id)
        return UploadResponse(id=AssetId.from_id(response.backing_asset_id))


class LocalSyncBackend(SyncBackend):
    """Writes images into Roblox Studio's content folder.

    Files land in ``<content>/.tarmac/[scope/]<name>.png``.
    """

    def __init__(
        self,
        scope: Optional[str] = None,
        content_path: Optional[Path] = None,
    ):
        self.content_path = (
            Path(content_path) if content_path else locate_studio_content()
        )
        self.scope = scope

    @property
    def name(self) -> str:
        return "local"

    def asset_path(self, data: UploadInfo) -> PurePosixPath:
        """Content-relative path an image is written to."""
        path = PurePosixPath(".tarmac")
        if self.scope:
            path = path / self.scope
        return path / f"{data.name}.png"

    async def upload(self, data: UploadInfo) -> UploadResponse:
        asset_path = self.asset_path(data)
        file_path = self.content_path / asset_path

        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data.contents)

        logger.info("Written %s to path %s", data.name, file_path)
        return UploadResponse(id=AssetId.from_path(asset_path))


class NoneSyncBackend(SyncBackend):
    """Rejects every upload."""

    @property
    def name(self) -> str:
        return "none"

    async def upload(self, data: UploadInfo) -> UploadResponse:
        raise NoneBackendError()


class RetryBackend(SyncBackend):
    """Retries a wrapped backend with a constant pause between attempts.

    ``max_retries`` is the number of extra attempts, so 0 behaves like the
    wrapped backend. When every attempt fails, the last failure is raised.
    """

    def __init__(
        self,
        inner: SyncBackend,
        max_retries: int,
        delay: float = DEFAULT_RETRY_DELAY,
    ):
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        self.inner = inner
        self.delay = delay
        self.attempts = max_retries + 1

    @property
    def name(self) -> str:
        return self.inner.name

    async def upload(self, data: UploadInfo) -> UploadResponse:
        last_error: Optional[Exception] = None

        for index in range(self.attempts):
            if index:
                logger.info(
                    "Upload of %s failed (%s), retrying (%d/%d)",
                    data.name, last_error, index, self.attempts - 1,
                )
                await asyncio.sleep(self.delay)

            try:
                return await self.inner.upload(data)
            except Exception as exc:
                last_error = exc

        raise last_error


def create_backend(
    target: SyncTarget,
    api_client: Optional[RobloxApiClient] = None,
    scope: Optional[str] = None,
    content_path: Optional[Path] = None,
    retries: int = 0,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> SyncBackend:
    """Factory function to create the backend for a sync target.

    Args:
        target: Where uploads should go.
        api_client: Client used by the Roblox target.
        scope: Subfolder for the local target.
        content_path: Studio content folder for the local target.
        retries: Extra attempts per upload; 0 disables retrying.
        retry_delay: Seconds to wait between attempts.

    Raises:
        ValueError: If the target is unsupported or lacks what it needs.
    """
    target = SyncTarget(target)

    if target == SyncTarget.ROBLOX:
        if api_client is None:
            raise ValueError("The roblox target requires an API client")
        backend: SyncBackend = RobloxSyncBackend(api_client)
    elif target == SyncTarget.LOCAL:
        backend = LocalSyncBackend(scope=scope, content_path=content_path)
    elif target == SyncTarget.NONE:
        backend = NoneSyncBackend()
    else:
        raise ValueError(f"Unsupported sync target: {target}")

    if retries:
        backend = RetryBackend(backend, retries, retry_delay)
    return backend
