"""
API-key client for Roblox Open Cloud.

Asset creation on Open Cloud is asynchronous: the create call returns
an operation handle, and the asset id only exists once polling that
operation reports it done.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Optional

import requests

from .base import RobloxApiClient, is_success, send
from .errors import (
    AmbiguousCreatorTypeError,
    AssetGetFailedError,
    BadResponseJsonError,
    MalformedOperationPathError,
    MissingAuthError,
    MissingCreatorError,
    MissingOperationPathError,
    ResponseError,
)
from .legacy import LegacyClient
from .models import ImageUploadData, RobloxCredentials, UploadResponse

logger = logging.getLogger("tarmac.roblox_api.open_cloud")

ASSETS_URL = "https://apis.roblox.com/assets/v1/assets"
OPERATIONS_URL = "https://apis.roblox.com/assets/v1/operations/{operation_id}"
OPERATION_PREFIX = "operations/"

MAX_POLL_RETRIES = 5
INITIAL_POLL_DELAY = 0.05

_UNSIGNED = re.compile(r"\d+")


def _creator_for(credentials: RobloxCredentials) -> dict[str, str]:
    group_id, user_id = credentials.group_id, credentials.user_id
    if group_id is not None and user_id is not None:
        raise AmbiguousCreatorTypeError()
    if group_id is not None:
        return {"groupId": str(group_id)}
    if user_id is not None:
        return {"userId": str(user_id)}
    raise MissingCreatorError()


class OpenCloudClient(RobloxApiClient):
    """Roblox client authenticated by an Open Cloud API key."""

    def __init__(
        self,
        credentials: RobloxCredentials,
        session: Optional[requests.Session] = None,
    ):
        if credentials.api_key is None:
            raise MissingAuthError()

        self.credentials = credentials
        self.creator = _creator_for(credentials)
        self._session = session or requests.Session()

    def __repr__(self) -> str:
        return f"OpenCloudClient(creator={self.creator})"

    async def upload_image(self, data: ImageUploadData) -> UploadResponse:
        operation_id = await self._create_asset(data)
        asset_id = await self._poll_operation(operation_id)

        return UploadResponse(asset_id=asset_id, backing_asset_id=asset_id)

    async def download_image(self, asset_id: int) -> bytes:
        # Open Cloud has no download endpoint; the web one works without auth.
        legacy = LegacyClient(self.credentials, session=self._session)
        return await legacy.download_image(asset_id)

    async def _create_asset(self, data: ImageUploadData) -> str:
        """Submit the asset and return the operation id to poll."""
        request_body = {
            "assetType": "Decal",
            "displayName": data.name,
            "description": data.description,
            "creationContext": {"creator": self.creator},
        }
        request = requests.Request(
            "POST",
            ASSETS_URL,
            headers=self._headers(),
            files={
                "request": (None, json.dumps(request_body), "application/json"),
                "fileContent": (f"{data.name}.png", data.image_data, "image/png"),
            },
        )

        body = await self._execute(request)
        path = body.get("path")
        if not path:
            raise MissingOperationPathError()
        if not isinstance(path, str) or not path.startswith(OPERATION_PREFIX):
            raise MalformedOperationPathError(str(path))

        operation_id = path[len(OPERATION_PREFIX):]
        logger.debug("Created asset %s, operation %s", data.name, operation_id)
        return operation_id

    async def _poll_operation(self, operation_id: str) -> int:
        """Poll an operation until it yields an asset id.

        Waits ``INITIAL_POLL_DELAY * attempt**2`` after each pending poll
        and gives up after ``MAX_POLL_RETRIES`` of them.
        """
        url = OPERATIONS_URL.format(operation_id=operation_id)
        attempt = 0

        while True:
            body = await self._execute(
                requests.Request("GET", url, headers=self._headers())
            )
            response = body.get("response")

            if response:
                if not isinstance(response, dict):
                    raise AssetGetFailedError(
                        f"Operation {operation_id} returned response {response!r}"
                    )
                raw_id = str(response.get("assetId", ""))
                if not _UNSIGNED.fullmatch(raw_id):
                    raise AssetGetFailedError(
                        f"Operation {operation_id} returned asset id {raw_id!r}"
                    )
                return int(raw_id)

            attempt += 1
            if attempt > MAX_POLL_RETRIES:
                raise AssetGetFailedError()

            delay = INITIAL_POLL_DELAY * attempt**2
            logger.debug(
                "Operation %s pending, polling again in %.2fs", operation_id, delay
            )
            await asyncio.sleep(delay)

    async def _execute(self, request: requests.Request) -> dict[str, Any]:
        response = await send(self._session, self._session.prepare_request(request))
        text = response.text

        if not is_success(response):
            raise ResponseError(response.status_code, text)

        try:
            body = response.json()
        except ValueError as exc:
            raise BadResponseJsonError(text, exc) from exc
        if not isinstance(body, dict):
            raise BadResponseJsonError(text)
        return body

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.credentials.api_key.get_secret_value()}
