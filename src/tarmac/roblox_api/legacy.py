"""
Cookie-authenticated client for the legacy Roblox web endpoints.

Authenticates with a .ROBLOSECURITY cookie. The web endpoints also
demand an X-CSRF-Token: the first request is rejected with 403 and a
fresh token in the response headers, which is cached on the client
and replayed on every later request.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Callable, Optional

import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_pascal

from .asset_delivery import ASSET_DELIVERY_URL, resolve_web_asset_id
from .base import RobloxApiClient, is_success, send
from .errors import (
    ApiError,
    BadResponseJsonError,
    MissingCsrfTokenError,
    ResponseError,
)
from .models import ImageUploadData, RobloxCredentials, UploadResponse
from .rwlock import ReaderWriterLock

logger = logging.getLogger("tarmac.roblox_api.legacy")

UPLOAD_URL = "https://data.roblox.com/data/upload/json"
DECAL_ASSET_TYPE_ID = 13
CSRF_HEADER = "X-CSRF-Token"


class _RawUploadResponse(BaseModel):
    """Upload endpoint body, before its own failure flag is handled."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    success: bool
    message: Optional[str] = None
    asset_id: Optional[int] = None
    backing_asset_id: Optional[int] = None


class LegacyClient(RobloxApiClient):
    """Roblox client authenticated by session cookie."""

    def __init__(
        self,
        credentials: RobloxCredentials,
        session: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self._session = session or requests.Session()
        self._csrf_token: Optional[str] = None
        self._csrf_lock = ReaderWriterLock()

    def __repr__(self) -> str:
        return "LegacyClient()"

    async def download_image(self, asset_id: int) -> bytes:
        asset_id = await resolve_web_asset_id(
            asset_id, self._session, self._cookie_headers()
        )

        response = await self._execute_with_csrf_retry(
            lambda: requests.Request(
                "GET", ASSET_DELIVERY_URL, params={"id": asset_id}
            )
        )
        if not is_success(response):
            raise ResponseError(response.status_code, response.text)

        return response.content

    async def upload_image(self, data: ImageUploadData) -> UploadResponse:
        """Upload an image, raising if Roblox reports any failure."""
        response = await self._upload_image_raw(data)

        # Some failures come back inside a 200 response.
        if not response.success:
            raise ApiError(response.message or "upload rejected without a message")

        backing_asset_id = response.asset_id
        asset_id = await resolve_web_asset_id(
            backing_asset_id, self._session, self._cookie_headers()
        )

        return UploadResponse(asset_id=asset_id, backing_asset_id=backing_asset_id)

    async def _upload_image_raw(self, data: ImageUploadData) -> _RawUploadResponse:
        params: dict[str, object] = {"assetTypeId": DECAL_ASSET_TYPE_ID}
        if self.credentials.group_id is not None:
            params["groupId"] = self.credentials.group_id
        params["name"] = data.name
        params["description"] = data.description

        response = await self._execute_with_csrf_retry(
            lambda: requests.Request(
                "POST", UPLOAD_URL, params=params, data=data.image_data
            )
        )

        body = response.text
        if not is_success(response):
            raise ResponseError(response.status_code, body)

        try:
            raw = _RawUploadResponse.model_validate_json(body)
        except ValidationError as exc:
            raise BadResponseJsonError(body, exc) from exc

        if raw.success and raw.asset_id is None:
            raise BadResponseJsonError(body)

        return raw

    async def _execute_with_csrf_retry(
        self, make_request: Callable[[], requests.Request]
    ) -> requests.Response:
        """Execute a request, retrying once if Roblox hands out a new CSRF token.

        A 403 without a token header was forbidden for some other reason
        and is returned untouched.

        Raises:
            MissingCsrfTokenError: The 403 asked for a token refresh but
                its ``X-CSRF-Token`` header was empty.
        """
        request = await self._prepare(make_request())
        response = await send(self._session, request)

        if response.status_code != HTTPStatus.FORBIDDEN:
            return response

        if CSRF_HEADER not in response.headers:
            return response

        csrf = response.headers[CSRF_HEADER].strip()
        if not csrf:
            raise MissingCsrfTokenError()

        logger.debug("Retrying request with %s...", CSRF_HEADER)
        async with self._csrf_lock.write():
            self._csrf_token = csrf

        retry = await self._prepare(make_request())
        return await send(self._session, retry)

    async def _prepare(self, request: requests.Request) -> requests.PreparedRequest:
        """Attach the auth cookie and cached CSRF token to a request."""
        prepared = self._session.prepare_request(request)
        prepared.headers.update(self._cookie_headers())

        async with self._csrf_lock.read():
            if self._csrf_token is not None:
                prepared.headers[CSRF_HEADER] = self._csrf_token

        return prepared

    def _cookie_headers(self) -> dict[str, str]:
        if self.credentials.token is None:
            return {}
        return {
            "Cookie": f".ROBLOSECURITY={self.credentials.token.get_secret_value()}"
        }
