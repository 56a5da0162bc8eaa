"""
Roblox API clients.

Two ways in: a .ROBLOSECURITY cookie against the legacy web endpoints,
or an Open Cloud API key. ``get_preferred_client`` picks one from the
credentials at hand, preferring the API key.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .asset_delivery import parse_asset_descriptor, resolve_web_asset_id
from .base import RobloxApiClient
from .errors import (
    AmbiguousCreatorTypeError,
    ApiError,
    AssetGetFailedError,
    BadResponseJsonError,
    HttpError,
    MalformedAssetIdError,
    MalformedOperationPathError,
    MissingAuthError,
    MissingCreatorError,
    MissingCsrfTokenError,
    MissingOperationPathError,
    ResponseError,
    RobloxApiError,
    UnknownXmlError,
)
from .legacy import LegacyClient
from .models import ImageUploadData, RobloxCredentials, UploadResponse
from .open_cloud import OpenCloudClient

logger = logging.getLogger("tarmac.roblox_api")


def get_preferred_client(
    credentials: RobloxCredentials,
    session: Optional[requests.Session] = None,
) -> RobloxApiClient:
    """Build the client matching the supplied credentials.

    Args:
        credentials: Cookie and/or API key plus creator ids.
        session: HTTP session shared with the client.

    Returns:
        An ``OpenCloudClient`` when an API key is present, otherwise a
        ``LegacyClient``.

    Raises:
        MissingAuthError: Neither a cookie nor an API key was supplied.
    """
    if credentials.api_key is not None:
        logger.debug("Using Open Cloud API key authentication")
        return OpenCloudClient(credentials, session=session)

    if credentials.token is not None:
        logger.debug("Using .ROBLOSECURITY cookie authentication")
        return LegacyClient(credentials, session=session)

    raise MissingAuthError()


__all__ = [
    "AmbiguousCreatorTypeError",
    "ApiError",
    "AssetGetFailedError",
    "BadResponseJsonError",
    "HttpError",
    "ImageUploadData",
    "LegacyClient",
    "MalformedAssetIdError",
    "MalformedOperationPathError",
    "MissingAuthError",
    "MissingCreatorError",
    "MissingCsrfTokenError",
    "MissingOperationPathError",
    "OpenCloudClient",
    "ResponseError",
    "RobloxApiClient",
    "RobloxApiError",
    "RobloxCredentials",
    "UnknownXmlError",
    "UploadResponse",
    "get_preferred_client",
    "parse_asset_descriptor",
    "resolve_web_asset_id",
]
