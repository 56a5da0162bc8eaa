"""
Shared client contract and HTTP plumbing for the Roblox API clients.

Requests go through a ``requests.Session`` executed on a worker thread,
so awaiting a response only suspends the calling task.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import requests

from .errors import HttpError
from .models import ImageUploadData, UploadResponse

REQUEST_TIMEOUT = 60


class RobloxApiClient(ABC):
    """Capability shared by every Roblox API client."""

    @abstractmethod
    async def upload_image(self, data: ImageUploadData) -> UploadResponse:
        """Upload an image as a Decal.

        Args:
            data: Image bytes plus the name and description to give it.

        Returns:
            The public and backing ids Roblox assigned.
        """

    @abstractmethod
    async def download_image(self, asset_id: int) -> bytes:
        """Fetch the raw contents of a previously uploaded image."""


async def send(
    session: requests.Session, request: requests.PreparedRequest
) -> requests.Response:
    """Execute a prepared request without blocking the event loop.

    Raises:
        HttpError: If the transport fails before a response arrives.
    """
    try:
        return await asyncio.to_thread(session.send, request, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise HttpError(exc) from exc


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300
