"""
Roblox API data models -- credentials and upload payloads.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, NonNegativeInt, SecretStr


class RobloxCredentials(BaseModel):
    """How to talk to Roblox.

    Exactly one of ``token`` (a .ROBLOSECURITY cookie) or ``api_key``
    (Open Cloud) is used; the API key wins when both are given. The
    creator ids only matter for Open Cloud uploads, except ``group_id``
    which the cookie client also forwards.
    """

    token: Optional[SecretStr] = None
    api_key: Optional[SecretStr] = None
    user_id: Optional[NonNegativeInt] = None
    group_id: Optional[NonNegativeInt] = None


class ImageUploadData(BaseModel):
    """One image to upload as a Decal."""

    model_config = ConfigDict(frozen=True)

    image_data: bytes
    name: str
    description: str


class UploadResponse(BaseModel):
    """Ids Roblox assigned to an uploaded image.

    ``asset_id`` is the public Decal id; ``backing_asset_id`` is the
    Image content behind it. Open Cloud uploads report the same id twice.
    """

    asset_id: NonNegativeInt
    backing_asset_id: NonNegativeInt
