"""
Sync data models -- what goes into a backend and what comes back.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, NonNegativeInt, model_validator


class SyncTarget(str, Enum):
    """Where uploads go."""

    ROBLOX = "roblox"
    LOCAL = "local"
    NONE = "none"


class AssetId(BaseModel):
    """Reference to an uploaded asset: a Roblox id or a Studio content path."""

    model_config = ConfigDict(frozen=True)

    id: Optional[NonNegativeInt] = None
    path: Optional[PurePosixPath] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "AssetId":
        if (self.id is None) == (self.path is None):
            raise ValueError("AssetId needs exactly one of id or path")
        return self

    @classmethod
    def from_id(cls, asset_id: int) -> "AssetId":
        return cls(id=asset_id)

    @classmethod
    def from_path(cls, path: PurePosixPath) -> "AssetId":
        return cls(path=PurePosixPath(path))

    def __str__(self) -> str:
        if self.id is not None:
            return f"rbxassetid://{self.id}"
        return f"rbxasset://{self.path}"


class UploadInfo(BaseModel):
    """One image handed to a backend."""

    model_config = ConfigDict(frozen=True)

    name: str
    contents: bytes
    hash: str


class UploadResponse(BaseModel):
    id: AssetId
