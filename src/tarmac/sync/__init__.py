"""
Asset sync -- pushing images to a destination.

Backends: Roblox (cloud upload), local (Studio content folder), none.
Any of them can be wrapped in a retrying backend.
"""

from .backends import (
    LocalSyncBackend,
    NoneBackendError,
    NoneSyncBackend,
    RateLimitedError,
    RetryBackend,
    RobloxSyncBackend,
    SyncBackend,
    SyncBackendError,
    create_backend,
)
from .models import AssetId, SyncTarget, UploadInfo, UploadResponse

__all__ = [
    "AssetId",
    "LocalSyncBackend",
    "NoneBackendError",
    "NoneSyncBackend",
    "RateLimitedError",
    "RetryBackend",
    "RobloxSyncBackend",
    "SyncBackend",
    "SyncBackendError",
    "SyncTarget",
    "UploadInfo",
    "UploadResponse",
    "create_backend",
]
