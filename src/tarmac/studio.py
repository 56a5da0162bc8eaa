"""
Roblox Studio install discovery.

The local sync target writes images into Studio's content folder so
they can be referenced as ``rbxasset://`` paths without uploading.
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Optional

from . import STUDIO_CONTENT_ENV

logger = logging.getLogger("tarmac.studio")

STUDIO_EXECUTABLE = "RobloxStudioBeta.exe"
MACOS_CONTENT_PATH = Path("/Applications/RobloxStudio.app/Contents/Resources/content")


class StudioNotFoundError(Exception):
    """No Roblox Studio install could be located."""


def _windows_content_path() -> Optional[Path]:
    local_app = os.environ.get("LOCALAPPDATA")
    if not local_app:
        return None

    versions = Path(local_app) / "Roblox" / "Versions"
    if not versions.is_dir():
        return None

    installs = sorted(
        (d for d in versions.iterdir() if (d / STUDIO_EXECUTABLE).is_file()),
        key=lambda d: d.stat().st_mtime,
        reverse=True,
    )
    if not installs:
        return None
    return installs[0] / "content"


def locate_studio_content(system: Optional[str] = None) -> Path:
    """Find the content folder of the local Roblox Studio install.

    ``ROBLOX_STUDIO_CONTENT_PATH`` overrides discovery.

    Args:
        system: Platform name as reported by ``platform.system()``.

    Raises:
        StudioNotFoundError: If no install was found.
    """
    override = os.environ.get(STUDIO_CONTENT_ENV)
    if override:
        return Path(override).expanduser()

    system = system or platform.system()
    content: Optional[Path] = None

    if system == "Windows":
        content = _windows_content_path()
    elif system == "Darwin" and MACOS_CONTENT_PATH.is_dir():
        content = MACOS_CONTENT_PATH

    if content is None:
        raise StudioNotFoundError(
            f"Could not locate a Roblox Studio install on {system}. "
            f"Set {STUDIO_CONTENT_ENV} to its content folder."
        )

    logger.debug("Found Roblox Studio content at %s", content)
    return content
