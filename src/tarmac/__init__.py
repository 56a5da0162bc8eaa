"""
Tarmac: image asset sync for Roblox projects.

Uploads local images, remembers what was uploaded in a manifest,
and maps packed spritesheets back to the inputs they came from.
"""

__version__ = "0.1.0"

DEFAULT_DESCRIPTION = "Uploaded by Tarmac."

STUDIO_CONTENT_ENV = "ROBLOX_STUDIO_CONTENT_PATH"
AUTH_ENV = "TARMAC_AUTH"
API_KEY_ENV = "TARMAC_API_KEY"

