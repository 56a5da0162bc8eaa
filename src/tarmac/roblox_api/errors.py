"""Errors raised by the Roblox API clients."""

from __future__ import annotations

from typing import Optional


class RobloxApiError(Exception):
    """Base class for Roblox API failures."""


class HttpError(RobloxApiError):
    """The HTTP request itself failed (DNS, TLS, connection reset...)."""

    def __init__(self, source: Exception):
        super().__init__(f"Roblox API HTTP error: {source}")
        self.source = source


class ApiError(RobloxApiError):
    """Roblox answered 200 but reported a failure in the body."""

    def __init__(self, message: str):
        super().__init__(f"Roblox API error: {message}")
        self.message = message


class BadResponseJsonError(RobloxApiError):
    """Roblox answered 200 with a body that is not the JSON we expect."""

    def __init__(self, body: str, source: Optional[Exception] = None):
        super().__init__(
            f"Roblox API returned success, but had malformed JSON response: {body}"
        )
        self.body = body
        self.source = source


class ResponseError(RobloxApiError):
    """Roblox answered with a non-success HTTP status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"Roblox API returned HTTP {status} with body: {body}")
        self.status = status
        self.body = body


class MissingCsrfTokenError(RobloxApiError):
    def __init__(self):
        super().__init__("Request for CSRF token did not return an X-CSRF-Token header.")


class AssetGetFailedError(RobloxApiError):
    def __init__(self, detail: str = "Failed to retrieve asset ID from Roblox cloud"):
        super().__init__(detail)


class MissingAuthError(RobloxApiError):
    def __init__(self):
        super().__init__("Tarmac is unable to locate an authentication method")


class AmbiguousCreatorTypeError(RobloxApiError):
    def __init__(self):
        super().__init__("Group ID and user ID cannot both be specified")


class MissingCreatorError(RobloxApiError):
    def __init__(self):
        super().__init__("Uploading with an API key requires a user ID or a group ID")


class MissingOperationPathError(RobloxApiError):
    def __init__(self):
        super().__init__("Operation path is missing")


class MalformedOperationPathError(RobloxApiError):
    def __init__(self, path: str):
        super().__init__(f"Operation path is malformed: {path}")
        self.path = path


class UnknownXmlError(RobloxApiError):
    """Asset delivery returned XML in a shape we do not recognize."""

    def __init__(self, detail: str):
        super().__init__(f"Unexpected asset descriptor XML: {detail}")


class MalformedAssetIdError(RobloxApiError):
    def __init__(self, value: str):
        super().__init__(f"Failed to parse asset ID from: {value!r}")
        self.value = value
