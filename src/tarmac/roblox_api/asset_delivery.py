"""
Decal id resolution through the asset delivery endpoint.

Uploading a Decal yields the id of its Image content, but games
reference the Decal itself. Asset delivery answers a Decal id with a
small XML descriptor pointing at the content:

    <roblox><url>http://www.roblox.com/asset/?id=12345</url></roblox>

Anything that is not XML at all (image bytes, JSON errors) means there
is nothing to resolve and the id is used as-is. XML in any other shape
means the endpoint changed under us, and that is an error.
"""

from __future__ import annotations

import asyncio
import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional

import requests

from .base import REQUEST_TIMEOUT
from .errors import HttpError, MalformedAssetIdError, UnknownXmlError

logger = logging.getLogger("tarmac.roblox_api.asset_delivery")

ASSET_DELIVERY_URL = "https://assetdelivery.roblox.com/v1/asset/"

_ID_SUFFIX = re.compile(r"[?&]id=(\d+)\s*$")


def _scan_descriptor(
    body: bytes,
) -> tuple[Optional[str], Optional[str], Optional[ET.ParseError]]:
    """Read the root tag and the first top-level ``<url>`` text.

    Parsing stops at the first error. Events seen before it are kept, so
    a complete descriptor followed by junk still yields its url.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    error: Optional[ET.ParseError] = None
    try:
        parser.feed(body)
        parser.close()
    except ET.ParseError as exc:
        error = exc

    root_tag: Optional[str] = None
    url_text: Optional[str] = None
    depth = 0
    try:
        for event, element in parser.read_events():
            if event == "start":
                depth += 1
                if root_tag is None:
                    root_tag = element.tag
                continue
            if depth == 2 and element.tag == "url" and url_text is None:
                url_text = element.text or ""
            depth -= 1
    except ET.ParseError as exc:
        error = error or exc

    return root_tag, url_text, error


def parse_asset_descriptor(body: bytes, asset_id: int) -> int:
    """Extract the id embedded in an asset descriptor.

    Args:
        body: Raw response body from asset delivery.
        asset_id: The id that was requested, returned when the body does
            not start an XML document.

    Raises:
        UnknownXmlError: XML without ``<roblox><url>``, or a descriptor
            that breaks off before its ``<url>`` is complete.
        MalformedAssetIdError: The url carries no numeric ``id``.
    """
    root_tag, url_text, error = _scan_descriptor(body)

    if root_tag is None:
        logger.debug("Asset %d has no XML descriptor, keeping id", asset_id)
        return asset_id

    if root_tag != "roblox":
        raise UnknownXmlError(f"expected <roblox> root, found <{root_tag}>")

    if url_text is None:
        if error is not None:
            raise UnknownXmlError(f"descriptor is not well-formed: {error}")
        raise UnknownXmlError("descriptor has no <url> element")

    text = url_text.strip()
    match = _ID_SUFFIX.search(text)
    if match is None:
        raise MalformedAssetIdError(text)

    resolved = int(match.group(1))
    logger.debug("Resolved asset %d to %d", asset_id, resolved)
    return resolved


async def resolve_web_asset_id(
    asset_id: int,
    session: Optional[requests.Session] = None,
    headers: Optional[dict[str, str]] = None,
) -> int:
    """Resolve a backing content id to the id games should reference.

    Args:
        asset_id: Id returned by an upload.
        session: HTTP session to reuse. If omitted, one is opened for
            this call and closed afterwards.
        headers: Extra request headers, e.g. the auth cookie.

    Returns:
        The canonical id, or ``asset_id`` when there is nothing to resolve.
    """
    if session is None:
        with requests.Session() as owned:
            return await resolve_web_asset_id(asset_id, owned, headers)

    try:
        response = await asyncio.to_thread(
            session.get,
            ASSET_DELIVERY_URL,
            params={"id": asset_id},
            headers=headers,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise HttpError(exc) from exc

    return parse_asset_descriptor(response.content, asset_id)
