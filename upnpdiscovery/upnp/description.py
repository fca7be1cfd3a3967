from __future__ import annotations

import logging

import aiohttp

from ..utils import g
from .models.root import Root

logger = logging.getLogger(__name__)


async def fetch_root(
    location_url: str, client: aiohttp.ClientSession | None = None
) -> Root:
    """Download and parse the device description found at ``location_url``."""
    if client is None:
        client = g.http

    logger.info("get device description %s", location_url)
    async with client.get(location_url) as response:
        response.raise_for_status()
        root = Root.from_xml(await response.read())

    if not root.url_base:
        root.url_base = location_url
    return root
