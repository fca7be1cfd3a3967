from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import IO, Any

import aiohttp
import xmltodict

from .settings import settings

logger = logging.getLogger(__name__)

UPNP_DEVICE_NAMESPACE = "urn:schemas-upnp-org:device-1-0"


@dataclass
class G:
    http: aiohttp.ClientSession = field(init=False)
    verify_ssl: bool = field(default=False, init=False)

    def create_session(self):
        self.http = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(ssl=self.verify_ssl),
            headers={"User-Agent": settings.user_agent},
            timeout=aiohttp.ClientTimeout(total=settings.http_timeout),
        )


g = G()


def xml2dict(xml: str | bytes | IO[bytes]) -> dict[str, Any]:
    """Parse a description document into nested dicts.

    Elements of the UPnP device namespace are keyed by their bare name, any
    other namespaced element keeps its namespace URI as a prefix (use
    ``local_name`` to strip it). Text is kept verbatim, whitespace included.
    """
    return xmltodict.parse(
        xml,
        process_namespaces=True,
        namespaces={UPNP_DEVICE_NAMESPACE: None},
        strip_whitespace=False,
    )


def dict2xml(tree: dict[str, Any], pretty: bool = False) -> str:
    return xmltodict.unparse(
        tree, full_document=True, pretty=pretty, short_empty_elements=False
    )


def local_name(key: str) -> str:
    if key.startswith("@"):
        key = key[1:]
    return key.rsplit(":", 1)[-1]


def element_text(value) -> str:
    """Text content of a parsed element, first occurrence when repeated."""
    if isinstance(value, list):
        return element_text(value[0]) if value else ""
    if value is None:
        return ""
    if isinstance(value, dict):
        text = value.get("#text") or ""
        # indentation between child elements is not content
        if not text.strip() and any(not key.startswith(("@", "#")) for key in value):
            return ""
        return text
    return str(value)


def find_element(node, name: str) -> tuple[bool, Any]:
    """Depth-first search for the first element called ``name``.

    Returns ``(found, element)``; the element itself may be ``None`` for an
    empty tag so the flag is needed to tell both cases apart.
    """
    if isinstance(node, list):
        for item in node:
            found, element = find_element(item, name)
            if found:
                return found, element
        return False, None

    if not isinstance(node, dict):
        return False, None

    for key, value in node.items():
        if key.startswith(("@", "#")):
            continue
        if local_name(key) == name:
            return True, value[0] if isinstance(value, list) else value
        found, element = find_element(value, name)
        if found:
            return found, element
    return False, None


def child_element(node, name: str) -> tuple[bool, Any]:
    """Like ``find_element`` but only looks at the direct children of ``node``."""
    if not isinstance(node, dict):
        return False, None
    for key, value in node.items():
        if not key.startswith(("@", "#")) and local_name(key) == name:
            return True, value[0] if isinstance(value, list) else value
    return False, None
