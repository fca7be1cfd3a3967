from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import IO, Any, Iterator

from ...exceptions import InvalidDataError
from ...utils import (
    UPNP_DEVICE_NAMESPACE,
    child_element,
    dict2xml,
    element_text,
    find_element,
)
from ..hooks import Event
from .device import Device
from .element import PropertyStyle, parse_document
from .service import Service
from .types import UniqueDeviceName

logger = logging.getLogger(__name__)


@dataclass(eq=False, init=False)
class Root:
    """Anchor of a device tree.

    Every device of the tree refers back to the same ``Root``, which hears
    about each device entering or leaving the tree through ``device_added``
    and ``device_removed``, parents before their children.
    """

    spec_version: tuple[int, int] = (1, 0)
    url_base: str | None = None

    device_added: Event = field(default_factory=Event, repr=False)
    device_removed: Event = field(default_factory=Event, repr=False)

    _root_device: Device | None = field(default=None, repr=False)

    def __init__(
        self,
        root_device: Device | None = None,
        spec_version: tuple[int, int] = (1, 0),
        url_base: str | None = None,
    ):
        self.spec_version = spec_version
        self.url_base = url_base
        self.device_added = Event()
        self.device_removed = Event()
        self._root_device = None
        # through the property so the tree gets wired and announced
        self.root_device = root_device

    @property
    def root_device(self) -> Device | None:
        return self._root_device

    @root_device.setter
    def root_device(self, device: Device | None):
        if device is self._root_device:
            return
        if device is not None:
            if device.parent is not None:
                raise ValueError(f"{device!r} has a parent and cannot be a root device")
            if device.root is not None:
                raise ValueError(f"{device!r} is already the root device of another tree")

        previous, self._root_device = self._root_device, device
        if previous is not None:
            previous._set_root(None)
        if device is not None:
            device._set_root(self)

    def on_child_device_added(self, device: Device):
        logger.debug("device added to tree: %s", device)
        self.device_added.fire(device)

    def on_child_device_removed(self, device: Device):
        logger.debug("device removed from tree: %s", device)
        self.device_removed.fire(device)

    def enumerate_devices(self) -> Iterator[Device]:
        if self._root_device is not None:
            yield from self._root_device.enumerate_devices()

    def enumerate_services(self) -> Iterator[Service]:
        if self._root_device is not None:
            yield from self._root_device.enumerate_services()

    def find_device(self, udn: UniqueDeviceName | str) -> Device | None:
        if self._root_device is None:
            return None
        return self._root_device.find_by_udn(udn)

    @classmethod
    def from_xml(cls, source: str | bytes | IO[bytes]) -> Root:
        """Build a tree from a whole ``<root>`` device description document."""
        found, node = find_element(parse_document(source), "root")
        if not found or not isinstance(node, dict):
            raise InvalidDataError("no <root> element in document")

        root = cls()
        found, spec_version = child_element(node, "specVersion")
        if found:
            root.spec_version = (
                _to_int(child_element(spec_version, "major")[1], 1),
                _to_int(child_element(spec_version, "minor")[1], 0),
            )
        found, url_base = child_element(node, "URLBase")
        if found:
            root.url_base = element_text(url_base).strip() or None

        found, device_node = child_element(node, "device")
        if not found:
            raise InvalidDataError("no <device> element in root document")

        device = Device()
        device.read_dict(device_node)
        root.root_device = device
        return root

    def to_dict(self, property_style: PropertyStyle | str | None = None) -> dict[str, Any]:
        major, minor = self.spec_version
        node: dict[str, Any] = {
            "@xmlns": UPNP_DEVICE_NAMESPACE,
            "specVersion": {"major": str(major), "minor": str(minor)},
        }
        if self.url_base:
            node["URLBase"] = self.url_base
        if self._root_device is not None:
            node["device"] = self._root_device.to_dict(property_style)
        return node

    def to_xml(
        self, property_style: PropertyStyle | str | None = None, pretty: bool = False
    ) -> str:
        return dict2xml({"root": self.to_dict(property_style)}, pretty=pretty)


def _to_int(value, default: int) -> int:
    text = element_text(value).strip()
    return int(text) if text.isdigit() else default
