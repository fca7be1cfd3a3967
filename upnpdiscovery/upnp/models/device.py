from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator

from ...exceptions import ParseError
from ..hooks import Event, HookCollection
from .element import DescriptionElement, PropertyStyle, read_collection
from .icon import Icon
from .service import Service
from .types import UniqueDeviceName, UpnpType

if TYPE_CHECKING:
    from .root import Root

logger = logging.getLogger(__name__)


def _string_property(key: str, doc: str | None = None) -> property:
    def getter(self: Device) -> str:
        return self.get_property(key)

    def setter(self: Device, value: str):
        self.set_property(key, value)

    return property(getter, setter, doc=doc or f"The ``{key}`` property, empty when unset.")


@dataclass(eq=False)
class Device(DescriptionElement):
    """A node of a UPnP device tree.

    ``parent`` and ``root`` are never assigned directly: they follow from
    membership in another device's ``devices`` collection, or from being the
    ``root_device`` of a :class:`Root`.
    """

    ELEMENT_NAME = "device"
    RESERVED_ATTRIBUTES = frozenset({"xmlns", "enabled"})

    is_enabled: bool = True

    devices: HookCollection[Device] = field(init=False, repr=False)
    services: HookCollection[Service] = field(init=False, repr=False)
    icons: HookCollection[Icon] = field(init=False, repr=False)

    added: Event = field(default_factory=Event, init=False, repr=False)
    removed: Event = field(default_factory=Event, init=False, repr=False)

    _parent: Device | None = field(default=None, init=False, repr=False)
    _root: Root | None = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self.devices = HookCollection(self._attach_device, self._detach_device)
        self.services = HookCollection(
            lambda service: service._attach(self), lambda service: service._detach()
        )
        self.icons = HookCollection(
            lambda icon: icon._attach(self), lambda icon: icon._detach()
        )

    # tree wiring

    @property
    def parent(self) -> Device | None:
        return self._parent

    @property
    def root(self) -> Root | None:
        return self._root

    @property
    def root_device(self) -> Device:
        if self._root is None:
            raise AttributeError(f"{self!r} is not attached to a root")
        return self._root.root_device

    def _attach_device(self, device: Device):
        if device._parent is not None:
            raise ValueError(f"{device!r} already has a parent, remove it first")
        if device._root is not None:
            raise ValueError(f"{device!r} is the root device of another tree")
        ancestor: Device | None = self
        while ancestor is not None:
            if ancestor is device:
                raise ValueError(f"cannot add {device!r} below itself")
            ancestor = ancestor._parent

        device._parent = self
        try:
            device._set_root(self._root)
            device.added.fire(device)
        except Exception:
            # the collection drops the device again, so must its back-references
            device._set_root(None)
            device._parent = None
            raise

    def _detach_device(self, device: Device):
        device.removed.fire(device)
        device._set_root(None)
        device._parent = None

    def _set_root(self, root: Root | None):
        if self._root is root:
            return

        if self._root is not None:
            self._root.on_child_device_removed(self)
        self._root = root
        if root is not None:
            root.on_child_device_added(self)

        for child in self.devices:
            child._set_root(root)

    # typed accessors

    @property
    def device_type(self) -> UpnpType:
        if "deviceType" not in self.properties:
            raise ParseError("device has no deviceType")
        return UpnpType.parse(self.properties["deviceType"])

    @device_type.setter
    def device_type(self, value: UpnpType):
        self.properties["deviceType"] = str(value)

    @property
    def udn(self) -> UniqueDeviceName:
        if "UDN" not in self.properties:
            raise ParseError("device has no UDN")
        return UniqueDeviceName.parse(self.properties["UDN"])

    @udn.setter
    def udn(self, value: UniqueDeviceName):
        self.properties["UDN"] = str(value)

    friendly_name = _string_property("friendlyName")
    manufacturer = _string_property("manufacturer")
    manufacturer_url = _string_property("manufacturerURL")
    model_description = _string_property("modelDescription")
    model_name = _string_property("modelName")
    model_number = _string_property("modelNumber")
    model_url = _string_property("modelURL")
    serial_number = _string_property("serialNumber")
    upc = _string_property("UPC")
    presentation_url = _string_property("presentationURL")

    # traversal

    def enumerate_devices(self) -> Iterator[Device]:
        """This device, then every descendant depth first, parents first."""
        yield self
        for child in self.devices:
            yield from child.enumerate_devices()

    def enumerate_services(self) -> Iterator[Service]:
        for device in self.enumerate_devices():
            yield from device.services

    def find_by_device_type(self, device_type: UpnpType) -> Iterator[Device]:
        return (d for d in self.enumerate_devices() if d.device_type == device_type)

    def find_by_udn(self, udn: UniqueDeviceName | str) -> Device | None:
        if isinstance(udn, str):
            udn = UniqueDeviceName.parse(udn)
        for device in self.enumerate_devices():
            if "UDN" in device.properties and device.udn == udn:
                return device
        return None

    def find_service(self, service_type: UpnpType) -> Service | None:
        for service in self.enumerate_services():
            if service.service_type == service_type:
                return service
        return None

    # xml

    def element_handlers(self) -> dict[str, Callable[[Any], None]]:
        return {
            "deviceList": lambda value: read_collection(
                value, "device", Device, self.devices.add
            ),
            "serviceList": lambda value: read_collection(
                value, "service", Service, self.services.add
            ),
            "iconList": lambda value: read_collection(
                value, "icon", Icon, self.icons.add
            ),
        }

    def read_attribute(self, name: str, value: str):
        if name == "enabled":
            self.is_enabled = value.strip().lower() != "false"
        else:
            super().read_attribute(name, value)

    def write_attributes(self, node: dict[str, Any]):
        if not self.is_enabled:
            node["@enabled"] = "false"

    def write_children(self, node: dict[str, Any], style: PropertyStyle):
        if self.devices:
            node["deviceList"] = {"device": [d.to_dict(style) for d in self.devices]}
        if self.services:
            node["serviceList"] = {"service": [s.to_dict(style) for s in self.services]}
        if self.icons:
            node["iconList"] = {"icon": [i.to_dict(style) for i in self.icons]}

    def __str__(self):
        return "{}/{}".format(
            self.properties.get("deviceType", ""), self.properties.get("UDN", "")
        )
