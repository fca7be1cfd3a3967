from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ...exceptions import ParseError
from .element import DescriptionElement
from .types import UpnpType

if TYPE_CHECKING:
    from .device import Device


@dataclass(eq=False)
class Service(DescriptionElement):
    ELEMENT_NAME = "service"

    _device: Device | None = field(default=None, init=False, repr=False)

    @property
    def device(self) -> Device | None:
        return self._device

    def _attach(self, device: Device):
        if self._device is not None:
            raise ValueError(f"{self!r} already belongs to {self._device!r}")
        self._device = device

    def _detach(self):
        self._device = None

    @property
    def service_type(self) -> UpnpType:
        if "serviceType" not in self.properties:
            raise ParseError("service has no serviceType")
        return UpnpType.parse(self.properties["serviceType"])

    @service_type.setter
    def service_type(self, value: UpnpType):
        self.properties["serviceType"] = str(value)

    @property
    def service_id(self) -> str:
        return self.get_property("serviceId")

    @service_id.setter
    def service_id(self, value: str):
        self.set_property("serviceId", value)

    @property
    def scpd_url(self) -> str:
        return self.get_property("SCPDURL")

    @scpd_url.setter
    def scpd_url(self, value: str):
        self.set_property("SCPDURL", value)

    @property
    def control_url(self) -> str:
        return self.get_property("controlURL")

    @control_url.setter
    def control_url(self, value: str):
        self.set_property("controlURL", value)

    @property
    def event_sub_url(self) -> str:
        return self.get_property("eventSubURL")

    @event_sub_url.setter
    def event_sub_url(self, value: str):
        self.set_property("eventSubURL", value)

    def __str__(self):
        return self.properties.get("serviceType", "") or self.service_id
