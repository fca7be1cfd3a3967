from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .element import DescriptionElement

if TYPE_CHECKING:
    from .device import Device


@dataclass(eq=False)
class Icon(DescriptionElement):
    ELEMENT_NAME = "icon"

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

    def _get_int(self, key: str) -> int | None:
        value = self.get_property(key).strip()
        return int(value) if value else None

    def _set_int(self, key: str, value: int | None):
        self.set_property(key, None if value is None else str(int(value)))

    @property
    def mimetype(self) -> str:
        return self.get_property("mimetype")

    @mimetype.setter
    def mimetype(self, value: str):
        self.set_property("mimetype", value)

    @property
    def width(self) -> int | None:
        return self._get_int("width")

    @width.setter
    def width(self, value: int | None):
        self._set_int("width", value)

    @property
    def height(self) -> int | None:
        return self._get_int("height")

    @height.setter
    def height(self, value: int | None):
        self._set_int("height", value)

    @property
    def depth(self) -> int | None:
        return self._get_int("depth")

    @depth.setter
    def depth(self, value: int | None):
        self._set_int("depth", value)

    @property
    def url(self) -> str:
        return self.get_property("url")

    @url.setter
    def url(self, value: str):
        self.set_property("url", value)
