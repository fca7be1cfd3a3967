from .device import Device
from .element import DescriptionElement, PropertyStyle
from .icon import Icon
from .root import Root
from .service import Service
from .types import UniqueDeviceName, UpnpType

__all__ = [
    "DescriptionElement",
    "Device",
    "Icon",
    "PropertyStyle",
    "Root",
    "Service",
    "UniqueDeviceName",
    "UpnpType",
]
