from .exceptions import InvalidDataError, ParseError
from .settings import settings
from .ssdp import SsdpDiscover, SsdpSocket
from .upnp import (
    Device,
    Event,
    HookCollection,
    Icon,
    PropertyStyle,
    Root,
    Service,
    UniqueDeviceName,
    UpnpType,
    fetch_root,
)

__version__ = "0.1.0"
