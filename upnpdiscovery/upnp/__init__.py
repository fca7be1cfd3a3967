from .description import fetch_root
from .hooks import Event, HookCollection
from .models import (
    Device,
    Icon,
    PropertyStyle,
    Root,
    Service,
    UniqueDeviceName,
    UpnpType,
)
