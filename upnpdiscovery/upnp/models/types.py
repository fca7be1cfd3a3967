from __future__ import annotations

import uuid
from dataclasses import dataclass

from ...exceptions import ParseError

UPNP_DOMAIN = "schemas-upnp-org"

DEVICE_KIND = "device"
SERVICE_KIND = "service"


@dataclass(frozen=True)
class UpnpType:
    """A device or service type, ``urn:<domain>:<kind>:<name>:<version>``."""

    domain: str
    kind: str
    name: str
    version: str

    @classmethod
    def parse(cls, value: str) -> UpnpType:
        if not isinstance(value, str):
            raise ParseError(f"UPnP type must be a string, got {value!r}")

        parts = value.strip().split(":")
        if len(parts) != 5 or parts[0].lower() != "urn":
            raise ParseError(f"not a UPnP type urn: {value!r}")

        _, domain, kind, name, version = parts
        if kind not in (DEVICE_KIND, SERVICE_KIND):
            raise ParseError(f"unknown UPnP type kind {kind!r} in {value!r}")
        if not (domain and name and version):
            raise ParseError(f"incomplete UPnP type urn: {value!r}")

        return cls(domain=domain, kind=kind, name=name, version=version)

    @classmethod
    def device(cls, name: str, version: str | int = 1, domain: str = UPNP_DOMAIN):
        return cls(domain=domain, kind=DEVICE_KIND, name=name, version=str(version))

    @classmethod
    def service(cls, name: str, version: str | int = 1, domain: str = UPNP_DOMAIN):
        return cls(domain=domain, kind=SERVICE_KIND, name=name, version=str(version))

    @property
    def is_device(self) -> bool:
        return self.kind == DEVICE_KIND

    @property
    def is_service(self) -> bool:
        return self.kind == SERVICE_KIND

    def __str__(self):
        return f"urn:{self.domain}:{self.kind}:{self.name}:{self.version}"


@dataclass(frozen=True)
class UniqueDeviceName:
    """A UDN, ``uuid:<value>``. The value is kept verbatim."""

    value: str

    PREFIX = "uuid:"

    @classmethod
    def parse(cls, value: str) -> UniqueDeviceName:
        if not isinstance(value, str):
            raise ParseError(f"UDN must be a string, got {value!r}")

        value = value.strip()
        if not value[: len(cls.PREFIX)].lower() == cls.PREFIX:
            raise ParseError(f"UDN does not start with 'uuid:': {value!r}")

        udn = value[len(cls.PREFIX) :]
        if not udn:
            raise ParseError(f"empty UDN: {value!r}")
        return cls(udn)

    @classmethod
    def generate(cls) -> UniqueDeviceName:
        return cls(str(uuid.uuid4()))

    def __str__(self):
        return f"{self.PREFIX}{self.value}"
