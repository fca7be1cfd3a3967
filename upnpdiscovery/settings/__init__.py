from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Settings:
    product = "upnpdiscovery"
    version = "1"

    ssdp_address = "239.255.255.250"
    ssdp_address_v6 = "ff02::c"
    ssdp_port = 1900
    ssdp_receive_buffer_size = 4096
    multicast_ttl = 4

    search_target = "ssdp:all"
    search_mx = 3
    search_interval = 30

    # "element" or "attribute", see upnp.models.element.PropertyStyle
    property_style: str = "element"

    http_timeout = 10

    @property
    def user_agent(self):
        return f"{self.product}/{self.version} UPnP/1.0"


settings = Settings()
