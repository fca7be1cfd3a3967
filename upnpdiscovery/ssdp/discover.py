from __future__ import annotations

import asyncio
import logging
import socket
from asyncio.events import AbstractEventLoop
from asyncio.protocols import DatagramProtocol
from asyncio.transports import DatagramTransport
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Type

from ..settings import settings
from .ssdp_socket import SsdpSocket, address_family

logger = logging.getLogger(__name__)


def search_message(
    search_target: str | None = None,
    mx: int | None = None,
    address: str | None = None,
) -> bytes:
    address = address or settings.ssdp_address
    host = f"[{address}]" if ":" in address else address
    params = [
        "M-SEARCH * HTTP/1.1",
        f"HOST: {host}:{settings.ssdp_port}",
        'MAN: "ssdp:discover"',
        f"MX: {settings.search_mx if mx is None else mx}",
        f"ST: {search_target or settings.search_target}",
        "",
        "",
    ]
    return "\r\n".join(params).encode("UTF-8")


def parse_ssdp_headers(data: bytes) -> dict[str, str]:
    """Header fields of a search response or notification, keys lower-cased."""
    info = [a.split(":", 1) for a in data.decode("UTF-8", "replace").split("\r\n")[1:]]
    return dict([(a[0].strip().lower(), a[1].strip()) for a in info if len(a) >= 2])


def get_protocol(discover: SsdpDiscover) -> Type[DatagramProtocol]:
    @dataclass
    class SsdpProtocol(DatagramProtocol):
        transport: DatagramTransport | None = None
        is_connected: bool = False

        def __post_init__(self):
            discover.protocol = self

        def connection_made(self, transport: DatagramTransport):
            self.transport = transport
            self.is_connected = True
            logger.info("ssdp discover connected")
            discover.track(asyncio.create_task(self.send_loop()))

        async def send_loop(self):
            if not self.transport:
                raise Exception("transport not set")
            while self.is_connected and self.transport is not None:
                address, port = discover.multicast_endpoint
                self.transport.sendto(
                    search_message(discover.search_target, address=address),
                    (address, port),
                )
                await asyncio.sleep(settings.search_interval)

        def datagram_received(self, data: bytes, addr: tuple[str, int]):
            headers = parse_ssdp_headers(data)
            location = headers.get("location")
            if not location:
                logger.debug("ignoring ssdp message without location from %s", addr)
                return
            discover.track(asyncio.create_task(discover.on_new_device(location, headers)))

        def error_received(self, exc: Exception):
            logger.error("Error received: %s", exc)

        def connection_lost(self, exc: Exception | None):
            logger.info("ssdp socket closed")
            if exc:
                logger.error("Error received: %s", exc)
            self.is_connected = False
            self.transport = None

    return SsdpProtocol


@dataclass
class SsdpDiscover:
    new_device_callback: Callable[[str, dict[str, str]], Awaitable[None]]
    search_target: str = field(default_factory=lambda: settings.search_target)
    local_endpoint: tuple[str, int] = ("0.0.0.0", 0)

    device_locations: list[str] = field(default_factory=list, init=False)
    protocol: DatagramProtocol | None = field(default=None, init=False)
    socket: SsdpSocket | None = field(default=None, init=False)
    _tasks: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    @property
    def multicast_endpoint(self) -> tuple[str, int]:
        if address_family(self.local_endpoint[0]) == socket.AF_INET6:
            return settings.ssdp_address_v6, settings.ssdp_port
        return settings.ssdp_address, settings.ssdp_port

    def track(self, task: asyncio.Task):
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def on_new_device(self, location_url: str, headers: dict[str, str]):
        if location_url not in self.device_locations:
            self.device_locations.append(location_url)
            await self.new_device_callback(location_url, headers)

    def init_socket(self):
        self.socket = SsdpSocket(self.local_endpoint)
        self.socket.set_multicast_ttl()
        self.socket.join_multicast_group_all_interfaces(self.multicast_endpoint)

    async def discover(self, loop: AbstractEventLoop | None = None):
        self.init_socket()
        await self.socket.create_datagram_endpoint(get_protocol(self), loop=loop)

    def stop(self):
        transport = getattr(self.protocol, "transport", None)
        if transport is not None:
            transport.close()
        for task in list(self._tasks):
            task.cancel()
