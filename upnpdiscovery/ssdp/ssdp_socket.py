from __future__ import annotations

import asyncio
import errno
import ipaddress
import logging
import socket
import struct
from asyncio.events import AbstractEventLoop
from typing import Callable

import psutil

from ..settings import settings

logger = logging.getLogger(__name__)

# errors raised by the OS when the group is already joined on an interface
ALREADY_MEMBER_ERRNOS = frozenset(
    code
    for code in (errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", None))
    if code is not None
)


def address_family(host: str) -> socket.AddressFamily:
    if not host:
        return socket.AF_INET
    address = ipaddress.ip_address(host.split("%", 1)[0])
    return socket.AF_INET6 if address.version == 6 else socket.AF_INET


def local_unicast_addresses(family: int) -> list[tuple[str, str]]:
    """``(interface name, address)`` of every local unicast address of ``family``."""
    addresses = []
    for name, interface_addresses in psutil.net_if_addrs().items():
        for addr in interface_addresses:
            if addr.family != family:
                continue
            address = addr.address.split("%", 1)[0]
            try:
                ip = ipaddress.ip_address(address)
            except ValueError:
                continue
            if ip.is_multicast or ip.is_unspecified:
                continue
            addresses.append((name, address))
    return addresses


class SsdpSocket:
    """UDP socket for SSDP, able to join a multicast group on every interface.

    The socket is owned by a single user at a time: joining groups must not
    race with receiving or closing.
    """

    def __init__(
        self,
        local_endpoint: tuple[str, int] = ("0.0.0.0", 0),
        family: int | None = None,
    ):
        self.family = family or address_family(local_endpoint[0])
        self.socket = self.create_socket(local_endpoint)

    def create_socket(self, local_endpoint: tuple[str, int]) -> socket.socket:
        sock = socket.socket(self.family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        sock.setsockopt(
            socket.SOL_SOCKET, socket.SO_RCVBUF, settings.ssdp_receive_buffer_size
        )
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as e:
            logger.warning("socket reuse failed %s", e)

        sock.bind(local_endpoint)
        logger.info("ssdp socket bound to %s", sock.getsockname())
        return sock

    @property
    def local_endpoint(self):
        return self.socket.getsockname()

    def set_multicast_ttl(self, ttl: int | None = None):
        ttl = settings.multicast_ttl if ttl is None else ttl
        if self.family == socket.AF_INET6:
            self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_HOPS, ttl)
        else:
            self.socket.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)

    def join_multicast_group(
        self, group: str, interface_address: str, interface_name: str | None = None
    ):
        if address_family(group) == socket.AF_INET6:
            index = socket.if_nametoindex(interface_name) if interface_name else 0
            mreq = socket.inet_pton(socket.AF_INET6, group) + struct.pack("@I", index)
            self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_JOIN_GROUP, mreq)
        else:
            mreq = socket.inet_aton(group) + socket.inet_aton(interface_address)
            self.socket.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)

    def join_multicast_group_all_interfaces(self, remote_endpoint: tuple[str, int]):
        """Join the group of ``remote_endpoint`` on every matching local address.

        Already being a member on an interface is fine, any other error is
        raised.
        """
        group = remote_endpoint[0]
        for name, address in local_unicast_addresses(address_family(group)):
            try:
                self.join_multicast_group(group, address, name)
            except OSError as exc:
                if exc.errno not in ALREADY_MEMBER_ERRNOS:
                    raise
                logger.debug("already joined %s on %s (%s)", group, name, address)
            else:
                logger.info("joined %s on %s (%s)", group, name, address)

    def sendto(self, data: bytes, endpoint: tuple[str, int]) -> int:
        return self.socket.sendto(data, endpoint)

    def recvfrom(self, bufsize: int | None = None):
        return self.socket.recvfrom(bufsize or settings.ssdp_receive_buffer_size)

    def fileno(self) -> int:
        return self.socket.fileno()

    def close(self):
        self.socket.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    async def create_datagram_endpoint(
        self,
        protocol_factory: Callable[[], asyncio.DatagramProtocol],
        loop: AbstractEventLoop | None = None,
    ):
        self.socket.setblocking(False)
        if loop is None:
            loop = asyncio.get_running_loop()
        return await loop.create_datagram_endpoint(protocol_factory, sock=self.socket)
