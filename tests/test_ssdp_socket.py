from __future__ import annotations

import errno
import socket
from collections import namedtuple

import pytest

from upnpdiscovery.settings import settings
from upnpdiscovery.ssdp import ssdp_socket
from upnpdiscovery.ssdp.ssdp_socket import SsdpSocket, local_unicast_addresses

snicaddr = namedtuple("snicaddr", "family address netmask broadcast ptp")

SSDP_ENDPOINT = ("239.255.255.250", 1900)


class FakeSocket:
    """Records options and refuses a second join of the same membership."""

    def __init__(self, fail_with: int | None = None):
        self.options = []
        self.memberships = set()
        self.fail_with = fail_with
        self.closed = False

    def setsockopt(self, level, option, value):
        if option == socket.IP_ADD_MEMBERSHIP:
            if self.fail_with is not None:
                raise OSError(self.fail_with, "join failed")
            if value in self.memberships:
                raise OSError(errno.EADDRINUSE, "Address already in use")
            self.memberships.add(value)
        self.options.append((level, option, value))

    def close(self):
        self.closed = True


class FakeSsdpSocket(SsdpSocket):
    fail_with = None

    def create_socket(self, local_endpoint):
        return FakeSocket(self.fail_with)


@pytest.fixture
def interfaces(monkeypatch):
    addresses = {
        "lo": [snicaddr(socket.AF_INET, "127.0.0.1", "255.0.0.0", None, None)],
        "eth0": [
            snicaddr(socket.AF_INET, "192.168.1.10", "255.255.255.0", None, None),
            snicaddr(socket.AF_INET6, "fe80::1%eth0", "ffff:ffff:ffff:ffff::", None, None),
            snicaddr(getattr(socket, "AF_PACKET", -1), "00:11:22:33:44:55", None, None, None),
        ],
        "wlan0": [
            snicaddr(socket.AF_INET, "10.0.0.5", "255.0.0.0", None, None),
            snicaddr(socket.AF_INET, "0.0.0.0", None, None, None),
        ],
    }
    monkeypatch.setattr(ssdp_socket.psutil, "net_if_addrs", lambda: addresses)
    return addresses


def test_local_unicast_addresses(interfaces):
    assert local_unicast_addresses(socket.AF_INET) == [
        ("lo", "127.0.0.1"),
        ("eth0", "192.168.1.10"),
        ("wlan0", "10.0.0.5"),
    ]
    assert local_unicast_addresses(socket.AF_INET6) == [("eth0", "fe80::1")]


def test_join_all_interfaces(interfaces):
    sock = FakeSsdpSocket()
    sock.join_multicast_group_all_interfaces(SSDP_ENDPOINT)

    group = socket.inet_aton(SSDP_ENDPOINT[0])
    assert sock.socket.memberships == {
        group + socket.inet_aton("127.0.0.1"),
        group + socket.inet_aton("192.168.1.10"),
        group + socket.inet_aton("10.0.0.5"),
    }


def test_join_twice_is_harmless(interfaces):
    sock = FakeSsdpSocket()
    sock.join_multicast_group_all_interfaces(SSDP_ENDPOINT)
    memberships = set(sock.socket.memberships)

    sock.join_multicast_group_all_interfaces(SSDP_ENDPOINT)

    assert sock.socket.memberships == memberships


def test_other_join_errors_propagate(interfaces):
    class Failing(FakeSsdpSocket):
        fail_with = errno.ENODEV

    with pytest.raises(OSError) as exc_info:
        Failing().join_multicast_group_all_interfaces(SSDP_ENDPOINT)
    assert exc_info.value.errno == errno.ENODEV


def test_context_manager_closes():
    with FakeSsdpSocket() as sock:
        pass
    assert sock.socket.closed


def test_set_multicast_ttl():
    sock = FakeSsdpSocket()
    sock.set_multicast_ttl()
    assert (socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, settings.multicast_ttl) in sock.socket.options


def test_real_socket_options():
    with SsdpSocket(("127.0.0.1", 0)) as sock:
        assert sock.family == socket.AF_INET
        assert sock.socket.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR)
        # kernels round the buffer size, only check it was raised from zero
        assert sock.socket.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF) > 0
        assert sock.local_endpoint[0] == "127.0.0.1"
        assert sock.local_endpoint[1] != 0


def test_two_sockets_share_a_port():
    with SsdpSocket(("0.0.0.0", 0)) as first:
        port = first.local_endpoint[1]
        with SsdpSocket(("0.0.0.0", port)) as second:
            assert second.local_endpoint[1] == port


def test_send_and_receive_over_loopback():
    with SsdpSocket(("127.0.0.1", 0)) as receiver, SsdpSocket(("127.0.0.1", 0)) as sender:
        sender.sendto(b"hello", receiver.local_endpoint)
        data, addr = receiver.recvfrom()
        assert data == b"hello"
        assert addr == sender.local_endpoint
