from __future__ import annotations

import socket
from typing import Optional, Tuple


def split_address(addr: str) -> Tuple[str, int]:
    """
    "10.0.0.1:2100" or "[2001:db8::1]:2100" to (host, port).
    """
    host, sep, port = addr.rpartition(":")
    if not sep or not host:
        raise ValueError(f"address must be host:port, got {addr!r}")
    return host.strip("[]"), int(port)


class UdpCollectorTransport:
    """
    Sends each datagram to an IPFIX collector over UDP.

    The socket is opened lazily on first send and bound to local_address
    when one is configured, so the collector sees a stable source port.
    Retries are left to the caller.
    """

    def __init__(self, remote_address: str, local_address: Optional[str] = None):
        self.remote_address = remote_address
        self.local_address = local_address
        self._sock: Optional[socket.socket] = None
        self._dest = None
        self.sent = 0

    def _open(self) -> socket.socket:
        host, port = split_address(self.remote_address)
        family, _, _, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        sock = socket.socket(family, socket.SOCK_DGRAM)
        if self.local_address:
            lhost, lport = split_address(self.local_address)
            sock.bind((lhost, lport))
        self._dest = sockaddr
        return sock

    def send(self, datagram: bytes) -> None:
        if self._sock is None:
            self._sock = self._open()
        self._sock.sendto(datagram, self._dest)
        self.sent += 1

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
