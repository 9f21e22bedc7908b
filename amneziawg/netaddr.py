"""Network names, dial addresses and ping endpoints for tunnel connections."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .dnsutil import ERR_NUMERIC_PORT

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_PROTO_SPLITTER = re.compile(r"^(tcp|udp|ping)(4|6)?$")
_DECIMAL = re.compile(r"^[+-]?[0-9]+$", re.ASCII)
_MAX_PORT = 65535


class DialError(Exception):
    """A dial operation failed; ``err`` holds the underlying reason."""

    def __init__(self, err: Union[str, BaseException], op: str = "dial") -> None:
        self.op = op
        self.err = err
        super().__init__(f"{op}: {err}")


@dataclass(frozen=True)
class PingAddr:
    """The address of an ICMP echo endpoint."""

    addr: Optional[IPAddress] = None

    def network(self) -> str:
        """The network name: ``ping4``, ``ping6`` or ``ping`` when unset."""
        if isinstance(self.addr, ipaddress.IPv4Address):
            return "ping4"
        if isinstance(self.addr, ipaddress.IPv6Address):
            return "ping6"
        return "ping"

    def __str__(self) -> str:
        return "invalid IP" if self.addr is None else str(self.addr)


def ping_addr_from_addr(addr: Union[str, bytes, int, IPAddress]) -> PingAddr:
    """Wrap an IP address, given in any form ``ipaddress`` accepts, as a ping address."""
    return PingAddr(ipaddress.ip_address(addr))


def parse_network(network: str) -> Tuple[str, bool, bool]:
    """Split a network name such as ``tcp4`` or ``udp``.

    Returns the protocol and whether IPv4 and IPv6 addresses are accepted.
    Raises ``DialError`` for an unknown network.
    """
    match = _PROTO_SPLITTER.match(network)
    if match is None:
        raise DialError(f"unknown network {network}")
    protocol, family = match.group(1), match.group(2)
    if not family:
        return protocol, True, True
    accept_v4 = family == "4"
    return protocol, accept_v4, not accept_v4


def _address_error(address: str, reason: str) -> DialError:
    return DialError(f"address {address}: {reason}")


def _split_host_port(address: str) -> Tuple[str, str]:
    colon = address.rfind(":")
    if colon < 0:
        raise _address_error(address, "missing port in address")

    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise _address_error(address, "missing ']' in address")
        after = end + 1
        if after == len(address):
            raise _address_error(address, "missing port in address")
        if after != colon:
            if address[after] == ":":
                raise _address_error(address, "too many colons in address")
            raise _address_error(address, "missing port in address")
        host = address[1:end]
        host_start, port_search = 1, after
    else:
        host = address[:colon]
        if ":" in host:
            raise _address_error(address, "too many colons in address")
        host_start, port_search = 0, 0

    if "[" in address[host_start:]:
        raise _address_error(address, "unexpected '[' in address")
    if "]" in address[port_search:]:
        raise _address_error(address, "unexpected ']' in address")
    return host, address[colon + 1 :]


def parse_dial_address(network: str, address: str) -> Tuple[str, int]:
    """Split ``address`` into host and port for dialing on ``network``.

    Ping addresses carry no port and are returned whole with port 0.
    Raises ``DialError`` for a malformed address or a port that is not a
    number from 0 to 65535.
    """
    protocol, _, _ = parse_network(network)
    if protocol == "ping":
        return address, 0
    host, port_text = _split_host_port(address)
    if not _DECIMAL.match(port_text):
        raise DialError(ERR_NUMERIC_PORT)
    port = int(port_text)
    if port < 0 or port > _MAX_PORT:
        raise DialError(ERR_NUMERIC_PORT)
    return host, port