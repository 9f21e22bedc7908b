"""DNS request building and response checks for resolving over the tunnel."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import Optional, Tuple, Union

TYPE_A = 1
TYPE_AAAA = 28
CLASS_INET = 1

RCODE_SUCCESS = 0
RCODE_SERVER_FAILURE = 2
RCODE_NAME_ERROR = 3

ERR_NO_SUCH_HOST = "no such host"
ERR_LAME_REFERRAL = "lame referral"
ERR_CANNOT_UNMARSHAL = "cannot unmarshal DNS message"
ERR_CANNOT_MARSHAL = "cannot marshal DNS message"
ERR_SERVER_MISBEHAVING = "server misbehaving"
ERR_INVALID_RESPONSE = "invalid DNS response"
ERR_NO_ANSWER = "no answer from DNS server"
ERR_CANCELED = "operation was canceled"
ERR_TIMEOUT = "i/o timeout"
ERR_NUMERIC_PORT = "port must be numeric"
ERR_NO_SUITABLE_ADDRESS = "no suitable address found"
ERR_MISSING_ADDRESS = "missing address"

_FLAG_RECURSION_DESIRED = 0x0100
_MAX_LABEL = 63
_MAX_NAME = 255
_SANE_MINIMUM = 2.0

Name = Union[str, bytes]


@dataclass(frozen=True)
class DnsQuestion:
    """One entry of a message's question section."""

    name: str
    type: int = TYPE_A
    class_: int = CLASS_INET


@dataclass(frozen=True)
class DnsHeader:
    """The fields of a message header that response checks look at."""

    id: int = 0
    response: bool = False
    truncated: bool = False
    authoritative: bool = False
    recursion_desired: bool = False
    recursion_available: bool = False
    rcode: int = RCODE_SUCCESS


class DnsLookupError(Exception):
    """A failed host lookup, with flags telling why it failed."""

    def __init__(
        self,
        err: str,
        name: str = "",
        server: str = "",
        *,
        is_timeout: bool = False,
        is_temporary: bool = False,
        is_not_found: bool = False,
    ) -> None:
        self.err = err
        self.name = name
        self.server = server
        self.is_timeout = is_timeout
        self.is_temporary = is_temporary
        self.is_not_found = is_not_found
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"lookup {self.name}"
        if self.server:
            text += f" on {self.server}"
        return f"{text}: {self.err}"


def is_domain_name(name: str) -> bool:
    """Report whether ``name`` is a syntactically valid, non-numeric host name."""
    length = len(name)
    if length == 0 or length > 254 or (length == 254 and name[-1] != "."):
        return False
    last = "."
    non_numeric = False
    part_len = 0
    for char in name:
        if ("a" <= char <= "z") or ("A" <= char <= "Z") or char == "_":
            non_numeric = True
            part_len += 1
        elif "0" <= char <= "9":
            part_len += 1
        elif char == "-":
            if last == ".":
                return False
            part_len += 1
            non_numeric = True
        elif char == ".":
            if last in ".-":
                return False
            if part_len > _MAX_LABEL or part_len == 0:
                return False
            part_len = 0
        else:
            return False
        last = char
    if last == "-" or part_len > _MAX_LABEL:
        return False
    return non_numeric


def partial_deadline(
    now: float, deadline: Optional[float], addrs_remaining: int
) -> Optional[float]:
    """Share the time left before ``deadline`` among the remaining addresses.

    Times are seconds. ``None`` means no deadline and is returned unchanged.
    Raises ``TimeoutError`` once the deadline has passed.
    """
    if deadline is None:
        return None
    remaining = deadline - now
    if remaining <= 0:
        raise TimeoutError(ERR_TIMEOUT)
    timeout = remaining / addrs_remaining
    if timeout < _SANE_MINIMUM:
        timeout = remaining if remaining < _SANE_MINIMUM else _SANE_MINIMUM
    return now + timeout


def _encode_name(name: str) -> bytes:
    raw = name.encode("utf-8")
    if not raw.endswith(b"."):
        raise ValueError(f"non-canonical name: {name!r}")
    if raw == b".":
        return b"\x00"
    out = bytearray()
    for label in raw[:-1].split(b"."):
        if not label:
            raise ValueError(f"segment length zero in name: {name!r}")
        if len(label) > _MAX_LABEL:
            raise ValueError(f"segment length too long in name: {name!r}")
        out.append(len(label))
        out += label
    out.append(0)
    if len(out) > _MAX_NAME:
        raise ValueError(f"name too long: {name!r}")
    return bytes(out)


def new_request(question: DnsQuestion) -> Tuple[int, bytes, bytes]:
    """Build a recursive query for ``question`` with a random id.

    Returns the id, the datagram form and the length-prefixed stream form.
    """
    request_id = int.from_bytes(os.urandom(2), "little")
    header = struct.pack(">HHHHHH", request_id, _FLAG_RECURSION_DESIRED, 1, 0, 0, 0)
    body = _encode_name(question.name) + struct.pack(">HH", question.type, question.class_)
    udp_req = header + body
    tcp_req = struct.pack(">H", len(udp_req)) + udp_req
    return request_id, udp_req, tcp_req


def _name_bytes(name: Name) -> bytes:
    return name.encode("utf-8") if isinstance(name, str) else bytes(name)


def equal_ascii_name(x: Name, y: Name) -> bool:
    """Compare two names, ignoring the case of ASCII letters only."""
    left, right = _name_bytes(x), _name_bytes(y)
    return len(left) == len(right) and left.lower() == right.lower()


def check_response(
    request_id: int,
    question: DnsQuestion,
    header: DnsHeader,
    response_question: DnsQuestion,
) -> bool:
    """Report whether a response matches the request it claims to answer."""
    if not header.response or header.id != request_id:
        return False
    return (
        question.type == response_question.type
        and question.class_ == response_question.class_
        and equal_ascii_name(question.name, response_question.name)
    )