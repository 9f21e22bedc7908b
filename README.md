# amneziawg

Pure-Python building blocks for a userspace AmneziaWG daemon. The package
uses only the standard library. The control-socket and cancelable-I/O
modules need a POSIX system (`AF_UNIX` sockets and `select.poll`).

## Installation

```
pip install amneziawg
```

For running the tests:

```
pip install "amneziawg[test]"
pytest
```

## Modules

- `amneziawg.replay` – `Filter`, a sliding-window anti-replay filter
  (RFC 6479). `Filter.validate_counter(counter, limit)` returns `True` the
  first time a counter inside the window is seen, and `False` for repeats,
  counters too far behind the newest one, and counters at or above `limit`.
  `Filter.reset()` empties it.
- `amneziawg.ratelimiter` – `Ratelimiter`, a per-address token bucket that
  allows a burst of 5 packets and then 20 packets per second.
  `allow(ip)` takes anything `ipaddress.ip_address` accepts. The optional
  `clock` argument is a callable returning the time in nanoseconds
  (default `time.monotonic_ns`). A background thread drops entries idle for
  more than a second; `cleanup()` does the same on demand and reports
  whether the table is empty. `close()` stops the thread; the limiter is
  also a context manager.
- `amneziawg.tai64n` – `Timestamp`, a 12-byte TAI64N value whose
  nanosecond part is whitened (its low 24 bits cleared) to hide fine timing.
  Build one with `now()` or `stamp(unix_ns)`, compare with
  `Timestamp.after(other)`, and `str()` gives a UTC date and time.
- `amneziawg.checksum` – the Internet checksum: `checksum(data, initial)`
  folds to 16 bits, `checksum_no_fold(data, initial)` returns the unfolded
  sum, and `pseudo_header_checksum_no_fold(protocol, src_addr, dst_addr,
  total_len)` sums a TCP/UDP pseudo-header. `TooManySegmentsError` is the
  exception type for segmentation that overflows the supplied buffers.
- `amneziawg.rwcancel` – `RWCancel(fd)` switches a descriptor to
  non-blocking mode and offers `read(size)` and `write(data)` that wait
  for readiness; `cancel()` makes pending and later waits fail with
  `OSError` (`EBADF`). `ready_read()`, `ready_write()` and
  `retry_after_error(err)` are available too; `close()` releases the
  internal pipe but leaves the wrapped descriptor open.
- `amneziawg.ipc` – the UAPI control socket. `sock_path(iface, directory)`
  gives `<directory>/<iface>.sock` (default directory
  `/var/run/amneziawg`). `uapi_open(name, directory)` creates the listening
  socket, replacing a stale socket file and raising `OSError`
  (`EADDRINUSE`) if another process still listens on it.
  `uapi_listen(name, sock, directory)` returns a `UAPIListener` whose
  `accept()` yields connections until the listener is closed or its socket
  file is deleted; `close()` also removes the socket file, and `addr()`
  returns the bound path. `IPCError(code, message)` carries an
  `IpcErrorCode` (negative errno) value.
- `amneziawg.dnsutil` – helpers for a minimal stub resolver:
  `is_domain_name`, `new_request` (builds a recursive query for a
  `DnsQuestion` whose name ends in `.`, returning the id, the datagram form
  and the length-prefixed stream form), `check_response`,
  `equal_ascii_name`, `partial_deadline` (raises `TimeoutError` once the
  deadline has passed), and the `DnsQuestion`, `DnsHeader` and
  `DnsLookupError` types.
- `amneziawg.netaddr` – `parse_network` splits names such as `tcp4`,
  `udp` or `ping6` into a protocol and the accepted address families;
  `parse_dial_address(network, address)` splits `host:port` (with
  `[...]` for IPv6). Both raise `DialError`. `PingAddr` and
  `ping_addr_from_addr` describe ICMP echo endpoints.

## Example

```python
from amneziawg.replay import Filter
from amneziawg.checksum import checksum
from amneziawg.netaddr import parse_dial_address

window = Filter()
assert window.validate_counter(0, 2**64 - 2**13 - 1)
assert not window.validate_counter(0, 2**64 - 2**13 - 1)

print(hex(checksum(b"\x45\x00\x00\x1c", 0)))
print(parse_dial_address("tcp", "[::1]:53"))  # ('::1', 53)
```

## What this package does not do

It is a set of components, not a working VPN. There is no daemon or
command-line program, no TUN device, no handshake or encryption, and no
handling of the configuration protocol's `get`/`set` operations: the
control socket only accepts connections. The DNS and dial helpers build
and check messages and addresses but send nothing over the network.