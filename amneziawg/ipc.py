"""Unix-socket control endpoint for the userspace configuration protocol."""

from __future__ import annotations

import enum
import errno
import os
import queue
import socket
import threading
from pathlib import Path
from typing import Optional, Union

SOCKET_DIRECTORY = "/var/run/amneziawg"

_POLL_INTERVAL = 0.2


class IpcErrorCode(enum.IntEnum):
    """Negative errno values reported back to configuration clients."""

    IO = -errno.EIO
    PROTOCOL = -errno.EPROTO
    INVALID = -errno.EINVAL
    PORT_IN_USE = -errno.EADDRINUSE
    UNKNOWN = -55  # ENOANO


class IPCError(Exception):
    """A failure of a configuration operation, carrying its error code."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"IPC error {int(code)}: {message}")
        self.code = code
        self.message = message


def sock_path(iface: str, directory: str = SOCKET_DIRECTORY) -> str:
    """Path of the control socket for interface ``iface``."""
    return f"{directory}/{iface}.sock"


def _bind_listener(path: str) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        sock.listen()
    except OSError:
        sock.close()
        raise
    return sock


def _socket_in_use(path: str) -> bool:
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as probe:
        try:
            probe.connect(path)
        except OSError:
            return False
    return True


def uapi_open(name: str, directory: str = SOCKET_DIRECTORY) -> socket.socket:
    """Create the listening control socket for ``name``.

    A stale socket file left behind by a dead process is replaced; a socket
    that still accepts connections raises ``OSError`` with ``EADDRINUSE``.
    """
    Path(directory).mkdir(mode=0o755, parents=True, exist_ok=True)
    path = sock_path(name, directory)
    old_umask = os.umask(0o077)
    try:
        try:
            return _bind_listener(path)
        except OSError:
            pass
        if _socket_in_use(path):
            raise OSError(errno.EADDRINUSE, "unix socket in use", path)
        os.remove(path)
        return _bind_listener(path)
    finally:
        os.umask(old_umask)


class UAPIListener:
    """Accepts control connections until closed or until its socket file is deleted.

    ``sock`` is a listening socket or its descriptor number. Closing the
    listener also removes the socket file.
    """

    def __init__(
        self,
        name: str,
        sock: Union[socket.socket, int],
        directory: str = SOCKET_DIRECTORY,
    ) -> None:
        if isinstance(sock, int):
            sock = socket.socket(fileno=sock)
        self._sock = sock
        self._path = sock_path(name, directory)
        address = sock.getsockname()
        self._address = address if isinstance(address, str) else ""
        self._queue: "queue.Queue[Union[socket.socket, BaseException]]" = queue.Queue()
        self._error: Optional[BaseException] = None
        self._stop = threading.Event()
        self._closed = False
        self._sock.settimeout(_POLL_INTERVAL)
        self._watcher = threading.Thread(target=self._watch_path, daemon=True)
        self._acceptor = threading.Thread(target=self._accept_loop, daemon=True)
        self._watcher.start()
        self._acceptor.start()

    def __enter__(self) -> "UAPIListener":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _watch_path(self) -> None:
        while True:
            if not os.path.lexists(self._path):
                self._queue.put(
                    FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), self._path)
                )
                return
            if self._stop.wait(_POLL_INTERVAL):
                return

    def _accept_loop(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except TimeoutError:
                continue
            except OSError as err:
                if not self._stop.is_set():
                    self._queue.put(err)
                return
            self._queue.put(conn)

    def accept(self) -> socket.socket:
        """Wait for the next connection; raise once the listener has failed or closed."""
        if self._error is not None:
            raise self._error
        item = self._queue.get()
        if isinstance(item, BaseException):
            self._error = item
            raise item
        return item

    def close(self) -> None:
        """Stop accepting, close the socket and remove its file."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        for thread in (self._acceptor, self._watcher):
            if thread is not threading.current_thread():
                thread.join(timeout=_POLL_INTERVAL * 5)
        self._sock.close()
        self._queue.put(OSError(errno.EBADF, "use of closed network connection"))
        if self._address:
            try:
                os.remove(self._address)
            except FileNotFoundError:
                pass

    def addr(self) -> str:
        """The address the listener is bound to."""
        return self._address


def uapi_listen(
    name: str,
    sock: Union[socket.socket, int],
    directory: str = SOCKET_DIRECTORY,
) -> UAPIListener:
    """Start accepting control connections on an opened socket."""
    return UAPIListener(name, sock, directory)