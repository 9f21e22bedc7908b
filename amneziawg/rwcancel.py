"""Cancelable blocking reads and writes on a non-blocking file descriptor."""

from __future__ import annotations

import errno
import os
import select

_RETRY_ERRNOS = frozenset({errno.EAGAIN, errno.EWOULDBLOCK, errno.EINTR})


def retry_after_error(err: BaseException) -> bool:
    """Report whether ``err`` means the operation should be waited on and retried."""
    return isinstance(err, OSError) and err.errno in _RETRY_ERRNOS


def _closed_error() -> OSError:
    return OSError(errno.EBADF, "file already closed")


class RWCancel:
    """Wraps a descriptor so that pending reads and writes can be cancelled.

    The descriptor is switched to non-blocking mode. Operations that would
    block wait in ``poll`` until the descriptor is ready or ``cancel`` is
    called, in which case they raise ``OSError`` with ``EBADF``.
    """

    def __init__(self, fd: int) -> None:
        os.set_blocking(fd, False)
        self._fd = fd
        self._closing_reader, self._closing_writer = os.pipe()
        self._closed = False

    def __enter__(self) -> "RWCancel":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def fd(self) -> int:
        """The wrapped descriptor."""
        return self._fd

    def _wait(self, events: int) -> bool:
        poller = select.poll()
        poller.register(self._fd, events)
        poller.register(self._closing_reader, select.POLLIN)
        try:
            ready = dict(poller.poll())
        except OSError:
            return False
        if ready.get(self._closing_reader):
            return False
        return bool(ready.get(self._fd))

    def ready_read(self) -> bool:
        """Block until the descriptor is readable; False if cancelled or on error."""
        return self._wait(select.POLLIN)

    def ready_write(self) -> bool:
        """Block until the descriptor is writable; False if cancelled or on error."""
        return self._wait(select.POLLOUT)

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, waiting for data unless cancelled."""
        while True:
            try:
                return os.read(self._fd, size)
            except OSError as err:
                if not retry_after_error(err):
                    raise
            if not self.ready_read():
                raise _closed_error()

    def write(self, data: bytes) -> int:
        """Write ``data``, waiting for room unless cancelled; returns bytes written."""
        while True:
            try:
                return os.write(self._fd, data)
            except OSError as err:
                if not retry_after_error(err):
                    raise
            if not self.ready_write():
                raise _closed_error()

    def cancel(self) -> None:
        """Wake every pending and future wait so that it fails."""
        os.write(self._closing_writer, b"\x00")

    def close(self) -> None:
        """Release the cancellation pipe; the wrapped descriptor is left open."""
        if self._closed:
            return
        self._closed = True
        os.close(self._closing_reader)
        os.close(self._closing_writer)