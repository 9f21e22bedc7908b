import errno
import os
import threading
import time

import pytest

from amneziawg.rwcancel import RWCancel, retry_after_error


@pytest.fixture
def pipe_fds():
    reader, writer = os.pipe()
    yield reader, writer
    for fd in (reader, writer):
        try:
            os.close(fd)
        except OSError:
            pass


def test_retry_after_error_for_again_and_intr():
    assert retry_after_error(OSError(errno.EAGAIN, "again")) is True
    assert retry_after_error(OSError(errno.EINTR, "interrupted")) is True


def test_retry_after_error_rejects_other_errors():
    assert retry_after_error(OSError(errno.EBADF, "bad")) is False
    assert retry_after_error(ValueError("nope")) is False


def test_constructor_makes_descriptor_non_blocking(pipe_fds):
    reader, _ = pipe_fds
    with RWCancel(reader) as rw:
        assert os.get_blocking(reader) is False
        assert rw.fd == reader


def test_read_returns_available_data(pipe_fds):
    reader, writer = pipe_fds
    os.write(writer, b"hello")
    with RWCancel(reader) as rw:
        assert rw.ready_read() is True
        assert rw.read(16) == b"hello"


def test_read_waits_for_data(pipe_fds):
    reader, writer = pipe_fds

    def later():
        time.sleep(0.05)
        os.write(writer, b"late")

    thread = threading.Thread(target=later)
    thread.start()
    with RWCancel(reader) as rw:
        assert rw.read(16) == b"late"
    thread.join()


def test_read_after_cancel_raises(pipe_fds):
    reader, _ = pipe_fds
    with RWCancel(reader) as rw:
        rw.cancel()
        with pytest.raises(OSError) as info:
            rw.read(16)
    assert info.value.errno == errno.EBADF


def test_cancel_wakes_pending_read(pipe_fds):
    reader, _ = pipe_fds
    results = []
    errors = []
    with RWCancel(reader) as rw:

        def blocked_read():
            try:
                results.append(rw.read(16))
            except OSError as err:
                errors.append(err)

        thread = threading.Thread(target=blocked_read)
        thread.start()
        time.sleep(0.05)
        rw.cancel()
        thread.join(timeout=5)
        assert thread.is_alive() is False
        assert rw.ready_read() is False
    assert results == []
    assert [err.errno for err in errors] == [errno.EBADF]


def test_ready_read_false_once_cancelled_even_with_data(pipe_fds):
    reader, writer = pipe_fds
    os.write(writer, b"x")
    with RWCancel(reader) as rw:
        rw.cancel()
        assert rw.ready_read() is False


def test_read_at_end_of_file_returns_empty(pipe_fds):
    reader, writer = pipe_fds
    os.close(writer)
    with RWCancel(reader) as rw:
        assert rw.read(16) == b""


def test_write_round_trip(pipe_fds):
    reader, writer = pipe_fds
    with RWCancel(writer) as rw:
        assert rw.ready_write() is True
        assert rw.write(b"payload") == len(b"payload")
    assert os.read(reader, 16) == b"payload"


def test_write_to_full_pipe_after_cancel_raises(pipe_fds):
    _, writer = pipe_fds
    with RWCancel(writer) as rw:
        chunk = b"\x00" * 4096
        while True:
            try:
                os.write(writer, chunk)
            except BlockingIOError:
                break
        rw.cancel()
        with pytest.raises(OSError) as info:
            rw.write(chunk)
    assert info.value.errno == errno.EBADF


def test_close_is_idempotent(pipe_fds):
    reader, writer = pipe_fds
    rw = RWCancel(reader)
    rw.close()
    rw.close()
    os.write(writer, b"ok")
    assert os.read(reader, 4) == b"ok"