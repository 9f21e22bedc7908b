import pytest

from amneziawg.tai64n import TIMESTAMP_SIZE, Timestamp, now, stamp

START = 123456789
NS = 1
US = 1_000
MS = 1_000_000


@pytest.mark.parametrize(
    "delta, want_after",
    [
        (10 * NS, False),
        (10 * US, False),
        (1 * MS, False),
        (10 * MS, False),
        (20 * MS, True),
    ],
    ids=["after_10_ns", "after_10_us", "after_1_ms", "after_10_ms", "after_20_ms"],
)
def test_monotonic(delta, want_after):
    ts1 = stamp(START)
    ts2 = stamp(START + delta)
    assert ts2.after(ts1) is want_after


def test_stamp_layout():
    ts = stamp(1_500_000_000 * 1_000_000_000)
    assert bytes(ts) == bytes.fromhex("4000000059682f0a00000000")


def test_epoch_string():
    assert str(stamp(0)) == "1970-01-01 00:00:00 +0000 UTC"


def test_after_is_strict():
    ts = stamp(START)
    assert ts.after(stamp(START)) is False


def test_later_second_is_after():
    assert stamp(5 * 1_000_000_000).after(stamp(4 * 1_000_000_000 + 999_999_999)) is True


def test_now_size_and_order():
    first = now()
    second = now()
    assert len(first) == TIMESTAMP_SIZE
    assert not first.after(second)


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        Timestamp(b"short")