import ipaddress

import pytest

from amneziawg.ratelimiter import PACKETS_BURSTABLE, PACKETS_PER_SECOND, Ratelimiter

SECOND_NS = 1_000_000_000
PACKET_INTERVAL = SECOND_NS // PACKETS_PER_SECOND

IPS = [
    "127.0.0.1",
    "192.168.1.1",
    "172.167.2.3",
    "97.231.252.215",
    "248.97.91.167",
    "188.208.233.47",
    "104.2.183.179",
    "72.129.46.120",
    "2001:0db8:0a0b:12f0:0000:0000:0000:0001",
    "f5c2:818f:c052:655a:9860:b136:6894:25f0",
    "b2d7:15ab:48a7:b07c:a541:f144:a9fe:54fc",
    "a47b:786e:1671:a22b:d6f9:4ab0:abc7:c918",
    "ea1e:d155:7f7a:98fb:2bf5:9483:80f6:5445",
    "3f0e:54a2:f5b4:cd19:a21d:58e1:3746:84c4",
]


class FakeClock:
    def __init__(self, start=10**15):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    rate = Ratelimiter(clock)
    yield rate
    rate.close()


def test_ratelimiter_schedule(clock, limiter):
    expected = [(True, 0, "initial burst")] * PACKETS_BURSTABLE
    expected += [
        (False, 0, "after burst"),
        (True, PACKET_INTERVAL, "filling tokens for single packet"),
        (False, 0, "not having refilled enough"),
        (True, 2 * PACKET_INTERVAL, "filling tokens for two packet burst"),
        (True, 0, "second packet in 2 packet burst"),
        (False, 0, "packet following 2 packet burst"),
    ]
    for index, (allowed, wait, text) in enumerate(expected):
        clock.now += wait + 1
        limiter.cleanup()
        for ip in IPS:
            assert limiter.allow(ip) is allowed, f"{index}: {text}: {ip}"


def test_cleanup_keeps_fresh_entries(clock, limiter):
    assert limiter.allow("10.0.0.1") is True
    clock.now += SECOND_NS // 2
    assert limiter.cleanup() is False


def test_cleanup_drops_idle_entries(clock, limiter):
    assert limiter.allow("10.0.0.1") is True
    clock.now += SECOND_NS + 1
    assert limiter.cleanup() is True


def test_cleanup_on_empty_table(limiter):
    assert limiter.cleanup() is True


def test_invalid_address_raises(limiter):
    with pytest.raises(ValueError):
        limiter.allow("not-an-address")