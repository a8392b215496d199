import pytest

from embedsub.rate_limiter import FixedDelayRateLimiter, NoDelayRateLimiter


class _Clock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_first_request_is_not_delayed():
    clock = _Clock()
    FixedDelayRateLimiter(1.0, sleep=clock.sleep).wait()
    assert clock.sleeps == []


def test_every_later_request_waits_the_full_delay():
    clock = _Clock()
    limiter = FixedDelayRateLimiter(1.0, sleep=clock.sleep)

    limiter.wait()
    clock.now += 0.25
    limiter.wait()

    assert clock.sleeps == [1.0]


def test_slow_requests_still_get_the_delay():
    clock = _Clock()
    limiter = FixedDelayRateLimiter(1.0, sleep=clock.sleep)

    for _ in range(3):
        limiter.wait()
        clock.now += 5.0  # the request itself

    assert clock.sleeps == [1.0, 1.0]


def test_zero_delay_never_sleeps():
    clock = _Clock()
    limiter = FixedDelayRateLimiter(0, sleep=clock.sleep)
    limiter.wait()
    limiter.wait()
    assert clock.sleeps == []


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        FixedDelayRateLimiter(-1)


def test_no_delay_limiter_never_sleeps():
    assert NoDelayRateLimiter().wait() is None
