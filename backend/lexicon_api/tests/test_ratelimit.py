import pytest

from lexicon_api.errors import RateLimitError
from lexicon_api.ratelimit import InMemoryRateLimitStore, RateLimiter


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_limiter(clock, store=None, **kwargs):
    kwargs.setdefault("rng", lambda: 1.0)
    return RateLimiter(store, max_requests=3, window_seconds=60, clock=clock, **kwargs)


def test_requests_over_the_limit_are_rejected_with_retry_after():
    clock = Clock()
    limiter = make_limiter(clock)
    for expected in (1, 2, 3):
        assert limiter.check("10.0.0.1:/words").count == expected

    clock.now += 15
    with pytest.raises(RateLimitError) as excinfo:
        limiter.check("10.0.0.1:/words")
    assert excinfo.value.status_code == 429
    assert excinfo.value.extra["retryAfter"] == 45


def test_keys_are_counted_independently():
    limiter = make_limiter(Clock())
    for _ in range(3):
        limiter.check("a:/words")
    assert limiter.check("b:/words").count == 1
    assert limiter.check("a:/quiz/types").count == 1


def test_window_resets_after_expiry():
    clock = Clock()
    limiter = make_limiter(clock)
    for _ in range(3):
        limiter.check("k")
    clock.now += 61
    assert limiter.check("k").count == 1


def test_expired_windows_are_purged_opportunistically():
    clock = Clock()
    store = InMemoryRateLimitStore()
    limiter = make_limiter(clock, store, rng=lambda: 0.0)
    limiter.check("old")
    clock.now += 120
    limiter.check("new")
    assert len(store) == 1


def test_reset_clears_all_windows():
    store = InMemoryRateLimitStore()
    limiter = make_limiter(Clock(), store)
    limiter.check("k")
    limiter.reset()
    assert len(store) == 0


def test_explicit_zero_limit_is_not_replaced_by_the_default():
    limiter = RateLimiter(max_requests=0, window_seconds=60, clock=Clock(), rng=lambda: 1.0)
    assert limiter.max_requests == 0
    with pytest.raises(RateLimitError):
        limiter.check("k")
