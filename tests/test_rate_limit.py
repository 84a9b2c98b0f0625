"""
Tests for the sliding-window rate limiter.
"""

from rate_limit import InMemoryRateLimitStore, SlidingWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_limiter(clock):
    return SlidingWindowRateLimiter(InMemoryRateLimitStore(), max_requests=10, window_seconds=60, clock=clock)


def test_eleventh_request_in_window_is_rejected():
    clock = FakeClock()
    limiter = make_limiter(clock)

    results = []
    for _ in range(11):
        results.append(limiter.is_limited("user-1"))
        clock.now += 1

    assert results[:10] == [False] * 10
    assert results[10] is True


def test_request_after_window_elapses_is_accepted():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for _ in range(10):
        limiter.is_limited("user-1")
    assert limiter.is_limited("user-1") is True

    clock.now += 60

    assert limiter.is_limited("user-1") is False


def test_window_slides_rather_than_resets():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for i in range(10):
        clock.now = i * 5  # 0, 5, ... 45
        limiter.is_limited("user-1")

    clock.now = 61  # only the request at t=0 has left the window
    assert limiter.is_limited("user-1") is False
    assert limiter.is_limited("user-1") is True


def test_rejected_requests_do_not_extend_the_window():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for _ in range(10):
        limiter.is_limited("user-1")
    for _ in range(5):
        clock.now += 10
        assert limiter.is_limited("user-1") is True

    clock.now = 60
    assert limiter.is_limited("user-1") is False


def test_callers_are_independent():
    clock = FakeClock()
    limiter = make_limiter(clock)
    for _ in range(10):
        limiter.is_limited("user-1")

    assert limiter.is_limited("user-1") is True
    assert limiter.is_limited("user-2") is False


def test_store_prunes_expired_entries():
    clock = FakeClock()
    store = InMemoryRateLimitStore()
    limiter = SlidingWindowRateLimiter(store, max_requests=10, window_seconds=60, clock=clock)
    limiter.is_limited("user-1")
    clock.now = 100

    limiter.is_limited("user-1")

    assert store.get("user-1") == [100]
