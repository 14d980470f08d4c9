"""
Unit tests for ResponseCache and RateLimiter.

Both are driven by a controllable clock.
"""

from src.domain.cache import RateLimiter, ResponseCache


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestResponseCache:
    """Tests for keyed expiry."""

    def test_get_missing(self) -> None:
        """Unknown keys return None."""
        assert ResponseCache().get("nope") is None

    def test_set_returns_value(self) -> None:
        """set() returns the stored value for chaining."""
        assert ResponseCache().set("k", {"a": 1}, 10) == {"a": 1}

    def test_entry_expires(self) -> None:
        """Entries are served until their TTL elapses."""
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("gas", 42, ttl_seconds=30)

        clock.advance(29)
        assert cache.get("gas") == 42
        clock.advance(1)
        assert cache.get("gas") is None

    def test_invalidate_pattern(self) -> None:
        """Only keys matching the pattern are removed."""
        cache = ResponseCache()
        cache.set("metadata:alice", 1, 60)
        cache.set("metadata:bob", 2, 60)
        cache.set("gas-estimate", 3, 60)

        assert cache.invalidate("^metadata:") == 2
        assert cache.get("metadata:alice") is None
        assert cache.get("gas-estimate") == 3

    def test_invalidate_all(self) -> None:
        """Without a pattern everything is removed."""
        cache = ResponseCache()
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)
        assert cache.invalidate() == 2
        assert cache.get("a") is None


    def test_expired_entries_are_evicted(self) -> None:
        """Entries that are never read again are dropped once they expire."""
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        for n in range(1_000):
            cache.set(f"metadata:{n}", n, ttl_seconds=10)

        clock.advance(10)
        cache.set("gas-estimate", 1, ttl_seconds=10)
        assert len(cache) == 1

    def test_size_is_bounded(self) -> None:
        """The least recently used entry is evicted at maxsize."""
        cache = ResponseCache(clock=FakeClock(), maxsize=2)
        cache.set("a", 1, 30)
        cache.set("b", 2, 60)
        cache.set("c", 3, 60)

        assert len(cache) == 2
        assert cache.get("a") is None
        assert cache.get("c") == 3

    def test_invalidate_ignores_expired(self) -> None:
        """Only live entries are counted as removed."""
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("metadata:old", 1, 5)
        cache.set("metadata:new", 2, 60)

        clock.advance(5)
        assert cache.invalidate("^metadata:") == 1


class TestRateLimiter:
    """Tests for the fixed-window limiter."""

    def test_allows_up_to_limit(self) -> None:
        """The first limit requests pass, the next is denied."""
        limiter = RateLimiter(limit=3, window_seconds=60, clock=FakeClock())
        decisions = [limiter.check("ip") for _ in range(4)]

        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert [d.remaining for d in decisions] == [2, 1, 0, 0]

    def test_window_resets(self) -> None:
        """A new window restores the full allowance."""
        clock = FakeClock()
        limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
        assert limiter.check("ip").allowed is True
        assert limiter.check("ip").allowed is False

        clock.advance(60)
        assert limiter.check("ip").allowed is True

    def test_keys_are_independent(self) -> None:
        """Each key has its own window."""
        limiter = RateLimiter(limit=1, window_seconds=60, clock=FakeClock())
        assert limiter.check("a").allowed is True
        assert limiter.check("b").allowed is True
        assert limiter.check("a").allowed is False

    def test_expired_windows_do_not_accumulate(self) -> None:
        """Windows of clients that went quiet are evicted."""
        clock = FakeClock()
        limiter = RateLimiter(limit=5, window_seconds=1, clock=clock)

        for second in range(100):
            for n in range(100):
                limiter.check(f"client-{second}-{n}")
            clock.advance(1)

        assert len(limiter) == 0

    def test_key_count_is_bounded(self) -> None:
        """Live windows never exceed maxsize."""
        limiter = RateLimiter(limit=5, window_seconds=60, clock=FakeClock(), maxsize=100)
        for n in range(1_000):
            limiter.check(f"client-{n}")

        assert len(limiter) == 100
