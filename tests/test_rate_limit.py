from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from studio_gateway.rate_limit import (
    ENDPOINT_POLICIES,
    FixedWindowRateLimiter,
    RateLimitPolicy,
    check_rate_limit,
)
from studio_gateway.store import InMemoryRateLimitStore


class ManualClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def now_ms(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def limiter(clock: ManualClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(InMemoryRateLimitStore(), clock)


def test_admits_up_to_limit(limiter):
    results = [limiter.check("k", 5, 60_000) for _ in range(5)]

    assert all(result.allowed for result in results)
    assert all(result.retry_after is None for result in results)


def test_rejects_once_limit_reached(limiter):
    for _ in range(5):
        limiter.check("k", 5, 60_000)

    result = limiter.check("k", 5, 60_000)

    assert not result.allowed
    assert result.retry_after == 60


def test_window_expiry_resets_saturated_key(limiter, clock):
    for _ in range(3):
        limiter.check("k", 3, 60_000)
    assert not limiter.check("k", 3, 60_000).allowed

    clock.advance(60_000)

    assert limiter.check("k", 3, 60_000).allowed
    assert limiter.store.get("k").count == 1


def test_window_still_open_just_before_expiry(limiter, clock):
    limiter.check("k", 1, 60_000)
    clock.advance(59_999)

    result = limiter.check("k", 1, 60_000)

    assert not result.allowed
    assert result.retry_after == 1


def test_keys_are_isolated(limiter):
    for _ in range(2):
        limiter.check("chat:1.1.1.1", 2, 60_000)
    assert not limiter.check("chat:1.1.1.1", 2, 60_000).allowed

    assert limiter.check("chat:2.2.2.2", 2, 60_000).allowed


def test_rejection_does_not_increment_count(limiter, clock):
    for _ in range(2):
        limiter.check("k", 2, 60_000)

    retries = []
    for _ in range(4):
        retries.append(limiter.check("k", 2, 60_000).retry_after)
        clock.advance(10_000)

    assert limiter.store.get("k").count == 2
    assert retries == [60, 50, 40, 30]


def test_retry_after_stays_within_window(limiter, clock):
    limiter.check("k", 1, 5_500)
    for _ in range(11):
        result = limiter.check("k", 1, 5_500)
        assert not result.allowed
        assert 0 < result.retry_after <= 6
        clock.advance(500)


def test_edit_scenario_with_mocked_clock(limiter, clock):
    for _ in range(10):
        assert limiter.check("edit:1.2.3.4", 10, 60_000).allowed

    rejected = limiter.check("edit:1.2.3.4", 10, 60_000)
    assert not rejected.allowed
    assert 1 <= rejected.retry_after <= 60

    clock.advance(60_000)
    assert limiter.check("edit:1.2.3.4", 10, 60_000).allowed


def test_distinct_chat_clients_each_get_full_quota(limiter):
    first = [limiter.check("chat:1.1.1.1", 30, 60_000).allowed for _ in range(30)]
    second = [limiter.check("chat:2.2.2.2", 30, 60_000).allowed for _ in range(30)]

    assert all(first) and all(second)
    assert not limiter.check("chat:1.1.1.1", 30, 60_000).allowed
    assert not limiter.check("chat:2.2.2.2", 30, 60_000).allowed


def test_window_boundary_allows_double_burst(limiter, clock):
    limiter.check("k", 3, 60_000)
    clock.advance(59_000)
    late = [limiter.check("k", 3, 60_000).allowed for _ in range(2)]
    clock.advance(1_000)
    early = [limiter.check("k", 3, 60_000).allowed for _ in range(3)]

    assert late == [True, True]
    assert early == [True, True, True]


def test_check_policy_namespaces_key(limiter):
    policy = RateLimitPolicy(prefix="remix", limit=1)

    assert limiter.check_policy(policy, "9.9.9.9").allowed
    assert limiter.store.get("remix:9.9.9.9").count == 1
    assert not limiter.check_policy(policy, "9.9.9.9").allowed


def test_policy_rejects_non_positive_values():
    with pytest.raises(ValueError):
        RateLimitPolicy(prefix="x", limit=0)
    with pytest.raises(ValueError):
        RateLimitPolicy(prefix="x", limit=1, window_ms=0)


def test_endpoint_policies_match_published_quotas():
    quotas = {name: (p.prefix, p.limit, p.window_ms) for name, p in ENDPOINT_POLICIES.items()}

    assert quotas == {
        "chat": ("chat", 30, 60_000),
        "edit-image": ("edit", 10, 60_000),
        "generate-image": ("generate", 10, 60_000),
        "enhance-prompt": ("enhance", 20, 60_000),
        "image-to-prompt": ("imgprompt", 15, 60_000),
        "remix-images": ("remix", 10, 60_000),
    }


def test_concurrent_checks_never_exceed_limit():
    limiter = FixedWindowRateLimiter()

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda _: limiter.check("hot", 25, 60_000), range(200)))

    assert sum(result.allowed for result in results) == 25


def test_lru_eviction_forgets_oldest_key(clock):
    limiter = FixedWindowRateLimiter(InMemoryRateLimitStore(max_keys=2), clock)
    limiter.check("a", 1, 60_000)
    limiter.check("b", 1, 60_000)
    limiter.check("a", 1, 60_000)
    limiter.check("c", 1, 60_000)

    assert "b" not in limiter.store
    assert "a" in limiter.store
    assert limiter.check("b", 1, 60_000).allowed


def test_module_level_check_uses_shared_state():
    key = "test-module-level:203.0.113.7"

    assert check_rate_limit(key, 1, 60_000).allowed
    assert not check_rate_limit(key, 1, 60_000).allowed
