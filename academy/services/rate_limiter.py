"""Token-bucket rate limiting for the write endpoints students hammer.

Each key owns a bucket of ``capacity`` tokens refilled at ``refill_rate``
tokens per second; a request spends one token.  Bursts up to capacity are
allowed, the long-run rate is the refill rate.

Two backends share the ``RateLimiter`` protocol: a per-process dict for
dev and tests, and a Redis Lua script when REDIS_URL is configured so
every API instance draws from the same bucket.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    retry_after: float  # seconds; 0 when allowed


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    capacity: int = 60
    refill_rate: float = 1.0  # tokens per second

    @property
    def idle_ttl_seconds(self) -> int:
        """How long an untouched bucket is worth keeping (full again by then)."""
        return math.ceil(self.capacity / self.refill_rate) + 60


# Code redemption is a guessing surface: 5 tries, then one every 12 seconds.
REDEEM_LIMIT = RateLimitConfig(capacity=5, refill_rate=1 / 12)
# Submissions are rare per student; allow a double click and some retries.
SUBMIT_LIMIT = RateLimitConfig(capacity=10, refill_rate=0.2)


@runtime_checkable
class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...
    async def reset(self, key: str) -> None: ...


class InMemoryRateLimiter:
    """Single-process buckets; each worker counts separately."""

    def __init__(self) -> None:
        self._buckets: dict[str, tuple[float, float]] = {}  # key -> (tokens, stamp)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()
        tokens, stamp = self._buckets.get(key, (float(config.capacity), now))
        tokens = min(config.capacity, tokens + (now - stamp) * config.refill_rate)

        if tokens < 1:
            self._buckets[key] = (tokens, now)
            return RateLimitResult(
                allowed=False,
                remaining=0,
                limit=config.capacity,
                retry_after=(1 - tokens) / config.refill_rate,
            )

        tokens -= 1
        self._buckets[key] = (tokens, now)
        return RateLimitResult(
            allowed=True,
            remaining=int(tokens),
            limit=config.capacity,
            retry_after=0,
        )

    async def reset(self, key: str) -> None:
        self._buckets.pop(key, None)

    def clear(self) -> None:
        self._buckets.clear()


class RedisRateLimiter:
    """Buckets stored as Redis hashes, updated atomically by a Lua script."""

    # KEYS[1] bucket key; ARGV capacity, refill_rate, now (s), ttl (s)
    # returns {allowed, remaining, retry_after_ms}
    _SCRIPT = """
    local capacity = tonumber(ARGV[1])
    local rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = tonumber(ARGV[4])

    local state = redis.call('HMGET', KEYS[1], 'tokens', 'stamp')
    local tokens = tonumber(state[1]) or capacity
    local stamp = tonumber(state[2]) or now
    tokens = math.min(capacity, tokens + (now - stamp) * rate)

    local allowed = 0
    local retry_ms = 0
    if tokens >= 1 then
        tokens = tokens - 1
        allowed = 1
    else
        retry_ms = math.ceil((1 - tokens) / rate * 1000)
    end

    redis.call('HSET', KEYS[1], 'tokens', tokens, 'stamp', now)
    redis.call('EXPIRE', KEYS[1], ttl)
    return {allowed, math.floor(tokens), retry_ms}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = redis_client.register_script(self._SCRIPT)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_ms = await self._script(
            keys=[f"ratelimit:{key}"],
            args=[
                config.capacity,
                config.refill_rate,
                time.time(),
                config.idle_ttl_seconds,
            ],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=max(int(remaining), 0),
            limit=config.capacity,
            retry_after=retry_ms / 1000,
        )

    async def reset(self, key: str) -> None:
        await self._redis.delete(f"ratelimit:{key}")
