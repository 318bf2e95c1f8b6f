"""
Token-bucket rate limiter (in-proc).

Scopes:
- per IP
- per endpoint (path or logical key)

Buckets live in an ExpiringMap: an idle bucket expires once it would have
refilled to capacity, so forgetting it changes nothing. Expired buckets are
swept from inside allow(), at most once per sweep_interval.

Usage:
    rl = RateLimiter(capacity=30, refill_per_sec=0.5)  # 30 tokens, 1 token every 2s
    if not rl.allow(key=f"ip:{ip}:/api/generate-offer"):
        abort(429)
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Callable, Optional

from service.expiring_map import ExpiringMap


@dataclass
class _Bucket:
    tokens: float
    last: float


@dataclass
class RateLimiter:
    capacity: int = 30
    refill_per_sec: float = 0.5  # tokens/second
    sweep_interval: float = 60.0
    clock: Callable[[], float] = time.monotonic
    _buckets: Optional[ExpiringMap] = None
    _last_sweep: float = 0.0

    def __post_init__(self):
        if self._buckets is None:
            self._buckets = ExpiringMap(clock=self.clock)
        self._last_sweep = self.clock()

    @classmethod
    def per_minute(cls, per_min: int, burst: int = 0) -> "RateLimiter":
        return cls(capacity=per_min + burst, refill_per_sec=per_min / 60.0)

    @property
    def idle_ttl(self) -> float:
        # time for an empty bucket to refill completely
        if self.refill_per_sec <= 0:
            return 0.0
        return self.capacity / self.refill_per_sec

    def allow(self, key: str, cost: float = 1.0) -> bool:
        """
        Returns True if the action is allowed and deducts `cost` tokens.
        """
        now = self.clock()
        with self._buckets.lock:
            self._maybe_sweep(now)
            b = self._buckets.get(key)
            if b is None:
                b = _Bucket(tokens=self.capacity, last=now)

            # refill
            elapsed = max(0.0, now - b.last)
            b.tokens = min(self.capacity, b.tokens + elapsed * self.refill_per_sec)
            b.last = now

            allowed = b.tokens >= cost
            if allowed:
                b.tokens -= cost
            self._buckets.set(key, b, ttl=self.idle_ttl or None)
            return allowed

    def remaining(self, key: str) -> float:
        b = self._buckets.get(key)
        if not b:
            return float(self.capacity)
        # approximate current without mutating
        elapsed = max(0.0, self.clock() - b.last)
        tokens = min(self.capacity, b.tokens + elapsed * self.refill_per_sec)
        return max(0.0, tokens)

    def reset(self, key: str) -> None:
        self._buckets.pop(key)

    def clear(self) -> None:
        self._buckets.clear()

    def tracked(self) -> int:
        return len(self._buckets)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep >= self.sweep_interval:
            self._buckets.sweep()
            self._last_sweep = now
