"""
Per-client request throttling for the auth endpoints.

Each ``RatePolicy`` names a scope with its own fixed window. Counters live in
process memory, keyed by scope and client address.
"""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Dict

from fastapi import HTTPException, Request


@dataclass(frozen=True)
class RatePolicy:
    scope: str
    limit: int
    window_seconds: int


LOGIN_POLICY = RatePolicy("auth:login", limit=5, window_seconds=60)
SIGNUP_POLICY = RatePolicy("auth:signup", limit=5, window_seconds=300)


@dataclass
class _Window:
    hits: int
    closes_at: float


class RateLimiter:
    """Fixed-window counters; ``hit`` returns the seconds to wait, 0 when allowed."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, policy: RatePolicy, client: str) -> float:
        key = f"{policy.scope}:{client}"
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.closes_at:
                window = self._windows[key] = _Window(0, now + policy.window_seconds)
            window.hits += 1
            if window.hits > policy.limit:
                return window.closes_at - now
        return 0.0

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()


_limiter = RateLimiter()


def client_address(request: Request) -> str:
    forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return request.client.host if request.client and request.client.host else "unknown"


def enforce(request: Request, policy: RatePolicy) -> None:
    """Raise 429 with ``Retry-After`` once the client exhausts ``policy``."""
    wait = _limiter.hit(policy, client_address(request))
    if wait:
        raise HTTPException(
            429,
            "Too many requests. Please try again shortly.",
            headers={"Retry-After": str(max(1, math.ceil(wait)))},
        )


def reset_rate_limits() -> None:
    _limiter.clear()
