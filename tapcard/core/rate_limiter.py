"""
Sliding-window limits for endpoints that fan out to the remote profile API.

Signed-in callers are counted per credential (hashed, never stored raw);
anonymous callers per client IP.
"""
from __future__ import annotations

import hashlib
import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import HTTPException
from starlette.requests import HTTPConnection

from .config import Settings

USERNAME_CHECK_SCOPE = "username-check"


class SlidingWindowLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: float) -> float:
        """
        Record one call for ``key``. Returns 0 when it is allowed, otherwise
        the seconds until the oldest call leaves the window (nothing recorded).
        """
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                return window_seconds - (now - hits[0])
            hits.append(now)
            return 0.0

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


_limiter = SlidingWindowLimiter()


def client_key(conn: HTTPConnection, credential: Optional[str] = None) -> str:
    if credential:
        return "user:" + hashlib.sha256(credential.encode("utf-8")).hexdigest()[:24]
    forwarded = conn.headers.get("x-forwarded-for")
    if forwarded:
        return "ip:" + forwarded.split(",")[0].strip()
    if conn.client and conn.client.host:
        return "ip:" + conn.client.host
    return "ip:unknown"


def limit_username_checks(conn: HTTPConnection, credential: Optional[str], settings: Settings) -> None:
    key = f"{USERNAME_CHECK_SCOPE}:{client_key(conn, credential)}"
    retry_after = _limiter.hit(key, settings.username_check_limit, settings.username_check_window_seconds)
    if retry_after > 0:
        raise HTTPException(
            429,
            "Too many username checks. Try again shortly.",
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
        )


def reset_rate_limits() -> None:
    _limiter.reset()
