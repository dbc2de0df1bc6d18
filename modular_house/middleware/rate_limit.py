import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request

from modular_house.utils.client import get_client_ip

logger = logging.getLogger(__name__)

UNKNOWN_IP_KEY = "unknown"


class RateLimitExceeded(Exception):
    def __init__(self, limiter: "RateLimiter", retry_after_seconds: int):
        super().__init__(limiter.message)
        self.limiter = limiter
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict:
        return {
            "error": self.limiter.error,
            "message": self.limiter.message,
            "retryAfter": self.limiter.retry_after,
        }


class RateLimiter:
    """
    Fixed-window request counter keyed by client IP.

    Used as a FastAPI dependency. Every request counts towards the window,
    whatever its outcome. State is process local.
    """

    def __init__(self, name: str, limit: int, window_seconds: int, error: str, message: str,
                 retry_after: str, exempt_unknown_ip: bool = False,
                 clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.error = error
        self.message = message
        self.retry_after = retry_after
        self.exempt_unknown_ip = exempt_unknown_ip
        self.clock = clock

        self._lock = threading.Lock()
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_prune = clock()

    def hit(self, ip: Optional[str]) -> Optional[int]:
        """Count one request; returns seconds until reset when over the limit."""
        key = f"{self.name}:{ip or UNKNOWN_IP_KEY}"
        now = self.clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)

            # Drop expired windows at most once per window so idle IPs do not accumulate
            if now - self._last_prune >= self.window_seconds:
                self._windows = {
                    k: v for k, v in self._windows.items() if now - v[0] < self.window_seconds
                }
                self._last_prune = now

        if count > self.limit:
            return max(1, int(self.window_seconds - (now - started)))
        return None

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __call__(self, request: Request) -> None:
        ip = get_client_ip(request)
        if ip is None and self.exempt_unknown_ip:
            logger.warning(f"⚠️ Skipping {self.name} rate limit - no client IP for {request.method} {request.url.path}")
            return

        retry_after = self.hit(ip)
        if retry_after is not None:
            logger.warning(
                f"🚫 {self.name} rate limit exceeded: ip={ip or UNKNOWN_IP_KEY} "
                f"forwarded_for={request.headers.get('x-forwarded-for')} "
                f"{request.method} {request.url.path} ua={request.headers.get('user-agent')} "
                f"limit={self.limit}/{self.window_seconds}s"
            )
            raise RateLimitExceeded(self, retry_after)


def submission_rate_limiter(exempt_unknown_ip: bool = False, **kwargs) -> RateLimiter:
    return RateLimiter(
        name="submissions",
        limit=10,
        window_seconds=60 * 60,
        error="Too many submission requests",
        message="You have exceeded the maximum number of submissions allowed per hour. Please try again later.",
        retry_after="1 hour",
        exempt_unknown_ip=exempt_unknown_ip,
        **kwargs,
    )


def general_rate_limiter(exempt_unknown_ip: bool = False, **kwargs) -> RateLimiter:
    return RateLimiter(
        name="general",
        limit=100,
        window_seconds=15 * 60,
        error="Too many requests",
        message="Too many requests from this IP, please try again later.",
        retry_after="15 minutes",
        exempt_unknown_ip=exempt_unknown_ip,
        **kwargs,
    )


# === Dependencies reading the limiters built by the app factory ===
def limit_submissions(request: Request) -> None:
    request.app.state.submission_limiter(request)


def limit_general(request: Request) -> None:
    request.app.state.general_limiter(request)
