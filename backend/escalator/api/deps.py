import threading
import time
from fastapi import Depends, Request
from typing import Callable, Dict, Tuple

from escalator.core.config import settings
from escalator.database import get_db
from escalator.services.filters import FilterConfigStore, FilteredDatasetProvider
from escalator.services.filter_translator import FilterTranslator, filter_translator
from escalator.services.mailer import Mailer, mailer
from escalator.exceptions.record_exceptions import RateLimitExceededException

filter_store = FilterConfigStore()
dataset_provider = FilteredDatasetProvider(store=filter_store)


def get_filter_store() -> FilterConfigStore:
    return filter_store


def get_dataset_provider() -> FilteredDatasetProvider:
    return dataset_provider


def get_mailer() -> Mailer:
    return mailer


def get_translator() -> FilterTranslator:
    return filter_translator


class RateLimiter:
    """Fixed one-minute window per client key, kept in memory."""

    def __init__(self, limit_per_minute: int, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.limit = limit_per_minute
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            count, reset_at = self._windows.get(key, (0, 0.0))

            if now > reset_at:
                self._windows[key] = (1, now + self.window_seconds)
                return True

            if count >= self.limit:
                return False

            self._windows[key] = (count + 1, reset_at)
            return True

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


mail_rate_limiter = RateLimiter(settings.RATE_LIMIT_PER_MIN)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")


def get_mail_rate_limiter() -> RateLimiter:
    return mail_rate_limiter


def enforce_mail_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_mail_rate_limiter)
) -> None:

    if not limiter.allow(client_ip(request)):
        raise RateLimitExceededException()


__all__ = [
    "get_db",
    "get_filter_store",
    "get_dataset_provider",
    "get_mailer",
    "get_translator",
    "get_mail_rate_limiter",
    "enforce_mail_rate_limit",
    "RateLimiter",
]
