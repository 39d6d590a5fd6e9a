"""Retry helpers with bounded exponential backoff."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _always(exc: Exception) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_seconds: float = 0.3
    retryable: Callable[[Exception], bool] = _always

    def delay_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt"""
        return self.base_delay_seconds * (2 ** (attempt - 1))


def with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, float, Exception], None]] = None,
) -> T:
    """Call ``func`` until it succeeds, the error is not retryable, or attempts run out."""
    attempt = 1
    while True:
        try:
            return func()
        except Exception as exc:
            if attempt >= policy.max_attempts or not policy.retryable(exc):
                raise
            delay = policy.delay_for(attempt)
            if on_retry:
                on_retry(attempt, delay, exc)
            else:
                logger.warning(f"⚠️ Attempt {attempt} failed ({exc}); retrying in {delay:.1f}s")
            sleep(delay)
            attempt += 1
