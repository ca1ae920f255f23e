"""
Retry mechanism for resilient upstream calls.
"""

import asyncio
import random
import threading
from typing import Dict, Any, Optional, Callable, Awaitable, TypeVar

from shared.errors import RetryExhaustedError
from shared.logging import get_logger

T = TypeVar("T")

RetryHook = Callable[[int, float, BaseException], None]


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_attempts: int = 3,
                 base_delay: float = 1.0,
                 max_delay: float = 60.0,
                 exponential_base: float = 2.0,
                 jitter: bool = True,
                 backoff_strategy: str = "exponential"):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.backoff_strategy = backoff_strategy


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay after the given (1-based) failed attempt."""
    if config.backoff_strategy == "exponential":
        delay = config.base_delay * (config.exponential_base ** (attempt - 1))
    elif config.backoff_strategy == "linear":
        delay = config.base_delay * attempt
    elif config.backoff_strategy == "fixed":
        delay = config.base_delay
    else:
        delay = config.base_delay

    # Apply max delay cap
    delay = min(delay, config.max_delay)

    # Add jitter if enabled
    if config.jitter:
        jitter_amount = delay * 0.1  # 10% jitter
        delay += random.uniform(-jitter_amount, jitter_amount)

    return max(0.0, delay)


class RetryManager:
    """Collects retry statistics per named operation."""

    def __init__(self):
        self.stats: Dict[str, Dict[str, int]] = {}
        self._lock = threading.Lock()
        self.logger = get_logger("retry_manager")

    def _bump(self, name: str, field: str):
        with self._lock:
            entry = self.stats.setdefault(
                name, {"calls": 0, "retries": 0, "successes": 0, "failures": 0, "exhausted": 0}
            )
            entry[field] += 1

    def record_call(self, name: str):
        self._bump(name, "calls")

    def record_retry(self, name: str):
        self._bump(name, "retries")

    def record_success(self, name: str):
        self._bump(name, "successes")

    def record_failure(self, name: str, exhausted: bool = False):
        self._bump(name, "failures")
        if exhausted:
            self._bump(name, "exhausted")

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get retry statistics."""
        with self._lock:
            return {
                name: {
                    **stats,
                    "success_rate": stats["successes"] / max(1, stats["calls"])
                }
                for name, stats in self.stats.items()
            }

    def reset(self):
        with self._lock:
            self.stats.clear()


# Global retry manager
retry_manager = RetryManager()


async def execute_with_retry(operation: Callable[[], Awaitable[T]],
                             is_retryable: Callable[[BaseException], bool],
                             *,
                             config: Optional[RetryConfig] = None,
                             name: Optional[str] = None,
                             on_retry: Optional[RetryHook] = None,
                             manager: Optional[RetryManager] = None) -> T:
    """
    Run ``operation`` up to ``config.max_attempts`` times.

    Errors that ``is_retryable`` rejects are re-raised immediately. When every
    attempt fails with a retryable error, the last one is wrapped in
    ``RetryExhaustedError``. ``on_retry`` is called before each backoff sleep
    and must not influence the outcome.
    """
    config = config or RetryConfig()
    manager = manager or retry_manager
    name = name or getattr(operation, "__name__", "operation")
    logger = get_logger(f"retry.{name}")

    manager.record_call(name)
    last_exception: Optional[BaseException] = None

    for attempt in range(1, config.max_attempts + 1):
        try:
            result = await operation()
        except Exception as e:
            last_exception = e

            if not is_retryable(e):
                logger.info(
                    "Non-retryable error, giving up",
                    attempt=attempt,
                    operation=name,
                    error_type=type(e).__name__,
                    error=str(e)
                )
                manager.record_failure(name)
                raise

            if attempt == config.max_attempts:
                logger.error(
                    "All retry attempts exhausted",
                    attempt=attempt,
                    max_attempts=config.max_attempts,
                    operation=name,
                    error=str(e)
                )
                manager.record_failure(name, exhausted=True)
                raise RetryExhaustedError(name, e, config.max_attempts) from e

            delay = calculate_delay(attempt, config)

            logger.warning(
                "Retry attempt failed, waiting before next attempt",
                attempt=attempt,
                max_attempts=config.max_attempts,
                delay=round(delay, 3),
                operation=name,
                error=str(e)
            )
            manager.record_retry(name)
            if on_retry is not None:
                try:
                    on_retry(attempt, delay, e)
                except Exception as hook_error:  # pragma: no cover - hooks never change the outcome
                    logger.debug("Retry hook failed", error=str(hook_error))

            await asyncio.sleep(delay)
            continue

        if attempt > 1:
            logger.info("Retry succeeded", attempt=attempt, operation=name)
        manager.record_success(name)
        return result

    # Only reachable if the loop never ran, which RetryConfig forbids
    raise RetryExhaustedError(name, last_exception or RuntimeError("no attempts made"), config.max_attempts)
