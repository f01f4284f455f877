"""
Retry Logic with Exponential Backoff

Retries a single request attempt a bounded number of times. Error statuses
back off exponentially; bare network failures and unexpected exceptions are
recorded and retried without backoff.

No backoff sleep follows the final attempt: RetryExhausted is raised as
soon as the last attempt fails.
"""

import time
import logging
from typing import Optional, Callable, Any
from dataclasses import dataclass

from .transport import HttpStatusError, TransportError

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 5
    base_delay: float = 1.0
    exponential_base: float = 2.0


class RetryExhausted(Exception):
    """Raised when all retry attempts are exhausted"""
    def __init__(self, last_exception: Optional[Exception], attempts: int):
        self.last_exception = last_exception
        self.attempts = attempts
        super().__init__(f"Retry exhausted after {attempts} attempts: {last_exception}")


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    exponential_base: float = 2.0,
) -> float:
    """Delay after the given 1-based attempt: base_delay * exponential_base ** attempt"""
    return base_delay * (exponential_base ** attempt)


class RetryHandler:
    """
    Handles retry logic for transport calls.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def get_delay(self, attempt: int) -> float:
        """Get delay for given attempt number"""
        return calculate_backoff(
            attempt=attempt,
            base_delay=self.config.base_delay,
            exponential_base=self.config.exponential_base,
        )

    def execute(
        self,
        func: Callable,
        *args,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None,
        **kwargs
    ) -> Any:
        """
        Execute function with retry logic.

        Args:
            func: Function performing one attempt
            on_retry: Callback called after each failed attempt (attempt, exception, delay)

        Raises:
            RetryExhausted: every attempt failed
        """
        last_exception = None
        max_attempts = self.config.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                return func(*args, **kwargs)

            except HttpStatusError as e:
                last_exception = e
                delay = self.get_delay(attempt) if attempt < max_attempts else 0.0

                if on_retry:
                    on_retry(attempt, e, delay)

                if attempt < max_attempts:
                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} failed: {e}. "
                        f"Retrying in {delay:.2f}s"
                    )
                    self._sleep(delay)
                else:
                    logger.warning(f"Attempt {attempt}/{max_attempts} failed: {e}")

            except TransportError as e:
                last_exception = e
                logger.warning(f"Attempt {attempt}/{max_attempts} failed without response: {e}")

                if on_retry:
                    on_retry(attempt, e, 0.0)

            except Exception as e:
                last_exception = e
                logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed with unexpected "
                    f"{type(e).__name__}: {e}"
                )

                if on_retry:
                    on_retry(attempt, e, 0.0)

        raise RetryExhausted(last_exception, max_attempts)
