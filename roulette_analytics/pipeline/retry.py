"""
Retry with exponential backoff for per-frame processing
"""

import logging
import threading
from typing import Callable, Optional, Tuple, Type, TypeVar

from ..config import Settings
from ..core import InvalidStateError, FrameProcessingError

T = TypeVar('T')

# Failures that no amount of waiting fixes
FATAL_ERRORS: Tuple[Type[BaseException], ...] = (MemoryError, InvalidStateError)


class RetryPolicy:
    """Retry transient failures with doubling, capped delays"""

    def __init__(self,
                 max_retries: int = 3,
                 initial_delay_ms: int = 100,
                 max_delay_ms: int = 5000):
        """
        Initialize retry policy

        Args:
            max_retries: Retries after the first attempt
            initial_delay_ms: Delay before the first retry
            max_delay_ms: Upper bound for any single delay
        """
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")

        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self.max_delay_ms = max_delay_ms
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'RetryPolicy':
        return cls(
            max_retries=settings.max_retries,
            initial_delay_ms=settings.retry_initial_delay_ms,
            max_delay_ms=settings.retry_max_delay_ms
        )

    def delay_ms(self, retry_index: int) -> int:
        """Backoff before retry number retry_index (0-based)"""
        return min(self.initial_delay_ms * (2 ** retry_index), self.max_delay_ms)

    @staticmethod
    def is_retryable(error: BaseException) -> bool:
        return not isinstance(error, FATAL_ERRORS)

    def run(self, operation: Callable[[], T], cancel_event: Optional[threading.Event] = None) -> T:
        """
        Run operation, retrying transient failures

        Args:
            operation: Zero-argument callable
            cancel_event: Set to abort a pending backoff wait

        Returns:
            The operation's result

        Raises:
            MemoryError, InvalidStateError: Immediately, without retry
            FrameProcessingError: When retries are exhausted
            InvalidStateError: When cancelled during backoff
        """
        waiter = cancel_event if cancel_event is not None else threading.Event()
        attempt = 0

        while True:
            try:
                return operation()
            except FATAL_ERRORS:
                raise
            except Exception as e:
                if attempt >= self.max_retries:
                    raise FrameProcessingError(
                        f"Frame processing failed after {attempt + 1} attempts: {e}",
                        attempts=attempt + 1
                    ) from e

                delay = self.delay_ms(attempt)
                self.logger.warning(f"Retrying frame processing in {delay}ms "
                                    f"(attempt {attempt + 1}/{self.max_retries}): {e}")
                if waiter.wait(delay / 1000.0):
                    raise InvalidStateError("Cancelled during retry backoff") from e
                attempt += 1
