# Path: jdk_provisioner/engine/retry_manager.py
"""
Retry Manager

Bounded exponential backoff for whole pipeline invocations.

Components never retry on their own. This manager is applied by the
orchestration layer (the CLI, or an embedding caller) around ensure(),
and only for failures flagged transient: CatalogUnreachable,
DownloadFailed and DownloadTimedOut. ChecksumMismatch and
VersionNotOffered are raised on the first occurrence.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from jdk_provisioner.core.config_loader import ConfigLoader
from jdk_provisioner.core.errors import ProvisioningError
from jdk_provisioner.core.logger import get_logger
from jdk_provisioner.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY,
    DEFAULT_MAX_RETRY_DELAY,
    LOG_PROCESS,
)

logger = get_logger(__name__, 'engine')


def is_retryable_error(error: BaseException) -> bool:
    """True for provisioning failures that may succeed on a fresh attempt."""
    return isinstance(error, ProvisioningError) and error.transient


class RetryManager:
    """
    Manages retry logic with exponential backoff.

    Formula: delay = min(base_delay * 2^attempt, max_delay)

    Example:
        manager = RetryManager(max_retries=3, base_delay=1.0)
        result = await manager.retry_async(pipeline.ensure, 21)
    """

    def __init__(
        self,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        config: Optional[ConfigLoader] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize retry manager.

        Args:
            max_retries: Retries after the first attempt (from config if None)
            base_delay: Initial retry delay in seconds (from config if None)
            max_delay: Maximum retry delay cap (from config if None)
            config: Optional ConfigLoader instance
            sleep: Awaitable sleep used between attempts
        """
        self.config = config if config else ConfigLoader()

        self.max_retries = max_retries if max_retries is not None else \
            self.config.get('retry_attempts', DEFAULT_RETRY_ATTEMPTS)

        self.base_delay = base_delay if base_delay is not None else \
            self.config.get('retry_delay', DEFAULT_RETRY_DELAY)

        self.max_delay = max_delay if max_delay is not None else \
            self.config.get('max_retry_delay', DEFAULT_MAX_RETRY_DELAY)

        self.sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate retry delay with exponential backoff.

        Args:
            attempt: Retry number (0-based)
        """
        delay = self.base_delay * (2 ** attempt)
        return min(delay, self.max_delay)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.log(
            logging.WARNING,
            f"{LOG_PROCESS} Attempt {retry_state.attempt_number} failed: {error}. "
            f"Retrying in {delay:.1f}s..."
        )

    async def retry_async(
        self,
        func: Callable[..., Awaitable[Any]],
        *args,
        **kwargs
    ) -> Any:
        """
        Execute an async callable, retrying transient provisioning failures.

        Returns:
            Result of the first successful attempt

        Raises:
            The last error once retries are exhausted, or the first
            non-transient error
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            retry=retry_if_exception(is_retryable_error),
            before_sleep=self._log_retry,
            sleep=self.sleep,
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                result = await func(*args, **kwargs)
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        f"{LOG_PROCESS} Retry succeeded on attempt "
                        f"{attempt.retry_state.attempt_number}"
                    )

        return result


__all__ = ['RetryManager', 'is_retryable_error']
