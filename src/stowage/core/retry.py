# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/core/retry.py

"""
Backoff for the SSH side of stowage.

Two things get retried: opening the SSH session (SSH_CONNECT_RETRY) and
copying one file over SFTP (FILE_TRANSFER_RETRY). A policy names the
exception types it retries; an exception with ``retry_possible = False``
(authentication failures) stops the loop even if its type is listed. A
``backoff_seconds`` hint on the exception replaces the computed delay.
"""

import random
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type

from loguru import logger

from stowage.system.exceptions import (
    ConnectionTimeoutError, NetworkError, TransferError
)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True
    retry_on: Tuple[Type[BaseException], ...] = (NetworkError, ConnectionTimeoutError, TransferError)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based)."""
        if attempt <= 0:
            return 0.0
        delay = min(self.base_delay * self.exponential_base ** (attempt - 1), self.max_delay)
        if self.jitter:
            delay += random.uniform(-0.1 * delay, 0.1 * delay)
        return max(0.0, delay)

    def should_retry(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on) and getattr(error, "retry_possible", True)


# Hosts that are rebooting or behind a flaky VPN usually answer within a minute
SSH_CONNECT_RETRY = RetryPolicy(
    max_attempts=5,
    base_delay=1.0,
    max_delay=30.0,
    retry_on=(NetworkError,),
)

# One file at a time, so a stalled put is worth waiting for
FILE_TRANSFER_RETRY = RetryPolicy(
    max_attempts=4,
    base_delay=2.0,
    max_delay=120.0,
    retry_on=(TransferError,),
)


def retry_call(policy: RetryPolicy, description: str, func: Callable, *args, **kwargs) -> Any:
    """Call func(*args, **kwargs), retrying under policy.

    Returns whatever func returns. Raises the last error once attempts run
    out, or the first error the policy won't retry.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            if not policy.should_retry(e):
                raise
            if attempt == policy.max_attempts:
                logger.error(f"{description} failed after {attempt} attempts: {e}")
                raise
            delay = getattr(e, "backoff_seconds", None) or policy.delay_for(attempt)
            logger.warning(f"{description} failed (attempt {attempt}/{policy.max_attempts}): {e}; "
                           f"retrying in {delay:.1f}s")
            if delay > 0:
                time.sleep(delay)
        else:
            if attempt > 1:
                logger.info(f"{description} succeeded on attempt {attempt}")
            return result


def retrying(policy: RetryPolicy, description: Optional[str] = None) -> Callable:
    """Decorator form of retry_call. description defaults to the function name."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            return retry_call(policy, description or func.__name__, func, *args, **kwargs)
        return wrapper
    return decorator
