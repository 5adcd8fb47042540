"""Fixed-delay retry policy for feed requests."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Type

import requests

from .exceptions import CountdownError

logger = logging.getLogger(__name__)


class Status(Enum):
    SUCCESS = "success"
    TRANSIENT = "transient"  # Every attempt failed with a retryable error
    FATAL = "fatal"  # An attempt failed with an error retrying cannot fix


@dataclass
class Outcome:
    """Result of running an operation under the retry policy."""
    status: Status
    value: Any = None
    error: Optional[BaseException] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS


def call_with_retry(
    operation: Callable[[], Any],
    attempts: int = 3,
    delay: float = 5.0,
    transient: Tuple[Type[BaseException], ...] = (requests.RequestException,),
    sleep: Callable[[float], None] = time.sleep,
) -> Outcome:
    """
    Run ``operation`` up to ``attempts`` times, sleeping ``delay`` seconds between tries.

    Exceptions listed in ``transient`` are retried. A CountdownError ends the
    loop immediately with a FATAL outcome. Anything else propagates.

    Args:
        operation: Zero-argument callable performing one attempt.
        attempts: Total number of attempts, including the first.
        delay: Seconds to wait between attempts.
        transient: Exception types that count as transient failures.
        sleep: Sleep function, injectable for tests.

    Returns:
        Outcome describing the value or the last error, and attempts used.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: Optional[BaseException] = None
    for attempt in range(1, attempts + 1):
        try:
            value = operation()
        except CountdownError as e:
            return Outcome(Status.FATAL, error=e, attempts=attempt)
        except transient as e:
            last_error = e
            logger.warning(f"Attempt {attempt}/{attempts} failed: {type(e).__name__}: {e}")
            if attempt < attempts:
                sleep(delay)
            continue
        return Outcome(Status.SUCCESS, value=value, attempts=attempt)

    return Outcome(Status.TRANSIENT, error=last_error, attempts=attempts)
