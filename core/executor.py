# core/executor.py

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMITED = 429
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 2000.0


def error_status(error: BaseException) -> Optional[int]:
    """Reads an HTTP-style status from an error (google-genai uses `code`)."""
    for attr in ("code", "status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def is_retryable(error: BaseException) -> bool:
    """Rate limiting and server faults are transient; anything else is permanent."""
    status = error_status(error)
    return status is not None and (status == RATE_LIMITED or status >= 500)


def retry_delay_ms(remaining: int, base_delay_ms: float = DEFAULT_BASE_DELAY_MS) -> float:
    """
    Wait before the next attempt. Divides by the retries still remaining, so the
    wait grows as retries are used up: 2000/3, 2000/2, 2000/1 with the defaults.
    """
    return base_delay_ms / remaining


async def execute(
    call: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
) -> T:
    """
    Runs `call` until it succeeds, a permanent failure occurs, or the retries run out.
    At most `max_retries + 1` attempts. The last error is re-raised unchanged.
    """
    remaining = max_retries
    while True:
        try:
            return await call()
        except Exception as e:
            if remaining <= 0 or not is_retryable(e):
                raise
            delay = retry_delay_ms(remaining, base_delay_ms)
            logger.warning(
                f"---EXECUTOR: Transient failure (status {error_status(e)}), "
                f"retrying in {delay:.0f}ms ({remaining} left)---"
            )
            await asyncio.sleep(delay / 1000)
            remaining -= 1
