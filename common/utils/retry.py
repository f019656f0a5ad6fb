"""Generic HTTP retry with exponential backoff for idempotent requests."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from common.config.config import HTTP_MAX_ATTEMPTS, HTTP_RETRY_BASE_DELAY
from common.exception.exceptions import NetworkError, RequestTimeoutError

logger = logging.getLogger(__name__)

# Client errors other than these are returned to the caller untouched
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds for the generic retry of idempotent requests."""

    max_attempts: int = HTTP_MAX_ATTEMPTS
    base_delay: float = HTTP_RETRY_BASE_DELAY

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry that follows ``attempt`` (0-based)."""
        return self.base_delay * (2**attempt)


def _translate_transport_error(error: httpx.TransportError, description: str) -> NetworkError:
    if isinstance(error, httpx.TimeoutException):
        return RequestTimeoutError(f"{description} timed out: {error}", detail=str(error))
    return NetworkError(f"{description} failed: {error}", detail=str(error))


async def send_once(
    send: Callable[[], Awaitable[httpx.Response]],
    description: str,
) -> httpx.Response:
    """Send a non-idempotent request exactly once.

    Args:
        send: Coroutine factory performing the request
        description: Human readable request name used in errors

    Returns:
        HTTP response (any status)

    Raises:
        NetworkError: If the request could not be delivered
    """
    try:
        return await send()
    except httpx.TransportError as e:
        error = _translate_transport_error(e, description)
        logger.error(error.message)
        raise error from e


async def send_with_retry(
    send: Callable[[], Awaitable[httpx.Response]],
    description: str,
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """Send an idempotent request, retrying transient failures.

    Transport errors, timeouts and 408/429/5xx responses are retried with a
    delay doubling from ``policy.base_delay``. The last response is returned
    when every attempt produced a retryable status, so the caller still
    classifies it.

    Raises:
        NetworkError: If the final attempt could not be delivered
    """
    for attempt in range(policy.max_attempts):
        is_last = attempt == policy.max_attempts - 1
        if attempt > 0:
            logger.info(f"Retry attempt {attempt + 1}/{policy.max_attempts} for {description}")

        try:
            response = await send()
        except httpx.TransportError as e:
            error = _translate_transport_error(e, description)
            if is_last:
                logger.error(f"All {policy.max_attempts} retry attempts failed for {description}")
                raise error from e
            logger.warning(f"{error.message}. Retrying...")
        else:
            if response.status_code not in RETRYABLE_STATUS_CODES or is_last:
                return response
            logger.warning(
                f"{description} returned HTTP {response.status_code}. Retrying..."
            )

        delay = policy.delay_for(attempt)
        logger.debug(f"Waiting {delay:.3f}s before retry...")
        await sleep(delay)

    raise NetworkError(f"{description} was not sent: no attempts allowed")
