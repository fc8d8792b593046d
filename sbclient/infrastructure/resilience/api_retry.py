"""Service for executing API calls with automatic retries.

Implements linear backoff for rate-limited (429) responses: retry ``n``
waits ``backoff_unit_s * n`` before resubmitting. Any other error is
surfaced immediately.
"""

import logging
import asyncio
import time
from typing import Any, Callable, Coroutine, Optional

from sbclient.domain.errors import MaxRetryError, RateLimitedError
from sbclient.domain.events.api_events import RequestFailed, RequestSucceeded, RetryScheduled, dispatch_event

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF_UNIT_SECONDS = 1.0


class ApiRetryService:
    """Handles retrying rate-limited API calls with bounded linear backoff."""

    def __init__(
        self,
        max_retries: Optional[int] = DEFAULT_MAX_RETRIES,
        backoff_unit_s: float = DEFAULT_BACKOFF_UNIT_SECONDS,
    ):
        """Initializes the ApiRetryService.

        Args:
            max_retries: Retry count at which the rate-limit error is surfaced.
                Falsy values fall back to the default.
            backoff_unit_s: Base delay; retry n waits n times this many seconds.
        """
        self.max_retries = max_retries or DEFAULT_MAX_RETRIES
        self.backoff_unit_s = backoff_unit_s
        logger.info(
            f"ApiRetryService initialized: max_retries={self.max_retries}, "
            f"backoff_unit={backoff_unit_s}s (linear)"
        )

    async def execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        endpoint_name: Optional[str] = None,
        **kwargs: Any
    ) -> Any:
        """Executes an async function, retrying it while it is rate limited.

        Args:
            func: The async function (API call) to execute.
            *args: Positional arguments for the function.
            endpoint_name: Name used in logs and events (defaults to func name).
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the first successful call.

        Raises:
            MaxRetryError: When the retry count reaches max_retries.
            Exception: Any non rate-limit error, unchanged and unretried.
        """
        effective_endpoint = endpoint_name or getattr(func, "__name__", "request")
        retries = 0

        while True:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except RateLimitedError as e:
                retries += 1
                if retries >= self.max_retries:
                    logger.error(f"Max retries ({self.max_retries}) reached for {effective_endpoint}. Last error: {e}")
                    dispatch_event(RequestFailed(endpoint=effective_endpoint, error_type=type(e).__name__, error_message=str(e), status=429))
                    raise MaxRetryError(e, retries) from e
                delay = self.backoff_unit_s * retries
                logger.warning(f"Hit rate limit on {effective_endpoint}. Retrying in {delay:.2f}s (retry {retries}/{self.max_retries}).")
                dispatch_event(RetryScheduled(endpoint=effective_endpoint, attempt_number=retries, delay_seconds=delay))
                await asyncio.sleep(delay)
                continue
            except Exception as e:
                logger.error(f"Non-retryable error calling {effective_endpoint}: {type(e).__name__}: {e}")
                dispatch_event(RequestFailed(
                    endpoint=effective_endpoint,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    status=getattr(e, "status_code", None),
                ))
                raise

            latency_ms = (time.perf_counter() - start_time) * 1000
            dispatch_event(RequestSucceeded(
                endpoint=effective_endpoint,
                latency_ms=latency_ms,
                status=getattr(result, "status", None),
            ))
            return result
