"""Implementation of the rate limiter and the throttled request queue.

Controls the frequency of outgoing requests so the client stays inside the
API's per-second budget. Uses a sliding window algorithm.
"""

import time
import asyncio
import logging
from collections import deque
from typing import Any, Dict, Optional

from sbclient.domain.interfaces.http_transport import HttpTransport
from sbclient.domain.models.common import RequestPath, TransportResponse
from sbclient.domain.events.api_events import RequestDeferred, RequestDispatched, dispatch_event

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 5  # Delivery API budget per window
MANAGEMENT_MAX_REQUESTS = 3  # Management (OAuth) API budget per window
DEFAULT_TIME_WINDOW_SECONDS = 1.0


class RateLimiter:
    """Simple sliding window rate limiter."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        time_window: float = DEFAULT_TIME_WINDOW_SECONDS,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed to start in the time window.
            time_window: The time window in seconds.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.time_window = time_window
        self.timestamps = deque()
        self._lock = asyncio.Lock()
        logger.info(f"RateLimiter initialized: {max_requests} requests / {time_window} seconds")

    def _cleanup_timestamps(self) -> None:
        """Removes timestamps that fell out of the time window."""
        now = time.monotonic()
        while self.timestamps and now - self.timestamps[0] >= self.time_window:
            self.timestamps.popleft()

    def _wait_time(self) -> float:
        if len(self.timestamps) < self.max_requests:
            return 0.0
        oldest_timestamp = self.timestamps[0]
        return max(0.0, oldest_timestamp + self.time_window - time.monotonic())

    async def wait_for_permission(self) -> None:
        """Waits until a request is permitted according to the rate limit.

        The lock is held while waiting, so waiters are admitted strictly in
        the order they called this method.
        """
        async with self._lock:
            while True:
                self._cleanup_timestamps()
                if len(self.timestamps) < self.max_requests:
                    self.timestamps.append(time.monotonic())
                    logger.debug("Rate limit permission granted.")
                    return
                wait_time = self._wait_time()
                logger.debug(f"Rate limit reached. Waiting for {wait_time:.3f} seconds.")
                await asyncio.sleep(wait_time)

    async def get_wait_time(self) -> float:
        """Estimates the time needed before the next request can be made.

        Ignores requests already queued on the lock.
        """
        self._cleanup_timestamps()
        return self._wait_time()


class ThrottledQueue:
    """Funnels every request through one shared RateLimiter."""

    def __init__(self, transport: HttpTransport, rate_limiter: RateLimiter):
        self.transport = transport
        self.rate_limiter = rate_limiter

    async def submit(
        self,
        method: str,
        path: RequestPath,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> TransportResponse:
        """Runs one request job once the rate limiter admits it.

        Args:
            method: HTTP verb.
            path: Target path.
            params: Query parameters.
            json: Optional JSON body.

        Returns:
            The transport's response; transport errors propagate unchanged.
        """
        wait_duration = await self.rate_limiter.get_wait_time()
        if wait_duration > 0:
            dispatch_event(RequestDeferred(method=method, path=path, wait_time_seconds=wait_duration))
        await self.rate_limiter.wait_for_permission()
        dispatch_event(RequestDispatched(method=method, path=path))
        return await self.transport.request(method, path, params=params, json=json)
