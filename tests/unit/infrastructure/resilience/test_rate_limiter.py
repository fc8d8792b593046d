import asyncio
import time

import pytest

from sbclient.infrastructure.resilience.rate_limiter import RateLimiter, ThrottledQueue
from sbclient.domain.errors import TransportError


class RecordingTransport:
    """Transport double recording when each job starts."""

    def __init__(self, fail_on=None):
        self.starts = []
        self.fail_on = fail_on

    async def request(self, method, path, params=None, json=None):
        self.starts.append((path, time.monotonic()))
        if path == self.fail_on:
            raise TransportError("boom", status_code=500)
        await asyncio.sleep(0)
        return path

    async def aclose(self):
        pass


@pytest.mark.asyncio
async def test_no_more_than_limit_jobs_start_per_window_and_order_is_kept():
    limit, window = 2, 0.2
    transport = RecordingTransport()
    queue = ThrottledQueue(transport, RateLimiter(max_requests=limit, time_window=window))

    paths = [f"/job/{i}" for i in range(6)]
    results = await asyncio.gather(*(queue.submit("get", p) for p in paths))

    assert results == paths
    assert [p for p, _ in transport.starts] == paths
    starts = [t for _, t in transport.starts]
    for i in range(len(starts) - limit):
        # job i+limit may only start once job i has left the window
        assert starts[i + limit] - starts[i] >= window - 0.01


@pytest.mark.asyncio
async def test_jobs_within_budget_start_without_waiting():
    transport = RecordingTransport()
    queue = ThrottledQueue(transport, RateLimiter(max_requests=5, time_window=1.0))

    began = time.monotonic()
    await asyncio.gather(*(queue.submit("get", f"/{i}") for i in range(5)))
    assert time.monotonic() - began < 0.5


@pytest.mark.asyncio
async def test_transport_errors_propagate_through_queue():
    transport = RecordingTransport(fail_on="/bad")
    queue = ThrottledQueue(transport, RateLimiter(max_requests=5, time_window=1.0))

    with pytest.raises(TransportError) as exc_info:
        await queue.submit("get", "/bad")
    assert exc_info.value.status_code == 500
    assert await queue.submit("get", "/good") == "/good"


@pytest.mark.asyncio
async def test_get_wait_time_reports_remaining_window():
    limiter = RateLimiter(max_requests=1, time_window=0.5)
    assert await limiter.get_wait_time() == 0.0
    await limiter.wait_for_permission()
    wait = await limiter.get_wait_time()
    assert 0.0 < wait <= 0.5


def test_rate_limiter_rejects_non_positive_limit():
    with pytest.raises(ValueError):
        RateLimiter(max_requests=0)
