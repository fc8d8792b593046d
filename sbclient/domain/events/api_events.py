"""Domain Events related to API calls, retries and the response cache.

Examples include events for when calls are deferred, retried, fail, or succeed.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


# --- API Events ---

@dataclass
class RequestDeferred(DomainEvent):
    """Event triggered when a request waits on the rate limiter."""
    method: str
    path: str
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestDispatched(DomainEvent):
    """Event triggered when a request leaves the throttled queue."""
    method: str
    path: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when a request returns a usable response."""
    endpoint: str
    latency_ms: float
    status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when a request fails definitively."""
    endpoint: str
    error_type: str
    error_message: str
    status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a rate-limited request is scheduled for retry."""
    endpoint: str
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)


# --- Cache Events ---

@dataclass
class CacheFlushed(DomainEvent):
    """Event triggered when the response cache is emptied."""
    reason: str  # 'manual', 'auto_draft', 'stale_version'
    timestamp: float = field(default_factory=time.time)


@dataclass
class CacheVersionUpdated(DomainEvent):
    """Event triggered when a new cache version is recorded for a token."""
    previous: Optional[Any]
    current: Any
    timestamp: float = field(default_factory=time.time)


def dispatch_event(event: DomainEvent) -> None:
    """Publishes a domain event. Events are currently only logged."""
    logger.debug(f"EVENT: {event}")
