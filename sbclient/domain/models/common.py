"""Defines common Value Objects used across the client.

These objects represent simple values like request signatures, access tokens
and cache versions, plus the structured response the orchestrator returns.
"""

from dataclasses import dataclass, field
from typing import NewType, Any, Dict, Optional

# === Request Context ===
RequestPath = NewType("RequestPath", str)          # e.g. '/cdn/stories'
RequestSignature = NewType("RequestSignature", str) # Normalized cache key for a request
AccessToken = NewType("AccessToken", str)           # Delivery (public/preview) token

# === Content Context ===
CacheVersion = NewType("CacheVersion", int)         # Server-side 'cv' marker
StoryUuid = NewType("StoryUuid", str)               # Unique id of a story
RelationField = NewType("RelationField", str)       # 'component.field' qualifier

# Content freshness modes supported by the delivery API
VERSION_PUBLISHED = "published"
VERSION_DRAFT = "draft"


@dataclass
class TransportResponse:
    """Raw outcome of one HTTP exchange."""
    status: int
    headers: Dict[str, str]
    body: Any
    redirect_count: int = 0

    @property
    def redirected_once(self) -> bool:
        """True when exactly one redirect was followed during the exchange.

        The delivery API answers a request without 'cv' by redirecting to the
        current version, so a single redirect signals a fresh cache version.
        """
        return self.redirect_count == 1


@dataclass
class ApiResponse:
    """A successful read response, as cached and returned to callers."""
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)
    per_page: Optional[int] = None
    total: Optional[int] = None

    @classmethod
    def from_transport(cls, res: TransportResponse) -> "ApiResponse":
        """Builds the response, deriving pagination metadata from headers."""
        headers = {k.lower(): v for k, v in (res.headers or {}).items()}
        response = cls(data=res.body, headers=headers)
        if headers.get("per-page"):
            response.per_page = int(headers["per-page"])
            response.total = int(headers["total"]) if headers.get("total") else None
        return response
