"""Interface for the HTTP transport capability.

The orchestrator and the throttled queue depend only on this narrow
verb + path + parameters contract; connection handling lives behind it.
"""

import abc
from typing import Any, Dict, Optional

from ..models.common import RequestPath, TransportResponse


class HttpTransport(abc.ABC):
    """Abstract Base Class for issuing HTTP requests against the API."""

    @abc.abstractmethod
    async def request(
        self,
        method: str,
        path: RequestPath,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> TransportResponse:
        """Performs one HTTP exchange asynchronously.

        Args:
            method: HTTP verb ('get', 'post', 'put', 'delete').
            path: Path relative to the API base URL.
            params: Query parameters, serialized in bracketed notation.
            json: Optional JSON body.

        Returns:
            The TransportResponse for a 2xx outcome.

        Raises:
            RateLimitedError: On HTTP 429.
            TransportError: On any other non-2xx status or network failure.
        """
        pass

    @abc.abstractmethod
    async def aclose(self) -> None:
        """Releases pooled connections."""
        pass
