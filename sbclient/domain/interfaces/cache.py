"""Interface for response cache strategies.

Defines the contract for storing, retrieving and flushing cached read
responses keyed by request signature.
"""

import abc
from typing import Any, Dict, Optional

from ..models.common import RequestSignature


class CacheProvider(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    async def get(self, key: RequestSignature) -> Optional[Any]:
        """Retrieves an item from the cache asynchronously.

        Args:
            key: The request signature to look up.

        Returns:
            The cached response if present, otherwise None.
        """
        pass

    @abc.abstractmethod
    async def set(self, key: RequestSignature, value: Any) -> None:
        """Stores an item in the cache asynchronously.

        Args:
            key: The request signature to store the response under.
            value: The fully resolved response.
        """
        pass

    @abc.abstractmethod
    async def get_all(self) -> Dict[RequestSignature, Any]:
        """Returns a snapshot of every cached entry."""
        pass

    @abc.abstractmethod
    async def flush(self) -> None:
        """Drops every cached entry."""
        pass
