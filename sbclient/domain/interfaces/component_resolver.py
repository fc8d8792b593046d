"""Capability for rendering embedded components inside rich text.

Only markup rendering consumes it; the request, cache and relation pipeline
never calls it.
"""

from typing import Any, Dict, Protocol


class ComponentResolver(Protocol):
    """Renders one embedded block to markup."""

    def __call__(self, component: str, blok: Dict[str, Any]) -> str:
        ...
