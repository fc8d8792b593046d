"""Interface for presenting results to the user.

Defines the contract for displaying fetched data, errors, warnings and
informational messages, allowing different UI implementations.
"""

import abc
from typing import Any


class UserInterface(abc.ABC):
    """Abstract Base Class for user-facing output."""

    @abc.abstractmethod
    def display_json(self, data: Any, **kwargs: Any) -> None:
        """Displays a JSON-serializable result.

        Args:
            data: The value to render.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass
