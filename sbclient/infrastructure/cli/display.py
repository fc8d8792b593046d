import json
import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.box import HEAVY, SIMPLE
from rich.text import Text
from rich.table import Table

from sbclient.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output.

    Results go to stdout so they can be piped; messages go to stderr.
    """

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self._console = console or Console()
        self._err_console = err_console or Console(stderr=True)

    @property
    def console(self):
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_json(self, data: Any, **kwargs: Any) -> None:
        """Prints data as highlighted JSON.

        Args:
            data: Any JSON-serializable value.
            **kwargs: 'indent' (default 2).
        """
        indent = kwargs.get("indent", 2)
        self.console.print_json(json.dumps(data, default=str), indent=indent)

    def display_mapping(self, mapping: Dict[str, Any], title: str = "", **kwargs: Any) -> None:
        """Renders a flat mapping as a two-column table."""
        table = Table(title=title or None, box=SIMPLE)
        table.add_column(kwargs.get("key_header", "Key"), style="cyan")
        table.add_column(kwargs.get("value_header", "Value"))
        for key, value in mapping.items():
            table.add_row(str(key), str(value))
        self.console.print(table)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self._err_console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message."""
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self._err_console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message."""
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self._err_console.print(panel)
