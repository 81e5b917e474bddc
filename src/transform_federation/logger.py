"""Logging for transform-federation with Rich console output."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class FederationLogger(logging.Logger):
    """
    Logger that combines Python logging with a few Rich console helpers.

    The standard levels (debug, info, warning, error) are used by the library
    modules, the console helpers (success, hint, rule, ...) by the CLI.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console(stderr=True)

        handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def print(self, message: str) -> None:
        """
        Print a plain message (with Rich markup support).

        Args:
            message: Message to display
        """
        self.console.print(message)

    def colored(self, message: str, style: str = "bold cyan") -> None:
        self.print(f"[{style}]{message}[/{style}]")

    def success(self, message: str) -> None:
        """Print a success message in green with a checkmark icon."""
        self.print(f"[green]✓[/green] {message}")

    def hint(self, message: str) -> None:
        self.colored(message, "dim")

    def rule(self, title: str, style: str = "bold blue") -> None:
        """
        Print a horizontal rule with a title.

        Args:
            title: Title text for the rule
            style: Rich style string (default: "bold blue")
        """
        self.console.rule(f"[{style}]{title}")

    def key_value(self, key: str, value: Any, key_style: str = "dim") -> None:
        """Print a formatted "key: value" pair."""
        self.print(f"[{key_style}]{key}:[/{key_style}] {value}")

    def list_item(self, text: str, prefix: str = "-", style: str = "") -> None:
        """
        Print a list item with optional styling.

        Args:
            text: Text to display
            prefix: Prefix character (default: "-")
            style: Optional style for the entire item
        """
        if style:
            self.colored(f"{prefix} {text}", style)
        else:
            self.print(f"{prefix} {text}")


def get_logger(name: str = "transform_federation") -> FederationLogger:
    """
    Get or create a FederationLogger instance.

    Args:
        name: Logger name (default: "transform_federation")

    Returns:
        FederationLogger instance
    """
    previous_class = logging.getLoggerClass()
    logging.setLoggerClass(FederationLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous_class)

    return logger  # type: ignore[return-value]
