import logging
from typing import Protocol

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Surfaces failures and confirmations to the user."""

    def notify(self, title: str, message: str) -> None:
        ...


def notice_panel(title: str, message: str) -> Panel:
    """Render a notification as a red-bordered panel."""
    return Panel(
        Text(message, style="error"),
        title=title,
        border_style="red",
        expand=False,
    )


class ConsoleNotifier:
    """Prints notifications to the terminal, like an alert dialog."""

    def __init__(self, console: Console):
        self._console = console

    def notify(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
        self._console.print(notice_panel(title, message))


class LoggingNotifier:
    """Notifier for headless use. Keeps a history for inspection."""

    def __init__(self):
        self.history: list[tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        logger.warning("%s: %s", title, message)
        self.history.append((title, message))
