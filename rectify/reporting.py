# rectify/reporting.py
"""Debug reporting for formatting requests.

The pipeline reports what it does through a Reporter. Debug messages reach
the user only when the reporter was created with debug=True; notices are
always shown. Everything is also sent to the module logger.

Usage:
    reporter = ConsoleReporter(debug=True)
    reporter.warning("Formatter not found: pint")   # shown (debug on)
    reporter.notice("No formatter configured for language: text")
"""

import logging
import sys
from typing import List, Optional, TextIO, Tuple

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

INFO = "info"
WARNING = "warning"
ERROR = "error"

_STYLES = {
    INFO: "cyan",
    WARNING: "yellow",
    ERROR: "bold red",
}


class Reporter:
    """Base reporter. Logs everything, shows nothing.

    Args:
        debug: Whether debug messages are shown to the user for this request.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug

    def info(self, msg: str) -> None:
        self._report(INFO, msg)

    def warning(self, msg: str) -> None:
        self._report(WARNING, msg)

    def error(self, msg: str) -> None:
        self._report(ERROR, msg)

    def notice(self, msg: str, level: str = INFO) -> None:
        """Show a message regardless of debug mode."""
        logger.info("%s", msg)
        self.show(level, msg)

    def _report(self, level: str, msg: str) -> None:
        logger.debug("[%s] %s", level, msg)
        if self.debug:
            self.show(level, msg)

    def show(self, level: str, msg: str) -> None:
        """Present a message to the user. Subclasses override."""


class ConsoleReporter(Reporter):
    """Reporter that prints to a rich Console (stderr by default)."""

    def __init__(self, debug: bool = False, file: Optional[TextIO] = None):
        super().__init__(debug)
        self.console = Console(file=file or sys.stderr, highlight=False)

    def show(self, level: str, msg: str) -> None:
        style = _STYLES.get(level, "")
        self.console.print(f"[{style}]rectify:[/{style}] {escape(msg)}")


class MemoryReporter(Reporter):
    """Reporter that keeps shown messages in memory."""

    def __init__(self, debug: bool = False):
        super().__init__(debug)
        self.messages: List[Tuple[str, str]] = []

    def show(self, level: str, msg: str) -> None:
        self.messages.append((level, msg))

    def texts(self, level: Optional[str] = None) -> List[str]:
        return [m for lvl, m in self.messages if level is None or lvl == level]
