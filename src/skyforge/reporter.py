from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm


class ReportLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    PROGRESS = "progress"


class Reporter(Protocol):
    """Presentation port handed to the engine: messages out, confirmations in."""

    def report(self, level: ReportLevel, message: str) -> None: ...

    def confirm(self, prompt: str) -> bool: ...


STYLES = {
    ReportLevel.WARNING: "yellow",
    ReportLevel.ERROR: "red",
}


class ConsoleReporter:
    def __init__(self, console: Console | None = None, assume_yes: bool = False):
        self.console = console or Console(stderr=True)
        self.assume_yes = assume_yes
        self._mid_line = False

    def report(self, level: ReportLevel, message: str) -> None:
        if level is ReportLevel.PROGRESS:
            # Heartbeat dots accumulate on one line
            self.console.print(escape(message), end="")
            self._mid_line = True
            return

        if self._mid_line:
            self.console.print()
            self._mid_line = False

        style = STYLES.get(level)
        text = escape(message)
        if style:
            prefix = level.value.upper()
            text = f"[{style}]{prefix}: {text}[/{style}]"
        self.console.print(text)

    def confirm(self, prompt: str) -> bool:
        if self.assume_yes:
            return True
        return Confirm.ask(prompt, console=self.console)
