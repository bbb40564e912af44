"""
File Nesting Tracker
====================
Explicit stack model of which source file TeX is reading. Driven by the
scanner's open/close events; the main file at the bottom is never popped.
"""

from __future__ import annotations

import logging

from .models import EventType, LogEvent

logger = logging.getLogger(__name__)


class FileNestingTracker:
    """Stack of active file names, innermost last."""

    def __init__(self, main_file: str):
        self.stack: list[str] = [main_file]
        self.ignored_closes = 0

    @property
    def current(self) -> str:
        return self.stack[-1]

    @property
    def depth(self) -> int:
        return len(self.stack)

    def open(self, name: str):
        self.stack.append(name)

    def close(self):
        """Pop the innermost file. A close at depth 1 is ignored."""
        if len(self.stack) > 1:
            self.stack.pop()
        else:
            self.ignored_closes += 1

    def apply(self, event: LogEvent):
        """Apply one scanner event; events other than open/close are ignored."""
        if event.type == EventType.FILE_OPEN:
            self.open(event.file_name)
        elif event.type == EventType.FILE_CLOSE:
            self.close()

    def apply_all(self, events: list[LogEvent]):
        for event in events:
            self.apply(event)

    def finish(self):
        """Log nesting that did not unwind by end of log."""
        if self.depth > 1:
            logger.debug(
                f"Log ended with {self.depth - 1} unclosed file(s): "
                f"{', '.join(self.stack[1:])}"
            )
        if self.ignored_closes:
            logger.debug(
                f"Ignored {self.ignored_closes} unbalanced close paren(s)"
            )
