"""
Log Scanner
===========
Turns raw TeX log lines into structural events (file open/close, page
shipout, error start, warning marker). Stateless: each line is scanned on
its own and ordering across lines is left to the caller.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional

from .models import EventType, LogEvent

# ─── Log Patterns ─────────────────────────────────────────────────────────────

# "(./chapter2.tex", "(chapter1.tex", "(/abs/path/intro.tex"
FILE_OPEN_PATTERN = re.compile(r"\(\.?/?(?P<name>[^()\s]+\.tex)")

# Page shipout counter: "[1]", "[12]"
PAGE_PATTERN = re.compile(r"\[(?P<num>\d+)\]")

# Both casings seen in practice: "LaTeX Warning:", "pdfTeX warning:"
WARNING_PATTERN = re.compile(r"[Ww]arning:")

# -file-line-error style: "./chapter1.tex:12: Undefined control sequence."
FILE_LINE_ERROR_PATTERN = re.compile(r"^\.?/?([^:\s]+\.tex):(\d+):\s*(.*)$")

# Line-number marker that closes a TeX error context: "l.12 \foo"
LINE_MARKER_PATTERN = re.compile(r"l\.(\d+)")

# One pass over the line finds opens, closes and pages in the order they occur
_STRUCTURE_PATTERN = re.compile(
    rf"(?P<open>{FILE_OPEN_PATTERN.pattern})"
    r"|(?P<close>\))"
    rf"|(?P<page>{PAGE_PATTERN.pattern})"
)


def is_error_start(line: str) -> bool:
    """True when the line opens a new error span."""
    return line.startswith("!") or bool(FILE_LINE_ERROR_PATTERN.match(line))


def is_warning_start(line: str) -> bool:
    return bool(WARNING_PATTERN.search(line))


def find_line_marker(line: str) -> Optional[int]:
    """Return the digits of an "l.<digits>" marker, or None."""
    match = LINE_MARKER_PATTERN.search(line)
    if match:
        return int(match.group(1))
    return None


def scan_line(line: str) -> list[LogEvent]:
    """
    Scan one physical log line.

    Returns events ordered left to right. A line that matches nothing
    yields an empty list.
    """
    events: list[LogEvent] = []

    if line.startswith("!"):
        events.append(LogEvent(
            type=EventType.ERROR_START,
            position=0,
            text=line,
        ))
    else:
        fle = FILE_LINE_ERROR_PATTERN.match(line)
        if fle:
            events.append(LogEvent(
                type=EventType.ERROR_START,
                position=0,
                text=fle.group(3),
                file_name=fle.group(1),
                line_number=int(fle.group(2)),
            ))

    for match in _STRUCTURE_PATTERN.finditer(line):
        if match.group("open"):
            events.append(LogEvent(
                type=EventType.FILE_OPEN,
                position=match.start(),
                file_name=match.group("name"),
            ))
        elif match.group("close"):
            events.append(LogEvent(
                type=EventType.FILE_CLOSE,
                position=match.start(),
            ))
        else:
            page = int(match.group("num"))
            if page >= 1:
                events.append(LogEvent(
                    type=EventType.PAGE_EMITTED,
                    position=match.start(),
                    page=page,
                ))

    warning = WARNING_PATTERN.search(line)
    if warning:
        events.append(LogEvent(
            type=EventType.WARNING_MARKER,
            position=warning.start(),
            text=line,
        ))

    # Error start sits at column 0 and must stay ahead of a same-column open
    events.sort(key=lambda e: (e.position, e.type != EventType.ERROR_START))
    return events


def scan_log(text: str) -> Iterator[tuple[str, list[LogEvent]]]:
    """Yield (line, events) for every physical line of a log."""
    for line in text.splitlines():
        yield line, scan_line(line)
