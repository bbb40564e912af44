"""
Diagnostic State Machine
========================
Deterministic state machine that walks a TeX log line by line and
reassembles errors and warnings that span several physical lines.

Errors:   "! <message>" or "<file>.tex:<line>: <message>", continued until
          the next error or an "l.<digits>" context marker.
Warnings: any line with "Warning:"/"warning:", continued over indented
          lines that are not themselves warnings.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .file_tracker import FileNestingTracker
from .log_scanner import (
    find_line_marker,
    is_error_start,
    is_warning_start,
    scan_line,
)
from .models import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticReport,
    EventType,
    LogEvent,
)

logger = logging.getLogger(__name__)


class ScanState(Enum):
    """What the current line is expected to be."""
    SEEKING = "SEEKING"
    IN_ERROR = "IN_ERROR"
    IN_WARNING = "IN_WARNING"


class DiagnosticExtractor:
    """
    Finite State Machine that turns a build log into Diagnostic entities,
    each attributed to the file that was active when it started.

    Continuation lines become message text but still drive the file
    tracker, so attribution does not depend on include_warnings.
    """

    def __init__(self, main_file: str, include_warnings: bool = False):
        self.main_file = main_file
        self.include_warnings = include_warnings
        self.reset()

    def reset(self):
        """Reset the state machine for a fresh scan."""
        self.state = ScanState.SEEKING
        self.tracker = FileNestingTracker(self.main_file)
        self.current: Optional[Diagnostic] = None
        self.errors: list[Diagnostic] = []
        self.warnings: list[Diagnostic] = []

    def extract(self, log_text: str) -> DiagnosticReport:
        """Scan a whole log and return the diagnostics in encounter order."""
        self.reset()

        for line in log_text.splitlines():
            self._process_line(line)

        # Close a diagnostic still open at end of log
        if self.current:
            self._finalize_current()

        self.tracker.finish()
        logger.info(
            f"Extracted {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)"
        )

        return DiagnosticReport(
            errors=self.errors,
            warnings=self.warnings,
            warnings_included=self.include_warnings,
        )

    def _process_line(self, line: str):
        # ─── 1. Continuation of an open error ───
        if self.state == ScanState.IN_ERROR:
            if is_error_start(line):
                self._finalize_current()
            else:
                self._track(line)
                line_number = find_line_marker(line)
                if line_number is not None:
                    if self.current.line is None:
                        self.current.line = line_number
                    self._finalize_current()
                    return
                self._append_text(line)
                return

        # ─── 2. Continuation of an open warning ───
        elif self.state == ScanState.IN_WARNING:
            if line[:1].isspace() and not is_warning_start(line):
                self._track(line)
                self._append_text(line)
                return
            self._finalize_current()

        # ─── 3. Seeking: drive the tracker, watch for new spans ───
        started = False
        for event in scan_line(line):
            if event.type == EventType.ERROR_START and not started:
                self._start_error(event)
                started = True
            elif event.type == EventType.WARNING_MARKER:
                if self.include_warnings and not started:
                    self._start_warning(event)
                    started = True
            else:
                self.tracker.apply(event)

    def _track(self, line: str):
        """Feed a continuation line's open/close events to the tracker."""
        self.tracker.apply_all(scan_line(line))

    def _start_error(self, event: LogEvent):
        message = event.text.lstrip("!").strip()
        self.current = Diagnostic(
            kind=DiagnosticKind.ERROR,
            file=event.file_name or self.tracker.current,
            line=event.line_number,
            message=message,
        )
        self.state = ScanState.IN_ERROR
        logger.debug(f"Error started in {self.current.file}: {message}")

    def _start_warning(self, event: LogEvent):
        self.current = Diagnostic(
            kind=DiagnosticKind.WARNING,
            file=self.tracker.current,
            message=event.text.strip(),
        )
        self.state = ScanState.IN_WARNING

    def _append_text(self, line: str):
        """Append a trimmed continuation line; blank lines are skipped."""
        text = line.strip()
        if not text:
            return
        if self.current.message:
            self.current.message += " " + text
        else:
            self.current.message = text

    def _finalize_current(self):
        d = self.current
        if d.kind == DiagnosticKind.ERROR:
            self.errors.append(d)
        else:
            self.warnings.append(d)
        self.current = None
        self.state = ScanState.SEEKING
