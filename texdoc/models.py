"""
Data Models
===========
Pydantic models for log events, diagnostics, TOC entries and tool results.
Every model is a plain value built fresh per request.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


# ─── Enums ────────────────────────────────────────────────────────────────────


class EventType(str, Enum):
    """Structural event emitted by the log scanner."""
    FILE_OPEN = "file_open"
    FILE_CLOSE = "file_close"
    PAGE_EMITTED = "page_emitted"
    ERROR_START = "error_start"
    WARNING_MARKER = "warning_marker"


class DiagnosticKind(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class TocLevel(str, Enum):
    """Sectioning levels recognized in a .toc file."""
    PART = "part"
    SECTION = "section"
    SUBSECTION = "subsection"


class Engine(str, Enum):
    """Supported TeX engines."""
    XELATEX = "xelatex"
    PDFLATEX = "pdflatex"
    LUALATEX = "lualatex"


# ─── Log Models ───────────────────────────────────────────────────────────────


class LogEvent(BaseModel):
    """
    A single structural event found on a log line.
    Events on the same line are ordered by position.
    """
    type: EventType
    position: int = Field(
        ge=0,
        description="Column where the event starts in its line"
    )
    file_name: Optional[str] = None
    page: Optional[int] = Field(default=None, ge=1)
    text: Optional[str] = None
    line_number: Optional[int] = None


class PageRecord(BaseModel):
    """A page shipped out by TeX and the source file active at that moment."""
    page: int = Field(ge=1)
    file: str


class Diagnostic(BaseModel):
    """An error or warning reassembled from one or more log lines."""
    kind: DiagnosticKind
    file: str
    line: Optional[int] = None
    message: str

    @property
    def location(self) -> str:
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


class DiagnosticReport(BaseModel):
    """Errors and (optionally) warnings extracted from a build log."""
    errors: list[Diagnostic] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)
    warnings_included: bool = False

    @computed_field
    @property
    def error_count(self) -> int:
        return len(self.errors)

    @computed_field
    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def is_clean(self) -> bool:
        return not self.errors and not self.warnings


# ─── TOC / Summary Models ────────────────────────────────────────────────────


class TocEntry(BaseModel):
    """One \\contentsline entry. Nesting is implied by level only."""
    level: TocLevel
    title: str
    page: int = Field(ge=0)


class DocumentSummary(BaseModel):
    """
    Aggregated facts about a LaTeX project, gathered from the main source,
    the rendered PDF, the .toc file and the build log. Any source may be
    missing, in which case its fields stay empty.
    """
    document_class: Optional[str] = None
    class_options: Optional[str] = None
    packages: list[str] = Field(default_factory=list)
    page_count: Optional[int] = None
    page_width: Optional[float] = None
    page_height: Optional[float] = None
    toc_counts: Optional[dict[TocLevel, int]] = None
    engine_banner: Optional[str] = None
    warning_count: int = 0


# ─── Compile Models ───────────────────────────────────────────────────────────


class CompileResult(BaseModel):
    """Outcome of running the TeX toolchain on a project."""
    success: bool
    exit_code: int
    engine: Engine
    command: list[str] = Field(default_factory=list)
    output: str = ""
    pdf_path: Optional[str] = None
    page_count: Optional[int] = None
    error_excerpt: list[str] = Field(
        default_factory=list,
        description="Output lines that look like failures (at most 20)"
    )
    diagnostics: list[Diagnostic] = Field(default_factory=list)


# ─── Wire Models ──────────────────────────────────────────────────────────────


class ToolResult(BaseModel):
    """Text payload returned for every operation call."""
    text: str
    is_error: bool = False
