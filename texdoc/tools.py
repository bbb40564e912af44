"""
Tool Catalog
============
The operations exposed to the orchestrating agent, declared once and
shared by every surface (MCP, HTTP, CLI).

Each operation takes a flat mapping of named arguments and returns a
ToolResult: a text payload plus an error flag. Nothing raised by an
operation escapes call_tool().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from . import formatter
from .engine import ToolEngine
from .exceptions import TexdocError
from .models import ToolResult

logger = logging.getLogger(__name__)


# ─── Argument Models ──────────────────────────────────────────────────────────


class ProjectArgs(BaseModel):
    project_path: str = Field(description="LaTeX project directory")
    main_file: Optional[str] = Field(
        default=None,
        description="Main file name without extension (default: main)",
    )


class CompileArgs(ProjectArgs):
    engine: Optional[str] = Field(
        default=None,
        description="Engine: xelatex (default), pdflatex or lualatex",
    )
    full_compile: bool = Field(
        default=True,
        description="Run latexmk to resolve cross references (default: true)",
    )


class CheckErrorsArgs(ProjectArgs):
    include_warnings: bool = Field(
        default=False,
        description="Also list warnings (default: errors only)",
    )


class PageArgs(BaseModel):
    pdf_path: Optional[str] = Field(
        default=None,
        description="PDF file path (or give project_path/main_file)",
    )
    project_path: Optional[str] = Field(
        default=None,
        description="LaTeX project directory, used when pdf_path is omitted",
    )
    main_file: Optional[str] = Field(
        default=None,
        description="Main file name without extension (default: main)",
    )
    page_number: int = Field(description="Page number (1-based)")


class PreviewArgs(PageArgs):
    output_path: Optional[str] = Field(
        default=None,
        description="PNG output path (default: system temp dir)",
    )


# ─── Handlers ─────────────────────────────────────────────────────────────────


def _compile(engine: ToolEngine, args: CompileArgs) -> ToolResult:
    result = engine.compile(
        args.project_path, args.main_file, args.engine, args.full_compile
    )
    return ToolResult(
        text=formatter.render_compile(result),
        is_error=not result.success,
    )


def _check_errors(engine: ToolEngine, args: CheckErrorsArgs) -> ToolResult:
    report = engine.check_errors(
        args.project_path, args.main_file, args.include_warnings
    )
    return ToolResult(text=formatter.render_diagnostics(
        report, display_limit=engine.config.display_limit
    ))


def _document_info(engine: ToolEngine, args: ProjectArgs) -> ToolResult:
    summary = engine.document_info(args.project_path, args.main_file)
    return ToolResult(text=formatter.render_summary(summary))


def _analyze_pages(engine: ToolEngine, args: ProjectArgs) -> ToolResult:
    entries, page_count = engine.analyze_pages(args.project_path, args.main_file)
    return ToolResult(text=formatter.render_toc(entries, page_count))


def _find_pagebreaks(engine: ToolEngine, args: ProjectArgs) -> ToolResult:
    records = engine.find_pagebreaks(args.project_path, args.main_file)
    return ToolResult(text=formatter.render_pagebreaks(records))


def _page_content(engine: ToolEngine, args: PageArgs) -> ToolResult:
    pdf_path = engine.resolve_pdf_path(
        args.pdf_path, args.project_path, args.main_file
    )
    text = engine.page_content(pdf_path, args.page_number)
    return ToolResult(text=formatter.render_page_text(args.page_number, text))


def _preview_page(engine: ToolEngine, args: PreviewArgs) -> ToolResult:
    pdf_path = engine.resolve_pdf_path(
        args.pdf_path, args.project_path, args.main_file
    )
    path = engine.preview_page(pdf_path, args.page_number, args.output_path)
    return ToolResult(text=formatter.render_preview(path))


# ─── Catalog ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[ToolEngine, Any], ToolResult]

    @property
    def input_schema(self) -> dict:
        """JSON schema of the arguments, derived from the argument model."""
        return self.args_model.model_json_schema()


TOOL_CATALOG: list[ToolSpec] = [
    ToolSpec(
        "compile_latex",
        "Compile a LaTeX project with latexmk or a single engine pass",
        CompileArgs,
        _compile,
    ),
    ToolSpec(
        "check_errors",
        "Check the LaTeX .log file for errors and warnings",
        CheckErrorsArgs,
        _check_errors,
    ),
    ToolSpec(
        "get_document_info",
        "Summarize a LaTeX document (class, packages, pages, sections)",
        ProjectArgs,
        _document_info,
    ),
    ToolSpec(
        "analyze_pages",
        "Map table-of-contents entries to page numbers from the .toc file",
        ProjectArgs,
        _analyze_pages,
    ),
    ToolSpec(
        "get_page_content",
        "Extract the text of one PDF page",
        PageArgs,
        _page_content,
    ),
    ToolSpec(
        "find_pagebreaks",
        "Find which source file each page was emitted from, using the .log",
        ProjectArgs,
        _find_pagebreaks,
    ),
    ToolSpec(
        "preview_page",
        "Render one PDF page to a PNG image",
        PreviewArgs,
        _preview_page,
    ),
]

TOOLS: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_CATALOG}


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "arguments"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


def call_tool(
    name: str,
    arguments: Optional[dict] = None,
    engine: Optional[ToolEngine] = None,
) -> ToolResult:
    """
    Run one named operation.

    Unknown names, invalid arguments and operation failures all come back
    as a ToolResult with is_error set.
    """
    spec = TOOLS.get(name)
    if spec is None:
        logger.warning(f"Unknown tool requested: {name}")
        return ToolResult(text=f"Unknown tool: {name}", is_error=True)

    try:
        args = spec.args_model.model_validate(arguments or {})
    except ValidationError as e:
        return ToolResult(
            text=f"Invalid arguments for {name}: {_describe_validation_error(e)}",
            is_error=True,
        )

    engine = engine or ToolEngine()
    try:
        result = spec.handler(engine, args)
    except TexdocError as e:
        logger.info(f"{name} failed: {e}")
        return ToolResult(text=str(e), is_error=True)

    logger.debug(f"{name} finished (is_error={result.is_error})")
    return result
