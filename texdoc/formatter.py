"""
Output Formatter
================
Renders operation results as the Markdown text returned to callers.
"""

from __future__ import annotations

from typing import Optional

from .models import (
    CompileResult,
    DiagnosticReport,
    DocumentSummary,
    PageRecord,
    TocEntry,
    TocLevel,
)

DISPLAY_LIMIT = 20


def render_compile(result: CompileResult) -> str:
    lines = ["# LaTeX Compile Result\n"]

    if result.success:
        lines.append("✅ Compile succeeded!")
        if result.pdf_path:
            lines.append(f"- PDF: {result.pdf_path}")
        if result.page_count is not None:
            lines.append(f"- Pages: {result.page_count}")
        return "\n".join(lines)

    lines.append(f"❌ Compile failed (exit code: {result.exit_code})")

    if result.error_excerpt:
        lines.append("\n## Error output")
        lines.append("```")
        lines.extend(result.error_excerpt)
        lines.append("```")

    if result.diagnostics:
        lines.append(f"\n## Errors in log ({len(result.diagnostics)})\n")
        for idx, diag in enumerate(result.diagnostics, start=1):
            lines.append(f"{idx}. **{diag.location}**")
            lines.append(f"   {diag.message}\n")

    return "\n".join(lines)


def render_diagnostics(
    report: DiagnosticReport,
    display_limit: int = DISPLAY_LIMIT,
) -> str:
    lines = ["# LaTeX Errors and Warnings\n"]

    if report.is_clean:
        suffix = " or warnings" if report.warnings_included else ""
        lines.append(f"✅ No errors{suffix} found")
        return "\n".join(lines)

    if report.errors:
        lines.append(f"## ❌ Errors ({report.error_count})\n")
        for idx, error in enumerate(report.errors, start=1):
            lines.append(f"{idx}. **{error.location}**")
            lines.append(f"   {error.message}\n")

    if report.warnings:
        lines.append(f"## ⚠️ Warnings ({report.warning_count})\n")
        for idx, warning in enumerate(report.warnings[:display_limit], start=1):
            lines.append(f"{idx}. {warning.file}: {warning.message}")
        remaining = report.warning_count - display_limit
        if remaining > 0:
            lines.append(f"\n... and {remaining} more warning(s)")

    return "\n".join(lines)


def render_summary(summary: DocumentSummary) -> str:
    lines = ["# LaTeX Document Info\n"]

    if summary.document_class:
        lines.append("## Document class")
        lines.append(f"- documentclass: `{summary.document_class}`")
        if summary.class_options is not None:
            lines.append(f"- options: `{summary.class_options}`")
        lines.append("")

    if summary.packages:
        lines.append(f"## Packages ({len(summary.packages)})")
        lines.append("\n".join(f"- `{name}`" for name in summary.packages))
        lines.append("")

    if summary.page_count is not None:
        lines.append("## PDF")
        lines.append(f"- Pages: {summary.page_count}")
        if summary.page_width is not None:
            lines.append(
                f"- Page size: {int(summary.page_width)} × "
                f"{int(summary.page_height)} pt"
            )
        lines.append("")

    if summary.toc_counts is not None:
        lines.append("## Structure")
        for level in TocLevel:
            count = summary.toc_counts.get(level, 0)
            if count:
                lines.append(f"- {level.value.capitalize()}: {count}")
        lines.append("")

    if summary.engine_banner or summary.warning_count:
        lines.append("## Build")
        if summary.engine_banner:
            lines.append(f"- Engine: {summary.engine_banner}")
        if summary.warning_count:
            lines.append(f"- Warnings: {summary.warning_count}")

    return "\n".join(lines)


def render_toc(entries: list[TocEntry], page_count: Optional[int] = None) -> str:
    """Sections are listed under the nearest preceding part."""
    lines = ["# Page Distribution\n"]

    for entry in entries:
        if entry.level == TocLevel.PART:
            lines.append(f"\n## {entry.title} (p.{entry.page})")
        elif entry.level == TocLevel.SECTION:
            lines.append(f"- **{entry.title}** ... p.{entry.page}")
        else:
            lines.append(f"  - {entry.title} ... p.{entry.page}")

    if not entries:
        lines.append("No part/section/subsection entries found")

    if page_count is not None:
        lines.append(f"\n---\nTotal pages: {page_count}")

    return "\n".join(lines)


def render_pagebreaks(records: list[PageRecord]) -> str:
    lines = ["# Page Break Analysis\n"]
    lines.extend(f"- p.{record.page}: {record.file}" for record in records)
    if not records:
        lines.append("No page markers found in log")
    return "\n".join(lines)


def render_page_text(page_number: int, text: str) -> str:
    return f"# Page {page_number} Content\n\n{text}"


def render_preview(path: str) -> str:
    return f"Saved page preview: {path}"
