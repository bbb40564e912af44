"""
Test Suite for Operations
=========================
Engine operations, renderer, compiler wrapper and the tool dispatcher.
"""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import fitz
import pytest

from texdoc.compiler import (
    LatexCompiler,
    build_command,
    failure_excerpt,
    resolve_engine,
)
from texdoc.engine import ToolConfig
from texdoc.exceptions import (
    CompilerError,
    InvalidArgumentError,
    MissingArtifactError,
    PageOutOfRangeError,
    UndecodableArtifactError,
)
from texdoc.formatter import render_diagnostics, render_summary
from texdoc.models import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticReport,
    DocumentSummary,
    Engine,
)
from texdoc.renderer import TRUNCATION_MARKER, DocumentRenderer
from texdoc.tools import TOOL_CATALOG, TOOLS, call_tool

from conftest import make_pdf


def _completed(returncode: int, stdout: bytes = b"") -> MagicMock:
    return MagicMock(returncode=returncode, stdout=stdout)


# ═══════════════════════════════════════════════════════════════════════════════
# RENDERER TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestDocumentRenderer:

    def test_page_count_and_size(self, pdf_path):
        renderer = DocumentRenderer()
        assert renderer.get_page_count(str(pdf_path)) == 3
        assert renderer.get_page_size(str(pdf_path)) == (595, 842)

    def test_page_text(self, pdf_path):
        text = DocumentRenderer().get_page_text(str(pdf_path), 2)
        assert "Second page" in text

    def test_text_truncated(self, pdf_path):
        text = DocumentRenderer(text_char_limit=5).get_page_text(str(pdf_path), 1)
        assert text == "First" + TRUNCATION_MARKER

    @pytest.mark.parametrize("page", [0, 4, -1])
    def test_out_of_range(self, pdf_path, page):
        with pytest.raises(PageOutOfRangeError) as exc:
            DocumentRenderer().get_page_text(str(pdf_path), page)
        assert exc.value.page_count == 3
        assert "1-3" in str(exc.value)

    def test_missing_pdf(self, tmp_path):
        with pytest.raises(MissingArtifactError):
            DocumentRenderer().get_page_count(str(tmp_path / "none.pdf"))

    def test_corrupt_pdf(self, tmp_path):
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"this is not a pdf")
        with pytest.raises(UndecodableArtifactError):
            DocumentRenderer().get_page_count(str(bad))

    def test_render_at_double_scale(self, tmp_path):
        pdf = make_pdf(tmp_path / "small.pdf", ["x"], width=100, height=50)
        out = tmp_path / "out" / "page.png"

        path = DocumentRenderer().render_page(str(pdf), 1, str(out))

        assert path == str(out)
        pix = fitz.Pixmap(path)
        assert (pix.width, pix.height) == (200, 100)

    def test_render_default_path(self, tmp_path, pdf_path):
        renderer = DocumentRenderer(preview_dir=str(tmp_path))
        path = renderer.render_page(str(pdf_path), 2)
        assert path == str(tmp_path / "latex_page_2.png")


# ═══════════════════════════════════════════════════════════════════════════════
# COMPILER TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestCompiler:

    def test_full_compile_command(self):
        assert build_command(Engine.XELATEX, "main", True) == [
            "latexmk", "-xelatex", "-interaction=nonstopmode",
            "-file-line-error", "main.tex",
        ]

    def test_single_pass_command(self):
        assert build_command(Engine.PDFLATEX, "thesis", False) == [
            "pdflatex", "-interaction=nonstopmode",
            "-file-line-error", "thesis.tex",
        ]

    def test_resolve_engine(self):
        assert resolve_engine("LuaLaTeX") == Engine.LUALATEX
        with pytest.raises(InvalidArgumentError):
            resolve_engine("context")

    def test_failure_excerpt_capped(self):
        output = "\n".join(f"! error {i}" for i in range(30)) + "\nok line"
        excerpt = failure_excerpt(output)
        assert len(excerpt) == 20
        assert excerpt[0] == "! error 0"

    def test_failure_excerpt_markers(self):
        output = "fine\nLaTeX Error: File x.sty not found.\nsh: error: boom\nfine"
        assert failure_excerpt(output) == [
            "LaTeX Error: File x.sty not found.",
            "sh: error: boom",
        ]

    def test_run_collects_output(self, tmp_path):
        with patch("texdoc.compiler.subprocess.run",
                   return_value=_completed(0, b"done\n")) as run:
            result = LatexCompiler(timeout=5).run(tmp_path, "main", Engine.XELATEX)

        assert result.exit_code == 0
        assert result.output == "done\n"
        assert run.call_args.kwargs["cwd"] == str(tmp_path)
        assert run.call_args.kwargs["timeout"] == 5

    def test_missing_toolchain(self, tmp_path):
        with patch("texdoc.compiler.subprocess.run", side_effect=FileNotFoundError("latexmk")):
            with pytest.raises(CompilerError, match="TeX Live"):
                LatexCompiler().run(tmp_path, "main", Engine.XELATEX)

    def test_timeout(self, tmp_path):
        err = subprocess.TimeoutExpired(cmd="latexmk", timeout=1)
        with patch("texdoc.compiler.subprocess.run", side_effect=err):
            with pytest.raises(CompilerError, match="did not finish"):
                LatexCompiler(timeout=1).run(tmp_path, "main", Engine.XELATEX)


# ═══════════════════════════════════════════════════════════════════════════════
# ENGINE TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestToolEngine:

    def test_compile_success(self, engine, project):
        with patch("texdoc.compiler.subprocess.run", return_value=_completed(0)):
            result = engine.compile(str(project))

        assert result.success
        assert result.engine == Engine.XELATEX
        assert result.page_count == 3
        assert result.pdf_path == str(project / "main.pdf")

    def test_compile_failure_reads_log(self, engine, project):
        output = b"! Undefined control sequence.\nl.12 \\foo\n"
        with patch("texdoc.compiler.subprocess.run", return_value=_completed(1, output)):
            result = engine.compile(str(project), engine="pdflatex", full_compile=False)

        assert not result.success
        assert result.exit_code == 1
        assert result.command[0] == "pdflatex"
        assert result.error_excerpt == ["! Undefined control sequence."]
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].location == "chapter1.tex:12"

    def test_compile_missing_source(self, engine, tmp_path):
        with pytest.raises(MissingArtifactError):
            engine.compile(str(tmp_path))

    def test_missing_project_dir(self, engine, tmp_path):
        with pytest.raises(MissingArtifactError):
            engine.check_errors(str(tmp_path / "nowhere"))

    def test_check_errors(self, engine, project):
        report = engine.check_errors(str(project), include_warnings=True)
        assert report.error_count == 1
        assert report.warning_count == 2

    def test_check_errors_undecodable(self, engine, tmp_path):
        (tmp_path / "main.log").write_bytes(b"\xff\xfe bad bytes")
        with pytest.raises(UndecodableArtifactError):
            engine.check_errors(str(tmp_path))

    def test_document_info(self, engine, project):
        summary = engine.document_info(str(project))

        assert summary.document_class == "article"
        assert summary.class_options == "a4paper,12pt"
        assert summary.packages == ["inputenc", "amsmath", "amssymb", "graphicx"]
        assert summary.page_count == 3
        assert (summary.page_width, summary.page_height) == (595, 842)
        assert summary.toc_counts["section"] == 2
        assert summary.engine_banner == "This is XeTeX"
        assert summary.warning_count == 2

    def test_document_info_source_only(self, engine, tmp_path):
        (tmp_path / "main.tex").write_text("\\documentclass{book}", encoding="utf-8")
        summary = engine.document_info(str(tmp_path))

        assert summary.document_class == "book"
        assert summary.page_count is None
        assert summary.toc_counts is None
        assert summary.engine_banner is None

    def test_analyze_pages(self, engine, project):
        entries, page_count = engine.analyze_pages(str(project))
        assert len(entries) == 4
        assert page_count == 3

    def test_find_pagebreaks_custom_main_file(self, engine, tmp_path):
        (tmp_path / "thesis.log").write_text("[1] (./ch1.tex [2])", encoding="utf-8")
        records = engine.find_pagebreaks(str(tmp_path), "thesis")
        assert [(r.page, r.file) for r in records] == [(1, "thesis.tex"), (2, "ch1.tex")]

    def test_resolve_pdf_path(self, engine, project):
        assert engine.resolve_pdf_path(project_path=str(project)) == str(project / "main.pdf")
        with pytest.raises(InvalidArgumentError):
            engine.resolve_pdf_path()

    def test_missing_project_pdf_asks_to_compile(self, engine, tmp_path):
        with pytest.raises(MissingArtifactError, match="Compile the LaTeX project first"):
            engine.resolve_pdf_path(project_path=str(tmp_path))


class TestToolConfig:

    def test_from_env(self):
        config = ToolConfig.from_env({
            "TEXDOC_MAIN_FILE": "thesis",
            "TEXDOC_COMPILE_TIMEOUT": "10",
            "TEXDOC_DISPLAY_LIMIT": "5",
            "UNRELATED": "x",
        })
        assert config.main_file == "thesis"
        assert config.compile_timeout == 10.0
        assert config.display_limit == 5
        assert config.engine == "xelatex"

    @pytest.mark.parametrize("key", ["TEXDOC_COMPILE_TIMEOUT", "TEXDOC_DISPLAY_LIMIT"])
    def test_malformed_number(self, key):
        with pytest.raises(InvalidArgumentError, match=key):
            ToolConfig.from_env({key: "soon"})


# ═══════════════════════════════════════════════════════════════════════════════
# DISPATCH TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestCallTool:

    def test_catalog(self):
        assert [spec.name for spec in TOOL_CATALOG] == [
            "compile_latex",
            "check_errors",
            "get_document_info",
            "analyze_pages",
            "get_page_content",
            "find_pagebreaks",
            "preview_page",
        ]
        assert TOOLS["check_errors"].input_schema["required"] == ["project_path"]
        assert set(TOOLS["preview_page"].input_schema["required"]) == {"page_number"}

    def test_unknown_tool(self, engine):
        result = call_tool("nope", {}, engine=engine)
        assert result.is_error
        assert result.text == "Unknown tool: nope"

    def test_missing_argument(self, engine):
        result = call_tool("check_errors", {}, engine=engine)
        assert result.is_error
        assert "project_path" in result.text

    def test_check_errors(self, engine, project):
        result = call_tool("check_errors", {"project_path": str(project)}, engine=engine)
        assert not result.is_error
        assert "**chapter1.tex:12**" in result.text
        assert "⚠️ Warnings" not in result.text

    def test_check_errors_with_string_flag(self, engine, project):
        result = call_tool(
            "check_errors",
            {"project_path": str(project), "include_warnings": "true"},
            engine=engine,
        )
        assert "Warnings (2)" in result.text

    def test_missing_log_asks_to_compile(self, engine, tmp_path):
        result = call_tool("find_pagebreaks", {"project_path": str(tmp_path)}, engine=engine)
        assert result.is_error
        assert "main.log" in result.text
        assert "Compile the LaTeX project first" in result.text

    def test_find_pagebreaks(self, engine, project):
        result = call_tool("find_pagebreaks", {"project_path": str(project)}, engine=engine)
        assert "- p.1: intro.tex" in result.text
        assert "- p.5: main.tex" in result.text

    def test_analyze_pages(self, engine, project):
        result = call_tool("analyze_pages", {"project_path": str(project)}, engine=engine)
        assert "## Foundations (p.1)" in result.text
        assert "- **Introduction** ... p.1" in result.text
        assert "  - Scope \\& Goals ... p.2" in result.text
        assert "Total pages: 3" in result.text

    def test_document_info(self, engine, project):
        result = call_tool("get_document_info", {"project_path": str(project)}, engine=engine)
        assert "documentclass: `article`" in result.text
        assert "Page size: 595 × 842 pt" in result.text
        assert "- Section: 2" in result.text

    @pytest.mark.parametrize("page", [0, 4])
    def test_page_out_of_range(self, engine, pdf_path, page):
        result = call_tool(
            "get_page_content",
            {"pdf_path": str(pdf_path), "page_number": page},
            engine=engine,
        )
        assert result.is_error
        assert "out of range" in result.text

    def test_page_content_from_project(self, engine, project):
        result = call_tool(
            "get_page_content",
            {"project_path": str(project), "page_number": 3},
            engine=engine,
        )
        assert not result.is_error
        assert result.text.startswith("# Page 3 Content")
        assert "Third page" in result.text

    def test_preview_page(self, engine, pdf_path, tmp_path):
        out = tmp_path / "p1.png"
        result = call_tool(
            "preview_page",
            {"pdf_path": str(pdf_path), "page_number": 1, "output_path": str(out)},
            engine=engine,
        )
        assert not result.is_error
        assert out.exists()
        assert str(out) in result.text

    def test_compile_failure_is_error(self, engine, project):
        with patch("texdoc.compiler.subprocess.run",
                   return_value=_completed(1, b"! LaTeX Error: boom\n")):
            result = call_tool("compile_latex", {"project_path": str(project)}, engine=engine)
        assert result.is_error
        assert "exit code: 1" in result.text
        assert "! LaTeX Error: boom" in result.text

    def test_unsupported_engine(self, engine, project):
        result = call_tool(
            "compile_latex",
            {"project_path": str(project), "engine": "context"},
            engine=engine,
        )
        assert result.is_error
        assert "Unsupported engine" in result.text


class TestDiagnosticsFormatting:

    def test_warning_display_capped(self):
        warnings = [
            Diagnostic(kind=DiagnosticKind.WARNING, file="main.tex", message=f"w{i}")
            for i in range(25)
        ]
        report = DiagnosticReport(warnings=warnings, warnings_included=True)
        text = render_diagnostics(report)

        assert "Warnings (25)" in text
        assert "20. main.tex: w19" in text
        assert "w20" not in text
        assert "... and 5 more warning(s)" in text

    def test_clean_report(self):
        text = render_diagnostics(DiagnosticReport(warnings_included=True))
        assert "No errors or warnings found" in text


class TestSummaryFormatting:

    def test_warning_count_without_banner(self):
        text = render_summary(DocumentSummary(warning_count=3))
        assert "## Build" in text
        assert "- Warnings: 3" in text
        assert "Engine" not in text

    def test_banner_and_warnings(self):
        text = render_summary(
            DocumentSummary(engine_banner="This is pdfTeX", warning_count=1)
        )
        assert "- Engine: This is pdfTeX" in text
        assert "- Warnings: 1" in text

    def test_empty_summary(self):
        assert render_summary(DocumentSummary()) == "# LaTeX Document Info\n"
