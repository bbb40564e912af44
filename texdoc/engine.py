"""
Tool Engine
===========
Orchestrates the LaTeX tooling operations: loads the artifact each one
needs (source, log, .toc, PDF), hands it to the scanners or collaborators,
and returns structured results.

Usage:
    engine = ToolEngine(ToolConfig())
    report = engine.check_errors("path/to/project", include_warnings=True)

Architecture:
    .log  → LogScanner → FileNestingTracker → PageBreakReconstructor
                                            → DiagnosticExtractor
    .toc  → TocParser
    .tex  → SourceInfo
    .pdf  → DocumentRenderer
    project → LatexCompiler → DiagnosticExtractor
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .compiler import LatexCompiler, failure_excerpt, resolve_engine
from .exceptions import (
    InvalidArgumentError,
    MissingArtifactError,
    TexdocError,
    UndecodableArtifactError,
)
from .models import (
    CompileResult,
    DiagnosticReport,
    DocumentSummary,
    PageRecord,
    TocEntry,
)
from .page_breaks import PageBreakReconstructor
from .renderer import DocumentRenderer
from .source_info import (
    count_warnings,
    find_document_class,
    find_engine_banner,
    find_packages,
)
from .state_machine import DiagnosticExtractor
from .toc_parser import count_levels, parse_toc

logger = logging.getLogger(__name__)

COMPILE_FIRST_HINT = "Compile the LaTeX project first"
ENV_PREFIX = "TEXDOC_"


@dataclass
class ToolConfig:
    """Configuration for the tool engine."""

    # Argument defaults
    main_file: str = "main"
    engine: str = "xelatex"

    # Compiler
    compile_timeout: float = 300

    # Renderer
    text_char_limit: int = 2000
    render_scale: float = 2.0
    preview_dir: Optional[str] = None

    # Output
    display_limit: int = 20

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ToolConfig":
        """Build a config from TEXDOC_* variables, e.g. TEXDOC_COMPILE_TIMEOUT."""
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            raw = environ.get(key)
            if raw is None:
                continue
            try:
                if f.name in ("compile_timeout", "render_scale"):
                    values[f.name] = float(raw)
                elif f.name in ("text_char_limit", "display_limit"):
                    values[f.name] = int(raw)
                else:
                    values[f.name] = raw
            except ValueError:
                raise InvalidArgumentError(
                    f"{key} must be a number, got '{raw}'"
                ) from None
        return cls(**values)


class ToolEngine:
    """
    Entry point for every operation.

    Holds configuration only. Each call reads its artifacts into local
    values, so one engine can serve concurrent requests.
    """

    def __init__(self, config: Optional[ToolConfig] = None):
        self.config = config or ToolConfig()
        self.renderer = DocumentRenderer(
            text_char_limit=self.config.text_char_limit,
            scale=self.config.render_scale,
            preview_dir=self.config.preview_dir,
        )
        self.compiler = LatexCompiler(timeout=self.config.compile_timeout)
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # Configure root logger for the texdoc package
        pkg_logger = logging.getLogger("texdoc")
        pkg_logger.setLevel(log_level)

        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Console handler (stderr; stdout may carry the MCP transport)
        if not pkg_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(formatter)
            pkg_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            pkg_logger.addHandler(file_handler)

    # ─── Artifact Loading ─────────────────────────────────────────────────

    def _project_dir(self, project_path: str) -> Path:
        if not project_path:
            raise InvalidArgumentError("project_path is required")
        project_dir = Path(project_path).expanduser()
        if not project_dir.is_dir():
            raise MissingArtifactError(str(project_dir))
        return project_dir

    def _artifact(self, project_path: str, main_file: Optional[str], ext: str) -> Path:
        main_file = main_file or self.config.main_file
        return self._project_dir(project_path) / f"{main_file}{ext}"

    def _read_text(self, path: Path, hint: str = "") -> str:
        """
        Read an artifact as UTF-8 text.

        Raises:
            MissingArtifactError: If the file does not exist.
            UndecodableArtifactError: If it is not valid UTF-8.
        """
        if not path.is_file():
            raise MissingArtifactError(str(path), hint)
        try:
            return path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise UndecodableArtifactError(str(path), "not valid UTF-8 text") from e

    def _read_optional(self, path: Path) -> Optional[str]:
        """Read an artifact that may legitimately be absent."""
        try:
            return self._read_text(path)
        except TexdocError as e:
            logger.debug(f"Skipping {path.name}: {e}")
            return None

    def resolve_pdf_path(
        self,
        pdf_path: Optional[str] = None,
        project_path: Optional[str] = None,
        main_file: Optional[str] = None,
    ) -> str:
        """An explicit pdf_path wins; otherwise <project>/<main>.pdf."""
        if pdf_path:
            return str(Path(pdf_path).expanduser())
        if project_path:
            path = self._artifact(project_path, main_file, ".pdf")
            if not path.is_file():
                raise MissingArtifactError(str(path), COMPILE_FIRST_HINT)
            return str(path)
        raise InvalidArgumentError("pdf_path (or project_path) is required")

    # ─── Operations ───────────────────────────────────────────────────────

    def compile(
        self,
        project_path: str,
        main_file: Optional[str] = None,
        engine: Optional[str] = None,
        full_compile: bool = True,
    ) -> CompileResult:
        """
        Compile a project and report the outcome.

        A non-zero exit is reported in the result, not raised.

        Raises:
            MissingArtifactError: If the main .tex file does not exist.
            InvalidArgumentError: If the engine is not supported.
            CompilerError: If the toolchain cannot be run.
        """
        main_file = main_file or self.config.main_file
        engine_kind = resolve_engine(engine or self.config.engine)
        project_dir = self._project_dir(project_path)

        tex_path = project_dir / f"{main_file}.tex"
        if not tex_path.is_file():
            raise MissingArtifactError(str(tex_path))

        run = self.compiler.run(project_dir, main_file, engine_kind, full_compile)
        result = CompileResult(
            success=run.exit_code == 0,
            exit_code=run.exit_code,
            engine=engine_kind,
            command=run.command,
            output=run.output,
        )

        if result.success:
            pdf_path = project_dir / f"{main_file}.pdf"
            if pdf_path.is_file():
                result.pdf_path = str(pdf_path)
                try:
                    result.page_count = self.renderer.get_page_count(str(pdf_path))
                except TexdocError as e:
                    logger.warning(f"Compiled PDF could not be opened: {e}")
            return result

        result.error_excerpt = failure_excerpt(run.output)
        log_text = self._read_optional(project_dir / f"{main_file}.log")
        if log_text is not None:
            report = DiagnosticExtractor(f"{main_file}.tex").extract(log_text)
            result.diagnostics = report.errors
        return result

    def check_errors(
        self,
        project_path: str,
        main_file: Optional[str] = None,
        include_warnings: bool = False,
    ) -> DiagnosticReport:
        """Extract errors (and optionally warnings) from <main>.log."""
        main_file = main_file or self.config.main_file
        log_path = self._artifact(project_path, main_file, ".log")
        log_text = self._read_text(log_path, COMPILE_FIRST_HINT)

        extractor = DiagnosticExtractor(
            f"{main_file}.tex", include_warnings=include_warnings
        )
        return extractor.extract(log_text)

    def document_info(
        self,
        project_path: str,
        main_file: Optional[str] = None,
    ) -> DocumentSummary:
        """
        Summarize a project. Only the main .tex is required; PDF, .toc and
        .log contribute when present.
        """
        main_file = main_file or self.config.main_file
        source = self._read_text(self._artifact(project_path, main_file, ".tex"))

        summary = DocumentSummary()
        summary.document_class, summary.class_options = find_document_class(source)
        summary.packages = find_packages(source)

        pdf_path = self._artifact(project_path, main_file, ".pdf")
        if pdf_path.is_file():
            try:
                summary.page_count = self.renderer.get_page_count(str(pdf_path))
                size = self.renderer.get_page_size(str(pdf_path))
                if size:
                    summary.page_width, summary.page_height = size
            except TexdocError as e:
                logger.warning(f"Skipping PDF info: {e}")

        toc_text = self._read_optional(self._artifact(project_path, main_file, ".toc"))
        if toc_text is not None:
            summary.toc_counts = count_levels(toc_text)

        log_text = self._read_optional(self._artifact(project_path, main_file, ".log"))
        if log_text is not None:
            summary.engine_banner = find_engine_banner(log_text)
            summary.warning_count = count_warnings(log_text)

        return summary

    def analyze_pages(
        self,
        project_path: str,
        main_file: Optional[str] = None,
    ) -> tuple[list[TocEntry], Optional[int]]:
        """TOC entries from <main>.toc and the PDF page count if available."""
        main_file = main_file or self.config.main_file
        toc_path = self._artifact(project_path, main_file, ".toc")
        entries = parse_toc(self._read_text(toc_path, COMPILE_FIRST_HINT))

        page_count = None
        pdf_path = self._artifact(project_path, main_file, ".pdf")
        if pdf_path.is_file():
            try:
                page_count = self.renderer.get_page_count(str(pdf_path))
            except TexdocError as e:
                logger.warning(f"Skipping page count: {e}")

        return entries, page_count

    def find_pagebreaks(
        self,
        project_path: str,
        main_file: Optional[str] = None,
    ) -> list[PageRecord]:
        """Attribute every shipped-out page in <main>.log to a source file."""
        main_file = main_file or self.config.main_file
        log_path = self._artifact(project_path, main_file, ".log")
        log_text = self._read_text(log_path, COMPILE_FIRST_HINT)
        return PageBreakReconstructor(f"{main_file}.tex").reconstruct(log_text)

    def page_content(self, pdf_path: str, page_number: int) -> str:
        return self.renderer.get_page_text(pdf_path, page_number)

    def preview_page(
        self,
        pdf_path: str,
        page_number: int,
        output_path: Optional[str] = None,
    ) -> str:
        return self.renderer.render_page(pdf_path, page_number, output_path)
