"""Shared fixtures: LaTeX project directories and small generated PDFs."""

from __future__ import annotations

from pathlib import Path

import fitz
import pytest

from texdoc.engine import ToolConfig, ToolEngine


SAMPLE_LOG = """\
This is XeTeX, Version 3.141592653-2.6-0.999995 (TeX Live 2023) (preloaded format=xelatex)
entering extended mode
(./main.tex
LaTeX2e <2023-06-01>
(/usr/share/texlive/texmf-dist/tex/latex/base/article.cls
Document Class: article 2023/05/17 v1.4n Standard LaTeX document class
(/usr/share/texlive/texmf-dist/tex/latex/base/size10.clo))
(./intro.tex [1] [2]
LaTeX Warning: Reference `fig:arch' on page 2 undefined on input line 14.

) (./chapter1.tex [3]
! Undefined control sequence.
l.12 \\foo

[4] [4])
Package hyperref Warning: Token not allowed in a PDF string (Unicode):
(hyperref)                removing `\\textbf' on input line 30.

[5] (./main.aux) )
Output written on main.pdf (5 pages).
"""

SAMPLE_TOC = """\
\\contentsline {part}{Foundations}{1}{part.1}%
\\contentsline {section}{\\numberline {1}Introduction}{1}{section.1}%
\\contentsline {subsection}{\\numberline {1.1}Scope \\& Goals}{2}{subsection.1.1}%
\\contentsline {section}{\\numberline {2}Background}{3}{section.2}%
\\contentsline {chapter}{Ignored Chapter}{4}{chapter.1}%
"""

SAMPLE_TEX = """\
\\documentclass[a4paper,12pt]{article}
\\usepackage[utf8]{inputenc}
\\usepackage{amsmath, amssymb}
% \\usepackage{commented}
\\usepackage{graphicx,amsmath}
\\begin{document}
\\input{intro}
\\end{document}
"""


def make_pdf(path: Path, pages: list[str], width: float = 595, height: float = 842) -> Path:
    """Write a PDF with one line of text per page."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def engine(tmp_path) -> ToolEngine:
    return ToolEngine(ToolConfig(preview_dir=str(tmp_path / "previews")))


@pytest.fixture
def project(tmp_path) -> Path:
    """A compiled-looking project: source, log, toc and a 3-page PDF."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "main.tex").write_text(SAMPLE_TEX, encoding="utf-8")
    (root / "main.log").write_text(SAMPLE_LOG, encoding="utf-8")
    (root / "main.toc").write_text(SAMPLE_TOC, encoding="utf-8")
    make_pdf(root / "main.pdf", ["First page", "Second page", "Third page"])
    return root


@pytest.fixture
def pdf_path(project) -> Path:
    return project / "main.pdf"
