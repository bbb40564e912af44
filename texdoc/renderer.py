"""
Document Renderer
=================
Page count, page text and page rasterization for compiled PDFs using
PyMuPDF (fitz).
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF

from .exceptions import (
    MissingArtifactError,
    PageOutOfRangeError,
    UndecodableArtifactError,
)

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[... content truncated ...]"


class DocumentRenderer:
    """
    Opens a PDF per call and answers one question about it.

    Pages are addressed 1-based; anything outside [1, page_count] raises
    PageOutOfRangeError.
    """

    def __init__(
        self,
        text_char_limit: int = 2000,
        scale: float = 2.0,
        preview_dir: Optional[str] = None,
    ):
        self.text_char_limit = text_char_limit
        self.scale = scale
        self.preview_dir = preview_dir

    def _open(self, pdf_path: str) -> fitz.Document:
        if not os.path.exists(pdf_path):
            raise MissingArtifactError(pdf_path)
        try:
            return fitz.open(pdf_path)
        except (fitz.FileDataError, RuntimeError) as e:
            raise UndecodableArtifactError(pdf_path, str(e)) from e

    def _check_page(self, doc: fitz.Document, page_number: int):
        if page_number < 1 or page_number > doc.page_count:
            raise PageOutOfRangeError(page_number, doc.page_count)

    def get_page_count(self, pdf_path: str) -> int:
        """Get total number of pages in the PDF."""
        with self._open(pdf_path) as doc:
            return doc.page_count

    def get_page_size(self, pdf_path: str) -> Optional[tuple[float, float]]:
        """Media box (width, height) of the first page in points."""
        with self._open(pdf_path) as doc:
            if doc.page_count == 0:
                return None
            box = doc[0].mediabox
            return box.width, box.height

    def get_page_text(self, pdf_path: str, page_number: int) -> str:
        """Plain text of one page, capped at text_char_limit characters."""
        with self._open(pdf_path) as doc:
            self._check_page(doc, page_number)
            text = doc[page_number - 1].get_text("text")

        if len(text) > self.text_char_limit:
            text = text[:self.text_char_limit] + TRUNCATION_MARKER
        return text

    def default_preview_path(self, page_number: int) -> str:
        base = self.preview_dir or tempfile.gettempdir()
        return str(Path(base) / f"latex_page_{page_number}.png")

    def render_page(
        self,
        pdf_path: str,
        page_number: int,
        output_path: Optional[str] = None,
    ) -> str:
        """
        Rasterize one page to PNG at `scale` times its natural resolution.

        Returns:
            The path the image was written to.
        """
        final_path = output_path or self.default_preview_path(page_number)

        with self._open(pdf_path) as doc:
            self._check_page(doc, page_number)
            page = doc[page_number - 1]
            matrix = fitz.Matrix(self.scale, self.scale)
            # Opaque white background, no alpha channel
            pix = page.get_pixmap(matrix=matrix, alpha=False)

            Path(final_path).parent.mkdir(parents=True, exist_ok=True)
            pix.save(final_path)

        logger.info(
            f"Rendered page {page_number} of {pdf_path} "
            f"({pix.width}x{pix.height}) to {final_path}"
        )
        return final_path
