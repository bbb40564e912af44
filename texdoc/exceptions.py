"""
Exceptions
==========
Failures surfaced to callers as error payloads. None of them are retried.
"""

from __future__ import annotations


class TexdocError(Exception):
    """Base class for every failure reported back to the caller."""


class InvalidArgumentError(TexdocError, ValueError):
    """An operation argument is missing or has an unusable value."""


class MissingArtifactError(TexdocError, FileNotFoundError):
    """A log, TOC, source or PDF file the operation needs does not exist."""

    def __init__(self, path: str, hint: str = ""):
        self.path = path
        message = f"File not found: {path}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class UndecodableArtifactError(TexdocError):
    """The artifact exists but cannot be read as text or opened as a PDF."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Unable to read {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PageOutOfRangeError(TexdocError, IndexError):
    """A 1-based page number outside [1, page_count]."""

    def __init__(self, page_number: int, page_count: int):
        self.page_number = page_number
        self.page_count = page_count
        super().__init__(
            f"Page {page_number} is out of range "
            f"(document has {page_count} pages, valid range 1-{page_count})"
        )


class CompilerError(TexdocError, RuntimeError):
    """The compiler process could not be started or did not finish in time."""
