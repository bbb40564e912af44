"""
Test Suite for TOC and Source Parsing
=====================================
"""

from __future__ import annotations

from texdoc.models import TocLevel
from texdoc.source_info import (
    count_warnings,
    find_document_class,
    find_engine_banner,
    find_packages,
)
from texdoc.toc_parser import clean_title, count_levels, parse_toc

from conftest import SAMPLE_LOG, SAMPLE_TEX, SAMPLE_TOC


class TestTitleCleanup:

    def test_numberline_removed(self):
        assert clean_title("\\numberline {2}Intro") == "Intro"
        assert clean_title("\\numberline{2.1}  Spaced ") == "Spaced"

    def test_control_words_removed(self):
        assert clean_title("\\emph Title") == "Title"

    def test_control_symbols_kept(self):
        assert clean_title("A \\& B") == "A \\& B"


class TestTocParser:
    """Test \\contentsline extraction."""

    def test_section_entry(self):
        entries = parse_toc("\\contentsline{section}{\\numberline{2}Intro}{5}")
        assert len(entries) == 1
        assert entries[0].level == TocLevel.SECTION
        assert entries[0].title == "Intro"
        assert entries[0].page == 5

    def test_nested_braces_do_not_end_title_early(self):
        entries = parse_toc(
            "\\contentsline{subsection}{\\numberline{2.1}A \\& B}{6}"
        )
        assert len(entries) == 1
        assert entries[0].level == TocLevel.SUBSECTION
        assert entries[0].title == "A \\& B"
        assert entries[0].page == 6

    def test_formatting_command_in_title(self):
        entries = parse_toc(
            "\\contentsline {section}{\\numberline {3}Results for "
            "\\textbf {large} inputs}{12}{section.3}%"
        )
        assert entries[0].title == "Results for {large} inputs"
        assert entries[0].page == 12

    def test_document_order_and_levels(self):
        entries = parse_toc(SAMPLE_TOC)
        assert [(e.level, e.title, e.page) for e in entries] == [
            (TocLevel.PART, "Foundations", 1),
            (TocLevel.SECTION, "Introduction", 1),
            (TocLevel.SUBSECTION, "Scope \\& Goals", 2),
            (TocLevel.SECTION, "Background", 3),
        ]

    def test_unrecognized_levels_ignored(self):
        assert parse_toc("\\contentsline {chapter}{Intro}{1}") == []

    def test_malformed_input(self):
        assert parse_toc("") == []
        assert parse_toc("\\contentsline {section}{Broken") == []

    def test_idempotent(self):
        first = [e.model_dump() for e in parse_toc(SAMPLE_TOC)]
        second = [e.model_dump() for e in parse_toc(SAMPLE_TOC)]
        assert first == second

    def test_count_levels(self):
        assert count_levels(SAMPLE_TOC) == {
            TocLevel.PART: 1,
            TocLevel.SECTION: 2,
            TocLevel.SUBSECTION: 1,
        }
        assert count_levels("") == {}


class TestSourceInfo:
    """Test preamble and log inspection."""

    def test_document_class_with_options(self):
        assert find_document_class(SAMPLE_TEX) == ("article", "a4paper,12pt")

    def test_document_class_without_options(self):
        assert find_document_class("\\documentclass{report}") == ("report", None)

    def test_missing_document_class(self):
        assert find_document_class("no preamble") == (None, None)

    def test_packages_deduplicated_in_order(self):
        assert find_packages(SAMPLE_TEX) == [
            "inputenc",
            "amsmath",
            "amssymb",
            "graphicx",
        ]

    def test_escaped_percent_is_not_a_comment(self):
        source = "\\usepackage{a} 50\\% \\usepackage{b}"
        assert find_packages(source) == ["a", "b"]

    def test_engine_banner(self):
        assert find_engine_banner(SAMPLE_LOG) == "This is XeTeX"
        assert find_engine_banner("") is None

    def test_warning_count(self):
        assert count_warnings(SAMPLE_LOG) == 2
