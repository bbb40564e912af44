"""
TOC Parser
==========
Reads \\contentsline entries from a LaTeX .toc file into a flat, ordered
list of (level, title, page) entries.
"""

from __future__ import annotations

import logging
import re
from collections import Counter

from .models import TocEntry, TocLevel

logger = logging.getLogger(__name__)

# ─── TOC Patterns ─────────────────────────────────────────────────────────────

# \contentsline {section}{\numberline {2}Intro}{5}{section.2}
# The title payload may hold one level of balanced braces.
CONTENTSLINE_PATTERN = re.compile(
    r"\\contentsline\s*\{(part|section|subsection)\}"
    r"\{([^}]+(?:\{[^}]*\}[^}]*)*)\}"
    r"\{(\d+)\}"
)

# Level keyword only, for counting entries without parsing titles
LEVEL_PATTERN = re.compile(r"\\contentsline\s*\{(part|section|subsection)\}")

NUMBERLINE_PATTERN = re.compile(r"\\numberline\s*\{[^}]*\}")
CONTROL_WORD_PATTERN = re.compile(r"\\[a-zA-Z]+\s*")


def clean_title(raw: str) -> str:
    """Strip \\numberline{...}, then control words, then outer whitespace."""
    title = NUMBERLINE_PATTERN.sub("", raw)
    title = CONTROL_WORD_PATTERN.sub("", title)
    return title.strip()


def parse_toc(toc_text: str) -> list[TocEntry]:
    """Parse a .toc file. Unrecognized lines are skipped silently."""
    entries = [
        TocEntry(
            level=TocLevel(match.group(1)),
            title=clean_title(match.group(2)),
            page=int(match.group(3)),
        )
        for match in CONTENTSLINE_PATTERN.finditer(toc_text)
    ]
    logger.debug(f"Parsed {len(entries)} TOC entries")
    return entries


def count_levels(toc_text: str) -> dict[TocLevel, int]:
    """Count contentslines per recognized level, titles not required."""
    counts = Counter(
        TocLevel(match.group(1))
        for match in LEVEL_PATTERN.finditer(toc_text)
    )
    return {level: counts[level] for level in TocLevel if counts[level]}
