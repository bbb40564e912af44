"""
Source Info
===========
Light preamble and log inspection for the document summary: document
class, class options, loaded packages, engine banner, warning count.
"""

from __future__ import annotations

import re
from typing import Optional

# \documentclass[a4paper,12pt]{article}
DOCUMENTCLASS_PATTERN = re.compile(
    r"\\documentclass(?:\[([^\]]*)\])?\{([^}]+)\}"
)

# \usepackage[utf8]{inputenc}, \usepackage{amsmath, amssymb}
USEPACKAGE_PATTERN = re.compile(r"\\usepackage(?:\[[^\]]*\])?\{([^}]+)\}")

# "This is XeTeX, Version 3.141592653-2.6-0.999995 (TeX Live 2023)"
BANNER_PATTERN = re.compile(r"This is [^,\n]+")

# Unescaped % starts a comment that runs to end of line
COMMENT_PATTERN = re.compile(r"(?<!\\)%.*$", re.MULTILINE)


def strip_comments(source: str) -> str:
    return COMMENT_PATTERN.sub("", source)


def find_document_class(source: str) -> tuple[Optional[str], Optional[str]]:
    """Return (class name, options) of the first \\documentclass, if any."""
    match = DOCUMENTCLASS_PATTERN.search(strip_comments(source))
    if not match:
        return None, None
    return match.group(2).strip(), match.group(1)


def find_packages(source: str) -> list[str]:
    """
    Package names in declaration order, deduplicated. One \\usepackage may
    list several comma-separated names.
    """
    packages: list[str] = []
    seen: set[str] = set()
    for match in USEPACKAGE_PATTERN.finditer(strip_comments(source)):
        for name in match.group(1).split(","):
            name = name.strip()
            if name and name not in seen:
                seen.add(name)
                packages.append(name)
    return packages


def find_engine_banner(log_text: str) -> Optional[str]:
    match = BANNER_PATTERN.search(log_text)
    return match.group(0) if match else None


def count_warnings(log_text: str) -> int:
    """Raw count of "Warning:" occurrences, continuation lines not merged."""
    return log_text.count("Warning:")
