"""
texdoc
======
LaTeX project tooling for agents: compile, diagnose, and inspect documents.

Architecture:
    - Log Scanner: Turns build-log lines into structural events
    - File Nesting Tracker: Stack of source files TeX is currently reading
    - Page Break Reconstructor: Maps shipped-out pages to source files
    - Diagnostic State Machine: Reassembles multi-line errors and warnings
    - TOC Parser: Reads \\contentsline entries into a page index
    - Renderer / Compiler: PyMuPDF and TeX toolchain collaborators
    - Tool Catalog: One operation table shared by the MCP, HTTP and CLI surfaces

Version: 0.2.0
"""

__version__ = "0.2.0"
