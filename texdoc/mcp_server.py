"""
MCP Server
==========
Exposes the tool catalog to MCP clients over stdio using FastMCP.
Error payloads are raised as ToolError so the client sees isError=true.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from .engine import ToolConfig, ToolEngine
from .tools import TOOLS, call_tool

logger = logging.getLogger(__name__)

SERVER_NAME = "texdoc"


def _run(engine: ToolEngine, name: str, arguments: dict) -> str:
    # None means "use the default"; drop it so argument models apply theirs
    arguments = {k: v for k, v in arguments.items() if v is not None}
    result = call_tool(name, arguments, engine=engine)
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def create_server(config: Optional[ToolConfig] = None) -> FastMCP:
    """Build a FastMCP server with one tool per catalog entry."""
    tool_engine = ToolEngine(config or ToolConfig.from_env())
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(description=TOOLS["compile_latex"].description)
    def compile_latex(
        project_path: str,
        main_file: str = "main",
        engine: Optional[str] = None,
        full_compile: bool = True,
    ) -> str:
        """
        Args:
            project_path: LaTeX project directory
            main_file: Main file name without extension
            engine: xelatex (default), pdflatex or lualatex
            full_compile: Run latexmk to resolve cross references
        """
        return _run(tool_engine, "compile_latex", {
            "project_path": project_path,
            "main_file": main_file,
            "engine": engine,
            "full_compile": full_compile,
        })

    @mcp.tool(description=TOOLS["check_errors"].description)
    def check_errors(
        project_path: str,
        main_file: str = "main",
        include_warnings: bool = False,
    ) -> str:
        return _run(tool_engine, "check_errors", {
            "project_path": project_path,
            "main_file": main_file,
            "include_warnings": include_warnings,
        })

    @mcp.tool(description=TOOLS["get_document_info"].description)
    def get_document_info(project_path: str, main_file: str = "main") -> str:
        return _run(tool_engine, "get_document_info", {
            "project_path": project_path,
            "main_file": main_file,
        })

    @mcp.tool(description=TOOLS["analyze_pages"].description)
    def analyze_pages(project_path: str, main_file: str = "main") -> str:
        return _run(tool_engine, "analyze_pages", {
            "project_path": project_path,
            "main_file": main_file,
        })

    @mcp.tool(description=TOOLS["find_pagebreaks"].description)
    def find_pagebreaks(project_path: str, main_file: str = "main") -> str:
        return _run(tool_engine, "find_pagebreaks", {
            "project_path": project_path,
            "main_file": main_file,
        })

    @mcp.tool(description=TOOLS["get_page_content"].description)
    def get_page_content(
        page_number: int,
        pdf_path: Optional[str] = None,
        project_path: Optional[str] = None,
        main_file: Optional[str] = None,
    ) -> str:
        return _run(tool_engine, "get_page_content", {
            "pdf_path": pdf_path,
            "project_path": project_path,
            "main_file": main_file,
            "page_number": page_number,
        })

    @mcp.tool(description=TOOLS["preview_page"].description)
    def preview_page(
        page_number: int,
        pdf_path: Optional[str] = None,
        project_path: Optional[str] = None,
        main_file: Optional[str] = None,
        output_path: Optional[str] = None,
    ) -> str:
        return _run(tool_engine, "preview_page", {
            "pdf_path": pdf_path,
            "project_path": project_path,
            "main_file": main_file,
            "page_number": page_number,
            "output_path": output_path,
        })

    return mcp


def run_stdio(config: Optional[ToolConfig] = None):
    """Serve MCP over stdin/stdout until the client disconnects."""
    logger.info(f"Starting MCP server '{SERVER_NAME}' on stdio")
    create_server(config).run()
