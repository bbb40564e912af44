"""
CLI Interface
=============
Command-line interface for the LaTeX tooling operations.

Usage:
    texdoc compile <project> [--engine pdflatex] [--single-pass]
    texdoc errors <project> [--warnings]
    texdoc info <project>
    texdoc pages <project>
    texdoc pagebreaks <project>
    texdoc page-text <pdf> <page>
    texdoc preview <pdf> <page> [--output out.png]
    texdoc serve [--host --port]
    texdoc mcp
"""

from __future__ import annotations

import sys
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .engine import ToolConfig, ToolEngine
from .exceptions import InvalidArgumentError
from .models import ToolResult
from .tools import TOOL_CATALOG, call_tool

console = Console()
err_console = Console(stderr=True)


def _emit(result: ToolResult, raw: bool):
    """Print a tool result and exit non-zero on an error payload."""
    if raw:
        click.echo(result.text)
    elif result.is_error:
        err_console.print(f"[red]Error:[/] {result.text}")
    else:
        console.print(Markdown(result.text))
    if result.is_error:
        sys.exit(1)


def _call(ctx: click.Context, name: str, **arguments) -> ToolResult:
    engine = ToolEngine(ctx.obj["config"])
    # Unset options fall back to the operation defaults
    arguments = {k: v for k, v in arguments.items() if v is not None}
    return call_tool(name, arguments, engine=engine)


def _run(ctx: click.Context, name: str, **arguments):
    _emit(_call(ctx, name, **arguments), ctx.obj["raw"])


@click.group()
@click.version_option(version=__version__, prog_name="texdoc")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (default: WARNING for commands)",
)
@click.option("--log-file", default=None, help="Path to log file")
@click.option(
    "--raw",
    is_flag=True,
    default=False,
    help="Print plain Markdown instead of rendering it",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_file: Optional[str], raw: bool):
    """texdoc: LaTeX build log, TOC and PDF tooling."""
    try:
        config = ToolConfig.from_env()
    except InvalidArgumentError as e:
        raise click.ClickException(str(e)) from e
    # Keep one-shot command output clean unless asked otherwise
    config.log_level = log_level or "WARNING"
    if log_file:
        config.log_file = log_file
    ctx.obj = {"config": config, "raw": raw}


@cli.command()
def tools():
    """List the available operations."""
    table = Table(title="Operations", border_style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Required")
    for spec in TOOL_CATALOG:
        required = spec.input_schema.get("required", [])
        table.add_row(spec.name, spec.description, ", ".join(required))
    console.print(table)


@cli.command(name="compile")
@click.argument("project_path", type=click.Path(exists=True, file_okay=False))
@click.option("--main-file", "-m", default=None, help="Main file without .tex")
@click.option(
    "--engine", "-e",
    default=None,
    type=click.Choice(["xelatex", "pdflatex", "lualatex"]),
    help="TeX engine (default: xelatex)",
)
@click.option(
    "--single-pass",
    is_flag=True,
    default=False,
    help="Run the engine once instead of latexmk",
)
@click.pass_context
def compile_cmd(ctx, project_path, main_file, engine, single_pass):
    """Compile a LaTeX project."""
    with console.status("Compiling...", spinner="dots"):
        result = _call(
            ctx, "compile_latex",
            project_path=project_path,
            main_file=main_file,
            engine=engine,
            full_compile=not single_pass,
        )
    _emit(result, ctx.obj["raw"])


@cli.command()
@click.argument("project_path")
@click.option("--main-file", "-m", default=None, help="Main file without .tex")
@click.option(
    "--warnings", "-w",
    "include_warnings",
    is_flag=True,
    default=False,
    help="Include warnings",
)
@click.pass_context
def errors(ctx, project_path, main_file, include_warnings):
    """Check the build log for errors (and warnings)."""
    _run(
        ctx, "check_errors",
        project_path=project_path,
        main_file=main_file,
        include_warnings=include_warnings,
    )


@cli.command()
@click.argument("project_path")
@click.option("--main-file", "-m", default=None, help="Main file without .tex")
@click.pass_context
def info(ctx, project_path, main_file):
    """Summarize document class, packages, pages and structure."""
    _run(ctx, "get_document_info", project_path=project_path, main_file=main_file)


@cli.command()
@click.argument("project_path")
@click.option("--main-file", "-m", default=None, help="Main file without .tex")
@click.pass_context
def pages(ctx, project_path, main_file):
    """Show table-of-contents entries with their pages."""
    _run(ctx, "analyze_pages", project_path=project_path, main_file=main_file)


@cli.command()
@click.argument("project_path")
@click.option("--main-file", "-m", default=None, help="Main file without .tex")
@click.pass_context
def pagebreaks(ctx, project_path, main_file):
    """Show which source file each page came from."""
    _run(ctx, "find_pagebreaks", project_path=project_path, main_file=main_file)


@cli.command(name="page-text")
@click.argument("pdf_path")
@click.argument("page_number", type=int)
@click.pass_context
def page_text(ctx, pdf_path, page_number):
    """Print the text of one PDF page (1-based)."""
    _run(ctx, "get_page_content", pdf_path=pdf_path, page_number=page_number)


@cli.command()
@click.argument("pdf_path")
@click.argument("page_number", type=int)
@click.option("--output", "-o", "output_path", default=None, help="PNG output path")
@click.pass_context
def preview(ctx, pdf_path, page_number, output_path):
    """Render one PDF page to PNG."""
    _run(
        ctx, "preview_page",
        pdf_path=pdf_path,
        page_number=page_number,
        output_path=output_path,
    )


@cli.command()
@click.option("--host", default="127.0.0.1", help="Server host")
@click.option("--port", default=5000, type=int, help="Server port")
@click.option("--debug", is_flag=True, default=False, help="Debug mode")
@click.pass_context
def serve(ctx, host: str, port: int, debug: bool):
    """Start the HTTP server."""
    from .server import run_server

    config = ctx.obj["config"]
    config.log_level = "DEBUG" if debug else "INFO"

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]texdoc HTTP server v{__version__}[/]\n"
            f"[dim]Starting on {host}:{port}[/]",
            border_style="cyan",
        )
    )
    console.print()

    run_server(host=host, port=port, debug=debug, config=config)


@cli.command()
@click.pass_context
def mcp(ctx):
    """Serve the operations to an MCP client over stdio."""
    from .mcp_server import run_stdio

    # Nothing may be printed to stdout here: it carries the protocol
    run_stdio(ctx.obj["config"])


# ─── Entry point (for python -m texdoc.cli) ───────────────────────────────────


if __name__ == "__main__":
    cli()
