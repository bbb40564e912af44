"""
LaTeX Compiler
==============
Runs latexmk (full compile) or a single engine pass on a project and
collects the exit status and combined output.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import CompilerError, InvalidArgumentError
from .models import Engine

logger = logging.getLogger(__name__)

# Output lines worth showing when a compile fails
FAILURE_MARKERS = ("!", "Error", "error:")
MAX_EXCERPT_LINES = 20


@dataclass
class CompilerRun:
    """Raw result of one compiler process."""
    command: list[str]
    exit_code: int
    output: str


def resolve_engine(name: str) -> Engine:
    """Map an engine name to Engine, rejecting anything unsupported."""
    try:
        return Engine(name.strip().lower())
    except ValueError:
        supported = ", ".join(e.value for e in Engine)
        raise InvalidArgumentError(
            f"Unsupported engine '{name}' (expected one of: {supported})"
        ) from None


def build_command(engine: Engine, main_file: str, full_compile: bool) -> list[str]:
    """latexmk resolves cross references with as many passes as needed."""
    source = f"{main_file}.tex"
    flags = ["-interaction=nonstopmode", "-file-line-error"]
    if full_compile:
        return ["latexmk", f"-{engine.value}", *flags, source]
    return [engine.value, *flags, source]


def failure_excerpt(output: str, limit: int = MAX_EXCERPT_LINES) -> list[str]:
    """First `limit` output lines containing a failure marker."""
    lines = [
        line for line in output.splitlines()
        if any(marker in line for marker in FAILURE_MARKERS)
    ]
    return lines[:limit]


class LatexCompiler:
    """Subprocess wrapper around the TeX toolchain."""

    def __init__(self, timeout: float = 300):
        self.timeout = timeout

    def run(
        self,
        project_dir: Path,
        main_file: str,
        engine: Engine,
        full_compile: bool = True,
    ) -> CompilerRun:
        """
        Compile `main_file`.tex inside `project_dir`.

        Raises:
            CompilerError: If the toolchain is not installed or times out.
        """
        cmd = build_command(engine, main_file, full_compile)
        logger.info(f"Running {' '.join(cmd)} in {project_dir}")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(project_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CompilerError(
                f"Unable to run {cmd[0]}: {e}. "
                "Make sure TeX Live or MacTeX is installed"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CompilerError(
                f"{cmd[0]} did not finish within {self.timeout:g}s"
            ) from e

        output = (result.stdout or b"").decode("utf-8", errors="replace")
        logger.info(f"{cmd[0]} exited with code {result.returncode}")
        return CompilerRun(
            command=cmd,
            exit_code=result.returncode,
            output=output,
        )
