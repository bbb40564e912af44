"""
Module entry point for: python -m texdoc

    python -m texdoc errors <project> [--warnings]
    python -m texdoc serve [options]
    python -m texdoc mcp
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
