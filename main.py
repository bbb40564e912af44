"""
texdoc Service: Main Entry Point
================================
Starts the HTTP server over the LaTeX tooling operations.

Usage:
    python main.py                    # Default: 127.0.0.1:5000
    python main.py --port 8000        # Custom port
    python main.py --debug            # Debug mode
"""

import argparse
import logging

from texdoc.engine import ToolConfig
from texdoc.server import run_server

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="texdoc HTTP service")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host")
    parser.add_argument("--port", type=int, default=5000, help="Bind port")
    parser.add_argument("--debug", action="store_true", help="Debug mode")
    parser.add_argument("--log-file", default=None, help="Path to log file")
    args = parser.parse_args()

    config = ToolConfig.from_env()
    if args.debug:
        config.log_level = "DEBUG"
    if args.log_file:
        config.log_file = args.log_file

    logger.info(f"Starting server on {args.host}:{args.port}")
    run_server(host=args.host, port=args.port, debug=args.debug, config=config)


if __name__ == "__main__":
    main()
