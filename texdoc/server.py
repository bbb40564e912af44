"""
HTTP Microservice
=================
Flask-based HTTP API over the tool catalog.

Endpoints:
    GET    /api/health        → Health check
    GET    /api/info          → Version and capability info
    GET    /api/tools         → Operation catalog with argument schemas
    POST   /api/tools/<name>  → Run an operation (JSON object body)
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from . import __version__
from .engine import ToolConfig, ToolEngine
from .tools import TOOL_CATALOG, TOOLS, call_tool

logger = logging.getLogger(__name__)


def create_app(config: Optional[ToolConfig] = None) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    CORS(app)

    engine = ToolEngine(config or ToolConfig.from_env())
    app.config["TOOL_ENGINE"] = engine

    # ─── Health / Info ────────────────────────────────────────────────────

    @app.route("/api/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "service": "texdoc",
            "version": __version__,
            "tools": len(TOOL_CATALOG),
        })

    @app.route("/api/info", methods=["GET"])
    def info():
        """Version and capability info."""
        return jsonify({
            "version": __version__,
            "renderer": "PyMuPDF",
            "engines": ["xelatex", "pdflatex", "lualatex"],
            "capabilities": [spec.name for spec in TOOL_CATALOG],
        })

    # ─── Tools ────────────────────────────────────────────────────────────

    @app.route("/api/tools", methods=["GET"])
    def list_tools():
        """List every operation with its JSON argument schema."""
        return jsonify({
            "tools": [
                {
                    "name": spec.name,
                    "description": spec.description,
                    "input_schema": spec.input_schema,
                }
                for spec in TOOL_CATALOG
            ]
        })

    @app.route("/api/tools/<name>", methods=["POST"])
    def run_tool(name: str):
        """
        Run an operation.

        Body: JSON object of named arguments (may be empty).
        Returns {"tool", "content", "is_error"}.
        """
        arguments = request.get_json(silent=True)
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        result = call_tool(name, arguments, engine=app.config["TOOL_ENGINE"])
        payload = {
            "tool": name,
            "content": result.text,
            "is_error": result.is_error,
        }

        if name not in TOOLS:
            return jsonify(payload), 404
        if result.is_error:
            return jsonify(payload), 400
        return jsonify(payload)

    return app


# ─── Run Server ──────────────────────────────────────────────────────────────


def run_server(
    host: str = "127.0.0.1",
    port: int = 5000,
    debug: bool = False,
    config: Optional[ToolConfig] = None,
):
    """Start the HTTP server."""
    app = create_app(config)
    logger.info(f"Starting server on {host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_server(debug=True)
