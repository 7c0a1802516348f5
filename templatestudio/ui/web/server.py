"""
Composition API server — Flask app factory.

Creates the Flask application exposing the resolver over HTTP.
The catalog is not loaded at startup: clients POST /api/sync first,
as with the wizard's own template sync.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask

from templatestudio.core.context import FailurePolicy
from templatestudio.core.observability.diagnostics import DiagnosticsReporter

logger = logging.getLogger(__name__)

# app.extensions key for per-app composition state
EXTENSION_KEY = "templatestudio"


def create_app(
    catalog_path: Path | None = None,
    failure_policy: FailurePolicy | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        catalog_path: Default catalog for /api/sync requests without a path.
        failure_policy: Missing-dependency policy (default: TS_FAILURE_POLICY).

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)

    app.config["CATALOG_PATH"] = str(catalog_path) if catalog_path else None
    app.config["FAILURE_POLICY"] = (failure_policy or FailurePolicy.from_env()).value
    app.json.sort_keys = False  # keep parameter insertion order

    # Synced repository is set by /api/sync; diagnostics live as long as the app
    app.extensions[EXTENSION_KEY] = {
        "repository": None,
        "diagnostics": DiagnosticsReporter(),
    }

    from templatestudio.ui.web.routes_api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    logger.info("Composition API app created (catalog=%s)", catalog_path)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 8000,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting composition API on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
