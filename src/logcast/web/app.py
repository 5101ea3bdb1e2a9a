"""Flask application exposing the log capture tools over HTTP."""

import logging
import os
from typing import Any

from flask import Flask, jsonify

from logcast.capture.operations import LogOperations
from logcast.config.models import LogcastConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Service registry (accessed by blueprints via get_services())
# ---------------------------------------------------------------------------
_services: dict[str, Any] = {}


def get_services() -> dict[str, Any]:
    """Get the global service registry. Called by blueprints."""
    return _services


def create_app(
    config: LogcastConfig | None = None,
    operations: LogOperations | None = None,
    auth_token: str | None = None,
) -> Flask:
    """Create the logcast Flask application.

    Args:
        config: Runtime configuration. Defaults to built-in values.
        operations: Pre-wired operations (tests inject their own).
        auth_token: Bearer token for API authentication; falls back to the
            config value and then ``LOGCAST_AUTH_TOKEN``.
    """
    config = config or LogcastConfig()
    ops = operations or LogOperations.from_config(config)

    app = Flask(__name__)
    app.config["AUTH_TOKEN"] = (
        auth_token or config.auth_token or os.environ.get("LOGCAST_AUTH_TOKEN", "")
    )

    global _services
    _services = {
        "operations": ops,
        "config": config,
    }

    from logcast.web.api.v1.health import bp as health_bp
    from logcast.web.api.v1.logs import bp as logs_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(logs_bp)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    logger.info("logcast web app created")
    return app
