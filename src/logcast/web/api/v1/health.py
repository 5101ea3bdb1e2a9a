"""Health and version API endpoints."""

from flask import Blueprint, jsonify

from logcast import __version__

bp = Blueprint("api_health", __name__)


@bp.route("/api/v1/health")
def health():
    """Health check with session counts."""
    from logcast.web.app import get_services

    registry = get_services()["operations"].registry
    registry.drain()
    sessions = registry.list()
    return jsonify(
        {
            "status": "ok",
            "sessions": len(sessions),
            "streaming": sum(1 for s in sessions if s.is_streaming),
        }
    )


@bp.route("/api/v1/version")
def version():
    return jsonify({"version": __version__, "api_version": "v1", "name": "logcast"})
