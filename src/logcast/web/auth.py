"""Bearer-token guard for the logcast tool endpoints."""

import hmac
import logging
from functools import wraps

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _presented_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


def require_auth(f):
    """Reject tool calls that do not carry the configured bearer token.

    The token comes from ``create_app(auth_token=...)``, then
    ``auth_token`` in the config file, then ``LOGCAST_AUTH_TOKEN``. With
    none of those set every call is let through, which suits a capture
    server bound to localhost.
    """

    @wraps(f)
    def decorated(*args, **kwargs):
        expected = current_app.config.get("AUTH_TOKEN", "")
        if not expected:
            return f(*args, **kwargs)

        token = _presented_token()
        if token is None:
            return jsonify({"error": "Missing or invalid authorization"}), 401
        if not hmac.compare_digest(token, expected):
            logger.warning(
                "Rejected %s %s: bad token from %s",
                request.method,
                request.path,
                request.remote_addr,
            )
            return jsonify({"error": "Invalid authentication token"}), 403

        return f(*args, **kwargs)

    return decorated
