"""Log capture tool endpoints.

Each tool accepts a JSON body and returns a single text result block.
"""

import logging
from collections.abc import Callable
from typing import Any

from flask import Blueprint, jsonify, request
from pydantic import BaseModel, ValidationError

from logcast.capture.launcher import StartupFailure
from logcast.capture.operations import LogOperations, ToolResult
from logcast.web.auth import require_auth
from logcast.web.models import (
    GetLogsRequest,
    SessionRequest,
    StartLogBroadcastRequest,
    StopLogBroadcastRequest,
)

logger = logging.getLogger(__name__)

bp = Blueprint("api_logs", __name__, url_prefix="/api/v1")


def _get_operations() -> LogOperations:
    from logcast.web.app import get_services

    return get_services()["operations"]


def _start(ops: LogOperations, body: StartLogBroadcastRequest) -> ToolResult:
    return ops.start(body.session_id, body.platform, body.server_url, body.device_id)


def _get(ops: LogOperations, body: GetLogsRequest) -> ToolResult:
    return ops.get(body.session_id, body.max_lines)


def _clear(ops: LogOperations, body: SessionRequest) -> ToolResult:
    return ops.clear(body.session_id)


def _stop(ops: LogOperations, body: StopLogBroadcastRequest) -> ToolResult:
    return ops.stop(body.session_id, body.wait_timeout)


def _list(ops: LogOperations, body: BaseModel) -> ToolResult:
    return ops.list()


class _Empty(BaseModel):
    pass


# name -> (request model, handler, route, description, read-only)
TOOLS: dict[str, tuple[type[BaseModel], Callable[..., ToolResult], str, str, bool]] = {
    "start_log_broadcast": (
        StartLogBroadcastRequest,
        _start,
        "/api/v1/logs/start",
        "Start capturing device logs directly from the device. Uses adb logcat "
        "for Android and idevicesyslog/simctl for iOS.",
        False,
    ),
    "get_logs": (
        GetLogsRequest,
        _get,
        "/api/v1/logs/get",
        "Get captured logs from the buffer since log broadcasting started.",
        True,
    ),
    "clear_log_buffer": (
        SessionRequest,
        _clear,
        "/api/v1/logs/clear",
        "Clear the log buffer for a session while keeping the broadcast active.",
        False,
    ),
    "stop_log_broadcast": (
        StopLogBroadcastRequest,
        _stop,
        "/api/v1/logs/stop",
        "Stop streaming device logs for an active session.",
        False,
    ),
    "list_log_sessions": (
        _Empty,
        _list,
        "/api/v1/logs/list",
        "List all active log streaming sessions with their status.",
        True,
    ),
}


def _invoke(name: str, data: dict[str, Any]):
    model, handler, _, _, _ = TOOLS[name]
    try:
        body = model(**data)
    except ValidationError as e:
        return jsonify({"error": f"Invalid {name} request: {e}"}), 400

    try:
        result = handler(_get_operations(), body)
    except StartupFailure as e:
        logger.error("%s failed: %s", name, e)
        return jsonify(ToolResult(str(e), is_error=True).to_dict()), 500

    return jsonify(result.to_dict())


def _json_body() -> dict[str, Any] | None:
    data = request.get_json(silent=True)
    if data is None and not request.get_data():
        return {}
    if not isinstance(data, dict):
        return None
    return data


@bp.route("/tools")
@require_auth
def list_tools():
    """Tool catalogue."""
    return jsonify(
        [
            {
                "name": name,
                "description": description,
                "route": route,
                "readOnlyHint": read_only,
                "inputSchema": model.model_json_schema(by_alias=True),
            }
            for name, (model, _, route, description, read_only) in TOOLS.items()
        ]
    )


@bp.route("/tools/<name>", methods=["POST"])
@require_auth
def call_tool(name):
    """Invoke a tool by name."""
    if name not in TOOLS:
        return jsonify({"error": f"Unknown tool: {name}"}), 404
    data = _json_body()
    if data is None:
        return jsonify({"error": "Invalid JSON body"}), 400
    return _invoke(name, data)


def _route(name: str):
    def view():
        data = _json_body()
        if data is None:
            return jsonify({"error": "Invalid JSON body"}), 400
        return _invoke(name, data)

    view.__name__ = name
    view.__doc__ = TOOLS[name][3]
    return require_auth(view)


bp.add_url_rule("/logs/start", view_func=_route("start_log_broadcast"), methods=["POST"])
bp.add_url_rule("/logs/get", view_func=_route("get_logs"), methods=["POST"])
bp.add_url_rule("/logs/clear", view_func=_route("clear_log_buffer"), methods=["POST"])
bp.add_url_rule("/logs/stop", view_func=_route("stop_log_broadcast"), methods=["POST"])
bp.add_url_rule(
    "/logs/list", view_func=_route("list_log_sessions"), methods=["GET", "POST"]
)
