"""Request models for the log tool endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from logcast.capture.models import Platform


class _ToolRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StartLogBroadcastRequest(_ToolRequest):
    """Body of ``start_log_broadcast``."""

    session_id: str = Field(alias="sessionId", min_length=1)
    platform: Platform
    server_url: str | None = Field(default=None, alias="serverUrl")
    device_id: str | None = Field(default=None, alias="deviceId")


class GetLogsRequest(_ToolRequest):
    """Body of ``get_logs``."""

    session_id: str = Field(alias="sessionId", min_length=1)
    max_lines: int | None = Field(default=None, alias="maxLines")


class SessionRequest(_ToolRequest):
    """Body of ``clear_log_buffer``."""

    session_id: str = Field(alias="sessionId", min_length=1)


class StopLogBroadcastRequest(SessionRequest):
    """Body of ``stop_log_broadcast``."""

    wait_timeout: float | None = Field(default=None, alias="waitTimeout", ge=0.0)
