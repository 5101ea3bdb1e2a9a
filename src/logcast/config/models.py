"""Pydantic models for logcast configuration."""

from pydantic import BaseModel, Field


class LogcastConfig(BaseModel):
    """Runtime settings for capture sessions and the HTTP surface."""

    buffer_capacity: int = Field(default=10000, ge=1)
    settle_delay_s: float = Field(default=1.0, ge=0.0)
    default_server_url: str = "http://localhost:4723"
    resolve_timeout_s: float = Field(default=5.0, gt=0.0)
    default_max_lines: int = Field(default=100, ge=1)
    stop_wait_s: float = Field(default=0.0, ge=0.0)  # 0 = fire-and-forget
    host: str = "127.0.0.1"
    port: int = Field(default=8095, ge=1, le=65535)
    auth_token: str = ""
