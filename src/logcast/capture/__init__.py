"""Per-session device log capture."""

from .buffer import BoundedLineBuffer
from .launcher import CaptureProcess, LogCaptureLauncher, StartupFailure
from .models import CaptureEvent, LogSession, Platform, SessionState
from .operations import LogOperations, ToolResult
from .registry import SessionRegistry
from .resolver import DeviceResolver
from .strategies import IosTarget, classify_ios_device, select_strategy

__all__ = [
    "BoundedLineBuffer",
    "CaptureEvent",
    "CaptureProcess",
    "DeviceResolver",
    "IosTarget",
    "LogCaptureLauncher",
    "LogOperations",
    "LogSession",
    "Platform",
    "SessionRegistry",
    "SessionState",
    "StartupFailure",
    "ToolResult",
    "classify_ios_device",
    "select_strategy",
]
