"""Session and event models for log capture."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from .buffer import BoundedLineBuffer

if TYPE_CHECKING:
    from .launcher import CaptureProcess

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """Mobile platform a capture session targets."""

    ANDROID = "android"
    IOS = "ios"


class SessionState(str, Enum):
    """Lifecycle state of a capture session."""

    STARTING = "starting"
    STREAMING = "streaming"
    STOPPED = "stopped"
    FAILED = "failed"


class EventKind(str, Enum):
    """Kinds of events a capture process emits."""

    DATA = "data"
    EXIT = "exit"
    ERROR = "error"


# Allowed (from_state, to_state) pairs.
_TRANSITIONS = {
    (SessionState.STARTING, SessionState.STREAMING),
    (SessionState.STARTING, SessionState.FAILED),
    (SessionState.STARTING, SessionState.STOPPED),
    (SessionState.STREAMING, SessionState.STOPPED),
    (SessionState.STREAMING, SessionState.FAILED),
}


@dataclass(frozen=True)
class CaptureEvent:
    """A lifecycle or data event posted by a capture process reader."""

    capture_id: str
    session_id: str
    kind: EventKind
    payload: Any = None


@dataclass
class LogSession:
    """One active or recently-active log capture."""

    session_id: str
    server_url: str
    platform: Platform
    buffer: BoundedLineBuffer
    capture_id: str
    device_id: str | None = None
    process: "CaptureProcess | None" = None
    state: SessionState = SessionState.STARTING
    command: str = ""
    tool_name: str = ""
    exit_code: int | None = None
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def is_streaming(self) -> bool:
        return self.state == SessionState.STREAMING

    @property
    def is_live(self) -> bool:
        """True while the capture process is starting or streaming."""
        return self.state in (SessionState.STARTING, SessionState.STREAMING)

    @property
    def device_label(self) -> str:
        return self.device_id or "default"

    def transition(self, new_state: SessionState) -> bool:
        """Move to ``new_state`` if the transition is allowed.

        Returns:
            True if the state changed.
        """
        if (self.state, new_state) not in _TRANSITIONS:
            logger.debug(
                "Ignoring transition %s -> %s for session %s",
                self.state.value,
                new_state.value,
                self.session_id,
            )
            return False
        self.state = new_state
        return True

    def to_dict(self) -> dict[str, Any]:
        """Serialize session info for API responses."""
        return {
            "session_id": self.session_id,
            "platform": self.platform.value,
            "device_id": self.device_id,
            "server_url": self.server_url,
            "state": self.state.value,
            "is_streaming": self.is_streaming,
            "buffered": len(self.buffer),
            "command": self.command,
            "started_at": self.started_at.isoformat(),
        }
