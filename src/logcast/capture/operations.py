"""Public log capture operations: start, stop, get, clear and list."""

import logging
from dataclasses import dataclass, field
from typing import Any

from logcast.config.models import LogcastConfig

from .launcher import LogCaptureLauncher
from .models import LogSession, Platform, SessionState
from .registry import SessionRegistry
from .resolver import DeviceResolver

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Single textual result block returned by every operation."""

    text: str
    is_error: bool = False
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
            "structuredContent": self.data,
        }


def _not_found(session_id: str, hint: str = "") -> ToolResult:
    text = f"No active log session found for {session_id}"
    if hint:
        text = f"{text}. {hint}"
    return ToolResult(text, data={"found": False, "session_id": session_id})


def _status_label(session: LogSession) -> str:
    return session.state.value.capitalize()


class LogOperations:
    """Orchestrates resolver, launcher and registry for each operation.

    The registry is injected so several independent operation sets (for
    example one per test) never share hidden state.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        launcher: LogCaptureLauncher,
        resolver: DeviceResolver,
        config: LogcastConfig | None = None,
    ) -> None:
        self.registry = registry
        self.launcher = launcher
        self.resolver = resolver
        self.config = config or LogcastConfig()

    @classmethod
    def from_config(cls, config: LogcastConfig) -> "LogOperations":
        """Wire a fresh registry, launcher and resolver from ``config``."""
        registry = SessionRegistry()
        launcher = LogCaptureLauncher(
            registry,
            settle_delay=config.settle_delay_s,
            buffer_capacity=config.buffer_capacity,
        )
        resolver = DeviceResolver(timeout=config.resolve_timeout_s)
        return cls(registry, launcher, resolver, config)

    def start(
        self,
        session_id: str,
        platform: str | Platform,
        server_url: str | None = None,
        device_id: str | None = None,
    ) -> ToolResult:
        """Start capturing device logs for a session.

        Raises:
            StartupFailure: If the capture tool fails to start.
        """
        platform = Platform(platform)
        server_url = server_url or self.config.default_server_url
        self.registry.drain()

        existing = self.registry.get(session_id)
        if existing is not None and existing.is_live:
            return self._already_active(existing)

        if not device_id:
            device_id = self.resolver.resolve(server_url, session_id)

        session, created = self.launcher.launch(
            session_id, platform, device_id, server_url
        )
        if not created:
            return self._already_active(session)

        lines = [
            f"Started {'Android' if platform == Platform.ANDROID else 'iOS'} "
            f"log streaming for session {session_id}",
            f"Device: {session.device_id or 'default device'}",
        ]
        if platform == Platform.IOS:
            lines.append(f"Type: {session.tool_name}")
        lines.extend(
            [
                f"Command: {session.command}",
                "",
                "Logs are being captured in real-time. Use 'get_logs' to retrieve them.",
                "Tip: Wait a few seconds for logs to buffer, then call get_logs to see them.",
            ]
        )
        return ToolResult("\n".join(lines), data=session.to_dict())

    def stop(self, session_id: str, wait_timeout: float | None = None) -> ToolResult:
        """Stop a session's capture and remove it from the registry.

        The termination signal is fire-and-forget unless ``wait_timeout``
        (or ``stop_wait_s`` in the config) is positive, in which case exit
        is awaited for at most that long.
        """
        self.registry.drain()
        # Removing first means a launch still in progress can no longer
        # attach a process this stop would miss.
        session = self.registry.delete(session_id)
        if session is None:
            return _not_found(session_id)

        log_count = len(session.buffer)
        notes: list[str] = []
        signalled = False
        process = session.process

        if process is not None:
            try:
                signalled = process.terminate()
                if signalled:
                    logger.info(
                        "Stopped %s log process for %s",
                        session.platform.value,
                        session_id,
                    )
            except OSError as e:
                logger.warning("Failed to signal log process for %s: %s", session_id, e)
                notes.append(f"Warning: could not signal capture process: {e}")

        self.registry.transition(session, SessionState.STOPPED)
        session.process = None

        timeout = self.config.stop_wait_s if wait_timeout is None else wait_timeout
        exit_confirmed = None
        if signalled and timeout > 0:
            exit_confirmed = process.wait(timeout)
            if exit_confirmed:
                notes.append("Capture process exit confirmed.")
            else:
                notes.append(f"Capture process did not exit within {timeout:g}s.")

        lines = [
            f"Stopped log streaming for session {session_id}",
            f"Device: {session.device_label}",
            f"Total logs captured: {log_count} lines",
            *notes,
        ]
        return ToolResult(
            "\n".join(lines),
            data={
                "found": True,
                "session_id": session_id,
                "total": log_count,
                "signalled": signalled,
                "exit_confirmed": exit_confirmed,
            },
        )

    def get(self, session_id: str, max_lines: int | None = None) -> ToolResult:
        """Return the most recent buffered lines for a session."""
        if not max_lines or max_lines <= 0:
            max_lines = self.config.default_max_lines
        self.registry.drain()
        session = self.registry.get(session_id)
        if session is None:
            return _not_found(session_id, "Use 'start_log_broadcast' first.")

        logs = session.buffer.snapshot_tail(max_lines)
        total = len(session.buffer)
        truncated = total > max_lines

        text = (
            f"=== {session.platform.value.upper()} Logs for Session {session_id} ===\n"
            f"Status: {_status_label(session)}\n"
            f"Device: {session.device_label}\n"
            f"Total logs captured: {total}\n"
            f"Showing last {len(logs)} lines:\n\n" + "\n".join(logs)
        )
        if truncated:
            text += (
                f"\n\n(Showing {len(logs)} of {total} total lines. "
                "Increase maxLines to see more.)"
            )
        return ToolResult(
            text,
            data={
                "found": True,
                "session_id": session_id,
                "state": session.state.value,
                "lines": logs,
                "total": total,
                "shown": len(logs),
                "truncated": truncated,
            },
        )

    def clear(self, session_id: str) -> ToolResult:
        """Empty a session's buffer while its capture keeps running."""
        self.registry.drain()
        session = self.registry.get(session_id)
        if session is None:
            return _not_found(session_id)

        cleared = session.buffer.clear()
        return ToolResult(
            f"Cleared {cleared} log lines from buffer for session {session_id}. "
            "Log streaming continues.",
            data={"found": True, "session_id": session_id, "cleared": cleared},
        )

    def list(self) -> ToolResult:
        """Summarize every registered session."""
        self.registry.drain()
        sessions = self.registry.list()
        if not sessions:
            return ToolResult("No active log streaming sessions.", data={"sessions": []})

        blocks = [
            f"- Session: {s.session_id}\n"
            f"  Platform: {s.platform.value}\n"
            f"  Device: {s.device_label}\n"
            f"  Server: {s.server_url}\n"
            f"  Status: {_status_label(s)}\n"
            f"  Logs buffered: {len(s.buffer)}"
            for s in sessions
        ]
        return ToolResult(
            f"Active Log Sessions ({len(sessions)}):\n\n" + "\n\n".join(blocks),
            data={"sessions": [s.to_dict() for s in sessions]},
        )

    def _already_active(self, session: LogSession) -> ToolResult:
        return ToolResult(
            f"Log streaming is already active for session {session.session_id}\n"
            f"Device: {session.device_label}",
            data=session.to_dict(),
        )

    def shutdown(self) -> int:
        """Stop every registered session. Returns the number stopped."""
        stopped = 0
        for session in self.registry.list():
            self.stop(session.session_id)
            stopped += 1
        if stopped:
            logger.info("Stopped %d log session(s) on shutdown", stopped)
        return stopped
