"""Session registry: the single owner of capture session state."""

import logging
import queue
import threading
from typing import TYPE_CHECKING

from .models import CaptureEvent, EventKind, LogSession, SessionState

if TYPE_CHECKING:
    from .launcher import CaptureProcess

logger = logging.getLogger(__name__)

# Each data event carries at most one 4 KiB read, so a full inbox holds a
# few MiB of undelivered output.
INBOX_CAPACITY = 1024
DISPATCH_INTERVAL = 0.5


class SessionRegistry:
    """Map from session id to LogSession.

    Capture readers post events to the registry inbox; only the registry
    applies them, always under its lock. Scoped to the process lifetime.
    """

    def __init__(self, inbox_capacity: int = INBOX_CAPACITY) -> None:
        self._sessions: dict[str, LogSession] = {}
        self._lock = threading.RLock()
        self._inbox: queue.Queue[CaptureEvent] = queue.Queue(maxsize=inbox_capacity)
        self._pending = threading.Event()
        self._dispatcher: threading.Thread | None = None
        self._stopping = threading.Event()

    def get(self, session_id: str) -> LogSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def set(self, session: LogSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> LogSession | None:
        """Remove a session. Returns the removed session, if any."""
        with self._lock:
            return self._sessions.pop(session_id, None)

    def list(self) -> list[LogSession]:
        """Snapshot of all sessions."""
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def claim(self, session: LogSession) -> LogSession | None:
        """Register ``session`` unless a live one already holds its id.

        Returns:
            The existing live session, or None if ``session`` was stored.
        """
        with self._lock:
            existing = self._sessions.get(session.session_id)
            if existing is not None and existing.is_live:
                return existing
            self._sessions[session.session_id] = session
            return None

    def discard(self, session: LogSession) -> None:
        """Remove ``session`` only if it is still the registered instance."""
        with self._lock:
            current = self._sessions.get(session.session_id)
            if current is not None and current.capture_id == session.capture_id:
                del self._sessions[session.session_id]

    def is_registered(self, session: LogSession) -> bool:
        with self._lock:
            return self._sessions.get(session.session_id) is session

    def attach(self, session: LogSession, process: "CaptureProcess") -> bool:
        """Hand ``process`` to ``session`` if the session is still registered.

        Returns False when the session was stopped in the meantime; the
        caller then owns the process and must signal it.
        """
        with self._lock:
            if not self.is_registered(session):
                return False
            session.process = process
            return True

    def activate(self, session: LogSession) -> bool:
        """Move a registered starting session to streaming."""
        with self._lock:
            if not self.is_registered(session):
                return False
            return session.transition(SessionState.STREAMING)

    def transition(self, session: LogSession, state: SessionState) -> bool:
        with self._lock:
            return session.transition(state)

    # ----- Events -----

    def post(self, event: CaptureEvent) -> None:
        """Queue an event from a capture reader thread.

        Blocks while the inbox is full, which holds the reader (and so the
        capture tool's pipe) back until the next drain.
        """
        self._inbox.put(event)
        self._pending.set()

    def drain(self) -> int:
        """Apply the events pending on entry. Returns the number applied.

        Dequeue and apply both happen under the lock, so concurrent drains
        never reorder a session's chunks. Events posted after entry wait
        for the next drain.
        """
        applied = 0
        with self._lock:
            for _ in range(self._inbox.qsize()):
                try:
                    event = self._inbox.get_nowait()
                except queue.Empty:
                    break
                self._apply(event)
                applied += 1
        return applied

    def _apply(self, event: CaptureEvent) -> None:
        with self._lock:
            session = self._sessions.get(event.session_id)
            if session is None or session.capture_id != event.capture_id:
                logger.debug(
                    "Dropping %s event for stale capture of %s",
                    event.kind.value,
                    event.session_id,
                )
                return

            if event.kind == EventKind.DATA:
                session.buffer.push_chunk(event.payload)
            elif event.kind == EventKind.EXIT:
                session.exit_code = event.payload
                new_state = (
                    SessionState.STOPPED if event.payload == 0 else SessionState.FAILED
                )
                if session.transition(new_state):
                    logger.info(
                        "Capture for %s ended with code %s",
                        session.session_id,
                        event.payload,
                    )
            elif event.kind == EventKind.ERROR:
                logger.error(
                    "%s process error for %s: %s",
                    session.platform.value,
                    session.session_id,
                    event.payload,
                )
                session.transition(SessionState.FAILED)

    # ----- Dispatcher -----

    def start_dispatcher(self) -> None:
        """Apply events continuously on a background thread."""
        if self._dispatcher is not None and self._dispatcher.is_alive():
            return
        self._stopping.clear()
        self._dispatcher = threading.Thread(
            target=self._dispatch_loop, daemon=True, name="logcast-dispatch"
        )
        self._dispatcher.start()
        logger.debug("Event dispatcher started")

    def stop_dispatcher(self, timeout: float = 2.0) -> None:
        if self._dispatcher is None:
            return
        self._stopping.set()
        self._dispatcher.join(timeout=timeout)
        self._dispatcher = None
        self.drain()

    def _dispatch_loop(self) -> None:
        while not self._stopping.is_set():
            if self._pending.wait(DISPATCH_INTERVAL):
                self._pending.clear()
                self.drain()
