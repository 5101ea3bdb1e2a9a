"""Spawning and supervising external log capture processes."""

import codecs
import logging
import os
import signal
import subprocess
import threading
import time
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING

from .buffer import DEFAULT_CAPACITY, BoundedLineBuffer
from .models import CaptureEvent, EventKind, LogSession, Platform, SessionState
from .strategies import (
    CaptureStrategy,
    DeviceClassifier,
    classify_ios_device,
    select_strategy,
)

if TYPE_CHECKING:
    from .registry import SessionRegistry

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class StartupFailure(RuntimeError):
    """Raised when a capture process cannot be started or dies immediately."""

    def __init__(
        self, message: str, platform: Platform, exit_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.platform = platform
        self.exit_code = exit_code


def _stopped_while_starting(session_id: str, platform: Platform) -> StartupFailure:
    return StartupFailure(
        f"Log capture for session {session_id} was stopped while starting.",
        platform,
    )


class CaptureProcess:
    """Owns one spawned capture process and its reader threads.

    Readers never touch session state; they post CaptureEvents through
    ``post`` and the registry applies them.
    """

    def __init__(
        self,
        proc: subprocess.Popen,
        capture_id: str,
        session_id: str,
        strategy: CaptureStrategy,
        post: Callable[[CaptureEvent], None],
    ) -> None:
        self._proc = proc
        self.capture_id = capture_id
        self.session_id = session_id
        self.strategy = strategy
        self._post = post
        self._has_output = threading.Event()
        self._stdout_thread: threading.Thread | None = None

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def has_output(self) -> bool:
        return self._has_output.is_set()

    def start_readers(self) -> None:
        """Start the stdout, stderr and exit watcher threads."""
        self._stdout_thread = threading.Thread(
            target=self._read_stdout,
            daemon=True,
            name=f"capture-stdout-{self.session_id}",
        )
        self._stdout_thread.start()
        threading.Thread(
            target=self._read_stderr,
            daemon=True,
            name=f"capture-stderr-{self.session_id}",
        ).start()
        threading.Thread(
            target=self._watch_exit,
            daemon=True,
            name=f"capture-exit-{self.session_id}",
        ).start()

    def poll(self) -> int | None:
        return self._proc.poll()

    def terminate(self) -> bool:
        """Send SIGTERM to the capture process.

        Shell-launched captures run in their own process group, which is
        signalled as a whole so the tool itself receives the signal. A
        process that has already been reaped is left alone, since its pid
        may belong to something else by now.

        Returns:
            True if a signal was sent, False if the process had already exited.

        Raises:
            OSError: If the signal could not be delivered.
        """
        if self._proc.poll() is not None:
            return False
        if self.strategy.use_shell:
            os.killpg(os.getpgid(self._proc.pid), signal.SIGTERM)
        else:
            self._proc.send_signal(signal.SIGTERM)
        return True

    def wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for exit. Returns True if exited."""
        try:
            self._proc.wait(timeout=timeout)
            return True
        except subprocess.TimeoutExpired:
            return False

    def _emit(self, kind: EventKind, payload: object = None) -> None:
        self._post(CaptureEvent(self.capture_id, self.session_id, kind, payload))

    def _read_stdout(self) -> None:
        stream = self._proc.stdout
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                chunk = stream.read1(READ_CHUNK_SIZE)
                if not chunk:
                    break
                self._has_output.set()
                self._emit(EventKind.DATA, decoder.decode(chunk))
        except (OSError, ValueError) as e:
            logger.error(
                "%s stdout reader failed for %s: %s",
                self.strategy.tool_name,
                self.session_id,
                e,
            )
            self._emit(EventKind.ERROR, str(e))

    def _read_stderr(self) -> None:
        stream = self._proc.stderr
        if stream is None:
            return
        try:
            for raw in iter(stream.readline, b""):
                line = raw.decode(errors="replace").rstrip()
                if line and self.strategy.forward_stderr(line):
                    logger.warning("%s stderr: %s", self.strategy.tool_name, line)
        except (OSError, ValueError) as e:
            logger.debug("stderr reader ended for %s: %s", self.session_id, e)

    def _watch_exit(self) -> None:
        # Exit is posted after stdout is drained so data events precede it.
        code = self._proc.wait()
        if self._stdout_thread is not None:
            self._stdout_thread.join()
        logger.info(
            "%s process closed with code %s (session %s)",
            self.strategy.tool_name,
            code,
            self.session_id,
        )
        self._emit(EventKind.EXIT, code)


class LogCaptureLauncher:
    """Starts capture processes and registers their sessions."""

    def __init__(
        self,
        registry: "SessionRegistry",
        settle_delay: float = 1.0,
        buffer_capacity: int = DEFAULT_CAPACITY,
        classifier: DeviceClassifier = classify_ios_device,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._registry = registry
        self.settle_delay = settle_delay
        self.buffer_capacity = buffer_capacity
        self._classifier = classifier
        self._popen = popen
        self._sleep = sleep

    def launch(
        self,
        session_id: str,
        platform: Platform,
        device_id: str | None,
        server_url: str,
    ) -> tuple[LogSession, bool]:
        """Spawn a capture process for ``session_id``.

        Returns:
            ``(session, created)``. ``created`` is False when a live session
            already existed and was returned untouched.

        Raises:
            StartupFailure: If the tool cannot be spawned or exits within
                the settle delay.
        """
        strategy = select_strategy(platform, device_id, self._classifier)
        command = strategy.build_command(device_id)

        session = LogSession(
            session_id=session_id,
            server_url=server_url,
            platform=platform,
            buffer=BoundedLineBuffer(self.buffer_capacity),
            capture_id=uuid.uuid4().hex,
            device_id=device_id,
            command=strategy.display_command(device_id),
            tool_name=strategy.tool_name,
        )
        existing = self._registry.claim(session)
        if existing is not None:
            return existing, False

        logger.info("Starting %s logs: %s", platform.value, session.command)

        try:
            proc = self._popen(
                command,
                shell=strategy.use_shell,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=strategy.use_shell,
            )
        except OSError as e:
            self._abort(session)
            raise StartupFailure(
                f"{strategy.failure_hint(None)} ({e})", platform
            ) from e

        process = CaptureProcess(
            proc, session.capture_id, session_id, strategy, self._registry.post
        )
        if not self._registry.attach(session, process):
            self._release(process)
            raise _stopped_while_starting(session_id, platform)
        process.start_readers()

        # Only fast failures are caught here; a tool that dies later is
        # observed through its exit event.
        self._sleep(self.settle_delay)
        if not self._registry.is_registered(session):
            # A concurrent stop removed the session and signalled the process.
            raise _stopped_while_starting(session_id, platform)
        exit_code = process.poll()
        if exit_code is not None:
            self._abort(session)
            session.exit_code = exit_code
            raise StartupFailure(strategy.failure_hint(exit_code), platform, exit_code)

        if not self._registry.activate(session):
            raise _stopped_while_starting(session_id, platform)
        if not process.has_output:
            logger.warning(
                "No log data received yet for %s, but process is running",
                session_id,
            )
        return session, True

    def _release(self, process: CaptureProcess) -> None:
        try:
            process.terminate()
        except OSError as e:
            logger.warning(
                "Failed to signal orphaned log process for %s: %s",
                process.session_id,
                e,
            )

    def _abort(self, session: LogSession) -> None:
        self._registry.discard(session)
        session.transition(SessionState.FAILED)
        session.process = None
