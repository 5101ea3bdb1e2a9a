"""Fake subprocess handles for capture tests."""

import io
import subprocess
import threading
import time


class FakeProcess:
    """Stands in for subprocess.Popen with in-memory pipes."""

    def __init__(self, stdout=b"", stderr=b"", exit_code=None, pid=4242):
        self.stdout = io.BytesIO(stdout)
        self.stderr = io.BytesIO(stderr)
        self.pid = pid
        self.returncode = exit_code
        self.signals = []
        self._exited = threading.Event()
        if exit_code is not None:
            self._exited.set()

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        if not self._exited.wait(timeout):
            raise subprocess.TimeoutExpired("fake", timeout)
        return self.returncode

    def send_signal(self, sig):
        self.signals.append(sig)
        self.finish(-sig)

    def finish(self, code):
        self.returncode = code
        self._exited.set()


class FakePopen:
    """Callable recording spawn calls and returning queued FakeProcess objects."""

    def __init__(self, *processes):
        self.processes = list(processes)
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        if self.processes:
            return self.processes.pop(0)
        return FakeProcess()


def wait_for(registry, predicate, timeout=2.0):
    """Drain registry events until ``predicate()`` holds or time runs out."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        registry.drain()
        if predicate():
            return True
        threading.Event().wait(0.01)
    registry.drain()
    return predicate()
