"""Bounded in-memory store for captured log lines."""

from collections import deque

DEFAULT_CAPACITY = 10000


def split_chunk(chunk: str) -> list[str]:
    """Split a raw output chunk into non-blank lines.

    A chunk may end mid-line; fragments are not reassembled across chunks.
    """
    return [line.rstrip("\r") for line in chunk.split("\n") if line.strip()]


class BoundedLineBuffer:
    """Fixed-capacity FIFO of text lines. Oldest lines are evicted first."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._lines: deque[str] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._lines)

    def push(self, line: str) -> None:
        """Append a line, evicting from the front past capacity."""
        self._lines.append(line)
        while len(self._lines) > self._capacity:
            self._lines.popleft()

    def push_chunk(self, chunk: str) -> int:
        """Split ``chunk`` on line boundaries and push each non-blank line.

        Returns:
            Number of lines pushed.
        """
        lines = split_chunk(chunk)
        for line in lines:
            self.push(line)
        return len(lines)

    def snapshot_tail(self, n: int) -> list[str]:
        """Return the last ``min(n, len)`` lines in original order."""
        if n <= 0:
            return []
        if n >= len(self._lines):
            return list(self._lines)
        return list(self._lines)[-n:]

    def clear(self) -> int:
        """Empty the buffer and return the number of lines removed."""
        count = len(self._lines)
        self._lines.clear()
        return count
