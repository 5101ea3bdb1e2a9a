"""Tests for BoundedLineBuffer."""

import pytest

from logcast.capture.buffer import BoundedLineBuffer, split_chunk


class TestBoundedLineBuffer:
    def test_default_capacity(self):
        assert BoundedLineBuffer().capacity == 10000

    def test_invalid_capacity(self):
        with pytest.raises(ValueError, match="positive"):
            BoundedLineBuffer(0)

    def test_overflow_keeps_newest_in_order(self):
        buf = BoundedLineBuffer()
        for i in range(10050):
            buf.push(f"line {i}")
            assert len(buf) <= 10000
        assert len(buf) == 10000
        lines = buf.snapshot_tail(10000)
        assert lines[0] == "line 50"
        assert lines[-1] == "line 10049"
        assert lines == [f"line {i}" for i in range(50, 10050)]

    def test_snapshot_tail(self):
        buf = BoundedLineBuffer()
        for line in ["a", "b", "c"]:
            buf.push(line)
        assert buf.snapshot_tail(2) == ["b", "c"]
        assert buf.snapshot_tail(10) == ["a", "b", "c"]
        assert buf.snapshot_tail(0) == []
        assert len(buf) == 3

    def test_clear_returns_count(self):
        buf = BoundedLineBuffer()
        for i in range(5):
            buf.push(str(i))
        assert buf.clear() == 5
        assert len(buf) == 0
        assert buf.clear() == 0

    def test_push_chunk_skips_blank_fragments(self):
        buf = BoundedLineBuffer(capacity=3)
        pushed = buf.push_chunk("one\n\n   \ntwo\r\nthree\nfour")
        assert pushed == 4
        assert buf.snapshot_tail(3) == ["two", "three", "four"]


class TestSplitChunk:
    def test_partial_line_kept_as_fragment(self):
        assert split_chunk("I/Tag: hello\nI/Ta") == ["I/Tag: hello", "I/Ta"]

    def test_whitespace_only(self):
        assert split_chunk(" \n\t\n") == []
