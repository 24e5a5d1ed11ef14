"""Tests for the line reader and advisory locking helpers."""

from __future__ import annotations

import io
import os

import pytest

from pagemark import NO_BOOKMARK
from pagemark.persistence._io import (
    HAVE_FLOCK,
    iter_lines,
    lock_file,
    locked,
    same_file,
    unlock_file,
)

needs_flock = pytest.mark.skipif(not HAVE_FLOCK, reason="fcntl.flock not available")


class TestIterLines:
    def test_keeps_newlines(self):
        fh = io.StringIO("a\nb\n")
        assert list(iter_lines(fh)) == ["a\n", "b\n"]

    def test_unterminated_last_line(self):
        fh = io.StringIO("a\nb")
        assert list(iter_lines(fh)) == ["a\n", "b"]

    def test_empty(self):
        assert list(iter_lines(io.StringIO(""))) == []

    def test_blank_lines_are_lines(self):
        assert list(iter_lines(io.StringIO("\n\n"))) == ["\n", "\n"]

    def test_long_line(self):
        line = "x" * 100_000 + "\n"
        assert list(iter_lines(io.StringIO(line + "y\n"))) == [line, "y\n"]

    def test_lazy(self):
        fh = io.StringIO("a\nb\nc\n")
        lines = iter_lines(fh)
        assert next(lines) == "a\n"
        assert fh.tell() == 2

    def test_restart_continues_from_handle_position(self):
        fh = io.StringIO("a\nb\nc\n")
        first = iter_lines(fh)
        next(first)
        assert list(iter_lines(fh)) == ["b\n", "c\n"]

    def test_crlf_kept_with_newline_none(self, tmp_path):
        path = tmp_path / "f"
        path.write_bytes(b"a\r\nb\n")
        with open(path, encoding="utf-8", newline="") as fh:
            assert list(iter_lines(fh)) == ["a\r\n", "b\n"]


@needs_flock
class TestLocking:
    def test_shared_locks_coexist(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        with open(path) as a, open(path) as b:
            assert lock_file(a)
            assert lock_file(b)
            unlock_file(a)
            unlock_file(b)

    def test_exclusive_blocks_shared(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        with open(path, "r+") as writer, open(path) as reader:
            assert lock_file(writer, exclusive=True)
            assert not lock_file(reader)
            unlock_file(writer)
            assert lock_file(reader)
            unlock_file(reader)

    def test_shared_blocks_exclusive_until_timeout(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        with open(path) as reader, open(path, "r+") as writer:
            assert lock_file(reader)
            assert not lock_file(writer, exclusive=True, timeout=0.05)
            unlock_file(reader)
            assert lock_file(writer, exclusive=True, timeout=0.05)
            unlock_file(writer)

    def test_locked_releases(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        with open(path, "r+") as a, open(path, "r+") as b:
            with locked(a, exclusive=True) as acquired:
                assert acquired
                assert not lock_file(b, exclusive=True)
            assert lock_file(b, exclusive=True)
            unlock_file(b)

    def test_locked_releases_on_error(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        with open(path, "r+") as a, open(path, "r+") as b:
            with pytest.raises(RuntimeError), locked(a, exclusive=True):
                raise RuntimeError("boom")
            assert lock_file(b, exclusive=True)
            unlock_file(b)

    def test_unlock_closed_handle_is_harmless(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("")
        fh = open(path)
        fh.close()
        unlock_file(fh)

    def test_reader_gets_no_bookmark_while_writer_holds_lock(self, store, store_path):
        store.save("/docs/a.pdf", 3)
        with open(store_path, "r+") as writer:
            assert lock_file(writer, exclusive=True)
            assert store.get("/docs/a.pdf") == NO_BOOKMARK
            unlock_file(writer)
        assert store.get("/docs/a.pdf") == 3

    def test_writer_gives_up_after_timeout(self, store, store_path):
        store.save("/docs/a.pdf", 3)
        with open(store_path) as reader:
            assert lock_file(reader)
            assert store.save("/docs/a.pdf", 4) is False
            unlock_file(reader)
        assert store.get("/docs/a.pdf") == 3


class TestSameFile:
    def test_same(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("x")
        with open(path) as fh:
            assert same_file(fh, path)

    @pytest.mark.skipif(os.name != "posix", reason="rename over an open file")
    def test_replaced(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("old")
        with open(path) as fh:
            new = tmp_path / "g"
            new.write_text("new")
            os.replace(new, path)
            assert not same_file(fh, path)

    def test_missing(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("x")
        with open(path) as fh:
            assert not same_file(fh, tmp_path / "gone")
