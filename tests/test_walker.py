# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_walker.py

"""Tests for the fail-fast directory walk behind put_directory()."""

import os
from unittest.mock import patch

import pytest

from stowage.storage.walker import SKIP_DIRECTORIES, FileToPut, put_directory_files


def test_walk_skips_excluded_directories(source_tree):
    files = put_directory_files(source_tree, "dest")

    assert [f.dest for f in files] == [
        "dest/bar/baz.txt",
        "dest/bar/deep/qux.txt",
        "dest/foo.txt",
    ]


def test_nothing_under_skipped_directories(source_tree):
    files = put_directory_files(source_tree, "")
    for f in files:
        assert not set(f.dest.split("/")) & SKIP_DIRECTORIES


def test_walk_sources_are_absolute(source_tree):
    files = put_directory_files(source_tree, "dest")
    assert FileToPut(
        source=os.path.abspath(source_tree / "bar" / "baz.txt"),
        dest="dest/bar/baz.txt",
    ) in files
    assert all(os.path.isabs(f.source) for f in files)


def test_walk_with_empty_storage_path(source_tree):
    files = put_directory_files(source_tree, "")
    assert "foo.txt" in [f.dest for f in files]


def test_skip_list_matches_exact_names_only(tmp_path):
    (tmp_path / "venv2").mkdir()
    (tmp_path / "venv2" / "kept.txt").write_text("x")
    (tmp_path / "my.git").mkdir()
    (tmp_path / "my.git" / "kept.txt").write_text("x")

    files = put_directory_files(tmp_path, "out")

    assert [f.dest for f in files] == ["out/my.git/kept.txt", "out/venv2/kept.txt"]


def test_skipped_name_as_file_is_kept(tmp_path):
    # Only directories are pruned
    (tmp_path / "venv").write_text("not a directory")
    files = put_directory_files(tmp_path, "")
    assert [f.dest for f in files] == ["venv"]


def test_walk_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        put_directory_files(tmp_path / "missing", "dest")


def test_walk_file_instead_of_directory_raises(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(NotADirectoryError):
        put_directory_files(target, "dest")


def test_walk_aborts_on_first_traversal_error(tmp_path):
    """A traversal error aborts the whole walk instead of returning partial results."""
    def broken_walk(top, onerror=None):
        yield top, ["locked"], ["a.txt"]
        onerror(PermissionError(13, "Permission denied", os.path.join(top, "locked")))
        yield os.path.join(top, "other"), [], ["b.txt"]

    with patch("stowage.storage.walker.os.walk", side_effect=broken_walk):
        with pytest.raises(PermissionError):
            put_directory_files(tmp_path, "dest")


def test_walk_rooted_at_skipped_directory_is_empty(source_tree):
    assert put_directory_files(source_tree / ".git", "dest") == []
    assert put_directory_files(f"{source_tree / '.stowage'}/", "dest") == []
