# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_cli.py

"""Tests for the stowage command line interface."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from stowage.cli import app
from stowage.storage import ListResult
from stowage.system.exceptions import AuthenticationError

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(isolated_config_env, monkeypatch):
    # Keep rich from wrapping long temporary paths
    monkeypatch.setenv("COLUMNS", "250")
    return isolated_config_env


@pytest.fixture
def store(tmp_path) -> Path:
    root = tmp_path / "store"
    (root / "data" / "nested").mkdir(parents=True)
    (root / "data" / "a.txt").write_text("alpha")
    (root / "data" / "nested" / "b.txt").write_text("beta")
    (root / "top.txt").write_text("[bold]not markup[/bold]")
    return root


def test_ls_lists_one_level(store):
    result = runner.invoke(app, ["ls", str(store), "data"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["data/a.txt"]


def test_ls_root(store):
    result = runner.invoke(app, ["ls", f"file://{store}"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["top.txt"]


def test_ls_recursive(store):
    result = runner.invoke(app, ["ls", "-r", str(store), "data"])
    assert result.exit_code == 0
    assert sorted(result.output.splitlines()) == ["data/a.txt", "data/nested/b.txt"]


def test_ls_recursive_reports_errors(store):
    storage = MagicMock()
    storage.iter_recursive.return_value = [
        ListResult("data/a.txt"),
        ListResult("data", PermissionError("denied")),
    ]
    with patch("stowage.cli.for_url", return_value=storage):
        result = runner.invoke(app, ["ls", "-r", str(store), "data"])

    assert result.exit_code == 1
    assert "data/a.txt" in result.output
    assert "denied" in result.output


def test_cat_prints_object_verbatim(store):
    result = runner.invoke(app, ["cat", str(store), "top.txt"])
    assert result.exit_code == 0
    assert result.output == "[bold]not markup[/bold]"


def test_cat_missing_object(store):
    result = runner.invoke(app, ["cat", str(store), "missing.txt"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_unknown_scheme():
    result = runner.invoke(app, ["ls", "ftp://host/path"])
    assert result.exit_code == 1
    assert "Unknown storage backend: ftp" in result.output


def test_bad_config_is_reported(cli_env, store):
    config_dir = cli_env / ".config" / "stowage"
    config_dir.mkdir(parents=True)
    (config_dir / "stowage.yml").write_text("max_workers: -1\n")

    result = runner.invoke(app, ["ls", str(store)])

    assert result.exit_code == 1
    assert "loading configuration" in result.output


def test_env_for_disk_is_empty(store):
    result = runner.invoke(app, ["env", str(store)])
    assert result.exit_code == 0
    assert result.output == ""


def test_put_and_get_round_trip(tmp_path, source_tree):
    target = tmp_path / "target"
    target.mkdir()

    result = runner.invoke(app, ["put", str(source_tree), str(target), "--dest", "proj"])
    assert result.exit_code == 0, result.output
    assert (target / "proj" / "bar" / "baz.txt").read_text() == "hello baz"
    assert not (target / "proj" / ".git").exists()

    download = tmp_path / "download"
    result = runner.invoke(app, ["get", str(target), str(download), "--src", "proj"])
    assert result.exit_code == 0, result.output
    assert (download / "foo.txt").read_text() == "hello foo"


def test_get_missing_directory(store, tmp_path):
    result = runner.invoke(app, ["get", str(store), str(tmp_path / "out"), "--src", "nothing"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_rm_subtree(store):
    result = runner.invoke(app, ["rm", str(store), "data"])
    assert result.exit_code == 0
    assert not (store / "data").exists()
    assert (store / "top.txt").exists()


def test_upload_passes_options(tmp_path, source_tree):
    key = tmp_path / "key"
    with patch("stowage.cli.remote_upload") as mock_upload:
        result = runner.invoke(app, [
            "upload", str(source_tree), "/srv/in",
            "--host", "example.org", "--port", "2222", "--user", "deploy", "--key", str(key),
        ])

    assert result.exit_code == 0, result.output
    local_dir, options, remote_dir = mock_upload.call_args.args
    assert local_dir == source_tree
    assert remote_dir == "/srv/in"
    assert options.host == "example.org"
    assert options.port == 2222
    assert options.username == "deploy"
    assert options.private_keys == [key]


def test_upload_failure(source_tree):
    with patch("stowage.cli.remote_upload", side_effect=AuthenticationError("denied")):
        result = runner.invoke(app, ["upload", str(source_tree), "/srv/in", "--host", "example.org"])
    assert result.exit_code == 1
    assert "denied" in result.output


def test_version():
    with patch("stowage.cli.version", return_value="1.2.3"):
        result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "stowage version 1.2.3" in result.output
