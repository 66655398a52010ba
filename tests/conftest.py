# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/conftest.py

"""
Shared test fixtures for the stowage test suite.
"""

from pathlib import Path

import pytest

from stowage.config.manager import StorageConfig
from stowage.storage.disk import DiskStorage

CONFIG_ENV_VARS = (
    "XDG_CONFIG_HOME",
    "STOWAGE_CONFIG_HOME",
    "STOWAGE_MAX_WORKERS",
    "AWS_DEFAULT_REGION",
    "S3_ENDPOINT_URL",
    "GOOGLE_CLOUD_PROJECT",
)


@pytest.fixture
def storage_config():
    """Small pools and sinks so concurrency paths are exercised."""
    return StorageConfig(max_workers=4, sink_size=2)


@pytest.fixture
def isolated_config_env(tmp_path, monkeypatch):
    """Point config discovery at an empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def source_tree(tmp_path) -> Path:
    """Local project tree with files that put_directory must skip.

    Layout:
        foo.txt
        bar/baz.txt
        bar/deep/qux.txt
        .git/config
        bar/venv/lib/site.py
        .stowage/meta.json
        .mypy_cache/cache.json
    """
    root = tmp_path / "source"
    files = {
        "foo.txt": "hello foo",
        "bar/baz.txt": "hello baz",
        "bar/deep/qux.txt": "hello qux",
        ".git/config": "[core]",
        "bar/venv/lib/site.py": "import os",
        ".stowage/meta.json": "{}",
        ".mypy_cache/cache.json": "{}",
    }
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def disk_storage(tmp_path, storage_config) -> DiskStorage:
    root = tmp_path / "store"
    root.mkdir()
    return DiskStorage(str(root), storage_config)
