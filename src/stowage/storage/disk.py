# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/disk.py

"""Local filesystem backend."""

from __future__ import annotations

import os
import posixpath
import shutil
from pathlib import Path, PurePath
from typing import Iterator, Optional

from loguru import logger

from stowage.config.manager import StorageConfig
from stowage.system.exceptions import NotFoundError
from .base import Storage, ListResult
from .walker import FileToPut, put_directory_files


class DiskStorage(Storage):
    """Storage rooted at a local directory."""

    needs_caching = False

    def __init__(self, root_dir: str, config: Optional[StorageConfig] = None) -> None:
        super().__init__(config)
        self.root_dir = root_dir
        self._base = root_dir or "."
        logger.debug(f"DiskStorage initialized: root={self._base}")

    def _full_path(self, path: str) -> str:
        # Leading slashes are relative to the root, as object keys are
        return os.path.join(self._base, path.lstrip("/"))

    def _relative(self, full_path: str) -> str:
        return PurePath(os.path.relpath(full_path, self._base)).as_posix()

    def root_url(self) -> str:
        return f"file://{self.root_dir}"

    def root_exists(self) -> bool:
        try:
            os.stat(self._base)
        except FileNotFoundError:
            return False
        return True

    def get(self, path: str) -> bytes:
        try:
            with open(self._full_path(path), "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(path, self.root_url())

    def put(self, path: str, data: bytes) -> None:
        full_path = Path(self._full_path(path))
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)

    def _copy_in(self, item: FileToPut) -> None:
        dest_path = Path(self._full_path(item.dest))
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(item.source, dest_path)

    def put_directory(self, local_path: str, storage_path: str) -> None:
        files = put_directory_files(local_path, storage_path)
        logger.debug(f"Copying {len(files)} files from {local_path} to {self._full_path(storage_path)}")
        self._run_parallel(self._copy_in, files)

    def get_directory(self, storage_path: str, local_path: str) -> None:
        source = self._full_path(storage_path)
        if not os.path.isdir(source):
            raise NotFoundError(storage_path, self.root_url())
        shutil.copytree(source, local_path, dirs_exist_ok=True)

    def delete(self, path: str) -> None:
        full_path = self._full_path(path)
        try:
            if os.path.isdir(full_path) and not os.path.islink(full_path):
                shutil.rmtree(full_path)
            else:
                os.unlink(full_path)
        except FileNotFoundError:
            logger.debug(f"Nothing to delete at {full_path}")

    def list(self, path: str) -> list[str]:
        try:
            with os.scandir(self._full_path(path)) as entries:
                names = [entry.name for entry in entries if entry.is_file()]
        except FileNotFoundError:
            return []
        return sorted(posixpath.join(path.strip("/"), name) for name in names)

    def _walk(self, folder: str) -> Iterator[ListResult]:
        start = self._full_path(folder)
        if not os.path.lexists(start):
            return
        if not os.path.isdir(start):
            yield ListResult(self._relative(start))
            return
        yield from self._scan(start)

    def _scan(self, directory: str) -> Iterator[ListResult]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            yield ListResult(self._relative(directory), e)
            return

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                yield ListResult(self._relative(entry.path), e)
                continue
            if is_dir:
                yield from self._scan(entry.path)
            else:
                yield ListResult(self._relative(entry.path))

    def prepare_run_env(self) -> list[str]:
        return []
