# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/gcs.py

"""Google Cloud Storage backend. Same key layout as the S3 backend."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Iterator, Optional

from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.cloud import storage as gcs
from loguru import logger

from stowage.config.manager import StorageConfig
from stowage.system.exceptions import NotFoundError
from .base import Storage, ListResult
from .walker import FileToPut, put_directory_files


class GCSStorage(Storage):
    """Storage rooted at a prefix inside a GCS bucket."""

    def __init__(self, bucket: str, root: str, config: Optional[StorageConfig] = None,
                 client=None) -> None:
        super().__init__(config)
        self.bucket_name = bucket
        self.root = root.strip("/")
        self.client = client or gcs.Client(project=self.config.gcs.project)
        self.bucket = self.client.bucket(bucket)
        logger.debug(f"GCSStorage initialized: bucket={bucket} root={self.root!r}")

    def _key(self, path: str) -> str:
        path = path.strip("/")
        if not self.root:
            return path
        return posixpath.join(self.root, path) if path else self.root

    def _prefix(self, path: str) -> str:
        key = self._key(path)
        return f"{key}/" if key else ""

    def _relative(self, name: str) -> str:
        if self.root:
            return name[len(self.root) + 1:]
        return name

    def _iter_names(self, prefix: str, delimiter: Optional[str] = None) -> Iterator[str]:
        blobs = self.client.list_blobs(self.bucket_name, prefix=prefix or None, delimiter=delimiter)
        for blob in blobs:
            if not blob.name.endswith('/'):
                yield blob.name

    def root_url(self) -> str:
        if self.root:
            return f"gs://{self.bucket_name}/{self.root}"
        return f"gs://{self.bucket_name}"

    def root_exists(self) -> bool:
        return self.bucket.exists()

    def get(self, path: str) -> bytes:
        try:
            return self.bucket.blob(self._key(path)).download_as_bytes()
        except NotFound as e:
            raise NotFoundError(path, self.root_url()) from e

    def put(self, path: str, data: bytes) -> None:
        self.bucket.blob(self._key(path)).upload_from_string(data)
        logger.debug(f"GCS put: gs://{self.bucket_name}/{self._key(path)}")

    def _upload(self, item: FileToPut) -> None:
        self.bucket.blob(self._key(item.dest)).upload_from_filename(item.source)

    def put_directory(self, local_path: str, storage_path: str) -> None:
        files = put_directory_files(local_path, storage_path)
        logger.debug(f"Uploading {len(files)} files from {local_path} to {self.root_url()}/{storage_path}")
        self._run_parallel(self._upload, files)

    def get_directory(self, storage_path: str, local_path: str) -> None:
        prefix = self._prefix(storage_path)
        names = list(self._iter_names(prefix))
        if not names:
            raise NotFoundError(storage_path, self.root_url())

        def download(name: str) -> None:
            dest = Path(local_path, *name[len(prefix):].split('/'))
            dest.parent.mkdir(parents=True, exist_ok=True)
            self.bucket.blob(name).download_to_filename(os.fspath(dest))

        logger.debug(f"Downloading {len(names)} objects from gs://{self.bucket_name}/{prefix}")
        self._run_parallel(download, names)

    def _delete_blob(self, name: str) -> None:
        try:
            self.bucket.blob(name).delete()
        except NotFound:
            pass

    def delete(self, path: str) -> None:
        key = self._key(path)
        names = list(self._iter_names(self._prefix(path)))
        if key:
            names.append(key)
        self._run_parallel(self._delete_blob, names)
        logger.debug(f"GCS delete: {len(names)} blobs under gs://{self.bucket_name}/{key}")

    def list(self, path: str) -> list[str]:
        return sorted(
            self._relative(name) for name in self._iter_names(self._prefix(path), delimiter='/')
        )

    def _walk(self, folder: str) -> Iterator[ListResult]:
        try:
            for name in self._iter_names(self._prefix(folder)):
                yield ListResult(self._relative(name))
        except GoogleAPICallError as e:
            yield ListResult(folder, e)

    def prepare_run_env(self) -> list[str]:
        env = []
        credentials_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        if credentials_path:
            env.append(f"GOOGLE_APPLICATION_CREDENTIALS={credentials_path}")
        project = getattr(self.client, "project", None)
        if project:
            env.append(f"GOOGLE_CLOUD_PROJECT={project}")
        return env
