# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/s3.py

"""
AWS S3 backend (and S3-compatible stores such as MinIO via endpoint_url).

Keys are laid out as ``<root>/<path>``. S3 has no directories, so "a
directory" here is every key sharing the ``<root>/<path>/`` prefix.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Iterator, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError
from loguru import logger

from stowage.config.manager import StorageConfig
from stowage.system.exceptions import NotFoundError
from .base import Storage, ListResult
from .walker import FileToPut, put_directory_files

NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "404", "NotFound"})

# delete_objects accepts at most this many keys per request
DELETE_BATCH_SIZE = 1000


def _error_code(e: ClientError) -> str:
    return e.response.get('Error', {}).get('Code', '')


class S3Storage(Storage):
    """Storage rooted at a prefix inside an S3 bucket."""

    def __init__(self, bucket: str, root: str, config: Optional[StorageConfig] = None,
                 session=None, client=None) -> None:
        super().__init__(config)
        self.bucket_name = bucket
        self.root = root.strip("/")

        settings = self.config.s3
        self.session = session or boto3.session.Session(region_name=settings.region)
        if client is None:
            client_kwargs = {
                # put_directory() shares one client across the worker pool
                'config': BotoConfig(max_pool_connections=min(self.config.max_workers, 100)),
            }
            if settings.endpoint_url:
                client_kwargs['endpoint_url'] = settings.endpoint_url
            client = self.session.client('s3', **client_kwargs)
        self.client = client
        logger.debug(f"S3Storage initialized: bucket={bucket} root={self.root!r}")

    # --- key mapping ---

    def _key(self, path: str) -> str:
        path = path.strip("/")
        if not self.root:
            return path
        return posixpath.join(self.root, path) if path else self.root

    def _prefix(self, path: str) -> str:
        key = self._key(path)
        return f"{key}/" if key else ""

    def _relative(self, key: str) -> str:
        if self.root:
            return key[len(self.root) + 1:]
        return key

    def _iter_keys(self, prefix: str, delimiter: Optional[str] = None) -> Iterator[str]:
        params = {'Bucket': self.bucket_name, 'Prefix': prefix}
        if delimiter:
            params['Delimiter'] = delimiter
        paginator = self.client.get_paginator('list_objects_v2')
        for page in paginator.paginate(**params):
            for obj in page.get('Contents', []):
                if not obj['Key'].endswith('/'):
                    yield obj['Key']

    # --- Storage ---

    def root_url(self) -> str:
        if self.root:
            return f"s3://{self.bucket_name}/{self.root}"
        return f"s3://{self.bucket_name}"

    def root_exists(self) -> bool:
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return False
            raise
        return True

    def get(self, path: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=self._key(path))
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise NotFoundError(path, self.root_url()) from e
            raise
        return response['Body'].read()

    def put(self, path: str, data: bytes) -> None:
        self.client.put_object(Bucket=self.bucket_name, Key=self._key(path), Body=data)
        logger.debug(f"S3 put: s3://{self.bucket_name}/{self._key(path)}")

    def _upload(self, item: FileToPut) -> None:
        self.client.upload_file(item.source, self.bucket_name, self._key(item.dest))

    def put_directory(self, local_path: str, storage_path: str) -> None:
        files = put_directory_files(local_path, storage_path)
        logger.debug(f"Uploading {len(files)} files from {local_path} to {self.root_url()}/{storage_path}")
        self._run_parallel(self._upload, files)

    def get_directory(self, storage_path: str, local_path: str) -> None:
        prefix = self._prefix(storage_path)
        keys = list(self._iter_keys(prefix))
        if not keys:
            raise NotFoundError(storage_path, self.root_url())

        def download(key: str) -> None:
            dest = Path(local_path, *key[len(prefix):].split('/'))
            dest.parent.mkdir(parents=True, exist_ok=True)
            self.client.download_file(self.bucket_name, key, os.fspath(dest))

        logger.debug(f"Downloading {len(keys)} objects from s3://{self.bucket_name}/{prefix}")
        self._run_parallel(download, keys)

    def delete(self, path: str) -> None:
        key = self._key(path)
        keys = [key] if key else []
        keys.extend(self._iter_keys(self._prefix(path)))
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            response = self.client.delete_objects(
                Bucket=self.bucket_name,
                Delete={'Objects': [{'Key': k} for k in batch], 'Quiet': True},
            )
            # Quiet mode reports per-key failures in the body instead of raising
            failures = response.get('Errors') or []
            if failures:
                first = failures[0]
                failed_keys = ", ".join(f['Key'] for f in failures)
                raise ClientError(
                    {'Error': {
                        'Code': first.get('Code', ''),
                        'Message': f"Failed to delete {len(failures)} keys: {failed_keys}",
                    }},
                    'DeleteObjects',
                )
        logger.debug(f"S3 delete: {len(keys)} keys under s3://{self.bucket_name}/{key}")

    def list(self, path: str) -> list[str]:
        return sorted(
            self._relative(key) for key in self._iter_keys(self._prefix(path), delimiter='/')
        )

    def _walk(self, folder: str) -> Iterator[ListResult]:
        try:
            for key in self._iter_keys(self._prefix(folder)):
                yield ListResult(self._relative(key))
        except ClientError as e:
            yield ListResult(folder, e)

    def prepare_run_env(self) -> list[str]:
        credentials = self.session.get_credentials()
        env = []
        if credentials is not None:
            frozen = credentials.get_frozen_credentials()
            env.append(f"AWS_ACCESS_KEY_ID={frozen.access_key}")
            env.append(f"AWS_SECRET_ACCESS_KEY={frozen.secret_key}")
            if frozen.token:
                env.append(f"AWS_SESSION_TOKEN={frozen.token}")
        else:
            logger.warning("No AWS credentials found; run environment will rely on instance roles")
        region = self.session.region_name or self.config.s3.region
        env.append(f"AWS_DEFAULT_REGION={region}")
        return env
