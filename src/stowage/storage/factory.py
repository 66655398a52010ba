# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/factory.py

"""Backend factory and caching advisory."""

from typing import Optional

from loguru import logger

from stowage.config.manager import StorageConfig
from .base import Storage
from .url import Scheme, split_url


def for_url(storage_url: str, config: Optional[StorageConfig] = None) -> Storage:
    """Create the backend a storage URL points at.

    Args:
        storage_url: e.g. ``/data``, ``file:///data``, ``s3://bucket/root``, ``gs://bucket/root``
        config: Worker count, sink size and per-backend settings; defaults if omitted

    Returns:
        DiskStorage, S3Storage or GCSStorage

    Raises:
        InvalidSchemeError: If the URL scheme is not supported
        MalformedURLError: If the URL cannot be parsed
    """
    location = split_url(storage_url)
    config = config or StorageConfig()
    logger.debug(f"Resolved {storage_url!r} to {location}")

    # Object store clients are imported lazily so disk-only use doesn't pay for them
    if location.scheme is Scheme.DISK:
        from .disk import DiskStorage
        return DiskStorage(location.root, config)
    if location.scheme is Scheme.S3:
        from .s3 import S3Storage
        return S3Storage(location.bucket, location.root, config)
    from .gcs import GCSStorage
    return GCSStorage(location.bucket, location.root, config)


def needs_caching(storage: Storage) -> bool:
    """True if the storage is slow enough that a local cache is worth it."""
    return storage.needs_caching
