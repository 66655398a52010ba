# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/__init__.py

"""
Storage layer for stowage.

This module provides:
- URL-based backend selection (disk, S3, GCS)
- The Storage contract every backend satisfies
- The skip-list directory walk used by put_directory()
"""

from .url import Scheme, StorageURL, split_url
from .base import Storage, ListResult, ResultSink
from .walker import SKIP_DIRECTORIES, FileToPut, put_directory_files
from .disk import DiskStorage
from .factory import for_url, needs_caching

__all__ = [
    'Scheme',
    'StorageURL',
    'split_url',
    'Storage',
    'ListResult',
    'ResultSink',
    'SKIP_DIRECTORIES',
    'FileToPut',
    'put_directory_files',
    'DiskStorage',
    'for_url',
    'needs_caching',
]
