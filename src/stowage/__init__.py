# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/__init__.py

"""stowage - one storage interface for disk, S3 and GCS, plus SSH directory upload."""

from stowage.storage import (
    Storage, ListResult, ResultSink, StorageURL, Scheme,
    for_url, needs_caching, split_url,
)
from stowage.system.exceptions import (
    StowageError, InvalidSchemeError, MalformedURLError, NotFoundError,
)

__all__ = [
    'Storage',
    'ListResult',
    'ResultSink',
    'StorageURL',
    'Scheme',
    'for_url',
    'needs_caching',
    'split_url',
    'StowageError',
    'InvalidSchemeError',
    'MalformedURLError',
    'NotFoundError',
]
