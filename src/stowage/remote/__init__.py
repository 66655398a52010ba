# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/remote/__init__.py

"""Remote hosts reached over SSH."""

from .client import RemoteClient, RemoteOptions
from .upload import upload

__all__ = [
    'RemoteClient',
    'RemoteOptions',
    'upload',
]
