# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/system/exceptions.py

"""
Stowage-specific exception classes.

Storage errors describe what went wrong with a location (bad URL, missing
object). Transport errors describe what went wrong getting there, and carry
a retry hint consumed by stowage.core.retry.
"""


class StowageError(Exception):
    """Base exception for all stowage-specific errors."""
    pass


class ConfigError(StowageError):
    """Raised when there are configuration validation or loading errors."""
    pass


# === STORAGE ERRORS ===

class StorageError(StowageError):
    """Base class for storage layer errors."""
    pass


class InvalidSchemeError(StorageError):
    """Raised when a storage URL names a backend we don't support."""

    def __init__(self, scheme: str):
        self.scheme = scheme
        super().__init__(f"Unknown storage backend: {scheme}")


class MalformedURLError(StorageError):
    """Raised when a storage URL cannot be parsed at all."""

    def __init__(self, url: str, reason: str = None):
        self.url = url
        self.reason = reason
        message = f"Malformed storage URL: {url!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class NotFoundError(StorageError):
    """Raised by get() when the object does not exist."""

    def __init__(self, path: str, root_url: str = None):
        self.path = path
        self.root_url = root_url
        where = f" in {root_url}" if root_url else ""
        super().__init__(f"{path} not found{where}")


# === TRANSPORT AND NETWORK ERRORS ===

class TransportError(StowageError):
    """Base class for transport layer errors."""

    def __init__(self, message: str, retry_possible: bool = True, backoff_seconds: int = None):
        self.retry_possible = retry_possible
        self.backoff_seconds = backoff_seconds
        super().__init__(message)


class NetworkError(TransportError):
    """Network connectivity issues."""
    pass


class ConnectionTimeoutError(NetworkError):
    """Connection timeout during transport operations."""
    pass


class AuthenticationError(TransportError):
    """Authentication failures during transport."""

    def __init__(self, message: str, **kwargs):
        kwargs['retry_possible'] = False  # Never retried
        super().__init__(message, **kwargs)


class TransferError(TransportError):
    """File transfer failures."""
    pass
