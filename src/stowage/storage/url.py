# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/url.py

"""Storage URL parsing.

A storage URL is ``[scheme://][host][/path]``. The scheme picks the backend,
the host is the bucket for object stores, and the path is the root the
backend is scoped to.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, unquote, urlparse

from stowage.system.exceptions import InvalidSchemeError, MalformedURLError


class Scheme(str, Enum):
    DISK = "file"
    S3 = "s3"
    GCS = "gs"


@dataclass(frozen=True)
class StorageURL:
    """A resolved storage location."""
    scheme: Scheme
    bucket: str
    root: str

    @property
    def url(self) -> str:
        """Canonical URL for this location; split_url(self.url) == self."""
        root = quote(self.root, safe="/")
        if self.scheme is Scheme.DISK:
            return f"file://{root}"
        if self.root:
            return f"{self.scheme.value}://{self.bucket}/{root}"
        return f"{self.scheme.value}://{self.bucket}"


def split_url(storage_url: str) -> StorageURL:
    """Split a storage URL into (scheme, bucket, root).

    Raises:
        MalformedURLError: If the string cannot be parsed as a URL
        InvalidSchemeError: If the scheme is not one of file, s3, gs
    """
    try:
        u = urlparse(storage_url)
        host = u.netloc
    except ValueError as e:
        raise MalformedURLError(storage_url, str(e)) from e
    path = unquote(u.path)

    if u.scheme == "":
        return StorageURL(Scheme.DISK, "", path)
    if u.scheme == Scheme.DISK.value:
        # file://relative/dir has "relative" as its host
        return StorageURL(Scheme.DISK, "", unquote(host) + path)
    if u.scheme == Scheme.S3.value:
        return StorageURL(Scheme.S3, host, path.lstrip("/"))
    if u.scheme == Scheme.GCS.value:
        return StorageURL(Scheme.GCS, host, path.lstrip("/"))
    raise InvalidSchemeError(u.scheme)
