# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/remote/upload.py

"""
Push a local directory tree to a remote host.

The remote directory ends up mirroring the local one: same subdirectories,
same file bytes and permission bits. Unlike put_directory() nothing is
skipped.
"""

import os
import posixpath
import stat
from pathlib import Path
from typing import Union

import paramiko
from loguru import logger

from stowage.core.retry import FILE_TRANSFER_RETRY, retry_call
from stowage.system.exceptions import TransferError
from .client import RemoteClient, RemoteOptions


def _raise(error: OSError) -> None:
    raise error


def _remote_makedirs(sftp: paramiko.SFTPClient, remote_dir: str) -> None:
    """mkdir -p over SFTP."""
    current = "/" if remote_dir.startswith("/") else ""
    for part in [p for p in remote_dir.split("/") if p]:
        current = posixpath.join(current, part)
        try:
            if not stat.S_ISDIR(sftp.stat(current).st_mode):
                raise NotADirectoryError(f"Remote path exists and is not a directory: {current}")
        except FileNotFoundError:
            sftp.mkdir(current)


def _put_file(sftp: paramiko.SFTPClient, local_file: str, remote_file: str) -> None:
    try:
        sftp.put(local_file, remote_file)
        sftp.chmod(remote_file, stat.S_IMODE(os.stat(local_file).st_mode))
    except (OSError, paramiko.SSHException) as e:
        raise TransferError(f"Failed to upload {local_file} to {remote_file}: {e}") from e


def upload(local_dir: Union[str, Path], options: RemoteOptions, remote_dir: str) -> None:
    """Upload the tree at local_dir into remote_dir on the host in options.

    Raises:
        NotADirectoryError: If local_dir is not a directory
        AuthenticationError, NetworkError: If the session can't be established
        TransferError: If a file still fails after retries
    """
    local_dir = Path(local_dir)
    if not local_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {local_dir}")

    with RemoteClient(options) as client:
        sftp = client.sftp()
        _remote_makedirs(sftp, remote_dir)

        file_count = 0
        for current, dirnames, filenames in os.walk(local_dir, onerror=_raise):
            dirnames.sort()
            relative = Path(current).relative_to(local_dir)
            remote_current = posixpath.join(remote_dir, *relative.parts)

            for name in dirnames:
                _remote_makedirs(sftp, posixpath.join(remote_current, name))

            for name in sorted(filenames):
                local_file = os.path.join(current, name)
                remote_file = posixpath.join(remote_current, name)
                retry_call(FILE_TRANSFER_RETRY, f"upload {remote_file}",
                           _put_file, sftp, local_file, remote_file)
                file_count += 1

        logger.info(f"Uploaded {file_count} files from {local_dir} to {client.target}{remote_dir}")
