# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/walker.py

"""Local directory walk feeding put_directory()."""

import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Union

from loguru import logger

# Any directory with one of these exact names is skipped with its subtree
SKIP_DIRECTORIES: Final[frozenset[str]] = frozenset({
    ".stowage",
    ".git",
    "venv",
    ".mypy_cache",
})


@dataclass(frozen=True)
class FileToPut:
    source: str
    dest: str


def _raise(error: OSError) -> None:
    raise error


def put_directory_files(local_path: Union[str, Path], storage_path: str) -> list[FileToPut]:
    """List the files under local_path and where each one goes in storage.

    Unlike the streaming listings this fails fast: the first traversal
    error (permission denied, vanished directory) propagates as OSError.

    Returns:
        FileToPut entries sorted by dest
    """
    local_path = os.fspath(local_path)
    if not os.path.isdir(local_path):
        # os.walk() silently yields nothing for a missing root
        os.stat(local_path)
        raise NotADirectoryError(f"Not a directory: {local_path}")
    if os.path.basename(os.path.normpath(local_path)) in SKIP_DIRECTORIES:
        logger.debug(f"Skipping {local_path}")
        return []

    result = []
    for current_dir, dirnames, filenames in os.walk(local_path, onerror=_raise):
        skipped = [d for d in dirnames if d in SKIP_DIRECTORIES]
        if skipped:
            logger.debug(f"Skipping {skipped} under {current_dir}")
        dirnames[:] = [d for d in dirnames if d not in SKIP_DIRECTORIES]

        for name in filenames:
            source = os.path.join(current_dir, name)
            relative = os.path.relpath(source, local_path)
            result.append(FileToPut(
                source=os.path.abspath(source),
                dest=posixpath.join(storage_path, *Path(relative).parts),
            ))

    result.sort(key=lambda f: f.dest)
    return result
