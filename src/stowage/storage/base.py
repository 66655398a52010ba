# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/storage/base.py

"""
The Storage contract shared by every backend.

Two enumeration styles coexist on purpose:

- list() is batch: the caller blocks until the flat listing is built.
- list_recursive() and match_filenames_recursive() stream: a background
  thread walks the tree and feeds ListResults into a bounded ResultSink.
  A per-entry error is delivered inline as ListResult.error and the stream
  keeps going. The reader may cancel the sink at any time, after which the
  producer stops at its next put().

Backends implement _walk() as a plain generator; the threading and
cancellation plumbing lives here.
"""

from __future__ import annotations

import posixpath
import queue
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import closing
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, TypeVar

from loguru import logger

from stowage.config.manager import StorageConfig, DEFAULT_SINK_SIZE

T = TypeVar("T")

_DONE = object()


@dataclass(frozen=True)
class ListResult:
    """One entry of a streaming listing. Check error before trusting path."""
    path: str
    error: Optional[Exception] = None


class ResultSink:
    """Bounded channel from a listing thread to its reader.

    put() blocks while the queue is full and returns False once the sink has
    been cancelled. Iterating the sink yields results until the producer
    calls close() or the reader calls cancel().
    """

    def __init__(self, maxsize: int = DEFAULT_SINK_SIZE, poll_interval: float = 0.05):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._cancelled = threading.Event()
        self._poll_interval = poll_interval

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _offer(self, item) -> bool:
        while not self._cancelled.is_set():
            try:
                self._queue.put(item, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def put(self, result: ListResult) -> bool:
        """Deliver a result. Returns False if the reader has gone away."""
        return self._offer(result)

    def close(self) -> None:
        """Signal end of stream."""
        self._offer(_DONE)

    def cancel(self) -> None:
        """Stop reading. Unblocks and stops the producer."""
        self._cancelled.set()

    def __iter__(self) -> Iterator[ListResult]:
        while not self._cancelled.is_set():
            try:
                item = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            if item is _DONE:
                return
            yield item


class Storage(ABC):
    """Base class for all storage backends."""

    # Consumed by the caching layer: remote stores are slow enough to cache
    needs_caching: bool = True

    def __init__(self, config: Optional[StorageConfig] = None) -> None:
        self.config = config or StorageConfig()

    @abstractmethod
    def root_url(self) -> str:
        """Canonical URL of this backend's root."""
        raise NotImplementedError("root_url() not implemented")

    @abstractmethod
    def root_exists(self) -> bool:
        """Check whether the root exists.

        An empty root still exists. Only genuine I/O or auth failures raise.
        """
        raise NotImplementedError("root_exists() not implemented")

    @abstractmethod
    def get(self, path: str) -> bytes:
        """Read an object. Raises NotFoundError if it doesn't exist."""
        raise NotImplementedError("get() not implemented")

    @abstractmethod
    def put(self, path: str, data: bytes) -> None:
        """Create or overwrite an object, creating parents as needed."""
        raise NotImplementedError("put() not implemented")

    @abstractmethod
    def put_directory(self, local_path: str, storage_path: str) -> None:
        """Upload a local tree to storage_path, skipping SKIP_DIRECTORIES."""
        raise NotImplementedError("put_directory() not implemented")

    @abstractmethod
    def get_directory(self, storage_path: str, local_path: str) -> None:
        """Download everything under storage_path into local_path."""
        raise NotImplementedError("get_directory() not implemented")

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete an object or a whole subtree. Missing paths are ignored."""
        raise NotImplementedError("delete() not implemented")

    @abstractmethod
    def list(self, path: str) -> list[str]:
        """List files in a path non-recursively.

        Returns a sorted list of paths, prefixed with the given path, that can
        be passed straight to get(). Directories are not listed. If path does
        not exist, an empty list is returned.
        """
        raise NotImplementedError("list() not implemented")

    @abstractmethod
    def prepare_run_env(self) -> list[str]:
        """KEY=VALUE environment entries a child process needs to reach this storage."""
        raise NotImplementedError("prepare_run_env() not implemented")

    @abstractmethod
    def _walk(self, folder: str) -> Iterator[ListResult]:
        """Yield every file under folder, runs on the listing thread."""
        raise NotImplementedError("_walk() not implemented")

    # --- Streaming enumeration ---

    def list_recursive(self, sink: ResultSink, folder: str) -> threading.Thread:
        """Stream every file under folder into sink from a background thread."""
        return self._start_listing(sink, folder, None)

    def match_filenames_recursive(self, sink: ResultSink, folder: str, filename: str) -> threading.Thread:
        """Like list_recursive, keeping only entries whose base name is filename."""
        return self._start_listing(sink, folder, filename)

    def iter_recursive(self, folder: str, filename: Optional[str] = None) -> ResultSink:
        """Start a recursive listing and return the sink to iterate over."""
        sink = ResultSink(maxsize=self.config.sink_size)
        self._start_listing(sink, folder, filename)
        return sink

    def _start_listing(self, sink: ResultSink, folder: str, filename: Optional[str]) -> threading.Thread:
        thread = threading.Thread(
            target=self._produce,
            args=(sink, folder, filename),
            name=f"list-recursive:{folder}",
            daemon=True,
        )
        thread.start()
        return thread

    def _produce(self, sink: ResultSink, folder: str, filename: Optional[str]) -> None:
        try:
            with closing(self._walk(folder)) as results:
                for result in results:
                    if (filename is not None and result.error is None
                            and posixpath.basename(result.path) != filename):
                        continue
                    if not sink.put(result):
                        logger.debug(f"Recursive listing of {folder!r} cancelled by reader")
                        return
        except Exception as e:
            # Failure outside a single entry (bad credentials, missing bucket)
            logger.debug(f"Recursive listing of {folder!r} failed: {e}")
            sink.put(ListResult(path="", error=e))
        finally:
            sink.close()

    # --- Helpers for backends ---

    def _run_parallel(self, func: Callable[[T], None], items: Iterable[T]) -> None:
        """Apply func to every item on a bounded pool; raise the first failure."""
        items = list(items)
        if not items:
            return
        workers = min(self.config.max_workers, len(items))
        first_error = None
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(func, item) for item in items]
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                error = future.exception()
                if error is not None and first_error is None:
                    first_error = error
                    for pending in futures:
                        pending.cancel()
        if first_error is not None:
            raise first_error

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.root_url()!r})"
