"""Sorting more items than fit in memory by spilling sorted runs to disk."""

from __future__ import annotations

import gzip
import heapq
import os
import pickle
import tempfile
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class LargeReorder(Generic[T]):
    """Collects orderable items and yields them sorted.

    Items are kept in memory until ``maximum_data_count`` of them have been
    added; the batch is then sorted and written to a compressed temporary
    file. Iterating merges all sorted runs. Equal items come out in the
    order they were added.
    """

    def __init__(
        self,
        maximum_data_count: int,
        temp_dir: str | os.PathLike | None = None,
        prefix: str | None = None,
    ) -> None:
        self._maximum = maximum_data_count
        self._temp_dir = None if temp_dir is None else os.fspath(temp_dir)
        self._prefix = "tmp." if prefix is None else prefix
        self._current: list[T] = []
        self._files: list[str] = []
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("LargeReorder is closed")

    def add(self, value: T) -> None:
        """Add an item, spilling a sorted run to disk when memory is full."""
        self._check_open()
        self._current.append(value)
        if len(self._current) >= self._maximum:
            self._spill()

    def _spill(self) -> None:
        chunk = sorted(self._current)
        self._current = []
        fd, path = tempfile.mkstemp(prefix=self._prefix, dir=self._temp_dir)
        self._files.append(path)
        with os.fdopen(fd, "wb") as raw, gzip.GzipFile(
            fileobj=raw, mode="wb", compresslevel=1
        ) as out:
            for value in chunk:
                pickle.dump(value, out, protocol=pickle.HIGHEST_PROTOCOL)

    @staticmethod
    def _read_run(path: str) -> Iterator[T]:
        with gzip.open(path, "rb") as run:
            while True:
                try:
                    yield pickle.load(run)
                except EOFError:
                    return

    def __iter__(self) -> Iterator[T]:
        self._check_open()
        if self._current:
            self._spill()
        return heapq.merge(*(self._read_run(path) for path in self._files))

    def close(self) -> None:
        """Remove the temporary files."""
        if self._closed:
            return
        self._closed = True
        self._current = []
        for path in self._files:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
        self._files = []

    def __enter__(self) -> "LargeReorder[T]":
        return self

    def __exit__(self, *args) -> None:
        self.close()