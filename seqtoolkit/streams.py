"""Opening plain or compressed streams, progress tracking and ORA decoding."""

from __future__ import annotations

import bz2
import gzip
import io
import lzma
import os
import subprocess
import sys
from pathlib import Path
from typing import BinaryIO

_GZIP_MAGIC = b"\x1f\x8b"
_BZIP2_MAGIC = b"BZh"
_XZ_MAGIC = b"\xfd7zXZ\x00"


class _Counter:
    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = 0


class Progress:
    """A view on the number of bytes a ProgressReader has read so far."""

    def __init__(self, counter: _Counter, total: int) -> None:
        self._counter = counter
        self.total = total

    @property
    def current(self) -> int:
        return self._counter.value

    def fraction(self) -> float:
        """Return the part of the total that has been read."""
        if self.total == 0:
            return float("nan") if self.current == 0 else float("inf")
        return self.current / self.total

    def __repr__(self) -> str:
        return f"Progress(current={self.current}, total={self.total})"


class ProgressReader(io.RawIOBase):
    """A binary reader that counts the bytes read from an inner stream."""

    def __init__(self, inner: BinaryIO, total: int) -> None:
        super().__init__()
        self._inner = inner
        self._counter = _Counter()
        self.total = total

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> "ProgressReader":
        """Open a file and use its size as the total."""
        handle = open(path, "rb")
        return cls(handle, os.fstat(handle.fileno()).st_size)

    @property
    def current(self) -> int:
        return self._counter.value

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        data = self._inner.read(-1 if size is None else size)
        self._counter.value += len(data)
        return data

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)

    def progress(self) -> Progress:
        """Return a Progress that follows this reader."""
        return Progress(self._counter, self.total)

    def close(self) -> None:
        if not self.closed:
            self._inner.close()
        super().close()


class OraReader(io.RawIOBase):
    """Reads a decompressed ORA FASTQ from the standard output of orad."""

    def __init__(self, orad_binary: str | os.PathLike, path: str | os.PathLike) -> None:
        super().__init__()
        binary = Path(orad_binary)
        if not binary.exists():
            raise FileNotFoundError(f"Cannot find orad binary: {binary}")
        try:
            self._process = subprocess.Popen(
                [str(binary), "--stdout", "--raw", str(path)],
                stdout=subprocess.PIPE,
            )
        except OSError as error:
            raise OSError(f"Cannot open FASTQ file with orad: {error}") from error

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        return self._process.stdout.read(-1 if size is None else size)

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if not self.closed:
            if self._process.stdout is not None:
                self._process.stdout.close()
            self._process.wait()
        super().close()


class _StdStream:
    """Wraps a standard stream so that closing it only flushes."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def readline(self, size: int = -1) -> bytes:
        return self._stream.readline(size)

    def __iter__(self):
        return iter(self._stream)

    def write(self, data: bytes) -> int:
        return self._stream.write(data)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        if not self.closed:
            self._stream.flush()
            self.closed = True

    def __enter__(self) -> "_StdStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_input(path: str | os.PathLike) -> BinaryIO:
    """Open a file for binary reading, decompressing gzip, bzip2 or xz by content."""
    with open(path, "rb") as probe:
        magic = probe.read(6)
    if magic.startswith(_GZIP_MAGIC):
        return gzip.open(path, "rb")
    if magic.startswith(_BZIP2_MAGIC):
        return bz2.open(path, "rb")
    if magic.startswith(_XZ_MAGIC):
        return lzma.open(path, "rb")
    return open(path, "rb")


def open_input_or_stdin(path: str | os.PathLike | None) -> BinaryIO:
    """Open a file like open_input, or standard input when no path is given."""
    if path is None:
        return _StdStream(sys.stdin.buffer)
    return open_input(path)


def create_output(path: str | os.PathLike) -> BinaryIO:
    """Create a file for binary writing, compressing by its extension."""
    suffix = Path(path).suffix.lower()
    if suffix == ".gz":
        return gzip.open(path, "wb")
    if suffix == ".bz2":
        return bz2.open(path, "wb")
    if suffix == ".xz":
        return lzma.open(path, "wb")
    return open(path, "wb")


def create_output_or_stdout(path: str | os.PathLike | None) -> BinaryIO:
    """Create a file like create_output, or use standard output when no path is given."""
    if path is None:
        return _StdStream(sys.stdout.buffer)
    return create_output(path)


def open_fastq(orad_binary: str | os.PathLike, path: str | os.PathLike) -> BinaryIO:
    """Open a FASTQ file, decoding ORA files with orad."""
    if Path(path).suffix == ".ora":
        return OraReader(orad_binary, path)
    return open_input(path)