"""FASTQ read name formats, FASTQ check summaries and digesting streams."""

from __future__ import annotations

import enum
import hashlib
import io
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Iterator

ILLUMINA_REGEX = re.compile(
    r"^@(?P<prefix>[\w\-]+:\w+:\w+:\d):(?P<tile>\d+):(?P<x_pos>\d+):(?P<y_pos>\d+)"
    r" (?P<read>\d):(?P<read_index>[NY]:\d+:.*)\n\Z"
)
DNBSEQ_REGEX = re.compile(
    r"^@(?P<prefix>(E|V)\d+B?L\dC)(?P<group>\d{3}R\d{3})(?P<index>\d+)/(?P<read>[12])\n\Z"
)
ILLUMINA_REGEX_IN_BAM = re.compile(
    r"^(?P<prefix>[\w\-]+:\w+:\w+:\d):(?P<tile>\d+):(?P<x_pos>\d+):(?P<y_pos>\d+)( .*)?\Z"
)
DNBSEQ_REGEX_IN_BAM = re.compile(
    r"^(?P<prefix>(E|V)\d+B?L\dC)(?P<group>\d{3}R\d{3})(?P<index>\d+)(/(?P<read>[12]))?\Z"
)

_UNSIGNED = re.compile(r"\+?[0-9]+")


def parse_unsigned(text: str, bits: int) -> int:
    """Parse a decimal unsigned integer that must fit in the given number of bits."""
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"number too large to fit in {bits} bits: {text!r}")
    return value


class NameType(enum.Enum):
    """The read name convention of a FASTQ file."""

    ILLUMINA = "Illumina"
    DNBSEQ = "DNBSeq"
    EMPTY = "Empty"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def suggest(cls, read1_name: str, read2_name: str) -> "NameType":
        """Guess the name type from the first read name line of each FASTQ."""
        cap1 = ILLUMINA_REGEX.match(read1_name)
        if cap1:
            cap2 = ILLUMINA_REGEX.match(read2_name)
            if (
                cap2
                and cap1["prefix"] == cap2["prefix"]
                and cap1["read_index"] == cap2["read_index"]
                and cap1["read"] == "1"
                and cap2["read"] == "2"
            ):
                return cls.ILLUMINA
            raise ValueError(
                "Unmatched FASTQ read name (illumina): "
                f"{read1_name.strip()} / {read2_name.strip()}"
            )

        cap1 = DNBSEQ_REGEX.match(read1_name)
        if cap1:
            cap2 = DNBSEQ_REGEX.match(read2_name)
            if (
                cap2
                and cap1["prefix"] == cap2["prefix"]
                and cap1["group"] == cap2["group"]
                and cap1["index"] == cap2["index"]
                and cap1["read"] == "1"
                and cap2["read"] == "2"
            ):
                return cls.DNBSEQ
            raise ValueError(
                "Unmatched FASTQ read name (DNBSeq): "
                f"{read1_name.strip()} / {read2_name.strip()}"
            )

        raise ValueError(
            f"Unknown FASTQ read name: {read1_name.strip()} / {read2_name.strip()}"
        )


def read_tsv(reader: Iterable[str | bytes]) -> Iterator[list[str]]:
    """Yield the tab separated fields of each line."""
    for line in reader:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        yield line.rstrip("\n").split("\t")


def _field(row: list[str], index: int) -> str:
    if len(row) <= index:
        raise ValueError(f"Too few columns in row: {row!r}")
    return row[index]


def _check_verify(row: list[str]) -> None:
    if _field(row, 1) != "OK":
        raise ValueError(f"Bad verify result: {row!r}")


def _require(value, message: str) -> None:
    if not value:
        raise ValueError(message)


@dataclass
class IlluminaFastqInfo:
    """Summary of an Illumina FASTQ pair as written by the order check."""

    fastq1: str = ""
    fastq2: str = ""
    fastq_type: str = ""
    prefix: str = ""
    common_index: str = ""
    special_index: dict[tuple[int, int, int], str] = field(default_factory=dict)
    fastq1_md5: str = ""
    fastq2_md5: str = ""

    @classmethod
    def load(cls, reader: Iterable[str | bytes]) -> "IlluminaFastqInfo":
        info = cls()
        for row in read_tsv(reader):
            key = row[0]
            if key == "FASTQ1":
                info.fastq1 = _field(row, 1)
            elif key == "FASTQ2":
                info.fastq2 = _field(row, 1)
            elif key == "FASTQ_TYPE":
                info.fastq_type = _field(row, 1)
            elif key == "READ_PREFIX":
                info.prefix = _field(row, 1)
            elif key == "COMMON_INDEX":
                info.common_index = _field(row, 1)
            elif key == "FASTQ1_MD5":
                info.fastq1_md5 = _field(row, 1)
            elif key == "FASTQ2_MD5":
                info.fastq2_md5 = _field(row, 1)
            elif key == "SPECIAL_INDEX":
                position = (
                    parse_unsigned(_field(row, 1), 16),
                    parse_unsigned(_field(row, 2), 32),
                    parse_unsigned(_field(row, 3), 32),
                )
                info.special_index[position] = _field(row, 4)
            elif key == "VERIFY_RESULT":
                _check_verify(row)
            else:
                raise ValueError(f"Unknown row: {row!r}")

        _require(info.fastq1, "FASTQ1 path is not found in info")
        _require(info.fastq2, "FASTQ2 path is not found in info")
        _require(info.prefix, "Read prefix is not found in info")
        _require(info.common_index, "Common index is not found in info")
        _require(info.fastq1_md5, "FASTQ1 MD5 is not found in info")
        _require(info.fastq2_md5, "FASTQ2 MD5 is not found in info")
        return info


@dataclass
class DnbseqFastqInfo:
    """Summary of a DNBSeq FASTQ pair as written by the order check."""

    fastq1: str = ""
    fastq2: str = ""
    fastq_type: str = ""
    prefix: str = ""
    group_order: list[str] = field(default_factory=list)
    group_order_rev: dict[str, int] = field(default_factory=dict)
    fastq1_md5: str = ""
    fastq2_md5: str = ""

    @classmethod
    def load(cls, reader: Iterable[str | bytes]) -> "DnbseqFastqInfo":
        info = cls()
        for row in read_tsv(reader):
            key = row[0]
            if key == "FASTQ1":
                info.fastq1 = _field(row, 1)
            elif key == "FASTQ2":
                info.fastq2 = _field(row, 1)
            elif key == "FASTQ_TYPE":
                info.fastq_type = _field(row, 1)
            elif key == "PREFIX":
                info.prefix = _field(row, 1)
            elif key == "GROUP_ORDER":
                group = _field(row, 1)
                info.group_order_rev[group] = len(info.group_order)
                info.group_order.append(group)
            elif key == "FASTQ1_MD5":
                info.fastq1_md5 = _field(row, 1)
            elif key == "FASTQ2_MD5":
                info.fastq2_md5 = _field(row, 1)
            elif key == "VERIFY_RESULT":
                _check_verify(row)
            else:
                raise ValueError(f"Unknown row: {row!r}")

        _require(info.fastq1, "FASTQ1 path is not found in info")
        _require(info.fastq2, "FASTQ2 path is not found in info")
        _require(info.prefix, "Read prefix is not found in info")
        _require(info.group_order, "Group order is not found in info")
        _require(info.fastq1_md5, "FASTQ1 MD5 is not found in info")
        _require(info.fastq2_md5, "FASTQ2 MD5 is not found in info")
        return info


class DigestReader(io.RawIOBase):
    """A binary reader that feeds everything it reads into a hash."""

    def __init__(self, reader: BinaryIO, digest) -> None:
        super().__init__()
        self._reader = reader
        self._digest = digest
        self._name = digest.name

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        data = self._reader.read(-1 if size is None else size)
        self._digest.update(data)
        return data

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)

    def hexdigest(self) -> str:
        """Return the hex digest so far and start a fresh hash."""
        result = self._digest.hexdigest()
        self._digest = hashlib.new(self._name)
        return result

    def close(self) -> None:
        if not self.closed:
            self._reader.close()
        super().close()


class DigestWriter:
    """A binary writer that feeds everything it writes into a hash."""

    def __init__(self, writer: BinaryIO, digest) -> None:
        self._writer = writer
        self._digest = digest
        self._name = digest.name

    def write(self, data: bytes) -> int:
        written = self._writer.write(data)
        if written is None:
            written = len(data)
        self._digest.update(memoryview(data)[:written])
        return written

    def flush(self) -> None:
        self._writer.flush()

    def hexdigest(self) -> str:
        """Return the hex digest so far and start a fresh hash."""
        result = self._digest.hexdigest()
        self._digest = hashlib.new(self._name)
        return result

    def close(self) -> None:
        self._writer.close()

    def __enter__(self) -> "DigestWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()