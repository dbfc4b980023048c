"""Reading and writing BED regions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

U64_MAX = 2**64 - 1

_NUMBER = re.compile(rb"\+?[0-9]+")


@dataclass
class BedRegion:
    """One BED line: chromosome, half-open range and extra columns."""

    chromosome: bytes = b""
    start: int = 0
    end: int = 0
    columns: list[bytes] = field(default_factory=list)


def _parse_position(value: bytes, line: int) -> int:
    if not _NUMBER.fullmatch(value):
        raise ValueError(f"invalid position {value!r} in BED at line: {line}")
    number = int(value)
    if number > U64_MAX:
        raise ValueError(f"position out of range {value!r} in BED at line: {line}")
    return number


class BedReader:
    """Reads BED regions from a binary stream, skipping '#' lines."""

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self._line = 0

    def read(self) -> BedRegion | None:
        """Return the next region, or None at the end of the input."""
        while True:
            self._line += 1
            raw = self._reader.readline()
            if not raw:
                return None
            if not raw.startswith(b"#"):
                break

        if raw.endswith(b"\r\n"):
            raw = raw[:-2]
        elif raw.endswith(b"\n"):
            raw = raw[:-1]

        fields = raw.split(b"\t")
        if len(fields) < 3:
            raise ValueError(f"failed to parse BED at line: {self._line}")

        return BedRegion(
            chromosome=fields[0],
            start=_parse_position(fields[1], self._line),
            end=_parse_position(fields[2], self._line),
            columns=fields[3:],
        )

    def __iter__(self) -> Iterator[BedRegion]:
        while (region := self.read()) is not None:
            yield region


class BedWriter:
    """Writes BED regions to a binary stream."""

    def __init__(self, writer: BinaryIO) -> None:
        self._writer = writer

    def write_record(self, region: BedRegion) -> None:
        parts = [region.chromosome, str(region.start).encode(), str(region.end).encode()]
        parts.extend(region.columns)
        self._writer.write(b"\t".join(parts) + b"\n")