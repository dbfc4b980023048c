"""FASTQ entries: generic, Illumina and DNBSeq, for reading and reordering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from seqtoolkit.fastqinfo import (
    DNBSEQ_REGEX_IN_BAM,
    ILLUMINA_REGEX_IN_BAM,
    DnbseqFastqInfo,
    IlluminaFastqInfo,
    parse_unsigned,
)


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


@dataclass(order=True)
class GenericFastqEntry:
    """One FASTQ record with the leading '@' and line ends removed."""

    read_name: bytes
    sequence: bytes
    quality: bytes

    @classmethod
    def read(cls, reader: BinaryIO) -> "GenericFastqEntry | None":
        """Read the next record, or return None at the end of the input."""
        first = reader.read(1)
        if not first:
            return None
        if first != b"@":
            raise ValueError(f"Invalid FASTQ name: {_text(first)}")

        read_name = reader.readline()
        if not read_name:
            raise EOFError("unexpected EOF")
        read_name = read_name[:-1]

        sequence = reader.readline()
        if not sequence:
            raise ValueError(f"Uncompleted FASTQ 1: read name: {_text(read_name)}")
        sequence = sequence[:-1]

        separator = reader.read(2)
        if len(separator) < 2:
            raise EOFError(f"unexpected EOF for read name: {_text(read_name)}")
        if separator != b"+\n":
            raise ValueError(
                f"Invalid FASTQ read name2: {_text(separator)} "
                f"for read name: {_text(read_name)}"
            )

        quality = reader.readline()
        if not quality:
            raise ValueError(f"Uncompleted FASTQ 3: read name: {_text(read_name)}")
        quality = quality[:-1]

        return cls(read_name=read_name, sequence=sequence, quality=quality)

    def write(self, writer: BinaryIO) -> None:
        writer.write(
            b"@" + self.read_name + b"\n" + self.sequence + b"\n+\n" + self.quality + b"\n"
        )


@dataclass(order=True)
class IlluminaFastqEntry:
    """An Illumina record keyed by flowcell prefix, tile and position for sorting."""

    prefix: str
    tile: int
    y_pos: int
    x_pos: int
    sequence: bytes
    quality: bytes

    @classmethod
    def from_generic(cls, entry: GenericFastqEntry) -> "IlluminaFastqEntry":
        name = entry.read_name.decode("utf-8")
        match = ILLUMINA_REGEX_IN_BAM.match(name)
        if not match:
            raise ValueError(f"read name is not illumina format: {name}")
        return cls(
            prefix=match["prefix"],
            tile=parse_unsigned(match["tile"], 16),
            x_pos=parse_unsigned(match["x_pos"], 32),
            y_pos=parse_unsigned(match["y_pos"], 32),
            sequence=entry.sequence,
            quality=entry.quality,
        )

    def write(
        self,
        writer: BinaryIO,
        read_number: str | None = None,
        fastq_info: IlluminaFastqInfo | None = None,
    ) -> None:
        """Write the record, restoring the read index from the FASTQ info if given."""
        header = f"@{self.prefix}:{self.tile}:{self.x_pos}:{self.y_pos}"
        if fastq_info is not None:
            if self.prefix != fastq_info.prefix:
                raise ValueError("FASTQ prefix is not match")
            index = fastq_info.special_index.get(
                (self.tile, self.x_pos, self.y_pos), fastq_info.common_index
            )
            header += f" {read_number or '?'}:{index}"
        writer.write(
            header.encode() + b"\n" + self.sequence + b"\n+\n" + self.quality + b"\n"
        )


@dataclass(order=True)
class DnbseqFastqEntry:
    """A DNBSeq record keyed by group order and index for sorting."""

    group_index: int
    index: str
    sequence: bytes
    quality: bytes

    @classmethod
    def from_generic(
        cls, entry: GenericFastqEntry, fastq_info: DnbseqFastqInfo
    ) -> "DnbseqFastqEntry":
        name = entry.read_name.decode("utf-8")
        match = DNBSEQ_REGEX_IN_BAM.match(name)
        if not match:
            raise ValueError(f"read name is not DNBSeq format: {name}")
        if match["prefix"] != fastq_info.prefix:
            raise ValueError(f"Unknown prefix: {name}")
        group_index = fastq_info.group_order_rev.get(match["group"])
        if group_index is None:
            raise ValueError(f"group name is not found in FASTQ info: {name}")
        return cls(
            group_index=group_index,
            index=match["index"],
            sequence=entry.sequence,
            quality=entry.quality,
        )

    def write(
        self,
        writer: BinaryIO,
        read_number: str | None,
        fastq_info: DnbseqFastqInfo,
    ) -> None:
        header = f"@{fastq_info.prefix}{fastq_info.group_order[self.group_index]}{self.index}"
        if read_number is not None:
            header += f"/{read_number}"
        writer.write(
            header.encode() + b"\n" + self.sequence + b"\n+\n" + self.quality + b"\n"
        )