"""Restoring the original order of Illumina and DNBSeq FASTQ files."""

from __future__ import annotations

import enum
import hashlib
import os
import sys

from seqtoolkit.fastq import DnbseqFastqEntry, GenericFastqEntry, IlluminaFastqEntry
from seqtoolkit.fastqinfo import DigestWriter, DnbseqFastqInfo, IlluminaFastqInfo
from seqtoolkit.largereorder import LargeReorder
from seqtoolkit.streams import create_output, open_input


class Read(enum.Enum):
    """Which read of a pair a FASTQ file holds."""

    ONE = "1"
    TWO = "2"

    def __str__(self) -> str:
        return self.value


def _as_read(read: Read | str | None) -> Read | None:
    return None if read is None else Read(read)


def _read_entries(input_path: str | os.PathLike):
    with open_input(input_path) as reader:
        while (entry := GenericFastqEntry.read(reader)) is not None:
            yield entry


def _report_md5(md5: str, read: Read | None, info) -> None:
    print(f"MD5: {md5}", file=sys.stderr)
    if info is None or read is None:
        return
    expected = info.fastq1_md5 if read is Read.ONE else info.fastq2_md5
    if expected == md5:
        print("MD5 OK", file=sys.stderr)
    else:
        print(f"MD5 NG. Expected MD5 is {expected}", file=sys.stderr)


def reorder_illumina(
    input_path: str | os.PathLike,
    output_path: str | os.PathLike,
    fastq_info_path: str | os.PathLike | None = None,
    read: Read | str | None = None,
    temporary_directory: str | os.PathLike | None = None,
    on_memory_count: int = 1_000_000,
) -> str:
    """Sort an Illumina FASTQ by tile and position; return the output's MD5."""
    read = _as_read(read)
    fastq_info = None
    if fastq_info_path is not None:
        with open_input(fastq_info_path) as info_reader:
            fastq_info = IlluminaFastqInfo.load(info_reader)

    with LargeReorder(
        on_memory_count, temporary_directory, "illuminafastq."
    ) as entries, DigestWriter(create_output(output_path), hashlib.md5()) as output:
        print("Loading FASTQ...", file=sys.stderr)
        for entry in _read_entries(input_path):
            entries.add(IlluminaFastqEntry.from_generic(entry))

        print("Writing FASTQ...", file=sys.stderr)
        read_number = None if read is None else read.value
        for one in entries:
            one.write(output, read_number, fastq_info)

        md5 = output.hexdigest()

    _report_md5(md5, read, fastq_info)
    return md5


def reorder_dnbseq(
    input_path: str | os.PathLike,
    output_path: str | os.PathLike,
    fastq_info_path: str | os.PathLike,
    read: Read | str | None = None,
    temporary_directory: str | os.PathLike | None = None,
    on_memory_count: int = 1_000_000,
) -> str:
    """Sort a DNBSeq FASTQ by group order and index; return the output's MD5."""
    read = _as_read(read)
    with open_input(fastq_info_path) as info_reader:
        fastq_info = DnbseqFastqInfo.load(info_reader)

    with LargeReorder(
        on_memory_count, temporary_directory, "dnbseqfastq."
    ) as entries, DigestWriter(create_output(output_path), hashlib.md5()) as output:
        print("Loading FASTQ...", file=sys.stderr)
        for entry in _read_entries(input_path):
            entries.add(DnbseqFastqEntry.from_generic(entry, fastq_info))

        print("Writing FASTQ...", file=sys.stderr)
        read_number = None if read is None else read.value
        for one in entries:
            one.write(output, read_number, fastq_info)

        md5 = output.hexdigest()

    _report_md5(md5, read, fastq_info)
    return md5