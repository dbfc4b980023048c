"""Checking that paired FASTQ files are in their original order.

The check writes a summary (prefix, common and special indexes, DNBSeq
group order and MD5 checksums) that the reorder commands use to restore
the original files.
"""

from __future__ import annotations

import hashlib
import io
import logging
import os
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Sequence, TextIO

from seqtoolkit.fastqinfo import (
    DNBSEQ_REGEX,
    ILLUMINA_REGEX,
    DigestReader,
    NameType,
    parse_unsigned,
)
from seqtoolkit.streams import create_output, create_output_or_stdout, open_fastq

logger = logging.getLogger(__name__)

INITIAL_LOAD_ENTRIES = 5000
_READER_BUFFER_SIZE = 1024 * 1024


class FastqReadnameReader:
    """Reads only the name lines of a FASTQ stream, checking entries are complete."""

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self.line_index = 0

    def next_name(self) -> str | None:
        """Return the next name line, newline included, or None at the end."""
        raw = self._reader.readline()
        self.line_index += 1
        if not raw:
            return None
        name = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        if not name.startswith("@"):
            raise ValueError(f"Bad FASTQ read name: {name}")
        for _ in range(3):
            self.line_index += 1
            if not self._reader.readline():
                raise ValueError(f"Incomplete FASTQ entry: {name}")
        return name

    def __iter__(self) -> Iterator[str]:
        while (name := self.next_name()) is not None:
            yield name


@dataclass(frozen=True, order=True)
class IlluminaReadName:
    """The parts of an Illumina read name line."""

    prefix: str
    tile: int
    y_pos: int
    x_pos: int
    read: int
    read_index: str


@dataclass(frozen=True, order=True)
class DnbseqReadName:
    """The parts of a DNBSeq read name line; ordering follows the fields."""

    prefix: str
    group: str
    index: str
    read: int


@dataclass(frozen=True)
class FastqVerifyResult:
    """What a successful order check found."""

    fastq1_md5: str
    fastq2_md5: str
    read_prefix: str
    fastq_type: NameType


def parse_illumina_readname(readname: str) -> IlluminaReadName:
    match = ILLUMINA_REGEX.match(readname)
    if not match:
        raise ValueError(f"Not illumina FASTQ name: {readname}")
    return IlluminaReadName(
        prefix=match["prefix"],
        tile=parse_unsigned(match["tile"], 16),
        y_pos=parse_unsigned(match["y_pos"], 32),
        x_pos=parse_unsigned(match["x_pos"], 32),
        read=int(match["read"]),
        read_index=match["read_index"],
    )


def parse_dnbseq_readname(readname: str) -> DnbseqReadName:
    match = DNBSEQ_REGEX.match(readname)
    if not match:
        raise ValueError(f"Not DNBSeq FASTQ name: {readname}")
    return DnbseqReadName(
        prefix=match["prefix"],
        group=match["group"],
        index=match["index"],
        read=int(match["read"]),
    )


def check_illumina_readname(
    expected_prefix: str,
    common_index: str,
    last_tile_pos: tuple[int, int, int],
    output: TextIO,
    read1: str,
    read2: str,
) -> tuple[int, int, int]:
    """Check one Illumina pair and return its (tile, y, x) position."""
    cap1 = parse_illumina_readname(read1)
    cap2 = parse_illumina_readname(read2)

    if cap1.prefix != expected_prefix:
        raise ValueError(f"Invalid prefix for read 1: {read1}")
    if cap2.prefix != expected_prefix:
        raise ValueError(f"Invalid prefix for read 2: {read2}")

    if (cap1.tile, cap1.x_pos, cap1.y_pos, cap1.read_index) != (
        cap2.tile,
        cap2.x_pos,
        cap2.y_pos,
        cap2.read_index,
    ):
        raise ValueError(f"Read 2 is not corresponds to read 1: {read1} / {read2}")
    if cap1.read != 1:
        raise ValueError(f"Read 1 is not read 1: {read1}")
    if cap2.read != 2:
        raise ValueError(f"Read 2 is not read 2: {read2}")

    if common_index != cap1.read_index:
        output.write(
            f"SPECIAL_INDEX\t{cap1.tile}\t{cap1.x_pos}\t{cap1.y_pos}\t{cap1.read_index}\n"
        )

    next_tile_pos = (cap1.tile, cap1.y_pos, cap1.x_pos)
    if last_tile_pos >= next_tile_pos:
        raise ValueError(
            f"Unexpected read order: {last_tile_pos!r} - {next_tile_pos!r} / {read1} / {read2}"
        )
    return next_tile_pos


def check_dnbseq_readname(
    last_name: DnbseqReadName, output: TextIO, read1: str, read2: str
) -> DnbseqReadName:
    """Check one DNBSeq pair against the previous read 1 and return read 1's name."""
    cap1 = parse_dnbseq_readname(read1)
    cap2 = parse_dnbseq_readname(read2)

    if (
        (cap1.prefix, cap1.group, cap1.index) != (cap2.prefix, cap2.group, cap2.index)
        or cap1.read != 1
        or cap2.read != 2
    ):
        raise ValueError(f"Read 2 is not corresponds to read 1: {read1} / {read2}")

    if last_name.prefix == cap1.prefix and last_name.group == cap1.group:
        if last_name >= cap1:
            raise ValueError(f"Unexpected read order: {last_name!r} -> {read1} / {read2}")
    else:
        if last_name.prefix and last_name.prefix != cap1.prefix:
            raise ValueError(f"Unexpected flowcell: {last_name!r} -> {read1} / {read2}")
        output.write(f"GROUP_ORDER\t{cap1.group}\n")
    return cap1


def _remaining_pairs(
    reader1: FastqReadnameReader, reader2: FastqReadnameReader
) -> Iterator[tuple[str, str]]:
    while True:
        name1 = reader1.next_name()
        name2 = reader2.next_name()
        if name1 is None and name2 is None:
            return
        yield name1 or "", name2 or ""


def _check_illumina_order(
    reader1: FastqReadnameReader,
    reader2: FastqReadnameReader,
    output: TextIO,
    initial1: Sequence[str],
    initial2: Sequence[str],
) -> str:
    prefix = parse_illumina_readname(initial1[0]).prefix
    occurrence = Counter(parse_illumina_readname(name).read_index for name in initial1)
    common_index = occurrence.most_common(1)[0][0]
    logger.debug("occurrence: %s", occurrence)

    output.write(f"READ_PREFIX\t{prefix}\n")
    output.write(f"COMMON_INDEX\t{common_index}\n")

    last_tile_pos = (0, 0, 0)
    for read1, read2 in zip(initial1, initial2):
        last_tile_pos = check_illumina_readname(
            prefix, common_index, last_tile_pos, output, read1, read2
        )

    processed = len(initial1)
    for read1, read2 in _remaining_pairs(reader1, reader2):
        if processed % 10_000_000 == 0:
            logger.info("Processed %d reads", processed)
        processed += 1
        last_tile_pos = check_illumina_readname(
            prefix, common_index, last_tile_pos, output, read1, read2
        )
    return prefix


def _check_dnbseq_order(
    reader1: FastqReadnameReader,
    reader2: FastqReadnameReader,
    output: TextIO,
    initial1: Sequence[str],
    initial2: Sequence[str],
) -> str:
    prefix = parse_dnbseq_readname(initial1[0]).prefix
    output.write(f"PREFIX\t{prefix}\n")

    last_read1 = DnbseqReadName(prefix=prefix, group="", index="", read=0)
    for read1, read2 in zip(initial1, initial2):
        last_read1 = check_dnbseq_readname(last_read1, output, read1, read2)
    for read1, read2 in _remaining_pairs(reader1, reader2):
        last_read1 = check_dnbseq_readname(last_read1, output, read1, read2)
    return prefix


def _load_initial(
    reader1: FastqReadnameReader, reader2: FastqReadnameReader
) -> tuple[list[str], list[str]]:
    initial1: list[str] = []
    initial2: list[str] = []
    for _ in range(INITIAL_LOAD_ENTRIES):
        name1 = reader1.next_name()
        if name1 is None:
            if reader2.next_name() is None:
                break
            raise ValueError("Too small number of reads in FASTQ1")
        name2 = reader2.next_name()
        if name2 is None:
            raise ValueError("Too small number of reads in FASTQ1")
        initial1.append(name1)
        initial2.append(name2)
    return initial1, initial2


def check_order(
    orad_binary: str | os.PathLike,
    fastq1_path: str | os.PathLike,
    fastq2_path: str | os.PathLike,
    output: TextIO,
) -> FastqVerifyResult:
    """Check that two FASTQ files are paired and ordered; write the findings."""
    if Path(fastq1_path) == Path(fastq2_path):
        raise ValueError("FASTQ1 and FASTQ2 are same file.")

    with ExitStack() as stack:
        digest1 = stack.enter_context(
            DigestReader(open_fastq(orad_binary, fastq1_path), hashlib.md5())
        )
        digest2 = stack.enter_context(
            DigestReader(open_fastq(orad_binary, fastq2_path), hashlib.md5())
        )
        buffered1 = stack.enter_context(io.BufferedReader(digest1, _READER_BUFFER_SIZE))
        buffered2 = stack.enter_context(io.BufferedReader(digest2, _READER_BUFFER_SIZE))
        reader1 = FastqReadnameReader(buffered1)
        reader2 = FastqReadnameReader(buffered2)

        logger.info("start loading data")
        initial1, initial2 = _load_initial(reader1, reader2)

        if initial1:
            name_type = NameType.suggest(initial1[0], initial2[0])
        else:
            name_type = NameType.EMPTY
        logger.info("FASTQ type: %s", name_type)
        output.write(f"FASTQ_TYPE\t{name_type}\n")

        if name_type is NameType.ILLUMINA:
            read_prefix = _check_illumina_order(reader1, reader2, output, initial1, initial2)
        elif name_type is NameType.DNBSEQ:
            read_prefix = _check_dnbseq_order(reader1, reader2, output, initial1, initial2)
        else:
            read_prefix = ""
        logger.info("Finish FASTQ order check")

        if buffered1.read():
            raise ValueError("FASTQ 1 reading is not completed.")
        if buffered2.read():
            raise ValueError("FASTQ 2 reading is not completed.")
        logger.info("Reading FASTQ completed")

        fastq1_md5 = digest1.hexdigest()
        fastq2_md5 = digest2.hexdigest()

    output.write(f"FASTQ1_MD5\t{fastq1_md5}\n")
    output.write(f"FASTQ2_MD5\t{fastq2_md5}\n")
    output.write("VERIFY_RESULT\tOK\n")
    logger.info("FASTQ MD5 %s %s", fastq1_md5, fastq2_md5)
    logger.info("Verify result OK")
    output.flush()

    return FastqVerifyResult(
        fastq1_md5=fastq1_md5,
        fastq2_md5=fastq2_md5,
        read_prefix=read_prefix,
        fastq_type=name_type,
    )


class _TextOutput:
    """Writes text, UTF-8 encoded, to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write(self, text: str) -> int:
        self._stream.write(text.encode("utf-8"))
        return len(text)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "_TextOutput":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def fastq_check(
    fastq1_path: str,
    fastq2_path: str,
    output_path: str | None = None,
    summary_output_path: str | None = None,
    orad_binary: str = "orad",
) -> FastqVerifyResult:
    """Run the order check, writing the result and an optional one-line summary."""
    output_name = output_path if output_path is not None else "stdout"
    with ExitStack() as stack:
        output = stack.enter_context(_TextOutput(create_output_or_stdout(output_path)))
        summary = None
        if summary_output_path is not None:
            summary = stack.enter_context(_TextOutput(create_output(summary_output_path)))

        output.write(f"FASTQ1\t{fastq1_path}\n")
        output.write(f"FASTQ2\t{fastq2_path}\n")

        try:
            result = check_order(orad_binary, fastq1_path, fastq2_path, output)
        except (ValueError, OSError, EOFError) as error:
            if summary is not None:
                summary.write(f"{output_name}\t{fastq1_path}\t{fastq2_path}\t\t\t\t\tNG\n")
            output.write(f"ERROR\t{error}\n")
            output.write("VERIFY_RESULT\tNG\n")
            output.flush()
            raise

        if summary is not None:
            summary.write(
                f"{output_name}\t{fastq1_path}\t{fastq2_path}\t{result.fastq_type}\t"
                f"{result.read_prefix}\t{result.fastq1_md5}\t{result.fastq2_md5}\tOK\n"
            )
        return result