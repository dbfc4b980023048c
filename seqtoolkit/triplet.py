"""Counting single bases, doublets and triplets in FASTQ sequences."""

from __future__ import annotations

import os
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

from seqtoolkit.streams import open_input

MAX_POSITIONS = 300
KMER_SIZES = (1, 2, 3)
_EOF_WARNING = "Unexpected EOF"


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


@dataclass
class KmerCounts:
    """Occurrences of k-mers of one length, overall and per read position."""

    k: int
    total: Counter = field(default_factory=Counter)
    by_position: dict[int, Counter] = field(default_factory=dict)

    def add(self, sequence: bytes) -> None:
        """Count every k-mer of the sequence at its start position."""
        for position in range(len(sequence) - self.k + 1):
            kmer = sequence[position : position + self.k]
            self.total[kmer] += 1
            self.by_position.setdefault(position, Counter())[kmer] += 1

    def lines(self) -> Iterator[str]:
        """Yield the report lines: overall counts first, then per position."""
        for kmer, count in sorted(self.total.items()):
            yield f"all\t{_text(kmer)}\t{count}\n"
        for position in sorted(self.by_position):
            for kmer, count in sorted(self.by_position[position].items()):
                yield f"{position}\t{_text(kmer)}\t{count}\n"


def count_kmers(reader: BinaryIO) -> dict[int, KmerCounts]:
    """Count 1-, 2- and 3-mers in the sequences of a binary FASTQ stream.

    A record cut short ends the counting with a warning; what was read up
    to then is kept.
    """
    counts = {k: KmerCounts(k) for k in KMER_SIZES}
    while reader.readline():
        sequence_line = reader.readline()
        if not sequence_line:
            print(_EOF_WARNING, file=sys.stderr)
            break
        if not sequence_line.endswith(b"\n"):
            raise ValueError(f"Sequence line is not terminated: {_text(sequence_line)}")
        sequence = sequence_line[:-1]
        if len(sequence) < 2:
            raise ValueError(f"Sequence is too short: {_text(sequence)}")
        if len(sequence) > MAX_POSITIONS:
            raise ValueError(
                f"Sequence is longer than {MAX_POSITIONS} bases: {_text(sequence)}"
            )
        for kmer_counts in counts.values():
            kmer_counts.add(sequence)

        if not reader.readline() or not reader.readline():
            print(_EOF_WARNING, file=sys.stderr)
            break
    return counts


def _write_report(path: str | os.PathLike, counts: KmerCounts) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as out:
        out.writelines(counts.lines())


def fastq_triplet(
    fastq_path: str | os.PathLike,
    triplet_output: str | os.PathLike,
    doublet_output: str | os.PathLike,
    single_output: str | os.PathLike,
) -> dict[int, KmerCounts]:
    """Count k-mers of a (possibly compressed) FASTQ and write one report per length."""
    with open_input(fastq_path) as reader:
        counts = count_kmers(reader)
    _write_report(triplet_output, counts[3])
    _write_report(doublet_output, counts[2])
    _write_report(single_output, counts[1])
    return counts