"""Counting sample index pairs in Illumina FASTQ read names."""

from __future__ import annotations

import itertools
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import BinaryIO

from seqtoolkit.streams import open_input


@dataclass
class IndexCount:
    """Occurrences of the first index, the second index and the pair."""

    fastq1: Counter = field(default_factory=Counter)
    fastq2: Counter = field(default_factory=Counter)
    pair: Counter = field(default_factory=Counter)


def count_index(reader: BinaryIO) -> IndexCount:
    """Count the 'INDEX1+INDEX2' suffix of every read name in a binary FASTQ stream."""
    count = IndexCount()
    for name_line in itertools.islice(reader, 0, None, 4):
        index = name_line.split(b":")[-1].decode("utf-8", errors="replace").strip()
        parts = index.split("+")
        if len(parts) != 2:
            raise ValueError(f"Invalid index: {index}")
        count.pair[index] += 1
        count.fastq1[parts[0]] += 1
        count.fastq2[parts[1]] += 1
    return count


def _by_count(counter: Counter) -> list[tuple[str, int]]:
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))


def index_count(fastq_path: str | os.PathLike, output_path: str | os.PathLike) -> IndexCount:
    """Count indexes of a FASTQ and write them, most frequent first."""
    with open_input(fastq_path) as reader:
        count = count_index(reader)
    with open(output_path, "w", encoding="utf-8", newline="\n") as out:
        for label, counter in (
            ("read1", count.fastq1),
            ("read2", count.fastq2),
            ("pair", count.pair),
        ):
            for index, n in _by_count(counter):
                out.write(f"{label}\t{index}\t{n}\n")
    return count