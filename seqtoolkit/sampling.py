"""Random sampling of paired FASTQ files."""

from __future__ import annotations

import os
import random
from typing import BinaryIO

from seqtoolkit.streams import create_output, open_input


def _pass_lines(reader: BinaryIO, writer: BinaryIO | None, count: int, label: str) -> None:
    for _ in range(count):
        line = reader.readline()
        if not line:
            raise ValueError(f"Unexpected end of {label}")
        if writer is not None:
            writer.write(line)


def sample_pairs(
    reader1: BinaryIO,
    reader2: BinaryIO,
    writer1: BinaryIO,
    writer2: BinaryIO,
    ratio: float,
    rng: random.Random,
) -> int:
    """Copy each read pair with probability ratio; return the number copied."""
    sampled = 0
    while True:
        header = reader1.readline()
        if not header:
            if reader2.readline():
                raise ValueError("FASTQ files have different number of lines")
            return sampled
        keep = rng.random() < ratio
        if keep:
            writer1.write(header)
            sampled += 1
        _pass_lines(reader1, writer1 if keep else None, 3, "FASTQ1")
        _pass_lines(reader2, writer2 if keep else None, 4, "FASTQ2")


def random_sampling(
    input1: str | os.PathLike,
    input2: str | os.PathLike,
    output1: str | os.PathLike,
    output2: str | os.PathLike,
    ratio: float = 0.1,
    rng: random.Random | None = None,
) -> int:
    """Sample read pairs from two FASTQ files into two outputs."""
    if rng is None:
        rng = random.Random()
    with open_input(input1) as reader1, open_input(input2) as reader2, create_output(
        output1
    ) as writer1, create_output(output2) as writer2:
        return sample_pairs(reader1, reader2, writer1, writer2, ratio, rng)