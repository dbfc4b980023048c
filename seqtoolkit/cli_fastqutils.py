"""Command line tools for FASTQ files: k-mer counts, index counts and sampling."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from seqtoolkit.indexcount import index_count
from seqtoolkit.sampling import random_sampling
from seqtoolkit.triplet import fastq_triplet


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fastqutils", description="FASTQ Utilities")
    commands = parser.add_subparsers(dest="command", required=True)

    triplet = commands.add_parser(
        "fastq-triplet", help="Count single bases, doublets and triplets"
    )
    triplet.add_argument("fastq", help="Input FASTQ (with gzip)")
    triplet.add_argument("-t", "--triplet-output", required=True, help="Triplet output")
    triplet.add_argument("-d", "--doublet-output", required=True, help="doublet output")
    triplet.add_argument("-s", "--single-output", required=True, help="single output")

    index = commands.add_parser("index-count", help="Count indexes")
    index.add_argument("fastq", help="Input FASTQ Read 1 (with gzip)")
    index.add_argument("-o", "--output", required=True, help="output")

    sampling = commands.add_parser("random-sampling", help="Random sampling of FASTQ files")
    sampling.add_argument("-1", "--input1", "--i1", required=True, help="Input FASTQ 1 (with gzip)")
    sampling.add_argument("-2", "--input2", required=True, help="Input FASTQ 2 (with gzip)")
    sampling.add_argument("-a", "--output1", required=True, help="Output FASTQ1 (with gzip)")
    sampling.add_argument("-b", "--output2", required=True, help="Output FASTQ2 (with gzip)")
    sampling.add_argument("-r", "--ratio", type=float, default=0.1, help="Sampling ratio")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "fastq-triplet":
            fastq_triplet(
                args.fastq, args.triplet_output, args.doublet_output, args.single_output
            )
        elif args.command == "index-count":
            index_count(args.fastq, args.output)
        else:
            random_sampling(args.input1, args.input2, args.output1, args.output2, args.ratio)
    except (OSError, ValueError, EOFError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())