"""Command line tool to check FASTQ order and restore it after realignment."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from seqtoolkit.fastqcheck import fastq_check
from seqtoolkit.reorder import Read, reorder_dnbseq, reorder_illumina


def _count(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {text}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"count must be positive: {text}")
    return value


def _add_reorder_arguments(parser: argparse.ArgumentParser, info_required: bool) -> None:
    parser.add_argument("input", help="Input FASTQ")
    parser.add_argument("-o", "--output", required=True, help="Output FASTQ")
    parser.add_argument(
        "-i", "--fastq-info", required=info_required, help="Original FASTQ information"
    )
    parser.add_argument("-r", "--read", type=Read, choices=list(Read), help="Read number")
    parser.add_argument("--temporary", help="Temporary files directory")
    parser.add_argument(
        "-m", "--mem", type=_count, default=1_000_000, help="# of entries on the memory"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bam2fastq", description="FASTQ order tools")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="verbose level")
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser(
        "fastq-check", help="Check order of FASTQ and create result summary"
    )
    check.add_argument("fastq1", help="Input FASTQ 1")
    check.add_argument("fastq2", help="Input FASTQ 2")
    check.add_argument("-o", "--output", help="FASTQ check result")
    check.add_argument("-s", "--summary-output", help="FASTQ check result summary")
    check.add_argument("-b", "--orad-binary", default="orad", help="Path to orad binary")

    illumina = commands.add_parser("illumina-fastq-reorder", help="Reorder Illumina FASTQ")
    _add_reorder_arguments(illumina, info_required=False)

    dnbseq = commands.add_parser("dnbseq-fastq-reorder", help="Reorder DNBSeq FASTQ")
    _add_reorder_arguments(dnbseq, info_required=True)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level)

    try:
        if args.command == "fastq-check":
            fastq_check(
                args.fastq1, args.fastq2, args.output, args.summary_output, args.orad_binary
            )
        elif args.command == "illumina-fastq-reorder":
            reorder_illumina(
                args.input, args.output, args.fastq_info, args.read, args.temporary, args.mem
            )
        else:
            reorder_dnbseq(
                args.input, args.output, args.fastq_info, args.read, args.temporary, args.mem
            )
    except (OSError, ValueError, EOFError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())