"""Command line tools for BED files: extend and merge regions."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from seqtoolkit.bed import U64_MAX, BedReader, BedWriter
from seqtoolkit.bedmerge import BedMerger
from seqtoolkit.streams import create_output_or_stdout, open_input, open_input_or_stdin


def extend_bed(
    input_path: str | None,
    output_path: str | None,
    expand_start: int,
    expand_end: int,
) -> None:
    """Widen every region by expand_start before and expand_end after."""
    with open_input_or_stdin(input_path) as reader, create_output_or_stdout(
        output_path
    ) as out:
        writer = BedWriter(out)
        for region in BedReader(reader):
            region.start = region.start - expand_start if region.start > expand_start else 0
            if region.end < U64_MAX - expand_end:
                region.end += expand_end
            else:
                region.end = U64_MAX
            writer.write_record(region)


def merge_bed(input_paths: Sequence[str] | None, output_path: str | None) -> None:
    """Merge the regions of all inputs (or standard input) into one BED."""
    merger = BedMerger()
    if input_paths:
        for path in input_paths:
            with open_input(path) as reader:
                for region in BedReader(reader):
                    merger.add(region)
    else:
        with open_input_or_stdin(None) as reader:
            for region in BedReader(reader):
                merger.add(region)
    with create_output_or_stdout(output_path) as out:
        merger.export_bed(out)


def _length(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid length: {text}") from None
    if value < 0 or value > U64_MAX:
        raise argparse.ArgumentTypeError(f"invalid length: {text}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bedutils", description="BED Utilities")
    commands = parser.add_subparsers(dest="command", required=True)

    extend = commands.add_parser("extend-bed", help="Extend BED regions")
    extend.add_argument("input", nargs="?", help="Input BED files")
    extend.add_argument("-o", "--output", help="Output BED")
    extend.add_argument("-e", "--expand", type=_length, help="Expand length")
    extend.add_argument("-s", "--expand-start", type=_length, help="Expand start length")
    extend.add_argument("-n", "--expand-end", type=_length, help="Expand end length")

    merge = commands.add_parser("merge-bed", help="Merge BED regions")
    merge.add_argument("input", nargs="*", help="Input BED files")
    merge.add_argument("-o", "--output", help="Output BED file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "extend-bed":
        if args.expand is not None:
            if args.expand_start is not None or args.expand_end is not None:
                parser.error("--expand cannot be used with --expand-start or --expand-end")
            expand_start = expand_end = args.expand
        elif args.expand_start is None or args.expand_end is None:
            parser.error("give --expand, or both --expand-start and --expand-end")
        else:
            expand_start, expand_end = args.expand_start, args.expand_end

    try:
        if args.command == "extend-bed":
            extend_bed(args.input, args.output, expand_start, expand_end)
        else:
            merge_bed(args.input, args.output)
    except (OSError, ValueError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())