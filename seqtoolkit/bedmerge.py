"""Merging overlapping BED regions."""

from __future__ import annotations

from typing import BinaryIO

from seqtoolkit.bed import BedRegion


class RegionMerger:
    """Keeps a set of intervals, joining any that overlap."""

    def __init__(self) -> None:
        self._regions: set[tuple[int, int]] = set()

    def add_interval(self, start: int, end: int) -> None:
        """Add the half-open interval [start, end), merging overlapping ones."""
        new_start, new_end = start, end
        overlapping = [
            region for region in self._regions if region[0] < end and start < region[1]
        ]
        for region_start, region_end in overlapping:
            new_start = min(new_start, region_start)
            new_end = max(new_end, region_end)
            self._regions.discard((region_start, region_end))
        self._regions.add((new_start, new_end))

    def regions(self) -> set[tuple[int, int]]:
        """Return the merged intervals."""
        return set(self._regions)


class BedMerger:
    """Merges BED regions chromosome by chromosome."""

    def __init__(self) -> None:
        self._chromosomes: dict[bytes, RegionMerger] = {}

    def add(self, region: BedRegion) -> None:
        merger = self._chromosomes.setdefault(region.chromosome, RegionMerger())
        merger.add_interval(region.start, region.end)

    def export_bed(self, writer: BinaryIO) -> None:
        """Write the merged regions, sorted by chromosome and start."""
        for chromosome in sorted(self._chromosomes):
            for start, end in sorted(self._chromosomes[chromosome].regions()):
                writer.write(chromosome + f"\t{start}\t{end}\n".encode())