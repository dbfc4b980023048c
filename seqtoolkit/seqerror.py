"""Counting sequencing errors of aligned reads against a reference."""

from __future__ import annotations

import bisect
import enum
import re
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Mapping, Sequence

from seqtoolkit.bed import BedReader

_COMPLEMENT = bytes.maketrans(b"ACGT", b"TGCA")
_NOT_ACGT = bytes(sorted(set(range(256)) - set(b"ACGT")))
_UNKNOWN_TO_N = bytes.maketrans(_NOT_ACGT, b"N" * len(_NOT_ACGT))
_CIGAR_PART = re.compile(r"(\d+)([MIDNSHP=X])")


def _complement(seq: bytes) -> bytes:
    return seq.translate(_UNKNOWN_TO_N).translate(_COMPLEMENT)


def reverse_complement(acid: bytes) -> bytes:
    """Complement one base; anything but upper-case A, C, G, T becomes N."""
    if len(acid) != 1:
        raise ValueError(f"expected a single base: {acid!r}")
    return _complement(acid)


def reverse_complement_seq(seq: bytes) -> bytes:
    """Return the reverse complement of a sequence."""
    return _complement(bytes(seq))[::-1]


def _name(chromosome: str | bytes) -> str:
    return chromosome.decode("utf-8") if isinstance(chromosome, bytes) else chromosome


@dataclass(frozen=True, order=True)
class Mismatch:
    """A reference base read as another base."""

    reference: bytes
    sequenced: bytes

    @classmethod
    def create(cls, reference: bytes, sequenced: bytes) -> "Mismatch":
        return cls(reference.upper(), sequenced.upper())

    def reverse_complement(self) -> "Mismatch":
        return Mismatch(
            reverse_complement(self.reference), reverse_complement(self.sequenced)
        )


@dataclass(frozen=True, order=True)
class MismatchTriplet:
    """A mismatch together with its neighbouring reference bases."""

    reference: bytes
    sequenced: bytes

    @classmethod
    def create(cls, reference: bytes, sequenced: bytes) -> "MismatchTriplet":
        if len(reference) != 3 or len(sequenced) != 3:
            raise ValueError("triplets must have three bases")
        return cls(reference.upper(), sequenced.upper())

    def reverse_complement(self) -> "MismatchTriplet":
        return MismatchTriplet(
            reverse_complement_seq(self.reference), reverse_complement_seq(self.sequenced)
        )


@dataclass
class SequencingErrorCounts:
    """Everything counted over the processed reads."""

    total_reference_base: Counter = field(default_factory=Counter)
    total_reference_triplet: Counter = field(default_factory=Counter)
    total_sequenced_len: int = 0
    total_reference_len: int = 0
    mismatch: Counter = field(default_factory=Counter)
    mismatch_triplet: Counter = field(default_factory=Counter)
    insertion_length: Counter = field(default_factory=Counter)
    short_insertion: Counter = field(default_factory=Counter)
    deletion_length: Counter = field(default_factory=Counter)
    short_deletion: Counter = field(default_factory=Counter)
    softclip_length: Counter = field(default_factory=Counter)
    hardclip_length: Counter = field(default_factory=Counter)


@dataclass
class Regions:
    """Target regions: half-open, sorted intervals per chromosome."""

    regions: dict[str, list[tuple[int, int]]] = field(default_factory=dict)

    @classmethod
    def from_sequence_lengths(cls, lengths: Mapping[str | bytes, int]) -> "Regions":
        """Cover every sequence from start to end."""
        return cls({_name(name): [(0, length)] for name, length in lengths.items()})

    @classmethod
    def load_from_bed(cls, reader: BinaryIO) -> "Regions":
        """Load a BED stream, merging overlapping and touching intervals."""
        collected: dict[str, list[tuple[int, int]]] = {}
        for region in BedReader(reader):
            collected.setdefault(_name(region.chromosome), []).append(
                (region.start, region.end)
            )
        merged: dict[str, list[tuple[int, int]]] = {}
        for chromosome, intervals in collected.items():
            result: list[tuple[int, int]] = []
            for start, end in sorted(intervals):
                if result and start <= result[-1][1]:
                    result[-1] = (result[-1][0], max(result[-1][1], end))
                else:
                    result.append((start, end))
            merged[chromosome] = result
        return cls(merged)

    def contains(self, chromosome: str | bytes, pos: int) -> bool:
        intervals = self.regions.get(_name(chromosome))
        if not intervals:
            return False
        index = bisect.bisect_right(intervals, (pos, float("inf"))) - 1
        return index >= 0 and intervals[index][0] <= pos < intervals[index][1]

    def __contains__(self, chromosome: object) -> bool:
        if isinstance(chromosome, (str, bytes)):
            return _name(chromosome) in self.regions
        return False


class CigarOp(enum.Enum):
    """Alignment operations of a CIGAR string."""

    MATCH = "M"
    INS = "I"
    DEL = "D"
    REF_SKIP = "N"
    SOFT_CLIP = "S"
    HARD_CLIP = "H"
    PAD = "P"
    EQUAL = "="
    DIFF = "X"

    @property
    def consumes_reference(self) -> bool:
        return self in (
            CigarOp.MATCH,
            CigarOp.DEL,
            CigarOp.REF_SKIP,
            CigarOp.EQUAL,
            CigarOp.DIFF,
        )


def _parse_cigar(text: str) -> list[tuple[CigarOp, int]]:
    if text in ("", "*"):
        return []
    parts = _CIGAR_PART.findall(text)
    if "".join(n + op for n, op in parts) != text:
        raise ValueError(f"invalid CIGAR: {text}")
    return [(CigarOp(op), int(n)) for n, op in parts]


@dataclass
class AlignedRead:
    """One aligned read; chromosome None means unmapped, pos is 0-based."""

    name: str
    chromosome: str | None
    pos: int
    cigar: Sequence[tuple[CigarOp, int]] | str
    sequence: bytes
    mapq: int = 255
    is_reverse: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.cigar, str):
            self.cigar = _parse_cigar(self.cigar)
        else:
            self.cigar = [(CigarOp(op), int(n)) for op, n in self.cigar]
        if isinstance(self.sequence, str):
            self.sequence = self.sequence.encode("ascii")
        if isinstance(self.chromosome, bytes):
            self.chromosome = self.chromosome.decode("utf-8")

    @property
    def reference_end(self) -> int:
        return self.pos + sum(n for op, n in self.cigar if op.consumes_reference)


@dataclass(frozen=True)
class KnownVariant:
    """A known SNV or indel; pos is 0-based."""

    chromosome: str
    pos: int
    reference: bytes
    alternates: tuple[bytes, ...]

    @property
    def end(self) -> int:
        return self.pos + len(self.reference)


class SequencingErrorProcessor:
    """Counts mismatches, indels and clips of reads against a reference."""

    def __init__(
        self,
        max_indel_length: int,
        reference: Mapping[str | bytes, bytes | str],
        regions: Regions,
        known_variants: Iterable[KnownVariant] | None = None,
    ) -> None:
        self.max_indel_length = max_indel_length
        self._reference = {
            _name(name): seq.encode("ascii") if isinstance(seq, str) else bytes(seq)
            for name, seq in reference.items()
        }
        self.regions = regions
        self._known: dict[str, list[KnownVariant]] | None = None
        if known_variants is not None:
            self._known = {}
            for variant in known_variants:
                self._known.setdefault(_name(variant.chromosome), []).append(variant)
        self.known_variant_positions: set[int] = set()
        self.counts = SequencingErrorCounts()
        self._last_chromosome: str | None = None
        self._cached_reference = b""

    def load_known_variants(self, chromosome: str | bytes) -> None:
        """Collect the known variant positions of a chromosome inside the regions."""
        chromosome = _name(chromosome)
        self.known_variant_positions.clear()
        if self._known is None:
            return
        for variant in self._known.get(chromosome, []):
            ref = variant.reference
            for alt in variant.alternates:
                if len(ref) > len(alt) and ref[:1] == alt[:1] and len(alt) == 1:
                    positions = range(variant.pos + 1, variant.end)
                elif len(ref) < len(alt) and ref[:1] == alt[:1] and len(ref) == 1:
                    positions = range(variant.pos + 1, variant.pos + 2)
                else:
                    positions = range(variant.pos, variant.end)
                self.known_variant_positions.update(
                    pos for pos in positions if self.regions.contains(chromosome, pos)
                )

    def _counted(self, chromosome: str, pos: int) -> bool:
        return pos not in self.known_variant_positions and self.regions.contains(
            chromosome, pos
        )

    def add_record(self, record: AlignedRead) -> None:
        """Count the errors of one mapped read."""
        chromosome = record.chromosome
        if chromosome is None:
            raise ValueError(f"Unmapped read: {record.name}")
        if chromosome not in self.regions:
            return
        if chromosome != self._last_chromosome:
            if chromosome not in self._reference:
                raise ValueError(f"Failed to load {chromosome} from reference")
            self._cached_reference = self._reference[chromosome]
            self._last_chromosome = chromosome
            self.load_known_variants(chromosome)

        seq_len = len(self._cached_reference)
        reference_end = record.reference_end
        if reference_end > seq_len:
            raise ValueError(
                f"Read {record.name} extends past the end of {chromosome}"
            )
        reversed_ = record.is_reverse
        cache_start = max(0, record.pos - 1)
        cache_end = min(seq_len, reference_end + 1)
        cache = self._cached_reference[cache_start:cache_end]
        if record.pos == 0:
            cache = b"N" + cache
        if reference_end == seq_len:
            cache = cache + b"N"

        seq = record.sequence
        counts = self.counts
        counts.total_sequenced_len += len(seq)
        counts.total_reference_len += len(cache) - 2

        seq_pos = 0
        ref_pos = 1
        for op, length in record.cigar:
            real = ref_pos + cache_start
            if op is CigarOp.DEL:
                if self._counted(chromosome, real):
                    counts.deletion_length[length] += 1
                    if length <= self.max_indel_length:
                        deleted = cache[ref_pos : ref_pos + length].upper()
                        if reversed_:
                            deleted = reverse_complement_seq(deleted)
                        counts.short_deletion[deleted] += 1
                ref_pos += length
            elif op is CigarOp.INS:
                if self._counted(chromosome, real):
                    counts.insertion_length[length] += 1
                    if length <= self.max_indel_length:
                        inserted = seq[seq_pos : seq_pos + length].upper()
                        if reversed_:
                            inserted = reverse_complement_seq(inserted)
                        counts.short_insertion[inserted] += 1
                seq_pos += length
            elif op is CigarOp.SOFT_CLIP:
                if self._counted(chromosome, real):
                    counts.softclip_length[length] += 1
                seq_pos += length
            elif op is CigarOp.REF_SKIP:
                ref_pos += length
            elif op is CigarOp.HARD_CLIP:
                if self._counted(chromosome, real):
                    counts.hardclip_length[length] += 1
            elif op is CigarOp.PAD:
                pass
            else:
                self._count_matches(
                    chromosome, cache, cache_start, ref_pos, seq[seq_pos : seq_pos + length],
                    length, reversed_,
                )
                seq_pos += length
                ref_pos += length

    def _count_matches(
        self,
        chromosome: str,
        cache: bytes,
        cache_start: int,
        ref_pos: int,
        match_seq: bytes,
        length: int,
        reversed_: bool,
    ) -> None:
        counts = self.counts
        match_ref = cache[ref_pos : ref_pos + length]
        for i, (r, s) in enumerate(zip(match_ref, match_seq)):
            if not self._counted(chromosome, ref_pos + cache_start + i):
                continue
            r_base = bytes([r])
            s_base = bytes([s])
            before = cache[i + ref_pos - 1 : i + ref_pos]
            after = cache[i + ref_pos + 1 : i + ref_pos + 2]
            ref_acid = r_base.upper()
            triplet = (before + r_base + after).upper()
            if reversed_:
                ref_acid = reverse_complement(ref_acid)
                triplet = reverse_complement_seq(triplet)
            counts.total_reference_base[ref_acid] += 1
            counts.total_reference_triplet[triplet] += 1
            if r_base.upper() != s_base.upper():
                mismatch = Mismatch.create(r_base, s_base)
                mismatch_triplet = MismatchTriplet.create(
                    before + r_base + after, before + s_base + after
                )
                if reversed_:
                    mismatch = mismatch.reverse_complement()
                    mismatch_triplet = mismatch_triplet.reverse_complement()
                counts.mismatch[mismatch] += 1
                counts.mismatch_triplet[mismatch_triplet] += 1

    def add_records(self, records: Iterable[AlignedRead], min_mapq: int = 0) -> int:
        """Count mapped reads with enough mapping quality; return how many were used."""
        record_count = 0
        for record in records:
            if record.chromosome is None or record.mapq < min_mapq:
                continue
            if record.chromosome not in self.regions:
                continue
            self.add_record(record)
            record_count += 1
            if record_count % 10_000 == 0 and (
                len(record.sequence) > 500 or record_count % 1_000_000 == 0
            ):
                print(f"Processing {record_count} records", file=sys.stderr)
        return record_count