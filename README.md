# seqtoolkit

Small tools for everyday sequencing data work, using only the Python
standard library:

- **BED regions**: read and write BED files, extend regions on both sides,
  and merge overlapping regions per chromosome.
- **FASTQ read order**: check that a pair of FASTQ files is paired and in
  instrument order, record what is needed to restore that order, and sort a
  FASTQ file back into that order while reporting its MD5 checksum.
  Illumina and DNBSeq read names are supported.
- **FASTQ statistics**: count single bases, doublets and triplets (overall
  and per read position), count sample indexes from read names, and randomly
  sample read pairs from paired FASTQ files.
- **Sequencing errors**: count mismatches, mismatch triplets, insertions,
  deletions and clips of aligned reads against a reference, restricted to
  target regions and skipping known variant positions.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line tools

Three commands are installed. Pass `--help` to any of them, or to one of
their subcommands, to see the options.

```
seqtoolkit-bed --help
seqtoolkit-fastqorder --help
seqtoolkit-fastqutils --help
```

`seqtoolkit-bed`

- `extend-bed [INPUT] [-o OUTPUT] (-e N | -s N -n N)` widens every region
  by `--expand` on both sides, or by `--expand-start` and `--expand-end`.
  Starts stop at 0.
- `merge-bed [INPUT ...] [-o OUTPUT]` merges overlapping regions of all
  inputs and writes them sorted by chromosome and start.

Without an input or output path, standard input or standard output is used.

`seqtoolkit-fastqorder` (`-v` / `-vv` raise the log level)

- `fastq-check FASTQ1 FASTQ2 [-o OUTPUT] [-s SUMMARY] [-b ORAD]` checks the
  pair and writes a tab-separated report (`FASTQ_TYPE`, prefix, common and
  special indexes or DNBSeq group order, both MD5 sums and `VERIFY_RESULT`).
  Files ending in `.ora` are decoded by running the `orad` program given by
  `--orad-binary`.
- `illumina-fastq-reorder INPUT -o OUTPUT [-i INFO] [-r {1,2}]` sorts an
  Illumina FASTQ by flowcell prefix, tile and position. With a report from
  `fastq-check`, the read index is written back into each name and the MD5
  of the output is compared with the one recorded for the chosen read.
- `dnbseq-fastq-reorder INPUT -o OUTPUT -i INFO [-r {1,2}]` does the same
  for DNBSeq files; the report is required.

Both reorder commands take `--temporary DIR` for their temporary files and
`-m/--mem N` for how many entries are kept in memory (default 1000000).

`seqtoolkit-fastqutils`

- `fastq-triplet FASTQ -t TRIPLET -d DOUBLET -s SINGLE` writes three
  reports of `all` and per-position counts. Sequences longer than 300 bases
  are rejected.
- `index-count FASTQ -o OUTPUT` counts the `INDEX1+INDEX2` suffix of read
  names and writes `read1`, `read2` and `pair` counts, most frequent first.
- `random-sampling -1 IN1 -2 IN2 -a OUT1 -b OUT2 [-r RATIO]` keeps each read
  pair with probability `RATIO` (default 0.1).

Input files compressed with gzip, bzip2 or xz are recognised by their
content. Output files ending in `.gz`, `.bz2` or `.xz` are written
compressed; other paths are written as plain files.

## Library use

### BED files

```python
from seqtoolkit.bed import BedReader
from seqtoolkit.bedmerge import BedMerger

merger = BedMerger()
with open("targets.bed", "rb") as handle:
    for region in BedReader(handle):
        merger.add(region)

with open("merged.bed", "wb") as out:
    merger.export_bed(out)
```

`seqtoolkit.bedcli.extend_bed` and `seqtoolkit.bedcli.merge_bed` do the
work of the two subcommands on file paths.

### FASTQ read order

`seqtoolkit.fastqcheck.fastq_check` runs the check and returns a
`FastqVerifyResult`; `check_order` does the same on an open text output.
The report is read back with `seqtoolkit.fastqinfo.IlluminaFastqInfo.load`
or `seqtoolkit.fastqinfo.DnbseqFastqInfo.load`.
`seqtoolkit.reorder.reorder_illumina` and `seqtoolkit.reorder.reorder_dnbseq`
return the MD5 of the file they wrote. Sorting spills sorted runs to
compressed temporary files through `seqtoolkit.largereorder.LargeReorder`,
so files larger than memory can be reordered.

### FASTQ statistics

```python
from seqtoolkit.indexcount import count_index

with open("reads_R1.fastq", "rb") as handle:
    counts = count_index(handle)
print(counts.pair.most_common(5))
```

`seqtoolkit.triplet.count_kmers` counts bases, doublets and triplets from a
binary stream, and `seqtoolkit.sampling.sample_pairs` samples read pairs
from two open streams with a `random.Random` you supply.

### Sequencing errors

```python
from seqtoolkit.seqerror import AlignedRead, Regions, SequencingErrorProcessor

reference = {"chrM": b"ACGTACGTAC"}
regions = Regions.from_sequence_lengths({"chrM": 10})
processor = SequencingErrorProcessor(3, reference, regions)
processor.add_record(AlignedRead("read1", "chrM", 2, "4M", b"GTTC"))
print(processor.counts.mismatch)
```

Reads are given as `AlignedRead` objects (0-based position, CIGAR string or
list of `CigarOp` pairs, sequence, mapping quality, strand). Target regions
come from `Regions.load_from_bed` or `Regions.from_sequence_lengths`, and
known variants as `KnownVariant` objects. `add_records` skips unmapped
reads and reads below a minimum mapping quality.

## What is not included

The package does not read or write SAM, BAM or CRAM files, indexed FASTA
or VCF files. There is no command that converts alignments to FASTQ,
lists read groups, or samples, renames or concatenates alignment files, and
no command-line tool for sequencing error counting: the counting is
available only as the library API above, with reads, reference sequences
and known variants supplied by the caller.