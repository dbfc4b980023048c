"""Tools for BED regions, FASTQ order checks and reordering, FASTQ statistics and sequencing error counts."""

__version__ = "0.1.0"