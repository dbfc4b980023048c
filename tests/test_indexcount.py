import io
from collections import Counter

import pytest

from seqtoolkit.indexcount import count_index, index_count

PAIRS = [
    ("ACGT", "TTGG"),
    ("ACGT", "TTGG"),
    ("ACGT", "CCAA"),
    ("GGGG", "TTGG"),
    ("ACGT", "TTGG"),
]


def _fastq(pairs, line_end=b"\n"):
    records = []
    for i, (first, second) in enumerate(pairs):
        name = f"@M:1:FC:1:1101:{i}:1 1:N:0:{first}+{second}".encode()
        records.append(name + line_end + b"ACGT\n+\nIIII\n")
    return b"".join(records)


def test_counts_each_index_and_pair():
    result = count_index(io.BytesIO(_fastq(PAIRS)))
    assert result.fastq1 == Counter(first for first, _ in PAIRS)
    assert result.fastq2 == Counter(second for _, second in PAIRS)
    assert result.pair == Counter(f"{a}+{b}" for a, b in PAIRS)


def test_line_end_whitespace_is_trimmed():
    result = count_index(io.BytesIO(_fastq([("AAAA", "CCCC")], line_end=b"\r\n")))
    assert result.pair == Counter(["AAAA+CCCC"])


def test_index_without_plus_raises():
    data = b"@M:1:FC:1:1101:1:1 1:N:0:ACGT\nACGT\n+\nIIII\n"
    with pytest.raises(ValueError, match="Invalid index"):
        count_index(io.BytesIO(data))


def test_index_with_three_parts_raises():
    data = b"@M:1:FC:1:1101:1:1 1:N:0:A+C+G\nACGT\n+\nIIII\n"
    with pytest.raises(ValueError, match="Invalid index"):
        count_index(io.BytesIO(data))


def test_index_count_writes_sections_most_frequent_first(tmp_path):
    source = tmp_path / "in.fastq"
    source.write_bytes(_fastq(PAIRS))
    output = tmp_path / "out.tsv"

    result = index_count(source, output)

    rows = [line.split("\t") for line in output.read_text().splitlines()]
    labels = [row[0] for row in rows]
    assert labels == sorted(labels, key=["read1", "read2", "pair"].index)

    sections = {"read1": result.fastq1, "read2": result.fastq2, "pair": result.pair}
    for label, counter in sections.items():
        section = [(index, int(n)) for key, index, n in rows if key == label]
        assert dict(section) == dict(counter)
        counts = [n for _, n in section]
        assert counts == sorted(counts, reverse=True)