import io
import sys

import pytest

from seqtoolkit.bed import U64_MAX, BedReader, BedRegion
from seqtoolkit.bedcli import extend_bed, main, merge_bed
from seqtoolkit.streams import open_input


@pytest.fixture
def sample_bed(tmp_path):
    path = tmp_path / "sample1.bed"
    path.write_bytes(b"1\t100\t200\n1\t300\t400\n")
    return path


def _regions(path):
    with open_input(path) as reader:
        return list(BedReader(reader))


def test_expand(tmp_path, sample_bed):
    output = tmp_path / "expanded.bed"
    assert main(["extend-bed", "-o", str(output), "--expand", "10", str(sample_bed)]) == 0
    assert _regions(output)[0] == BedRegion(b"1", 90, 210, [])


def test_expand2(tmp_path, sample_bed):
    output = tmp_path / "expanded2.bed"
    code = main(
        [
            "extend-bed",
            "-o",
            str(output),
            "--expand-start",
            "200",
            "--expand-end",
            "100",
            str(sample_bed),
        ]
    )
    assert code == 0
    regions = _regions(output)
    assert regions[0] == BedRegion(b"1", 0, 300, [])
    assert regions[1] == BedRegion(b"1", 100, 500, [])


def test_extend_saturates_at_max(tmp_path):
    source = tmp_path / "big.bed"
    source.write_bytes(f"c\t5\t{U64_MAX - 3}\tname\n".encode())
    output = tmp_path / "out.bed.gz"
    extend_bed(str(source), str(output), 1, 10)
    assert _regions(output) == [BedRegion(b"c", 4, U64_MAX, [b"name"])]


def test_expand_conflicts_with_start():
    with pytest.raises(SystemExit):
        main(["extend-bed", "--expand", "1", "--expand-start", "2", "--expand-end", "3"])


def test_expand_start_requires_end():
    with pytest.raises(SystemExit):
        main(["extend-bed", "--expand-start", "2"])


def test_merge_bed_files(tmp_path):
    first = tmp_path / "a.bed"
    first.write_bytes(b"chr2\t10\t20\nchr1\t0\t10\n")
    second = tmp_path / "b.bed"
    second.write_bytes(b"chr1\t5\t15\n")
    output = tmp_path / "merged.bed"
    merge_bed([str(first), str(second)], str(output))
    assert output.read_bytes() == b"chr1\t0\t15\nchr2\t10\t20\n"


def test_merge_bed_from_stdin(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"x\t1\t4\nx\t3\t8\n")))
    raw = io.BytesIO()
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(raw))
    assert main(["merge-bed"]) == 0
    assert raw.getvalue() == b"x\t1\t8\n"


def test_main_reports_bad_input(tmp_path):
    bad = tmp_path / "bad.bed"
    bad.write_bytes(b"chr1\t1\n")
    assert main(["merge-bed", str(bad), "-o", str(tmp_path / "o.bed")]) == 1