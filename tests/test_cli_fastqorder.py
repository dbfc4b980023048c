import pytest

from seqtoolkit.cli_fastqorder import main

PREFIX = "A00123:8:HFLOWCELL:1"
DNB_PREFIX = "E100012345L1C"

POSITIONS = [
    (1101, 1000, 2000, "N:0:ACGT"),
    (1101, 1500, 2000, "N:0:GGGG"),
    (1101, 900, 2100, "N:0:ACGT"),
    (1102, 10, 10, "N:0:ACGT"),
    (1102, 20, 10, "N:0:ACGT"),
]


def records(names, seqs):
    return "".join(f"@{name}\n{seq}\n+\n{'F' * len(seq)}\n" for name, seq in zip(names, seqs))


def reversed_records(text):
    lines = text.splitlines(keepends=True)
    chunks = ["".join(lines[i:i + 4]) for i in range(0, len(lines), 4)]
    return "".join(reversed(chunks))


SEQS = ["ACGT", "TTGA", "GGCA", "CATG", "AAAA"]


def write_illumina(tmp_path):
    fq1 = tmp_path / "r1.fastq"
    fq2 = tmp_path / "r2.fastq"
    fq1.write_text(records([f"{PREFIX}:{t}:{x}:{y} 1:{i}" for t, x, y, i in POSITIONS], SEQS))
    fq2.write_text(records([f"{PREFIX}:{t}:{x}:{y} 2:{i}" for t, x, y, i in POSITIONS], SEQS))
    return fq1, fq2


def test_fastq_check_command(tmp_path):
    fq1, fq2 = write_illumina(tmp_path)
    out = tmp_path / "info.txt"
    assert main(["fastq-check", str(fq1), str(fq2), "-o", str(out)]) == 0
    lines = out.read_text().splitlines()
    assert "FASTQ_TYPE\tIllumina" in lines
    assert lines[-1] == "VERIFY_RESULT\tOK"


def test_fastq_check_command_failure(tmp_path):
    fq1, fq2 = write_illumina(tmp_path)
    out = tmp_path / "info.txt"
    assert main(["fastq-check", str(fq1), str(fq1), "-o", str(out)]) == 1
    assert out.read_text().splitlines()[-1] == "VERIFY_RESULT\tNG"


@pytest.mark.parametrize("read, index", [("1", 0), ("2", 1)])
def test_illumina_reorder_round_trip(tmp_path, read, index):
    originals = write_illumina(tmp_path)
    info = tmp_path / "info.txt"
    assert main(["fastq-check", str(originals[0]), str(originals[1]), "-o", str(info)]) == 0

    original = originals[index]
    shuffled = tmp_path / "shuffled.fastq"
    shuffled.write_text(reversed_records(original.read_text()))
    restored = tmp_path / "restored.fastq"
    code = main([
        "illumina-fastq-reorder", str(shuffled), "-o", str(restored),
        "-i", str(info), "-r", read, "-m", "2", "--temporary", str(tmp_path),
    ])
    assert code == 0
    assert restored.read_bytes() == original.read_bytes()


def test_illumina_reorder_without_info(tmp_path):
    fq1, _ = write_illumina(tmp_path)
    shuffled = tmp_path / "shuffled.fastq"
    shuffled.write_text(reversed_records(fq1.read_text()))
    restored = tmp_path / "restored.fastq"
    assert main(["illumina-fastq-reorder", str(shuffled), "-o", str(restored)]) == 0
    headers = restored.read_text().splitlines()[::4]
    assert headers == [f"@{PREFIX}:{t}:{x}:{y}" for t, x, y, _ in POSITIONS]


def test_dnbseq_reorder_round_trip(tmp_path):
    entries = [("002R001", "0000001"), ("002R001", "0000003"), ("001R001", "0000002")]
    fq1 = tmp_path / "d1.fastq"
    fq2 = tmp_path / "d2.fastq"
    fq1.write_text(records([f"{DNB_PREFIX}{g}{i}/1" for g, i in entries], SEQS))
    fq2.write_text(records([f"{DNB_PREFIX}{g}{i}/2" for g, i in entries], SEQS))
    info = tmp_path / "info.txt"
    assert main(["fastq-check", str(fq1), str(fq2), "-o", str(info)]) == 0

    shuffled = tmp_path / "shuffled.fastq"
    shuffled.write_text(reversed_records(fq2.read_text()))
    restored = tmp_path / "restored.fastq"
    code = main([
        "dnbseq-fastq-reorder", str(shuffled), "-o", str(restored),
        "-i", str(info), "-r", "2", "-m", "1",
    ])
    assert code == 0
    assert restored.read_bytes() == fq2.read_bytes()


def test_dnbseq_reorder_requires_info(tmp_path):
    with pytest.raises(SystemExit):
        main(["dnbseq-fastq-reorder", str(tmp_path / "x.fastq"), "-o", str(tmp_path / "y")])


def test_reorder_missing_input_returns_error(tmp_path):
    code = main([
        "illumina-fastq-reorder", str(tmp_path / "missing.fastq"),
        "-o", str(tmp_path / "out.fastq"),
    ])
    assert code == 1