import pytest

from seqtoolkit.cli_fastqutils import main
from seqtoolkit.indexcount import index_count
from seqtoolkit.triplet import fastq_triplet


def _fastq(count, read):
    return b"".join(
        b"@M:1:FC:1:1101:%d:1 %d:N:0:ACGT+TTGG\nACGTAC\n+\nIIIIII\n" % (i, read)
        for i in range(count)
    )


@pytest.fixture
def fastq_pair(tmp_path):
    first, second = tmp_path / "r1.fastq", tmp_path / "r2.fastq"
    first.write_bytes(_fastq(10, 1))
    second.write_bytes(_fastq(10, 2))
    return first, second


def test_fastq_triplet_command_matches_library(tmp_path, fastq_pair):
    source = fastq_pair[0]
    cli_out = [tmp_path / f"cli{k}.tsv" for k in (3, 2, 1)]
    lib_out = [tmp_path / f"lib{k}.tsv" for k in (3, 2, 1)]

    status = main(
        ["fastq-triplet", str(source), "-t", str(cli_out[0]),
         "-d", str(cli_out[1]), "-s", str(cli_out[2])]
    )
    fastq_triplet(source, *lib_out)

    assert status == 0
    for cli_path, lib_path in zip(cli_out, lib_out):
        assert cli_path.read_text() == lib_path.read_text()


def test_index_count_command_matches_library(tmp_path, fastq_pair):
    cli_path, lib_path = tmp_path / "cli.tsv", tmp_path / "lib.tsv"
    assert main(["index-count", str(fastq_pair[0]), "-o", str(cli_path)]) == 0
    index_count(fastq_pair[0], lib_path)
    assert cli_path.read_text() == lib_path.read_text()


def test_index_count_command_reports_bad_input(tmp_path):
    source = tmp_path / "bad.fastq"
    source.write_bytes(b"@M:1:FC:1:1101:1:1 1:N:0:ACGT\nACGT\n+\nIIII\n")
    assert main(["index-count", str(source), "-o", str(tmp_path / "out.tsv")]) == 1


def test_random_sampling_command_keeps_all_with_ratio_one(tmp_path, fastq_pair):
    out1, out2 = tmp_path / "o1.fastq", tmp_path / "o2.fastq"
    status = main(
        ["random-sampling", "-1", str(fastq_pair[0]), "-2", str(fastq_pair[1]),
         "-a", str(out1), "-b", str(out2), "-r", "1.0"]
    )
    assert status == 0
    assert out1.read_bytes() == fastq_pair[0].read_bytes()
    assert out2.read_bytes() == fastq_pair[1].read_bytes()


def test_random_sampling_command_reports_missing_file(tmp_path, fastq_pair):
    status = main(
        ["random-sampling", "--i1", str(tmp_path / "missing.fastq"),
         "-2", str(fastq_pair[1]), "-a", str(tmp_path / "a"), "-b", str(tmp_path / "b")]
    )
    assert status == 1


def test_missing_required_option_exits():
    with pytest.raises(SystemExit):
        main(["index-count", "in.fastq"])