import gzip
import io
import random

import pytest

from seqtoolkit.sampling import random_sampling, sample_pairs


def _fastq(count, read):
    return b"".join(
        b"@pair%d/%d\nACGT\n+\nIIII\n" % (i, read) for i in range(count)
    )


def _names(data, read):
    suffix = b"/%d" % read
    return [line[1 : -len(suffix)] for line in data.splitlines()[::4]]


def _run(data1, data2, ratio, seed):
    out1, out2 = io.BytesIO(), io.BytesIO()
    sampled = sample_pairs(
        io.BytesIO(data1), io.BytesIO(data2), out1, out2, ratio, random.Random(seed)
    )
    return sampled, out1.getvalue(), out2.getvalue()


def test_ratio_one_keeps_everything():
    data1, data2 = _fastq(20, 1), _fastq(20, 2)
    sampled, out1, out2 = _run(data1, data2, 1.0, 3)
    assert (out1, out2) == (data1, data2)
    assert sampled == len(data1.splitlines()) // 4


def test_ratio_zero_keeps_nothing():
    sampled, out1, out2 = _run(_fastq(20, 1), _fastq(20, 2), 0.0, 3)
    assert sampled == 0
    assert out1 == out2 == b""


def test_sampled_pairs_stay_together():
    sampled, out1, out2 = _run(_fastq(200, 1), _fastq(200, 2), 0.3, 7)
    names1, names2 = _names(out1, 1), _names(out2, 2)
    assert names1 == names2
    assert len(names1) == sampled
    assert set(names1) <= set(_names(_fastq(200, 1), 1))


def test_same_seed_gives_same_sample():
    first = _run(_fastq(100, 1), _fastq(100, 2), 0.5, 11)
    second = _run(_fastq(100, 1), _fastq(100, 2), 0.5, 11)
    assert first == second


def test_extra_record_in_second_file_raises():
    with pytest.raises(ValueError, match="different number of lines"):
        _run(_fastq(3, 1), _fastq(4, 2), 0.5, 1)


def test_truncated_first_file_raises():
    with pytest.raises(ValueError, match="FASTQ1"):
        _run(_fastq(3, 1) + b"@x/1\nACGT\n", _fastq(4, 2), 0.5, 1)


def test_truncated_second_file_raises():
    with pytest.raises(ValueError, match="FASTQ2"):
        _run(_fastq(3, 1), _fastq(2, 2), 0.5, 1)


def test_random_sampling_files(tmp_path):
    in1, in2 = tmp_path / "r1.fastq", tmp_path / "r2.fastq.gz"
    in1.write_bytes(_fastq(50, 1))
    with gzip.open(in2, "wb") as handle:
        handle.write(_fastq(50, 2))
    out1, out2 = tmp_path / "o1.fastq.gz", tmp_path / "o2.fastq"

    sampled = random_sampling(in1, in2, out1, out2, 0.4, random.Random(5))

    data1 = gzip.decompress(out1.read_bytes())
    data2 = out2.read_bytes()
    assert _names(data1, 1) == _names(data2, 2)
    assert len(_names(data1, 1)) == sampled