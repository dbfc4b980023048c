import os

import pytest

from seqtoolkit.largereorder import LargeReorder


def test_large_reorder(tmp_path):
    reorder = LargeReorder(2, tmp_path, "tmp.")
    for i in range(20):
        reorder.add(100 - i)
    result = list(reorder)
    reorder.close()
    assert result == list(range(81, 101))


def test_spills_to_temp_dir_with_prefix(tmp_path):
    with LargeReorder(3, tmp_path, "chunk.") as reorder:
        for value in [5, 3, 9, 1, 7, 2, 8]:
            reorder.add(value)
        names = os.listdir(tmp_path)
        assert len(names) == 2
        assert all(name.startswith("chunk.") for name in names)
        assert list(reorder) == [1, 2, 3, 5, 7, 8, 9]


def test_close_removes_temp_files(tmp_path):
    with LargeReorder(1, tmp_path) as reorder:
        for value in "dcba":
            reorder.add(value)
        assert list(reorder) == ["a", "b", "c", "d"]
    assert os.listdir(tmp_path) == []


def test_empty(tmp_path):
    with LargeReorder(10, tmp_path) as reorder:
        assert list(reorder) == []


def test_in_memory_only_is_sorted(tmp_path):
    with LargeReorder(1000, tmp_path) as reorder:
        values = [7, 3, 3, 10, -1]
        for value in values:
            reorder.add(value)
        assert list(reorder) == sorted(values)


def test_equal_keys_keep_insertion_order(tmp_path):
    class Item:
        def __init__(self, key, tag):
            self.key = key
            self.tag = tag

        def __lt__(self, other):
            return self.key < other.key

    with LargeReorder(2, tmp_path) as reorder:
        for tag, key in enumerate([1, 0, 1, 0, 1]):
            reorder.add((key, tag))
        result = list(reorder)
    assert [key for key, _ in result] == [0, 0, 1, 1, 1]
    assert result == sorted(result)


def test_add_after_close_raises(tmp_path):
    reorder = LargeReorder(2, tmp_path)
    reorder.close()
    with pytest.raises(ValueError):
        reorder.add(1)