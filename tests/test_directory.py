import pytest

from tinyvfs.directory import (
    add_dir_entry,
    dir_lookup,
    iter_dir_entries,
    name_is_valid,
    remove_dir_entry,
)
from tinyvfs.layout import DIR_ENTRIES_PER_BLOCK, FILENAME_MAX_LEN, ROOTDIR_INODE, VFSError
from tinyvfs.mkfs import make_filesystem


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "disk.img"
    make_filesystem(path, 100, 16)
    return path


@pytest.mark.parametrize("name", ["a", "file.txt", "my_file-2", "A" * (FILENAME_MAX_LEN - 1)])
def test_valid_names(name):
    assert name_is_valid(name) is True


@pytest.mark.parametrize(
    "name", ["", None, "A" * FILENAME_MAX_LEN, "with space", "slash/name", "ñandú", "tab\t"]
)
def test_invalid_names(name):
    assert name_is_valid(name) is False


def test_fresh_root_has_dot_entries(image):
    entries = list(iter_dir_entries(image))
    assert [e.name for e in entries] == [".", ".."]
    assert all(e.inode == ROOTDIR_INODE for e in entries)


def test_lookup_dot(image):
    assert dir_lookup(image, ".") == ROOTDIR_INODE


def test_lookup_missing_returns_zero(image):
    assert dir_lookup(image, "missing") == 0


def test_add_then_lookup(image):
    add_dir_entry(image, "hello.txt", 5)
    assert dir_lookup(image, "hello.txt") == 5
    assert [e.name for e in iter_dir_entries(image)] == [".", "..", "hello.txt"]


def test_add_invalid_name_raises(image):
    with pytest.raises(VFSError):
        add_dir_entry(image, "bad name", 3)
    assert dir_lookup(image, "bad name") == 0


def test_remove_entry(image):
    add_dir_entry(image, "gone", 4)
    assert remove_dir_entry(image, "gone") is True
    assert dir_lookup(image, "gone") == 0
    assert [e.name for e in iter_dir_entries(image)] == [".", ".."]


def test_remove_missing_returns_false(image):
    assert remove_dir_entry(image, "nothing") is False


def test_freed_slot_is_reused(image):
    add_dir_entry(image, "first", 2)
    add_dir_entry(image, "second", 3)
    remove_dir_entry(image, "first")
    add_dir_entry(image, "third", 4)
    assert [e.name for e in iter_dir_entries(image)] == [".", "..", "third", "second"]


def test_directory_full(image):
    for n in range(DIR_ENTRIES_PER_BLOCK - 2):
        add_dir_entry(image, f"f{n}", 2)
    assert len(list(iter_dir_entries(image))) == DIR_ENTRIES_PER_BLOCK
    with pytest.raises(VFSError):
        add_dir_entry(image, "overflow", 3)