import pytest

from tinyvfs.layout import (
    BLOCK_SIZE,
    DIR_ENTRIES_PER_BLOCK,
    FILENAME_MAX_LEN,
    INODE_MODE_DIR,
    INODE_SIZE,
    INODES_PER_BLOCK,
    MAGIC_NUMBER,
    NUM_INDIRECT_PTRS,
    DirEntry,
    Inode,
    Superblock,
    VFSError,
    pack_dir_block,
    pack_pointers,
    unpack_dir_block,
    unpack_pointers,
)


def test_inode_record_is_64_bytes():
    assert INODE_SIZE == 64
    assert len(Inode().to_bytes()) == INODE_SIZE
    assert INODES_PER_BLOCK * INODE_SIZE == BLOCK_SIZE


def test_superblock_starts_with_little_endian_magic():
    data = Superblock().to_bytes()
    assert data[:4] == MAGIC_NUMBER.to_bytes(4, "little")


def test_superblock_round_trip():
    sb = Superblock(
        total_blocks=100,
        inode_blocks=2,
        bitmap_blocks=1,
        free_blocks=90,
        inode_count=32,
        free_inodes=30,
        bitmap_zeroes=[7, 1, 2, 3, 4, 5, 6, 8],
        inode_start=1,
        bitmap_start=3,
        data_start=4,
    )
    assert Superblock.from_bytes(sb.to_bytes()) == sb


def test_superblock_from_short_data_raises():
    with pytest.raises(VFSError):
        Superblock.from_bytes(b"\0" * 10)


def test_inode_round_trip():
    inode = Inode(
        mode=INODE_MODE_DIR | 0o755,
        uid=1000,
        gid=100,
        blocks=3,
        size=2500,
        direct=[10, 11, 12, 0, 0, 0, 0],
        indirect=0,
        atime=111,
        mtime=222,
        ctime=333,
    )
    assert Inode.from_bytes(inode.to_bytes()) == inode


def test_inode_is_free():
    assert Inode().is_free()
    assert not Inode(mode=INODE_MODE_DIR).is_free()


def test_dir_entry_wire_format():
    data = DirEntry(1, ".").to_bytes()
    assert data == b"\x01\x00\x00\x00." + b"\0" * (FILENAME_MAX_LEN - 1)


def test_dir_entry_round_trip():
    entry = DirEntry(42, "notes-v1.txt")
    assert DirEntry.from_bytes(entry.to_bytes()) == entry


def test_dir_entry_long_name_is_cut_to_field_width():
    entry = DirEntry(5, "x" * (FILENAME_MAX_LEN + 4))
    assert DirEntry.from_bytes(entry.to_bytes()).name == "x" * FILENAME_MAX_LEN


def test_dir_block_round_trip_keeps_slots():
    entries = [DirEntry(1, "."), DirEntry(1, ".."), DirEntry(0, ""), DirEntry(9, "a")]
    block = pack_dir_block(entries)
    assert len(block) == BLOCK_SIZE
    decoded = unpack_dir_block(block)
    assert len(decoded) == DIR_ENTRIES_PER_BLOCK
    assert decoded[: len(entries)] == entries
    assert all(e.inode == 0 for e in decoded[len(entries) :])


def test_dir_block_too_many_entries():
    with pytest.raises(VFSError):
        pack_dir_block([DirEntry(1, "a")] * (DIR_ENTRIES_PER_BLOCK + 1))


def test_pointers_round_trip():
    block = pack_pointers([5, 6, 7])
    assert len(block) == BLOCK_SIZE
    pointers = unpack_pointers(block)
    assert len(pointers) == NUM_INDIRECT_PTRS
    assert pointers[:3] == [5, 6, 7]
    assert set(pointers[3:]) == {0}


def test_pointers_too_many():
    with pytest.raises(VFSError):
        pack_pointers(range(NUM_INDIRECT_PTRS + 1))


def test_unpack_pointers_short_block():
    with pytest.raises(VFSError):
        unpack_pointers(b"\0" * (BLOCK_SIZE - 1))