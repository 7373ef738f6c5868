import pytest

from tinyvfs.bitmap import bitmap_set_first_free
from tinyvfs.blockdev import read_block
from tinyvfs.inode import read_inode
from tinyvfs.layout import (
    BLOCK_SIZE,
    INODE_MODE_DIR,
    INODES_PER_BLOCK,
    MAGIC_NUMBER,
    ROOTDIR_INODE,
    VFS_MAX_BLOCKS,
    VFS_MIN_BLOCKS,
    VFSError,
    unpack_dir_block,
)
from tinyvfs.mkfs import main, make_filesystem, round_up_inodes
from tinyvfs.superblock import read_superblock


def test_round_up_inodes():
    assert round_up_inodes(1) == INODES_PER_BLOCK
    assert round_up_inodes(INODES_PER_BLOCK) == INODES_PER_BLOCK
    assert round_up_inodes(INODES_PER_BLOCK + 1) == 2 * INODES_PER_BLOCK


def test_layout_of_new_filesystem(tmp_path):
    path = tmp_path / "fs.img"
    sb = make_filesystem(path, 100, 20)
    assert sb.magic == MAGIC_NUMBER
    assert sb.total_blocks == 100
    assert sb.inode_count == round_up_inodes(20)
    assert sb.inode_blocks == sb.inode_count // INODES_PER_BLOCK
    assert sb.inode_start == sb.superblock_blocks
    assert sb.bitmap_start == sb.inode_start + sb.inode_blocks
    assert sb.data_start == sb.bitmap_start + sb.bitmap_blocks
    assert sb.free_blocks == sb.total_blocks - sb.data_start - 1
    assert sb.free_inodes == sb.inode_count - 1
    assert path.stat().st_size == 100 * BLOCK_SIZE


def test_root_directory(tmp_path):
    path = tmp_path / "fs.img"
    sb = make_filesystem(path, 100, 16)
    root = read_inode(path, ROOTDIR_INODE)
    assert root.mode == INODE_MODE_DIR | 0o755
    assert root.blocks == 1
    assert root.size == BLOCK_SIZE
    assert root.direct[0] == sb.data_start
    entries = unpack_dir_block(read_block(path, root.direct[0]))
    assert [(e.inode, e.name) for e in entries[:2]] == [
        (ROOTDIR_INODE, "."),
        (ROOTDIR_INODE, ".."),
    ]
    assert all(e.inode == 0 for e in entries[2:])


def test_next_free_block_follows_root(tmp_path):
    path = tmp_path / "fs.img"
    sb = make_filesystem(path, 100, 16)
    assert bitmap_set_first_free(path) == sb.data_start + 1


@pytest.mark.parametrize(
    "blocks, inodes",
    [
        (VFS_MIN_BLOCKS - 1, 16),
        (VFS_MAX_BLOCKS, 16),
        (100, INODES_PER_BLOCK - 1),
        (100, 100),
    ],
)
def test_rejects_bad_sizes(tmp_path, blocks, inodes):
    path = tmp_path / "fs.img"
    with pytest.raises(VFSError):
        make_filesystem(path, blocks, inodes)
    assert not path.exists()


def test_refuses_existing_image(tmp_path):
    path = tmp_path / "fs.img"
    make_filesystem(path, 100, 16)
    with pytest.raises(VFSError):
        make_filesystem(path, 100, 16)


def test_main_success(tmp_path):
    path = tmp_path / "fs.img"
    assert main([str(path), "100", "16"]) == 0
    assert read_superblock(path).total_blocks == 100


def test_main_wrong_argument_count(tmp_path):
    assert main([str(tmp_path / "fs.img")]) == 1


def test_main_bad_numbers(tmp_path):
    path = tmp_path / "fs.img"
    assert main([str(path), "many", "16"]) == 1
    assert main([str(path), "10", "16"]) == 1
    assert not path.exists()