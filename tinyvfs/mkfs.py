"""Creating a new, empty filesystem image."""

from __future__ import annotations

import os
import sys
import time

from .bitmap import bitmap_set_first_free
from .blockdev import create_block_device, write_block
from .inode import write_inode
from .layout import (
    BITS_PER_BLOCK,
    BLOCK_SIZE,
    INODE_MODE_DIR,
    INODE_SIZE,
    INODES_PER_BLOCK,
    MAX_INODE_BLOCKS,
    ROOTDIR_INODE,
    SB_BLOCK_NUMBER,
    VFS_MAX_BLOCKS,
    VFS_MIN_BLOCKS,
    DirEntry,
    Inode,
    Superblock,
    VFSError,
    pack_dir_block,
)
from .superblock import read_superblock, write_superblock


def init_superblock(image_path, total_blocks: int, total_inodes: int) -> None:
    """Write a fresh superblock and mark the metadata blocks as used."""
    inode_blocks = total_inodes // INODES_PER_BLOCK
    bitmap_blocks = (total_blocks + BITS_PER_BLOCK - 1) // BITS_PER_BLOCK
    inode_start = 1
    bitmap_start = inode_start + inode_blocks
    data_start = bitmap_start + bitmap_blocks

    zeroes = [0] * MAX_INODE_BLOCKS
    zeroes[0] = BITS_PER_BLOCK - data_start
    for i in range(1, bitmap_blocks):
        zeroes[i] = BITS_PER_BLOCK

    sb = Superblock(
        total_blocks=total_blocks,
        superblock_blocks=1,
        inode_blocks=inode_blocks,
        bitmap_blocks=bitmap_blocks,
        free_blocks=total_blocks,
        inode_size=INODE_SIZE,
        inode_count=total_inodes,
        free_inodes=total_inodes,
        bitmap_zeroes=zeroes,
        inode_start=inode_start,
        bitmap_start=bitmap_start,
        data_start=data_start,
    )
    write_block(image_path, SB_BLOCK_NUMBER, sb.to_bytes().ljust(BLOCK_SIZE, b"\0"))

    for expected in range(data_start):
        if bitmap_set_first_free(image_path) != expected:
            raise VFSError("unexpected error while reserving metadata blocks")


def _current_ids() -> tuple[int, int]:
    getuid = getattr(os, "getuid", None)
    getgid = getattr(os, "getgid", None)
    return (getuid() if getuid else 0, getgid() if getgid else 0)


def create_root_dir(image_path) -> None:
    """Create the root directory with its '.' and '..' entries."""
    sb = read_superblock(image_path)
    if sb.free_inodes == 0 or sb.free_blocks == 0:
        raise VFSError("no room for the root directory")

    block = bitmap_set_first_free(image_path)
    entries = [DirEntry(ROOTDIR_INODE, "."), DirEntry(ROOTDIR_INODE, "..")]
    write_block(image_path, block, pack_dir_block(entries))

    uid, gid = _current_ids()
    now = int(time.time())
    root = Inode(
        mode=INODE_MODE_DIR | 0o755,
        uid=uid,
        gid=gid,
        blocks=1,
        size=BLOCK_SIZE,
        atime=now,
        mtime=now,
        ctime=now,
    )
    root.direct[0] = block
    write_inode(image_path, ROOTDIR_INODE, root)

    sb = read_superblock(image_path)
    sb.free_inodes -= 1
    write_superblock(image_path, sb)


def round_up_inodes(count: int) -> int:
    """Round an inode count up so the inode blocks are filled completely."""
    return -(-count // INODES_PER_BLOCK) * INODES_PER_BLOCK


def make_filesystem(image_path, total_blocks: int, inode_count: int) -> Superblock:
    """Create and format a new image; returns its superblock."""
    if total_blocks < VFS_MIN_BLOCKS or total_blocks >= VFS_MAX_BLOCKS:
        raise VFSError(
            f"total blocks must be an integer between {VFS_MIN_BLOCKS} and {VFS_MAX_BLOCKS}"
        )
    if inode_count < INODES_PER_BLOCK or inode_count >= total_blocks:
        raise VFSError(
            f"inode count must be at least {INODES_PER_BLOCK} "
            "and less than the number of blocks"
        )
    create_block_device(image_path, total_blocks, BLOCK_SIZE)
    init_superblock(image_path, total_blocks, round_up_inodes(inode_count))
    create_root_dir(image_path)
    return read_superblock(image_path)


def main(argv=None) -> int:
    """Command entry point: ``<image> <total_blocks> <inode_count>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 3:
        print("Usage: vfs-mkfs <image> <total_blocks> <inode_count>", file=sys.stderr)
        return 1
    image_path, blocks_text, inodes_text = args
    try:
        total_blocks = int(blocks_text)
        inode_count = int(inodes_text)
    except ValueError:
        print("Error: block and inode counts must be integers.", file=sys.stderr)
        return 1
    try:
        make_filesystem(image_path, total_blocks, inode_count)
    except VFSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Block device created and initialised: {image_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())