"""Reading, writing and describing the superblock."""

from __future__ import annotations

from .blockdev import read_block, write_block
from .layout import BLOCK_SIZE, MAGIC_NUMBER, SB_BLOCK_NUMBER, Superblock, VFSError


def read_superblock(image_path) -> Superblock:
    """Read and validate the superblock of an image."""
    sb = Superblock.from_bytes(read_block(image_path, SB_BLOCK_NUMBER))
    if sb.magic != MAGIC_NUMBER:
        raise VFSError("the image does not contain a valid filesystem")
    return sb


def write_superblock(image_path, sb: Superblock) -> None:
    """Write ``sb`` to block 0 of the image."""
    if sb.magic != MAGIC_NUMBER:
        raise VFSError("the superblock does not carry a valid magic number")
    write_block(image_path, SB_BLOCK_NUMBER, sb.to_bytes().ljust(BLOCK_SIZE, b"\0"))


def format_superblock(sb: Superblock) -> str:
    """Describe the superblock in human-readable lines."""
    lines = [
        "Superblock:",
        f"  Magic: 0x{sb.magic:08X}",
        f"  Block size: {sb.block_size} bytes.",
        f"  Total blocks: {sb.total_blocks}",
        f"  Superblock blocks: {sb.superblock_blocks}",
        f"  Inode blocks: {sb.inode_blocks}",
        f"  Bitmap blocks: {sb.bitmap_blocks}",
        f"  Free blocks: {sb.free_blocks}",
        f"  Inode size: {sb.inode_size} bytes.",
        f"  Inode count: {sb.inode_count}",
        f"  Free inodes: {sb.free_inodes}",
        f"  Superblock start block: {SB_BLOCK_NUMBER}",
        f"  Inode start block: {sb.inode_start}",
        f"  Bitmap start block: {sb.bitmap_start}",
        f"  Data start block: {sb.data_start}",
    ]
    return "\n".join(lines) + "\n"