"""Reading and writing file contents through an inode."""

from __future__ import annotations

import time

from .bitmap import bitmap_set_first_free
from .blockdev import read_block, write_block
from .inode import get_block_number_at, inode_append_block, read_inode, write_inode
from .layout import BLOCK_SIZE, NUM_DIRECT_PTRS, NUM_INDIRECT_PTRS, VFSError
from .superblock import read_superblock

MAX_FILE_SIZE = (NUM_DIRECT_PTRS + NUM_INDIRECT_PTRS) * BLOCK_SIZE


def _block_of(image_path, inode, index: int) -> int:
    block_num = get_block_number_at(image_path, inode, index)
    if block_num <= 0:
        raise VFSError(f"cannot find block number {index} of the file")
    return block_num


def inode_write_data(image_path, inode_number: int, data: bytes, offset: int) -> int:
    """Write ``data`` into the file at ``offset``, allocating blocks as needed.

    Returns the number of bytes written.
    """
    inode = read_inode(image_path, inode_number)
    length = len(data)
    final_size = offset + length
    if final_size > MAX_FILE_SIZE:
        raise VFSError("write exceeds the maximum file size")

    sb = read_superblock(image_path)
    required_blocks = -(-final_size // BLOCK_SIZE)
    if required_blocks > inode.blocks:
        to_allocate = required_blocks - inode.blocks
        if to_allocate > sb.free_blocks:
            raise VFSError(f"not enough free blocks ({to_allocate} required)")
        for _ in range(to_allocate):
            inode_append_block(image_path, inode, bitmap_set_first_free(image_path))

    source = memoryview(bytes(data))
    index, within = divmod(offset, BLOCK_SIZE)
    while source:
        block_num = _block_of(image_path, inode, index)
        buffer = bytearray(read_block(image_path, block_num))
        chunk = source[: BLOCK_SIZE - within]
        buffer[within : within + len(chunk)] = chunk
        write_block(image_path, block_num, bytes(buffer))
        source = source[len(chunk) :]
        index += 1
        within = 0

    inode.size = max(inode.size, final_size)
    now = int(time.time())
    inode.mtime = now
    inode.atime = now
    write_inode(image_path, inode_number, inode)
    return length


def inode_read_data(image_path, inode_number: int, length: int, offset: int) -> bytes:
    """Read up to ``length`` bytes of the file starting at ``offset``."""
    inode = read_inode(image_path, inode_number)
    if offset >= inode.size:
        raise VFSError("offset beyond the size of the file")
    length = min(length, inode.size - offset)

    chunks = []
    remaining = length
    index, within = divmod(offset, BLOCK_SIZE)
    while remaining > 0:
        block = read_block(image_path, _block_of(image_path, inode, index))
        chunk = block[within : within + remaining]
        chunks.append(chunk)
        remaining -= len(chunk)
        index += 1
        within = 0

    inode.atime = int(time.time())
    write_inode(image_path, inode_number, inode)
    return b"".join(chunks)