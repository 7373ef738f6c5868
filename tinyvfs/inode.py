"""Inode table access and per-file block bookkeeping."""

from __future__ import annotations

import contextlib
import os
import time

from .bitmap import bitmap_free_block, bitmap_set_first_free
from .blockdev import read_block, write_block
from .layout import (
    INODE_MODE_FILE,
    INODE_SIZE,
    INODES_PER_BLOCK,
    NUM_DIRECT_PTRS,
    NUM_INDIRECT_PTRS,
    ROOTDIR_INODE,
    Inode,
    VFSError,
    pack_pointers,
    unpack_pointers,
)
from .superblock import read_superblock, write_superblock


def _now() -> int:
    return int(time.time())


def _current_ids() -> tuple[int, int]:
    getuid = getattr(os, "getuid", None)
    getgid = getattr(os, "getgid", None)
    return (getuid() if getuid else 0, getgid() if getgid else 0)


def _locate(image_path, inode_number: int) -> tuple[int, int]:
    """Return the image block holding the inode and its byte offset there."""
    sb = read_superblock(image_path)
    if inode_number < ROOTDIR_INODE or inode_number >= sb.inode_count:
        raise VFSError(f"invalid inode number ({inode_number})")
    block_index, slot = divmod(inode_number, INODES_PER_BLOCK)
    return sb.inode_start + block_index, slot * INODE_SIZE


def read_inode(image_path, inode_number: int) -> Inode:
    """Read inode ``inode_number`` from the inode table."""
    block, start = _locate(image_path, inode_number)
    data = read_block(image_path, block)
    return Inode.from_bytes(data[start : start + INODE_SIZE])


def write_inode(image_path, inode_number: int, inode: Inode) -> None:
    """Store ``inode`` at position ``inode_number`` of the inode table."""
    block, start = _locate(image_path, inode_number)
    data = bytearray(read_block(image_path, block))
    data[start : start + INODE_SIZE] = inode.to_bytes()
    write_block(image_path, block, bytes(data))


def free_inode(image_path, inode_number: int) -> bool:
    """Release an inode.

    Returns True if it was released, False if it was already free.
    The root directory inode can never be released.
    """
    sb = read_superblock(image_path)
    if inode_number <= ROOTDIR_INODE or inode_number >= sb.inode_count:
        raise VFSError(f"invalid inode number ({inode_number})")

    if read_inode(image_path, inode_number).is_free():
        return False

    write_inode(image_path, inode_number, Inode())
    sb.free_inodes += 1
    write_superblock(image_path, sb)
    return True


def get_block_number_at(image_path, inode: Inode, index: int) -> int:
    """Return the data block at position ``index`` of the file.

    Direct pointers come first, then those of the indirect block.
    Returns 0 when ``index`` is beyond the blocks the file holds.
    """
    if index >= inode.blocks:
        return 0
    if index < NUM_DIRECT_PTRS:
        return inode.direct[index]
    if inode.indirect == 0:
        raise VFSError(
            f"indirect block is 0 with index {index} and {inode.blocks} blocks"
        )
    indirect_index = index - NUM_DIRECT_PTRS
    if indirect_index >= NUM_INDIRECT_PTRS:
        raise VFSError(
            f"indirect index {indirect_index} exceeds {NUM_INDIRECT_PTRS} pointers"
        )
    return unpack_pointers(read_block(image_path, inode.indirect))[indirect_index]


def create_empty_file_in_free_inode(image_path, perms: int) -> int:
    """Claim the first free inode for a new empty regular file.

    Returns the inode number used.
    """
    sb = read_superblock(image_path)
    if sb.free_inodes == 0:
        raise VFSError("no free inodes")

    for inode_nbr in range(ROOTDIR_INODE + 1, sb.inode_count):
        if not read_inode(image_path, inode_nbr).is_free():
            continue
        uid, gid = _current_ids()
        now = _now()
        inode = Inode(
            mode=INODE_MODE_FILE | perms,
            uid=uid,
            gid=gid,
            atime=now,
            mtime=now,
            ctime=now,
        )
        write_inode(image_path, inode_nbr, inode)
        sb.free_inodes -= 1
        write_superblock(image_path, sb)
        return inode_nbr

    raise VFSError("no free inodes")


def inode_append_block(image_path, inode: Inode, new_block_number: int) -> None:
    """Append a block to the end of the file's block list.

    ``inode`` is updated in place; the caller writes it back and must
    pass a block already marked used in the bitmap.
    """
    sb = read_superblock(image_path)
    if new_block_number < sb.data_start or new_block_number >= sb.total_blocks:
        raise VFSError(f"block {new_block_number} out of range for a file")

    for slot, pointer in enumerate(inode.direct):
        if pointer == 0:
            inode.direct[slot] = new_block_number
            inode.blocks += 1
            return

    if inode.indirect == 0:
        inode.indirect = bitmap_set_first_free(image_path)
        pointers = [0] * NUM_INDIRECT_PTRS
    else:
        pointers = unpack_pointers(read_block(image_path, inode.indirect))

    for slot, pointer in enumerate(pointers):
        if pointer == 0:
            pointers[slot] = new_block_number
            write_block(image_path, inode.indirect, pack_pointers(pointers))
            inode.blocks += 1
            return

    raise VFSError("the file has reached its block limit")


def _release(image_path, block_nbr: int) -> None:
    # A block that cannot be released is left as is; truncation goes on.
    with contextlib.suppress(VFSError):
        bitmap_free_block(image_path, block_nbr)


def inode_trunc_data(image_path, inode: Inode) -> None:
    """Free every data block of the file and reset its size.

    ``inode`` is updated in place; the caller writes it back.
    """
    for slot, pointer in enumerate(inode.direct):
        if pointer != 0:
            _release(image_path, pointer)
            inode.direct[slot] = 0

    if inode.indirect != 0:
        for pointer in unpack_pointers(read_block(image_path, inode.indirect)):
            if pointer != 0:
                _release(image_path, pointer)
        _release(image_path, inode.indirect)
        inode.indirect = 0

    inode.size = 0
    inode.blocks = 0
    now = _now()
    inode.mtime = now
    inode.atime = now