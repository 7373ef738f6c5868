"""The root directory: name validation, lookup, adding and removing entries."""

from __future__ import annotations

from typing import Iterator

from .blockdev import read_block, write_block
from .inode import get_block_number_at, read_inode
from .layout import (
    DIR_ENTRY_SIZE,
    FILENAME_MAX_LEN,
    ROOTDIR_INODE,
    DirEntry,
    VFSError,
    unpack_dir_block,
)

_EXTRA_NAME_CHARS = frozenset("._-")


def name_is_valid(name) -> bool:
    """Names hold only ASCII letters, digits, '.', '_' and '-', up to 27 chars."""
    if not name or len(name) >= FILENAME_MAX_LEN:
        return False
    return all(
        (c.isascii() and c.isalnum()) or c in _EXTRA_NAME_CHARS for c in name
    )


def _dir_blocks(image_path) -> Iterator[tuple[int, list[DirEntry]]]:
    """Yield each block number of the root directory with its entry slots."""
    root = read_inode(image_path, ROOTDIR_INODE)
    for index in range(root.blocks):
        block_num = get_block_number_at(image_path, root, index)
        if block_num <= 0:
            raise VFSError(f"cannot find block {index} of the root directory")
        yield block_num, unpack_dir_block(read_block(image_path, block_num))


def _matches(entry: DirEntry, filename: str) -> bool:
    return entry.inode != 0 and entry.name == filename[:FILENAME_MAX_LEN]


def iter_dir_entries(image_path) -> Iterator[DirEntry]:
    """Yield the used entries of the root directory in on-disk order."""
    for _, entries in _dir_blocks(image_path):
        yield from (entry for entry in entries if entry.inode != 0)


def dir_lookup(image_path, filename: str) -> int:
    """Return the inode number of ``filename``, or 0 if it is not present."""
    return next(
        (entry.inode for entry in iter_dir_entries(image_path) if _matches(entry, filename)),
        0,
    )


def add_dir_entry(image_path, filename: str, inode_number: int) -> None:
    """Put ``filename`` in the first free slot of the root directory."""
    if not name_is_valid(filename):
        raise VFSError(f"invalid file name: {filename!r}")

    for block_num, entries in _dir_blocks(image_path):
        slot = next((i for i, entry in enumerate(entries) if entry.inode == 0), None)
        if slot is None:
            continue
        data = bytearray(read_block(image_path, block_num))
        start = slot * DIR_ENTRY_SIZE
        data[start : start + DIR_ENTRY_SIZE] = DirEntry(inode_number, filename).to_bytes()
        write_block(image_path, block_num, bytes(data))
        return

    raise VFSError("no free entry in the root directory")


def remove_dir_entry(image_path, filename: str) -> bool:
    """Clear the entry named ``filename``.

    Returns True if it was removed, False if no such entry existed.
    """
    for block_num, entries in _dir_blocks(image_path):
        slot = next((i for i, entry in enumerate(entries) if _matches(entry, filename)), None)
        if slot is None:
            continue
        data = bytearray(read_block(image_path, block_num))
        start = slot * DIR_ENTRY_SIZE
        data[start : start + DIR_ENTRY_SIZE] = bytes(DIR_ENTRY_SIZE)
        write_block(image_path, block_num, bytes(data))
        return True
    return False