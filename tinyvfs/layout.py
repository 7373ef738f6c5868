"""On-disk layout of the filesystem: constants and record encodings."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterable

MAGIC_NUMBER = 0x20250604
BLOCK_SIZE = 1024

VFS_MIN_BLOCKS = 50
VFS_MAX_BLOCKS = 64 * BLOCK_SIZE

MAX_INODE_BLOCKS = 8
MAX_VFS_BLOCKS = MAX_INODE_BLOCKS * BLOCK_SIZE * 8

INODE_MODE_FILE = 0x8000
INODE_MODE_DIR = 0x4000
DEFAULT_PERM = 0o640

FILENAME_MAX_LEN = 28
ROOTDIR_INODE = 1
SB_BLOCK_NUMBER = 0

NUM_DIRECT_PTRS = 7
NUM_INDIRECT_PTRS = BLOCK_SIZE // 4

_SUPERBLOCK_STRUCT = struct.Struct(f"<10I{MAX_INODE_BLOCKS}H3I")
# mode, uid, gid, blocks, size, direct[7], indirect, atime, mtime, ctime,
# then 6 reserved bytes and 2 bytes of alignment padding.
_INODE_STRUCT = struct.Struct(f"<4HI{NUM_DIRECT_PTRS}I4I8x")
_DIR_ENTRY_STRUCT = struct.Struct(f"<I{FILENAME_MAX_LEN}s")
_POINTERS_STRUCT = struct.Struct(f"<{NUM_INDIRECT_PTRS}I")

SUPERBLOCK_SIZE = _SUPERBLOCK_STRUCT.size
INODE_SIZE = _INODE_STRUCT.size
INODES_PER_BLOCK = BLOCK_SIZE // INODE_SIZE
BITS_PER_BLOCK = BLOCK_SIZE * 8
DIR_ENTRY_SIZE = _DIR_ENTRY_STRUCT.size
DIR_ENTRIES_PER_BLOCK = BLOCK_SIZE // DIR_ENTRY_SIZE

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF


class VFSError(Exception):
    """Raised when an operation on a filesystem image fails."""


def _require_length(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise VFSError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass
class Superblock:
    """Filesystem metadata stored in block 0."""

    magic: int = MAGIC_NUMBER
    block_size: int = BLOCK_SIZE
    total_blocks: int = 0
    superblock_blocks: int = 1
    inode_blocks: int = 0
    bitmap_blocks: int = 0
    free_blocks: int = 0
    inode_size: int = INODE_SIZE
    inode_count: int = 0
    free_inodes: int = 0
    bitmap_zeroes: list[int] = field(default_factory=lambda: [0] * MAX_INODE_BLOCKS)
    inode_start: int = 0
    bitmap_start: int = 0
    data_start: int = 0

    def to_bytes(self) -> bytes:
        """Encode the superblock record (without block padding)."""
        zeroes = list(self.bitmap_zeroes)[:MAX_INODE_BLOCKS]
        zeroes += [0] * (MAX_INODE_BLOCKS - len(zeroes))
        head = (
            self.magic,
            self.block_size,
            self.total_blocks,
            self.superblock_blocks,
            self.inode_blocks,
            self.bitmap_blocks,
            self.free_blocks,
            self.inode_size,
            self.inode_count,
            self.free_inodes,
        )
        tail = (self.inode_start, self.bitmap_start, self.data_start)
        return _SUPERBLOCK_STRUCT.pack(
            *(v & _U32 for v in head),
            *(z & _U16 for z in zeroes),
            *(v & _U32 for v in tail),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Superblock:
        """Decode a superblock from the start of ``data``."""
        _require_length(data, SUPERBLOCK_SIZE, "superblock")
        values = _SUPERBLOCK_STRUCT.unpack_from(data)
        head = values[:10]
        zeroes = list(values[10 : 10 + MAX_INODE_BLOCKS])
        inode_start, bitmap_start, data_start = values[10 + MAX_INODE_BLOCKS :]
        return cls(
            *head,
            bitmap_zeroes=zeroes,
            inode_start=inode_start,
            bitmap_start=bitmap_start,
            data_start=data_start,
        )


@dataclass
class Inode:
    """Metadata of a file or directory."""

    mode: int = 0
    uid: int = 0
    gid: int = 0
    blocks: int = 0
    size: int = 0
    direct: list[int] = field(default_factory=lambda: [0] * NUM_DIRECT_PTRS)
    indirect: int = 0
    atime: int = 0
    mtime: int = 0
    ctime: int = 0

    def to_bytes(self) -> bytes:
        """Encode the inode as its fixed-size on-disk record."""
        direct = list(self.direct)[:NUM_DIRECT_PTRS]
        direct += [0] * (NUM_DIRECT_PTRS - len(direct))
        return _INODE_STRUCT.pack(
            self.mode & _U16,
            self.uid & _U16,
            self.gid & _U16,
            self.blocks & _U16,
            self.size & _U32,
            *(p & _U32 for p in direct),
            self.indirect & _U32,
            self.atime & _U32,
            self.mtime & _U32,
            self.ctime & _U32,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Inode:
        """Decode an inode from the start of ``data``."""
        _require_length(data, INODE_SIZE, "inode")
        values = _INODE_STRUCT.unpack_from(data)
        mode, uid, gid, blocks, size = values[:5]
        direct = list(values[5 : 5 + NUM_DIRECT_PTRS])
        indirect, atime, mtime, ctime = values[5 + NUM_DIRECT_PTRS :]
        return cls(mode, uid, gid, blocks, size, direct, indirect, atime, mtime, ctime)

    def is_free(self) -> bool:
        """An inode with mode zero is unused."""
        return self.mode == 0


@dataclass
class DirEntry:
    """A name in a directory pointing at an inode; inode 0 marks a free slot."""

    inode: int = 0
    name: str = ""

    def to_bytes(self) -> bytes:
        """Encode the entry; names are NUL padded and cut at the field width."""
        raw = self.name.encode("latin-1")[:FILENAME_MAX_LEN]
        return _DIR_ENTRY_STRUCT.pack(self.inode & _U32, raw)

    @classmethod
    def from_bytes(cls, data: bytes) -> DirEntry:
        """Decode an entry from the start of ``data``."""
        _require_length(data, DIR_ENTRY_SIZE, "directory entry")
        inode, raw = _DIR_ENTRY_STRUCT.unpack_from(data)
        return cls(inode, raw.split(b"\0", 1)[0].decode("latin-1"))


def pack_dir_block(entries: Iterable[DirEntry]) -> bytes:
    """Encode directory entries into one zero-padded block."""
    packed = b"".join(entry.to_bytes() for entry in entries)
    if len(packed) > BLOCK_SIZE:
        raise VFSError(f"a directory block holds at most {DIR_ENTRIES_PER_BLOCK} entries")
    return packed.ljust(BLOCK_SIZE, b"\0")


def unpack_dir_block(data: bytes) -> list[DirEntry]:
    """Decode every entry slot of a directory block, free ones included."""
    _require_length(data, BLOCK_SIZE, "directory block")
    return [
        DirEntry.from_bytes(data[start : start + DIR_ENTRY_SIZE])
        for start in range(0, DIR_ENTRIES_PER_BLOCK * DIR_ENTRY_SIZE, DIR_ENTRY_SIZE)
    ]


def pack_pointers(pointers: Iterable[int]) -> bytes:
    """Encode block pointers into one zero-padded indirect block."""
    values = [p & _U32 for p in pointers]
    if len(values) > NUM_INDIRECT_PTRS:
        raise VFSError(f"an indirect block holds at most {NUM_INDIRECT_PTRS} pointers")
    values += [0] * (NUM_INDIRECT_PTRS - len(values))
    return _POINTERS_STRUCT.pack(*values)


def unpack_pointers(data: bytes) -> list[int]:
    """Decode all pointer slots of an indirect block."""
    _require_length(data, BLOCK_SIZE, "indirect block")
    return list(_POINTERS_STRUCT.unpack_from(data))