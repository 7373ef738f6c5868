"""Block allocation bitmap: bit set means the block is in use."""

from __future__ import annotations

from .blockdev import read_block, write_block
from .layout import BITS_PER_BLOCK, BLOCK_SIZE, VFSError
from .superblock import read_superblock, write_superblock

_ROW_WIDTH = 64


def _mask(bit_index: int) -> int:
    # Bits are numbered from the most significant bit of each byte.
    return 0x80 >> bit_index


def bitmap_free_block(image_path, block_nbr: int) -> bool:
    """Mark a data block free and zero it.

    Returns True if the block was released, False if it was already free.
    """
    sb = read_superblock(image_path)
    # Blocks up to and including data_start (the root directory) are never freed.
    if block_nbr <= sb.data_start or block_nbr >= sb.total_blocks:
        raise VFSError(f"invalid block number ({block_nbr})")

    offset, bit_in_block = divmod(block_nbr, BITS_PER_BLOCK)
    byte_index, bit_index = divmod(bit_in_block, 8)
    mask = _mask(bit_index)
    bitmap_block = sb.bitmap_start + offset

    buffer = bytearray(read_block(image_path, bitmap_block))
    if not buffer[byte_index] & mask:
        return False

    buffer[byte_index] &= ~mask & 0xFF
    write_block(image_path, bitmap_block, bytes(buffer))
    write_block(image_path, block_nbr, bytes(BLOCK_SIZE))

    sb.bitmap_zeroes[offset] += 1
    sb.free_blocks += 1
    write_superblock(image_path, sb)
    return True


def bitmap_set_first_free(image_path) -> int:
    """Mark the first free block as used and return its number."""
    sb = read_superblock(image_path)
    if sb.free_blocks == 0:
        raise VFSError("no free blocks")

    candidates = sb.bitmap_zeroes[: sb.bitmap_blocks]
    offset = next((i for i, zeroes in enumerate(candidates) if zeroes > 0), None)
    if offset is None:
        raise VFSError("inconsistency: bitmap counters show no free blocks")

    bitmap_block = sb.bitmap_start + offset
    buffer = bytearray(read_block(image_path, bitmap_block))

    byte_index = next((i for i, byte in enumerate(buffer) if byte != 0xFF), None)
    if byte_index is None:
        raise VFSError("inconsistency: bitmap block is full but metadata shows space")

    bit_index = next(b for b in range(8) if not buffer[byte_index] & _mask(b))
    buffer[byte_index] |= _mask(bit_index)

    block_number = offset * BITS_PER_BLOCK + byte_index * 8 + bit_index
    if block_number >= sb.total_blocks:
        raise VFSError("block number out of range")

    write_block(image_path, bitmap_block, bytes(buffer))
    sb.bitmap_zeroes[offset] -= 1
    sb.free_blocks -= 1
    write_superblock(image_path, sb)
    return block_number


def format_bitmap_block(buffer: bytes, size: int) -> str:
    """Render ``size`` bitmap bits as '#' (used) and '.' (free), 64 per line."""
    bits = "".join(
        "#" if buffer[i // 8] & _mask(i % 8) else "." for i in range(size)
    )
    rows = [bits[start : start + _ROW_WIDTH] for start in range(0, size, _ROW_WIDTH)]
    return "".join(row + "\n" for row in rows)