"""Block-level access to a filesystem image file."""

from __future__ import annotations

import os

from .layout import BLOCK_SIZE, VFSError


def _check_block_number(block_number: int) -> None:
    if block_number < 0:
        raise VFSError(f"invalid block number ({block_number})")


def read_block(image_path, block_number: int) -> bytes:
    """Return the ``BLOCK_SIZE`` bytes of block ``block_number``."""
    _check_block_number(block_number)
    try:
        with open(image_path, "rb") as image:
            image.seek(block_number * BLOCK_SIZE)
            data = image.read(BLOCK_SIZE)
    except OSError as exc:
        raise VFSError(f"cannot read block {block_number} of {image_path}: {exc}") from exc
    if len(data) != BLOCK_SIZE:
        raise VFSError(f"short read of block {block_number} of {image_path}")
    return data


def write_block(image_path, block_number: int, data: bytes) -> None:
    """Write exactly one block of data at block ``block_number``."""
    _check_block_number(block_number)
    if len(data) != BLOCK_SIZE:
        raise VFSError(f"a block is {BLOCK_SIZE} bytes, got {len(data)}")
    try:
        with open(image_path, "r+b") as image:
            image.seek(block_number * BLOCK_SIZE)
            image.write(data)
    except OSError as exc:
        raise VFSError(f"cannot write block {block_number} of {image_path}: {exc}") from exc


def create_block_device(image_path, total_blocks: int, block_size: int) -> None:
    """Create a new zero-filled image; fails if the file already exists."""
    try:
        fd = os.open(image_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        with os.fdopen(fd, "wb") as image:
            zero = bytes(block_size)
            for _ in range(total_blocks):
                image.write(zero)
    except OSError as exc:
        raise VFSError(f"cannot create block device {image_path}: {exc}") from exc