"""Command-line tools for inspecting and changing a filesystem image."""

from __future__ import annotations

import os
import sys
from typing import Iterable

from .bitmap import format_bitmap_block
from .blockdev import read_block
from .data import inode_write_data
from .directory import add_dir_entry, dir_lookup, name_is_valid, remove_dir_entry
from .inode import (
    create_empty_file_in_free_inode,
    free_inode,
    get_block_number_at,
    inode_trunc_data,
    read_inode,
    write_inode,
)
from .layout import (
    BLOCK_SIZE,
    DEFAULT_PERM,
    INODE_MODE_FILE,
    ROOTDIR_INODE,
    VFSError,
    unpack_dir_block,
)
from .listing import format_inode
from .superblock import format_superblock, read_superblock


def info_report(image_path) -> str:
    """Describe the superblock and draw the block bitmap."""
    sb = read_superblock(image_path)
    parts = [format_superblock(sb), "\nBlock bitmap:\n"]
    for i in range(sb.bitmap_blocks):
        try:
            buffer = read_block(image_path, sb.bitmap_start + i)
        except VFSError as exc:
            raise VFSError(f"cannot read bitmap block {i}") from exc
        remaining = sb.total_blocks - i * BLOCK_SIZE
        parts.append(format_bitmap_block(buffer, max(0, min(remaining, BLOCK_SIZE))))
    return "".join(parts)


def copy_file(image_path, host_file, dest_name: str) -> int:
    """Copy a host file into the root directory; returns the new inode number."""
    read_superblock(image_path)
    if not name_is_valid(dest_name):
        raise VFSError(f"invalid name: {dest_name}")
    if dir_lookup(image_path, dest_name) != 0:
        raise VFSError(f"the name '{dest_name}' already exists in the directory")

    try:
        source = open(host_file, "rb")
    except OSError as exc:
        raise VFSError(f"cannot open file {host_file}: {exc}") from exc

    with source:
        try:
            perms = os.fstat(source.fileno()).st_mode & 0o777
        except OSError as exc:
            raise VFSError(f"cannot get the size of file {host_file}") from exc

        inode_number = create_empty_file_in_free_inode(image_path, perms)
        add_dir_entry(image_path, dest_name, inode_number)

        offset = 0
        try:
            for chunk in iter(lambda: source.read(BLOCK_SIZE), b""):
                inode_write_data(image_path, inode_number, chunk, offset)
                offset += len(chunk)
        except OSError as exc:
            raise VFSError(f"cannot read source file {host_file}: {exc}") from exc
    return inode_number


def list_sorted(image_path) -> list[str]:
    """Return listing lines for the root directory, sorted by name."""
    root = read_inode(image_path, ROOTDIR_INODE)
    found = []
    for index in range(root.blocks):
        try:
            block_num = get_block_number_at(image_path, root, index)
            if block_num <= 0:
                continue
            entries = unpack_dir_block(read_block(image_path, block_num))
        except VFSError:
            continue
        for entry in entries:
            if entry.inode == 0:
                continue
            try:
                inode = read_inode(image_path, entry.inode)
            except VFSError:
                continue
            found.append((entry.name.encode("latin-1"), entry.inode, entry.name, inode))
    found.sort(key=lambda item: item[0])
    return [format_inode(inode, number, name) for _, number, name, inode in found]


def _regular_file(image_path, name: str):
    """Return (inode number, inode) of a regular file, or a message string."""
    try:
        number = dir_lookup(image_path, name)
    except VFSError:
        number = -1
    if number <= 0:
        return f"warning: {name} does not exist"
    try:
        inode = read_inode(image_path, number)
    except VFSError:
        return f"error: cannot read the inode of {name}"
    if inode.mode & INODE_MODE_FILE != INODE_MODE_FILE:
        return f"warning: {name} is not a regular file"
    return number, inode


def _truncate(image_path, name: str, number: int, inode) -> str | None:
    try:
        inode_trunc_data(image_path, inode)
    except VFSError:
        return f"error: failed to truncate {name}"
    try:
        write_inode(image_path, number, inode)
    except VFSError:
        return f"error: cannot save the inode of {name}"
    return None


def remove_files(image_path, names: Iterable[str]) -> list[str]:
    """Delete regular files and release their resources; returns problems."""
    messages = []
    for name in names:
        found = _regular_file(image_path, name)
        if isinstance(found, str):
            messages.append(found)
            continue
        number, inode = found
        problem = _truncate(image_path, name, number, inode)
        if problem:
            messages.append(problem)
            continue
        try:
            free_inode(image_path, number)
        except VFSError:
            messages.append(f"error: cannot release the inode of {name}")
            continue
        try:
            remove_dir_entry(image_path, name)
        except VFSError:
            messages.append(f"error: cannot remove the entry of {name}")
    return messages


def touch_files(image_path, names: Iterable[str]) -> list[str]:
    """Create empty files that do not exist yet; returns problems."""
    messages = []
    for name in names:
        if not name_is_valid(name):
            messages.append(f"invalid file name: {name}")
            continue
        try:
            if dir_lookup(image_path, name) > 0:
                continue
        except VFSError:
            pass
        try:
            number = create_empty_file_in_free_inode(image_path, DEFAULT_PERM)
        except VFSError:
            messages.append(f"cannot create the file: {name}")
            continue
        try:
            add_dir_entry(image_path, name, number)
        except VFSError:
            messages.append(f"cannot add the directory entry for: {name}")
    return messages


def truncate_files(image_path, names: Iterable[str]) -> list[str]:
    """Truncate regular files to length zero; returns problems."""
    messages = []
    for name in names:
        found = _regular_file(image_path, name)
        if isinstance(found, str):
            messages.append(found)
            continue
        problem = _truncate(image_path, name, *found)
        if problem:
            messages.append(problem)
    return messages


def _args(argv) -> list[str]:
    return sys.argv[1:] if argv is None else list(argv)


def info_main(argv=None) -> int:
    """Command entry point: ``<image>``."""
    args = _args(argv)
    if len(args) != 1:
        print("Usage: vfs-info <image>", file=sys.stderr)
        return 1
    try:
        report = info_report(args[0])
    except VFSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(report, end="")
    return 0


def copy_main(argv=None) -> int:
    """Command entry point: ``<image> <source_file> <dest_name>``."""
    args = _args(argv)
    if len(args) != 3:
        print("Usage: vfs-copy <image> <source_file> <dest_name>", file=sys.stderr)
        return 1
    try:
        copy_file(*args)
    except VFSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def lsort_main(argv=None) -> int:
    """Command entry point: ``<image>``."""
    args = _args(argv)
    if len(args) != 1:
        print("usage: vfs-lsort <image>", file=sys.stderr)
        return 1
    try:
        lines = list_sorted(args[0])
    except VFSError:
        print("error: cannot read the root inode", file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0


def _per_file_main(argv, command: str, action) -> int:
    args = _args(argv)
    if len(args) < 2:
        print(f"usage: {command} <image> <file1> [file2 ...]", file=sys.stderr)
        return 1
    for message in action(args[0], args[1:]):
        print(message, file=sys.stderr)
    return 0


def rm_main(argv=None) -> int:
    """Command entry point: ``<image> <file1> [file2 ...]``."""
    return _per_file_main(argv, "vfs-rm", remove_files)


def touch_main(argv=None) -> int:
    """Command entry point: ``<image> <file1> [file2 ...]``."""
    return _per_file_main(argv, "vfs-touch", touch_files)


def trunc_main(argv=None) -> int:
    """Command entry point: ``<image> <file1> [file2 ...]``."""
    return _per_file_main(argv, "vfs-trunc", truncate_files)