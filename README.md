# tinyvfs

tinyvfs keeps a small Unix-style filesystem inside one ordinary file, the
*image*. The image is divided into 1024-byte blocks:

| Blocks            | Contents                                                 |
|-------------------|----------------------------------------------------------|
| 0                 | superblock (magic number `0x20250604`, counters, layout) |
| 1 … N             | inode table, 64-byte inodes, 16 per block                |
| N+1 … B           | bitmap of used and free blocks                           |
| B+1 …             | data blocks; the first one holds the root directory      |

There is a single directory, the root (inode 1). Inode 0 is never used, since
an entry pointing at inode 0 marks a free directory slot. Each inode has seven
direct block pointers and one indirect block holding 256 more, so a file can
hold at most 263 blocks (269,312 bytes).

File names may contain ASCII letters, digits, `.`, `_` and `-`, and are at
most 27 characters long.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line tools

Create an image of 1000 blocks with room for 128 inodes:

```
vfs-mkfs disk.img 1000 128
```

The block count must be at least 50 and below 65,536. The inode count must be
at least 16 and below the block count; it is rounded up to fill whole inode
blocks. `vfs-mkfs` refuses to overwrite an existing file.

Show the superblock and the block bitmap (`#` used, `.` free, 64 blocks per
line):

```
vfs-info disk.img
```

Copy a file from the host into the image, keeping its permission bits:

```
vfs-copy disk.img notes.txt notes.txt
```

Create empty files with permissions `rw-r-----` (names that already exist are
left alone):

```
vfs-touch disk.img a.txt b.txt
```

List the root directory, sorted by name, with inode number, type and
permissions, owner, group, block count, size, and creation, modification and
access times:

```
vfs-lsort disk.img
```

Truncate regular files to zero length, releasing their data blocks:

```
vfs-trunc disk.img a.txt
```

Remove regular files, releasing their blocks, their inode and their directory
entry:

```
vfs-rm disk.img a.txt b.txt
```

The tools that take several names report a problem with one name on standard
error and go on with the rest.

## Using it from Python

Every operation takes the path of the image and works on the file directly;
failures raise `tinyvfs.layout.VFSError`.

```python
from tinyvfs.mkfs import make_filesystem
from tinyvfs.inode import create_empty_file_in_free_inode
from tinyvfs.directory import add_dir_entry, dir_lookup, iter_dir_entries
from tinyvfs.data import inode_write_data, inode_read_data

make_filesystem("disk.img", 200, 32)

ino = create_empty_file_in_free_inode("disk.img", 0o640)
add_dir_entry("disk.img", "hello.txt", ino)
inode_write_data("disk.img", ino, b"hello, world\n", 0)

assert dir_lookup("disk.img", "hello.txt") == ino
print(inode_read_data("disk.img", ino, 5, 0))   # b'hello'

for entry in iter_dir_entries("disk.img"):      # includes "." and ".."
    print(entry)
```

Lower layers are available as well:

- `tinyvfs.layout` — `Superblock`, `Inode` and `DirEntry` with `to_bytes` /
  `from_bytes`, plus `pack_dir_block`, `unpack_dir_block`, `pack_pointers` and
  `unpack_pointers`.
- `tinyvfs.blockdev` — `read_block`, `write_block`, `create_block_device`.
- `tinyvfs.superblock` — `read_superblock`, `write_superblock`,
  `format_superblock`.
- `tinyvfs.bitmap` — `bitmap_set_first_free`, `bitmap_free_block`,
  `format_bitmap_block`.
- `tinyvfs.inode` — `read_inode`, `write_inode`, `free_inode`,
  `get_block_number_at`, `create_empty_file_in_free_inode`,
  `inode_append_block`, `inode_trunc_data`.
- `tinyvfs.directory` — `name_is_valid`, `iter_dir_entries`, `dir_lookup`,
  `add_dir_entry`, `remove_dir_entry`.
- `tinyvfs.mkfs` — `make_filesystem`, `init_superblock`, `create_root_dir`,
  `round_up_inodes`.
- `tinyvfs.listing` — the text pieces used by `vfs-lsort`, such as
  `str_file_permissions` and `format_inode`.
- `tinyvfs.cli` — the tools as plain functions: `info_report`, `copy_file`,
  `list_sorted`, `touch_files`, `truncate_files`, `remove_files`.

## What it does not do

- There are no subdirectories; every file lives in the root directory.
- There is no tool to copy a file back out of the image to the host; use
  `inode_read_data` from Python to read file contents.
- The image is not mounted into the host's filesystem; it is only reached
  through these tools and functions.