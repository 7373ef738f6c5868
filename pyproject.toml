[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyvfs"
version = "0.1.0"
description = "A small block-based filesystem kept in a single image file, with command-line tools to create, inspect and edit it"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "vfs", "inode", "bitmap", "disk image", "superblock"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
vfs-mkfs = "tinyvfs.mkfs:main"
vfs-info = "tinyvfs.cli:info_main"
vfs-copy = "tinyvfs.cli:copy_main"
vfs-lsort = "tinyvfs.cli:lsort_main"
vfs-rm = "tinyvfs.cli:rm_main"
vfs-touch = "tinyvfs.cli:touch_main"
vfs-trunc = "tinyvfs.cli:trunc_main"

[tool.hatch.build.targets.wheel]
packages = ["tinyvfs"]

[tool.hatch.build.targets.sdist]
include = ["tinyvfs", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
