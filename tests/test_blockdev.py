import os

import pytest

from tinyvfs.blockdev import create_block_device, read_block, write_block
from tinyvfs.layout import BLOCK_SIZE, VFSError


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "disk.img"
    create_block_device(path, 10, BLOCK_SIZE)
    return path


def test_create_has_expected_size_and_is_zeroed(image):
    assert os.path.getsize(image) == 10 * BLOCK_SIZE
    assert read_block(image, 9) == bytes(BLOCK_SIZE)


def test_create_refuses_existing_file(image):
    with pytest.raises(VFSError):
        create_block_device(image, 10, BLOCK_SIZE)


def test_write_then_read(image):
    payload = bytes(range(256)) * (BLOCK_SIZE // 256)
    write_block(image, 3, payload)
    assert read_block(image, 3) == payload
    assert read_block(image, 2) == bytes(BLOCK_SIZE)
    assert read_block(image, 4) == bytes(BLOCK_SIZE)


def test_read_past_end_raises(image):
    with pytest.raises(VFSError):
        read_block(image, 10)


def test_negative_block_raises(image):
    with pytest.raises(VFSError):
        read_block(image, -1)
    with pytest.raises(VFSError):
        write_block(image, -1, bytes(BLOCK_SIZE))


def test_write_wrong_length_raises(image):
    with pytest.raises(VFSError):
        write_block(image, 0, b"short")


def test_missing_image_raises(tmp_path):
    missing = tmp_path / "nope.img"
    with pytest.raises(VFSError):
        read_block(missing, 0)
    with pytest.raises(VFSError):
        write_block(missing, 0, bytes(BLOCK_SIZE))
    assert not missing.exists()