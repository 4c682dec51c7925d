import io

import pytest

from alos.disk import (
    BLOCK_SIZE,
    MAX_SECTORS,
    SECTOR_SIZE,
    BlockDevice,
    DiskError,
)


def _image(sectors):
    return b"".join(bytes([n % 256]) * SECTOR_SIZE for n in range(sectors))


def test_read_sectors_from_bytes():
    data = _image(8)
    device = BlockDevice(data)
    assert device.read_sectors(3, 2) == data[3 * SECTOR_SIZE : 5 * SECTOR_SIZE]


def test_read_single_sector_default():
    data = _image(4)
    device = BlockDevice(data)
    assert device.read_sectors(1) == data[SECTOR_SIZE : 2 * SECTOR_SIZE]


def test_zero_count_reads_full_batch():
    data = _image(MAX_SECTORS + 1)
    device = BlockDevice(data)
    assert len(device.read_sectors(0, 0)) == MAX_SECTORS * SECTOR_SIZE


def test_read_block_is_two_sectors():
    data = _image(16)
    device = BlockDevice(data)
    assert device.read_block(3) == device.read_sectors(6, 2)
    assert len(device.read_block(2, 2)) == 2 * BLOCK_SIZE


def test_lba_over_28_bits_rejected():
    device = BlockDevice(_image(2))
    with pytest.raises(DiskError):
        device.read_sectors(0x10000000, 1)


def test_block_doubling_over_28_bits_rejected():
    device = BlockDevice(_image(2))
    with pytest.raises(DiskError):
        device.read_block(0x08000000)


def test_read_past_end_raises():
    device = BlockDevice(_image(4))
    with pytest.raises(DiskError):
        device.read_sectors(3, 2)


def test_bad_counts_raise_value_error():
    device = BlockDevice(_image(4))
    with pytest.raises(ValueError):
        device.read_sectors(0, MAX_SECTORS)
    with pytest.raises(ValueError):
        device.read_block(0, 0)


def test_path_source_and_context_manager(tmp_path):
    data = _image(4)
    path = tmp_path / "disk.img"
    path.write_bytes(data)
    with BlockDevice(path) as device:
        assert device.read_block(1) == data[BLOCK_SIZE : 2 * BLOCK_SIZE]
    with pytest.raises(DiskError):
        device.read_sectors(0)


def test_file_object_left_open():
    data = _image(2)
    handle = io.BytesIO(data)
    device = BlockDevice(handle)
    assert device.read_sectors(0) == data[:SECTOR_SIZE]
    device.close()
    assert handle.closed is False


def test_unsupported_source():
    with pytest.raises(TypeError):
        BlockDevice(42)