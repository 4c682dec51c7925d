import struct

import pytest

from alos.disk import BLOCK_SIZE, SECTOR_SIZE, BlockDevice
from alos.ext2 import SUPER_MAGIC, DirEntry, GroupDesc, Inode, SuperBlock
from alos.fat import BootSector, FatDirEntry
from alos.loader import LoadError, load_kernel, main

INODE_TABLE = 5
INODE_SIZE = 128
EXT2_PAYLOAD = bytes(range(256)) * 10
FAT_PAYLOAD = bytes(range(256)) * 3


def _put(image, offset, data):
    image[offset : offset + len(data)] = data


def make_ext2(name=b"alos", payload=EXT2_PAYLOAD):
    image = bytearray(BLOCK_SIZE * 40)
    _put(image, BLOCK_SIZE, SuperBlock(magic=SUPER_MAGIC).to_bytes())
    _put(image, 2 * BLOCK_SIZE, GroupDesc(inode_table=INODE_TABLE).to_bytes())
    root = Inode(mode=0o40755, size=BLOCK_SIZE, zones=(10,) + (0,) * 14)
    _put(image, INODE_TABLE * BLOCK_SIZE + INODE_SIZE, root.to_bytes())

    file_ino = 12
    nblocks = -(-len(payload) // BLOCK_SIZE)
    zones = tuple(20 + i for i in range(nblocks)) + (0,) * (15 - nblocks)
    index = file_ino - 1
    _put(
        image,
        (INODE_TABLE + index // 8) * BLOCK_SIZE + (index % 8) * INODE_SIZE,
        Inode(mode=0o100644, size=len(payload), zones=zones).to_bytes(),
    )
    entries = (
        DirEntry(2, 12, b".", 2).to_bytes()
        + DirEntry(2, 12, b"..", 2).to_bytes()
        + DirEntry(file_ino, BLOCK_SIZE - 24, name, 1).to_bytes()
    )
    _put(image, 10 * BLOCK_SIZE, entries)
    _put(image, 20 * BLOCK_SIZE, payload)
    return bytes(image)


def make_fat(name=b"ALOS       ", payload=FAT_PAYLOAD):
    image = bytearray(SECTOR_SIZE * 64)
    _put(image, 0, BootSector(cluster_size=1, reserved=1, fats=2, fat_length=1).to_bytes())
    nclusters = -(-len(payload) // SECTOR_SIZE)
    fat = bytearray(SECTOR_SIZE)
    for i in range(nclusters):
        cluster = 2 + i
        following = cluster + 1 if i < nclusters - 1 else 0xFFFF
        struct.pack_into("<H", fat, cluster * 2, following)
    _put(image, SECTOR_SIZE, fat)
    entry = FatDirEntry(name=name[:8], ext=name[8:], start=2, size=len(payload))
    _put(image, 3 * SECTOR_SIZE, entry.to_bytes())
    _put(image, 35 * SECTOR_SIZE, payload)
    return bytes(image)


def test_loads_kernel_from_ext2():
    with BlockDevice(make_ext2()) as device:
        assert load_kernel(device) == EXT2_PAYLOAD


def test_falls_back_to_fat16():
    with BlockDevice(make_fat()) as device:
        assert load_kernel(device) == FAT_PAYLOAD


def test_custom_names():
    with BlockDevice(make_ext2(name=b"kernel")) as device:
        assert load_kernel(device, ext2_name="kernel") == EXT2_PAYLOAD
    with BlockDevice(make_fat(name=b"KERNEL     ")) as device:
        assert load_kernel(device, fat_name="KERNEL") == FAT_PAYLOAD


def test_blank_image_fails():
    with BlockDevice(bytes(SECTOR_SIZE * 64)) as device:
        with pytest.raises(LoadError):
            load_kernel(device)


def test_tiny_image_fails():
    with BlockDevice(bytes(SECTOR_SIZE)) as device:
        with pytest.raises(LoadError):
            load_kernel(device)


def test_main_writes_kernel(tmp_path, capsys):
    image = tmp_path / "disk.img"
    image.write_bytes(make_ext2())
    out = tmp_path / "kernel.bin"
    assert main([str(image), "-o", str(out)]) == 0
    assert out.read_bytes() == EXT2_PAYLOAD
    printed = capsys.readouterr().out
    assert "start alos:0xc0001000\n" in printed
    assert "page table at:0x90000\n" in printed


def test_main_reports_failure(tmp_path):
    image = tmp_path / "blank.img"
    image.write_bytes(bytes(SECTOR_SIZE * 64))
    assert main([str(image)]) == 1
    assert main([str(tmp_path / "missing.img")]) == 1