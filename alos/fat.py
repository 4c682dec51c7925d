"""Loading files from the root directory of a FAT16 disk image."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, fields
from typing import Optional, Union

from alos.disk import SECTOR_SIZE, BlockDevice

log = logging.getLogger(__name__)

NAME_LENGTH = 11
FAT_BITS = 16
ROOT_DIR_SECTORS = 32
ROOT_SCAN_SECTORS = 2
END_OF_CHAIN = 0xFFF8
FIRST_DATA_CLUSTER = 2
ENTRIES_PER_FAT_SECTOR = SECTOR_SIZE // 2

ATTR_RO = 1
ATTR_HIDDEN = 2
ATTR_SYS = 4
ATTR_VOLUME = 8
ATTR_DIR = 16
ATTR_ARCH = 32
ATTR_VFAT = ATTR_RO | ATTR_HIDDEN | ATTR_SYS | ATTR_VOLUME
DELETED_FLAG = 0xE5

_BOOT = struct.Struct("<3s8sHBHBHHBHHHIIIH2sIHH6H")
_DIRENT = struct.Struct("<8s3sBBBHHHHHHHI")
_FAT_ENTRY = struct.Struct("<H")


class FatError(Exception):
    """The image is not a usable FAT16 file system or a file cannot be read."""


class FatFileNotFound(FatError):
    """No entry with the requested name among the scanned root entries."""


class FatFileSizeError(FatError):
    """The cluster chain ended before the file size was covered."""


class FatMissingEndError(FatError):
    """The cluster chain runs on past the end of the file."""


@dataclass(frozen=True)
class BootSector:
    """The leading fields of the boot sector (BIOS parameter block)."""

    ignored: bytes = b"\xeb\x3c\x90"
    system_id: bytes = b"        "
    sector_size: int = SECTOR_SIZE
    cluster_size: int = 1
    reserved: int = 1
    fats: int = 2
    dir_entries: int = 512
    sectors: int = 0
    media: int = 0xF8
    fat_length: int = 0
    secs_track: int = 0
    heads: int = 0
    hidden: int = 0
    total_sect: int = 0
    fat32_length: int = 0
    flags: int = 0
    version: bytes = b"\0\0"
    root_cluster: int = 0
    info_sector: int = 0
    backup_boot: int = 0
    reserved2: tuple = (0,) * 6

    @classmethod
    def from_bytes(cls, data: bytes) -> "BootSector":
        if len(data) < _BOOT.size:
            raise FatError(f"boot sector needs {_BOOT.size} bytes, got {len(data)}")
        values = _BOOT.unpack_from(data)
        return cls(*values[:20], reserved2=tuple(values[20:]))

    def to_bytes(self) -> bytes:
        values = [getattr(self, f.name) for f in fields(self)]
        return _BOOT.pack(*values[:20], *self.reserved2)


@dataclass(frozen=True)
class FatDirEntry:
    """A 32-byte short-name directory entry."""

    name: bytes = b"        "
    ext: bytes = b"   "
    attr: int = 0
    lcase: int = 0
    ctime_ms: int = 0
    ctime: int = 0
    cdate: int = 0
    adate: int = 0
    starthi: int = 0
    time: int = 0
    date: int = 0
    start: int = 0
    size: int = 0

    @property
    def full_name(self) -> bytes:
        """The eleven name bytes, base name followed by extension."""
        return self.name + self.ext

    @classmethod
    def from_bytes(cls, data: bytes) -> "FatDirEntry":
        if len(data) < _DIRENT.size:
            raise FatError(
                f"directory entry needs {_DIRENT.size} bytes, got {len(data)}"
            )
        return cls(*_DIRENT.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _DIRENT.pack(*(getattr(self, f.name) for f in fields(self)))


def _entry_name(name: Union[str, bytes]) -> bytes:
    key = name.encode("ascii") if isinstance(name, str) else bytes(name)
    if len(key) > NAME_LENGTH:
        raise ValueError(f"a short name has at most {NAME_LENGTH} bytes, got {key!r}")
    return key.ljust(NAME_LENGTH, b" ")


class Fat16Image:
    """A FAT16 file system on a :class:`BlockDevice`."""

    def __init__(self, device: BlockDevice) -> None:
        self._device = device
        self.boot = BootSector.from_bytes(device.read_sectors(0, 1))
        if not self.boot.cluster_size:
            raise FatError("boot sector gives a cluster size of zero")
        self.fat_bits = FAT_BITS
        self.fat_length = self.boot.fat_length
        self.fat_begin = self.boot.reserved
        self.cluster_size = self.boot.cluster_size
        self.rootdir_begin = self.boot.fats * self.boot.fat_length + self.boot.reserved
        self.data_begin = self.rootdir_begin + ROOT_DIR_SECTORS

    def find_entry(self, name: Union[str, bytes]) -> Optional[FatDirEntry]:
        """Return the root entry whose 8.3 name is ``name``, or None.

        Only the first 32 root entries are scanned, and the scan stops at
        the first unused entry.
        """
        key = _entry_name(name)
        raw = self._device.read_sectors(self.rootdir_begin, ROOT_SCAN_SECTORS)
        for offset in range(0, len(raw), _DIRENT.size):
            entry = FatDirEntry.from_bytes(raw[offset : offset + _DIRENT.size])
            if not entry.name[:1].strip(b"\0"):
                return None
            if entry.full_name == key:
                return entry
        return None

    def next_cluster(self, cluster: int) -> int:
        """Return the FAT entry of ``cluster``: the next cluster or an end mark."""
        if cluster < 0:
            raise FatError(f"invalid cluster number {cluster}")
        sector = cluster // ENTRIES_PER_FAT_SECTOR + self.fat_begin
        data = self._device.read_sectors(sector, 1)
        (value,) = _FAT_ENTRY.unpack_from(
            data, (cluster % ENTRIES_PER_FAT_SECTOR) * _FAT_ENTRY.size
        )
        return value

    def _read_cluster(self, cluster: int) -> bytes:
        if cluster < FIRST_DATA_CLUSTER:
            raise FatError(f"cluster {cluster} is not a data cluster")
        lba = self.data_begin + (cluster - FIRST_DATA_CLUSTER) * self.cluster_size
        return self._device.read_sectors(lba, self.cluster_size)

    def load_file(self, name: Union[str, bytes]) -> bytes:
        """Follow the cluster chain of root file ``name`` and return its bytes."""
        entry = self.find_entry(name)
        if entry is None:
            raise FatFileNotFound(f"{name!r} not found in the root directory")
        if entry.size == 0:
            raise FatFileSizeError(f"{name!r} is empty and has no cluster chain")
        cluster_bytes = SECTOR_SIZE * self.cluster_size
        remaining = (entry.size - 1) // cluster_bytes + 1
        log.debug("%r: %d bytes in %d clusters", name, entry.size, remaining)

        cluster = entry.start
        chunks = []
        while True:
            chunks.append(self._read_cluster(cluster))
            cluster = self.next_cluster(cluster)
            if cluster >= END_OF_CHAIN:
                if remaining != 1:
                    raise FatFileSizeError(
                        f"{name!r}: cluster chain ends {remaining - 1} clusters early"
                    )
                return b"".join(chunks)[: entry.size]
            remaining -= 1
            if not remaining:
                raise FatMissingEndError(
                    f"{name!r}: cluster chain continues past the file size"
                )