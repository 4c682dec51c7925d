"""Sector and block reads from a disk image addressed by 28-bit LBA."""

from __future__ import annotations

import io
import os
from typing import BinaryIO, Union

SECTOR_SIZE = 512
BLOCK_SIZE = 1024
SECTORS_PER_BLOCK = BLOCK_SIZE // SECTOR_SIZE
MAX_SECTORS = 256
_LBA_HIGH_MASK = 0xF0000000

Source = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", BinaryIO]


class DiskError(OSError):
    """A read that the drive cannot carry out."""


class BlockDevice:
    """A read-only drive backed by a disk image.

    ``source`` may be the image itself as bytes, a path to an image file,
    or an already open binary file object (which is then left open).
    """

    def __init__(self, source: Source) -> None:
        self._owned = False
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._file: BinaryIO | None = io.BytesIO(bytes(source))
            self._owned = True
        elif isinstance(source, (str, os.PathLike)):
            self._file = open(source, "rb")
            self._owned = True
        elif hasattr(source, "read") and hasattr(source, "seek"):
            self._file = source
        else:
            raise TypeError(f"cannot read a disk from {type(source).__name__}")

    def _read(self, lba: int, sectors: int) -> bytes:
        if lba < 0 or lba & _LBA_HIGH_MASK:
            raise DiskError(f"LBA {lba:#x} does not fit in 28 bits")
        if self._file is None:
            raise DiskError("device is closed")
        length = sectors * SECTOR_SIZE
        self._file.seek(lba * SECTOR_SIZE)
        data = self._file.read(length)
        if len(data) != length:
            raise DiskError(
                f"read of {sectors} sectors at LBA {lba} runs past the end of the disk"
            )
        return data

    def read_sectors(self, lba: int, count: int = 1) -> bytes:
        """Read ``count`` 512-byte sectors from ``lba``; a count of 0 means 256."""
        if not 0 <= count < MAX_SECTORS:
            raise ValueError(f"sector count must be between 0 and 255, got {count}")
        return self._read(lba, count or MAX_SECTORS)

    def read_block(self, block: int, count: int = 1) -> bytes:
        """Read ``count`` 1024-byte blocks starting at block number ``block``."""
        if not 1 <= count <= MAX_SECTORS // SECTORS_PER_BLOCK:
            raise ValueError(f"block count must be between 1 and 128, got {count}")
        if block < 0:
            raise DiskError(f"negative block number {block}")
        return self._read(block * SECTORS_PER_BLOCK, count * SECTORS_PER_BLOCK)

    def close(self) -> None:
        """Release the image; files opened by the device are closed."""
        if self._file is not None and self._owned:
            self._file.close()
        self._file = None

    def __enter__(self) -> "BlockDevice":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()