"""Read-only access to an ext2 image with 1 KiB blocks and 128-byte inodes."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field, fields
from typing import Iterator, Optional, Union

from alos.disk import BLOCK_SIZE, BlockDevice

log = logging.getLogger(__name__)

SUPER_MAGIC = 0xEF53
SUPERBLOCK_NUMBER = 1
GROUP_DESC_BLOCK = 2
ROOT_INO = 2
INODE_SIZE = 128
INODES_PER_BLOCK = BLOCK_SIZE // INODE_SIZE
NDIR_BLOCKS = 12
IND_BLOCK = NDIR_BLOCKS
DIND_BLOCK = IND_BLOCK + 1
TIND_BLOCK = DIND_BLOCK + 1
N_BLOCKS = TIND_BLOCK + 1
NAME_LEN = 255

_PTRS_PER_BLOCK = BLOCK_SIZE // 4
MAX_FILE_BLOCKS = (
    NDIR_BLOCKS + _PTRS_PER_BLOCK + _PTRS_PER_BLOCK**2 + _PTRS_PER_BLOCK**3
)

_SUPER = struct.Struct("<13I6H4I2HI2H3I16s16s64sI2BH")
_GROUP = struct.Struct("<3I4H3I")
_INODE = struct.Struct("<2H5I2H3I15I4I2B3HI")
_DIRENT = struct.Struct("<IHBB")
_PTR = struct.Struct("<I")


class Ext2Error(Exception):
    """The image is not a usable ext2 file system or lacks what was asked."""


def _unpack(layout: struct.Struct, data: bytes, what: str, offset: int = 0) -> tuple:
    if len(data) - offset < layout.size:
        raise Ext2Error(f"{what} needs {layout.size} bytes, got {len(data) - offset}")
    return layout.unpack_from(data, offset)


@dataclass(frozen=True)
class SuperBlock:
    """The on-disk superblock."""

    inodes_count: int = 0
    blocks_count: int = 0
    r_blocks_count: int = 0
    free_blocks_count: int = 0
    free_inodes_count: int = 0
    first_data_block: int = 0
    log_block_size: int = 0
    log_frag_size: int = 0
    blocks_per_group: int = 0
    frags_per_group: int = 0
    inodes_per_group: int = 0
    mtime: int = 0
    wtime: int = 0
    mnt_count: int = 0
    max_mnt_count: int = 0
    magic: int = 0
    state: int = 0
    errors: int = 0
    minor_rev_level: int = 0
    lastcheck: int = 0
    checkinterval: int = 0
    creator_os: int = 0
    rev_level: int = 0
    def_resuid: int = 0
    def_resgid: int = 0
    first_ino: int = 0
    inode_size: int = 0
    block_group_nr: int = 0
    feature_compat: int = 0
    feature_incompat: int = 0
    feature_ro_compat: int = 0
    uuid: bytes = bytes(16)
    volume_name: bytes = b""
    last_mounted: bytes = b""
    algorithm_usage_bitmap: int = 0
    prealloc_blocks: int = 0
    prealloc_dir_blocks: int = 0
    padding1: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "SuperBlock":
        values = list(_unpack(_SUPER, data, "superblock"))
        values[32] = values[32].rstrip(b"\0")
        values[33] = values[33].rstrip(b"\0")
        return cls(*values)

    def to_bytes(self) -> bytes:
        return _SUPER.pack(*(getattr(self, f.name) for f in fields(self)))


@dataclass(frozen=True)
class GroupDesc:
    """A block group descriptor."""

    block_bitmap: int = 0
    inode_bitmap: int = 0
    inode_table: int = 0
    free_blocks_count: int = 0
    free_inodes_count: int = 0
    used_dirs_count: int = 0
    pad: int = 0
    reserved: tuple = (0, 0, 0)

    @classmethod
    def from_bytes(cls, data: bytes) -> "GroupDesc":
        values = _unpack(_GROUP, data, "group descriptor")
        return cls(*values[:7], reserved=tuple(values[7:]))

    def to_bytes(self) -> bytes:
        return _GROUP.pack(
            self.block_bitmap,
            self.inode_bitmap,
            self.inode_table,
            self.free_blocks_count,
            self.free_inodes_count,
            self.used_dirs_count,
            self.pad,
            *self.reserved,
        )


@dataclass(frozen=True)
class Inode:
    """An on-disk inode; ``zones`` holds the 15 block pointers."""

    mode: int = 0
    uid: int = 0
    size: int = 0
    atime: int = 0
    ctime: int = 0
    mtime: int = 0
    dtime: int = 0
    gid: int = 0
    links_count: int = 0
    blocks: int = 0
    flags: int = 0
    reserved1: int = 0
    zones: tuple = field(default=(0,) * N_BLOCKS)
    generation: int = 0
    file_acl: int = 0
    dir_acl: int = 0
    faddr: int = 0
    frag: int = 0
    fsize: int = 0
    pad1: int = 0
    uid_high: int = 0
    gid_high: int = 0
    reserved2: int = 0

    def __post_init__(self) -> None:
        if len(self.zones) != N_BLOCKS:
            raise ValueError(f"an inode has {N_BLOCKS} zones, got {len(self.zones)}")
        object.__setattr__(self, "zones", tuple(self.zones))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Inode":
        v = _unpack(_INODE, data, "inode")
        return cls(
            *v[:12],
            zones=tuple(v[12 : 12 + N_BLOCKS]),
            generation=v[27],
            file_acl=v[28],
            dir_acl=v[29],
            faddr=v[30],
            frag=v[31],
            fsize=v[32],
            pad1=v[33],
            uid_high=v[34],
            gid_high=v[35],
            reserved2=v[36],
        )

    def to_bytes(self) -> bytes:
        return _INODE.pack(
            self.mode,
            self.uid,
            self.size,
            self.atime,
            self.ctime,
            self.mtime,
            self.dtime,
            self.gid,
            self.links_count,
            self.blocks,
            self.flags,
            self.reserved1,
            *self.zones,
            self.generation,
            self.file_acl,
            self.dir_acl,
            self.faddr,
            self.frag,
            self.fsize,
            self.pad1,
            self.uid_high,
            self.gid_high,
            self.reserved2,
        )


@dataclass(frozen=True)
class DirEntry:
    """A directory record: inode number, record length, name and file type."""

    inode: int
    rec_len: int
    name: bytes
    file_type: int = 0

    @property
    def name_len(self) -> int:
        return len(self.name)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "DirEntry":
        inode, rec_len, name_len, file_type = _unpack(
            _DIRENT, data, "directory entry", offset
        )
        start = offset + _DIRENT.size
        name = bytes(data[start : start + name_len])
        if len(name) != name_len:
            raise Ext2Error("directory entry name runs past the end of the block")
        return cls(inode, rec_len, name, file_type)

    def to_bytes(self) -> bytes:
        if len(self.name) > NAME_LEN:
            raise ValueError(f"name longer than {NAME_LEN} bytes")
        raw = _DIRENT.pack(self.inode, self.rec_len, len(self.name), self.file_type)
        raw += self.name
        return raw.ljust(self.rec_len, b"\0")


def parse_dir_entries(block: bytes) -> Iterator[DirEntry]:
    """Yield the records of one directory block, stopping at an empty record
    or at one that would run past the end of the block."""
    offset = 0
    while offset + _DIRENT.size <= len(block):
        entry = DirEntry.from_bytes(block, offset)
        if not entry.rec_len or offset + entry.rec_len > len(block):
            return
        yield entry
        offset += entry.rec_len


class Ext2Image:
    """An ext2 file system on a :class:`BlockDevice`, first block group only."""

    def __init__(self, device: BlockDevice) -> None:
        self._device = device

    def superblock(self) -> SuperBlock:
        """Read the superblock and check its magic number."""
        sb = SuperBlock.from_bytes(self._device.read_block(SUPERBLOCK_NUMBER))
        if sb.magic != SUPER_MAGIC:
            raise Ext2Error(f"bad superblock magic {sb.magic:#x}")
        return sb

    def group(self) -> GroupDesc:
        return GroupDesc.from_bytes(self._device.read_block(GROUP_DESC_BLOCK))

    def inode(self, number: int) -> Inode:
        """Read inode ``number`` (counting from 1) from the inode table."""
        if number < 1:
            raise Ext2Error(f"invalid inode number {number}")
        index = number - 1
        block = self.group().inode_table + index // INODES_PER_BLOCK
        data = self._device.read_block(block)
        start = (index % INODES_PER_BLOCK) * INODE_SIZE
        return Inode.from_bytes(data[start : start + INODE_SIZE])

    def _walk(self, start: int, indices: list[int]) -> int:
        current = start
        for index in indices:
            if not current:
                return 0
            table = self._device.read_block(current)
            (current,) = _PTR.unpack_from(table, index * _PTR.size)
        return current

    def bmap(self, inode: Inode, block: int) -> int:
        """Map file block ``block`` to a disk block; 0 marks a hole."""
        if not 0 <= block < MAX_FILE_BLOCKS:
            raise Ext2Error(f"file block {block} is out of range")
        if block < NDIR_BLOCKS:
            return inode.zones[block]
        block -= NDIR_BLOCKS
        if block < _PTRS_PER_BLOCK:
            return self._walk(inode.zones[IND_BLOCK], [block])
        block -= _PTRS_PER_BLOCK
        if block < _PTRS_PER_BLOCK**2:
            return self._walk(inode.zones[DIND_BLOCK], [block >> 8, block & 255])
        block -= _PTRS_PER_BLOCK**2
        return self._walk(
            inode.zones[TIND_BLOCK], [block >> 16, (block >> 8) & 255, block & 255]
        )

    def find_entry(
        self, directory: Inode, name: Union[str, bytes]
    ) -> Optional[DirEntry]:
        """Return the entry called ``name`` in ``directory``, or None."""
        if not name:
            return None
        key = name.encode("utf-8") if isinstance(name, str) else bytes(name)
        nblocks = -(-directory.size // BLOCK_SIZE)
        for index in range(nblocks):
            block = self.bmap(directory, index)
            if not block:
                continue
            for entry in parse_dir_entries(self._device.read_block(block)):
                if entry.name == key:
                    return entry
        return None

    def load_file(self, name: Union[str, bytes]) -> bytes:
        """Return the contents of file ``name`` in the root directory."""
        self.superblock()
        log.debug("superblock magic %#x verified", SUPER_MAGIC)
        root = self.inode(ROOT_INO)
        entry = self.find_entry(root, name)
        if entry is None:
            raise Ext2Error(f"{name!r} not found in the root directory")
        inode = self.inode(entry.inode)
        log.debug("%r: inode %d, %d bytes", name, entry.inode, inode.size)
        nblocks = -(-inode.size // BLOCK_SIZE)
        chunks = []
        for index in range(nblocks):
            block = self.bmap(inode, index)
            chunks.append(self._device.read_block(block) if block else bytes(BLOCK_SIZE))
        return b"".join(chunks)[: inode.size]