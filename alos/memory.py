"""Segment descriptors and the two-level page tables set up before the kernel starts."""

from __future__ import annotations

import enum
import logging

log = logging.getLogger(__name__)

GDT_LEN = 8
GDT_NUM = 3

ATTR_RW = 0x2
ATTR_RX = 0xA
ATTR_RXC = 0xE

PL_KERNEL = 0
PL_USER = 3

KERNEL_P_ATTR = 0x003
PRESENT = 0x1
PAGE_DESC_BASE = 0x90000
PAGE_SIZE = 0x1000
ENTRIES_PER_TABLE = 1024
KERNEL_VIRTUAL_BASE = 0xC0000000

_FRAME_MASK = 0xFFFFF000
_MASK32 = 0xFFFFFFFF
_FLAT_LIMIT = 0x000FFFFF


class Segment(enum.IntEnum):
    """Indices of the descriptors in the global descriptor table."""

    KERNEL_CODE = 1
    KERNEL_DATA = 2


class PageFault(Exception):
    """A virtual address that has no page table or no mapped page."""


def selector(segment: int, rpl: int) -> int:
    """Return the segment selector for descriptor ``segment`` at privilege ``rpl``."""
    return (int(segment) << 3) | (rpl & 0x3)


def segment_descriptor(seg_type: int, dpl: int, base: int, limit: int) -> int:
    """Build a 64-bit segment descriptor with 4 KiB granularity and 32-bit size."""
    low = ((base << 16) | (limit & 0xFFFF)) & _MASK32
    high = (
        (base & 0xFF000000)
        | ((base >> 16) & 0xFF)
        | (dpl << 13)
        | (seg_type << 8)
        | (limit & 0x0F0000)
        | 0x00C09000
    ) & _MASK32
    return (high << 32) | low


def build_gdt() -> list[int]:
    """Return the null descriptor and flat kernel code and data segments."""
    gdt = [0] * GDT_NUM
    gdt[Segment.KERNEL_CODE] = segment_descriptor(ATTR_RX, PL_KERNEL, 0, _FLAT_LIMIT)
    gdt[Segment.KERNEL_DATA] = segment_descriptor(ATTR_RW, PL_KERNEL, 0, _FLAT_LIMIT)
    return gdt


def _check_address(addr: int) -> int:
    if not 0 <= addr <= _MASK32:
        raise ValueError(f"address {addr:#x} is not a 32-bit address")
    return addr


class PageTables:
    """A page directory at ``PAGE_DESC_BASE`` with page tables placed after it."""

    def __init__(self) -> None:
        self.base = PAGE_DESC_BASE
        self._directory = [0] * ENTRIES_PER_TABLE
        self._tables: dict[int, list[int]] = {}

    @property
    def directory(self) -> tuple[int, ...]:
        """The page directory entries."""
        return tuple(self._directory)

    def add_table(self, vir_addr: int) -> int:
        """Give the 4 MiB region holding ``vir_addr`` a page table; return its address."""
        index = _check_address(vir_addr) >> 22
        entry = self._directory[index]
        if entry & PRESENT:
            return entry & _FRAME_MASK
        address = self.base + PAGE_SIZE * (len(self._tables) + 1)
        self._tables[address] = [0] * ENTRIES_PER_TABLE
        self._directory[index] = address | KERNEL_P_ATTR
        return address

    def _table_for(self, vir_addr: int) -> list[int]:
        entry = self._directory[vir_addr >> 22]
        if not entry & PRESENT:
            raise PageFault(f"no page table for {vir_addr:#x}")
        return self._tables[entry & _FRAME_MASK]

    def map_page(self, vir_addr: int, phy_addr: int) -> None:
        """Map the page holding ``vir_addr`` to the frame holding ``phy_addr``."""
        table = self._table_for(_check_address(vir_addr))
        _check_address(phy_addr)
        slot = (vir_addr >> 12) & 0x3FF
        if table[slot] & PRESENT:
            log.warning("page already mapped at %#x", vir_addr)
        table[slot] = (phy_addr & _FRAME_MASK) | KERNEL_P_ATTR

    def translate(self, vir_addr: int) -> int:
        """Return the physical address that ``vir_addr`` maps to."""
        table = self._table_for(_check_address(vir_addr))
        entry = table[(vir_addr >> 12) & 0x3FF]
        if not entry & PRESENT:
            raise PageFault(f"no page mapped at {vir_addr:#x}")
        return (entry & _FRAME_MASK) | (vir_addr & (PAGE_SIZE - 1))


def build_loader_pages() -> PageTables:
    """Map 0-4 MiB onto itself and 0xc0000000-0xc0400000 onto 0-4 MiB."""
    tables = PageTables()
    tables.add_table(0)
    tables.add_table(KERNEL_VIRTUAL_BASE)
    for page in range(ENTRIES_PER_TABLE):
        tables.map_page(page * PAGE_SIZE, page * PAGE_SIZE)
    for page in range(ENTRIES_PER_TABLE):
        tables.map_page(KERNEL_VIRTUAL_BASE + page * PAGE_SIZE, page * PAGE_SIZE)
    log.debug("page directory at %#x", tables.base)
    return tables