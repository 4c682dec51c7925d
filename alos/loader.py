"""Boot loader: set up segments and paging, then load the kernel from ext2 or FAT16."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

from alos.disk import BlockDevice, DiskError
from alos.ext2 import Ext2Error, Ext2Image
from alos.fat import Fat16Image, FatError
from alos.memory import build_gdt, build_loader_pages
from alos.stdio import printf

log = logging.getLogger(__name__)

KERNEL_LOAD_ADDR = 0xC0001000
KERNEL_FILE_NAME = "alos"
KERNEL_FILE_NAME_FAT = "ALOS       "


class LoadError(Exception):
    """The kernel could be loaded from neither file system."""


def load_kernel(
    device: BlockDevice,
    ext2_name: Union[str, bytes] = KERNEL_FILE_NAME,
    fat_name: Union[str, bytes] = KERNEL_FILE_NAME_FAT,
) -> bytes:
    """Return the kernel image, trying ext2 first and FAT16 after it."""
    try:
        return Ext2Image(device).load_file(ext2_name)
    except (Ext2Error, DiskError) as exc:
        log.debug("ext2 load failed: %s", exc)
        ext2_failure = exc
    try:
        return Fat16Image(device).load_file(fat_name)
    except (FatError, DiskError) as exc:
        raise LoadError(
            f"kernel not loaded: ext2: {ext2_failure}; fat16: {exc}"
        ) from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="alos-load", description="Load the kernel from a disk image."
    )
    parser.add_argument("image", help="disk image holding the kernel")
    parser.add_argument("-o", "--output", help="file to write the kernel image to")
    args = parser.parse_args(argv)

    printf("loading  %s...\n", KERNEL_FILE_NAME)
    build_gdt()
    tables = build_loader_pages()
    printf("page table at:0x%x\n", tables.base)
    printf("maped:0~4M -- 0~4M    0xc0000000~0xc0000000+4M -- 0~4M\n")

    try:
        with BlockDevice(args.image) as device:
            kernel = load_kernel(device)
    except (LoadError, OSError) as exc:
        print(f"alos-load: {exc}", file=sys.stderr)
        return 1

    printf(
        "%s: %d bytes at physical 0x%x\n",
        KERNEL_FILE_NAME,
        len(kernel),
        tables.translate(KERNEL_LOAD_ADDR),
    )
    if args.output:
        Path(args.output).write_bytes(kernel)
    printf("start %s:0x%x\n", KERNEL_FILE_NAME, KERNEL_LOAD_ADDR)
    return 0