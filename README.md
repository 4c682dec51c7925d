# alos

Python tools modelled on a small hobby operating system: its character
classification table, its `printf`-style formatter, console input and output,
its boot loader's ext2 and FAT16 disk-image readers, the loader's segment
descriptors and page tables, a minimal shell and an `ls` command.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Commands

### `alos-load`

Loads the kernel file from a disk image the way the boot loader does. It
builds the segment descriptors and page tables, then looks for the file
`alos` in the root directory of an ext2 file system and, when that fails,
for `ALOS` in the root directory of a FAT16 file system. It prints the size
of the kernel and the physical address that `0xc0001000` maps to. With
`-o FILE` the kernel image is written to `FILE`. It exits with status 1 when
the kernel cannot be loaded from either file system.

```
alos-load disk.img -o kernel.bin
```

### `alos-shell`

A minimal shell reading commands from standard input until it ends. A line
holds at most 19 characters (longer ones give `cmd is too long`) and is split
on spaces into at most nine words. `cd`, `mkdir` and `rmdir` are built in; any
other command is run as a program of that name from the directory given by
`--bin-dir` (default `/bin`), with an empty environment.

```
alos-shell --bin-dir ./bin
```

### `alos-ls`

Prints `.`, `..` and the names in a directory (the current one by default),
each followed by a tab, then a newline.

```
alos-ls some/dir
```

## Library use

```python
from alos.vsprintf import sprintf
from alos.ctype import is_xdigit, to_upper

sprintf("%#08x|%-5d|%s", 255, 42, "ok")   # '0x0000ff|42   |ok'
is_xdigit("f")                            # True
to_upper("q")                             # 'Q'
```

`alos.stdio` offers `printf`, `puts`, `putc`, `scanf` and `getchar` over any
text stream (standard output and input by default).

Reading a file from an ext2 image:

```python
from alos.disk import BlockDevice
from alos.ext2 import Ext2Image

with BlockDevice("disk.img") as device:
    data = Ext2Image(device).load_file("alos")
```

`alos.fat.Fat16Image` does the same for FAT16 images, taking 8.3 short names
such as `"ALOS"`. `alos.loader.load_kernel` tries ext2 first and FAT16 after.

Building the loader's page tables and translating an address:

```python
from alos.memory import build_loader_pages

tables = build_loader_pages()
tables.translate(0xC0001000)              # 0x1000
```

Errors are raised as exceptions: `alos.disk.DiskError`, `alos.ext2.Ext2Error`,
`alos.fat.FatError` (with `FatFileNotFound`, `FatFileSizeError` and
`FatMissingEndError`), `alos.memory.PageFault`, `alos.loader.LoadError` and
`alos.shell.CommandTooLong`.

## What this package does not do

It does not boot or run anything on a machine: `alos-load` reads the kernel
out of an image but does not start it, and the descriptors and page tables
are values in memory only. The disk readers are read-only; nothing is ever
written to an image. The ext2 reader looks only at the first block group and
the root directory, and the FAT16 reader scans only the first 32 root
directory entries. The shell has no pipes, redirection or job control.