"""Character tables, formatting, console I/O, ext2/FAT16 image readers, paging, a shell and ls."""

__version__ = "0.1.0"