[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "alos"
version = "0.1.0"
description = "Pieces of a small hobby operating system: ctype tables, printf-style formatting, ext2 and FAT16 image readers, loader page tables, a tiny shell and ls"
requires-python = ">=3.10"
dependencies = []
keywords = ["operating-system", "ext2", "fat16", "bootloader", "shell", "vsprintf", "paging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
alos-load = "alos.loader:main"
alos-shell = "alos.shell:main"
alos-ls = "alos.ls:main"

[tool.hatch.build.targets.wheel]
packages = ["alos"]

[tool.pytest.ini_options]
addopts = "-ra"
