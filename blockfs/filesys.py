"""File system commands: directories, data files and their contents."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .basicfs import BasicFileSys
from .blocks import (
    BLOCK_SIZE,
    DIR_MAGIC_NUM,
    MAX_FILE_SIZE,
    MAX_FNAME_SIZE,
    DirBlock,
    DirEntry,
    Inode,
    block_magic,
)

ROOT_DIR_BLOCK = 1


class FileSysError(Exception):
    """Raised when a file system command cannot be carried out."""


@dataclass(frozen=True)
class FileStat:
    """Statistics of a data file."""

    inode_block: int
    size: int
    num_blocks: int
    first_block: int

    def __str__(self) -> str:
        return (
            f"Inode block: {self.inode_block}\n"
            f"Bytes in file: {self.size}\n"
            f"Number of blocks: {self.num_blocks}\n"
            f"First block: {self.first_block}"
        )


@dataclass(frozen=True)
class DirStat:
    """Statistics of a directory."""

    name: str
    block_num: int

    def __str__(self) -> str:
        return f"Directory name: {self.name}/\nDirectory block: {self.block_num}"


class FileSys:
    """A hierarchical file system stored on a simulated block disk."""

    def __init__(self, disk_path: str | os.PathLike[str] = "DISK") -> None:
        self.bfs = BasicFileSys(disk_path)
        self.curr_dir = ROOT_DIR_BLOCK

    def mount(self) -> bool:
        """Mount the disk and go to the root directory. Return True if formatted."""
        formatted = self.bfs.mount()
        self.curr_dir = ROOT_DIR_BLOCK
        return formatted

    def unmount(self) -> None:
        self.bfs.unmount()

    def __enter__(self) -> FileSys:
        self.mount()
        return self

    def __exit__(self, *args: object) -> None:
        self.unmount()

    # helpers

    def _read_dir(self, block_num: int) -> DirBlock:
        return DirBlock.from_bytes(self.bfs.read_block(block_num))

    def _write_dir(self, block_num: int, directory: DirBlock) -> None:
        self.bfs.write_block(block_num, directory.to_bytes())

    def _read_inode(self, block_num: int) -> Inode:
        return Inode.from_bytes(self.bfs.read_block(block_num))

    def _is_directory(self, block_num: int) -> bool:
        return block_magic(self.bfs.read_block(block_num)) == DIR_MAGIC_NUM

    def _find(self, name: str) -> tuple[DirEntry, bool] | None:
        entry = self._read_dir(self.curr_dir).find(name)
        if entry is None:
            return None
        return entry, self._is_directory(entry.block_num)

    def _require(self, name: str) -> tuple[DirEntry, bool]:
        found = self._find(name)
        if found is None:
            raise FileSysError("File does not exist")
        return found

    def _require_file(self, name: str) -> DirEntry:
        entry, is_dir = self._require(name)
        if is_dir:
            raise FileSysError("File is a directory")
        return entry

    def _require_dir(self, name: str) -> DirEntry:
        entry, is_dir = self._require(name)
        if not is_dir:
            raise FileSysError("File is not a directory")
        return entry

    @staticmethod
    def _check_filename(name: str) -> None:
        if len(name.encode("utf-8", "surrogateescape")) > MAX_FNAME_SIZE:
            raise FileSysError("File name is too long")

    def _new_entry(self, name: str, contents: bytes) -> None:
        """Allocate a block holding contents and link it into the current directory."""
        self._check_filename(name)
        if self._find(name) is not None:
            raise FileSysError("File exists")
        directory = self._read_dir(self.curr_dir)
        if directory.is_full:
            raise FileSysError("Directory is full")
        block_num = self.bfs.get_free_block()
        if block_num is None:
            raise FileSysError("Disk is full")
        self.bfs.write_block(block_num, contents)
        directory.add(name, block_num)
        self._write_dir(self.curr_dir, directory)

    def _unlink(self, name: str) -> None:
        directory = self._read_dir(self.curr_dir)
        directory.remove(name)
        self._write_dir(self.curr_dir, directory)

    def _contents(self, inode: Inode) -> bytes:
        chunks = []
        remaining = inode.size
        for block_num in inode.blocks:
            if remaining <= 0:
                break
            take = min(remaining, BLOCK_SIZE)
            chunks.append(self.bfs.read_block(block_num)[:take])
            remaining -= take
        return b"".join(chunks)

    # commands

    def mkdir(self, name: str) -> None:
        """Create an empty directory in the current directory."""
        self._new_entry(name, DirBlock().to_bytes())

    def cd(self, name: str) -> None:
        """Change into a subdirectory of the current directory."""
        self.curr_dir = self._require_dir(name).block_num

    def home(self) -> None:
        """Return to the root directory."""
        self.curr_dir = ROOT_DIR_BLOCK

    def rmdir(self, name: str) -> None:
        """Remove an empty subdirectory."""
        entry = self._require_dir(name)
        if self._read_dir(entry.block_num).entries:
            raise FileSysError("Directory is not empty")
        self._unlink(name)
        self.bfs.reclaim_block(entry.block_num)

    def ls(self) -> list[str]:
        """Names in the current directory, directories suffixed with '/'."""
        return [
            entry.name + ("/" if self._is_directory(entry.block_num) else "")
            for entry in self._read_dir(self.curr_dir).entries
        ]

    def create(self, name: str) -> None:
        """Create an empty data file in the current directory."""
        self._new_entry(name, Inode().to_bytes())

    def append(self, name: str, data: str | bytes) -> None:
        """Append data to the end of a data file."""
        entry = self._require_file(name)
        payload = data.encode("utf-8", "surrogateescape") if isinstance(data, str) else bytes(data)
        inode = self._read_inode(entry.block_num)
        new_size = inode.size + len(payload)
        if new_size > MAX_FILE_SIZE:
            raise FileSysError("Append exceeds maximum file size")
        if not payload:
            return

        first_index = inode.size // BLOCK_SIZE
        last_index = (new_size - 1) // BLOCK_SIZE
        needed = sum(1 for index in range(first_index, last_index + 1) if inode.blocks[index] == 0)
        if needed and self.bfs.read_superblock().free_count() < needed:
            raise FileSysError("Disk is full")

        position = inode.size
        consumed = 0
        while consumed < len(payload):
            index, within = divmod(position, BLOCK_SIZE)
            chunk = payload[consumed:consumed + BLOCK_SIZE - within]
            if inode.blocks[index] == 0:
                block_num = self.bfs.get_free_block()
                if block_num is None:
                    raise FileSysError("Disk is full")
                inode.blocks[index] = block_num
                block = bytearray(BLOCK_SIZE)
            else:
                block = bytearray(self.bfs.read_block(inode.blocks[index]))
            block[within:within + len(chunk)] = chunk
            self.bfs.write_block(inode.blocks[index], bytes(block))
            position += len(chunk)
            consumed += len(chunk)

        inode.size = new_size
        self.bfs.write_block(entry.block_num, inode.to_bytes())

    def cat(self, name: str) -> bytes:
        """Whole contents of a data file."""
        entry = self._require_file(name)
        return self._contents(self._read_inode(entry.block_num))

    def tail(self, name: str, n: int) -> bytes:
        """Last n bytes of a data file (the whole file if n covers it)."""
        if n < 0:
            raise ValueError("byte count must not be negative")
        entry = self._require_file(name)
        contents = self._contents(self._read_inode(entry.block_num))
        if n >= len(contents):
            return contents
        return contents[len(contents) - n:]

    def rm(self, name: str) -> None:
        """Delete a data file and free its blocks."""
        entry = self._require_file(name)
        self._unlink(name)
        inode = self._read_inode(entry.block_num)
        for block_num in inode.used_blocks():
            self.bfs.reclaim_block(block_num)
        self.bfs.reclaim_block(entry.block_num)

    def stat(self, name: str) -> FileStat | DirStat:
        """Statistics of a file or directory in the current directory."""
        entry, is_dir = self._require(name)
        if is_dir:
            return DirStat(name, entry.block_num)
        inode = self._read_inode(entry.block_num)
        return FileStat(
            inode_block=entry.block_num,
            size=inode.size,
            num_blocks=1 + len(inode.used_blocks()),
            first_block=inode.blocks[0] if inode.size > 0 else 0,
        )