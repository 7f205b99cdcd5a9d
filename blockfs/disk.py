"""A simulated disk: a host file holding a fixed array of blocks."""

from __future__ import annotations

import os
from typing import BinaryIO

from .blocks import BLOCK_SIZE, NUM_BLOCKS


class DiskError(Exception):
    """Raised when the simulated disk cannot be used as asked."""


class Disk:
    """Block-addressed access to a disk image file."""

    def __init__(self, path: str | os.PathLike[str] = "DISK") -> None:
        self.path = os.fspath(path)
        self._file: BinaryIO | None = None

    @property
    def mounted(self) -> bool:
        return self._file is not None

    def mount(self) -> bool:
        """Open the disk file, creating it if absent. Return True if it was created."""
        if self._file is not None:
            raise DiskError("Disk is already mounted")
        try:
            self._file = open(self.path, "r+b")
            return False
        except OSError:
            pass
        try:
            self._file = open(self.path, "x+b")
        except OSError as exc:
            raise DiskError("Could not create disk") from exc
        return True

    def unmount(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _seek(self, block_num: int) -> BinaryIO:
        if self._file is None:
            raise DiskError("Disk is not mounted")
        if not 0 <= block_num < NUM_BLOCKS:
            raise DiskError("Invalid block number")
        offset = block_num * BLOCK_SIZE
        if self._file.seek(offset) != offset:
            raise DiskError("Seek failure")
        return self._file

    def read_block(self, block_num: int) -> bytes:
        handle = self._seek(block_num)
        data = handle.read(BLOCK_SIZE)
        if len(data) != BLOCK_SIZE:
            raise DiskError("Failed to read entire block")
        return data

    def write_block(self, block_num: int, data: bytes) -> None:
        data = bytes(data)
        if len(data) != BLOCK_SIZE:
            raise DiskError("Failed to write entire block")
        handle = self._seek(block_num)
        if handle.write(data) != BLOCK_SIZE:
            raise DiskError("Failed to write entire block")
        handle.flush()

    def __enter__(self) -> Disk:
        if not self.mounted:
            self.mount()
        return self

    def __exit__(self, *args: object) -> None:
        self.unmount()