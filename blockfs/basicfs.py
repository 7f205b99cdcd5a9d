"""Block allocation and formatting on top of the simulated disk."""

from __future__ import annotations

import os

from .blocks import BLOCK_SIZE, NUM_BLOCKS, DirBlock, SuperBlock
from .disk import Disk


class BasicFileSys:
    """Low-level file system: formats the disk and hands out free blocks."""

    def __init__(self, path: str | os.PathLike[str] = "DISK") -> None:
        self.disk = Disk(path)

    def mount(self) -> bool:
        """Mount the disk, formatting it if it is new. Return True if formatted."""
        if not self.disk.mount():
            return False
        superblock = SuperBlock()
        superblock.mark_used(0)
        superblock.mark_used(1)
        self.disk.write_block(0, superblock.to_bytes())
        self.disk.write_block(1, DirBlock().to_bytes())
        empty = bytes(BLOCK_SIZE)
        for block_num in range(2, NUM_BLOCKS):
            self.disk.write_block(block_num, empty)
        return True

    def unmount(self) -> None:
        self.disk.unmount()

    def read_superblock(self) -> SuperBlock:
        return SuperBlock.from_bytes(self.disk.read_block(0))

    def get_free_block(self) -> int | None:
        """Allocate the lowest-numbered free block; None when the disk is full."""
        superblock = self.read_superblock()
        free = next((n for n in range(NUM_BLOCKS) if not superblock.is_used(n)), None)
        if free is not None:
            superblock.mark_used(free)
            self.disk.write_block(0, superblock.to_bytes())
        return free

    def reclaim_block(self, block_num: int) -> None:
        superblock = self.read_superblock()
        superblock.mark_free(block_num)
        self.disk.write_block(0, superblock.to_bytes())

    def read_block(self, block_num: int) -> bytes:
        return self.disk.read_block(block_num)

    def write_block(self, block_num: int, data: bytes) -> None:
        self.disk.write_block(block_num, data)