"""On-disk block layouts: superblock, directory blocks, inodes."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

BLOCK_SIZE = 128
NUM_BLOCKS = BLOCK_SIZE * 8
MAX_FNAME_SIZE = 9
MAX_DIR_ENTRIES = (BLOCK_SIZE - 8) // 12
MAX_DATA_BLOCKS = (BLOCK_SIZE - 8) // 2
MAX_FILE_SIZE = MAX_DATA_BLOCKS * BLOCK_SIZE

DIR_MAGIC_NUM = 0xFFFFFFFF
INODE_MAGIC_NUM = 0xFFFFFFFE

_HEADER = struct.Struct("<II")
_MAGIC = struct.Struct("<I")
_DIR_ENTRY = struct.Struct(f"<{MAX_FNAME_SIZE + 1}sh")
_INODE_BLOCKS = struct.Struct(f"<{MAX_DATA_BLOCKS}h")


def _check_size(data: bytes) -> None:
    if len(data) != BLOCK_SIZE:
        raise ValueError(f"block must be {BLOCK_SIZE} bytes, got {len(data)}")


def _encode_name(name: str) -> bytes:
    encoded = name.encode("utf-8", "surrogateescape")
    if b"\0" in encoded:
        raise ValueError("File name contains a null byte")
    if len(encoded) > MAX_FNAME_SIZE:
        raise ValueError("File name is too long")
    return encoded


def _decode_name(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")


def block_magic(data: bytes) -> int:
    """Return the magic number stored in the first four bytes of a block."""
    return _MAGIC.unpack_from(data)[0]


@dataclass
class SuperBlock:
    """Bitmap of used blocks; bit n of the map is set when block n is used."""

    bitmap: bytearray = field(default_factory=lambda: bytearray(BLOCK_SIZE))

    def __post_init__(self) -> None:
        self.bitmap = bytearray(self.bitmap)
        _check_size(self.bitmap)

    @classmethod
    def from_bytes(cls, data: bytes) -> SuperBlock:
        _check_size(data)
        return cls(bytearray(data))

    def to_bytes(self) -> bytes:
        return bytes(self.bitmap)

    @staticmethod
    def _locate(block_num: int) -> tuple[int, int]:
        if not 0 <= block_num < NUM_BLOCKS:
            raise ValueError(f"Invalid block number {block_num}")
        return divmod(block_num, 8)

    def is_used(self, block_num: int) -> bool:
        byte, bit = self._locate(block_num)
        return bool((self.bitmap[byte] >> bit) & 1)

    def mark_used(self, block_num: int) -> None:
        byte, bit = self._locate(block_num)
        self.bitmap[byte] |= 1 << bit

    def mark_free(self, block_num: int) -> None:
        byte, bit = self._locate(block_num)
        self.bitmap[byte] &= ~(1 << bit) & 0xFF

    def free_count(self) -> int:
        return sum(8 - bin(byte).count("1") for byte in self.bitmap)


@dataclass
class DirEntry:
    """A named reference from a directory to a directory block or inode."""

    name: str
    block_num: int


@dataclass
class DirBlock:
    """A directory: an ordered list of at most MAX_DIR_ENTRIES entries."""

    entries: list[DirEntry] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> DirBlock:
        _check_size(data)
        magic, count = _HEADER.unpack_from(data)
        if magic != DIR_MAGIC_NUM:
            raise ValueError("block is not a directory")
        if count > MAX_DIR_ENTRIES:
            raise ValueError(f"directory claims {count} entries")
        body = data[_HEADER.size:_HEADER.size + count * _DIR_ENTRY.size]
        return cls([DirEntry(_decode_name(raw), num) for raw, num in _DIR_ENTRY.iter_unpack(body)])

    def to_bytes(self) -> bytes:
        parts = [_HEADER.pack(DIR_MAGIC_NUM, len(self.entries))]
        parts.extend(_DIR_ENTRY.pack(_encode_name(e.name), e.block_num) for e in self.entries)
        unused = MAX_DIR_ENTRIES - len(self.entries)
        parts.append(bytes(unused * _DIR_ENTRY.size))
        return b"".join(parts)

    @property
    def is_full(self) -> bool:
        return len(self.entries) >= MAX_DIR_ENTRIES

    def find(self, name: str) -> DirEntry | None:
        return next((entry for entry in self.entries if entry.name == name), None)

    def add(self, name: str, block_num: int) -> DirEntry:
        """Append an entry; raises if the name is invalid, taken, or the directory is full."""
        _encode_name(name)
        if self.find(name) is not None:
            raise FileExistsError(name)
        if self.is_full:
            raise ValueError("Directory is full")
        entry = DirEntry(name, block_num)
        self.entries.append(entry)
        return entry

    def remove(self, name: str) -> DirEntry:
        """Remove and return the named entry, keeping the order of the rest."""
        for index, entry in enumerate(self.entries):
            if entry.name == name:
                return self.entries.pop(index)
        raise KeyError(name)


@dataclass
class Inode:
    """Index node of a data file: its size and its direct data block numbers."""

    size: int = 0
    blocks: list[int] = field(default_factory=lambda: [0] * MAX_DATA_BLOCKS)

    def __post_init__(self) -> None:
        self.blocks = list(self.blocks)
        if len(self.blocks) != MAX_DATA_BLOCKS:
            raise ValueError(f"inode must list {MAX_DATA_BLOCKS} blocks")

    @classmethod
    def from_bytes(cls, data: bytes) -> Inode:
        _check_size(data)
        magic, size = _HEADER.unpack_from(data)
        if magic != INODE_MAGIC_NUM:
            raise ValueError("block is not an inode")
        return cls(size, list(_INODE_BLOCKS.unpack_from(data, _HEADER.size)))

    def to_bytes(self) -> bytes:
        return _HEADER.pack(INODE_MAGIC_NUM, self.size) + _INODE_BLOCKS.pack(*self.blocks)

    def used_blocks(self) -> list[int]:
        return [block for block in self.blocks if block != 0]