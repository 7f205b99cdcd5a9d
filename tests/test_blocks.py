import pytest

from blockfs.blocks import (
    BLOCK_SIZE,
    DIR_MAGIC_NUM,
    INODE_MAGIC_NUM,
    MAX_DATA_BLOCKS,
    MAX_DIR_ENTRIES,
    MAX_FNAME_SIZE,
    NUM_BLOCKS,
    DirBlock,
    DirEntry,
    Inode,
    SuperBlock,
    block_magic,
)


def test_superblock_roundtrip():
    sb = SuperBlock()
    sb.mark_used(5)
    sb.mark_used(NUM_BLOCKS - 1)
    again = SuperBlock.from_bytes(sb.to_bytes())
    assert again == sb
    assert again.is_used(5)
    assert again.is_used(NUM_BLOCKS - 1)
    assert not again.is_used(4)


def test_superblock_first_two_blocks_byte():
    sb = SuperBlock()
    sb.mark_used(0)
    sb.mark_used(1)
    assert sb.to_bytes()[0] == 0x3


def test_superblock_mark_free_and_count():
    sb = SuperBlock()
    assert sb.free_count() == NUM_BLOCKS
    for n in (0, 7, 8, 100):
        sb.mark_used(n)
    assert sb.free_count() == NUM_BLOCKS - 4
    sb.mark_free(7)
    assert not sb.is_used(7)
    assert sb.is_used(8)
    assert sb.free_count() == NUM_BLOCKS - 3


@pytest.mark.parametrize("bad", [-1, NUM_BLOCKS])
def test_superblock_rejects_out_of_range(bad):
    with pytest.raises(ValueError):
        SuperBlock().mark_used(bad)


def test_superblock_rejects_wrong_size():
    with pytest.raises(ValueError):
        SuperBlock.from_bytes(bytes(BLOCK_SIZE - 1))


def test_dirblock_empty_layout():
    data = DirBlock().to_bytes()
    assert len(data) == BLOCK_SIZE
    assert block_magic(data) == DIR_MAGIC_NUM
    assert data[:4] == b"\xff\xff\xff\xff"
    assert DirBlock.from_bytes(data).entries == []


def test_dirblock_roundtrip_keeps_order():
    d = DirBlock()
    d.add("a" * MAX_FNAME_SIZE, 2)
    d.add("notes", 3)
    d.add("z", 4)
    again = DirBlock.from_bytes(d.to_bytes())
    assert again.entries == [
        DirEntry("a" * MAX_FNAME_SIZE, 2),
        DirEntry("notes", 3),
        DirEntry("z", 4),
    ]


def test_dirblock_find():
    d = DirBlock()
    d.add("x", 9)
    assert d.find("x") == DirEntry("x", 9)
    assert d.find("y") is None


def test_dirblock_name_too_long():
    with pytest.raises(ValueError):
        DirBlock().add("b" * (MAX_FNAME_SIZE + 1), 2)


def test_dirblock_duplicate():
    d = DirBlock()
    d.add("dup", 2)
    with pytest.raises(FileExistsError):
        d.add("dup", 3)


def test_dirblock_full():
    d = DirBlock()
    for i in range(MAX_DIR_ENTRIES):
        d.add(f"f{i}", i + 2)
    assert d.is_full
    with pytest.raises(ValueError):
        d.add("extra", 50)
    assert len(DirBlock.from_bytes(d.to_bytes()).entries) == MAX_DIR_ENTRIES


def test_dirblock_remove_shifts():
    d = DirBlock()
    for i, name in enumerate(["one", "two", "three"]):
        d.add(name, i + 2)
    removed = d.remove("two")
    assert removed == DirEntry("two", 3)
    assert [e.name for e in d.entries] == ["one", "three"]
    with pytest.raises(KeyError):
        d.remove("two")


def test_dirblock_rejects_inode_bytes():
    with pytest.raises(ValueError):
        DirBlock.from_bytes(Inode().to_bytes())


def test_inode_layout_and_roundtrip():
    inode = Inode(size=300)
    inode.blocks[0] = 10
    inode.blocks[2] = 12
    data = inode.to_bytes()
    assert len(data) == BLOCK_SIZE
    assert block_magic(data) == INODE_MAGIC_NUM
    again = Inode.from_bytes(data)
    assert again == inode
    assert again.used_blocks() == [10, 12]


def test_inode_rejects_directory_bytes():
    with pytest.raises(ValueError):
        Inode.from_bytes(DirBlock().to_bytes())


def test_inode_requires_full_block_list():
    with pytest.raises(ValueError):
        Inode(blocks=[0] * (MAX_DATA_BLOCKS - 1))