"""Tests for block-level transfer.

Bytes at offset ``o`` live in logical block ``o // block_size``.
Reads stop at the logical size and treat holes as zeros; writes
allocate only the blocks they touch; shrinking frees the tail.
"""

import pytest

from blockfs.blocks import BlockStore
from blockfs.descriptors import Descriptor, FileType
from blockfs.errors import NoFreeBlocksError
from blockfs.transfer import blocks_needed, read_range, resize, write_range

BLOCK_SIZE = 8


def _file(block_count: int = 16) -> tuple[Descriptor, BlockStore]:
    """Create an empty regular-file descriptor and a store."""
    return (
        Descriptor(id=1, file_type=FileType.FILE),
        BlockStore(block_size=BLOCK_SIZE, block_count=block_count),
    )


class TestBlocksNeeded:
    """Verify the ceiling division."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, 0), (1, 1), (BLOCK_SIZE, 1), (BLOCK_SIZE + 1, 2), (3 * BLOCK_SIZE, 3)],
    )
    def test_rounds_up(self, size: int, expected: int) -> None:
        """Partial blocks count as a whole block."""
        assert blocks_needed(size, BLOCK_SIZE) == expected


class TestWriteRange:
    """Verify writing and block allocation."""

    def test_write_within_one_block(self) -> None:
        """A short write allocates one block and sets the size."""
        descriptor, blocks = _file()
        allocated = write_range(descriptor, blocks, 0, b"abc")
        assert allocated == [0]
        expected_size = 3
        assert descriptor.size == expected_size
        assert descriptor.block_map == [0]

    def test_write_across_boundary(self) -> None:
        """A write straddling a boundary uses both blocks."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, BLOCK_SIZE - 2, b"wxyz")
        assert descriptor.block_map == [0, 1]
        assert read_range(descriptor, blocks, BLOCK_SIZE - 2, 4) == b"wxyz"

    def test_sparse_write_leaves_holes(self) -> None:
        """Writing far past the start allocates only the touched block."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 3 * BLOCK_SIZE, b"z")
        assert descriptor.block_map == [None, None, None, 0]
        expected_size = 3 * BLOCK_SIZE + 1
        assert descriptor.size == expected_size

    def test_overwrite_reuses_block(self) -> None:
        """Rewriting an existing range allocates nothing new."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 0, b"aaaa")
        assert write_range(descriptor, blocks, 1, b"bb") == []
        assert read_range(descriptor, blocks, 0, 4) == b"abba"

    def test_unaligned_write_uses_floor_index(self) -> None:
        """An offset just below a boundary still targets the lower block."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, BLOCK_SIZE - 1, b"q")
        assert descriptor.block_map == [0]

    def test_partial_write_on_exhaustion(self) -> None:
        """Running out of blocks keeps the bytes already written."""
        descriptor, blocks = _file(block_count=1)
        with pytest.raises(NoFreeBlocksError):
            write_range(descriptor, blocks, 0, b"x" * (BLOCK_SIZE + 1))
        assert descriptor.size == BLOCK_SIZE
        assert descriptor.block_map == [0]


class TestReadRange:
    """Verify reading with holes and EOF."""

    def test_stops_at_size(self) -> None:
        """Reading past the end returns only the available bytes."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 0, b"hello")
        assert read_range(descriptor, blocks, 3, 100) == b"lo"

    def test_at_eof_returns_empty(self) -> None:
        """A read at the end returns b""."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 0, b"hi")
        assert read_range(descriptor, blocks, 2, 10) == b""

    def test_holes_read_as_zero(self) -> None:
        """Unallocated blocks inside the size read as zero bytes."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 2 * BLOCK_SIZE, b"end")
        data = read_range(descriptor, blocks, 0, 2 * BLOCK_SIZE + 3)
        assert data == bytes(2 * BLOCK_SIZE) + b"end"

    def test_grown_size_without_blocks_reads_zero(self) -> None:
        """A size beyond the block map is one big hole."""
        descriptor, blocks = _file()
        descriptor.size = 5
        assert read_range(descriptor, blocks, 0, 10) == bytes(5)


class TestResize:
    """Verify truncation at block level."""

    def test_shrink_frees_tail_blocks(self) -> None:
        """Shrinking to 1.5 blocks keeps two blocks and frees the rest."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 0, b"x" * (4 * BLOCK_SIZE))
        freed = resize(descriptor, blocks, BLOCK_SIZE + BLOCK_SIZE // 2)
        assert freed == [2, 3]
        assert descriptor.block_map == [0, 1]
        assert blocks.used_count == 2

    def test_shrink_to_zero_frees_everything(self) -> None:
        """Truncating to 0 releases every block."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 0, b"x" * (2 * BLOCK_SIZE))
        resize(descriptor, blocks, 0)
        assert descriptor.block_map == []
        assert blocks.used_count == 0
        assert descriptor.size == 0

    def test_shrink_zeroes_cut_tail(self) -> None:
        """Bytes cut off inside the last block read as zero after regrowth."""
        descriptor, blocks = _file()
        write_range(descriptor, blocks, 0, b"abcdefgh")
        resize(descriptor, blocks, 3)
        resize(descriptor, blocks, BLOCK_SIZE)
        assert read_range(descriptor, blocks, 0, BLOCK_SIZE) == b"abc" + bytes(5)

    def test_grow_allocates_nothing(self) -> None:
        """Growing only changes the size."""
        descriptor, blocks = _file()
        assert resize(descriptor, blocks, 1024) == []
        expected_size = 1024
        assert descriptor.size == expected_size
        assert blocks.used_count == 0
