"""Block store — a fixed pool of fixed-size data blocks.

The store is the "disk" under the file system: ``block_count`` buffers
of ``block_size`` bytes each, plus a free set recording which indices
are available.  Files never see block indices directly; each descriptor
keeps a **block map** translating logical block numbers (offset //
block_size) to indices in this store.

Allocation always hands out the lowest free index, which keeps runs
deterministic and makes block reuse easy to observe.  A block is
zero-filled when it is allocated, so bytes a file has never written
read back as zero even when the block previously belonged to someone
else.
"""

from blockfs.errors import InvalidArgumentError, NoFreeBlocksError


class BlockStore:
    """Fixed-size pool of fixed-size blocks with free/allocated tracking."""

    def __init__(self, *, block_size: int, block_count: int) -> None:
        """Create a store of zero-filled blocks, all of them free.

        Args:
            block_size: Bytes per block.
            block_count: Number of blocks.

        """
        self._block_size = block_size
        self._blocks = [bytearray(block_size) for _ in range(block_count)]
        self._free: set[int] = set(range(block_count))

    @property
    def block_size(self) -> int:
        """Return the size of every block in bytes."""
        return self._block_size

    @property
    def block_count(self) -> int:
        """Return the total number of blocks."""
        return len(self._blocks)

    @property
    def free_count(self) -> int:
        """Return the number of unallocated blocks."""
        return len(self._free)

    @property
    def used_count(self) -> int:
        """Return the number of allocated blocks."""
        return self.block_count - len(self._free)

    def is_allocated(self, index: int) -> bool:
        """Return True if *index* is a valid, currently allocated block."""
        return 0 <= index < self.block_count and index not in self._free

    def allocate(self) -> int:
        """Take the lowest free block and zero it.

        Returns:
            The block index.

        Raises:
            NoFreeBlocksError: If every block is allocated.

        """
        if not self._free:
            msg = f"No free blocks (all {self.block_count} in use)"
            raise NoFreeBlocksError(msg)
        index = min(self._free)
        self._free.remove(index)
        self._blocks[index][:] = bytes(self._block_size)
        return index

    def free(self, index: int) -> None:
        """Return a block to the free set.

        Raises:
            InvalidArgumentError: If *index* is out of range or already free.

        """
        if not self.is_allocated(index):
            msg = f"Block {index} is not allocated"
            raise InvalidArgumentError(msg)
        self._free.add(index)

    def read(self, index: int, offset: int, length: int) -> bytes:
        """Read *length* bytes from block *index* starting at *offset*.

        Raises:
            InvalidArgumentError: If the range falls outside the block.

        """
        self._check_range(index, offset, length)
        return bytes(self._blocks[index][offset : offset + length])

    def write(self, index: int, offset: int, data: bytes) -> None:
        """Copy *data* into block *index* starting at *offset*.

        Raises:
            InvalidArgumentError: If the range falls outside the block.

        """
        self._check_range(index, offset, len(data))
        self._blocks[index][offset : offset + len(data)] = data

    def _check_range(self, index: int, offset: int, length: int) -> None:
        if not 0 <= index < self.block_count:
            msg = f"Block index out of range: {index}"
            raise InvalidArgumentError(msg)
        if offset < 0 or length < 0 or offset + length > self._block_size:
            msg = f"Range [{offset}, {offset + length}) outside block of {self._block_size} bytes"
            raise InvalidArgumentError(msg)
