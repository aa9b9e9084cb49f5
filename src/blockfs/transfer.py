"""Block-level transfer between a descriptor's byte range and the store.

A regular file's bytes live in blocks.  Byte ``offset`` of the file is
found in logical block ``offset // block_size`` at position
``offset % block_size``; the descriptor's block map turns the logical
block into a store index.

Files are **sparse**:

- A block map entry of ``None`` is a hole.  Reading a hole produces
  zero bytes; nothing is allocated.
- Writing allocates only the blocks the written bytes actually cover.
  Seeking far past the end and writing leaves every block in between
  as a hole.
- Growing a file with ``resize`` only changes its size, so the new
  range is all holes until something is written there.
"""

from blockfs.blocks import BlockStore
from blockfs.descriptors import Descriptor


def blocks_needed(size: int, block_size: int) -> int:
    """Return how many logical blocks cover *size* bytes (rounded up)."""
    return (size + block_size - 1) // block_size


def read_range(descriptor: Descriptor, blocks: BlockStore, offset: int, count: int) -> bytes:
    """Read up to *count* bytes starting at *offset*.

    Reading stops at the descriptor's logical size, so a read at or
    beyond the end returns ``b""``.  Holes read as zero bytes.
    """
    block_size = blocks.block_size
    end = min(descriptor.size, offset + count)
    out = bytearray()
    position = offset
    while position < end:
        logical, within = divmod(position, block_size)
        chunk = min(block_size - within, end - position)
        index = descriptor.block_map[logical] if logical < len(descriptor.block_map) else None
        if index is None:
            out.extend(bytes(chunk))
        else:
            out.extend(blocks.read(index, within, chunk))
        position += chunk
    return bytes(out)


def write_range(descriptor: Descriptor, blocks: BlockStore, offset: int, data: bytes) -> list[int]:
    """Copy *data* into the file at *offset*, allocating blocks on demand.

    The size grows as each chunk lands, so if the store runs out of
    blocks part-way the descriptor still describes exactly the bytes
    that were written before the failure.

    Returns:
        The store indices of newly allocated blocks.

    Raises:
        NoFreeBlocksError: If a needed block cannot be allocated.

    """
    block_size = blocks.block_size
    block_map = descriptor.block_map
    allocated: list[int] = []
    position = offset
    written = 0
    while written < len(data):
        logical, within = divmod(position, block_size)
        index = block_map[logical] if logical < len(block_map) else None
        if index is None:
            index = blocks.allocate()
            if logical >= len(block_map):
                block_map.extend([None] * (logical + 1 - len(block_map)))
            block_map[logical] = index
            allocated.append(index)
        chunk = min(block_size - within, len(data) - written)
        blocks.write(index, within, data[written : written + chunk])
        written += chunk
        position += chunk
        descriptor.size = max(descriptor.size, position)
    return allocated


def resize(descriptor: Descriptor, blocks: BlockStore, size: int) -> list[int]:
    """Set the logical size of a regular file.

    Shrinking frees every block at or past ``blocks_needed(size)`` and
    zeroes the unused tail of the last kept block, so growing the file
    again later exposes zeros rather than stale bytes.  Growing only
    changes the size.

    Returns:
        The store indices that were freed.

    """
    block_size = blocks.block_size
    block_map = descriptor.block_map
    freed: list[int] = []
    if size < descriptor.size:
        keep = blocks_needed(size, block_size)
        freed = [index for index in block_map[keep:] if index is not None]
        for index in freed:
            blocks.free(index)
        del block_map[keep:]
        tail = size % block_size
        last = block_map[keep - 1] if tail and keep <= len(block_map) else None
        if last is not None:
            blocks.write(last, tail, bytes(block_size - tail))
    descriptor.size = size
    return freed
