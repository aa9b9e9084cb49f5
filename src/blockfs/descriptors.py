"""Descriptors — the inode table of the file system.

A **descriptor** is the metadata record for one file system object:
its type, size, hard-link count, open count, and block map.  The name
does NOT live in the descriptor — it lives in a directory entry.  That
separation is what makes hard links possible: several entries can
carry the same slot index.

The **descriptor table** is a fixed array of slots sized at format
time.  A slot is either occupied by exactly one descriptor or holds
the ``TOMBSTONE`` marker.  Allocation scans for the lowest tombstone;
reclaiming frees the descriptor's blocks and puts the tombstone back.

Directories hold an ordered list of ``DirectoryEntry`` records that
always starts with "." (the directory itself) and ".." (its parent).
Entries refer to descriptors by slot index, never by object, so the
self and parent references are not reference cycles.

Link counting follows the Unix convention: a file's count is its
number of names; a directory's count is 2 (its name plus its own ".")
plus one for every subdirectory whose ".." points back at it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from itertools import count
from typing import TYPE_CHECKING

from blockfs.errors import InvalidArgumentError, NoFreeDescriptorsError

if TYPE_CHECKING:
    from blockfs.blocks import BlockStore


class FileType(StrEnum):
    """The kind of object a descriptor represents."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


class _Slot(Enum):
    """Marker for an empty descriptor slot."""

    TOMBSTONE = "tombstone"


TOMBSTONE = _Slot.TOMBSTONE

ROOT_SLOT = 0

SELF_NAME = "."
PARENT_NAME = ".."


@dataclass(frozen=True)
class DirectoryEntry:
    """One name in a directory, pointing at a descriptor slot."""

    name: str
    slot: int


@dataclass(frozen=True)
class StatInfo:
    """Read-only snapshot of a descriptor's metadata (returned by stat)."""

    id: int
    file_type: FileType
    link_count: int
    size: int
    block_count: int


@dataclass(frozen=True)
class EntryInfo:
    """One line of a directory listing (returned by ls).

    ``target`` is only set for symlinks.
    """

    name: str
    file_type: FileType
    id: int
    target: str | None = None

    def __str__(self) -> str:
        """Format like ``name  type  id`` with `` -> target`` for links."""
        text = f"{self.name}\t{self.file_type}\t{self.id}"
        if self.target is not None:
            text += f" -> {self.target}"
        return text


@dataclass
class Descriptor:
    """Internal descriptor — the core metadata record.

    ``block_map[i]`` is the block store index holding bytes
    ``[i * block_size, (i + 1) * block_size)`` of the file, or ``None``
    for a hole.  ``entries`` is only used by directories and ``target``
    only by symlinks.
    """

    id: int
    file_type: FileType
    link_count: int = 1
    size: int = 0
    block_map: list[int | None] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]
    open_count: int = 0
    entries: list[DirectoryEntry] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]
    target: str = ""

    @property
    def block_count(self) -> int:
        """Return the number of blocks actually allocated (holes excluded)."""
        return sum(1 for index in self.block_map if index is not None)

    @property
    def parent_slot(self) -> int:
        """Return the slot of the ".." entry (always second in a directory)."""
        return self.entries[1].slot

    def find_entry(self, name: str) -> int | None:
        """Return the position of *name* in ``entries``, or None."""
        for position, entry in enumerate(self.entries):
            if entry.name == name:
                return position
        return None

    def to_info(self) -> StatInfo:
        """Create a read-only snapshot of this descriptor."""
        return StatInfo(
            id=self.id,
            file_type=self.file_type,
            link_count=self.link_count,
            size=self.size,
            block_count=self.block_count,
        )


type Slot = Descriptor | _Slot


class DescriptorTable:
    """Fixed-capacity, slot-indexed table of descriptors."""

    def __init__(self, capacity: int, *, blocks: BlockStore) -> None:
        """Create a table of *capacity* empty slots.

        Args:
            capacity: Number of descriptor slots.
            blocks: The store that reclaimed blocks are returned to.

        """
        self._slots: list[Slot] = [TOMBSTONE] * capacity
        self._blocks = blocks
        self._ids = count()

    @property
    def capacity(self) -> int:
        """Return the total number of slots."""
        return len(self._slots)

    @property
    def used_count(self) -> int:
        """Return the number of occupied slots."""
        return sum(1 for slot in self._slots if slot is not TOMBSTONE)

    def is_free(self, slot: int) -> bool:
        """Return True if *slot* holds the tombstone marker."""
        return self._slots[slot] is TOMBSTONE

    def get(self, slot: int) -> Descriptor:
        """Return the descriptor stored in *slot*.

        Raises:
            InvalidArgumentError: If the slot is out of range or empty.

        """
        if not 0 <= slot < len(self._slots):
            msg = f"Descriptor slot out of range: {slot}"
            raise InvalidArgumentError(msg)
        descriptor = self._slots[slot]
        if descriptor is TOMBSTONE:
            msg = f"Descriptor slot {slot} is empty"
            raise InvalidArgumentError(msg)
        return descriptor

    def occupied(self) -> Iterator[tuple[int, Descriptor]]:
        """Yield ``(slot, descriptor)`` for every occupied slot."""
        for slot, descriptor in enumerate(self._slots):
            if descriptor is not TOMBSTONE:
                yield slot, descriptor

    def allocate(
        self,
        file_type: FileType,
        *,
        parent: int | None = None,
        target: str = "",
    ) -> int:
        """Install a new descriptor in the lowest empty slot.

        Directories start with "." and ".." entries and a link count of
        2.  When *parent* is None the directory is its own parent (the
        root).  Symlinks store *target* and report its length as size.

        Returns:
            The slot index of the new descriptor.

        Raises:
            NoFreeDescriptorsError: If every slot is occupied.

        """
        for slot, current in enumerate(self._slots):
            if current is TOMBSTONE:
                break
        else:
            msg = f"No free descriptors (all {self.capacity} in use)"
            raise NoFreeDescriptorsError(msg)

        descriptor = Descriptor(id=next(self._ids), file_type=file_type)
        if file_type is FileType.DIRECTORY:
            descriptor.link_count = 2
            descriptor.entries = [
                DirectoryEntry(SELF_NAME, slot),
                DirectoryEntry(PARENT_NAME, slot if parent is None else parent),
            ]
        elif file_type is FileType.SYMLINK:
            descriptor.target = target
            descriptor.size = len(target)
        self._slots[slot] = descriptor
        return slot

    def reclaim(self, slot: int) -> list[int]:
        """Free the descriptor's blocks and tombstone its slot.

        Returns:
            The block indices that were returned to the store.

        """
        descriptor = self.get(slot)
        freed = [index for index in descriptor.block_map if index is not None]
        for index in freed:
            self._blocks.free(index)
        descriptor.block_map.clear()
        self._slots[slot] = TOMBSTONE
        return freed

    def release_if_unreferenced(self, slot: int) -> bool:
        """Reclaim *slot* if no name and no open handle refers to it.

        Returns:
            True if the descriptor was reclaimed.

        """
        descriptor = self.get(slot)
        if descriptor.link_count > 0 or descriptor.open_count > 0:
            return False
        self.reclaim(slot)
        return True
