"""Open-file table — handles with independent cursors.

Programs interact with file contents through **handles** (small
integers).  The workflow is:

1. ``open(slot)`` → the table assigns the lowest free handle and bumps
   the descriptor's open count.
2. ``read`` / ``write`` → operate at the handle's cursor, then advance it.
3. ``seek(handle, offset)`` → repositions the cursor.  Seeking past the
   end of the file is legal; a later write extends the file.
4. ``close(handle)`` → releases the handle for reuse and drops the open
   count.  If the file has already been unlinked everywhere, this is the
   moment its descriptor and blocks are reclaimed.

A handle is a lease on a descriptor, separate from its link count:
unlinking a file removes a *name*, closing removes a *lease*, and the
descriptor lives until both are gone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from blockfs.errors import BadHandleError, InvalidArgumentError

if TYPE_CHECKING:
    from blockfs.descriptors import DescriptorTable


@dataclass
class OpenFile:
    """Track an open file's descriptor slot and current cursor.

    Not frozen — ``cursor`` must be mutable so reads and writes can
    advance the position.
    """

    slot: int
    cursor: int = 0


class _Handle(Enum):
    """Marker for a closed handle."""

    CLOSED = "closed"


CLOSED = _Handle.CLOSED


class OpenFileTable:
    """Slot-indexed table mapping handles to open files.

    Allocation picks the lowest closed handle, otherwise appends a new
    one, mimicking Unix fd numbering.
    """

    def __init__(self, descriptors: DescriptorTable) -> None:
        """Create an empty table over *descriptors*."""
        self._descriptors = descriptors
        self._handles: list[OpenFile | _Handle] = []

    def open(self, slot: int) -> int:
        """Assign the lowest free handle to descriptor *slot*.

        Args:
            slot: The descriptor slot being opened.

        Returns:
            The newly assigned handle.

        """
        self._descriptors.get(slot).open_count += 1
        entry = OpenFile(slot=slot)
        for handle, current in enumerate(self._handles):
            if current is CLOSED:
                self._handles[handle] = entry
                return handle
        self._handles.append(entry)
        return len(self._handles) - 1

    def get(self, handle: int) -> OpenFile:
        """Return the open file behind *handle*.

        Raises:
            BadHandleError: If the handle is not open.

        """
        if not 0 <= handle < len(self._handles):
            msg = f"Bad file descriptor: {handle}"
            raise BadHandleError(msg)
        entry = self._handles[handle]
        if entry is CLOSED:
            msg = f"Bad file descriptor: {handle}"
            raise BadHandleError(msg)
        return entry

    def close(self, handle: int) -> bool:
        """Close *handle*, releasing it for reuse.

        Returns:
            True if closing the last lease reclaimed the descriptor.

        Raises:
            BadHandleError: If the handle is not open.

        """
        entry = self.get(handle)
        self._handles[handle] = CLOSED
        self._descriptors.get(entry.slot).open_count -= 1
        return self._descriptors.release_if_unreferenced(entry.slot)

    def seek(self, handle: int, offset: int) -> None:
        """Move the cursor of *handle* to absolute *offset*.

        Raises:
            BadHandleError: If the handle is not open.
            InvalidArgumentError: If *offset* is negative.

        """
        entry = self.get(handle)
        if offset < 0:
            msg = f"Invalid offset: {offset}"
            raise InvalidArgumentError(msg)
        entry.cursor = offset

    def handles(self) -> dict[int, OpenFile]:
        """Return a snapshot of all open handles.

        Returns:
            A dict mapping handles to open files.

        """
        return {
            handle: entry
            for handle, entry in enumerate(self._handles)
            if isinstance(entry, OpenFile)
        }
