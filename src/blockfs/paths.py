"""Path resolution — turning path strings into directory locations.

``/foo/bar/baz.txt`` is walked component by component: starting at the
root (absolute paths) or at the current working directory (relative
paths), each name is looked up in the current directory's entries.
Every component except the last must lead to a directory; the last one
is returned *unresolved* as a ``Location`` (containing directory plus
leaf name), because what happens to it is the caller's business —
``create`` wants it absent, ``open`` wants it present, ``unlink``
removes it.

Symbolic links:

- An intermediate component that is a symlink is always followed — a
  relative target is resolved against the directory holding the link,
  an absolute target restarts at the root.
- The final component is only followed on request
  (``resolve_symlink(..., follow_last=True)``).  This is the split
  between ``stat``/``open``/``cd`` (follow) and ``lstat``/``unlink``/
  ``symlink`` (don't follow).

Every hop costs one unit of the depth budget; exceeding it raises
``SymlinkLoopError`` — the ELOOP guard against ``a -> b -> a``.
"""

from collections import deque
from dataclasses import dataclass

from blockfs.descriptors import (
    PARENT_NAME,
    ROOT_SLOT,
    SELF_NAME,
    DescriptorTable,
    FileType,
)
from blockfs.errors import NotADirectoryFsError, NotFoundError, SymlinkLoopError


@dataclass(frozen=True)
class Location:
    """Where a path's final component lives: a directory slot and a name."""

    parent: int
    name: str


def split_path(path: str) -> list[str]:
    """Split *path* into its non-empty components.

    Examples::

        "/foo/bar/"  → ["foo", "bar"]
        "a//b"       → ["a", "b"]
        "/"          → []

    """
    return [part for part in path.split("/") if part]


class PathResolver:
    """Resolve path strings against a descriptor table."""

    def __init__(self, descriptors: DescriptorTable, *, max_depth: int) -> None:
        """Create a resolver over *descriptors*.

        Args:
            descriptors: The table holding the directory tree.
            max_depth: Maximum number of symlink hops per resolution.

        """
        self._descriptors = descriptors
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        """Return the symlink hop limit."""
        return self._max_depth

    def resolve(self, path: str, cwd: int) -> Location:
        """Walk *path* up to (not including) its final component.

        A path with no components (``"/"`` or ``""``) resolves to the
        "." entry of its starting directory.

        Raises:
            NotFoundError: If an intermediate component does not exist.
            NotADirectoryFsError: If an intermediate component is not a
                directory.
            SymlinkLoopError: If intermediate symlinks nest too deeply.

        """
        location, _ = self._walk(path, cwd, depth=0)
        return location

    def resolve_symlink(self, path: str, cwd: int, *, follow_last: bool = True) -> Location:
        """Resolve *path*, following a symlink in the final position.

        While the leaf exists and is a symlink, its target replaces the
        leaf.  Resolution stops at the first leaf that is missing or is
        not a symlink, or immediately when *follow_last* is False.

        Raises:
            SymlinkLoopError: If more than ``max_depth`` links are followed.

        """
        location, depth = self._walk(path, cwd, depth=0)
        while follow_last:
            slot = self.find(location)
            if slot is None:
                break
            link = self._descriptors.get(slot)
            if link.file_type is not FileType.SYMLINK:
                break
            depth = self._hop(depth, path)
            location, depth = self._walk(link.target, location.parent, depth=depth)
        return location

    def find(self, location: Location) -> int | None:
        """Return the slot the location's name refers to, or None."""
        directory = self._descriptors.get(location.parent)
        position = directory.find_entry(location.name)
        if position is None:
            return None
        return directory.entries[position].slot

    def lookup(self, location: Location) -> int:
        """Return the slot the location's name refers to.

        Raises:
            NotFoundError: If the name is not in the directory.

        """
        slot = self.find(location)
        if slot is None:
            msg = f"Path not found: {location.name}"
            raise NotFoundError(msg)
        return slot

    def path_of(self, slot: int) -> str:
        """Rebuild the absolute path of directory *slot* by walking "..".

        A directory that has been removed from the tree resolves to the
        path of whatever part of the tree it can still reach.
        """
        names: list[str] = []
        current = slot
        while current != ROOT_SLOT:
            directory = self._descriptors.get(current)
            parent_slot = directory.parent_slot
            parent = self._descriptors.get(parent_slot)
            name = next(
                (
                    e.name
                    for e in parent.entries
                    if e.slot == current and e.name not in (SELF_NAME, PARENT_NAME)
                ),
                None,
            )
            if name is not None:
                names.append(name)
            if parent_slot == current:
                break
            current = parent_slot
        return "/" + "/".join(reversed(names))

    def _walk(self, path: str, cwd: int, *, depth: int) -> tuple[Location, int]:
        """Walk intermediate components, following symlinks among them."""
        current = ROOT_SLOT if path.startswith("/") else cwd
        parts = deque(split_path(path))
        if not parts:
            return Location(current, SELF_NAME), depth

        while len(parts) > 1:
            name = parts.popleft()
            slot = self.lookup(Location(current, name))
            descriptor = self._descriptors.get(slot)
            if descriptor.file_type is FileType.SYMLINK:
                depth = self._hop(depth, path)
                if descriptor.target.startswith("/"):
                    current = ROOT_SLOT
                # The link's components go in front of what is left.
                parts.extendleft(reversed(split_path(descriptor.target)))
                continue
            if descriptor.file_type is not FileType.DIRECTORY:
                msg = f"Not a directory: {name}"
                raise NotADirectoryFsError(msg)
            current = slot

        return Location(current, parts[0]), depth

    def _hop(self, depth: int, path: str) -> int:
        depth += 1
        if depth > self._max_depth:
            msg = f"Too many levels of symbolic links: {path}"
            raise SymlinkLoopError(msg)
        return depth
