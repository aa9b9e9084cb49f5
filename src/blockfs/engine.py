"""The file system engine — every public operation in one place.

The engine owns the whole mutable state of one file system:

- a ``BlockStore`` (the data blocks),
- a ``DescriptorTable`` (the inodes),
- a ``PathResolver`` over that table,
- an ``OpenFileTable`` (handles and cursors),
- the current working directory (a descriptor slot).

Every operation follows the same shape: resolve the path to a
``Location`` (following a final symlink or not, depending on the
operation), look up or create the descriptor, then touch blocks or
handles.  Failures are detected before anything is mutated wherever
possible, so a failed call leaves the file system as it found it.  The
one exception is ``write``: if the store runs out of blocks part-way,
the bytes already copied stay written.

Each call runs under a per-engine lock and reports to the engine's
``Logger`` — INFO for successes, ERROR for failures, DEBUG for block
bookkeeping.
"""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Concatenate

from blockfs.blocks import BlockStore
from blockfs.config import FsConfig
from blockfs.descriptors import (
    PARENT_NAME,
    SELF_NAME,
    DescriptorTable,
    DirectoryEntry,
    EntryInfo,
    FileType,
    StatInfo,
)
from blockfs.errors import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    FsError,
    InvalidArgumentError,
    IsADirectoryFsError,
    NotADirectoryFsError,
    NotARegularFileError,
    NotFoundError,
)
from blockfs.logging import Logger, LogLevel
from blockfs.openfiles import OpenFile, OpenFileTable
from blockfs.paths import Location, PathResolver
from blockfs.transfer import read_range, resize, write_range

if TYPE_CHECKING:
    from blockfs.descriptors import Descriptor

LOG_SOURCE = "fs"


def _operation[**P, R](
    method: Callable[Concatenate[FileSystemEngine, P], R],
) -> Callable[Concatenate[FileSystemEngine, P], R]:
    """Run *method* under the engine lock and log any failure it raises."""

    @functools.wraps(method)
    def wrapper(self: FileSystemEngine, *args: P.args, **kwargs: P.kwargs) -> R:
        with self._lock:
            try:
                return method(self, *args, **kwargs)
            except FsError as e:
                self._log(LogLevel.ERROR, f"{method.__name__}: {e}")
                raise

    return wrapper


class FileSystemEngine:
    """An in-memory Unix-style file system.

    The constructor formats the file system with
    ``config.descriptor_count`` slots; call ``mkfs`` to reformat.
    Paths may be absolute or relative to the current directory.
    """

    def __init__(self, *, config: FsConfig | None = None, logger: Logger | None = None) -> None:
        """Create and format a file system.

        Args:
            config: Block geometry and limits (defaults to ``FsConfig()``).
            logger: Sink for status messages (a fresh one holding
                ``config.log_capacity`` entries if omitted).

        Raises:
            InvalidArgumentError: If the configuration is out of range.

        """
        self._config = config if config is not None else FsConfig()
        self._config.validate()
        if logger is None:
            logger = Logger(capacity=self._config.log_capacity)
        self._logger = logger
        self._lock = threading.RLock()
        self._format(self._config.descriptor_count)

    # -- State -----------------------------------------------------------------

    @property
    def config(self) -> FsConfig:
        """Return the engine configuration."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the log sink."""
        return self._logger

    @property
    def block_store(self) -> BlockStore:
        """Return the block store of the current format."""
        return self._blocks

    @property
    def descriptors(self) -> DescriptorTable:
        """Return the descriptor table of the current format."""
        return self._descriptors

    @property
    def cwd(self) -> int:
        """Return the descriptor slot of the current working directory."""
        return self._cwd

    def _format(self, descriptor_count: int) -> None:
        self._blocks = BlockStore(
            block_size=self._config.block_size,
            block_count=self._config.block_count,
        )
        # Root takes slot 0 on top of the requested descriptors.
        self._descriptors = DescriptorTable(descriptor_count + 1, blocks=self._blocks)
        self._resolver = PathResolver(self._descriptors, max_depth=self._config.max_symlink_depth)
        self._open_files = OpenFileTable(self._descriptors)
        self._cwd = self._descriptors.allocate(FileType.DIRECTORY)

    # -- Formatting and directories -------------------------------------------

    @_operation
    def mkfs(self, descriptor_count: int) -> None:
        """Discard everything and format with *descriptor_count* slots.

        The block store is reset, all handles are dropped, and a fresh
        root directory becomes the current directory.  The root occupies
        slot 0 on top of the *descriptor_count* slots left for files,
        directories, and links.

        Raises:
            InvalidArgumentError: If *descriptor_count* is negative.

        """
        if descriptor_count < 0:
            msg = f"Descriptor count must not be negative, got {descriptor_count}"
            raise InvalidArgumentError(msg)
        self._format(descriptor_count)
        self._info(
            f"mkfs: {descriptor_count} descriptors, "
            f"{self._blocks.block_count} blocks of {self._blocks.block_size} bytes"
        )

    @_operation
    def mkdir(self, path: str) -> None:
        """Create an empty directory at *path*.

        The new directory gets "." and ".." entries and a link count of
        2; its parent's link count grows by one for the new "..".

        Raises:
            AlreadyExistsError: If the name is taken (even by a symlink).
            NotFoundError: If a parent component is missing.
            NoFreeDescriptorsError: If the descriptor table is full.

        """
        location = self._resolver.resolve(path, self._cwd)
        self._require_absent(location, path)
        slot = self._descriptors.allocate(FileType.DIRECTORY, parent=location.parent)
        parent = self._descriptors.get(location.parent)
        parent.entries.append(DirectoryEntry(location.name, slot))
        parent.link_count += 1
        self._info(f"mkdir {path}: {self._describe(slot)}")

    @_operation
    def rmdir(self, path: str) -> None:
        """Remove the empty directory at *path*.

        The final component is not followed, so a symlink to a
        directory is rejected.  If the current directory is removed,
        the working directory moves to its parent.

        Raises:
            InvalidArgumentError: For "/", "." or "..".
            NotFoundError: If the directory does not exist.
            NotADirectoryFsError: If *path* is not a directory.
            DirectoryNotEmptyError: If it has entries besides "." and "..".

        """
        location = self._resolver.resolve(path, self._cwd)
        if location.name in (SELF_NAME, PARENT_NAME):
            msg = f"Cannot remove {path}"
            raise InvalidArgumentError(msg)
        slot = self._existing(location, path)
        directory = self._descriptors.get(slot)
        if directory.file_type is not FileType.DIRECTORY:
            msg = f"Not a directory: {path}"
            raise NotADirectoryFsError(msg)
        if len(directory.entries) > 2:  # noqa: PLR2004
            msg = f"Directory not empty: {path}"
            raise DirectoryNotEmptyError(msg)

        self._remove_entry(location)
        self._descriptors.get(location.parent).link_count -= 1
        directory.link_count = 0
        if self._cwd == slot:
            self._cwd = location.parent
        reclaimed = self._descriptors.release_if_unreferenced(slot)
        self._info(f"rmdir {path}" + ("" if reclaimed else " (still open)"))

    @_operation
    def cd(self, path: str) -> None:
        """Change the current working directory, following symlinks.

        Raises:
            NotFoundError: If *path* does not exist.
            NotADirectoryFsError: If *path* is not a directory.

        """
        location = self._resolver.resolve_symlink(path, self._cwd)
        slot = self._existing(location, path)
        if self._descriptors.get(slot).file_type is not FileType.DIRECTORY:
            msg = f"Not a directory: {path}"
            raise NotADirectoryFsError(msg)
        self._cwd = slot
        self._info(f"cd {path}: now in {self._resolver.path_of(slot)}")

    @_operation
    def pwd(self) -> str:
        """Return the absolute path of the current working directory."""
        return self._resolver.path_of(self._cwd)

    @_operation
    def ls(self, path: str | None = None) -> list[EntryInfo]:
        """List a directory's entries in order, "." and ".." included.

        Args:
            path: Directory to list (symlinks followed); the current
                directory when omitted.

        Raises:
            NotFoundError: If *path* does not exist.
            NotADirectoryFsError: If *path* is not a directory.

        """
        listing = self._listing(path)
        self._info(f"ls {path if path is not None else self._resolver.path_of(self._cwd)}")
        for info in listing:
            self._info(f"  {info}")
        return listing

    @_operation
    def listdir(self, path: str | None = None) -> list[EntryInfo]:
        """Return the same entries as ``ls`` without writing them to the log."""
        return self._listing(path)

    def _listing(self, path: str | None) -> list[EntryInfo]:
        if path is None:
            slot = self._cwd
        else:
            slot = self._existing(self._resolver.resolve_symlink(path, self._cwd), path)
        directory = self._descriptors.get(slot)
        if directory.file_type is not FileType.DIRECTORY:
            msg = f"Not a directory: {path}"
            raise NotADirectoryFsError(msg)

        listing: list[EntryInfo] = []
        for entry in directory.entries:
            child = self._descriptors.get(entry.slot)
            listing.append(
                EntryInfo(
                    name=entry.name,
                    file_type=child.file_type,
                    id=child.id,
                    target=child.target if child.file_type is FileType.SYMLINK else None,
                )
            )
        return listing

    # -- Files and links ---------------------------------------------------------

    @_operation
    def create(self, path: str) -> None:
        """Create an empty regular file.

        A final symlink is followed, so creating through a dangling
        link creates the file it points to.

        Raises:
            AlreadyExistsError: If the (resolved) name already exists.
            NotFoundError: If a parent component is missing.
            NoFreeDescriptorsError: If the descriptor table is full.

        """
        location = self._resolver.resolve_symlink(path, self._cwd)
        self._require_absent(location, path)
        slot = self._descriptors.allocate(FileType.FILE)
        self._descriptors.get(location.parent).entries.append(DirectoryEntry(location.name, slot))
        self._info(f"create {path}: {self._describe(slot)}")

    @_operation
    def symlink(self, target: str, path: str) -> None:
        """Create a symbolic link at *path* pointing to *target*.

        The target does not need to exist — dangling symlinks are
        valid.  Relative targets are resolved against the directory
        that holds the link, at lookup time.

        Raises:
            InvalidArgumentError: If *target* is empty.
            AlreadyExistsError: If *path* already exists.
            NoFreeDescriptorsError: If the descriptor table is full.

        """
        if not target:
            msg = "Symlink target must not be empty"
            raise InvalidArgumentError(msg)
        location = self._resolver.resolve(path, self._cwd)
        self._require_absent(location, path)
        slot = self._descriptors.allocate(FileType.SYMLINK, target=target)
        self._descriptors.get(location.parent).entries.append(DirectoryEntry(location.name, slot))
        self._info(f"symlink {path} -> {target}: {self._describe(slot)}")

    @_operation
    def readlink(self, path: str) -> str:
        """Return the target stored in the symlink at *path*.

        Raises:
            NotFoundError: If *path* does not exist.
            InvalidArgumentError: If *path* is not a symlink.

        """
        slot = self._existing(self._resolver.resolve(path, self._cwd), path)
        link = self._descriptors.get(slot)
        if link.file_type is not FileType.SYMLINK:
            msg = f"Not a symlink: {path}"
            raise InvalidArgumentError(msg)
        return link.target

    @_operation
    def link(self, old_path: str, new_path: str) -> None:
        """Create a hard link — a second name for an existing object.

        Directories cannot be hard-linked because that would create
        cycles in the tree.  A final symlink in *old_path* is linked
        itself, not its target.

        Raises:
            NotFoundError: If *old_path* does not exist.
            IsADirectoryFsError: If *old_path* is a directory.
            AlreadyExistsError: If *new_path* already exists.

        """
        slot = self._existing(self._resolver.resolve(old_path, self._cwd), old_path)
        descriptor = self._descriptors.get(slot)
        if descriptor.file_type is FileType.DIRECTORY:
            msg = f"Cannot hard-link a directory: {old_path}"
            raise IsADirectoryFsError(msg)
        location = self._resolver.resolve(new_path, self._cwd)
        self._require_absent(location, new_path)
        self._descriptors.get(location.parent).entries.append(DirectoryEntry(location.name, slot))
        descriptor.link_count += 1
        self._info(f"link {old_path} -> {new_path}: {self._describe(slot)}")

    @_operation
    def unlink(self, path: str) -> None:
        """Remove a name.  The object goes away with its last name and handle.

        The final component is not followed: unlinking a symlink
        removes the link, not its target.  While the file is still
        open, its descriptor and blocks survive until the last close.

        Raises:
            NotFoundError: If *path* does not exist.
            IsADirectoryFsError: If *path* is a directory (use rmdir).

        """
        location = self._resolver.resolve(path, self._cwd)
        slot = self._existing(location, path)
        descriptor = self._descriptors.get(slot)
        if descriptor.file_type is FileType.DIRECTORY:
            msg = f"Cannot unlink a directory: {path}"
            raise IsADirectoryFsError(msg)
        self._remove_entry(location)
        descriptor.link_count -= 1
        summary = self._describe(slot)
        if self._descriptors.release_if_unreferenced(slot):
            summary = "descriptor reclaimed"
        self._info(f"unlink {path}: {summary}")

    @_operation
    def truncate(self, path: str, size: int) -> None:
        """Set the size of a regular file.

        Shrinking frees the blocks past the new end; growing leaves the
        new range as holes that read as zeros.

        Raises:
            InvalidArgumentError: If *size* is negative.
            NotFoundError: If *path* does not exist.
            NotARegularFileError: If *path* is not a regular file.

        """
        if size < 0:
            msg = f"Invalid size: {size}"
            raise InvalidArgumentError(msg)
        slot = self._existing(self._resolver.resolve_symlink(path, self._cwd), path)
        descriptor = self._descriptors.get(slot)
        if descriptor.file_type is not FileType.FILE:
            msg = f"Not a regular file: {path}"
            raise NotARegularFileError(msg)
        freed = resize(descriptor, self._blocks, size)
        if freed:
            self._log(LogLevel.DEBUG, f"truncate {path}: freed blocks {freed}")
        self._info(f"truncate {path}: {self._describe(slot)}")

    @_operation
    def stat(self, path: str) -> StatInfo:
        """Return metadata for *path*, following a final symlink.

        Raises:
            NotFoundError: If the path does not exist.

        """
        slot = self._existing(self._resolver.resolve_symlink(path, self._cwd), path)
        info = self._descriptors.get(slot).to_info()
        self._info(f"stat {path}: {self._describe(slot)}")
        return info

    @_operation
    def lstat(self, path: str) -> StatInfo:
        """Return metadata without following the final symlink.

        Raises:
            NotFoundError: If the path does not exist.

        """
        slot = self._existing(self._resolver.resolve(path, self._cwd), path)
        return self._descriptors.get(slot).to_info()

    @_operation
    def exists(self, path: str) -> bool:
        """Check whether *path* (symlinks followed) names an object."""
        try:
            location = self._resolver.resolve_symlink(path, self._cwd)
        except FsError:
            return False
        return self._resolver.find(location) is not None

    # -- Open files --------------------------------------------------------------

    @_operation
    def open(self, path: str) -> int:
        """Open *path* (symlinks followed) and return a new handle.

        The handle's cursor starts at 0.

        Raises:
            NotFoundError: If the path does not exist.

        """
        slot = self._existing(self._resolver.resolve_symlink(path, self._cwd), path)
        handle = self._open_files.open(slot)
        self._info(f"open {path}: handle {handle}")
        return handle

    @_operation
    def close(self, handle: int) -> None:
        """Close *handle*; reclaims an already-unlinked file on last close.

        Raises:
            BadHandleError: If the handle is not open.

        """
        reclaimed = self._open_files.close(handle)
        self._info(f"close {handle}" + (": descriptor reclaimed" if reclaimed else ""))

    @_operation
    def seek(self, handle: int, offset: int) -> None:
        """Move the cursor of *handle* to *offset* (past the end is fine).

        Raises:
            BadHandleError: If the handle is not open.
            InvalidArgumentError: If *offset* is negative.

        """
        self._open_files.seek(handle, offset)
        self._info(f"seek {handle}: offset {offset}")

    @_operation
    def read(self, handle: int, count: int) -> bytes:
        """Read up to *count* bytes at the cursor and advance it.

        Reading stops at the end of the file; holes read as zeros.

        Raises:
            BadHandleError: If the handle is not open.
            InvalidArgumentError: If *count* is negative.

        """
        entry = self._open_files.get(handle)
        if count < 0:
            msg = f"Invalid count: {count}"
            raise InvalidArgumentError(msg)
        data = read_range(self._descriptors.get(entry.slot), self._blocks, entry.cursor, count)
        entry.cursor += len(data)
        self._info(f"read {handle}: {len(data)} bytes {data!r}")
        return data

    @_operation
    def write(self, handle: int, data: bytes) -> int:
        """Write *data* at the cursor, extend the file if needed, advance the cursor.

        Blocks are allocated only for the range actually written.  An
        empty write changes nothing.

        Returns:
            The number of bytes written.

        Raises:
            BadHandleError: If the handle is not open.
            NotARegularFileError: If the handle refers to a directory.
            NoFreeBlocksError: If the store runs out of blocks (bytes
                copied before that point stay written).

        """
        entry = self._open_files.get(handle)
        descriptor = self._descriptors.get(entry.slot)
        if descriptor.file_type is not FileType.FILE:
            msg = f"Not a regular file: handle {handle}"
            raise NotARegularFileError(msg)
        if not data:
            return 0
        allocated = write_range(descriptor, self._blocks, entry.cursor, data)
        entry.cursor += len(data)
        if allocated:
            self._log(LogLevel.DEBUG, f"write {handle}: allocated blocks {allocated}")
        self._info(f"write {handle}: {len(data)} bytes, {self._describe(entry.slot)}")
        return len(data)

    @_operation
    def handles(self) -> dict[int, OpenFile]:
        """Return a snapshot of the open handles."""
        return self._open_files.handles()

    # -- Helpers -------------------------------------------------------------------

    def _log(self, level: LogLevel, message: str) -> None:
        self._logger.log(level, message, source=LOG_SOURCE)

    def _info(self, message: str) -> None:
        self._log(LogLevel.INFO, message)

    def _describe(self, slot: int) -> str:
        descriptor: Descriptor = self._descriptors.get(slot)
        return (
            f"id={descriptor.id} type={descriptor.file_type} links={descriptor.link_count} "
            f"size={descriptor.size} blocks={descriptor.block_count}"
        )

    def _existing(self, location: Location, path: str) -> int:
        slot = self._resolver.find(location)
        if slot is None:
            msg = f"Path not found: {path}"
            raise NotFoundError(msg)
        return slot

    def _require_absent(self, location: Location, path: str) -> None:
        if self._resolver.find(location) is not None:
            msg = f"Already exists: {path}"
            raise AlreadyExistsError(msg)

    def _remove_entry(self, location: Location) -> None:
        parent = self._descriptors.get(location.parent)
        position = parent.find_entry(location.name)
        if position is None:  # pragma: no cover
            msg = f"Path not found: {location.name}"
            raise NotFoundError(msg)
        del parent.entries[position]
