"""Error taxonomy for the file system.

Every failure the engine can report is an ``FsError``.  Each subclass
names one *kind* of failure (``ErrorKind``), mirroring the ``errno``
values a Unix kernel would hand back:

- ``NotFoundError``           → ENOENT
- ``AlreadyExistsError``      → EEXIST
- ``NotADirectoryFsError``    → ENOTDIR
- ``IsADirectoryFsError``     → EISDIR
- ``DirectoryNotEmptyError``  → ENOTEMPTY
- ``BadHandleError``          → EBADF
- ``SymlinkLoopError``        → ELOOP
- ...and so on.

Where Python already has a builtin exception for the same condition,
the subclass inherits from it too, so callers may write either
``except NotFoundError`` or ``except FileNotFoundError``.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """The distinct kinds of file system failure."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    NOT_A_DIRECTORY = "not_a_directory"
    NOT_A_REGULAR_FILE = "not_a_regular_file"
    NOT_EMPTY = "not_empty"
    NO_FREE_DESCRIPTORS = "no_free_descriptors"
    NO_FREE_BLOCKS = "no_free_blocks"
    INVALID_DESCRIPTOR = "invalid_descriptor"
    INVALID_ARGUMENT = "invalid_argument"
    TOO_MANY_SYMLINK_LEVELS = "too_many_symlink_levels"
    IS_A_DIRECTORY = "is_a_directory"


class FsError(Exception):
    """Raise when a file system operation fails."""

    kind: ErrorKind


class NotFoundError(FsError, FileNotFoundError):
    """Raise when a path component does not exist."""

    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(FsError, FileExistsError):
    """Raise when the target name is already taken."""

    kind = ErrorKind.ALREADY_EXISTS


class NotADirectoryFsError(FsError, NotADirectoryError):
    """Raise when a directory was required but something else was found."""

    kind = ErrorKind.NOT_A_DIRECTORY


class NotARegularFileError(FsError):
    """Raise when a regular file was required (truncate, write)."""

    kind = ErrorKind.NOT_A_REGULAR_FILE


class DirectoryNotEmptyError(FsError):
    """Raise when removing a directory that still has entries."""

    kind = ErrorKind.NOT_EMPTY


class NoFreeDescriptorsError(FsError):
    """Raise when every descriptor slot is in use."""

    kind = ErrorKind.NO_FREE_DESCRIPTORS


class NoFreeBlocksError(FsError):
    """Raise when the block store has no free blocks left."""

    kind = ErrorKind.NO_FREE_BLOCKS


class BadHandleError(FsError):
    """Raise when an open-file handle is not live."""

    kind = ErrorKind.INVALID_DESCRIPTOR


class InvalidArgumentError(FsError, ValueError):
    """Raise for negative sizes, offsets, counts, and similar bad input."""

    kind = ErrorKind.INVALID_ARGUMENT


class SymlinkLoopError(FsError):
    """Raise when a symlink chain is longer than the resolution limit."""

    kind = ErrorKind.TOO_MANY_SYMLINK_LEVELS


class IsADirectoryFsError(FsError, IsADirectoryError):
    """Raise when an operation that excludes directories is given one."""

    kind = ErrorKind.IS_A_DIRECTORY
