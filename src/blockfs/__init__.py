"""blockfs — an in-memory Unix-style file system.

Re-exports public symbols so callers can write::

    from blockfs import FileSystemEngine, FsConfig
"""

from blockfs.blocks import BlockStore
from blockfs.config import MAX_SYMLINK_DEPTH, FsConfig
from blockfs.descriptors import (
    DescriptorTable,
    DirectoryEntry,
    EntryInfo,
    FileType,
    StatInfo,
)
from blockfs.engine import FileSystemEngine
from blockfs.errors import (
    AlreadyExistsError,
    BadHandleError,
    DirectoryNotEmptyError,
    ErrorKind,
    FsError,
    InvalidArgumentError,
    IsADirectoryFsError,
    NoFreeBlocksError,
    NoFreeDescriptorsError,
    NotADirectoryFsError,
    NotARegularFileError,
    NotFoundError,
    SymlinkLoopError,
)
from blockfs.logging import LogEntry, Logger, LogLevel
from blockfs.openfiles import OpenFile, OpenFileTable
from blockfs.paths import Location, PathResolver

__all__ = [
    "MAX_SYMLINK_DEPTH",
    "AlreadyExistsError",
    "BadHandleError",
    "BlockStore",
    "DescriptorTable",
    "DirectoryEntry",
    "DirectoryNotEmptyError",
    "EntryInfo",
    "ErrorKind",
    "FileSystemEngine",
    "FileType",
    "FsConfig",
    "FsError",
    "InvalidArgumentError",
    "IsADirectoryFsError",
    "Location",
    "LogEntry",
    "LogLevel",
    "Logger",
    "NoFreeBlocksError",
    "NoFreeDescriptorsError",
    "NotADirectoryFsError",
    "NotARegularFileError",
    "NotFoundError",
    "OpenFile",
    "OpenFileTable",
    "PathResolver",
    "StatInfo",
    "SymlinkLoopError",
]
