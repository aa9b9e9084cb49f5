"""Constructor-time configuration for a file system engine.

Block geometry is fixed for the lifetime of an engine; only the number
of descriptor slots changes at runtime (via ``mkfs``).
"""

from dataclasses import dataclass

from blockfs.errors import InvalidArgumentError

DEFAULT_BLOCK_SIZE = 512
DEFAULT_BLOCK_COUNT = 1000
DEFAULT_DESCRIPTOR_COUNT = 64

MAX_SYMLINK_DEPTH = 10
"""Default number of symlink hops allowed while resolving one path."""

DEFAULT_LOG_CAPACITY = 10_000


@dataclass(frozen=True)
class FsConfig:
    """Geometry and limits for a ``FileSystemEngine``.

    Attributes:
        block_size: Bytes per block.
        block_count: Number of blocks in the store.
        descriptor_count: Descriptor slots for the initial format.
        max_symlink_depth: Symlink hops allowed per resolution.
        log_capacity: Entries kept by the default logger (None keeps all).

    """

    block_size: int = DEFAULT_BLOCK_SIZE
    block_count: int = DEFAULT_BLOCK_COUNT
    descriptor_count: int = DEFAULT_DESCRIPTOR_COUNT
    max_symlink_depth: int = MAX_SYMLINK_DEPTH
    log_capacity: int | None = DEFAULT_LOG_CAPACITY

    def validate(self) -> None:
        """Check every field is in range.

        Raises:
            InvalidArgumentError: If the block geometry or log capacity is
                not positive, or a count or depth is negative.

        """
        for name in ("block_size", "block_count"):
            value = getattr(self, name)
            if value < 1:
                msg = f"{name} must be positive, got {value}"
                raise InvalidArgumentError(msg)
        if self.descriptor_count < 0:
            msg = f"descriptor_count must not be negative, got {self.descriptor_count}"
            raise InvalidArgumentError(msg)
        if self.max_symlink_depth < 0:
            msg = f"max_symlink_depth must not be negative, got {self.max_symlink_depth}"
            raise InvalidArgumentError(msg)
        if self.log_capacity is not None and self.log_capacity < 1:
            msg = f"log_capacity must be positive, got {self.log_capacity}"
            raise InvalidArgumentError(msg)
