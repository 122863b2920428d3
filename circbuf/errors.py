"""Error kinds raised by ring buffer operations."""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable failure category carried by every RingBufferError."""

    INVALID_ARGUMENT = "invalid_argument"
    OUT_OF_MEMORY = "out_of_memory"
    BUFFER_FULL = "buffer_full"
    BUFFER_EMPTY = "buffer_empty"


class RingBufferError(Exception):
    """Base class for ring buffer failures."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        kind = self.kind.value if self.kind is not None else None
        return f"{type(self).__name__}(kind={kind}, message={self.message!r})"


class InvalidArgumentError(RingBufferError, ValueError):
    """A parameter is missing, out of range, or the buffer was deinitialized."""

    kind = ErrorKind.INVALID_ARGUMENT


class OutOfMemoryError(RingBufferError, MemoryError):
    """Backing storage could not be allocated."""

    kind = ErrorKind.OUT_OF_MEMORY


class BufferFullError(RingBufferError):
    """Push attempted on a full buffer."""

    kind = ErrorKind.BUFFER_FULL


class BufferEmptyError(RingBufferError):
    """Pop attempted on an empty buffer."""

    kind = ErrorKind.BUFFER_EMPTY
