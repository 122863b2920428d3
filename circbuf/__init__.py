"""Fixed-capacity FIFO ring buffer."""
from .config import BufferConfig
from .errors import (
    BufferEmptyError,
    BufferFullError,
    ErrorKind,
    InvalidArgumentError,
    OutOfMemoryError,
    RingBufferError,
)
from .log_config import configure_logging
from .metrics.prometheus import BufferMetrics
from .ring_buffer import RingBuffer

__all__ = [
    "BufferConfig",
    "BufferEmptyError",
    "BufferFullError",
    "BufferMetrics",
    "ErrorKind",
    "InvalidArgumentError",
    "OutOfMemoryError",
    "RingBuffer",
    "RingBufferError",
    "configure_logging",
]

__version__ = "0.1.0"
