"""Fixed-capacity FIFO ring buffer with bulk transfer and peeking."""
from typing import Any, Generic, Iterator, List, MutableSequence, Optional, Sequence, TypeVar

import structlog

from .errors import BufferEmptyError, BufferFullError, InvalidArgumentError, OutOfMemoryError
from .log_config import configure_logging
from .metrics.prometheus import get_default_metrics

log = structlog.get_logger()

T = TypeVar('T')


def _check_index(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")


class RingBuffer(Generic[T]):
    """Bounded FIFO queue over a fixed-size backing list.

    Elements are stored by reference and never inspected. The live range
    runs from ``tail`` (oldest) to ``head`` (newest) with wraparound, so the
    element at logical position ``i`` lives at ``(tail + i) % maxlen``.
    Pushing into a full buffer fails instead of overwriting the oldest item.

    Not thread-safe; callers sharing an instance must hold their own lock
    around each operation.
    """

    def __init__(
        self,
        capacity: int,
        *,
        name: str = "ringbuf",
        logger: Optional[Any] = None,
        metrics: Optional[Any] = None
    ):
        """Allocate storage for ``capacity`` elements.

        Args:
            capacity: Maximum number of live elements (positive integer)
            name: Label used in log events and metrics
            logger: Optional structlog-style logger receiving debug events
            metrics: Optional BufferMetrics instance to update

        Raises:
            InvalidArgumentError: capacity is not a positive integer
            OutOfMemoryError: storage could not be allocated
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidArgumentError(f"capacity must be a positive integer, got {capacity!r}")

        self.name = name
        self._logger = logger
        self._metrics = metrics
        self._storage: Optional[List[Optional[T]]] = None
        self._maxlen = capacity
        self._len = 0
        self.head = 0
        self.tail = 0

        try:
            self._storage = [None] * capacity
        except (MemoryError, OverflowError) as e:
            self._maxlen = 0
            self._debug("ring_buffer_alloc_failed", capacity=capacity)
            raise OutOfMemoryError(f"cannot allocate {capacity} slots") from e

        if self._metrics is not None:
            self._metrics.set_capacity(name, capacity)
            self._metrics.set_occupancy(name, 0)

        self._debug("ring_buffer_initialized", capacity=capacity)

    @classmethod
    def from_config(cls, config, *, logger: Optional[Any] = None, metrics: Optional[Any] = None) -> "RingBuffer":
        """Create a buffer from a BufferConfig.

        Validates the config, applies its log level and, when
        ``enable_metrics`` is set, attaches metrics and serves them on
        ``metrics_port``.

        Args:
            config: BufferConfig (e.g. from BufferConfig.from_env())
            logger: Optional structlog-style logger
            metrics: BufferMetrics to use instead of the process-wide default

        Returns:
            New RingBuffer
        """
        config.validate()
        configure_logging(config.log_level)

        if config.enable_metrics:
            if metrics is None:
                metrics = get_default_metrics()
            metrics.start_http_server(config.metrics_port)

        return cls(config.capacity, name=config.name, logger=logger, metrics=metrics)

    @property
    def maxlen(self) -> int:
        return self._maxlen

    @property
    def length(self) -> int:
        return self._len

    @property
    def is_closed(self) -> bool:
        return self._storage is None

    def deinit(self) -> None:
        """Release storage and reset all cursors. Safe to call more than once."""
        if self._storage is None:
            return

        self._storage = None
        self._len = 0
        self.head = 0
        self.tail = 0
        self._maxlen = 0

        if self._metrics is not None:
            self._metrics.set_occupancy(self.name, 0)

        self._debug("ring_buffer_deinitialized")

    def push(self, element: T) -> None:
        """Append element as the newest entry.

        Args:
            element: Opaque element reference

        Raises:
            BufferFullError: buffer already holds maxlen elements
        """
        storage = self._require_storage()
        if self._len == self._maxlen:
            self._debug("ring_buffer_full", maxlen=self._maxlen)
            if self._metrics is not None:
                self._metrics.record_rejected(self.name, "full")
            raise BufferFullError(f"buffer '{self.name}' is full ({self._maxlen} elements)")

        self._store(storage, element)
        if self._metrics is not None:
            self._metrics.record_push(self.name)
            self._metrics.set_occupancy(self.name, self._len)

    def pop(self) -> T:
        """Remove and return the oldest element.

        Raises:
            BufferEmptyError: buffer holds no elements
        """
        storage = self._require_storage()
        if self._len == 0:
            self._debug("ring_buffer_empty")
            if self._metrics is not None:
                self._metrics.record_rejected(self.name, "empty")
            raise BufferEmptyError(f"buffer '{self.name}' is empty")

        element = self._take(storage)
        if self._metrics is not None:
            self._metrics.record_pop(self.name)
            self._metrics.set_occupancy(self.name, self._len)
        return element

    def clear(self) -> None:
        """Drop all elements. Stale slots are left in place."""
        self._require_storage()
        self.head = self.tail = 0
        self._len = 0

        if self._metrics is not None:
            self._metrics.set_occupancy(self.name, 0)

        self._debug("ring_buffer_cleared")

    def is_empty(self) -> bool:
        self._require_storage()
        return self._len == 0

    def is_full(self) -> bool:
        self._require_storage()
        return self._len == self._maxlen

    def drain_into(
        self,
        destination: MutableSequence[Optional[T]],
        dest_len: Optional[int] = None,
        dest_offset: int = 0
    ) -> int:
        """Pop elements in FIFO order into destination.

        ``destination[0:dest_len]`` is reset to None first, then elements are
        written from ``dest_offset`` until the buffer empties or the region
        fills.

        Args:
            destination: Mutable sequence receiving elements
            dest_len: Size of the destination region (defaults to len(destination))
            dest_offset: First destination index to write

        Returns:
            Number of elements moved out of the buffer
        """
        storage = self._require_storage()
        dest_len = self._check_destination(destination, dest_len, dest_offset)

        destination[0:dest_len] = [None] * dest_len

        count = 0
        while self._len > 0 and dest_offset + count < dest_len:
            destination[dest_offset + count] = self._take(storage)
            count += 1

        if count and self._metrics is not None:
            self._metrics.record_pop(self.name, count)
            self._metrics.set_occupancy(self.name, self._len)

        self._debug("ring_buffer_drained", count=count, remaining=self._len)
        return count

    def fill_from(
        self,
        source: Sequence[T],
        source_len: Optional[int] = None,
        source_offset: int = 0
    ) -> int:
        """Push ``source[source_offset:source_len]`` until the buffer is full.

        Args:
            source: Sequence of elements (left untouched)
            source_len: End of the source region (defaults to len(source))
            source_offset: First source index to read

        Returns:
            Number of elements moved into the buffer
        """
        storage = self._require_storage()
        if source is None:
            raise InvalidArgumentError("source cannot be None")
        if source_len is None:
            source_len = len(source)
        _check_index("source_len", source_len)
        _check_index("source_offset", source_offset)
        if source_len < 0 or source_len > len(source):
            raise InvalidArgumentError(f"source_len must be within 0..{len(source)}, got {source_len}")
        if source_offset < 0:
            raise InvalidArgumentError(f"source_offset must be non-negative, got {source_offset}")

        count = 0
        while self._len < self._maxlen and source_offset + count < source_len:
            self._store(storage, source[source_offset + count])
            count += 1

        if count and self._metrics is not None:
            self._metrics.record_push(self.name, count)
            self._metrics.set_occupancy(self.name, self._len)

        self._debug("ring_buffer_filled", count=count, length=self._len)
        return count

    def peek(
        self,
        destination: MutableSequence[Optional[T]],
        dest_len: Optional[int] = None,
        dest_offset: int = 0,
        buffer_offset: int = 0
    ) -> int:
        """Copy live elements into destination without removing them.

        Reading starts ``buffer_offset`` elements past the oldest one and
        stops when the live elements run out or the destination region fills.
        ``destination[0:dest_len]`` is reset to None first.

        Args:
            destination: Mutable sequence receiving elements
            dest_len: Size of the destination region (defaults to len(destination))
            dest_offset: First destination index to write
            buffer_offset: Logical position (0 = oldest) to start reading from

        Returns:
            Number of elements copied
        """
        storage = self._require_storage()
        dest_len = self._check_destination(destination, dest_len, dest_offset)
        _check_index("buffer_offset", buffer_offset)
        if buffer_offset < 0:
            raise InvalidArgumentError(f"buffer_offset must be non-negative, got {buffer_offset}")

        destination[0:dest_len] = [None] * dest_len

        count = max(0, min(self._len - buffer_offset, dest_len - dest_offset))
        index = (self.tail + buffer_offset) % self._maxlen
        for k in range(count):
            destination[dest_offset + k] = storage[index]
            index = (index + 1) % self._maxlen

        return count

    def snapshot(self) -> List[T]:
        """Return live elements, oldest first, without removing them."""
        return list(self)

    def _debug(self, event: str, **kwargs) -> None:
        # resolved per call so configure_logging() applies to existing buffers
        logger = self._logger if self._logger is not None else log
        logger.debug(event, buffer=self.name, **kwargs)

    def _require_storage(self) -> List[Optional[T]]:
        if self._storage is None:
            raise InvalidArgumentError(f"buffer '{self.name}' has been deinitialized")
        return self._storage

    def _check_destination(self, destination, dest_len: Optional[int], dest_offset: int) -> int:
        if destination is None:
            raise InvalidArgumentError("destination cannot be None")
        if dest_len is None:
            dest_len = len(destination)
        _check_index("dest_len", dest_len)
        _check_index("dest_offset", dest_offset)
        if dest_len <= 0 or dest_len > len(destination):
            raise InvalidArgumentError(f"dest_len must be within 1..{len(destination)}, got {dest_len}")
        if dest_offset < 0:
            raise InvalidArgumentError(f"dest_offset must be non-negative, got {dest_offset}")
        return dest_len

    def _store(self, storage: List[Optional[T]], element: T) -> None:
        # head only advances when there is already a live element at it
        if self._len > 0:
            self.head = (self.head + 1) % self._maxlen
        storage[self.head] = element
        self._len += 1

    def _take(self, storage: List[Optional[T]]) -> T:
        element = storage[self.tail]
        if self._len > 1:
            self.tail = (self.tail + 1) % self._maxlen
        self._len -= 1
        return element

    def __enter__(self) -> "RingBuffer[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.deinit()

    def __iter__(self) -> Iterator[T]:
        storage = self._require_storage()
        for i in range(self._len):
            yield storage[(self.tail + i) % self._maxlen]

    def __len__(self) -> int:
        """Return number of live elements."""
        return self._len

    def __bool__(self) -> bool:
        return self._len > 0

    def __repr__(self) -> str:
        return f"RingBuffer(name={self.name}, size={len(self)}/{self._maxlen})"
