from __future__ import annotations
"""Bounded in-memory byte pipe connecting a writer thread to an upload thread."""
import threading
from typing import Callable, Optional

from .errors import TransferCancelledError
from .options import CancelFn

DEFAULT_PIPE_CAPACITY = 1024 * 1024
# How often a blocked end re-checks its cancel callback.
POLL_INTERVAL = 0.05


class BytePipe:
    """A bounded FIFO of bytes.

    ``write`` blocks while ``capacity`` bytes are waiting to be consumed.
    ``read(n)`` blocks until ``n`` bytes are available or the write end has
    been closed. :meth:`close_with_error` wakes both ends and makes every
    later call raise the given error.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_PIPE_CAPACITY,
        cancel_requested: Optional[CancelFn] = None,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        self._capacity = capacity
        self._cancel_requested = cancel_requested
        self._cond = threading.Condition()
        self._buffer = bytearray()
        self._eof = False
        self._error: BaseException | None = None
        self.reader = PipeReader(self)

    @property
    def buffered(self) -> int:
        with self._cond:
            return len(self._buffer)

    def write(self, data: bytes) -> int:
        view = memoryview(data).cast("B")
        written = 0
        with self._cond:
            while written < len(view):
                self._wait(
                    lambda: self._error is not None
                    or self._eof
                    or len(self._buffer) < self._capacity
                )
                if self._error is not None:
                    raise self._error
                if self._eof:
                    raise ValueError("write to a closed pipe")
                room = self._capacity - len(self._buffer)
                chunk = view[written:written + room]
                self._buffer += chunk
                written += len(chunk)
                self._cond.notify_all()
        return written

    def read(self, size: int = -1) -> bytes:
        out = bytearray()
        with self._cond:
            while size is None or size < 0 or len(out) < size:
                self._wait(lambda: self._error is not None or self._eof or bool(self._buffer))
                if self._error is not None:
                    raise self._error
                if not self._buffer:
                    break
                if size is None or size < 0:
                    take = len(self._buffer)
                else:
                    take = min(size - len(out), len(self._buffer))
                out += self._buffer[:take]
                del self._buffer[:take]
                self._cond.notify_all()
        return bytes(out)

    def close(self) -> None:
        """Signal end-of-stream to the reader."""

        with self._cond:
            self._eof = True
            self._cond.notify_all()

    def close_with_error(self, error: BaseException) -> None:
        with self._cond:
            if self._error is None:
                self._error = error
            self._cond.notify_all()

    def _wait(self, predicate: Callable[[], bool]) -> None:
        while not predicate():
            if self._cancel_requested is None:
                self._cond.wait()
                continue
            if self._cancel_requested():
                raise TransferCancelledError("Transfer cancelled by caller")
            self._cond.wait(POLL_INTERVAL)


class PipeReader:
    """Read-only, non-seekable end of a :class:`BytePipe`."""

    def __init__(self, pipe: BytePipe):
        self._pipe = pipe

    def read(self, size: int = -1) -> bytes:
        return self._pipe.read(size)

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False
