"""
In-Process Pipes and Cancellable Stream Adapters
================================================

``Pipe`` couples a producer thread with a consumer thread without buffering:
a write returns only after readers consumed all of its bytes, which gives
natural backpressure. ``CancellableReader`` and ``CancellableWriter`` wrap any
blocking byte stream so that a pending read or write unblocks as soon as a
``CancellationToken`` fires.
"""

import io
import logging
import queue
import threading
from concurrent.futures import FIRST_COMPLETED, Future, wait
from typing import Any, BinaryIO, Callable, Optional

from .cancellation import CancellationToken
from .errors import OperationCancelledError, PipeClosedError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024  # 64KB


class Pipe:
    """Synchronous, unbuffered in-memory pipe"""

    def __init__(self, name: str = "pipe"):
        self.name = name
        self._cond = threading.Condition()
        self._pending: Optional[memoryview] = None
        self._writing = False
        self._read_closed = False
        self._write_closed = False
        self._write_error: Optional[BaseException] = None

        self.reader = PipeReader(self)
        self.writer = PipeWriter(self)

    def _read(self, size: Optional[int] = -1) -> bytes:
        if size == 0:
            return b""

        with self._cond:
            while True:
                if self._read_closed:
                    raise PipeClosedError(f"read on closed {self.name}")
                if self._pending is not None:
                    break
                if self._write_closed:
                    if self._write_error is not None:
                        raise self._write_error
                    return b""
                self._cond.wait()

            if size is None or size < 0:
                size = len(self._pending)

            chunk = bytes(self._pending[:size])
            rest = self._pending[size:]
            if len(rest):
                self._pending = rest
            else:
                # Whole write consumed, release the writer
                self._pending = None
                self._cond.notify_all()
            return chunk

    def _write(self, data: Any) -> int:
        view = memoryview(data).cast('B')

        with self._cond:
            # One write at a time, so chunks from concurrent writers never interleave
            while self._writing and not (self._read_closed or self._write_closed):
                self._cond.wait()

            if self._write_closed:
                raise PipeClosedError(f"write on closed {self.name}")
            if self._read_closed:
                raise BrokenPipeError(f"read end of {self.name} is closed")
            if not len(view):
                return 0

            self._writing = True
            self._pending = view
            self._cond.notify_all()
            try:
                while self._pending is not None:
                    if self._read_closed:
                        raise BrokenPipeError(f"read end of {self.name} is closed")
                    if self._write_closed:
                        raise PipeClosedError(f"write on closed {self.name}")
                    self._cond.wait()
            finally:
                self._pending = None
                self._writing = False
                self._cond.notify_all()
            return len(view)

    def _close_read(self) -> None:
        with self._cond:
            self._read_closed = True
            self._cond.notify_all()

    def _close_write(self, error: Optional[BaseException] = None) -> None:
        with self._cond:
            if not self._write_closed:
                self._write_closed = True
                self._write_error = error
            self._cond.notify_all()


class PipeReader:
    """Read end of a ``Pipe``"""

    def __init__(self, pipe: Pipe):
        self._pipe = pipe

    @property
    def closed(self) -> bool:
        return self._pipe._read_closed

    def readable(self) -> bool:
        return True

    def read(self, size: Optional[int] = -1) -> bytes:
        """Read up to ``size`` bytes; ``b""`` once the write end is closed."""
        return self._pipe._read(size)

    def close(self) -> None:
        """Close the read end; pending and future writes fail with ``BrokenPipeError``."""
        self._pipe._close_read()


class PipeWriter:
    """Write end of a ``Pipe``"""

    def __init__(self, pipe: Pipe):
        self._pipe = pipe

    @property
    def closed(self) -> bool:
        return self._pipe._write_closed

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        """Write all of ``data``, blocking until readers consumed it."""
        return self._pipe._write(data)

    def close(self) -> None:
        """Close the write end; readers see end of stream after it."""
        self._pipe._close_write()

    def close_with_error(self, error: BaseException) -> None:
        """Close the write end so readers get ``error`` instead of end of stream."""
        self._pipe._close_write(error)


class _Worker:
    """Daemon thread running blocking calls one at a time"""

    _STOP = object()

    def __init__(self, name: str):
        self.name = name
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._thread: Optional[threading.Thread] = None

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()

        future: Future = Future()
        self._queue.put((future, fn, args))
        return future

    def stop(self) -> None:
        if self._thread is not None:
            self._queue.put(self._STOP)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is self._STOP:
                return
            future, fn, args = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args))
            except BaseException as e:
                future.set_exception(e)


class _CancellableStream(io.RawIOBase):
    """Shared machinery of the cancellable adapters"""

    def __init__(self, raw: Any, token: CancellationToken, name: str):
        super().__init__()
        self._raw = raw
        self._token = token
        self._name = name
        self._worker = _Worker(f"{name}-io")
        self.bytes_transferred = 0

    def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        self._token.raise_if_cancelled()

        future = self._worker.submit(fn, *args)
        done, _ = wait([future, self._token.future], return_when=FIRST_COMPLETED)
        if future in done:
            return future.result()

        # The raw call keeps running on the worker until the stream is closed
        future.cancel()
        logger.debug(f"{self._name}: pending I/O abandoned after cancellation")
        raise OperationCancelledError(self._token.reason)

    def close(self) -> None:
        """Close the underlying stream. Safe to call any number of times."""
        if self.closed:
            return
        try:
            self._raw.close()
        except Exception as e:
            logger.warning(f"Error closing {self._name}: {e}")
        finally:
            self._worker.stop()
            super().close()


class CancellableReader(_CancellableStream):
    """Readable stream whose reads fail fast once a token is cancelled"""

    def __init__(self, raw: Any, token: CancellationToken, name: str = "reader"):
        super().__init__(raw, token, name)

    def readable(self) -> bool:
        return True

    def read(self, size: Optional[int] = -1) -> bytes:
        if size is None or size < 0:
            return self.readall()
        self._checkClosed()
        data = self._call(self._raw.read, size)
        self.bytes_transferred += len(data)
        return data

    def readinto(self, buffer: Any) -> int:
        data = self.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n


class CancellableWriter(_CancellableStream):
    """Writable stream whose writes fail fast once a token is cancelled"""

    def __init__(self, raw: Any, token: CancellationToken, name: str = "writer"):
        super().__init__(raw, token, name)

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        self._checkClosed()
        written = self._call(self._raw.write, data)
        if written is None:
            written = len(data)
        self.bytes_transferred += written
        return written


def copy_stream(dst: BinaryIO,
                src: BinaryIO,
                token: Optional[CancellationToken] = None,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Copy ``src`` into ``dst`` until ``src`` is exhausted.

    Args:
        dst: Writable destination
        src: Readable source
        token: Optional token checked between chunks
        chunk_size: Maximum bytes read per iteration

    Returns:
        Total number of bytes copied
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    total = 0
    while True:
        if token is not None:
            token.raise_if_cancelled()

        chunk = src.read(chunk_size)
        if not chunk:
            return total

        view = memoryview(chunk)
        while len(view):
            written = dst.write(view)
            if written is None:
                written = len(view)
            elif written <= 0:
                raise OSError(f"short write: {len(view)} bytes left")
            view = view[written:]
        total += len(chunk)
