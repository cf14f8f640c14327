"""
Stream helpers shared by the built-in codecs.
"""

from typing import Any, BinaryIO, Optional


def read_exact(source: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes unless the stream ends first."""
    parts = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        parts.append(chunk)
        remaining -= len(chunk)
    return b"".join(parts)


class PrefixedReader:
    """Replays bytes already consumed from a stream before reading the rest of it"""

    def __init__(self, prefix: bytes, source: BinaryIO):
        self._prefix = memoryview(prefix)
        self._source = source

    def readable(self) -> bool:
        return True

    def read(self, size: Optional[int] = -1) -> bytes:
        if len(self._prefix) == 0:
            return self._source.read(size)

        if size is None or size < 0:
            head = bytes(self._prefix)
            self._prefix = memoryview(b"")
            return head + self._source.read()

        head = bytes(self._prefix[:size])
        self._prefix = self._prefix[size:]
        return head

    def close(self) -> None:
        # The wrapped stream belongs to the caller
        pass


class NopCloser:
    """Read-only view of a stream whose close leaves the stream open"""

    def __init__(self, source: BinaryIO):
        self._source = source
        self.closed = False

    def readable(self) -> bool:
        return True

    def read(self, size: Optional[int] = -1) -> bytes:
        return self._source.read(size)

    def close(self) -> None:
        self.closed = True


def expect_magic(source: BinaryIO, magic: bytes, format_name: str) -> PrefixedReader:
    """
    Check that ``source`` starts with ``magic``.

    Returns:
        A reader yielding the complete stream, magic bytes included

    Raises:
        EOFError: If the stream ends before the magic bytes
        ValueError: If the stream starts with anything else
    """
    head = read_exact(source, len(magic))
    if len(head) < len(magic):
        raise EOFError(f"unexpected end of stream while reading {format_name} header")
    if head != magic:
        raise ValueError(f"invalid {format_name} header: {_preview(head)}")
    return PrefixedReader(head, source)


def _preview(data: Any) -> str:
    return bytes(data).hex(' ')
