"""
Shared fixtures for the streaming codec client tests.
"""

import gzip
import io
import os

import pytest


class EndlessReader(io.RawIOBase):
    """Readable stream which repeats ``pattern`` forever"""

    def __init__(self, pattern: bytes = b"x"):
        super().__init__()
        self._pattern = pattern
        self._offset = 0
        self.reads = 0

    def readable(self):
        return True

    def readinto(self, buffer):
        self.reads += 1
        size = len(buffer)
        rotated = self._pattern[self._offset:] + self._pattern[:self._offset]
        data = (rotated * (size // len(rotated) + 1))[:size]
        memoryview(buffer).cast('B')[:size] = data
        self._offset = (self._offset + size) % len(self._pattern)
        return size


@pytest.fixture
def endless_source():
    """Factory for readers that never reach end of stream"""
    return EndlessReader


@pytest.fixture
def endless_gzip_source():
    """Factory for a reader yielding gzip members back to back, forever"""
    member = gzip.compress(b"endless" * 8192, mtime=0)
    return lambda: EndlessReader(member)


@pytest.fixture
def payload():
    """Mixed compressible and random payload, larger than one copy chunk"""
    return (b"The quick brown fox jumps over the lazy dog. " * 4000) + os.urandom(70 * 1024)
