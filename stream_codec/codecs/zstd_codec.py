"""
Zstandard codec.

Decompression drives ``ZstdDecompressionObj`` directly instead of
``stream_reader``, which reports a clean end of stream when the input stops
in the middle of a frame.
"""

from typing import BinaryIO, Optional

import zstandard as zstd

from ..base_classes import CodecSpec, Format
from .base import expect_magic

ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
DEFAULT_LEVEL = 3


class ZstdFrameReader:
    """Reads the decompressed content of one or more consecutive zstd frames"""

    def __init__(self, source: BinaryIO, dctx: Optional[zstd.ZstdDecompressor] = None,
                 read_size: int = zstd.DECOMPRESSION_RECOMMENDED_INPUT_SIZE):
        self._source = source
        self._dctx = dctx or zstd.ZstdDecompressor()
        self._read_size = read_size
        self._dobj = self._dctx.decompressobj()
        self._buffer = bytearray()
        # True while the current frame has received input but not its end
        self._in_frame = False
        self._source_done = False
        self.closed = False

    def readable(self) -> bool:
        return True

    def read(self, size: Optional[int] = -1) -> bytes:
        if self.closed:
            raise ValueError("read from closed zstd reader")

        if size is None or size < 0:
            while not self._source_done:
                self._fill()
            data = bytes(self._buffer)
            self._buffer.clear()
            return data

        while not self._buffer and not self._source_done:
            self._fill()
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def _fill(self) -> None:
        chunk = self._source.read(self._read_size)
        if not chunk:
            self._source_done = True
            if self._in_frame:
                raise EOFError("compressed zstd stream ended before the end of the frame")
            return

        while chunk:
            if self._dobj.eof:
                self._dobj = self._dctx.decompressobj()
            self._in_frame = True
            self._buffer += self._dobj.decompress(chunk)
            if not self._dobj.eof:
                break
            self._in_frame = False
            chunk = self._dobj.unused_data

    def close(self) -> None:
        # The wrapped stream belongs to the caller
        self.closed = True


def zstd_compressor(sink: BinaryIO, level: int = DEFAULT_LEVEL) -> BinaryIO:
    cctx = zstd.ZstdCompressor(level=level)
    return cctx.stream_writer(sink, write_return_read=True, closefd=False)


def zstd_decompressor(source: BinaryIO) -> BinaryIO:
    return ZstdFrameReader(expect_magic(source, ZSTD_MAGIC, "zstd"))


ZSTD_CODEC = CodecSpec(
    name=Format.ZSTD.value,
    compressor=zstd_compressor,
    decompressor=zstd_decompressor,
    description="Zstandard frame format, fast with very good ratio",
)
