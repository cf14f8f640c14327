"""
LZ4 frame codec.
"""

from typing import BinaryIO

import lz4.frame

from ..base_classes import CodecSpec, Format
from .base import expect_magic

LZ4_FRAME_MAGIC = b"\x04\x22\x4d\x18"


def lz4_compressor(sink: BinaryIO, level: int = 0) -> BinaryIO:
    # LZ4FrameFile never closes a file object it did not open itself
    return lz4.frame.LZ4FrameFile(sink, mode="wb", compression_level=level)


def lz4_decompressor(source: BinaryIO) -> BinaryIO:
    return lz4.frame.LZ4FrameFile(expect_magic(source, LZ4_FRAME_MAGIC, "lz4"), mode="rb")


LZ4_CODEC = CodecSpec(
    name=Format.LZ4.value,
    compressor=lz4_compressor,
    decompressor=lz4_decompressor,
    description="LZ4 frame format, very fast with moderate ratio",
)
