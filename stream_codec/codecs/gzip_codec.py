"""
Gzip codec, the default format.
"""

import gzip
from typing import BinaryIO

from ..base_classes import CodecSpec, Format
from .base import expect_magic

GZIP_MAGIC = b"\x1f\x8b"
DEFAULT_LEVEL = 6


def gzip_compressor(sink: BinaryIO, level: int = DEFAULT_LEVEL) -> BinaryIO:
    # mtime=0 keeps output byte-identical across runs
    return gzip.GzipFile(fileobj=sink, mode="wb", compresslevel=level, mtime=0)


def gzip_decompressor(source: BinaryIO) -> BinaryIO:
    return gzip.GzipFile(fileobj=expect_magic(source, GZIP_MAGIC, "gzip"), mode="rb")


GZIP_CODEC = CodecSpec(
    name=Format.GZIP.value,
    compressor=gzip_compressor,
    decompressor=gzip_decompressor,
    description="RFC 1952 gzip stream (zlib deflate)",
)
