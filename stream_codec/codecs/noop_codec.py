"""
Passthrough codec which leaves data untouched.
"""

from typing import BinaryIO

from ..base_classes import CodecSpec, Format
from .base import NopCloser


def noop_compressor(sink: BinaryIO) -> BinaryIO:
    return sink


def noop_decompressor(source: BinaryIO) -> BinaryIO:
    return NopCloser(source)


NOOP_CODEC = CodecSpec(
    name=Format.NOOP.value,
    compressor=noop_compressor,
    decompressor=noop_decompressor,
    description="Identity transform, output equals input",
)
