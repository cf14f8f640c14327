"""
Base Classes for the Streaming Codec Client
===========================================

Contains the codec descriptor and the format enumeration shared by the
registry, the client and the built-in codecs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, List

# sink -> compressing sink. Closing the result flushes the compressed trailer
# but must leave ``sink`` itself open.
CompressorFactory = Callable[[BinaryIO], BinaryIO]

# source -> decompressing source. Raises if ``source`` does not start with
# data the codec understands.
DecompressorFactory = Callable[[BinaryIO], BinaryIO]


class Format(str, Enum):
    """Built-in compression formats"""
    GZIP = "gzip"
    NOOP = "noop"
    LZ4 = "lz4"
    ZSTD = "zstd"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


DEFAULT_FORMAT = Format.GZIP


@dataclass(frozen=True)
class CodecSpec:
    """A paired compressor/decompressor identified by a format name"""
    name: str
    compressor: CompressorFactory
    decompressor: DecompressorFactory
    description: str = ""
    source: str = "builtin"  # "builtin", "custom"
