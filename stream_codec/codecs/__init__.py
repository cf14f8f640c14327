"""
Codecs for the streaming codec client.

- Built-in codecs live in one module each and expose a ``CodecSpec``
- Use get_codec_registry() to resolve configurations or register codecs
"""

from .base import NopCloser, PrefixedReader, expect_magic, read_exact
from .gzip_codec import GZIP_CODEC
from .lz4_codec import LZ4_CODEC
from .noop_codec import NOOP_CODEC
from .registry import (
    BUILTIN_CODECS,
    CodecRegistry,
    available_formats,
    get_codec_registry,
    resolve_codec,
)
from .zstd_codec import ZSTD_CODEC

__all__ = [
    # Stream helpers
    'NopCloser',
    'PrefixedReader',
    'expect_magic',
    'read_exact',

    # Built-in codecs
    'GZIP_CODEC',
    'NOOP_CODEC',
    'LZ4_CODEC',
    'ZSTD_CODEC',
    'BUILTIN_CODECS',

    # Registry
    'CodecRegistry',
    'available_formats',
    'get_codec_registry',
    'resolve_codec',
]
