"""
Streaming Codec Client
======================

Streaming, cancellable compression and decompression of byte streams with a
pluggable codec.

Core Features:
- Background transform per call, output returned as a live readable stream
- Unbuffered pipes, so the transform never runs ahead of the reader
- Cancellation tokens which unblock pending reads and writes
- Built-in gzip, noop, lz4 and zstd codecs plus custom transform pairs
- Operation errors reported through an outcome slot, never in-band

Usage:
    from stream_codec import CancellationToken, ClientConfig, StreamingClient

    client = StreamingClient(ClientConfig(format="zstd"))
    output, outcome = client.compress(open("data.bin", "rb"), CancellationToken())

    compressed = output.read()
    outcome.raise_for_error()
"""

__version__ = "1.0.0"
__author__ = "Project Think"
__email__ = ""
__description__ = "Streaming, cancellable compression client with pluggable codecs"

from .base_classes import DEFAULT_FORMAT, CodecSpec, Format
from .cancellation import CancellationToken, background
from .client import StreamingClient, new_client
from .codecs.registry import (
    CodecRegistry,
    available_formats,
    get_codec_registry,
    resolve_codec,
)
from .config import ClientConfig, Settings, load_settings
from .errors import (
    CodecError,
    ConfigurationError,
    DecompressorInitError,
    OperationCancelledError,
    PipeClosedError,
    TransformError,
    UnknownFormatError,
    UsageError,
    is_cancellation,
)
from .outcome import OutcomeSlot
from .streams import CancellableReader, CancellableWriter, Pipe, copy_stream

__all__ = [
    # Metadata
    '__version__',
    '__author__',
    '__description__',

    # Client
    'StreamingClient',
    'new_client',
    'ClientConfig',
    'OutcomeSlot',

    # Cancellation
    'CancellationToken',
    'background',

    # Codecs
    'CodecSpec',
    'CodecRegistry',
    'Format',
    'DEFAULT_FORMAT',
    'available_formats',
    'get_codec_registry',
    'resolve_codec',

    # Streams
    'Pipe',
    'CancellableReader',
    'CancellableWriter',
    'copy_stream',

    # Settings
    'Settings',
    'load_settings',

    # Errors
    'CodecError',
    'ConfigurationError',
    'UnknownFormatError',
    'UsageError',
    'DecompressorInitError',
    'TransformError',
    'OperationCancelledError',
    'PipeClosedError',
    'is_cancellation',
]
