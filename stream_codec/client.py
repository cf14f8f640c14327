"""
Streaming Codec Client
======================

Runs one compression or decompression per call as a background thread and
hands the caller a live readable stream right away.

Each call owns a private ``Pipe``: the background thread pushes transformed
bytes into its write end while the caller reads the other end. The pipe is
unbuffered, so the transform never runs ahead of the caller. Once the input
is drained (or the operation fails or is cancelled) the write end is closed
and only then is the outcome deposited, so a caller that reads the output to
the end and then waits on the outcome cannot deadlock.

Usage:
    client = StreamingClient(ClientConfig(format="gzip"))
    token = CancellationToken()

    output, outcome = client.compress(open("data.bin", "rb"), token)
    shutil.copyfileobj(output, destination)
    error = outcome.wait()
"""

import io
import itertools
import logging
import threading
from typing import Any, BinaryIO, Optional, Tuple

from .base_classes import CodecSpec
from .cancellation import CancellationToken
from .codecs.registry import CodecRegistry, get_codec_registry
from .config import ClientConfig
from .errors import (
    ConfigurationError,
    DecompressorInitError,
    TransformError,
    is_cancellation,
)
from .outcome import OutcomeSlot
from .streams import CancellableReader, CancellableWriter, Pipe, copy_stream

logger = logging.getLogger(__name__)

_operation_ids = itertools.count(1)


class StreamingClient:
    """Compresses and decompresses streams with one codec. Immutable."""

    def __init__(self, *configs: ClientConfig, registry: Optional[CodecRegistry] = None):
        """
        Build a client.

        Args:
            *configs: At most one configuration; none selects the default format
            registry: Registry to resolve the format with, the global one by default

        Raises:
            ConfigurationError: If more than one configuration is given, the
                format is unknown or only one transform override is set
        """
        if len(configs) > 1:
            raise ConfigurationError("only one config can be passed",
                                     details={'count': len(configs)})

        config = configs[0] if configs else ClientConfig()
        if not isinstance(config, ClientConfig):
            raise ConfigurationError(f"expected ClientConfig, got {type(config).__name__}")

        codec = (registry or get_codec_registry()).resolve(config)

        object.__setattr__(self, '_codec', codec)
        object.__setattr__(self, '_compressor', codec.compressor)
        object.__setattr__(self, '_decompressor', codec.decompressor)

        logger.debug(f"Created streaming client for codec {codec.name!r} ({codec.source})")

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def codec(self) -> CodecSpec:
        return self._codec

    @property
    def format(self) -> str:
        return self._codec.name

    def compress(self, source: BinaryIO,
                 token: Optional[CancellationToken] = None) -> Tuple[CancellableReader, OutcomeSlot]:
        """
        Start compressing ``source``.

        Args:
            source: Readable binary stream with the data to compress
            token: Cancellation token; pending reads and writes on the
                internal pipe fail once it fires

        Returns:
            Tuple of the compressed output stream and the outcome slot
        """
        token = token or CancellationToken()
        name = f"compress-{next(_operation_ids)}"

        pipe = Pipe(name)
        output = CancellableReader(pipe.reader, token, name=f"{name}-output")
        sink = CancellableWriter(pipe.writer, token, name=f"{name}-sink")
        outcome = OutcomeSlot(name)

        worker = threading.Thread(
            target=self._run_compression,
            args=(name, source, sink, token, outcome),
            name=name,
            daemon=True,
        )
        worker.start()

        return output, outcome

    def decompress(self, source: BinaryIO,
                   token: Optional[CancellationToken] = None) -> Tuple[CancellableReader, OutcomeSlot]:
        """
        Start decompressing ``source``.

        The decompressing transform is created before this method returns. If
        that fails, the output stream is already at its end and the outcome
        holds a ``DecompressorInitError``.

        Args:
            source: Readable binary stream with compressed data
            token: Cancellation token

        Returns:
            Tuple of the decompressed output stream and the outcome slot
        """
        token = token or CancellationToken()
        name = f"decompress-{next(_operation_ids)}"

        pipe = Pipe(name)
        output = CancellableReader(pipe.reader, token, name=f"{name}-output")
        sink = CancellableWriter(pipe.writer, token, name=f"{name}-sink")
        outcome = OutcomeSlot(name)

        try:
            decompressor = self._decompressor(source)
        except Exception as e:
            # Readers must see end of stream before the error becomes visible
            sink.close()
            logger.warning(f"{name}: creating decompressor failed: {e}")
            outcome.deposit(DecompressorInitError("creating decompressor", cause=e))
            return output, outcome

        worker = threading.Thread(
            target=self._run_decompression,
            args=(name, decompressor, sink, token, outcome),
            name=name,
            daemon=True,
        )
        worker.start()

        return output, outcome

    def compress_bytes(self, data: bytes, token: Optional[CancellationToken] = None) -> bytes:
        """Compress an in-memory payload, raising the operation's error if any."""
        output, outcome = self.compress(io.BytesIO(data), token)
        return self._collect(output, outcome)

    def decompress_bytes(self, data: bytes, token: Optional[CancellationToken] = None) -> bytes:
        """Decompress an in-memory payload, raising the operation's error if any."""
        output, outcome = self.decompress(io.BytesIO(data), token)
        return self._collect(output, outcome)

    @staticmethod
    def _collect(output: CancellableReader, outcome: OutcomeSlot) -> bytes:
        with output:
            result = output.read()
        outcome.raise_for_error()
        return result

    def _run_compression(self, name: str, source: BinaryIO, sink: CancellableWriter,
                         token: CancellationToken, outcome: OutcomeSlot) -> None:
        error: Optional[BaseException] = None
        compressor = None
        bytes_in = 0
        try:
            # Built here, not in compress(): some codecs write their header on
            # construction, which would block the caller on the pipe
            try:
                compressor = self._compressor(sink)
            except Exception as e:
                error = TransformError("creating compressor", cause=e)
                return

            try:
                bytes_in = copy_stream(compressor, source, token)
            except Exception as e:
                error = TransformError("compressing data", cause=e)
                return

            try:
                compressor.close()
            except Exception as e:
                error = TransformError("closing compressor", cause=e)
        finally:
            sink.close()
            if error is not None and compressor is not None:
                self._discard(name, compressor)
            self._log_result(name, "Compression", error, bytes_in, sink.bytes_transferred)
            outcome.deposit(error)

    def _run_decompression(self, name: str, decompressor: BinaryIO, sink: CancellableWriter,
                           token: CancellationToken, outcome: OutcomeSlot) -> None:
        error: Optional[BaseException] = None
        try:
            try:
                copy_stream(sink, decompressor, token)
            except Exception as e:
                error = TransformError("decompressing data", cause=e)
        finally:
            sink.close()
            try:
                decompressor.close()
            except Exception as e:
                if error is None:
                    error = TransformError("closing decompressor", cause=e)
                else:
                    logger.debug(f"{name}: ignoring error closing decompressor: {e}")
            self._log_result(name, "Decompression", error, None, sink.bytes_transferred)
            outcome.deposit(error)

    @staticmethod
    def _discard(name: str, transform: Any) -> None:
        # The pipe is already closed, so anything the transform still flushes fails
        try:
            transform.close()
        except Exception as e:
            logger.debug(f"{name}: ignoring error closing transform after failure: {e}")

    @staticmethod
    def _log_result(name: str, action: str, error: Optional[BaseException],
                    bytes_in: Optional[int], bytes_out: int) -> None:
        if error is not None:
            if is_cancellation(error):
                logger.warning(f"{name}: {action.lower()} cancelled after {bytes_out} bytes")
            else:
                logger.warning(f"{name}: {action.lower()} failed: {error}")
            return

        if bytes_in:
            ratio = (1 - bytes_out / bytes_in) * 100
            logger.info(f"{action} complete: {bytes_in} -> {bytes_out} bytes "
                        f"({ratio:.1f}% reduction)")
        else:
            logger.info(f"{action} complete: {bytes_out} bytes written")

    def __repr__(self) -> str:
        return f"StreamingClient(format={self.format!r})"


def new_client(*configs: ClientConfig) -> StreamingClient:
    """Create a client from at most one configuration."""
    return StreamingClient(*configs)
