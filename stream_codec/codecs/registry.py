"""
Codec Registry
==============

Resolves a ``ClientConfig`` to a working ``CodecSpec``.

Supports codec lookup via:
1. Built-in codecs (gzip, noop, lz4, zstd)
2. Runtime registration (named custom codecs)
3. Ad-hoc transform pairs passed directly in a ``ClientConfig``
"""

import logging
from typing import Dict, List, Optional

from ..base_classes import DEFAULT_FORMAT, CodecSpec
from ..config import ClientConfig
from ..errors import ConfigurationError, UnknownFormatError
from .gzip_codec import GZIP_CODEC
from .lz4_codec import LZ4_CODEC
from .noop_codec import NOOP_CODEC
from .zstd_codec import ZSTD_CODEC

logger = logging.getLogger(__name__)

BUILTIN_CODECS = (GZIP_CODEC, NOOP_CODEC, LZ4_CODEC, ZSTD_CODEC)


class CodecRegistry:
    """Central registry mapping format names to codecs"""

    def __init__(self):
        self._codecs: Dict[str, CodecSpec] = {}
        self._builtin: List[str] = []
        for spec in BUILTIN_CODECS:
            self._codecs[spec.name] = spec
            self._builtin.append(spec.name)

    def resolve(self, config: Optional[ClientConfig] = None) -> CodecSpec:
        """
        Resolve a configuration to a codec.

        Args:
            config: Client configuration; None selects the default format

        Returns:
            The codec to use

        Raises:
            ConfigurationError: If only one transform override is configured
            UnknownFormatError: If the format name is not registered
        """
        if config is None:
            config = ClientConfig()

        if config.compressor is not None or config.decompressor is not None:
            return self._custom_codec(config)

        name = config.format or DEFAULT_FORMAT.value
        spec = self._codecs.get(name)
        if spec is None:
            raise UnknownFormatError(config.format)

        logger.debug(f"Resolved format {config.format!r} to codec {spec.name!r}")
        return spec

    def _custom_codec(self, config: ClientConfig) -> CodecSpec:
        if config.decompressor is None:
            raise ConfigurationError("must configure both compressor and decompressor",
                                     details={'missing': 'decompressor'})
        if config.compressor is None:
            raise ConfigurationError("must configure both compressor and decompressor",
                                     details={'missing': 'compressor'})

        if config.format:
            logger.info(f"Format {config.format!r} ignored, custom transforms configured")

        return CodecSpec(
            name=config.format or "custom",
            compressor=config.compressor,
            decompressor=config.decompressor,
            description="Transforms supplied in client configuration",
            source="custom",
        )

    def register_codec(self, spec: CodecSpec) -> None:
        """Register a named codec at runtime"""
        if not spec.name:
            raise ConfigurationError("codec name cannot be empty")
        if spec.name in self._builtin:
            raise ConfigurationError(f"cannot replace built-in codec {spec.name!r}")
        if spec.name in self._codecs:
            logger.info(f"Replacing custom codec {spec.name!r}")

        self._codecs[spec.name] = spec
        logger.info(f"Registered custom codec: {spec.name}")

    def unregister_codec(self, name: str) -> None:
        if name in self._builtin:
            raise ConfigurationError(f"cannot remove built-in codec {name!r}")
        self._codecs.pop(name, None)

    def get_codec(self, name: str) -> Optional[CodecSpec]:
        return self._codecs.get(name)

    def list_formats(self) -> List[str]:
        """Built-in format names, in a stable order"""
        return list(self._builtin)

    def list_codecs(self) -> List[CodecSpec]:
        return list(self._codecs.values())


# Global registry instance
_global_registry = CodecRegistry()


def get_codec_registry() -> CodecRegistry:
    """Get the global codec registry"""
    return _global_registry


def available_formats() -> List[str]:
    """Convenience function to list built-in formats"""
    return _global_registry.list_formats()


def resolve_codec(config: Optional[ClientConfig] = None) -> CodecSpec:
    """Convenience function to resolve a configuration with the global registry"""
    return _global_registry.resolve(config)
