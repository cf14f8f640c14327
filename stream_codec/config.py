"""
Configuration for the Streaming Codec Client
============================================

``ClientConfig`` is what a ``StreamingClient`` is built from. ``Settings`` and
``load_settings`` resolve the format requested by the command line tool from
its flag, the environment and an optional YAML configuration file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .base_classes import CompressorFactory, DecompressorFactory
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

FORMAT_ENV = "COMPRESSOR_FORMAT"
DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass(frozen=True)
class ClientConfig:
    """Configuration settings for a streaming client"""

    # Format name; empty selects the default codec
    format: str = ""

    # Custom transforms, used instead of ``format`` when both are given
    compressor: Optional[CompressorFactory] = None
    decompressor: Optional[DecompressorFactory] = None

    def __post_init__(self) -> None:
        """Validate configuration parameters"""
        if self.format is None:
            object.__setattr__(self, 'format', "")
        if not isinstance(self.format, str):
            raise ConfigurationError(f"format must be a string, got {type(self.format).__name__}")
        if self.compressor is not None and not callable(self.compressor):
            raise ConfigurationError("compressor must be callable")
        if self.decompressor is not None and not callable(self.decompressor):
            raise ConfigurationError("decompressor must be callable")

    @property
    def has_custom_codec(self) -> bool:
        """True when any transform override is set; completeness is checked on resolve."""
        return self.compressor is not None or self.decompressor is not None


@dataclass
class Settings:
    """Settings of the command line tool"""
    format: str = ""
    config_path: Path = DEFAULT_CONFIG_PATH

    def client_config(self) -> ClientConfig:
        return ClientConfig(format=self.format)


def load_settings(config_path: Union[str, Path, None] = None,
                  format_override: Optional[str] = None,
                  env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Resolve tool settings.

    Precedence for the format is: ``format_override`` (command line flag),
    then the ``COMPRESSOR_FORMAT`` environment variable, then the ``format``
    key of the configuration file.

    Args:
        config_path: YAML file to read; defaults to ``config.yaml`` in the
            working directory. A missing file is not an error.
        format_override: Format given on the command line, if any
        env: Environment mapping, defaults to ``os.environ``

    Returns:
        Resolved settings
    """
    env_map = os.environ if env is None else env
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    file_data = _load_config_file(path)

    fmt = format_override
    if not fmt:
        fmt = env_map.get(FORMAT_ENV, "")
    if not fmt:
        fmt = file_data.get('format') or ""
    if not isinstance(fmt, str):
        raise ConfigurationError(f"format in {str(path)!r} must be a string")

    logger.debug(f"Resolved settings: format={fmt!r}, config_path={path}")
    return Settings(format=fmt, config_path=path)


def _load_config_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError:
        logger.debug(f"Configuration file {path} not found, using defaults")
        return {}
    except OSError as e:
        raise ConfigurationError(f"reading configuration file {str(path)!r}", cause=e) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"decoding config from file {str(path)!r}", cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration file {str(path)!r} must contain a mapping")
    return data
