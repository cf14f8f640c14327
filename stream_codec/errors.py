"""
Error Types for the Streaming Codec Client
==========================================

Errors raised at client construction (configuration problems) and errors
delivered through an operation's outcome slot (decompressor setup, transform
and cancellation failures).
"""

import time
from typing import Any, Dict, Optional


class CodecError(Exception):
    """Base class for all streaming codec errors"""

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize a codec error.

        Args:
            message: Error description
            cause: Original exception that caused this error
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}
        self.timestamp = time.time()
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(message={self.message!r}, "
                f"cause={self.cause!r}, details={self.details!r})")

    def log_context(self) -> Dict[str, Any]:
        """Get error context for structured logging"""
        return {
            'error_type': type(self).__name__,
            'message': str(self),
            'timestamp': self.timestamp,
            'details': self.details,
            'cause': str(self.cause) if self.cause else None
        }


class ConfigurationError(CodecError, ValueError):
    """Raised when a client cannot be built from the given configuration"""


class UnknownFormatError(ConfigurationError):
    """Raised when a compression format name is not registered"""

    def __init__(self, format_name: str):
        super().__init__(f"unknown compression format {format_name!r}",
                         details={'format': format_name})
        self.format = format_name


class UsageError(ConfigurationError):
    """Raised when command line arguments cannot be interpreted"""


class DecompressorInitError(CodecError):
    """Raised when the decompressing transform cannot be created for an input"""


class TransformError(CodecError):
    """Raised when copying data through a transform or closing it fails"""


class OperationCancelledError(CodecError, OSError):
    """I/O failure caused by a fired cancellation token"""

    def __init__(self, reason: Optional[str] = None):
        message = "operation cancelled"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, details={'reason': reason})
        self.reason = reason


class PipeClosedError(OSError):
    """Read or write on a pipe end that was already closed"""


def is_cancellation(error: Optional[BaseException]) -> bool:
    """Check whether an error is, or was caused by, a cancellation."""
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, OperationCancelledError):
            return True
        seen.add(id(error))
        error = error.__cause__ or error.__context__
    return False
