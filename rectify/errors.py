# rectify/errors.py
"""Exceptions raised by rectify.

Per-tool problems (unknown tool, missing executable, launch failure, rejected
exit status) are recorded by the pipeline and never raised. Only conditions
that leave the caller without a usable result surface as exceptions.
"""

from typing import List


class RectifyError(Exception):
    """Base class for rectify errors."""


class ConfigError(RectifyError):
    """Raised when a configuration file cannot be read or parsed."""


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


class DocumentEncodingError(RectifyError):
    """Raised when a document is not valid UTF-8."""


class TempFileError(RectifyError):
    """Raised when a tool's scratch file cannot be created or written."""


class ResultUnreadableError(RectifyError):
    """Raised when formatting succeeded but the result could not be read back."""
