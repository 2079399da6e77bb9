"""Exception hierarchy for utcode.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from UtcodeError for easy catching of any utcode-specific error.
"""

from __future__ import annotations

from typing import Optional


class UtcodeError(Exception):
    """Base exception for all utcode errors."""

    pass


class SchemaError(UtcodeError):
    """Raised when a record type or destination annotation cannot be used.

    Examples:
        - Record annotations that cannot be resolved
        - Mapping annotation with a non-str key type
        - Two fields resolving to the same wire key
    """

    pass


class EncodeError(UtcodeError):
    """Raised when encoding a value fails.

    Examples:
        - Unsupported value shape (function, socket, ...)
        - Mapping with a non-str key
        - Nesting deeper than the configured maximum
    """

    pass


class DecodeError(UtcodeError):
    """Raised when decoding a utcode document fails.

    Examples:
        - Missing ``ut:`` document prefix
        - Truncated length-prefixed field or missing container terminator
        - Unparsable numeric literal or invalid base64 payload
        - Wire value incompatible with the destination type
        - Custom (``c``) wire values, which have no decoder

    Attributes:
        offset: Byte offset in the input where the fault was detected, if known
    """

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
