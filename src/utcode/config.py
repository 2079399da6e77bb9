"""Codec configuration.

This module provides the configuration dataclass shared by the encoder and
decoder. The defaults produce the canonical wire form; none of the options
change the grammar, only which of its valid forms is produced or accepted.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CodecConfig:
    """Configuration for utcode encoding and decoding.

    Attributes:
        max_depth: Maximum container nesting accepted by the encoder and the
            decoder (default 256). Deeper input raises EncodeError/DecodeError
            instead of exhausting the interpreter stack, which also catches
            self-referencing lists and dicts on encode.

        collapse_integral_floats: Write whole-valued floats with the integer
            tag (``i:3e``) instead of the float tag (``f:3.0z``), default False.
            The decoder accepts both forms for float destinations regardless
            of this setting.

        bytes_fallback: When decoding without a destination type, text whose
            payload is not valid UTF-8 is returned as ``bytes`` (default True).
            When False such payloads raise DecodeError.

    Examples:
        ```python
        from utcode import CodecConfig, encode

        compact = CodecConfig(collapse_integral_floats=True)
        encode(2.0, config=compact)   # b"ut:i:2e"
        encode(2.0)                   # b"ut:f:2.0z"
        ```
    """

    max_depth: int = 256
    collapse_integral_floats: bool = False
    bytes_fallback: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")


DEFAULT_CONFIG = CodecConfig()
