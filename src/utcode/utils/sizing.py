"""Encoded size calculation utilities.

This module provides functions to measure how many bytes a value takes on the
wire, as a whole document or field by field for records.
"""

from __future__ import annotations

from typing import Any, Optional

from ..codec import wire
from ..codec.encoder import encode
from ..codec.schema import resolve
from ..codec.shapes import is_record
from ..config import CodecConfig


def encoded_size(value: Any, *, config: Optional[CodecConfig] = None) -> int:
    """Calculate the size of a value's encoded document in bytes.

    Args:
        value: Any encodable value
        config: Codec configuration

    Returns:
        Size in bytes, including the ``ut:`` prefix

    Raises:
        EncodeError: If the value cannot be encoded

    Example:
        >>> encoded_size(True)
        6  # ut:b:1
        >>> encoded_size("hi")
        10  # ut:u4:aGk=
    """
    return len(encode(value, config=config))


def field_sizes(record: Any, *, config: Optional[CodecConfig] = None) -> dict[str, int]:
    """Get the number of bytes each field of a record takes on the wire.

    Each size covers the field's key token and its value tokens.

    Args:
        record: Pydantic model or dataclass instance
        config: Codec configuration

    Returns:
        Dictionary mapping field names to their size in bytes

    Raises:
        TypeError: If ``record`` is not a record instance
        EncodeError: If a field value cannot be encoded

    Example:
        >>> field_sizes(Point(x=1, y=2))
        {'x': 8, 'y': 8}  # k1:x + i:1e
    """
    if not is_record(record):
        raise TypeError(f"expected a record instance, got {type(record).__name__}")

    schema = resolve(type(record))
    sizes = {}
    for field_schema, value in schema.items(record):
        key_size = len(wire.key(field_schema.wire_key))
        value_size = encoded_size(value, config=config) - len(wire.PREFIX)
        sizes[field_schema.name] = key_size + value_size
    return sizes
