"""utcode: self-describing value codec

A Python library that converts structured values (booleans, integers, floats,
text, bytes, lists, str-keyed dicts, None and records) into a compact,
self-describing text wire format, and reconstructs them either into a typed
destination or into a dynamic tree of dicts and lists.

Key Features:
- One-letter tagged, length-prefixed wire grammar (``ut:d:k4:nameu8:U2hpcnQ=e``)
- Pydantic models and dataclasses as records, with wire key overrides
- Bind mode (decode into a type or an existing instance) and create mode
  (decode into a dynamic value tree)
- Extension hook for encoding custom types

Quick Start:
    >>> from typing import Optional
    >>> from utcode import BaseRecord, encode, decode
    >>>
    >>> class ProductImage(BaseRecord):
    ...     large: str
    ...     medium: str
    ...     small: str
    >>>
    >>> class Product(BaseRecord):
    ...     name: str
    ...     description: str
    ...     quantity: int
    ...     image: Optional[ProductImage] = None
    >>>
    >>> data = encode(Product(name="Shirt", description="black shirt", quantity=5))
    >>> decoded = decode(data, Product)
    >>> tree = decode(data)  # {'name': 'Shirt', ..., 'image': None}
"""

from __future__ import annotations

from .codec import (
    Decoder,
    Encoder,
    FieldSchema,
    RecordSchema,
    Shape,
    Tag,
    decode,
    dump,
    encode,
    load,
    resolve,
    wire_key,
)
from .config import CodecConfig
from .exceptions import DecodeError, EncodeError, SchemaError, UtcodeError
from .models import BaseRecord, Unexported, WireKey, wire_field
from .utils import encoded_size, field_sizes

__version__ = "0.1.0"

__all__ = [
    # Core API
    "encode",
    "decode",
    "dump",
    "load",
    "Encoder",
    "Decoder",
    "CodecConfig",
    # Records
    "BaseRecord",
    "WireKey",
    "Unexported",
    "wire_field",
    "RecordSchema",
    "FieldSchema",
    "resolve",
    "wire_key",
    # Wire model
    "Shape",
    "Tag",
    # Exceptions
    "UtcodeError",
    "SchemaError",
    "EncodeError",
    "DecodeError",
    # Sizing
    "encoded_size",
    "field_sizes",
    # Version
    "__version__",
]
