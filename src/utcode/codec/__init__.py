"""utcode codec.

This module provides the encoder and decoder for the utcode wire format, along
with the shape and schema introspection they share.
"""

from __future__ import annotations

from .decoder import Decoder, decode, load
from .encoder import Encoder, dump, encode
from .schema import FieldSchema, RecordSchema, resolve, wire_key
from .shapes import Shape, TypeSpec, shape_of, type_spec
from .wire import Tag

__all__ = [
    "encode",
    "decode",
    "dump",
    "load",
    "Encoder",
    "Decoder",
    "RecordSchema",
    "FieldSchema",
    "resolve",
    "wire_key",
    "Shape",
    "TypeSpec",
    "shape_of",
    "type_spec",
    "Tag",
]
