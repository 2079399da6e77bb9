"""utcode encoder.

This module provides encode()/dump() and the Encoder class, which walk a value
tree recursively and write wire tokens for each value according to its shape.
"""

from __future__ import annotations

import io
import logging
import math
from contextlib import contextmanager
from typing import IO, Any, Callable, Dict, Iterator, Optional

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import EncodeError
from . import wire
from .schema import resolve
from .shapes import Shape, shape_of

logger = logging.getLogger(__name__)

CustomWriter = Callable[[Any, "Encoder"], None]


class Encoder:
    """Writes utcode documents to a binary sink.

    A document is assembled in memory and handed to the sink only once the
    whole value has been encoded, so a failed encode never leaves a partial
    document behind.

    Custom categories can be registered to encode types the codec has no rule
    for. A writer receives the value and the encoder, and emits tokens through
    :meth:`write` and :meth:`encode_value`. There is no decoding counterpart:
    whatever a writer emits must already be valid utcode to be readable.

    The registry is not locked; registering a category while another thread
    encodes with the same instance needs external synchronization.

    Example:
        >>> import decimal
        >>> encoder = Encoder()
        >>> encoder.register(decimal.Decimal, lambda value, enc: enc.encode_value(str(value)))
        >>> encoder.encode({"price": decimal.Decimal("9.99")})
        >>> encoder.getvalue()
        b'ut:d:k5:priceu8:OS45OQ==e'
    """

    def __init__(self, sink: Optional[IO[bytes]] = None, config: Optional[CodecConfig] = None) -> None:
        """Initialize an encoder.

        Args:
            sink: Binary stream receiving encoded documents (default: in-memory buffer)
            config: Codec configuration
        """
        self._sink: IO[bytes] = sink if sink is not None else io.BytesIO()
        self.config = config or DEFAULT_CONFIG
        self._custom: Dict[type, CustomWriter] = {}
        self._buffer: Optional[bytearray] = None
        self._depth = 0

    def register(self, category: type, writer: CustomWriter) -> None:
        """Register a writer for values of ``category`` (and its subclasses).

        Registered writers take precedence over the built-in shape rules.
        """
        if not isinstance(category, type):
            raise TypeError(f"category must be a type, got {category!r}")
        self._custom[category] = writer

    def encode(self, value: Any) -> None:
        """Encode ``value`` as one document and write it to the sink.

        Raises:
            EncodeError: If the value (or a nested value) cannot be encoded
        """
        self._buffer = bytearray(wire.PREFIX)
        self._depth = 0
        try:
            self.encode_value(value)
            document = bytes(self._buffer)
        finally:
            self._buffer = None

        self._sink.write(document)
        logger.debug("Encoded %s into %d byte document", type(value).__name__, len(document))

    def getvalue(self) -> bytes:
        """Return everything written so far when the sink is the default buffer."""
        if not isinstance(self._sink, io.BytesIO):
            raise TypeError("getvalue() requires the default in-memory sink")
        return self._sink.getvalue()

    def write(self, token: bytes) -> None:
        """Append raw token bytes to the document being encoded."""
        if self._buffer is None:
            raise RuntimeError("write() is only valid while encode() is running")
        self._buffer += token

    def encode_value(self, value: Any) -> None:
        """Encode one value (recursively) into the current document."""
        writer = self._custom_writer(type(value))
        if writer is not None:
            logger.debug("Using custom writer for %s", type(value).__name__)
            writer(value, self)
            return

        shape = shape_of(value)
        if shape is None:
            raise EncodeError(f"unsupported encode type {type(value).__name__}")

        _WRITERS[shape](self, value)

    def _custom_writer(self, value_type: type) -> Optional[CustomWriter]:
        if not self._custom:
            return None
        for klass in value_type.__mro__:
            writer = self._custom.get(klass)
            if writer is not None:
                return writer
        return None

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Track container depth; raises EncodeError past ``config.max_depth``."""
        self._depth += 1
        if self._depth > self.config.max_depth:
            raise EncodeError(
                f"maximum nesting depth {self.config.max_depth} exceeded "
                f"(self-referencing container?)"
            )
        try:
            yield
        finally:
            self._depth -= 1


def _write_absent(encoder: Encoder, value: Any) -> None:
    encoder.write(wire.absent())


def _write_bool(encoder: Encoder, value: bool) -> None:
    encoder.write(wire.boolean(value))


def _write_int(encoder: Encoder, value: Any) -> None:
    encoder.write(wire.integer(int(value)))


def _write_float(encoder: Encoder, value: Any) -> None:
    value = float(value)
    if encoder.config.collapse_integral_floats and math.isfinite(value) and value.is_integer():
        encoder.write(wire.integer(int(value)))
        return
    encoder.write(wire.floating(value))


def _write_text(encoder: Encoder, value: str) -> None:
    try:
        payload = value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodeError(f"text is not encodable as UTF-8: {e}") from e
    encoder.write(wire.encoded_text(payload))


def _write_bytes(encoder: Encoder, value: Any) -> None:
    # Byte buffers share the text token
    encoder.write(wire.encoded_text(bytes(value)))


def _write_sequence(encoder: Encoder, value: Any) -> None:
    with encoder.nested():
        encoder.write(wire.open_list())
        for item in value:
            encoder.encode_value(item)
        encoder.write(wire.end())


def _write_mapping(encoder: Encoder, value: Any) -> None:
    with encoder.nested():
        encoder.write(wire.open_dict())
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodeError(
                    f"map encoding supports only str keys, got {type(key).__name__}"
                )
            encoder.write(wire.key(key))
            encoder.encode_value(item)
        encoder.write(wire.end())


def _write_record(encoder: Encoder, value: Any) -> None:
    schema = resolve(type(value))
    with encoder.nested():
        encoder.write(wire.open_dict())
        for field_schema, item in schema.items(value):
            encoder.write(wire.key(field_schema.wire_key))
            encoder.encode_value(item)
        encoder.write(wire.end())


_WRITERS: Dict[Shape, Callable[[Encoder, Any], None]] = {
    Shape.ABSENT: _write_absent,
    Shape.BOOL: _write_bool,
    Shape.INT: _write_int,
    Shape.FLOAT: _write_float,
    Shape.TEXT: _write_text,
    Shape.BYTES: _write_bytes,
    Shape.SEQUENCE: _write_sequence,
    Shape.MAPPING: _write_mapping,
    Shape.RECORD: _write_record,
}


def encode(value: Any, *, config: Optional[CodecConfig] = None) -> bytes:
    """Encode a value to a utcode document.

    Args:
        value: bool, int, float, str, bytes, list/tuple/set, str-keyed mapping,
            Pydantic model or dataclass instance, or None (nested freely)
        config: Codec configuration

    Returns:
        The encoded document, starting with ``ut:``

    Raises:
        EncodeError: If a value has an unsupported shape or a mapping has a non-str key
        SchemaError: If a record type cannot be introspected

    Examples:
        ```python
        from utcode import encode

        encode(True)                 # b"ut:b:1"
        encode(-42)                  # b"ut:i:-42e"
        encode("hi")                 # b"ut:u4:aGk="
        encode(["a", None])          # b"ut:l:u4:YQ==n:ee"
        encode({"key1": "value1"})   # b"ut:d:k4:key1u8:dmFsdWUxe"
        ```
    """
    encoder = Encoder(config=config)
    encoder.encode(value)
    return encoder.getvalue()


def dump(value: Any, fp: IO[bytes], *, config: Optional[CodecConfig] = None) -> None:
    """Encode a value and write the document to a binary stream."""
    Encoder(fp, config=config).encode(value)
