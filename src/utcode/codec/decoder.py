"""utcode decoder.

This module provides decode()/load() and the Decoder class: a cursor over an
immutable buffer that parses wire tokens recursively in one of two modes.

- Bind mode decodes into a known destination: a type annotation (``int``,
  ``list[str]``, ``Optional[Image]``, a record class) or an existing list,
  dict or record instance, which is filled in place.
- Create mode builds a fresh dynamic tree (dict, list, bool, int, float, str,
  bytes, None). It is used when no destination is given, for destinations
  annotated ``Any`` and for elements of containers whose element type is unknown.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from contextlib import contextmanager
from typing import IO, Any, Dict, Iterator, List, Optional, Tuple, Union

from ..config import DEFAULT_CONFIG, CodecConfig
from ..exceptions import DecodeError
from . import wire
from .schema import RecordSchema, resolve
from .shapes import ANY_SPEC, Shape, TypeSpec, is_record, spec_for_instance, type_spec
from .wire import Tag

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview, str]

_END_BYTE = wire.END[0]
_LEGACY_OCTAL = re.compile(r"[+-]?0[0-7]+")


class Decoder:
    """Cursor-based parser for a single utcode document.

    Example:
        >>> Decoder(b"ut:l:i:1ei:2ee").decode(list[int])
        [1, 2]
    """

    def __init__(self, data: Buffer, config: Optional[CodecConfig] = None) -> None:
        """Initialize a decoder over ``data``.

        Args:
            data: Encoded document (str input is taken as UTF-8)
            config: Codec configuration
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._data = bytes(data)
        self._pos = 0
        self._depth = 0
        self.config = config or DEFAULT_CONFIG

    @property
    def offset(self) -> int:
        """Current cursor position."""
        return self._pos

    def decode(self, target: Any = None) -> Any:
        """Decode the document.

        Args:
            target: None for create mode, a type annotation, or a list, dict or
                record instance to fill in place

        Returns:
            The decoded value (the target itself when filling in place)

        Raises:
            DecodeError: If the document is malformed or does not fit the target
            SchemaError: If the target annotation has no wire representation
        """
        self._pos = 0
        self._depth = 0

        if not self._data.startswith(wire.PREFIX):
            raise DecodeError("invalid utcode: missing 'ut:' prefix", 0)
        self._pos = len(wire.PREFIX)

        if target is None:
            value = self._create()
        elif isinstance(target, (list, dict)) or is_record(target):
            value = self._bind(spec_for_instance(target), target)
        else:
            value = self._bind(type_spec(target))

        if self._pos != len(self._data):
            raise DecodeError(
                f"unexpected trailing data ({len(self._data) - self._pos} bytes)", self._pos
            )
        return value

    # Read primitives

    def _peek(self, what: str) -> int:
        if self._pos >= len(self._data):
            raise DecodeError(f"unexpected end of data in {what}", self._pos)
        return self._data[self._pos]

    def _read(self, count: int, what: str) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise DecodeError(
                f"truncated {what}: need {count} bytes, have {len(self._data) - self._pos}",
                self._pos,
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _read_until(self, delimiter: bytes, what: str) -> bytes:
        """Read up to ``delimiter`` and consume the delimiter too."""
        index = self._data.find(delimiter, self._pos)
        if index < 0:
            raise DecodeError(f"could not find {what} end", self._pos)
        chunk = self._data[self._pos:index]
        self._pos = index + len(delimiter)
        return chunk

    def _at_end(self, what: str) -> bool:
        """Consume a container terminator if it is next."""
        if self._pos >= len(self._data):
            raise DecodeError(f"unterminated {what}: missing 'e' terminator", self._pos)
        if self._data[self._pos] == _END_BYTE:
            self._pos += 1
            return True
        return False

    def _read_tag(self) -> Tuple[Tag, int, int]:
        """Read a tag token including its ``:``.

        Returns:
            (tag, inline length or 0, offset where the token started)
        """
        start = self._pos
        self._peek("value")
        token = self._read_until(wire.DELIMITER, "wire token")
        if not token:
            raise DecodeError("empty wire token", start)

        try:
            tag = Tag(chr(token[0]))
        except ValueError:
            raise DecodeError(f"invalid wire type {chr(token[0])!r}", start) from None

        if tag.is_length_prefixed:
            digits = token[1:]
            if not digits or not digits.isdigit():
                raise DecodeError(f"invalid length {digits!r} in {tag.name.lower()} token", start)
            return tag, int(digits), start

        if len(token) != 1:
            raise DecodeError(f"malformed {tag.name.lower()} token {token!r}", start)
        return tag, 0, start

    def _read_key(self) -> str:
        tag, length, start = self._read_tag()
        if tag is not Tag.KEY:
            raise DecodeError(f"expected dictionary key, got {tag.name.lower()} token", start)
        raw = self._read(length, "dictionary key")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"dictionary key is not valid UTF-8: {e}", start) from e

    def _read_absent(self) -> None:
        start = self._pos
        if self._read(1, "absent value") != wire.END:
            raise DecodeError("malformed absent value", start)

    def _read_bool(self) -> bool:
        return self._read(1, "boolean flag") != wire.FALSE_FLAG

    def _read_int(self) -> int:
        start = self._pos
        literal = self._read_until(wire.END, "int")
        try:
            return _parse_int(literal.decode("ascii"))
        except ValueError as e:
            raise DecodeError(f"invalid integer literal {literal!r}", start) from e

    def _read_float(self) -> float:
        start = self._pos
        literal = self._read_until(wire.FLOAT_END, "float")
        try:
            return float(literal.decode("ascii"))
        except ValueError as e:
            raise DecodeError(f"invalid float literal {literal!r}", start) from e

    def _read_text(self, tag: Tag, length: int) -> bytes:
        start = self._pos
        payload = self._read(length, "text")
        if tag is Tag.RAW_TEXT:
            return payload
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise DecodeError(f"invalid base64 payload: {e}", start) from e

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self._depth += 1
        if self._depth > self.config.max_depth:
            raise DecodeError(f"maximum nesting depth {self.config.max_depth} exceeded", self._pos)
        try:
            yield
        finally:
            self._depth -= 1

    # Create mode

    def _create(self) -> Any:
        tag, length, start = self._read_tag()

        if tag is Tag.ABSENT:
            self._read_absent()
            return None
        if tag is Tag.BOOLEAN:
            return self._read_bool()
        if tag is Tag.INTEGER:
            return self._read_int()
        if tag is Tag.FLOAT:
            return self._read_float()
        if tag in (Tag.RAW_TEXT, Tag.ENCODED_TEXT):
            payload = self._read_text(tag, length)
            try:
                return payload.decode("utf-8")
            except UnicodeDecodeError as e:
                if self.config.bytes_fallback:
                    return payload
                raise DecodeError(f"text is not valid UTF-8: {e}", start) from e
        if tag is Tag.DICT:
            result: Dict[str, Any] = {}
            with self._nested():
                while not self._at_end("dictionary"):
                    name = self._read_key()
                    result[name] = self._create()
            return result
        if tag is Tag.LIST:
            items: List[Any] = []
            with self._nested():
                while not self._at_end("list"):
                    items.append(self._create())
            return items
        return self._unreadable(tag, start)

    # Bind mode

    def _bind(self, spec: TypeSpec, current: Any = None) -> Any:
        if spec.shape is Shape.ANY:
            return self._create()

        tag, length, start = self._read_tag()

        if tag is Tag.ABSENT:
            self._read_absent()
            if isinstance(current, (list, dict)) and spec.shape in (Shape.SEQUENCE, Shape.MAPPING):
                current.clear()
                return current
            return spec.zero()

        if tag is Tag.BOOLEAN:
            self._expect(spec, tag, start, Shape.BOOL)
            return self._convert(spec, self._read_bool(), start)

        if tag is Tag.INTEGER:
            self._expect(spec, tag, start, Shape.INT, Shape.FLOAT)
            return self._convert(spec, self._read_int(), start)

        if tag is Tag.FLOAT:
            self._expect(spec, tag, start, Shape.FLOAT)
            return self._convert(spec, self._read_float(), start)

        if tag in (Tag.RAW_TEXT, Tag.ENCODED_TEXT):
            self._expect(spec, tag, start, Shape.TEXT, Shape.BYTES)
            payload = self._read_text(tag, length)
            if spec.shape is Shape.BYTES:
                return self._convert(spec, payload, start)
            try:
                text = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(f"text is not valid UTF-8: {e}", start) from e
            return self._convert(spec, text, start)

        if tag is Tag.DICT:
            self._expect(spec, tag, start, Shape.MAPPING, Shape.RECORD)
            if spec.shape is Shape.RECORD:
                return self._bind_record(spec, current, start)
            return self._bind_mapping(spec, current)

        if tag is Tag.LIST:
            self._expect(spec, tag, start, Shape.SEQUENCE)
            return self._bind_sequence(spec, current)

        return self._unreadable(tag, start)

    def _expect(self, spec: TypeSpec, tag: Tag, start: int, *shapes: Shape) -> None:
        if spec.shape not in shapes:
            raise DecodeError(f"cannot decode {tag.name.lower()} into {spec.describe()}", start)

    def _convert(self, spec: TypeSpec, value: Any, start: int) -> Any:
        container = spec.container
        if container is None or type(value) is container:
            return value
        try:
            return container(value)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"cannot convert {value!r} to {spec.describe()}: {e}", start) from e

    def _unreadable(self, tag: Tag, start: int) -> Any:
        if tag is Tag.CUSTOM:
            raise DecodeError("custom type decoding is not supported", start)
        raise DecodeError(f"invalid wire type {tag.value!r}", start)

    def _bind_mapping(self, spec: TypeSpec, current: Any) -> Dict[str, Any]:
        target = current if isinstance(current, dict) else spec.container()
        value_spec = spec.item()
        with self._nested():
            while not self._at_end("dictionary"):
                name = self._read_key()
                target[name] = self._bind(value_spec, target.get(name))
        return target

    def _bind_sequence(self, spec: TypeSpec, current: Any) -> Any:
        in_place = isinstance(current, list)
        items: List[Any] = current if in_place else []
        index = 0
        with self._nested():
            while not self._at_end("list"):
                item_spec = spec.item(index)
                if index < len(items):
                    existing = items[index]
                    if item_spec.shape is Shape.ANY:
                        item_spec = self._discover(existing)
                    items[index] = self._bind(item_spec, existing)
                else:
                    items.append(self._bind(item_spec))
                index += 1
        del items[index:]

        if in_place or spec.container in (None, list):
            return items
        return spec.container(items)

    def _discover(self, existing: Any) -> TypeSpec:
        """Element spec for overwriting ``existing`` in a dynamically typed list.

        Container elements are filled in place when the incoming value has the
        same shape; anything else is replaced by a freshly created value.
        """
        spec = spec_for_instance(existing)
        incoming = self._data[self._pos:self._pos + 1]
        if spec.shape is Shape.SEQUENCE and incoming == Tag.LIST.value.encode():
            return spec
        if spec.shape in (Shape.MAPPING, Shape.RECORD) and incoming == Tag.DICT.value.encode():
            return spec
        return ANY_SPEC

    def _bind_record(self, spec: TypeSpec, current: Any, start: int) -> Any:
        record_type = spec.container
        schema = resolve(record_type)
        in_place = isinstance(current, record_type)
        values: Dict[str, Any] = {}

        with self._nested():
            while not self._at_end("dictionary"):
                key_start = self._pos
                name = self._read_key()
                field_schema = schema.field_for(name)
                if field_schema is None:
                    logger.debug("Skipping unknown key %r for %s", name, record_type.__name__)
                    self._create()
                    continue

                if not in_place:
                    values[field_schema.name] = self._bind(field_schema.spec)
                    continue

                # Nested records are always allocated fresh
                existing = None
                if field_schema.spec.shape is not Shape.RECORD:
                    existing = getattr(current, field_schema.name, None)
                value = self._bind(field_schema.spec, existing)
                try:
                    setattr(current, field_schema.name, value)
                except (AttributeError, TypeError, ValueError) as e:
                    raise DecodeError(
                        f"cannot set {record_type.__name__}.{field_schema.name}: {e}", key_start
                    ) from e

        if in_place:
            return current
        return self._build(schema, values, start)

    def _build(self, schema: RecordSchema, values: Dict[str, Any], start: int) -> Any:
        try:
            return schema.build(values)
        except (TypeError, ValueError) as e:
            raise DecodeError(
                f"failed to construct {schema.record_type.__name__}: {e}", start
            ) from e


def _parse_int(literal: str) -> int:
    """Parse an integer literal, accepting base prefixes (0x, 0o, 0b) and underscores.

    A leading zero followed by octal digits is read as octal.
    """
    try:
        return int(literal, 0)
    except ValueError:
        if _LEGACY_OCTAL.fullmatch(literal):
            return int(literal, 8)
        raise


def decode(data: Buffer, target: Any = None, *, config: Optional[CodecConfig] = None) -> Any:
    """Decode a utcode document.

    Args:
        data: Encoded document
        target: None to build a dynamic value tree; a type annotation to build a
            value of that type; or a list, dict or record instance to fill in place
        config: Codec configuration

    Returns:
        The decoded value

    Raises:
        DecodeError: If the data is malformed or incompatible with the target
        SchemaError: If the target annotation has no wire representation

    Examples:
        ```python
        from typing import Optional
        from utcode import decode, encode

        decode(b"ut:i:616e")                      # 616
        decode(encode(["foo", "bar"]), list[str])  # ["foo", "bar"]

        product = decode(data, Product)           # new Product instance
        existing = Product(name="", description="", quantity=0)
        decode(data, existing)                    # fills existing in place

        decode(b"ut:n:e", Optional[Product])      # None
        ```
    """
    return Decoder(data, config=config).decode(target)


def load(fp: IO[bytes], target: Any = None, *, config: Optional[CodecConfig] = None) -> Any:
    """Read a whole binary stream and decode it."""
    return decode(fp.read(), target, config=config)
