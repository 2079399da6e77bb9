"""Value shapes and destination type descriptors.

The encoder dispatches on the *shape* of a runtime value rather than on its
concrete type, and the decoder describes every destination with a TypeSpec
built once from a type annotation. Both use the same closed Shape enumeration.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import enum
import numbers
import types
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel

from ..exceptions import SchemaError


class Shape(enum.Enum):
    """Closed set of value categories understood by the codec."""

    ANY = "any"
    ABSENT = "absent"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    RECORD = "record"


def is_record_type(tp: Any) -> bool:
    """Return True for pydantic model classes and dataclass types."""
    return isinstance(tp, type) and (issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp))


def is_record(value: Any) -> bool:
    """Return True for pydantic model and dataclass instances."""
    return is_record_type(type(value))


def shape_of(value: Any) -> Optional[Shape]:
    """Classify a runtime value.

    Args:
        value: Any Python value

    Returns:
        The value's Shape, or None when the codec has no rule for it
    """
    if value is None:
        return Shape.ABSENT
    # bool is an int subclass, test it first
    if isinstance(value, bool):
        return Shape.BOOL
    if isinstance(value, numbers.Integral):
        return Shape.INT
    if isinstance(value, numbers.Real):
        return Shape.FLOAT
    if isinstance(value, str):
        return Shape.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Shape.BYTES
    if isinstance(value, cabc.Mapping):
        return Shape.MAPPING
    if is_record(value):
        return Shape.RECORD
    if isinstance(value, (cabc.Sequence, cabc.Set)):
        return Shape.SEQUENCE
    return None


@dataclass(frozen=True)
class TypeSpec:
    """Description of a decode destination.

    Attributes:
        shape: Category of values the destination accepts
        annotation: The annotation this spec was built from
        optional: Whether the destination also accepts None
        container: Class used to build the decoded value (int, str, list,
            tuple, dict, the record class, ...)
        items: Element specs; one for homogeneous sequences and mapping values,
            one per position for fixed-length tuples
        variadic: False for fixed-length tuples
    """

    shape: Shape
    annotation: Any = Any
    optional: bool = False
    container: Optional[type] = None
    items: Tuple["TypeSpec", ...] = ()
    variadic: bool = True

    def item(self, index: int = 0) -> TypeSpec:
        """Spec of the element at ``index`` (or of mapping values)."""
        if not self.items:
            return ANY_SPEC
        if self.variadic:
            return self.items[0]
        if index < len(self.items):
            return self.items[index]
        return ANY_SPEC

    def zero(self) -> Any:
        """Absent equivalent of this destination."""
        if self.optional or self.container is None:
            return None
        if self.shape in _ZEROS:
            return _ZEROS[self.shape]
        if self.shape in (Shape.SEQUENCE, Shape.MAPPING):
            return self.container()
        return None

    def describe(self) -> str:
        annotation = self.annotation
        if isinstance(annotation, type):
            return annotation.__name__
        return repr(annotation)


ANY_SPEC = TypeSpec(Shape.ANY)

_ZEROS: dict[Shape, Any] = {
    Shape.BOOL: False,
    Shape.INT: 0,
    Shape.FLOAT: 0.0,
    Shape.TEXT: "",
    Shape.BYTES: b"",
}

_SCALARS = (
    (bool, Shape.BOOL),
    (int, Shape.INT),
    (float, Shape.FLOAT),
    (str, Shape.TEXT),
    (bytes, Shape.BYTES),
    (bytearray, Shape.BYTES),
)

_SEQUENCE_ORIGINS: dict[Any, type] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    cabc.Sequence: list,
    cabc.MutableSequence: list,
    cabc.Collection: list,
    cabc.Iterable: list,
    cabc.Set: frozenset,
    cabc.MutableSet: set,
}

_MAPPING_ORIGINS = (dict, cabc.Mapping, cabc.MutableMapping)


def type_spec(annotation: Any) -> TypeSpec:
    """Build a TypeSpec from a type annotation.

    Args:
        annotation: A class or typing construct (``int``, ``list[str]``,
            ``Optional[Image]``, ``dict[str, Any]``, a record class, ...)

    Returns:
        TypeSpec describing the destination

    Raises:
        SchemaError: If the annotation has no wire representation
    """
    if annotation is Any or annotation is object or annotation is None or annotation is type(None):
        return TypeSpec(Shape.ANY, annotation)

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return type_spec(args[0])

    if origin is Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        optional = len(members) < len(args)
        if len(members) == 1:
            return dataclasses.replace(type_spec(members[0]), optional=optional)
        # Ambiguous unions are decoded dynamically
        return TypeSpec(Shape.ANY, annotation, optional=optional)

    if origin is Literal:
        return TypeSpec(Shape.ANY, annotation)

    if origin is not None:
        if origin in _MAPPING_ORIGINS:
            key_type, value_type = args if args else (str, Any)
            if key_type not in (str, Any):
                raise SchemaError(f"mapping destinations support only str keys, got {key_type!r}")
            return TypeSpec(Shape.MAPPING, annotation, container=dict, items=(type_spec(value_type),))

        if origin in _SEQUENCE_ORIGINS:
            container = _SEQUENCE_ORIGINS[origin]
            if origin is tuple and args and not (len(args) == 2 and args[1] is Ellipsis):
                if args == ((),):
                    args = ()
                return TypeSpec(
                    Shape.SEQUENCE,
                    annotation,
                    container=tuple,
                    items=tuple(type_spec(arg) for arg in args),
                    variadic=False,
                )
            item = type_spec(args[0]) if args else ANY_SPEC
            return TypeSpec(Shape.SEQUENCE, annotation, container=container, items=(item,))

        raise SchemaError(f"unsupported destination type {annotation!r}")

    if isinstance(annotation, type):
        for base, shape in _SCALARS:
            if issubclass(annotation, base):
                return TypeSpec(shape, annotation, container=annotation)

        if is_record_type(annotation):
            return TypeSpec(Shape.RECORD, annotation, container=annotation)

        if issubclass(annotation, dict):
            return TypeSpec(Shape.MAPPING, annotation, container=annotation)
        if issubclass(annotation, cabc.Mapping):
            return TypeSpec(Shape.MAPPING, annotation, container=dict)

        if issubclass(annotation, (list, tuple, set, frozenset)):
            return TypeSpec(Shape.SEQUENCE, annotation, container=annotation)
        if annotation in _SEQUENCE_ORIGINS:
            return TypeSpec(Shape.SEQUENCE, annotation, container=_SEQUENCE_ORIGINS[annotation])

    raise SchemaError(f"unsupported destination type {annotation!r}")


def spec_for_instance(value: Any) -> TypeSpec:
    """Spec for binding into an existing container instance.

    Lists, dicts and records get a spec whose element types are unknown, so
    their elements are discovered one by one while decoding. Anything else
    yields ANY_SPEC.
    """
    if isinstance(value, dict):
        return TypeSpec(Shape.MAPPING, type(value), container=type(value))
    if isinstance(value, list):
        return TypeSpec(Shape.SEQUENCE, type(value), container=type(value))
    if is_record(value):
        return TypeSpec(Shape.RECORD, type(value), container=type(value))
    return ANY_SPEC
