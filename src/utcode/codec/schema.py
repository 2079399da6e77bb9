"""Field schema resolution for record types.

This module maps a record type (a Pydantic model or a dataclass) to the ordered
list of fields that appear on the wire, together with the wire key of each
field and the TypeSpec used to decode it.
"""

from __future__ import annotations

import dataclasses
import functools
import typing
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..exceptions import SchemaError
from .shapes import TypeSpec, type_spec

# Metadata key holding an explicit wire key override
TAG_NAME = "utcode"

# Override value that keeps a field off the wire
SKIP_TAG = "-"


def wire_key(name: str, tag: Optional[str] = None) -> str:
    """Derive the wire key of a field.

    Args:
        name: Declared field name
        tag: Explicit override, if any

    Returns:
        The override when given, else ``name`` with its first character lower-cased

    Example:
        >>> wire_key("Description")
        'description'
        >>> wire_key("Description", "desc")
        'desc'
    """
    if tag:
        return tag
    return name[:1].lower() + name[1:]


@dataclass(frozen=True)
class FieldSchema:
    """Wire information for a single record field.

    Attributes:
        name: Attribute name on the record
        wire_key: Key written on the wire
        init_key: Keyword accepted by the record constructor, or None for
            fields that must be assigned after construction
        annotation: Declared type of the field
        owner: Name of the record class, used in error messages
    """

    name: str
    wire_key: str
    init_key: Optional[str]
    annotation: Any = Any
    owner: str = ""

    @functools.cached_property
    def spec(self) -> TypeSpec:
        """Decode destination spec for the field's annotation.

        Built on first use, so encoding never depends on whether a field
        type can be decoded into.

        Raises:
            SchemaError: If the annotation has no wire representation
        """
        try:
            return type_spec(self.annotation)
        except SchemaError as e:
            raise SchemaError(f"{self.owner}.{self.name}: {e}") from e


class RecordSchema:
    """Ordered field schema of a record type.

    Example:
        >>> schema = RecordSchema.from_type(Product)
        >>> [field.wire_key for field in schema.fields]
        ['name', 'description', 'quantity', 'image']
    """

    def __init__(self, record_type: Type[Any]) -> None:
        """Initialize schema from a record type.

        Args:
            record_type: Pydantic model class or dataclass to introspect
        """
        self.record_type = record_type
        self.fields: List[FieldSchema] = []
        self._by_key: Dict[str, FieldSchema] = {}
        self._introspect()

    @classmethod
    def from_type(cls, record_type: Type[Any]) -> RecordSchema:
        return cls(record_type)

    def __iter__(self) -> Iterator[FieldSchema]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def _introspect(self) -> None:
        if isinstance(self.record_type, type) and issubclass(self.record_type, BaseModel):
            entries = self._model_fields()
        elif dataclasses.is_dataclass(self.record_type):
            entries = self._dataclass_fields()
        else:
            raise SchemaError(f"{self.record_type!r} is not a record type")

        for field_schema in entries:
            if field_schema.wire_key in self._by_key:
                raise SchemaError(
                    f"{self.record_type.__name__}: fields "
                    f"{self._by_key[field_schema.wire_key].name!r} and {field_schema.name!r} "
                    f"share wire key {field_schema.wire_key!r}"
                )
            self._by_key[field_schema.wire_key] = field_schema
            self.fields.append(field_schema)

    def _model_fields(self) -> List[FieldSchema]:
        model = self.record_type
        if not model.__pydantic_complete__:
            # Forward references are resolved lazily by Pydantic
            try:
                model.model_rebuild()
            except NameError as e:
                raise SchemaError(f"{model.__name__}: cannot resolve annotations: {e}") from e

        result = []
        for name, field_info in model.model_fields.items():
            if name.startswith("_") or field_info.exclude is True:
                continue

            tag = _model_tag(field_info)
            if tag == SKIP_TAG:
                continue

            result.append(
                FieldSchema(
                    name=name,
                    wire_key=wire_key(name, tag),
                    init_key=field_info.alias or name,
                    annotation=field_info.annotation,
                    owner=model.__name__,
                )
            )
        return result

    def _dataclass_fields(self) -> List[FieldSchema]:
        try:
            hints = typing.get_type_hints(self.record_type, include_extras=True)
        except (NameError, TypeError) as e:
            raise SchemaError(
                f"{self.record_type.__name__}: cannot resolve annotations: {e}"
            ) from e

        result = []
        for field in dataclasses.fields(self.record_type):
            if field.name.startswith("_"):
                continue

            tag = field.metadata.get(TAG_NAME)
            if tag == SKIP_TAG:
                continue

            result.append(
                FieldSchema(
                    name=field.name,
                    wire_key=wire_key(field.name, tag),
                    init_key=field.name if field.init else None,
                    annotation=hints.get(field.name, Any),
                    owner=self.record_type.__name__,
                )
            )
        return result

    def field_for(self, key: str) -> Optional[FieldSchema]:
        """Look up a field by wire key; unknown keys return None."""
        return self._by_key.get(key)

    def items(self, record: Any) -> Iterator[Tuple[FieldSchema, Any]]:
        """Yield (field, value) pairs of a record instance in declaration order."""
        for field_schema in self.fields:
            yield field_schema, getattr(record, field_schema.name)

    def build(self, values: Dict[str, Any]) -> Any:
        """Construct a record from decoded field values keyed by attribute name.

        Fields absent from ``values`` keep their declared defaults.

        Raises:
            pydantic.ValidationError, TypeError: If the record rejects the values
        """
        kwargs: Dict[str, Any] = {}
        deferred: Dict[str, Any] = {}
        for field_schema in self.fields:
            if field_schema.name not in values:
                continue
            if field_schema.init_key is None:
                deferred[field_schema.name] = values[field_schema.name]
            else:
                kwargs[field_schema.init_key] = values[field_schema.name]

        record = self.record_type(**kwargs)
        for name, value in deferred.items():
            # Works for frozen dataclasses too
            object.__setattr__(record, name, value)
        return record


def _model_tag(field_info: FieldInfo) -> Optional[str]:
    extra = field_info.json_schema_extra
    if isinstance(extra, dict):
        tag = extra.get(TAG_NAME)
        if isinstance(tag, str):
            return tag
    return field_info.alias


@functools.lru_cache(maxsize=None)
def resolve(record_type: Type[Any]) -> RecordSchema:
    """Return the (cached) schema of a record type.

    Raises:
        SchemaError: If the type is not a record or has unusable annotations
    """
    return RecordSchema.from_type(record_type)
