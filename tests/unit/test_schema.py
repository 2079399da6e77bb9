"""Unit tests for record schema resolution and destination type specs."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Optional, Union

import pytest
from pydantic import BaseModel, Field

from utcode import (
    BaseRecord,
    EncodeError,
    SchemaError,
    Unexported,
    WireKey,
    decode,
    encode,
    wire_field,
)
from utcode.codec.schema import RecordSchema, resolve, wire_key
from utcode.codec.shapes import Shape, TypeSpec, shape_of, type_spec


class Product(BaseRecord):
    """Record with override, alias and hidden fields."""

    Name: str
    description: str = WireKey("desc", default="")
    sku: str = Field(default="", alias="SKU")
    cache_token: str = Unexported(default="")
    internal: int = Field(default=0, exclude=True)


@dataclasses.dataclass
class Sample:
    """Dataclass with override, hidden and non-init fields."""

    x_pos: float = wire_field("x", default=0.0)
    hidden: str = wire_field("-", default="")
    _private: int = 0
    count: int = dataclasses.field(default=0, init=False)


class Lookup(BaseModel):
    """Field type with no decode destination."""

    lookup: dict[int, str] = Field(default_factory=dict)


class Collision(BaseModel):
    """Two fields mapping to one wire key."""

    Value: int = 0
    value: int = 0


class TestWireKey:
    """Test wire key derivation."""

    @pytest.mark.parametrize(
        "name,expected",
        [("Description", "description"), ("name", "name"), ("URL", "uRL"), ("X", "x"), ("", "")],
    )
    def test_first_character_lower_cased(self, name: str, expected: str) -> None:
        assert wire_key(name) == expected

    def test_override_wins(self) -> None:
        assert wire_key("Description", "desc") == "desc"

    def test_empty_override_ignored(self) -> None:
        assert wire_key("Name", "") == "name"


class TestModelSchema:
    """Test schema resolution for pydantic models."""

    def test_wire_keys_in_declaration_order(self) -> None:
        schema = resolve(Product)
        assert [f.wire_key for f in schema.fields] == ["name", "desc", "SKU"]
        assert [f.name for f in schema] == ["Name", "description", "sku"]

    def test_hidden_fields_not_written(self) -> None:
        value = Product(Name="Shirt", cache_token="secret", internal=7)
        data = encode(value)
        assert b"secret" not in data
        assert b"cache" not in data
        assert b"internal" not in data

    def test_round_trip_with_overrides(self) -> None:
        value = Product(Name="Shirt", description="black", SKU="A-1")
        assert decode(encode(value), Product) == value

    def test_hidden_key_on_wire_is_ignored(self) -> None:
        data = encode({"name": "Mug", "cache_token": "x", "cacheToken": "y"})
        decoded = decode(data, Product)
        assert decoded.Name == "Mug"
        assert decoded.cache_token == ""

    def test_alias_used_as_constructor_keyword(self) -> None:
        schema = resolve(Product)
        assert schema.field_for("SKU") is not None
        assert schema.field_for("SKU").init_key == "SKU"
        assert schema.field_for("sku") is None

    def test_optional_spec(self) -> None:
        class Holder(BaseRecord):
            inner: Optional[Product] = None

        field_schema = resolve(Holder).fields[0]
        assert field_schema.spec.shape is Shape.RECORD
        assert field_schema.spec.optional

    def test_duplicate_wire_keys(self) -> None:
        with pytest.raises(SchemaError, match="share wire key 'value'"):
            resolve(Collision)

    def test_unresolvable_forward_reference(self) -> None:
        class Dangling(BaseModel):
            child: Optional["Missing"] = None  # noqa: F821

        with pytest.raises(SchemaError, match="cannot resolve annotations"):
            RecordSchema(Dangling)

    def test_unsupported_field_type_resolves(self) -> None:
        """Field types are checked only when a document is decoded into them."""
        schema = resolve(Lookup)
        assert [f.wire_key for f in schema] == ["lookup"]
        assert schema.fields[0].annotation == dict[int, str]

    def test_unsupported_field_type_encodes(self) -> None:
        assert encode(Lookup()) == b"ut:d:k6:lookupd:ee"
        assert encode(Lookup(lookup={"1": "one"})) == b"ut:d:k6:lookupd:k1:1u4:b25le"

    def test_unsupported_field_type_non_text_key(self) -> None:
        with pytest.raises(EncodeError, match="only str keys"):
            encode(Lookup(lookup={1: "one"}))

    def test_unsupported_field_type_fails_on_decode(self) -> None:
        with pytest.raises(SchemaError, match="Lookup.lookup"):
            decode(encode(Lookup()), Lookup)

        # Documents that leave the field out still decode
        assert decode(b"ut:d:e", Lookup) == Lookup()

    def test_not_a_record(self) -> None:
        with pytest.raises(SchemaError, match="not a record type"):
            RecordSchema(dict)

    def test_schema_is_cached(self) -> None:
        assert resolve(Product) is resolve(Product)


class TestDataclassSchema:
    """Test schema resolution for dataclasses."""

    def test_fields(self) -> None:
        schema = resolve(Sample)
        assert [f.wire_key for f in schema] == ["x", "count"]
        assert len(schema) == 2

    def test_non_init_field_assigned_after_construction(self) -> None:
        schema = resolve(Sample)
        assert schema.field_for("count").init_key is None

        decoded = decode(encode({"x": 1.5, "count": 3}), Sample)
        assert decoded.x_pos == 1.5
        assert decoded.count == 3

    def test_round_trip(self) -> None:
        value = Sample(x_pos=2.5, hidden="h")
        value.count = 4
        data = encode(value)
        assert data == b"ut:d:k1:xf:2.5zk5:counti:4ee"

        decoded = decode(data, Sample)
        assert decoded.x_pos == 2.5
        assert decoded.count == 4
        assert decoded.hidden == ""

    def test_items(self) -> None:
        pairs = [(f.wire_key, v) for f, v in resolve(Sample).items(Sample(x_pos=1.0))]
        assert pairs == [("x", 1.0), ("count", 0)]


class TestTypeSpec:
    """Test destination type specs."""

    @pytest.mark.parametrize(
        "annotation,shape",
        [
            (bool, Shape.BOOL),
            (int, Shape.INT),
            (float, Shape.FLOAT),
            (str, Shape.TEXT),
            (bytes, Shape.BYTES),
            (bytearray, Shape.BYTES),
            (list[int], Shape.SEQUENCE),
            (Sequence[str], Shape.SEQUENCE),
            (frozenset[int], Shape.SEQUENCE),
            (dict[str, int], Shape.MAPPING),
            (Mapping[str, Any], Shape.MAPPING),
            (dict, Shape.MAPPING),
            (list, Shape.SEQUENCE),
            (Sample, Shape.RECORD),
            (Any, Shape.ANY),
            (object, Shape.ANY),
            (Union[int, str], Shape.ANY),
        ],
    )
    def test_shapes(self, annotation: Any, shape: Shape) -> None:
        assert type_spec(annotation).shape is shape

    def test_optional(self) -> None:
        spec = type_spec(Optional[int])
        assert spec.shape is Shape.INT
        assert spec.optional
        assert spec.zero() is None

        assert type_spec(int | None).optional

    def test_annotated_unwrapped(self) -> None:
        assert type_spec(Annotated[int, "meta"]).shape is Shape.INT

    def test_element_specs(self) -> None:
        spec = type_spec(dict[str, list[float]])
        assert spec.item().shape is Shape.SEQUENCE
        assert spec.item().item().shape is Shape.FLOAT

    def test_fixed_tuple(self) -> None:
        spec = type_spec(tuple[int, str])
        assert not spec.variadic
        assert spec.item(0).shape is Shape.INT
        assert spec.item(1).shape is Shape.TEXT
        assert spec.item(2).shape is Shape.ANY

    def test_abstract_containers_build_concrete_values(self) -> None:
        assert type_spec(Sequence[int]).zero() == []
        assert decode(encode([1, 2]), Sequence[int]) == [1, 2]

    @pytest.mark.parametrize("annotation", [dict[int, str], complex, set[complex]])
    def test_unsupported(self, annotation: Any) -> None:
        with pytest.raises(SchemaError):
            type_spec(annotation)

    def test_describe(self) -> None:
        assert type_spec(int).describe() == "int"
        assert "list" in type_spec(list[int]).describe()
        assert TypeSpec(Shape.ANY).describe() == "typing.Any"


class TestShapeOf:
    """Test runtime value classification."""

    @pytest.mark.parametrize(
        "value,shape",
        [
            (None, Shape.ABSENT),
            (True, Shape.BOOL),
            (3, Shape.INT),
            (3.5, Shape.FLOAT),
            ("s", Shape.TEXT),
            (b"b", Shape.BYTES),
            (memoryview(b"m"), Shape.BYTES),
            ([1], Shape.SEQUENCE),
            ((1,), Shape.SEQUENCE),
            ({1}, Shape.SEQUENCE),
            ({"a": 1}, Shape.MAPPING),
            (Sample(), Shape.RECORD),
        ],
    )
    def test_known_shapes(self, value: Any, shape: Shape) -> None:
        assert shape_of(value) is shape

    def test_record_class_is_not_a_value(self) -> None:
        assert shape_of(Sample) is None
        assert shape_of(object()) is None
