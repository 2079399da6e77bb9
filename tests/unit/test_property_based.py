"""Property-based tests using hypothesis."""

from __future__ import annotations

import dataclasses
from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from utcode import CodecConfig, decode, encode, encoded_size

scalars = (
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=False)
    | st.text()
)

documents = st.recursive(
    scalars,
    lambda children: st.lists(children, max_size=5)
    | st.dictionaries(st.text(max_size=10), children, max_size=5),
    max_leaves=25,
)


@dataclasses.dataclass
class Reading:
    """Record for property testing."""

    sensor: str = ""
    value: float = 0.0
    samples: list[int] = dataclasses.field(default_factory=list)
    ok: bool = False


class TestCodecProperties:
    """Property-based tests for the codec."""

    @given(value=documents)
    def test_dynamic_roundtrip(self, value: Any) -> None:
        """Test decode(encode(v)) reproduces any JSON-like tree."""
        assert decode(encode(value)) == value

    @given(value=documents)
    def test_encode_deterministic(self, value: Any) -> None:
        """Test encoding the same value twice gives the same bytes."""
        assert encode(value) == encode(value)

    @given(value=documents)
    def test_encoded_size_matches(self, value: Any) -> None:
        assert encoded_size(value) == len(encode(value))

    @given(payload=st.binary(max_size=512))
    def test_bytes_roundtrip(self, payload: bytes) -> None:
        """Test arbitrary bytes survive the encoded text token."""
        assert decode(encode(payload), bytes) == payload

    @given(text=st.text())
    def test_text_roundtrip(self, text: str) -> None:
        assert decode(encode(text), str) == text

    @given(value=st.integers())
    def test_integer_roundtrip(self, value: int) -> None:
        assert decode(encode(value), int) == value

    @given(value=st.floats(allow_nan=False))
    def test_float_roundtrip(self, value: float) -> None:
        """Test floats survive with and without whole-value collapsing."""
        assert decode(encode(value), float) == value

        collapsed = encode(value, config=CodecConfig(collapse_integral_floats=True))
        assert decode(collapsed, float) == value

    @given(
        sensor=st.text(max_size=20),
        value=st.floats(allow_nan=False, allow_infinity=False),
        samples=st.lists(st.integers(), max_size=10),
        ok=st.booleans(),
    )
    def test_record_roundtrip(
        self, sensor: str, value: float, samples: list[int], ok: bool
    ) -> None:
        reading = Reading(sensor=sensor, value=value, samples=samples, ok=ok)
        assert decode(encode(reading), Reading) == reading

    @given(
        before=st.lists(st.integers(), max_size=10),
        after=st.lists(st.integers(), max_size=10),
    )
    def test_in_place_list_matches_fresh_decode(self, before: list[int], after: list[int]) -> None:
        """Test filling an existing list leaves exactly the decoded items."""
        target = list(before)
        decode(encode(after), target)
        assert target == after
