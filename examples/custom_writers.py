#!/usr/bin/env python3
"""Custom writer example for utcode.

This example demonstrates:
1. Registering writers for types the codec does not know (Decimal, Enum)
2. Writing several documents to one stream
3. Encoding options: collapsing whole-valued floats
4. Handling decode errors
"""

from __future__ import annotations

import dataclasses
import decimal
import enum
import io

from utcode import CodecConfig, DecodeError, Encoder, decode


class Phase(enum.Enum):
    """Order phase."""

    OPEN = "open"
    SHIPPED = "shipped"


@dataclasses.dataclass
class Order:
    """Order line with values that need custom writers."""

    sku: str
    price: decimal.Decimal
    phase: Phase
    weight_kg: float


def write_decimal(value: decimal.Decimal, encoder: Encoder) -> None:
    # Decimals travel as text to keep every digit
    encoder.encode_value(str(value))


def write_enum(value: enum.Enum, encoder: Encoder) -> None:
    encoder.encode_value(value.value)


def main() -> None:
    """Run the custom writer example."""
    print("=" * 60)
    print("utcode Custom Writer Example")
    print("=" * 60)
    print()

    orders = [
        Order(sku="A-1", price=decimal.Decimal("9.99"), phase=Phase.OPEN, weight_kg=2.0),
        Order(sku="B-7", price=decimal.Decimal("120.50"), phase=Phase.SHIPPED, weight_kg=0.25),
    ]

    sink = io.BytesIO()
    encoder = Encoder(sink, config=CodecConfig(collapse_integral_floats=True))
    encoder.register(decimal.Decimal, write_decimal)
    encoder.register(enum.Enum, write_enum)

    print("1. Encoding orders one document at a time...")
    documents = []
    for order in orders:
        start = sink.tell()
        encoder.encode(order)
        documents.append(sink.getvalue()[start:])
        print(f"   {documents[-1].decode('ascii')}")
    print()

    print("2. Decoding documents without a destination type...")
    for document in documents:
        print(f"   {decode(document)}")
    print()

    print("3. Decoding a damaged document...")
    try:
        decode(documents[0][:-4])
    except DecodeError as e:
        print(f"   DecodeError: {e}")
        print(f"   Fault offset: {e.offset}")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
