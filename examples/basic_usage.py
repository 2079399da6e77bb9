#!/usr/bin/env python3
"""Basic usage example for utcode.

This example demonstrates:
1. Defining a record with Pydantic
2. Encoding to a utcode document
3. Decoding back into a new record and into an existing one
4. Decoding without a destination type
5. Calculating field sizes
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from utcode import BaseRecord, WireKey, decode, encode, encoded_size, field_sizes


class ProductImage(BaseRecord):
    """Image variants of a product."""

    large: str
    medium: str
    small: str


class Product(BaseRecord):
    """Catalog product.

    Field names are capitalized; their wire keys are lower-cased, and the
    description travels under a shorter key.
    """

    Name: str
    Description: str = WireKey("desc", default="")
    Quantity: int = Field(default=0, ge=0)
    Image: Optional[ProductImage] = None


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("utcode Basic Usage Example")
    print("=" * 60)
    print()

    print("1. Creating a product record...")
    product = Product(
        Name="Shirt",
        Description="black shirt",
        Quantity=5,
        Image=ProductImage(large="large", medium="__medium", small="smallllll"),
    )
    print(f"   {product!r}")
    print()

    print("2. Encoding...")
    data = encode(product)
    print(f"   Document: {data.decode('ascii')}")
    print(f"   Size: {len(data)} bytes")
    print()

    print("3. Analyzing field sizes...")
    for field_name, size in field_sizes(product).items():
        print(f"   {field_name}: {size} bytes")
    print(f"   Total: {encoded_size(product)} bytes")
    print()

    print("4. Decoding into a new record...")
    decoded = decode(data, Product)
    print(f"   {decoded!r}")
    if decoded == product:
        print("   ✓ Round-trip successful! Records match.")
    else:
        print("   ✗ Round-trip failed! Records don't match.")
    print()

    print("5. Decoding into an existing record...")
    existing = Product(Name="placeholder", Quantity=99)
    decode(encode({"quantity": 1}), existing)
    print(f"   Name: {existing.Name}, Quantity: {existing.Quantity}")
    print()

    print("6. Decoding without a destination type...")
    print(f"   {decode(data)}")
    print()

    print("7. Comparing to JSON...")
    json_bytes = product.model_dump_json().encode("utf-8")
    print(f"   utcode size: {len(data)} bytes")
    print(f"   JSON size: {len(json_bytes)} bytes")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
