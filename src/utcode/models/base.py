"""Base record class and utcode-specific Pydantic configuration.

This module provides the BaseRecord class. Any Pydantic model or dataclass can
be encoded; BaseRecord adds configuration suited to in-place decoding and
convenience methods.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from ..codec.decoder import decode
from ..codec.encoder import encode
from ..config import CodecConfig

R = TypeVar("R", bound="BaseRecord")


class BaseRecord(BaseModel):
    """Base class for utcode records.

    Fields are written in declaration order. The wire key of a field is its
    name with the first character lower-cased, unless overridden with
    ``WireKey()`` or a Pydantic alias.

    Example:
        >>> from typing import Optional
        >>> class ProductImage(BaseRecord):
        ...     large: str
        ...     medium: str
        ...     small: str
        >>> class Product(BaseRecord):
        ...     name: str
        ...     description: str = WireKey("desc", default="")
        ...     quantity: int = 0
        ...     image: Optional[ProductImage] = None
        >>> data = Product(name="Shirt").to_utcode()
        >>> Product.from_utcode(data).name
        'Shirt'
    """

    model_config = ConfigDict(
        strict=False,
        arbitrary_types_allowed=True,
        # In-place decoding assigns field by field
        validate_assignment=True,
        # Records can be built by attribute name when fields carry aliases
        populate_by_name=True,
    )

    def to_utcode(self, *, config: Optional[CodecConfig] = None) -> bytes:
        """Encode this record as a utcode document."""
        return encode(self, config=config)

    @classmethod
    def from_utcode(cls: type[R], data: Any, *, config: Optional[CodecConfig] = None) -> R:
        """Decode a utcode document into a new instance of this record."""
        result: R = decode(data, cls, config=config)
        return result

    def update_from_utcode(self: R, data: Any, *, config: Optional[CodecConfig] = None) -> R:
        """Decode a utcode document into this instance, field by field."""
        decode(data, self, config=config)
        return self
