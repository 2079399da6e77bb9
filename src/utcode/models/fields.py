"""Field helpers for wire key overrides.

This module provides convenience functions to attach a wire key override to a
Pydantic field or a dataclass field.
"""

from __future__ import annotations

import dataclasses
from typing import Any, cast

from pydantic import Field
from pydantic.fields import FieldInfo

from ..codec.schema import SKIP_TAG, TAG_NAME


def WireKey(key: str, **kwargs: Any) -> Any:
    """Create a Pydantic field with an explicit wire key.

    The key is stored in ``json_schema_extra`` and takes precedence over both
    the field name and any alias. ``WireKey("-")`` keeps the field off the wire.

    Args:
        key: Wire key to use for this field
        **kwargs: Additional Field() arguments (default, description, etc.)

    Returns:
        Pydantic FieldInfo suitable for use as a field default.

    Example:
        >>> class Product(BaseRecord):
        ...     description: str = WireKey("desc", default="")
        ...     cache_token: str = WireKey("-", default="")
    """
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[TAG_NAME] = key
    return cast(FieldInfo, Field(json_schema_extra=extra, **kwargs))


def wire_field(key: str, **kwargs: Any) -> Any:
    """Create a dataclass field with an explicit wire key.

    Args:
        key: Wire key to use for this field (``"-"`` keeps it off the wire)
        **kwargs: Additional dataclasses.field() arguments

    Example:
        >>> @dataclasses.dataclass
        ... class Point:
        ...     x_pos: float = wire_field("x", default=0.0)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_NAME] = key
    return dataclasses.field(metadata=metadata, **kwargs)


def Unexported(**kwargs: Any) -> Any:
    """Create a Pydantic field that is never written or read."""
    return WireKey(SKIP_TAG, **kwargs)
