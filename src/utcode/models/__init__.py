"""Record modeling for utcode.

This module provides the BaseRecord class and field helpers for defining
records with explicit wire keys.
"""

from __future__ import annotations

from .base import BaseRecord
from .fields import Unexported, WireKey, wire_field

__all__ = [
    "BaseRecord",
    "WireKey",
    "Unexported",
    "wire_field",
]
