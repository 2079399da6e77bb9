"""Utility functions for utcode.

This module provides size calculation and logging helpers.
"""

from __future__ import annotations

from .log import setup_logging
from .sizing import encoded_size, field_sizes

__all__ = [
    "encoded_size",
    "field_sizes",
    "setup_logging",
]
