"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture
def sample_text() -> str:
    """Text with multi-byte UTF-8 characters."""
    return "Ünïcödé ✓ 水 🐟"


@pytest.fixture
def sample_mapping() -> dict[str, str]:
    """Text-keyed mapping for testing."""
    return {"key1": "value1", "key2": "value2"}


@pytest.fixture
def sample_document() -> bytes:
    """Encoded form of sample_mapping."""
    return b"ut:d:k4:key1u8:dmFsdWUxk4:key2u8:dmFsdWUye"
