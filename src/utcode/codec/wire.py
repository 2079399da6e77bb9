"""utcode wire grammar.

This module holds the constants and the token writers for the textual wire
format. It is pure: every function maps a Python value to the bytes of one
token and nothing here keeps state.

Grammar::

    document := "ut:" value
    value    := absent | boolean | integer | float | text | udata | dict | list
    absent   := "n:e"
    boolean  := "b:" ("0" | "1")
    integer  := "i:" ["-"] digit+ "e"
    float    := "f:" digit+ "." digit+ "z"
    text     := "s" length ":" <length raw bytes>
    udata    := "u" length ":" <length base64 chars>
    dict     := "d:" (key value)* "e"
    key      := "k" length ":" <length raw bytes>
    list     := "l:" value* "e"

Lengths are ASCII decimal digits. ``u`` lengths count base64 characters,
``s`` and ``k`` lengths count raw bytes.
"""

from __future__ import annotations

import base64
import enum

# Every document starts with this prefix.
PREFIX = b"ut:"

DELIMITER = b":"
END = b"e"
FLOAT_END = b"z"

TRUE_FLAG = b"1"
FALSE_FLAG = b"0"


class Tag(str, enum.Enum):
    """Leading character of a wire token."""

    ABSENT = "n"
    BOOLEAN = "b"
    INTEGER = "i"
    FLOAT = "f"
    RAW_TEXT = "s"  # decode only, never produced by the encoder
    ENCODED_TEXT = "u"
    DICT = "d"
    LIST = "l"
    CUSTOM = "c"  # reserved, not decodable
    KEY = "k"

    @property
    def is_length_prefixed(self) -> bool:
        return self in _LENGTH_PREFIXED


_LENGTH_PREFIXED = frozenset({Tag.RAW_TEXT, Tag.ENCODED_TEXT, Tag.KEY})


def absent() -> bytes:
    return b"n:e"


def boolean(flag: bool) -> bytes:
    return b"b:" + (TRUE_FLAG if flag else FALSE_FLAG)


def integer(value: int) -> bytes:
    return b"i:%de" % value


def floating(value: float) -> bytes:
    """Float token using Python's shortest round-trip representation."""
    return b"f:" + repr(value).encode("ascii") + FLOAT_END


def length_prefixed(tag: Tag, payload: bytes) -> bytes:
    return tag.value.encode("ascii") + b"%d:" % len(payload) + payload


def encoded_text(payload: bytes) -> bytes:
    """``u`` token: standard base64 with padding, length in base64 chars."""
    return length_prefixed(Tag.ENCODED_TEXT, base64.b64encode(payload))


def raw_text(payload: bytes) -> bytes:
    return length_prefixed(Tag.RAW_TEXT, payload)


def key(name: str) -> bytes:
    return length_prefixed(Tag.KEY, name.encode("utf-8"))


def open_dict() -> bytes:
    return b"d:"


def open_list() -> bytes:
    return b"l:"


def end() -> bytes:
    return END
