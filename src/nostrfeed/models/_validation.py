"""Shared validation helpers for model dataclasses.

Private module, not part of the public API. Used by ``__post_init__``
methods in sibling model modules so invalid instances never escape the
constructor.
"""

from __future__ import annotations

import string
from collections.abc import Sequence
from typing import Any


_HEX_DIGITS = frozenset(string.hexdigits.lower())


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_int(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative Unix timestamp in seconds."""
    validate_int(value, name)


def validate_hex(value: Any, name: str, *, nbytes: int) -> None:
    """Raise if *value* is not lowercase hex encoding exactly *nbytes* bytes."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if len(value) != nbytes * 2:
        raise ValueError(f"{name} must be {nbytes * 2} hex characters, got {len(value)}")
    if not set(value) <= _HEX_DIGITS:
        raise ValueError(f"{name} must be lowercase hex")


def validate_str(value: Any, name: str) -> None:
    """Raise ``TypeError`` if *value* is not a ``str``."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")


def validate_str_not_empty(value: Any, name: str) -> None:
    """Raise if *value* is not a non-empty ``str``."""
    validate_str(value, name)
    if not value:
        raise ValueError(f"{name} must not be empty")


def freeze_tags(tags: Any, name: str = "tags") -> tuple[tuple[str, ...], ...]:
    """Validate a tag matrix and return it as a tuple of tuples.

    Each inner sequence keeps its order, which is semantically significant.
    Strings are rejected as sequences so ``["e", "abc"]`` cannot be
    mistaken for a list of one-character tags.
    """
    if isinstance(tags, str | bytes) or not isinstance(tags, Sequence):
        raise TypeError(f"{name} must be a sequence of sequences of str")
    frozen: list[tuple[str, ...]] = []
    for i, tag in enumerate(tags):
        if isinstance(tag, str | bytes) or not isinstance(tag, Sequence):
            raise TypeError(f"{name}[{i}] must be a sequence of str, got {type(tag).__name__}")
        for value in tag:
            validate_str(value, f"{name}[{i}] value")
        frozen.append(tuple(tag))
    return tuple(frozen)
