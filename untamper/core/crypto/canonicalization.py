"""
Canonical encoding of audit log content for hashing.

The encoding is the one the unTamper service uses when it signs a record:
objects have their keys sorted and are rebuilt recursively, every primitive
is written as its JSON literal. The result is byte-identical for any two
values with the same keys and elements, regardless of insertion order.

Only a closed set of value kinds is accepted: ``None``, ``bool``, ``int``,
``float``, ``str``, sequences (``list``/``tuple``) and string-keyed mappings.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import TypeAlias

import rfc8785

from untamper.core.errors import CanonicalizationError

CanonicalValue: TypeAlias = (
    None
    | bool
    | int
    | float
    | str
    | list["CanonicalValue"]
    | tuple["CanonicalValue", ...]
    | Mapping[str, "CanonicalValue"]
)

SHA256_ALGORITHM = "sha-256"


def _sort_key(key: str) -> bytes:
    # UTF-16 code unit order, which is how the signer's runtime sorts object keys
    return key.encode("utf-16-be", "surrogatepass")


def _encode_literal(value: bool | int | float | str) -> str:
    """Encode a primitive with ECMAScript number and string formatting."""
    try:
        return rfc8785.dumps(value).decode("utf-8")
    except ValueError as exc:
        raise CanonicalizationError(f"Cannot canonicalize {value!r}: {exc}") from exc


def _encode(value: CanonicalValue) -> str:
    match value:
        case None:
            return "null"
        case bool() | int() | float() | str():
            return _encode_literal(value)
        case list() | tuple():
            return "[" + ",".join(_encode(item) for item in value) + "]"
        case Mapping():
            pairs: list[str] = []
            for key in sorted(value, key=_check_key):
                pairs.append(f"{_encode_literal(key)}:{_encode(value[key])}")
            return "{" + ",".join(pairs) + "}"
        case _:
            raise CanonicalizationError(
                f"Unsupported value of type {type(value).__name__} in canonical content"
            )


def _check_key(key: object) -> bytes:
    if not isinstance(key, str):
        raise CanonicalizationError(f"Object keys must be strings, got {type(key).__name__}")
    return _sort_key(key)


def canonicalize(value: CanonicalValue) -> str:
    """Return the canonical text of ``value``.

    Raises
    ------
    CanonicalizationError
        If ``value`` (or anything nested in it) is not one of the supported
        kinds, a mapping has a non-string key, or a float is not finite.
    """
    return _encode(value)


def canonicalize_bytes(value: CanonicalValue) -> bytes:
    """Return the canonical UTF-8 bytes of ``value``, ready for digesting."""
    return canonicalize(value).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Lowercase hex SHA-256 digest of ``data``."""
    return hashlib.sha256(data).hexdigest()
