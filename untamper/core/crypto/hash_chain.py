"""
SHA-256 content hashing for hash-chained audit logs.

Each record's hash is ``SHA256(canonical(content))`` where ``content`` holds
the record's payload *and* its ``previousHash`` link, so re-linking a record
to a different predecessor changes its hash just like editing its payload.
"""

from __future__ import annotations

from collections.abc import Mapping

from untamper.core.crypto.canonicalization import (
    SHA256_ALGORITHM,
    CanonicalValue,
    canonicalize_bytes,
    sha256_hex,
)

HASH_ALGORITHM_SHA256 = SHA256_ALGORITHM

# Wire names of the record fields covered by the hash. ``hash``, ``signature``
# and storage identifiers are deliberately absent.
HASHED_FIELDS: tuple[str, ...] = (
    "projectId",
    "sequenceNumber",
    "previousHash",
    "timestamp",
    "eventTime",
    "action",
    "result",
    "actor",
    "target",
    "changes",
    "context",
    "metadata",
)


def compute_content_hash(
    content: Mapping[str, CanonicalValue],
    *,
    hash_algorithm: str = HASH_ALGORITHM_SHA256,
) -> str:
    """Compute the hex digest of a record's hashed content.

    Parameters
    ----------
    content:
        Mapping of wire field name to value, normally built by
        ``LogRecord.hash_content()``.

    Returns
    -------
    str
        Lowercase hex-encoded SHA-256 digest.

    Raises
    ------
    CanonicalizationError
        If the content holds a value the canonical encoding cannot represent.
    """
    if hash_algorithm != HASH_ALGORITHM_SHA256:
        raise ValueError(f"Unsupported hash algorithm: {hash_algorithm}")
    return sha256_hex(canonicalize_bytes(content))
