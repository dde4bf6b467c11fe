"""
Cryptographic primitives for audit log verification.

Pure library modules for tamper-evidence checks:
- **canonicalization**: order-independent canonical encoding of record content
- **hash_chain**: SHA-256 hashing of a record's canonical content
- **signing**: ECDSA signature verification over record hashes
"""

from untamper.core.crypto.canonicalization import (
    SHA256_ALGORITHM,
    CanonicalValue,
    canonicalize,
    canonicalize_bytes,
    sha256_hex,
)
from untamper.core.crypto.hash_chain import HASHED_FIELDS, compute_content_hash
from untamper.core.crypto.signing import (
    SIGNATURE_ALGORITHM,
    generate_signing_keypair,
    load_public_key,
    sign_hash,
    verify_hash_signature,
)

__all__ = [
    "CanonicalValue",
    "canonicalize",
    "canonicalize_bytes",
    "sha256_hex",
    "SHA256_ALGORITHM",
    "HASHED_FIELDS",
    "compute_content_hash",
    "SIGNATURE_ALGORITHM",
    "generate_signing_keypair",
    "load_public_key",
    "sign_hash",
    "verify_hash_signature",
]
