"""
ECDSA signatures over audit log hashes.

The unTamper service signs the *textual* hex hash of each record
(``sign.update(hash)``) with ECDSA/SHA-256 and ships the DER signature
base64-encoded. Verification here mirrors that convention exactly: the
UTF-8 bytes of the hex string are the signed message.

Uses the ``cryptography`` library for key loading, signing and verification.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
    load_pem_public_key,
)

from untamper.core.errors import CredentialError

SIGNATURE_ALGORITHM = "ECDSA-SHA256"

_CURVES: dict[str, type[ec.EllipticCurve]] = {
    "secp256k1": ec.SECP256K1,
    "secp256r1": ec.SECP256R1,
    "prime256v1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
}


def load_public_key(public_key_pem: str) -> ec.EllipticCurvePublicKey:
    """Parse a PEM-encoded EC public key.

    Raises
    ------
    CredentialError
        If the text is not PEM, or is a key of another type.
    """
    try:
        public_key = load_pem_public_key(public_key_pem.strip().encode("utf-8"))
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise CredentialError(f"Public key is not a valid PEM key: {exc}") from exc
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise CredentialError(
            f"Expected an EC public key, got {type(public_key).__name__}"
        )
    return public_key


def generate_signing_keypair(curve: str = "secp256k1") -> tuple[str, str]:
    """Generate a new EC key pair in the format the service uses.

    Returns
    -------
    tuple[str, str]
        ``(private_key_pem, public_key_pem)`` as PEM-encoded strings.
    """
    try:
        curve_cls = _CURVES[curve]
    except KeyError:
        raise ValueError(f"Unsupported curve: {curve}") from None
    private_key = ec.generate_private_key(curve_cls())
    private_pem = private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=NoEncryption(),
    ).decode("utf-8")
    public_pem = private_key.public_key().public_bytes(
        encoding=Encoding.PEM,
        format=PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")
    return private_pem, public_pem


def sign_hash(hash_hex: str, private_key_pem: str) -> str:
    """Sign a record hash the way the unTamper service does.

    Parameters
    ----------
    hash_hex:
        Hex-encoded record hash; its text is what gets signed.
    private_key_pem:
        PEM-encoded EC private key.

    Returns
    -------
    str
        Base64-encoded DER ECDSA signature.
    """
    private_key = load_pem_private_key(private_key_pem.encode("utf-8"), password=None)
    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise TypeError("Expected an EC private key")
    signature = private_key.sign(hash_hex.encode("utf-8"), ec.ECDSA(hashes.SHA256()))
    return base64.b64encode(signature).decode("ascii")


def verify_hash_signature(
    hash_hex: str,
    signature: str,
    public_key: ec.EllipticCurvePublicKey,
) -> bool:
    """Verify a base64 ECDSA signature over a record's textual hash.

    Never raises for bad input: undecodable base64, malformed DER and
    signatures from another key all return ``False``.
    """
    try:
        raw_signature = base64.b64decode(signature)
    except (binascii.Error, ValueError):
        return False
    if not raw_signature:
        return False
    try:
        public_key.verify(
            raw_signature,
            hash_hex.encode("utf-8"),
            ec.ECDSA(hashes.SHA256()),
        )
        return True
    except (InvalidSignature, ValueError):
        return False
