"""
Exception types raised by the verification client.

Verification *findings* (hash mismatch, broken chain, ...) are never raised;
they are reported on the result objects. The exceptions below cover the
conditions that prevent a verification from running at all.
"""

from __future__ import annotations


class UnTamperError(RuntimeError):
    """Base class for all unTamper client errors."""


class ConfigurationError(UnTamperError):
    """Raised when the client configuration cannot be used."""


class CredentialError(UnTamperError):
    """Raised when public key material is missing or unusable."""


class CredentialFetchError(CredentialError):
    """Raised to every caller waiting on a failed public key fetch."""


class RecordValidationError(UnTamperError, ValueError):
    """Raised when a payload cannot be parsed as an audit log record."""


class CanonicalizationError(ValueError):
    """Raised when a value falls outside the canonical encoding's value set."""
