"""
Verification result values.

Findings are reported as data, never raised: every failed check produces a
:class:`FailureKind` plus a human-readable reason on the result object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class FailureKind(StrEnum):
    """Kinds of integrity finding."""

    HASH_MISMATCH = "hash_mismatch"
    SIGNATURE_INVALID = "signature_invalid"
    SEQUENCE_GAP = "sequence_gap"
    CHAIN_BROKEN = "chain_broken"
    GENESIS_VIOLATION = "genesis_violation"
    MISSING_GENESIS = "missing_genesis"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of verifying one record's hash and signature.

    Attributes
    ----------
    valid:
        ``True`` only when both the hash and the signature check passed.
    hash_valid:
        The recomputed content hash equals the stored ``hash``.
    signature_valid:
        The signature over the stored hash verified. Always ``False`` when
        the hash did not match, since the signature is then not checked.
    failure:
        Kind of the failed check, or ``None``.
    reason:
        Human-readable description of the failure, or ``None``.
    """

    valid: bool
    hash_valid: bool
    signature_valid: bool
    failure: FailureKind | None = None
    reason: str | None = None

    @classmethod
    def ok(cls) -> VerificationResult:
        return cls(valid=True, hash_valid=True, signature_valid=True)

    @classmethod
    def hash_mismatch(cls, reason: str) -> VerificationResult:
        return cls(
            valid=False,
            hash_valid=False,
            signature_valid=False,
            failure=FailureKind.HASH_MISMATCH,
            reason=reason,
        )

    @classmethod
    def signature_invalid(cls, reason: str = "Invalid ECDSA signature") -> VerificationResult:
        return cls(
            valid=False,
            hash_valid=True,
            signature_valid=False,
            failure=FailureKind.SIGNATURE_INVALID,
            reason=reason,
        )


@dataclass(frozen=True, slots=True)
class ChainFailure:
    """A single finding inside a chain verification."""

    sequence_number: int
    kind: FailureKind
    reason: str


@dataclass(frozen=True, slots=True)
class ChainVerificationResult:
    """Aggregate outcome of verifying a set of records as a chain.

    Attributes
    ----------
    valid:
        ``True`` if no record produced a finding.
    total_logs:
        Number of records examined.
    valid_logs:
        Records that passed every check.
    invalid_logs:
        Records with a finding (``total_logs - valid_logs``).
    broken_at:
        Sequence number of the first finding in sequence order, or ``None``.
    failures:
        Findings in sequence order, at most one per record.
    """

    valid: bool = True
    total_logs: int = 0
    valid_logs: int = 0
    invalid_logs: int = 0
    broken_at: int | None = None
    failures: tuple[ChainFailure, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation using the API's camelCase names."""
        return {
            "valid": self.valid,
            "totalLogs": self.total_logs,
            "validLogs": self.valid_logs,
            "invalidLogs": self.invalid_logs,
            "brokenAt": self.broken_at,
            "errors": [
                {
                    "sequenceNumber": failure.sequence_number,
                    "kind": failure.kind.value,
                    "error": failure.reason,
                }
                for failure in self.failures
            ],
        }
