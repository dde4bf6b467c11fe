"""
Record and chain verification.

Pure functions over already-parsed records and an already-loaded credential.
They never raise for integrity problems; every finding is returned on the
result value so a batch always reports on all of its records.
"""

from __future__ import annotations

from collections.abc import Iterable

from untamper.core.crypto.hash_chain import compute_content_hash
from untamper.core.crypto.signing import verify_hash_signature
from untamper.core.errors import CanonicalizationError
from untamper.modules.verification.credentials import Credential
from untamper.modules.verification.results import (
    ChainFailure,
    ChainVerificationResult,
    FailureKind,
    VerificationResult,
)
from untamper.modules.verification.schemas import LogRecord

DEFAULT_GENESIS_SEQUENCE = 1


def compute_log_hash(record: LogRecord) -> str:
    """Recompute a record's hash from its content fields."""
    return compute_content_hash(record.hash_content())


def verify_record(record: LogRecord, credential: Credential) -> VerificationResult:
    """Verify one record's content hash, then its signature.

    The signature is only checked when the hash matches: a signature over a
    hash that does not describe the content proves nothing.
    """
    try:
        computed = compute_log_hash(record)
    except CanonicalizationError as exc:
        return VerificationResult.hash_mismatch(
            f"Hash mismatch: content cannot be canonicalized ({exc})"
        )

    if computed != record.hash:
        return VerificationResult.hash_mismatch(
            f"Hash mismatch: computed {computed} != stored {record.hash}"
        )

    if not verify_hash_signature(record.hash, record.signature, credential.public_key):
        return VerificationResult.signature_invalid()

    return VerificationResult.ok()


def _chain_order(record: LogRecord) -> tuple[int, str, str]:
    # hash and signature break ties between duplicate sequence numbers
    return (record.sequence_number, record.hash, record.signature)


def _check_chain_start(
    record: LogRecord,
    *,
    require_genesis: bool,
    genesis_sequence: int,
) -> ChainFailure | None:
    if record.sequence_number == genesis_sequence:
        if record.previous_hash is not None:
            return ChainFailure(
                record.sequence_number,
                FailureKind.GENESIS_VIOLATION,
                "First log must have previousHash = null",
            )
        return None

    if require_genesis:
        return ChainFailure(
            record.sequence_number,
            FailureKind.MISSING_GENESIS,
            f"Chain must start at sequence {genesis_sequence}, "
            f"first log has sequence {record.sequence_number}",
        )
    return None


def _check_link(record: LogRecord, previous: LogRecord) -> ChainFailure | None:
    if record.sequence_number == previous.sequence_number:
        return ChainFailure(
            record.sequence_number,
            FailureKind.SEQUENCE_GAP,
            f"Duplicate sequence number {record.sequence_number}",
        )

    expected = previous.sequence_number + 1
    if record.sequence_number != expected:
        return ChainFailure(
            record.sequence_number,
            FailureKind.SEQUENCE_GAP,
            f"Sequence gap: expected {expected}",
        )

    if record.previous_hash != previous.hash:
        return ChainFailure(
            record.sequence_number,
            FailureKind.CHAIN_BROKEN,
            "Chain broken: previousHash mismatch",
        )
    return None


def verify_chain(
    records: Iterable[LogRecord],
    credential: Credential,
    *,
    require_genesis: bool = False,
    genesis_sequence: int = DEFAULT_GENESIS_SEQUENCE,
) -> ChainVerificationResult:
    """Verify a set of records as a contiguous slice of a hash chain.

    Records are sorted by sequence number first, so input order never
    affects the outcome. Each record is checked in turn and contributes at
    most one finding:

    1. content hash, then signature (see :func:`verify_record`);
    2. for the first record, the genesis rule: a record at
       ``genesis_sequence`` must not carry a ``previousHash``;
    3. for every later record, sequence continuity, then the link to the
       predecessor's *declared* hash.

    Linking against the declared hash keeps a single tampered record from
    cascading into findings for the intact records after it.

    Parameters
    ----------
    records:
        Records in any order.
    credential:
        Public key the record signatures are checked against.
    require_genesis:
        When ``True`` the set must be a whole chain: a first record that is
        not at ``genesis_sequence`` is reported as ``MISSING_GENESIS``.
        When ``False`` an interior slice of the chain verifies cleanly.
    genesis_sequence:
        Sequence number of the first record of the chain.
    """
    ordered = sorted(records, key=_chain_order)
    failures: list[ChainFailure] = []
    valid_logs = 0

    previous: LogRecord | None = None
    for record in ordered:
        result = verify_record(record, credential)
        failure: ChainFailure | None
        if result.failure is not None:
            failure = ChainFailure(
                record.sequence_number,
                result.failure,
                result.reason or result.failure.value,
            )
        elif previous is None:
            failure = _check_chain_start(
                record,
                require_genesis=require_genesis,
                genesis_sequence=genesis_sequence,
            )
        else:
            failure = _check_link(record, previous)

        if failure is None:
            valid_logs += 1
        else:
            failures.append(failure)
        previous = record

    return ChainVerificationResult(
        valid=not failures,
        total_logs=len(ordered),
        valid_logs=valid_logs,
        invalid_logs=len(ordered) - valid_logs,
        broken_at=failures[0].sequence_number if failures else None,
        failures=tuple(failures),
    )


def verify_full_chain(
    records: Iterable[LogRecord],
    credential: Credential,
    *,
    genesis_sequence: int = DEFAULT_GENESIS_SEQUENCE,
) -> ChainVerificationResult:
    """Verify that ``records`` form a whole chain starting at its genesis record."""
    return verify_chain(
        records,
        credential,
        require_genesis=True,
        genesis_sequence=genesis_sequence,
    )
