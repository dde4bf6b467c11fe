"""
Service layer for client-side audit log verification.

Verification is trustless: records are checked locally against the public
key, which is fetched from the API once and then reused by every call.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from untamper.core.config import Settings, get_settings
from untamper.core.logging import get_logger
from untamper.modules.verification.client import PublicKeyClient
from untamper.modules.verification.credentials import CredentialCache
from untamper.modules.verification.engine import verify_chain, verify_record
from untamper.modules.verification.results import ChainVerificationResult, VerificationResult
from untamper.modules.verification.schemas import LogRecord, parse_record

logger = get_logger(__name__)

RecordInput = LogRecord | Mapping[str, Any]


class VerificationService:
    """Verify single records and record chains against the cached public key."""

    def __init__(
        self,
        credentials: CredentialCache,
        *,
        settings: Settings | None = None,
        client: PublicKeyClient | None = None,
    ) -> None:
        self._credentials = credentials
        self._settings = settings or get_settings()
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> VerificationService:
        """Build a service that fetches the public key from the unTamper API."""
        settings = settings or get_settings()
        client = PublicKeyClient(settings)
        return cls(CredentialCache(client.fetch_public_key), settings=settings, client=client)

    @property
    def credentials(self) -> CredentialCache:
        return self._credentials

    async def initialize(self) -> None:
        """Fetch and cache the public key. Safe to call any number of times."""
        await self._credentials.get()

    async def verify_record(self, record: RecordInput) -> VerificationResult:
        """Verify one record's hash and ECDSA signature."""
        parsed = parse_record(record)
        credential = await self._credentials.get()

        result = verify_record(parsed, credential)
        if not result.valid:
            logger.info(
                "record_verification_failed",
                sequence_number=parsed.sequence_number,
                failure=result.failure,
                reason=result.reason,
            )
        return result

    async def verify_chain(self, records: Iterable[RecordInput]) -> ChainVerificationResult:
        """Verify records as a slice of the chain; no genesis record required."""
        return await self._verify(records, require_genesis=False)

    async def verify_full_chain(self, records: Iterable[RecordInput]) -> ChainVerificationResult:
        """Verify records as a whole chain that must start at the genesis record."""
        return await self._verify(records, require_genesis=True)

    async def _verify(
        self,
        records: Iterable[RecordInput],
        *,
        require_genesis: bool,
    ) -> ChainVerificationResult:
        parsed = [parse_record(record) for record in records]
        credential = await self._credentials.get()

        result = verify_chain(
            parsed,
            credential,
            require_genesis=require_genesis,
            genesis_sequence=self._settings.genesis_sequence,
        )

        log = logger.info if result.valid else logger.warning
        log(
            "chain_verified",
            valid=result.valid,
            total_logs=result.total_logs,
            invalid_logs=result.invalid_logs,
            broken_at=result.broken_at,
            full_chain=require_genesis,
        )
        return result

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
