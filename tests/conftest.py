"""
Pytest fixtures for verification tests.
Provides signing keys and factories for correctly hashed, signed and linked log records.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from untamper.core.config import get_settings
from untamper.core.crypto.hash_chain import HASHED_FIELDS, compute_content_hash
from untamper.core.crypto.signing import generate_signing_keypair, sign_hash
from untamper.modules.verification.credentials import Credential


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from UNTAMPER_* variables and .env files on the host."""
    monkeypatch.setenv("UNTAMPER_BASE_URL", "https://api.untamper.test")
    monkeypatch.setenv("UNTAMPER_API_KEY", "test-api-key")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def signing_keypair() -> tuple[str, str]:
    return generate_signing_keypair("secp256k1")


@pytest.fixture
def public_key_pem(signing_keypair: tuple[str, str]) -> str:
    return signing_keypair[1]


@pytest.fixture
def credential(public_key_pem: str) -> Credential:
    return Credential.from_pem(public_key_pem)


class RecordFactory:
    """Build wire-format records signed the way the unTamper service signs them."""

    def __init__(self, private_key_pem: str) -> None:
        self._private_key_pem = private_key_pem

    def payload(self, sequence_number: int, previous_hash: str | None) -> dict[str, Any]:
        return {
            "id": f"log_{sequence_number}",
            "projectId": "proj_456",
            "sequenceNumber": sequence_number,
            "previousHash": previous_hash,
            "timestamp": f"2024-01-01T10:00:{sequence_number % 60:02d}Z",
            "eventTime": "2024-01-01T09:59:59Z",
            "action": "user.login",
            "result": "SUCCESS",
            "actor": {"id": "user_123", "type": "user", "display_name": "John Doe"},
            "target": {"id": "account_456", "type": "account", "display_name": "Main Account"},
            "changes": [
                {"path": "last_login", "old_value": None, "new_value": "2024-01-01T10:00:00Z"},
            ],
            "context": {
                "server": {"ip": "192.168.1.1", "user_agent": "Mozilla/5.0"},
                "client": {"request_id": f"req_{sequence_number}", "session_id": "sess_456"},
            },
            "metadata": {"version": "1.0.0", "environment": "production"},
            "createdAt": "2024-01-01T10:00:01Z",
        }

    def seal(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Hash and sign ``payload``, replacing any existing hash/signature."""
        content = {name: payload.get(name) for name in HASHED_FIELDS}
        record_hash = compute_content_hash(content)
        return {
            **payload,
            "hash": record_hash,
            "signature": sign_hash(record_hash, self._private_key_pem),
        }

    def record(
        self,
        sequence_number: int,
        previous_hash: str | None,
        **overrides: Any,
    ) -> dict[str, Any]:
        payload = self.payload(sequence_number, previous_hash)
        payload.update(overrides)
        return self.seal(payload)

    def chain(self, count: int, *, start: int = 1) -> list[dict[str, Any]]:
        """Build ``count`` linked records starting at sequence ``start``."""
        previous_hash: str | None = None
        if start != 1:
            previous_hash = hashlib.sha256(f"record-{start - 1}".encode()).hexdigest()
        records: list[dict[str, Any]] = []
        for sequence_number in range(start, start + count):
            record = self.record(sequence_number, previous_hash)
            records.append(record)
            previous_hash = record["hash"]
        return records


@pytest.fixture
def record_factory(signing_keypair: tuple[str, str]) -> RecordFactory:
    return RecordFactory(signing_keypair[0])


@pytest.fixture
def make_chain(record_factory: RecordFactory) -> Callable[..., list[dict[str, Any]]]:
    return record_factory.chain
