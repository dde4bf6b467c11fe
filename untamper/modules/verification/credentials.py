"""
Public key credential and its fetch-once cache.

The cache is a small state machine::

    UNCACHED --get()--> FETCHING --ok--> CACHED
                           |
                           +--error--> FETCH_FAILED --get()--> FETCHING ...

Concurrent callers share one in-flight fetch task, so the key is requested
at most once at a time. A failed fetch resets the cache for a later retry
and every caller waiting on it receives :class:`CredentialFetchError`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum

from cryptography.hazmat.primitives.asymmetric import ec

from untamper.core.crypto.signing import load_public_key
from untamper.core.errors import CredentialError, CredentialFetchError
from untamper.core.logging import get_logger

logger = get_logger(__name__)

PublicKeyFetcher = Callable[[], Awaitable[str]]


class CredentialState(StrEnum):
    UNCACHED = "uncached"
    FETCHING = "fetching"
    CACHED = "cached"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True, slots=True)
class Credential:
    """A parsed public key together with the PEM text it came from."""

    pem: str
    public_key: ec.EllipticCurvePublicKey

    @classmethod
    def from_pem(cls, pem: str) -> Credential:
        """Parse ``pem``; raises :class:`CredentialError` if it is not an EC key."""
        return cls(pem=pem.strip(), public_key=load_public_key(pem))

    @property
    def curve(self) -> str:
        return self.public_key.curve.name


async def _no_fetch() -> str:
    raise CredentialError("No public key fetcher configured")


def _retrieve_exception(task: asyncio.Task[Credential]) -> None:
    # the failure is already logged; callers may all have been cancelled
    if not task.cancelled():
        task.exception()


class CredentialCache:
    """Fetch-once holder for the verification public key."""

    def __init__(self, fetch: PublicKeyFetcher) -> None:
        self._fetch = fetch
        self._state = CredentialState.UNCACHED
        self._credential: Credential | None = None
        self._inflight: asyncio.Task[Credential] | None = None

    @classmethod
    def from_pem(cls, pem: str, fetch: PublicKeyFetcher | None = None) -> CredentialCache:
        """Build a cache that already holds ``pem``, for offline verification."""
        cache = cls(fetch or _no_fetch)
        cache._credential = Credential.from_pem(pem)
        cache._state = CredentialState.CACHED
        return cache

    @property
    def state(self) -> CredentialState:
        return self._state

    @property
    def credential(self) -> Credential | None:
        """The cached credential, or ``None`` before the first successful fetch."""
        return self._credential

    async def get(self) -> Credential:
        """Return the credential, fetching it first if needed.

        Raises
        ------
        CredentialFetchError
            If the fetch this call started or joined failed.
        """
        if self._credential is not None:
            return self._credential

        if self._inflight is None:
            self._state = CredentialState.FETCHING
            self._inflight = asyncio.create_task(self._load())
            self._inflight.add_done_callback(_retrieve_exception)

        # shield: a cancelled caller must not cancel the fetch other callers await
        return await asyncio.shield(self._inflight)

    async def _load(self) -> Credential:
        logger.info("public_key_fetch_started")
        try:
            pem = await self._fetch()
            credential = Credential.from_pem(pem)
        except Exception as exc:
            logger.warning("public_key_fetch_failed", error=str(exc))
            raise CredentialFetchError(f"Failed to fetch public key: {exc}") from exc
        else:
            self._credential = credential
            logger.info("public_key_cached", curve=credential.curve)
            return credential
        finally:
            self._inflight = None
            self._state = (
                CredentialState.CACHED
                if self._credential is not None
                else CredentialState.FETCH_FAILED
            )
