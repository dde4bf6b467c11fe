"""
unTamper API client for the verification public key.

Persistent httpx.AsyncClient, settings-driven configuration, structured
logging, and explicit ``close()`` lifecycle. Retries are left to the caller.
"""

from __future__ import annotations

from types import TracebackType

import httpx

from untamper.core.config import SDK_USER_AGENT, Settings, get_settings
from untamper.core.errors import ConfigurationError, CredentialError
from untamper.core.logging import get_logger

logger = get_logger(__name__)


class PublicKeyClient:
    """Fetches the PEM-encoded ECDSA public key the service signs with."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Return (or lazily create) the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            base_url = self._settings.base_url
            if not base_url:
                raise ConfigurationError("UNTAMPER_BASE_URL is required to fetch the public key")

            headers: dict[str, str] = {"User-Agent": SDK_USER_AGENT}
            if self._settings.api_key:
                headers["Authorization"] = f"Bearer {self._settings.api_key}"

            self._http_client = httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=self._settings.request_timeout,
                transport=self._transport,
            )
        return self._http_client

    async def fetch_public_key(self) -> str:
        """GET the public key and return its PEM text.

        Raises
        ------
        httpx.HTTPError
            On transport failures and non-2xx responses.
        CredentialError
            If the response body is empty.
        """
        client = self._get_client()
        path = self._settings.public_key_path

        logger.debug("public_key_request", path=path)
        response = await client.get(path)
        response.raise_for_status()

        pem = response.text.strip()
        if not pem:
            raise CredentialError("Public key endpoint returned an empty body")
        return pem

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> PublicKeyClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
