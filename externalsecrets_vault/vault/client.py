"""
Vault Store Client — Capability interface and hvac adapter.

The orchestration core only needs four store operations plus the bound token;
``StoreClient`` names exactly those. ``HvacStoreClient`` implements it on top
of a synchronous ``hvac.Client``, running each call in a worker thread so the
event loop is never blocked.

Security Note:
    Never log the client token or response bodies.
"""
import asyncio
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import hvac
from hvac.exceptions import VaultError
from requests.exceptions import RequestException

from ..exceptions import (
    LoginFailed,
    SecretReadFailed,
    TokenLookupFailed,
    TokenRenewalFailed,
)

logger = logging.getLogger("externalsecrets.vault")

_CLIENT_ERRORS = (VaultError, RequestException)


@runtime_checkable
class StoreClient(Protocol):
    """Operations the session manager and secret reader need from Vault."""

    token: Optional[str]

    async def login(self, mount_point: str, role: str, jwt: str) -> str:
        """Exchange a service-account JWT for a Vault client token."""
        ...

    async def lookup_self(self) -> int:
        """Return the remaining ttl (seconds) of the bound token."""
        ...

    async def renew_self(self) -> None:
        """Renew the bound token in place."""
        ...

    async def read(self, path: str) -> Optional[dict[str, Any]]:
        """Read the raw response stored at ``path``."""
        ...


class HvacStoreClient:
    """``StoreClient`` adapter around ``hvac.Client``."""

    def __init__(self, client: hvac.Client):
        self._client = client

    @classmethod
    def from_url(
        cls,
        url: str,
        timeout: int = 30,
        verify: bool = True,
    ) -> "HvacStoreClient":
        """Build the adapter with a fresh hvac client.

        Args:
            url: Vault server address.
            timeout: Per-request timeout in seconds.
            verify: Verify the server TLS certificate.

        Returns:
            HvacStoreClient instance with no token bound.
        """
        return cls(hvac.Client(url=url, timeout=timeout, verify=verify))

    @property
    def token(self) -> Optional[str]:
        return self._client.token or None

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self._client.token = value

    async def login(self, mount_point: str, role: str, jwt: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.auth.kubernetes.login,
                role=role,
                jwt=jwt,
                use_token=False,
                mount_point=mount_point,
            )
        except _CLIENT_ERRORS as err:
            raise LoginFailed(
                f"Kubernetes login failed for role '{role}' on '{mount_point}': {err}"
            ) from err
        try:
            return response["auth"]["client_token"]
        except (KeyError, TypeError) as err:
            raise LoginFailed(
                f"Kubernetes login for role '{role}' on '{mount_point}' "
                "returned no client token"
            ) from err

    async def lookup_self(self) -> int:
        try:
            response = await asyncio.to_thread(self._client.auth.token.lookup_self)
        except _CLIENT_ERRORS as err:
            raise TokenLookupFailed(f"Token self-lookup failed: {err}") from err
        try:
            return int(response["data"]["ttl"])
        except (KeyError, TypeError, ValueError) as err:
            raise TokenLookupFailed(
                "Token self-lookup returned no usable ttl"
            ) from err

    async def renew_self(self) -> None:
        try:
            await asyncio.to_thread(self._client.auth.token.renew_self)
        except _CLIENT_ERRORS as err:
            raise TokenRenewalFailed(f"Token self-renewal failed: {err}") from err

    async def read(self, path: str) -> Optional[dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._client.read, path)
        except _CLIENT_ERRORS as err:
            raise SecretReadFailed(f"Failed to read secret '{path}': {err}") from err
