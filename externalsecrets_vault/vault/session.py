"""
SessionManager — Vault authentication state bound to the store client.

Provides the authentication step run before every secret read:
- no token → Kubernetes login with the service-account JWT
- token with ttl at or below the threshold → renew the same token
- token with ttl above the threshold → reuse, no further call

Transitions are serialized by an ``asyncio.Lock`` so a burst of concurrent
fetches on an expiring (or missing) token performs a single renewal (or a
single login).

Security Note:
    Never log token values. Only log roles, mount points and ttl numbers.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

from ..exceptions import (
    IdentityTokenUnavailable,
    LoginFailed,
    TokenLookupFailed,
    TokenRenewalFailed,
    VaultBackendError,
)
from ..models import AuthContext, Session, SessionState
from .client import StoreClient
from .config import DEFAULT_TOKEN_RENEW_THRESHOLD
from .credentials import CredentialSource

logger = logging.getLogger("externalsecrets.vault")

T = TypeVar("T")


async def _guard(
    call: Callable[[], Awaitable[T]],
    kind: type[VaultBackendError],
    message: str,
) -> T:
    """Invoke and await ``call``, translating foreign exceptions into ``kind``."""
    try:
        return await call()
    except VaultBackendError:
        raise
    except Exception as err:
        raise kind(f"{message}: {err}") from err


class SessionManager:
    """Owns the ``Session`` and keeps the store client authenticated."""

    def __init__(
        self,
        client: StoreClient,
        credential_source: Optional[CredentialSource] = None,
        session: Optional[Session] = None,
        renew_threshold: int = DEFAULT_TOKEN_RENEW_THRESHOLD,
    ):
        self._client = client
        self._credentials = credential_source
        if session is None:
            session = Session(token=client.token, renew_threshold=renew_threshold)
        elif session.token:
            client.token = session.token
        self._session = session
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def client(self) -> StoreClient:
        return self._client

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _login(
        self,
        auth: AuthContext,
        credential_source: Optional[CredentialSource],
    ) -> None:
        source = credential_source or self._credentials
        if source is None:
            raise IdentityTokenUnavailable(
                "No credential source configured for Kubernetes login"
            )
        jwt = await _guard(
            source.fetch_identity_token,
            IdentityTokenUnavailable,
            "Unable to fetch service account token",
        )
        logger.debug(
            "Fetching new token from vault for role %s on %s",
            auth.role, auth.mount_point,
        )
        try:
            token = await _guard(
                lambda: self._client.login(auth.mount_point, auth.role, jwt),
                LoginFailed,
                f"Kubernetes login failed for role '{auth.role}' on '{auth.mount_point}'",
            )
        except LoginFailed as err:
            logger.error("Vault login failed: %s", err)
            raise
        if not token:
            raise LoginFailed(
                f"Kubernetes login for role '{auth.role}' on "
                f"'{auth.mount_point}' returned an empty token"
            )
        self._client.token = token
        self._session = Session(
            token=token, renew_threshold=self._session.renew_threshold,
        )
        logger.info(
            "Logged into vault with role %s on %s", auth.role, auth.mount_point,
        )

    async def _refresh(self) -> None:
        logger.debug("Checking vault token expiry")
        ttl = await _guard(
            self._client.lookup_self, TokenLookupFailed, "Token self-lookup failed",
        )
        self._session.ttl = ttl
        logger.debug(
            "Vault token valid for %s seconds, renews at %s",
            ttl, self._session.renew_threshold,
        )
        if not self._session.must_renew(ttl):
            return
        logger.debug("Renewing vault token")
        try:
            await _guard(
                self._client.renew_self, TokenRenewalFailed, "Token self-renewal failed",
            )
        except TokenRenewalFailed as err:
            logger.error("Vault token renewal failed: %s", err)
            raise
        # ttl is unknown until the next lookup
        self._session.ttl = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ensure_authenticated(
        self,
        auth: AuthContext,
        credential_source: Optional[CredentialSource] = None,
    ) -> None:
        """Make sure the store client holds a usable token.

        Args:
            auth: Mount point and role used if a login is needed.
            credential_source: Overrides the configured identity token source.

        Raises:
            IdentityTokenUnavailable: The JWT could not be obtained.
            LoginFailed: The login exchange failed.
            TokenLookupFailed: The self-lookup failed.
            TokenRenewalFailed: The renewal failed; no login is attempted.
        """
        async with self._lock:
            if self._session.state is SessionState.NO_TOKEN:
                await self._login(auth, credential_source)
            else:
                await self._refresh()

    async def invalidate(self) -> None:
        """Drop the current token; the next call performs a fresh login."""
        async with self._lock:
            self._client.token = None
            self._session = Session(renew_threshold=self._session.renew_threshold)
        logger.debug("Vault session invalidated")
