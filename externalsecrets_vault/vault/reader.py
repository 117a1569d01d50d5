"""
SecretReader — Authenticated, version-aware reads of KV secrets.

Every read first goes through the ``SessionManager`` and then performs
exactly one store read; secret content is never cached.
"""
import logging
from typing import Any

from ..exceptions import KeyNotFound, SecretReadFailed, VaultBackendError
from ..models import AuthContext
from .payload import parse_payload, serialize_value
from .session import SessionManager

logger = logging.getLogger("externalsecrets.vault")


class SecretReader:
    """Reads secrets at a path and unwraps them by KV version."""

    def __init__(self, sessions: SessionManager):
        self._sessions = sessions

    async def read_data(
        self,
        path: str,
        auth: AuthContext,
        kv_version: int = 2,
    ) -> dict[str, Any]:
        """Return the secret document stored at ``path``.

        Args:
            path: Secret path in Vault (e.g. ``secret/data/app``).
            auth: Mount point and role used if a login is needed.
            kv_version: Storage-format version of the engine, 1 or 2.

        Returns:
            The extracted data mapping (``data`` for v1, ``data.data`` for v2).

        Raises:
            SecretReadFailed: The read failed or nothing is stored at ``path``.
            SecretFormatMismatch: The response does not fit ``kv_version``.
        """
        await self._sessions.ensure_authenticated(auth)
        logger.debug("Reading secret key %s from vault", path)
        try:
            raw = await self._sessions.client.read(path)
        except VaultBackendError:
            raise
        except Exception as err:
            raise SecretReadFailed(f"Failed to read secret '{path}': {err}") from err
        if raw is None:
            raise SecretReadFailed(f"No secret found at '{path}'")
        return parse_payload(raw, kv_version, path).data

    async def get_property(
        self,
        path: str,
        key: str,
        auth: AuthContext,
        kv_version: int = 2,
    ) -> str:
        """Return the whole secret document at ``path`` as a JSON string.

        The document must contain ``key``.

        Raises:
            KeyNotFound: ``key`` is absent from the extracted data.
        """
        data = await self.read_data(path, auth, kv_version)
        if key not in data:
            raise KeyNotFound(key, path)
        return serialize_value(data)
