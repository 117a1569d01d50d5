"""
Workload identity token sources.

Kubernetes projects the pod's service-account JWT into a file; the token can
be rotated by the kubelet, so it is read again on every login.
"""
import asyncio
import logging
from pathlib import Path
from typing import Protocol, Union

from ..exceptions import IdentityTokenUnavailable
from .config import DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH

logger = logging.getLogger("externalsecrets.vault")


class CredentialSource(Protocol):
    """Supplies the signed identity token used for Kubernetes auth."""

    async def fetch_identity_token(self) -> str:
        ...


class ServiceAccountTokenSource:
    """Reads the service-account token from the projected volume."""

    def __init__(
        self,
        path: Union[str, Path] = DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH,
    ):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def fetch_identity_token(self) -> str:
        """Read and return the service-account JWT.

        Raises:
            IdentityTokenUnavailable: If the file is missing, unreadable or
                empty.
        """
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except OSError as err:
            logger.error(
                "Unable to read service account token from %s: %s",
                self._path, err,
            )
            raise IdentityTokenUnavailable(
                f"Unable to read service account token from {self._path}"
            ) from err
        token = raw.strip()
        if not token:
            raise IdentityTokenUnavailable(
                f"Service account token file {self._path} is empty"
            )
        return token
