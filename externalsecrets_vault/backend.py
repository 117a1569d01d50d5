"""
VaultBackend — Resolves ExternalSecret manifests against Vault.

Provides the API consumed by the ExternalSecret controller:
- ``get_property(spec, key)`` — JSON document stored at ``key``
- ``resolve_manifest(spec)`` — ``name → base64 value`` mapping for a whole spec
- ``from_config(config)`` — factory wiring hvac, the token file and defaults

Resolution is fail-fast: the first entry that cannot be resolved aborts the
call with ``ManifestEntryFailed`` naming that entry.
"""
import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from .exceptions import (
    InvalidSecretSpec,
    KeyNotFound,
    ManifestEntryFailed,
    VaultBackendError,
)
from .models import AuthContext, SecretDataEntry, SecretSpec
from .vault.client import HvacStoreClient, StoreClient
from .vault.config import DEFAULT_TOKEN_RENEW_THRESHOLD, VaultBackendConfig
from .vault.credentials import CredentialSource, ServiceAccountTokenSource
from .vault.payload import encode_value, property_value
from .vault.reader import SecretReader
from .vault.session import SessionManager

logger = logging.getLogger("externalsecrets.backend")

SpecLike = Union[SecretSpec, dict[str, Any]]


class VaultBackend:
    """Vault backend for ExternalSecret manifests.

    One instance (and therefore one Vault session) is shared by every
    manifest the controller resolves during the process lifetime.
    """

    def __init__(
        self,
        client: StoreClient,
        default_mount_point: str,
        default_role: str,
        credential_source: Optional[CredentialSource] = None,
        token_renew_threshold: int = DEFAULT_TOKEN_RENEW_THRESHOLD,
        sessions: Optional[SessionManager] = None,
    ):
        self._default_mount_point = default_mount_point
        self._default_role = default_role
        self._sessions = sessions or SessionManager(
            client,
            credential_source=credential_source or ServiceAccountTokenSource(),
            renew_threshold=token_renew_threshold,
        )
        self._reader = SecretReader(self._sessions)

    @classmethod
    def from_config(cls, config: VaultBackendConfig) -> "VaultBackend":
        """Build a backend talking to Vault through hvac.

        Args:
            config: Validated backend configuration.

        Returns:
            VaultBackend instance; no network call is made yet.
        """
        client = HvacStoreClient.from_url(
            config.vault_addr,
            timeout=config.request_timeout,
            verify=config.verify_tls,
        )
        return cls(
            client,
            default_mount_point=config.default_mount_point,
            default_role=config.default_role,
            credential_source=ServiceAccountTokenSource(
                config.service_account_token_path
            ),
            token_renew_threshold=config.token_renew_threshold,
        )

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    def _auth_context(self, spec: SecretSpec) -> AuthContext:
        return spec.auth_context(self._default_mount_point, self._default_role)

    @staticmethod
    def _as_spec(spec: SpecLike) -> SecretSpec:
        if isinstance(spec, SecretSpec):
            return spec
        try:
            return SecretSpec.model_validate(spec)
        except ValidationError as err:
            raise InvalidSecretSpec(f"Invalid secret spec: {err}") from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_property(self, spec: SpecLike, key: str) -> str:
        """Fetch the JSON document stored at ``key``.

        Args:
            spec: Secret spec providing mount point, role and kvVersion.
            key: Secret path, which must also be a field of the document.

        Returns:
            Compact JSON string of the whole secret data.

        Raises:
            InvalidSecretSpec: ``spec`` does not validate.
        """
        spec = self._as_spec(spec)
        return await self._reader.get_property(
            key, key, self._auth_context(spec), spec.kv_version,
        )

    async def _resolve_entry(
        self,
        entry: SecretDataEntry,
        auth: AuthContext,
        kv_version: int,
    ) -> str:
        if entry.property_name is not None:
            data = await self._reader.read_data(entry.key, auth, kv_version)
            if entry.property_name not in data:
                raise KeyNotFound(entry.property_name, entry.key)
            value = property_value(data[entry.property_name])
        else:
            value = await self._reader.get_property(
                entry.key, entry.key, auth, kv_version,
            )
        if entry.is_binary:
            return value
        return encode_value(value)

    async def resolve_manifest(self, spec: SpecLike) -> dict[str, str]:
        """Resolve every ``dataFrom`` path and ``data`` entry of a spec.

        Fields of ``dataFrom`` documents come first; ``data`` entries are
        applied afterwards and win on name clashes.

        Args:
            spec: ExternalSecret spec (model or manifest dict).

        Returns:
            Mapping of secret name to base64-encoded value.

        Raises:
            InvalidSecretSpec: ``spec`` does not validate.
            ManifestEntryFailed: The first entry (or dataFrom path) that
                failed, with the original error as ``error``/``__cause__``.
        """
        spec = self._as_spec(spec)
        auth = self._auth_context(spec)
        output: dict[str, str] = {}

        for path in spec.data_from:
            try:
                data = await self._reader.read_data(path, auth, spec.kv_version)
            except VaultBackendError as err:
                logger.debug("Failed to resolve dataFrom path %s: %s", path, err)
                raise ManifestEntryFailed(path, err) from err
            for name, value in data.items():
                output[name] = encode_value(property_value(value))

        for entry in spec.data:
            try:
                output[entry.name] = await self._resolve_entry(
                    entry, auth, spec.kv_version,
                )
            except VaultBackendError as err:
                logger.debug("Failed to resolve data key %s: %s", entry.key, err)
                raise ManifestEntryFailed(entry.key, err) from err

        logger.info(
            "Resolved %d secret value(s) with role %s on %s",
            len(output), auth.role, auth.mount_point,
        )
        return output
