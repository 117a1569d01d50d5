"""
Vault Backend Exceptions.

Every failure surfaced by the backend derives from ``VaultBackendError`` so the
controller can catch one type, while each kind stays identifiable on its own.

Security Note:
    Messages carry mount points, roles, paths and key names only; never
    tokens or secret values.
"""
from typing import Optional


class VaultBackendError(Exception):
    """Base class for all vault backend failures."""


class InvalidSecretSpec(VaultBackendError):
    """The secret spec does not validate (unknown kvVersion, malformed entry)."""


class IdentityTokenUnavailable(VaultBackendError):
    """The workload identity (service-account) token could not be read."""


class LoginFailed(VaultBackendError):
    """Kubernetes auth login against Vault was rejected or errored."""


class TokenLookupFailed(VaultBackendError):
    """Self-lookup of the current Vault token failed."""


class TokenRenewalFailed(VaultBackendError):
    """Self-renewal of the current Vault token failed."""


class SecretReadFailed(VaultBackendError):
    """Reading a secret path from Vault failed or returned nothing."""


class SecretFormatMismatch(VaultBackendError):
    """The payload shape does not match the declared KV version."""


class KeyNotFound(VaultBackendError):
    """The requested key is absent from the extracted secret data."""

    def __init__(self, key: str, path: Optional[str] = None):
        self.key = key
        self.path = path
        where = f" at '{path}'" if path else ""
        super().__init__(f"Key '{key}' not found in secret data{where}")


class ManifestEntryFailed(VaultBackendError):
    """Resolution of a manifest aborted on one entry.

    The original error is available as ``error`` and as ``__cause__``.
    """

    def __init__(self, key: str, error: VaultBackendError):
        self.key = key
        self.error = error
        super().__init__(
            f"Failed to resolve manifest entry '{key}': "
            f"{type(error).__name__}: {error}"
        )
