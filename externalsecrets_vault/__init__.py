"""ExternalSecrets Vault.

Vault backend that resolves ExternalSecret manifests into Kubernetes
Secret data using Kubernetes service-account authentication.
"""
from .version import (
    __title__, __description__, __version__, __author__, __author_email__
)
from .backend import VaultBackend
from .exceptions import (
    VaultBackendError,
    InvalidSecretSpec,
    IdentityTokenUnavailable,
    LoginFailed,
    TokenLookupFailed,
    TokenRenewalFailed,
    SecretReadFailed,
    SecretFormatMismatch,
    KeyNotFound,
    ManifestEntryFailed,
)
from .models import AuthContext, SecretDataEntry, SecretSpec, Session, SessionState

__all__ = [
    "VaultBackend",
    "VaultBackendError",
    "InvalidSecretSpec",
    "IdentityTokenUnavailable",
    "LoginFailed",
    "TokenLookupFailed",
    "TokenRenewalFailed",
    "SecretReadFailed",
    "SecretFormatMismatch",
    "KeyNotFound",
    "ManifestEntryFailed",
    "AuthContext",
    "SecretDataEntry",
    "SecretSpec",
    "Session",
    "SessionState",
]
