"""Vault — Kubernetes-authenticated access to HashiCorp Vault KV secrets.

Security Note (Threat Model):
    The Vault client token lives in process memory for the process lifetime
    and is renewed in place. Anyone able to read the process memory or the
    projected service-account token can act with the same Vault role.
    Restricting that access is the job of the pod security context.
"""

from .client import StoreClient, HvacStoreClient
from .config import VaultBackendConfig
from .credentials import CredentialSource, ServiceAccountTokenSource
from .payload import KvV1Payload, KvV2Payload, parse_payload
from .reader import SecretReader
from .session import SessionManager

__all__ = [
    "StoreClient",
    "HvacStoreClient",
    "VaultBackendConfig",
    "CredentialSource",
    "ServiceAccountTokenSource",
    "KvV1Payload",
    "KvV2Payload",
    "parse_payload",
    "SecretReader",
    "SessionManager",
]
