"""
Vault Configuration — Backend settings loaded from the environment.

Reads the process-wide settings in the format:
    VAULT_ADDR = <http(s) URL of the Vault server>
    VAULT_TOKEN_RENEW_THRESHOLD = <seconds>
    DEFAULT_VAULT_MOUNT_POINT = <kubernetes auth mount point>
    DEFAULT_VAULT_ROLE = <kubernetes auth role>
    SERVICE_ACCOUNT_TOKEN_PATH = <path of the projected token file>

Security Note:
    Never log token material. Only log mount points, roles and thresholds.
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("externalsecrets.vault")

DEFAULT_VAULT_ADDR = "http://127.0.0.1:8200"
DEFAULT_TOKEN_RENEW_THRESHOLD = 60
DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH = (
    "/var/run/secrets/kubernetes.io/serviceaccount/token"
)
_TRUTHY = ("1", "true", "yes", "on")


def get_required_env(name: str) -> str:
    """Read a required environment variable.

    Args:
        name: Environment variable name.

    Returns:
        The variable value.

    Raises:
        RuntimeError: If the variable is not set.
    """
    raw = os.environ.get(name)
    if raw is None:
        raise RuntimeError(
            f"{name} environment variable is not set"
        )
    return raw


def get_renew_threshold() -> int:
    """Read the token renewal threshold from VAULT_TOKEN_RENEW_THRESHOLD.

    Returns:
        Threshold in seconds, defaulting to 60.

    Raises:
        ValueError: If the value is not a valid integer.
    """
    raw = os.environ.get("VAULT_TOKEN_RENEW_THRESHOLD")
    if raw is None or raw == "":
        return DEFAULT_TOKEN_RENEW_THRESHOLD
    return int(raw)


class VaultBackendConfig(BaseModel):
    """Validated vault backend configuration."""

    vault_addr: str = Field(default=DEFAULT_VAULT_ADDR)
    token_renew_threshold: int = Field(default=DEFAULT_TOKEN_RENEW_THRESHOLD, ge=0)
    default_mount_point: str
    default_role: str
    service_account_token_path: str = Field(
        default=DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH
    )
    request_timeout: int = Field(default=30, gt=0)
    verify_tls: bool = Field(default=True)

    @field_validator("vault_addr")
    @classmethod
    def validate_addr(cls, v: str) -> str:
        """Validate the Vault address is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Unsupported Vault address: {v}")
        return v.rstrip("/")

    @classmethod
    def from_env(cls) -> "VaultBackendConfig":
        """Create VaultBackendConfig by loading values from environment.

        Returns:
            Populated VaultBackendConfig instance.

        Raises:
            RuntimeError: If the default mount point or role is not set.
        """
        config = cls(
            vault_addr=os.environ.get("VAULT_ADDR", DEFAULT_VAULT_ADDR),
            token_renew_threshold=get_renew_threshold(),
            default_mount_point=get_required_env("DEFAULT_VAULT_MOUNT_POINT"),
            default_role=get_required_env("DEFAULT_VAULT_ROLE"),
            service_account_token_path=os.environ.get(
                "SERVICE_ACCOUNT_TOKEN_PATH", DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH
            ),
            request_timeout=int(os.environ.get("VAULT_REQUEST_TIMEOUT", "30")),
            verify_tls=(
                os.environ.get("VAULT_SKIP_VERIFY", "").lower() not in _TRUTHY
            ),
        )
        logger.debug(
            "Loaded vault backend config: addr=%s mount=%s role=%s threshold=%d",
            config.vault_addr,
            config.default_mount_point,
            config.default_role,
            config.token_renew_threshold,
        )
        return config
