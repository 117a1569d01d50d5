"""
Data models shared by the session manager, secret reader and resolver.

``SecretSpec`` mirrors the ``spec`` block of an ExternalSecret manifest and
accepts both the camelCase manifest names and their snake_case equivalents.
"""
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SessionState(str, Enum):
    """Authentication state derived from a ``Session``."""

    NO_TOKEN = "no_token"
    VALID = "valid"
    NEEDS_RENEWAL = "needs_renewal"


class Session(BaseModel):
    """Vault authentication session owned by a ``SessionManager``.

    ``ttl`` is the last value reported by a token self-lookup; it is unknown
    (``None``) right after a login until the next lookup.
    """

    token: Optional[str] = Field(default=None, repr=False)
    ttl: Optional[int] = None
    renew_threshold: int = Field(default=60, ge=0)

    model_config = ConfigDict(validate_assignment=True)

    @property
    def state(self) -> SessionState:
        if not self.token:
            return SessionState.NO_TOKEN
        if self.ttl is not None and self.ttl <= self.renew_threshold:
            return SessionState.NEEDS_RENEWAL
        return SessionState.VALID

    def must_renew(self, ttl: int) -> bool:
        """Return True when ``ttl`` is at or below the renewal threshold."""
        return ttl <= self.renew_threshold


class AuthContext(BaseModel):
    """Mount point and role used for a Kubernetes auth login."""

    mount_point: str
    role: str

    model_config = ConfigDict(frozen=True)


class SecretDataEntry(BaseModel):
    """One ``{key, name}`` item of a manifest ``data`` list."""

    key: str
    name: str
    property_name: Optional[str] = Field(default=None, alias="property")
    is_binary: bool = Field(default=False, alias="isBinary")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def validate_binary_property(self) -> "SecretDataEntry":
        """isBinary values are stored base64 already; only fields qualify."""
        if self.is_binary and self.property_name is None:
            raise ValueError(
                f"isBinary requires a property for key '{self.key}'"
            )
        return self


class SecretSpec(BaseModel):
    """Declarative secret request as found in an ExternalSecret manifest."""

    backend_type: str = Field(default="vault", alias="backendType")
    vault_mount_point: Optional[str] = Field(default=None, alias="vaultMountPoint")
    vault_role: Optional[str] = Field(default=None, alias="vaultRole")
    kv_version: Literal[1, 2] = Field(default=2, alias="kvVersion")
    data: list[SecretDataEntry] = Field(default_factory=list)
    data_from: list[str] = Field(default_factory=list, alias="dataFrom")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("kv_version", mode="before")
    @classmethod
    def default_kv_version(cls, v):
        """An explicit null kvVersion means unspecified, i.e. version 2."""
        return 2 if v is None else v

    def auth_context(self, default_mount_point: str, default_role: str) -> AuthContext:
        """Resolve the AuthContext, using defaults only for absent fields.

        An explicitly empty string is an override, not an absence.
        """
        return AuthContext(
            mount_point=(
                default_mount_point
                if self.vault_mount_point is None
                else self.vault_mount_point
            ),
            role=default_role if self.vault_role is None else self.vault_role,
        )
