"""
KV Payload Parsing — Version-tagged unwrapping and value serialization.

The KV secrets engine stores the same document at two depths:
- KV v1: ``{"data": {...fields...}}``
- KV v2: ``{"data": {"data": {...fields...}, "metadata": {...}}}``

``parse_payload`` makes the version explicit by producing either a
``KvV1Payload`` or a ``KvV2Payload``; a response that lacks the layer its
version requires is rejected instead of being unwrapped at the wrong depth.
"""
import base64
from typing import Annotated, Any, Literal, Union

import orjson
from pydantic import BaseModel, Field

from ..exceptions import SecretFormatMismatch

SUPPORTED_KV_VERSIONS = (1, 2)


class KvV1Payload(BaseModel):
    """Secret read from a KV version 1 engine."""

    kv_version: Literal[1] = 1
    data: dict[str, Any]


class KvV2Payload(BaseModel):
    """Secret read from a KV version 2 engine."""

    kv_version: Literal[2] = 2
    data: dict[str, Any]
    metadata: dict[str, Any] = Field(default_factory=dict)


KvPayload = Annotated[
    Union[KvV1Payload, KvV2Payload], Field(discriminator="kv_version")
]


def _require_mapping(value: Any, layer: str, path: str, kv_version: int) -> dict:
    if not isinstance(value, dict):
        raise SecretFormatMismatch(
            f"Secret at '{path}' has no mapping under '{layer}' "
            f"(kvVersion={kv_version})"
        )
    return value


def parse_payload(raw: Any, kv_version: int, path: str = "") -> KvPayload:
    """Unwrap a raw store response according to its KV version.

    Args:
        raw: Response body returned by the store for a read.
        kv_version: Declared storage-format version (1 or 2).
        path: Secret path, used for error messages only.

    Returns:
        ``KvV1Payload`` or ``KvV2Payload``.

    Raises:
        SecretFormatMismatch: If the version is unknown or the response does
            not carry the layer that version requires.
    """
    if kv_version not in SUPPORTED_KV_VERSIONS:
        raise SecretFormatMismatch(f'Unknown "kvVersion" received: {kv_version!r}')
    body = _require_mapping(raw, "response", path, kv_version)
    outer = _require_mapping(body.get("data"), "data", path, kv_version)
    if kv_version == 1:
        return KvV1Payload(data=outer)
    inner = _require_mapping(outer.get("data"), "data.data", path, kv_version)
    metadata = outer.get("metadata")
    return KvV2Payload(
        data=inner,
        metadata=metadata if isinstance(metadata, dict) else {},
    )


# ---------------------------------------------------------------------------
# Value serialization
# ---------------------------------------------------------------------------

def serialize_value(value: Any) -> str:
    """Serialize secret data to its compact JSON string form.

    Args:
        value: Extracted secret data (usually a dict).

    Returns:
        orjson-encoded string, e.g. ``{"k":"open, sesame"}``.
    """
    return orjson.dumps(value).decode("utf-8")


def property_value(value: Any) -> str:
    """Render a single secret field: strings as-is, anything else as JSON."""
    if isinstance(value, str):
        return value
    return serialize_value(value)


def encode_value(value: str) -> str:
    """Base64-encode a resolved value for a Kubernetes Secret ``data`` field."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")
