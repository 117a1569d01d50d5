import asyncio
import base64
import json
from collections import Counter
from unittest.mock import AsyncMock, MagicMock

import pytest

from externalsecrets_vault.backend import VaultBackend
from externalsecrets_vault.models import Session
from externalsecrets_vault.vault.session import SessionManager

DEFAULT_MOUNT_POINT = 'defaultFakeMountPoint'
DEFAULT_ROLE = 'defaultFakeRole'
MOUNT_POINT = 'fakeMountPoint'
ROLE = 'fakeRole'
SECRET_KEY = 'fakeSecretKey'
SECRET_VALUE = 'open, sesame'
SECRET_DATA = {SECRET_KEY: SECRET_VALUE}
QUOTED_SECRET_VALUE = json.dumps(SECRET_DATA, separators=(',', ':'))
QUOTED_SECRET_VALUE_B64 = base64.b64encode(QUOTED_SECRET_VALUE.encode()).decode()
JWT = 'this-is-a-jwt-token'
RENEW_THRESHOLD = 30

KV1_SECRET = {'data': SECRET_DATA}
KV2_SECRET = {'data': {'data': SECRET_DATA, 'metadata': {'version': 3}}}


class FakeStoreClient:
    """In-memory store client counting calls; yields on every call."""

    def __init__(self, secret=None, ttl=3600, renewed_ttl=3600, token=None):
        self.token = token
        self.secret = KV2_SECRET if secret is None else secret
        self.ttl = ttl
        self.renewed_ttl = renewed_ttl
        self.calls = Counter()

    async def login(self, mount_point, role, jwt):
        self.calls['login'] += 1
        await asyncio.sleep(0)
        return '1234'

    async def lookup_self(self):
        self.calls['lookup'] += 1
        await asyncio.sleep(0)
        return self.ttl

    async def renew_self(self):
        self.calls['renew'] += 1
        await asyncio.sleep(0)
        self.ttl = self.renewed_ttl

    async def read(self, path):
        self.calls['read'] += 1
        await asyncio.sleep(0)
        return self.secret


@pytest.fixture
def client_mock():
    """Store client mock with no token bound; must renew on lookup."""
    client = MagicMock()
    client.token = None
    client.read = AsyncMock(return_value=KV2_SECRET)
    client.lookup_self = AsyncMock(return_value=15)
    client.renew_self = AsyncMock(return_value=None)
    client.login = AsyncMock(return_value='1234')
    return client


@pytest.fixture
def credentials():
    source = MagicMock()
    source.fetch_identity_token = AsyncMock(return_value=JWT)
    return source


@pytest.fixture
def make_backend(client_mock, credentials):
    """Factory building a VaultBackend, optionally with an existing token."""
    def _make(client=None, token=None):
        client = client or client_mock
        sessions = SessionManager(
            client,
            credential_source=credentials,
            session=Session(token=token, renew_threshold=RENEW_THRESHOLD),
        )
        return VaultBackend(
            client,
            default_mount_point=DEFAULT_MOUNT_POINT,
            default_role=DEFAULT_ROLE,
            sessions=sessions,
        )
    return _make


@pytest.fixture
def backend(make_backend):
    return make_backend()
