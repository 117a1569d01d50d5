"""
Tests for SecretReader.
"""
import pytest

from externalsecrets_vault.exceptions import (
    KeyNotFound,
    SecretFormatMismatch,
    SecretReadFailed,
)
from externalsecrets_vault.models import AuthContext, Session
from externalsecrets_vault.vault.reader import SecretReader
from externalsecrets_vault.vault.session import SessionManager

from .conftest import (
    KV1_SECRET,
    MOUNT_POINT,
    QUOTED_SECRET_VALUE,
    RENEW_THRESHOLD,
    ROLE,
    SECRET_DATA,
    SECRET_KEY,
)

AUTH = AuthContext(mount_point=MOUNT_POINT, role=ROLE)


@pytest.fixture
def reader(client_mock, credentials):
    return SecretReader(SessionManager(
        client_mock,
        credential_source=credentials,
        session=Session(renew_threshold=RENEW_THRESHOLD),
    ))


class TestSecretReader:
    """Tests for authenticated, version-aware reads."""

    @pytest.mark.asyncio
    async def test_get_property_defaults_to_v2(self, reader, client_mock):
        """Test an unspecified version unwraps data.data."""
        value = await reader.get_property(SECRET_KEY, SECRET_KEY, AUTH)
        assert value == QUOTED_SECRET_VALUE
        client_mock.read.assert_awaited_once_with(SECRET_KEY)

    @pytest.mark.asyncio
    async def test_read_data_v1(self, reader, client_mock):
        """Test v1 read returns the data mapping itself."""
        client_mock.read.return_value = KV1_SECRET
        assert await reader.read_data('secret/app', AUTH, 1) == SECRET_DATA

    @pytest.mark.asyncio
    async def test_one_read_per_call(self, reader, client_mock):
        """Test secret content is never cached."""
        await reader.get_property(SECRET_KEY, SECRET_KEY, AUTH)
        await reader.get_property(SECRET_KEY, SECRET_KEY, AUTH)
        assert client_mock.read.await_count == 2
        client_mock.login.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_key_not_found(self, reader):
        """Test the requested key must be present in the document."""
        with pytest.raises(KeyNotFound) as exc:
            await reader.get_property('secret/app', 'missing', AUTH)
        assert exc.value.key == 'missing'
        assert exc.value.path == 'secret/app'

    @pytest.mark.asyncio
    async def test_wrong_version_mismatch(self, reader, client_mock):
        """Test a v1 response declared as v2 raises a format mismatch."""
        client_mock.read.return_value = KV1_SECRET
        with pytest.raises(SecretFormatMismatch):
            await reader.get_property(SECRET_KEY, SECRET_KEY, AUTH, 2)

    @pytest.mark.asyncio
    async def test_empty_response(self, reader, client_mock):
        """Test a missing secret path is a read failure."""
        client_mock.read.return_value = None
        with pytest.raises(SecretReadFailed):
            await reader.read_data('secret/none', AUTH)

    @pytest.mark.asyncio
    async def test_read_error_translated(self, reader, client_mock):
        """Test foreign client errors become SecretReadFailed."""
        client_mock.read.side_effect = TimeoutError('timed out')
        with pytest.raises(SecretReadFailed) as exc:
            await reader.read_data('secret/app', AUTH)
        assert isinstance(exc.value.__cause__, TimeoutError)
