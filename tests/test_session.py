from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from aws_otp_auth.credentials.session import (
    SessionCredentials,
    check_authentication,
    get_session_token,
    list_mfa_devices,
    resolve_mfa_device,
    username_from_arn,
)
from aws_otp_auth.exceptions import (
    AuthenticationError,
    ConfigurationError,
    MFADeviceLookupError,
    TokenExchangeError,
)


MFA_ARN = "arn:aws:iam::123456789012:mfa/alice"


def _client_error(operation: str, message: str = "MultiFactorAuthentication failed with invalid MFA one time pass code.") -> ClientError:
    return ClientError({"Error": {"Code": "AccessDenied", "Message": message}}, operation)


class TestGetSessionToken:

    def test_success(self, sts_client, session_response):
        creds = get_session_token(sts_client, MFA_ARN, "123456", 3600)

        sts_client.get_session_token.assert_called_once_with(
            DurationSeconds=3600,
            SerialNumber=MFA_ARN,
            TokenCode="123456"
        )
        assert isinstance(creds, SessionCredentials)
        assert creds.access_key_id == "ASIANEWACCESSKEY"
        assert creds.secret_access_key == "newSecretKey"
        assert creds.session_token == "newSessionToken"
        assert creds.expiration == session_response["Credentials"]["Expiration"]

    def test_client_error(self, sts_client):
        error = _client_error("GetSessionToken")
        sts_client.get_session_token.side_effect = error

        with pytest.raises(TokenExchangeError) as exc_info:
            get_session_token(sts_client, MFA_ARN, "000000", 3600)

        assert "failed to get session token" in str(exc_info.value)
        assert exc_info.value.__cause__ is error
        assert sts_client.get_session_token.call_count == 1

    def test_network_error(self, sts_client):
        sts_client.get_session_token.side_effect = EndpointConnectionError(
            endpoint_url="https://sts.amazonaws.com"
        )

        with pytest.raises(TokenExchangeError):
            get_session_token(sts_client, MFA_ARN, "123456", 3600)

    def test_empty_response(self, sts_client):
        sts_client.get_session_token.return_value = {"ResponseMetadata": {}}

        with pytest.raises(TokenExchangeError) as exc_info:
            get_session_token(sts_client, MFA_ARN, "123456", 3600)
        assert "no credentials returned" in str(exc_info.value)


class TestCheckAuthentication:

    def test_valid(self, sts_client):
        info = check_authentication(sts_client)

        assert info == {
            "account_id": "123456789012",
            "user_id": "AIDEXAMPLE",
            "arn": "arn:aws:iam::123456789012:user/alice"
        }

    def test_invalid(self, sts_client):
        sts_client.get_caller_identity.side_effect = _client_error(
            "GetCallerIdentity", "The security token included in the request is invalid."
        )

        with pytest.raises(AuthenticationError) as exc_info:
            check_authentication(sts_client)
        assert "security token included in the request is invalid" in str(exc_info.value)


@pytest.mark.parametrize("arn,expected", [
    ("arn:aws:iam::123456789012:user/alice", "alice"),
    ("arn:aws:iam::123456789012:user/ops/team/bob", "bob"),
    ("arn:aws:sts::123456789012:assumed-role/Admin/session", None),
    ("arn:aws:iam::123456789012:root", None),
])
def test_username_from_arn(arn, expected):
    assert username_from_arn(arn) == expected


class TestMFADevices:

    def test_list(self, iam_client):
        assert list_mfa_devices(iam_client, "alice") == [MFA_ARN]
        iam_client.list_mfa_devices.assert_called_once_with(UserName="alice")

    def test_list_failure(self, iam_client):
        iam_client.list_mfa_devices.side_effect = _client_error("ListMFADevices", "denied")

        with pytest.raises(MFADeviceLookupError):
            list_mfa_devices(iam_client, "alice")

    def test_explicit_serial_skips_lookup(self, iam_client):
        assert resolve_mfa_device(iam_client, "alice", "arn:explicit") == "arn:explicit"
        iam_client.list_mfa_devices.assert_not_called()

    def test_single_device_is_selected(self, iam_client):
        assert resolve_mfa_device(iam_client, "alice") == MFA_ARN

    def test_no_device(self):
        iam_client = MagicMock()
        iam_client.list_mfa_devices.return_value = {"MFADevices": []}

        with pytest.raises(ConfigurationError) as exc_info:
            resolve_mfa_device(iam_client, "alice")
        assert "no MFA devices found for user alice" in str(exc_info.value)

    def test_multiple_devices_are_never_guessed(self):
        devices = [MFA_ARN, "arn:aws:iam::123456789012:mfa/alice-backup"]
        iam_client = MagicMock()
        iam_client.list_mfa_devices.return_value = {
            "MFADevices": [{"SerialNumber": serial} for serial in devices]
        }

        with pytest.raises(ConfigurationError) as exc_info:
            resolve_mfa_device(iam_client, "alice")

        assert exc_info.value.candidates == devices
        assert "--mfa-arn" in str(exc_info.value)
        for serial in devices:
            assert serial in str(exc_info.value)
