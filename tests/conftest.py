import os
import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

# Make the src/ layout importable without installing the package
sys.path.insert(0, os.path.abspath(
    os.path.join(os.path.dirname(__file__), '..', 'src')))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the real home directory and AWS environment out of the tests."""
    home = tmp_path / "home"
    (home / ".aws").mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    for name in (
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "AWS_SHARED_CREDENTIALS_FILE",
        "AWS_OTP_AUTH_CONFIG",
        "AWS_PROFILE",
    ):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def write_credentials(tmp_path):
    """Write a credentials file and return its path."""
    def _write(content: str, name: str = "credentials"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def session_response(now):
    """A GetSessionToken response as boto3 returns it."""
    return {
        "Credentials": {
            "AccessKeyId": "ASIANEWACCESSKEY",
            "SecretAccessKey": "newSecretKey",
            "SessionToken": "newSessionToken",
            "Expiration": now + timedelta(hours=8),
        }
    }


@pytest.fixture
def sts_client(session_response):
    client = MagicMock()
    client.get_session_token.return_value = session_response
    client.get_caller_identity.return_value = {
        "Account": "123456789012",
        "UserId": "AIDEXAMPLE",
        "Arn": "arn:aws:iam::123456789012:user/alice",
    }
    return client


@pytest.fixture
def iam_client():
    client = MagicMock()
    client.list_mfa_devices.return_value = {
        "MFADevices": [{"SerialNumber": "arn:aws:iam::123456789012:mfa/alice"}]
    }
    return client
