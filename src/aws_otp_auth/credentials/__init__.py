"""AWS credentials file handling and STS session tokens."""

from .store import (
    Credentials,
    read_credentials,
    update_credentials,
    clean_expired_token,
    backup_credentials_file
)
from .session import (
    SessionCredentials,
    get_session_token,
    check_authentication,
    list_mfa_devices,
    resolve_mfa_device,
    username_from_arn
)

__all__ = [
    "Credentials",
    "SessionCredentials",
    "read_credentials",
    "update_credentials",
    "clean_expired_token",
    "backup_credentials_file",
    "get_session_token",
    "check_authentication",
    "list_mfa_devices",
    "resolve_mfa_device",
    "username_from_arn"
]
