"""STS and IAM calls: session tokens, caller identity and MFA devices."""

import logging
from typing import Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .store import Credentials
from ..exceptions import (
    AuthenticationError,
    ConfigurationError,
    MFADeviceLookupError,
    TokenExchangeError,
)


logger = logging.getLogger(__name__)


class SessionCredentials(Credentials):
    """Temporary credentials returned by ``GetSessionToken``.

    Session token and expiration are always set.
    """
    pass


def get_session_token(
    sts_client,
    mfa_serial: str,
    token_code: str,
    duration_seconds: int
) -> SessionCredentials:
    """Exchange an MFA code for temporary credentials.

    A single ``GetSessionToken`` call is made; failures are not retried.

    Args:
        sts_client: boto3 STS client for the long-term profile
        mfa_serial: ARN (or serial number) of the MFA device
        token_code: One-time password from the device
        duration_seconds: Requested lifetime of the session

    Returns:
        New session credentials

    Raises:
        TokenExchangeError: If the call fails or returns no credentials
    """
    logger.debug(f"Requesting session token for {mfa_serial} ({duration_seconds}s)")
    try:
        response = sts_client.get_session_token(
            DurationSeconds=duration_seconds,
            SerialNumber=mfa_serial,
            TokenCode=token_code
        )
    except (ClientError, BotoCoreError) as e:
        raise TokenExchangeError(f"failed to get session token: {e}") from e

    temp_creds = response.get("Credentials") if response else None
    if not temp_creds:
        raise TokenExchangeError("failed to get session token: no credentials returned")

    logger.info(f"Temporary credentials issued, expires: {temp_creds['Expiration']}")
    return SessionCredentials(
        access_key_id=temp_creds["AccessKeyId"],
        secret_access_key=temp_creds["SecretAccessKey"],
        session_token=temp_creds["SessionToken"],
        expiration=temp_creds["Expiration"],
    )


def check_authentication(sts_client) -> Dict[str, str]:
    """Validate the client's credentials with ``GetCallerIdentity``.

    Returns:
        Dictionary with account_id, user_id and arn

    Raises:
        AuthenticationError: If the call fails
    """
    try:
        response = sts_client.get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        raise AuthenticationError(f"authentication check failed: {e}") from e

    return {
        "account_id": response["Account"],
        "user_id": response["UserId"],
        "arn": response["Arn"]
    }


def username_from_arn(arn: str) -> Optional[str]:
    """Extract the IAM user name from a user ARN.

    ``arn:aws:iam::123456789012:user/ops/alice`` gives ``alice``. Returns None
    for ARNs that don't name an IAM user (assumed roles, root).
    """
    if ":user/" not in arn:
        return None
    return arn.split(":user/")[-1].split("/")[-1] or None


def list_mfa_devices(iam_client, username: str) -> List[str]:
    """List the serial numbers of a user's MFA devices.

    Raises:
        MFADeviceLookupError: If the IAM call fails
    """
    try:
        response = iam_client.list_mfa_devices(UserName=username)
    except (ClientError, BotoCoreError) as e:
        raise MFADeviceLookupError(f"error listing MFA devices for user {username}: {e}") from e

    return [device["SerialNumber"] for device in response.get("MFADevices", [])]


def resolve_mfa_device(
    iam_client,
    username: str,
    mfa_serial: Optional[str] = None
) -> str:
    """Pick the MFA device to authenticate with.

    An explicit serial wins without any IAM call. Otherwise the user must
    have exactly one registered device.

    Raises:
        ConfigurationError: If the user has no device, or more than one
        MFADeviceLookupError: If the devices can't be listed
    """
    if mfa_serial:
        return mfa_serial

    devices = list_mfa_devices(iam_client, username)
    if not devices:
        raise ConfigurationError(f"no MFA devices found for user {username}")
    if len(devices) > 1:
        listing = "\n".join(f"  {device}" for device in devices)
        raise ConfigurationError(
            f"multiple MFA devices found for user {username}. "
            f"Please specify one with --mfa-arn. Devices:\n{listing}",
            candidates=devices
        )

    logger.info(f"Using MFA device ARN: {devices[0]}")
    return devices[0]
