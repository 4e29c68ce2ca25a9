"""The refresh flow: check the target profile, get an OTP, exchange it, save."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO, Union

from .credentials.session import get_session_token
from .credentials.store import DEFAULT_BACKUP_SUFFIX, read_credentials, update_credentials
from .exceptions import (
    AuthFlowError,
    CredentialsError,
    OTPAuthError,
    OTPReadError,
    TokenExchangeError,
)
from .otp import get_otp


logger = logging.getLogger(__name__)

DEFAULT_DURATION_SECONDS = 8 * 60 * 60


@dataclass
class RefreshResult:
    """Outcome of a refresh run."""
    profile: str
    refreshed: bool
    expiration: Optional[datetime] = None


def run_auth_flow(
    sts_client,
    credentials_path: Union[str, Path],
    profile: str,
    mfa_serial: str,
    duration_seconds: int = DEFAULT_DURATION_SECONDS,
    provided_otp: str = "",
    force: bool = False,
    input_stream: Optional[TextIO] = None,
    now: Optional[datetime] = None,
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX
) -> RefreshResult:
    """Refresh the session credentials of a profile if they are not valid.

    Args:
        sts_client: STS client authenticated with the long-term profile
        credentials_path: Path to the shared credentials file
        profile: Profile that receives the session credentials
        mfa_serial: MFA device ARN
        duration_seconds: Requested session lifetime
        provided_otp: OTP given up front; prompts when empty
        force: Accepted, but valid credentials still end the run early
        input_stream: Where to read the OTP from (stdin by default)
        now: Current time, for the validity check
        backup_suffix: Suffix of the backup taken before writing

    Returns:
        RefreshResult; ``refreshed`` is False when the existing session was kept

    Raises:
        AuthFlowError: If reading the OTP, the exchange or the save fails
    """
    now = now or datetime.now(timezone.utc)

    current = None
    try:
        current = read_credentials(credentials_path, profile)
    except CredentialsError as e:
        # Missing or broken target profile just means a refresh is needed
        logger.warning(f"Failed to read credentials: {e}")

    if current is not None and current.is_valid(now):
        logger.info("Existing credentials are valid. No update necessary.")
        return RefreshResult(profile=profile, refreshed=False, expiration=current.expiration)

    # Never reached: the check above already returned, so --force does not
    # bypass a valid session.
    if not force and current is not None and current.is_valid(now):
        return RefreshResult(profile=profile, refreshed=False, expiration=current.expiration)

    try:
        code = get_otp(provided_otp, input_stream)
    except OTPReadError as e:
        raise AuthFlowError("otp", f"failed to obtain OTP: {e}") from e

    try:
        session_creds = get_session_token(sts_client, mfa_serial, code, duration_seconds)
    except TokenExchangeError as e:
        raise AuthFlowError("exchange", f"failed to get new session token: {e}") from e

    try:
        update_credentials(credentials_path, profile, session_creds, backup_suffix)
    except OTPAuthError as e:
        raise AuthFlowError("commit", f"failed to update credentials file: {e}") from e

    logger.info("AWS credentials successfully updated.")
    return RefreshResult(profile=profile, refreshed=True, expiration=session_creds.expiration)
