"""Refresh a profile from Python instead of the command line."""

from pathlib import Path

import boto3

from aws_otp_auth import read_credentials, run_auth_flow
from aws_otp_auth.credentials import clean_expired_token, resolve_mfa_device
from aws_otp_auth.exceptions import OTPAuthError


CREDENTIALS_FILE = Path.home() / ".aws" / "credentials"


def refresh_example():
    """Refresh the 'default' profile from 'default-long-term' keys."""
    print("Refreshing AWS session credentials")
    print("=" * 50)

    session = boto3.Session(profile_name="default-long-term", region_name="us-east-1")
    mfa_serial = resolve_mfa_device(session.client("iam"), "alice")

    clean_expired_token(CREDENTIALS_FILE, "default")

    try:
        result = run_auth_flow(
            session.client("sts"),
            CREDENTIALS_FILE,
            "default",
            mfa_serial,
            duration_seconds=3600
        )
    except OTPAuthError as e:
        print(f"Refresh failed: {e}")
        return

    if result.refreshed:
        print(f"New session expires at {result.expiration}")
    else:
        print("Existing session is still valid")


def show_profile_example():
    """Print the session state of a profile."""
    creds = read_credentials(CREDENTIALS_FILE, "default")
    print(f"Access key: {creds.access_key_id[:4]}****")
    print(f"Session token: {'yes' if creds.session_token else 'no'}")
    print(f"Expires: {creds.expiration or 'not tracked'}")


if __name__ == "__main__":
    refresh_example()
    show_profile_example()
