"""Command-line interface for aws-otp-auth."""

import getpass
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import boto3
import click
from botocore.exceptions import BotoCoreError

from .auth_flow import run_auth_flow
from .config import load_settings
from .credentials.session import check_authentication, resolve_mfa_device, username_from_arn
from .credentials.store import clean_expired_token, format_expiration, read_credentials
from .exceptions import AuthenticationError, ConfigurationError, OTPAuthError


logger = logging.getLogger(__name__)


def create_session(profile: str, region: str) -> boto3.Session:
    """Create a boto3 session for the long-term profile."""
    logger.debug(f"Creating session for profile '{profile}' in {region}")
    return boto3.Session(profile_name=profile, region_name=region)


def resolve_username(user: Optional[str], sts_client) -> str:
    """Work out the IAM user whose MFA devices should be listed.

    Order: explicit value, the caller identity of the source profile, the
    current OS user.
    """
    if user:
        return user

    try:
        identity = check_authentication(sts_client)
    except AuthenticationError as e:
        logger.warning(f"Could not determine IAM user from caller identity: {e}")
    else:
        username = username_from_arn(identity["arn"])
        if username:
            return username
        logger.warning(f"Could not extract username from ARN: {identity['arn']}")

    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        raise ConfigurationError("unable to determine current OS user; please provide --user") from e


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx: click.Context, verbose: bool, debug: bool):
    """Refresh AWS session credentials with an MFA one-time password."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose or debug


@main.command()
@click.option('--profile-from', default=None,
              help='AWS profile to use for obtaining session credentials [default: default-long-term]')
@click.option('--profile-to', default=None,
              help='AWS profile to update with new session credentials [default: default]')
@click.option('--region', default=None, help='AWS region (auto-detected if not provided)')
@click.option('--mfa-arn', default=None, help='MFA device ARN (looked up if not provided)')
@click.option('--user', default=None, help='IAM user name (derived from the source profile if not provided)')
@click.option('--otp', default="", help='One-time password for authentication')
@click.option('--force', is_flag=True, help='Force re-authentication even if credentials are valid')
@click.option('--duration', 'duration_seconds', type=int, default=None,
              help='Session duration in seconds [default: 28800]')
@click.option('--config', '-c', type=click.Path(path_type=Path), default=None, help='Config file path')
@click.option('--credentials-file', type=click.Path(path_type=Path), default=None,
              help='Shared credentials file [default: ~/.aws/credentials]')
@click.option('--verbose', '-v', 'verbose_flag', is_flag=True, help='Enable verbose output')
@click.pass_context
def refresh(
    ctx: click.Context,
    profile_from: Optional[str],
    profile_to: Optional[str],
    region: Optional[str],
    mfa_arn: Optional[str],
    user: Optional[str],
    otp: str,
    force: bool,
    duration_seconds: Optional[int],
    config: Optional[Path],
    credentials_file: Optional[Path],
    verbose_flag: bool
):
    """Exchange an OTP for session credentials and save them to a profile."""
    verbose = verbose_flag or ctx.obj.get("verbose", False)
    root_logger = logging.getLogger()
    if verbose_flag and root_logger.level > logging.INFO:
        root_logger.setLevel(logging.INFO)
    try:
        settings = load_settings(
            config,
            profile_from=profile_from,
            profile_to=profile_to,
            region=region,
            mfa_arn=mfa_arn,
            user=user,
            duration_seconds=duration_seconds,
            credentials_file=credentials_file
        )
        credentials_path = settings.resolved_credentials_file()

        session = create_session(settings.profile_from, settings.resolved_region())
        sts_client = session.client("sts")

        mfa_serial = settings.mfa_arn
        if not mfa_serial:
            username = resolve_username(settings.user, sts_client)
            mfa_serial = resolve_mfa_device(session.client("iam"), username)
            if verbose:
                click.echo(f"Using MFA device ARN: {mfa_serial}", err=True)

        clean_expired_token(credentials_path, settings.profile_to)

        result = run_auth_flow(
            sts_client,
            credentials_path,
            settings.profile_to,
            mfa_serial,
            duration_seconds=settings.duration_seconds,
            provided_otp=otp,
            force=force,
            backup_suffix=settings.backup_suffix
        )
    except (OTPAuthError, BotoCoreError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if not result.refreshed:
        click.echo("Existing credentials are valid. No update necessary.")
    elif verbose:
        click.echo("AWS credentials successfully updated.")
        click.echo(f"  Profile: {result.profile}")
        click.echo(f"  Expires: {format_expiration(result.expiration)}")


@main.command()
@click.option('--profile', '-p', default=None, help='Profile to inspect [default: default]')
@click.option('--config', '-c', type=click.Path(path_type=Path), default=None, help='Config file path')
@click.option('--credentials-file', type=click.Path(path_type=Path), default=None,
              help='Shared credentials file [default: ~/.aws/credentials]')
@click.pass_context
def status(
    ctx: click.Context,
    profile: Optional[str],
    config: Optional[Path],
    credentials_file: Optional[Path]
):
    """Show whether a profile holds valid session credentials."""
    try:
        settings = load_settings(config, profile_to=profile, credentials_file=credentials_file)
        creds = read_credentials(settings.resolved_credentials_file(), settings.profile_to)
    except OTPAuthError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    name = settings.profile_to
    now = datetime.now(timezone.utc)
    if creds.expiration is None:
        click.echo(f"- {name}: no session expiration tracked")
    elif creds.is_valid(now):
        remaining = creds.expiration - now
        minutes = int(remaining.total_seconds() // 60)
        click.echo(
            f"✓ {name}: valid until {format_expiration(creds.expiration)} "
            f"({minutes // 60}h {minutes % 60}m left)"
        )
    else:
        click.echo(f"✗ {name}: expired at {format_expiration(creds.expiration)}")


@main.command()
@click.argument('profile')
@click.option('--region', default=None, help='AWS region (auto-detected if not provided)')
@click.pass_context
def validate(ctx: click.Context, profile: str, region: Optional[str]):
    """Validate AWS credentials for a profile."""
    try:
        settings = load_settings(region=region)
        session = create_session(profile, settings.resolved_region())
        account_info = check_authentication(session.client("sts"))
    except (OTPAuthError, BotoCoreError) as e:
        click.echo(f"✗ Profile '{profile}' has invalid credentials: {e}", err=True)
        ctx.exit(1)

    click.echo(f"✓ Profile '{profile}' is valid")
    click.echo(f"  Account ID: {account_info['account_id']}")
    click.echo(f"  ARN: {account_info['arn']}")


if __name__ == "__main__":
    main()
