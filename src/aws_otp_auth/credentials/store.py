"""Shared AWS credentials file: read, update and clean profiles."""

import configparser
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from configupdater import ConfigUpdater
from configupdater.section import Section

from ..exceptions import (
    CredentialsFileError,
    CredentialsParseError,
    IncompleteCredentialsError,
    ProfileNotFoundError,
)


logger = logging.getLogger(__name__)

ACCESS_KEY_ID = "aws_access_key_id"
SECRET_ACCESS_KEY = "aws_secret_access_key"
SESSION_TOKEN = "aws_session_token"
SESSION_TOKEN_EXPIRATION = "aws_session_token_expiration"

DEFAULT_BACKUP_SUFFIX = ".bak"

PathLike = Union[str, Path]


@dataclass
class Credentials:
    """AWS credentials for a single profile."""
    access_key_id: str
    secret_access_key: str
    session_token: Optional[str] = None
    expiration: Optional[datetime] = None
    profile_name: Optional[str] = None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """True if an expiration is tracked and it is still in the future."""
        if self.expiration is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now < self.expiration


def parse_expiration(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp.

    Returns None for empty, malformed or offset-less values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def format_expiration(value: datetime) -> str:
    """Format a timestamp as RFC 3339 in UTC, e.g. ``2024-05-01T12:00:00Z``."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _load(path: Path) -> ConfigUpdater:
    """Parse the file, keeping comments, blank lines and key layout for the save."""
    updater = ConfigUpdater()
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        # Sections added later must start on a line of their own
        if text and not text.endswith("\n"):
            text += "\n"
        updater.read_string(text, source=str(path))
    except (configparser.Error, UnicodeDecodeError) as e:
        raise CredentialsParseError(f"failed to parse credentials file {path}: {e}") from e
    except OSError as e:
        raise CredentialsFileError(f"failed to load credentials file {path}: {e}") from e
    return updater


def _value(section: Section, key: str) -> str:
    option = section.get(key)
    if option is None or option.value is None:
        return ""
    return option.value.strip()


def _save(updater: ConfigUpdater, path: Path) -> None:
    """Write the whole file to a sibling temp file, then swap it into place."""
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(str(updater))
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise CredentialsFileError(f"failed to save credentials file {path}: {e}") from e


def read_credentials(path: PathLike, profile: str) -> Credentials:
    """Read the credentials of a profile.

    Args:
        path: Path to the credentials file
        profile: Section name to read

    Returns:
        Credentials for the profile

    Raises:
        CredentialsFileError: If the file can't be opened
        CredentialsParseError: If the file is not valid INI
        ProfileNotFoundError: If the profile section is missing
        IncompleteCredentialsError: If the access key or secret key is empty
    """
    path = Path(path)
    updater = _load(path)

    if not updater.has_section(profile):
        raise ProfileNotFoundError(profile)

    section = updater[profile]
    credentials = Credentials(
        access_key_id=_value(section, ACCESS_KEY_ID),
        secret_access_key=_value(section, SECRET_ACCESS_KEY),
        session_token=_value(section, SESSION_TOKEN) or None,
        expiration=parse_expiration(_value(section, SESSION_TOKEN_EXPIRATION)),
        profile_name=profile,
    )

    if not (credentials.access_key_id and credentials.secret_access_key):
        raise IncompleteCredentialsError(profile)

    return credentials


def backup_credentials_file(path: PathLike, suffix: str = DEFAULT_BACKUP_SUFFIX) -> Path:
    """Copy the credentials file byte for byte next to itself, mode included.

    An existing backup is overwritten.

    Returns:
        Path of the backup file
    """
    path = Path(path)
    backup_path = path.with_name(path.name + suffix)
    try:
        shutil.copyfile(path, backup_path)
        shutil.copymode(path, backup_path)
    except OSError as e:
        raise CredentialsFileError(f"failed to backup credentials file: {e}") from e
    logger.debug(f"Backed up {path} to {backup_path}")
    return backup_path


def update_credentials(
    path: PathLike,
    profile: str,
    credentials: Credentials,
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX
) -> None:
    """Back up the credentials file, then store new session credentials in a profile.

    The profile section is created if missing. Other sections and keys are
    left as they are. Nothing is written if the backup fails.

    Args:
        path: Path to the credentials file
        profile: Section to update
        credentials: Session credentials; expiration must be set
        backup_suffix: Suffix appended to the file name for the backup

    Raises:
        CredentialsFileError: If the backup or the save fails
        CredentialsParseError: If the file is not valid INI
    """
    path = Path(path)
    backup_credentials_file(path, backup_suffix)

    updater = _load(path)
    if not updater.has_section(profile):
        logger.info(f"Creating profile '{profile}' in {path}")
        updater.add_section(profile)

    section = updater[profile]
    section[ACCESS_KEY_ID] = credentials.access_key_id
    section[SECRET_ACCESS_KEY] = credentials.secret_access_key
    section[SESSION_TOKEN] = credentials.session_token or ""
    section[SESSION_TOKEN_EXPIRATION] = format_expiration(credentials.expiration)

    _save(updater, path)
    logger.info(f"Updated credentials for profile '{profile}' in {path}")


def clean_expired_token(
    path: PathLike,
    profile: str,
    now: Optional[datetime] = None
) -> bool:
    """Remove an expired session token and its expiration from a profile.

    Does nothing when the file or profile is missing, or when the expiration
    is absent, unparsable or still in the future.

    Returns:
        True if the profile was cleaned
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No credentials file at {path}, nothing to clean")
        return False

    updater = _load(path)
    if not updater.has_section(profile):
        return False

    section = updater[profile]
    token = _value(section, SESSION_TOKEN)
    expiration = parse_expiration(_value(section, SESSION_TOKEN_EXPIRATION))
    if not token or expiration is None:
        return False

    now = now or datetime.now(timezone.utc)
    if not now > expiration:
        return False

    del section[SESSION_TOKEN]
    del section[SESSION_TOKEN_EXPIRATION]
    _save(updater, path)
    logger.info(f"Removed expired session token from profile '{profile}'")
    return True
