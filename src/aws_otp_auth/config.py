"""Settings for aws-otp-auth: defaults, YAML config file, environment and CLI flags."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .auth_flow import DEFAULT_DURATION_SECONDS
from .credentials.store import DEFAULT_BACKUP_SUFFIX
from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AWS_OTP_AUTH_CONFIG"
DEFAULT_REGION = "us-east-1"

# STS GetSessionToken limits for IAM users
MIN_DURATION_SECONDS = 900
MAX_DURATION_SECONDS = 129600


def default_config_path() -> Path:
    return Path.home() / ".aws" / "otp_auth.yml"


class Settings(BaseModel):
    """Resolved settings for a refresh run."""

    profile_from: str = Field(
        default="default-long-term",
        description="Profile holding the long-term keys"
    )
    profile_to: str = Field(
        default="default",
        description="Profile that receives the session credentials"
    )
    region: Optional[str] = Field(default=None, description="AWS region for STS/IAM")
    mfa_arn: Optional[str] = Field(default=None, description="MFA device ARN")
    user: Optional[str] = Field(default=None, description="IAM user name")
    duration_seconds: int = Field(
        default=DEFAULT_DURATION_SECONDS,
        ge=MIN_DURATION_SECONDS,
        le=MAX_DURATION_SECONDS
    )
    credentials_file: Optional[Path] = Field(default=None, description="Shared credentials file")
    backup_suffix: str = Field(default=DEFAULT_BACKUP_SUFFIX, min_length=1)

    def resolved_region(self) -> str:
        """Explicit region, else AWS_REGION, else AWS_DEFAULT_REGION, else us-east-1."""
        return (
            self.region
            or os.environ.get("AWS_REGION")
            or os.environ.get("AWS_DEFAULT_REGION")
            or DEFAULT_REGION
        )

    def resolved_credentials_file(self) -> Path:
        """Explicit path, else AWS_SHARED_CREDENTIALS_FILE, else ~/.aws/credentials."""
        if self.credentials_file:
            return Path(self.credentials_file).expanduser()
        env_path = os.environ.get("AWS_SHARED_CREDENTIALS_FILE")
        if env_path:
            return Path(env_path).expanduser()
        return Path.home() / ".aws" / "credentials"


def _read_config_file(config_path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    path = Path(explicit).expanduser() if explicit else default_config_path()

    if not path.exists():
        if explicit:
            raise ConfigurationError(f"config file not found: {path}")
        return {}

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in config file {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"error loading config file {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    logger.debug(f"Loaded settings from {path}")
    return config


def load_settings(config_path: Optional[Union[str, Path]] = None, **overrides) -> Settings:
    """Build settings from the config file and explicit overrides.

    Values from ``overrides`` that are None are ignored, so unset CLI flags
    fall through to the config file and then to the defaults.

    Args:
        config_path: YAML config file (AWS_OTP_AUTH_CONFIG or ~/.aws/otp_auth.yml if omitted)
        **overrides: Settings fields, typically from the command line

    Raises:
        ConfigurationError: If the file is unreadable or a value is invalid
    """
    # Load environment variables from .env file if it exists
    load_dotenv()

    data = _read_config_file(config_path)
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid settings: {e}") from e
