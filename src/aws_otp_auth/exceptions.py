"""Exceptions raised by aws-otp-auth."""

from typing import List, Optional


class OTPAuthError(Exception):
    """Base class for all aws-otp-auth errors."""
    pass


class CredentialsError(OTPAuthError):
    """Base class for credential store errors."""
    pass


class CredentialsParseError(CredentialsError):
    """Raised when the credentials file is not valid INI."""
    pass


class ProfileNotFoundError(CredentialsError):
    """Raised when a profile section is missing from the credentials file."""

    def __init__(self, profile: str):
        self.profile = profile
        super().__init__(f"profile {profile} not found in credentials file")


class IncompleteCredentialsError(CredentialsError):
    """Raised when a profile lacks an access key or secret key."""

    def __init__(self, profile: str):
        self.profile = profile
        super().__init__(f"incomplete credentials for profile {profile}")


class CredentialsFileError(CredentialsError):
    """Raised when the credentials file (or its backup) can't be read or written."""
    pass


class OTPReadError(OTPAuthError):
    """Raised when no one-time password could be read."""
    pass


class TokenExchangeError(OTPAuthError):
    """Raised when STS does not hand back session credentials."""
    pass


class AuthenticationError(OTPAuthError):
    """Raised when the caller identity check fails."""
    pass


class MFADeviceLookupError(OTPAuthError):
    """Raised when the MFA devices of a user can't be listed."""
    pass


class ConfigurationError(OTPAuthError):
    """Raised for unusable settings or an ambiguous MFA device choice."""

    def __init__(self, message: str, candidates: Optional[List[str]] = None):
        self.candidates = candidates or []
        super().__init__(message)


class AuthFlowError(OTPAuthError):
    """Raised when a fatal stage of the refresh flow fails.

    Attributes:
        stage: One of ``otp``, ``exchange`` or ``commit``
    """

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(message)
