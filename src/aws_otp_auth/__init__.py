"""aws-otp-auth - Refresh AWS session credentials with an MFA one-time password."""

__version__ = "0.1.0"

from .auth_flow import RefreshResult, run_auth_flow
from .credentials.store import Credentials, read_credentials, update_credentials, clean_expired_token
from .credentials.session import SessionCredentials, get_session_token
from .otp import get_otp

__all__ = [
    "RefreshResult",
    "run_auth_flow",
    "Credentials",
    "SessionCredentials",
    "read_credentials",
    "update_credentials",
    "clean_expired_token",
    "get_session_token",
    "get_otp"
]
