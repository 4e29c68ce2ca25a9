"""One-time password input."""

import logging
import sys
from typing import Optional, TextIO

import click

from .exceptions import OTPReadError


logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Enter OTP: "


def get_otp(
    provided_otp: str = "",
    input_stream: Optional[TextIO] = None,
    prompt: str = DEFAULT_PROMPT
) -> str:
    """Return the one-time password to authenticate with.

    A code passed on the command line is used as is. Otherwise the user is
    prompted and a single line is read from ``input_stream`` (stdin by default).
    The line is returned trimmed, even when that leaves it empty; STS rejects
    an empty code.

    Raises:
        OTPReadError: If the stream fails or ends before any input
    """
    if provided_otp:
        return provided_otp

    if input_stream is None:
        input_stream = sys.stdin

    click.echo(prompt, nl=False)
    try:
        line = input_stream.readline()
    except (OSError, ValueError) as e:
        raise OTPReadError(f"failed to read OTP: {e}") from e

    if not line:
        raise OTPReadError("failed to read OTP: input ended before a code was entered")

    logger.debug("OTP read from input")
    return line.strip()
