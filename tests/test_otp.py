import io
from unittest.mock import MagicMock

import pytest

from aws_otp_auth.exceptions import OTPReadError
from aws_otp_auth.otp import get_otp


def test_provided_otp_skips_input():
    stream = MagicMock()

    assert get_otp("999999", stream) == "999999"
    stream.readline.assert_not_called()


def test_reads_line_from_stream(capsys):
    assert get_otp("", io.StringIO("654321\n")) == "654321"
    assert capsys.readouterr().out == "Enter OTP: "


def test_trims_whitespace():
    assert get_otp("", io.StringIO("  123456 \r\n")) == "123456"


def test_reads_only_first_line():
    stream = io.StringIO("111111\n222222\n")

    assert get_otp("", stream) == "111111"
    assert stream.readline() == "222222\n"


def test_defaults_to_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("424242\n"))

    assert get_otp() == "424242"


def test_end_of_input():
    with pytest.raises(OTPReadError):
        get_otp("", io.StringIO(""))


def test_blank_line_is_returned_empty():
    assert get_otp("", io.StringIO("\n")) == ""
    assert get_otp("", io.StringIO("   \r\n")) == ""


def test_stream_error():
    stream = MagicMock()
    stream.readline.side_effect = OSError("input/output error")

    with pytest.raises(OTPReadError) as exc_info:
        get_otp("", stream)
    assert isinstance(exc_info.value.__cause__, OSError)
