import hashlib
import hmac

import pytest

from twofactor import base32
from twofactor.exceptions import ConfigError, EncodingError
from twofactor.otp import OTP, code_for, hmac_digest, int_to_bytestring

RFC_SECRET = b"12345678901234567890"


@pytest.mark.parametrize(
    "counter, expected",
    [
        (0, "755224"),
        (1, "287082"),
        (2, "359152"),
        (3, "969429"),
        (4, "338314"),
        (5, "254676"),
        (6, "287922"),
        (7, "162583"),
        (8, "399871"),
        (9, "520489"),
    ],
)
def test_rfc4226_hotp_vectors(counter, expected):
    assert code_for(RFC_SECRET, counter) == expected


def test_int_to_bytestring_is_eight_bytes_big_endian():
    assert int_to_bytestring(0) == b"\0" * 8
    assert int_to_bytestring(12345) == b"\x00\x00\x00\x00\x00\x00\x30\x39"
    assert int_to_bytestring(2**64 - 1) == b"\xff" * 8


@pytest.mark.parametrize("algorithm, digestmod", [("SHA1", hashlib.sha1), ("sha256", hashlib.sha256), ("SHA-512", hashlib.sha512)])
def test_hmac_digest_matches_stdlib(algorithm, digestmod):
    message = int_to_bytestring(42)
    assert hmac_digest(RFC_SECRET, message, algorithm) == hmac.new(RFC_SECRET, message, digestmod).digest()


def test_hmac_digest_rejects_unknown_algorithm():
    with pytest.raises(ConfigError):
        hmac_digest(RFC_SECRET, b"message", "MD5")


def test_code_is_zero_padded_to_width():
    for counter in range(200):
        for digits in (1, 6, 8, 10):
            code = code_for(RFC_SECRET, counter, digits)
            assert len(code) == digits
            assert code.isdigit()


def test_code_is_deterministic():
    assert code_for(RFC_SECRET, 1234, 8, "SHA256") == code_for(RFC_SECRET, 1234, 8, "SHA256")


@pytest.mark.parametrize("counter", [-1, 2**64, "1", True])
def test_code_for_rejects_bad_counter(counter):
    with pytest.raises(ConfigError):
        code_for(RFC_SECRET, counter)


@pytest.mark.parametrize("digits", [0, -6, 11, "6", 6.0])
def test_code_for_rejects_bad_digits(digits):
    with pytest.raises(ConfigError):
        code_for(RFC_SECRET, 0, digits)


def test_otp_generate_matches_code_for():
    otp = OTP(base32.encode(RFC_SECRET), digits=8)
    assert otp.generate_otp(1) == "94287082"
    assert otp.byte_secret() == RFC_SECRET


def test_otp_rejects_malformed_secret():
    with pytest.raises(EncodingError):
        OTP("not base32!")


def test_otp_rejects_negative_input():
    with pytest.raises(ConfigError):
        OTP(base32.encode(RFC_SECRET)).generate_otp(-1)


def test_otp_repr_hides_secret():
    secret = base32.encode(RFC_SECRET)
    assert secret not in repr(OTP(secret, name="alice"))
