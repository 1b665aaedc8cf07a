import hmac
from typing import Optional

from . import base32
from .exceptions import ConfigError
from .params import DEFAULT_ALGORITHM, check_digits, normalize_algorithm, resolve_digest

MAX_COUNTER = 2**64 - 1


def hmac_digest(key: bytes, message: bytes, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """
    Keyed hash of ``message`` under ``key``.

    :param key: raw secret bytes
    :param message: the HMAC message, for OTPs the 8 byte counter
    :param algorithm: SHA1, SHA256 or SHA512
    :returns: the digest bytes
    """
    return hmac.new(bytes(key), bytes(message), resolve_digest(algorithm)).digest()


def int_to_bytestring(i: int, padding: int = 8) -> bytes:
    """
    Turns an integer to the OATH specified
    bytestring, which is fed to the HMAC
    along with the secret
    """
    result = bytearray()
    while i != 0:
        result.append(i & 0xFF)
        i >>= 8
    # Bytes come out least significant first
    return bytes(bytearray(reversed(result)).rjust(padding, b"\0"))


def code_for(secret: bytes, counter: int, digits: int = 6, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Computes the HOTP value of RFC 4226 for one counter. TOTP is this same
    function with the counter taken from the clock.

    :param secret: raw secret bytes
    :param counter: the HMAC counter, 0 <= counter < 2**64
    :param digits: length of the returned code
    :param algorithm: SHA1, SHA256 or SHA512
    :returns: zero-padded decimal code of exactly ``digits`` characters
    """
    check_digits(digits)
    if not isinstance(counter, int) or isinstance(counter, bool):
        raise ConfigError("counter must be an integer")
    if counter < 0 or counter > MAX_COUNTER:
        raise ConfigError("counter must fit in an unsigned 64-bit integer")

    hmac_hash = bytearray(hmac_digest(secret, int_to_bytestring(counter), algorithm))
    # Dynamic truncation: the low nibble of the last byte picks 4 bytes,
    # the top bit is dropped so the value is an unsigned 31-bit integer.
    offset = hmac_hash[-1] & 0xF
    code = (
        (hmac_hash[offset] & 0x7F) << 24
        | (hmac_hash[offset + 1] & 0xFF) << 16
        | (hmac_hash[offset + 2] & 0xFF) << 8
        | (hmac_hash[offset + 3] & 0xFF)
    )
    return str(code % 10**digits).rjust(digits, "0")


class OTP(object):
    """
    Base class for OTP handlers.
    """

    def __init__(
        self,
        s: str,
        digits: int = 6,
        algorithm: str = DEFAULT_ALGORITHM,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        """
        :param s: secret in base32 format
        :param digits: number of integers in the OTP. Some apps expect this to be 6 digits, others support more.
        :param algorithm: hash used in the HMAC, SHA1 unless every client supports more
        :param name: account name
        :param issuer: issuer
        """
        self.digits = check_digits(digits)
        self.algorithm = normalize_algorithm(algorithm)
        self.secret = s
        self.name = name or "Secret"
        self.issuer = issuer
        # Fail on a malformed secret now rather than at the first login
        self.byte_secret()

    def generate_otp(self, input: int) -> str:
        """
        :param input: the HMAC counter value to use as the OTP input.
            Usually either the counter, or the computed integer based on the Unix timestamp
        """
        if input < 0:
            raise ConfigError("input must be positive integer")
        return code_for(self.byte_secret(), input, self.digits, self.algorithm)

    def byte_secret(self) -> bytes:
        return base32.decode(self.secret)

    def __repr__(self) -> str:
        return "<{} name={!r} issuer={!r} digits={} algorithm={}>".format(
            type(self).__name__, self.name, self.issuer, self.digits, self.algorithm
        )
