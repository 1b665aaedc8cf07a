import logging
import secrets
from typing import NamedTuple, Optional

from . import base32, utils
from .exceptions import ConfigError, EntropySourceError
from .params import DEFAULT_PARAMETERS, TotpParameters

logger = logging.getLogger(__name__)

DEFAULT_SECRET_BYTES = 20
MIN_SECRET_BYTES = 16


class Enrollment(NamedTuple):
    """
    A freshly generated secret and the URI that carries it to an authenticator app.
    """

    secret: str
    provisioning_uri: str

    def __repr__(self) -> str:
        return "Enrollment(secret=<redacted>, provisioning_uri=<redacted>)"


def random_bytes(length: int = DEFAULT_SECRET_BYTES) -> bytes:
    """
    Draws secret bytes from the operating system's CSPRNG.

    :param length: number of bytes, 20 (160 bits) as recommended by RFC 4226
    :raises EntropySourceError: when the OS cannot provide random bytes
    """
    if length < MIN_SECRET_BYTES:
        raise ConfigError("Secrets should be at least 128 bits")
    try:
        return secrets.token_bytes(length)
    except (NotImplementedError, OSError) as exc:
        logger.warning("Secure random source unavailable: %s", type(exc).__name__)
        raise EntropySourceError("Secure random source unavailable") from exc


def random_base32(length: int = 32) -> str:
    # Note: the otpauth scheme DOES NOT use base32 padding for secret lengths not divisible by 8.
    # Some third-party tools have bugs when dealing with such secrets, so only whole groups are produced.
    if length < 32:
        raise ConfigError("Secrets should be at least 160 bits")
    if length % 8:
        raise ConfigError("Secret length should be a multiple of 8 characters")
    return base32.encode(random_bytes(length * 5 // 8), padding=False)


def generate(
    account_label: str,
    issuer: Optional[str] = None,
    params: Optional[TotpParameters] = None,
    length: int = DEFAULT_SECRET_BYTES,
) -> Enrollment:
    """
    Creates a new secret for an account.

    The caller stores ``secret`` with the account and shows
    ``provisioning_uri`` as a QR code. Nothing here is persisted.

    :param account_label: account name shown in the authenticator, e.g. an email
    :param issuer: organisation shown in the authenticator; falls back to params.issuer
    :param params: algorithm, digits and period written into the URI
    :param length: secret size in bytes
    :returns: Enrollment with the Base32 secret and provisioning URI
    """
    params = params or DEFAULT_PARAMETERS
    if issuer is None:
        issuer = params.issuer

    secret = base32.encode(random_bytes(length), padding=False)
    uri = utils.build_uri(
        secret,
        name=account_label,
        issuer=issuer,
        algorithm=params.algorithm,
        digits=params.digits,
        period=params.period,
    )
    logger.info("Generated TOTP secret for account %s", account_label)
    return Enrollment(secret=secret, provisioning_uri=uri)
