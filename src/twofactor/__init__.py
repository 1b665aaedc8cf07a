import logging
import time
from re import split
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, unquote, urlparse

from . import base32 as base32
from . import passwords as passwords
from . import secret as _secret
from . import totp as _totp
from .exceptions import ConfigError as ConfigError
from .exceptions import EncodingError as EncodingError
from .exceptions import EntropySourceError as EntropySourceError
from .exceptions import HashingUnavailable as HashingUnavailable
from .exceptions import TwoFactorError as TwoFactorError
from .otp import OTP as OTP
from .params import TotpParameters as TotpParameters
from .secret import Enrollment as Enrollment
from .secret import random_base32 as random_base32
from .totp import TOTP as TOTP

logging.getLogger(__name__).addHandler(logging.NullHandler())


def generate_secret(
    account_label: str,
    issuer: Optional[str] = None,
    params: Optional[TotpParameters] = None,
) -> Enrollment:
    """
    Enrolls an account: returns a new Base32 secret and its provisioning URI.

    :param account_label: account name shown in the authenticator app
    :param issuer: organisation shown in the authenticator app
    :param params: algorithm, digits and period; defaults to SHA1/6/30
    """
    return _secret.generate(account_label, issuer=issuer, params=params)


def generate_code(
    secret: str,
    now: Optional[_totp.TimeLike] = None,
    params: Optional[TotpParameters] = None,
) -> str:
    """
    :param secret: the stored Base32 secret
    :param now: Unix timestamp or datetime, defaults to the current time
    :param params: algorithm, digits and period; defaults to SHA1/6/30
    :returns: the code for the time step containing ``now``
    """
    if now is None:
        now = time.time()
    return _totp.generate(base32.decode(secret), now, params)


def verify_code(
    secret: str,
    submitted: Any,
    now: Optional[_totp.TimeLike] = None,
    window: int = 1,
    params: Optional[TotpParameters] = None,
) -> bool:
    """
    Checks a code typed by the user.

    :param secret: the stored Base32 secret
    :param submitted: the code the user entered
    :param now: Unix timestamp or datetime, defaults to the current time
    :param window: steps of clock drift tolerated either side; 1 step is 30 seconds by default
    :param params: algorithm, digits and period; defaults to SHA1/6/30
    :returns: False for a wrong or malformed code, never raises for one
    """
    if now is None:
        now = time.time()
    return _totp.verify(base32.decode(secret), submitted, now, params, window)


def parse_uri(uri: str) -> TOTP:
    """
    Parses the provisioning URI for the OTP.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param uri: the totp URI to parse
    :returns: TOTP object
    """

    # Secret (to be filled in later)
    secret = None

    # Data we'll parse to the correct constructor
    otp_data: Dict[str, Any] = {}

    parsed_uri = urlparse(uri)

    if parsed_uri.scheme != "otpauth":
        raise ConfigError("Not an otpauth URI")
    if parsed_uri.netloc != "totp":
        raise ConfigError("Not a supported OTP type")

    # Parse issuer/accountname info. The separator is usually a literal colon.
    # Some generators percent-encode it as well, but an encoded colon may also
    # belong to the account name, so it only separates when the query names
    # the same issuer.
    label = parsed_uri.path[1:]
    if ":" in label:
        accountinfo_parts = label.split(":", 1)
    else:
        accountinfo_parts = split("%3A|%3a", label, maxsplit=1)
        query_issuer = dict(parse_qsl(parsed_uri.query)).get("issuer")
        if len(accountinfo_parts) == 2 and unquote(accountinfo_parts[0]) != query_issuer:
            accountinfo_parts = [label]
    if len(accountinfo_parts) == 1:
        otp_data["name"] = unquote(accountinfo_parts[0])
    else:
        otp_data["issuer"] = unquote(accountinfo_parts[0])
        otp_data["name"] = unquote(accountinfo_parts[1])

    # Parse values
    for key, value in parse_qsl(parsed_uri.query):
        if key == "secret":
            secret = value
        elif key == "issuer":
            if "issuer" in otp_data and otp_data["issuer"] is not None and otp_data["issuer"] != value:
                raise ConfigError("If issuer is specified in both label and parameters, it should be equal.")
            otp_data["issuer"] = value
        elif key == "algorithm":
            otp_data["algorithm"] = value
        elif key == "digits":
            otp_data["digits"] = _parse_int(key, value)
            if otp_data["digits"] not in [6, 7, 8]:
                raise ConfigError("Digits may only be 6, 7, or 8")
        elif key == "period":
            otp_data["interval"] = _parse_int(key, value)

    if not secret:
        raise ConfigError("No secret found in URI")

    return TOTP(secret, **otp_data)


def _parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError("Invalid value for {}, must be an integer".format(key)) from exc
