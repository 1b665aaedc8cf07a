import unicodedata
from hmac import compare_digest
from typing import Dict, Optional, Union
from urllib.parse import quote, urlencode, urlparse

from .exceptions import ConfigError


def build_uri(
    secret: str,
    name: str,
    issuer: Optional[str] = None,
    algorithm: str = "SHA1",
    digits: int = 6,
    period: int = 30,
    **kwargs: str,
) -> str:
    """
    Returns the provisioning URI for a TOTP secret.

    This can then be encoded in a QR Code and used to provision the Google
    Authenticator app.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param secret: the Base32 secret, without padding
    :param name: name of the account
    :param issuer: the name of the OTP issuer; this will be the
        organization title of the OTP entry in Authenticator
    :param algorithm: the algorithm used in the OTP generation.
    :param digits: the length of the OTP generated code.
    :param period: the number of seconds the OTP generator is set to
        expire every code.
    :param kwargs: other query string parameters to include in the URI
    :returns: provisioning uri
    """
    base_uri = "otpauth://totp/{0}?{1}"
    url_args: Dict[str, Union[int, str]] = {"secret": secret.rstrip("=")}

    label = quote(name, safe="")
    if issuer is not None:
        label = quote(issuer, safe="") + ":" + label
        url_args["issuer"] = issuer

    # Always written out, some apps ignore the parameters they consider default
    # but others assume nothing.
    url_args["algorithm"] = algorithm.upper()
    url_args["digits"] = digits
    url_args["period"] = period

    for k, v in kwargs.items():
        if not isinstance(v, str):
            raise ConfigError("All otpauth uri parameters must be strings")
        if k == "image":
            image_uri = urlparse(v)
            if image_uri.scheme != "https" or not image_uri.netloc or not image_uri.path:
                raise ConfigError("{} is not a valid url".format(v))
        url_args[k] = v

    return base_uri.format(label, urlencode(url_args).replace("+", "%20"))


def strings_equal(s1: str, s2: str) -> bool:
    """
    Timing-attack resistant string comparison.

    Normal comparison using == will short-circuit on the first mismatching
    character. This avoids that by scanning the whole string, though we
    still reveal to a timing attack whether the strings are the same
    length.

    Both sides are NFKC normalised first, so fullwidth digits such as
    "２８７" compare equal to "287".
    """
    s1 = unicodedata.normalize("NFKC", s1)
    s2 = unicodedata.normalize("NFKC", s2)
    return compare_digest(s1.encode("utf-8"), s2.encode("utf-8"))
