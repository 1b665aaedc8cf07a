import hashlib
import os
from dataclasses import dataclass, replace as _replace
from typing import Any, Callable, Dict, Mapping, Optional

from .exceptions import ConfigError

SUPPORTED_ALGORITHMS: Dict[str, Callable[..., Any]] = {
    "SHA1": hashlib.sha1,
    "SHA256": hashlib.sha256,
    "SHA512": hashlib.sha512,
}

DEFAULT_ALGORITHM = "SHA1"
DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30


def normalize_algorithm(algorithm: str) -> str:
    """
    Maps "sha1", "SHA-256", "sha512" etc. onto the otpauth spelling
    (SHA1, SHA256, SHA512).
    """
    if not isinstance(algorithm, str):
        raise ConfigError("algorithm must be a string such as 'SHA1'")
    name = algorithm.upper().replace("-", "")
    if name not in SUPPORTED_ALGORITHMS:
        raise ConfigError("Invalid value for algorithm, must be SHA1, SHA256 or SHA512")
    return name


def resolve_digest(algorithm: str) -> Callable[..., Any]:
    """
    :param algorithm: algorithm name, e.g. "SHA1"
    :returns: the hashlib constructor handed to hmac
    """
    return SUPPORTED_ALGORITHMS[normalize_algorithm(algorithm)]


def check_digits(digits: int) -> int:
    # A truncated value has 31 bits, so at most 10 decimal digits are meaningful
    if not isinstance(digits, int) or isinstance(digits, bool):
        raise ConfigError("digits must be an integer")
    if digits < 1:
        raise ConfigError("digits must be a positive integer")
    if digits > 10:
        raise ConfigError("digits must be no greater than 10")
    return digits


def check_period(period: int) -> int:
    if not isinstance(period, int) or isinstance(period, bool):
        raise ConfigError("period must be an integer number of seconds")
    if period < 1:
        raise ConfigError("period must be a positive integer")
    return period


@dataclass(frozen=True)
class TotpParameters:
    """
    Everything besides the secret that determines a code.

    The same parameters must be used to generate and to verify a code,
    otherwise verification fails every time.

    :param algorithm: HMAC hash, one of SHA1 (default), SHA256, SHA512
    :param digits: length of the generated code
    :param period: seconds per time step
    :param issuer: organisation shown in the authenticator app
    :param account: account label shown in the authenticator app
    """

    algorithm: str = DEFAULT_ALGORITHM
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD
    issuer: Optional[str] = None
    account: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", normalize_algorithm(self.algorithm))
        check_digits(self.digits)
        check_period(self.period)

    def replace(self, **changes: Any) -> "TotpParameters":
        """
        Returns a validated copy with the given fields changed.
        """
        return _replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, prefix: str = "TWOFACTOR_") -> "TotpParameters":
        """
        Builds parameters from environment variables, falling back to the
        defaults for anything unset:

            TWOFACTOR_ALGORITHM, TWOFACTOR_DIGITS, TWOFACTOR_PERIOD, TWOFACTOR_ISSUER

        :param environ: mapping to read instead of os.environ
        :param prefix: variable name prefix
        """
        if environ is None:
            environ = os.environ
        kwargs: Dict[str, Any] = {}

        algorithm = environ.get(prefix + "ALGORITHM")
        if algorithm:
            kwargs["algorithm"] = algorithm
        for field_name in ("digits", "period"):
            raw = environ.get(prefix + field_name.upper())
            if raw:
                try:
                    kwargs[field_name] = int(raw)
                except ValueError as exc:
                    raise ConfigError("{}{} must be an integer".format(prefix, field_name.upper())) from exc
        issuer = environ.get(prefix + "ISSUER")
        if issuer:
            kwargs["issuer"] = issuer

        return cls(**kwargs)


DEFAULT_PARAMETERS = TotpParameters()
