import calendar
import datetime
import logging
import time
from typing import Any, Iterator, Optional, Union

from . import base32, utils
from .exceptions import ConfigError
from .otp import MAX_COUNTER, OTP, code_for
from .params import DEFAULT_ALGORITHM, DEFAULT_PARAMETERS, TotpParameters, check_period

logger = logging.getLogger(__name__)

TimeLike = Union[int, float, datetime.datetime]


def counter_for(for_time: TimeLike, period: int = 30) -> int:
    """
    Maps a point in time onto its time step.

    :param for_time: Unix timestamp in seconds, or a datetime. Naive
        datetimes are taken as local time, like ``datetime.timestamp()``.
    :param period: seconds per step
    :returns: floor(unix_time / period)
    """
    check_period(period)
    if isinstance(for_time, datetime.datetime):
        if for_time.tzinfo:
            seconds = calendar.timegm(for_time.utctimetuple())
        else:
            seconds = int(time.mktime(for_time.timetuple()))
    elif isinstance(for_time, (int, float)) and not isinstance(for_time, bool):
        seconds = int(for_time)
    else:
        raise ConfigError("time must be a Unix timestamp or a datetime")
    if seconds < 0:
        raise ConfigError("time must not be before the Unix epoch")
    return seconds // period


def check_window(window: int) -> int:
    if not isinstance(window, int) or isinstance(window, bool) or window < 0:
        raise ConfigError("window must be a non-negative integer")
    return window


def window_offsets(window: int) -> Iterator[int]:
    """
    Yields 0, -1, +1, -2, +2, ... up to +/- window, nearest step first.
    """
    yield 0
    for distance in range(1, window + 1):
        yield -distance
        yield distance


def is_well_formed(otp: Any, digits: int) -> bool:
    return isinstance(otp, str) and len(otp) == digits and all(c in "0123456789" for c in otp)


def generate(secret: bytes, for_time: TimeLike, params: Optional[TotpParameters] = None) -> str:
    """
    The code for ``secret`` at ``for_time``.

    :param secret: raw secret bytes
    :param for_time: Unix timestamp or datetime
    :param params: algorithm, digits and period; defaults to SHA1/6/30
    """
    params = params or DEFAULT_PARAMETERS
    return code_for(secret, counter_for(for_time, params.period), params.digits, params.algorithm)


def match(
    secret: bytes,
    otp: Any,
    for_time: TimeLike,
    params: Optional[TotpParameters] = None,
    window: int = 1,
) -> Optional[int]:
    """
    Finds the time step, relative to ``for_time``, whose code equals ``otp``.

    Steps are tried nearest first. Callers that want to stop replays can
    remember ``counter_for(for_time) + offset`` and refuse it next time.

    :param secret: raw secret bytes
    :param otp: the code submitted by the user
    :param for_time: Unix timestamp or datetime of the submission
    :param params: algorithm, digits and period; defaults to SHA1/6/30
    :param window: how many steps either side of the current one to accept
    :returns: the matching offset, or None when nothing matched
    """
    params = params or DEFAULT_PARAMETERS
    check_window(window)
    if not is_well_formed(otp, params.digits):
        return None

    center = counter_for(for_time, params.period)
    for offset in window_offsets(window):
        counter = center + offset
        if counter < 0 or counter > MAX_COUNTER:
            continue
        candidate = code_for(secret, counter, params.digits, params.algorithm)
        if utils.strings_equal(otp, candidate):
            return offset
    return None


def verify(
    secret: bytes,
    otp: Any,
    for_time: TimeLike,
    params: Optional[TotpParameters] = None,
    window: int = 1,
) -> bool:
    """
    True when ``otp`` is the code of a step within ``window`` of ``for_time``.
    A mismatch is a normal outcome and never raises.
    """
    return match(secret, otp, for_time, params, window) is not None


class TOTP(OTP):
    """
    Handler for time-based OTP counters.
    """

    def __init__(
        self,
        s: str,
        digits: int = 6,
        algorithm: str = DEFAULT_ALGORITHM,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
        interval: int = 30,
    ) -> None:
        """
        :param s: secret in base32 format
        :param interval: the time interval in seconds for OTP. This defaults to 30.
        :param digits: number of integers in the OTP. Some apps expect this to be 6 digits, others support more.
        :param algorithm: hash used in the HMAC, SHA1 unless every client supports more
        :param name: account name
        :param issuer: issuer
        """
        self.interval = check_period(interval)
        super().__init__(s=s, digits=digits, algorithm=algorithm, name=name, issuer=issuer)

    @classmethod
    def from_parameters(cls, s: str, params: TotpParameters) -> "TOTP":
        return cls(
            s,
            digits=params.digits,
            algorithm=params.algorithm,
            name=params.account,
            issuer=params.issuer,
            interval=params.period,
        )

    @property
    def params(self) -> TotpParameters:
        return TotpParameters(
            algorithm=self.algorithm,
            digits=self.digits,
            period=self.interval,
            issuer=self.issuer,
            account=self.name,
        )

    def timecode(self, for_time: TimeLike) -> int:
        """
        Accepts either a timezone naive (`for_time.tzinfo is None`) or
        a timezone aware datetime as argument and returns the
        corresponding counter value (timecode).
        """
        return counter_for(for_time, self.interval)

    def at(self, for_time: TimeLike, counter_offset: int = 0) -> str:
        """
        Accepts either a Unix timestamp integer or a datetime object.

        :param for_time: the time to generate an OTP for
        :param counter_offset: the amount of ticks to add to the time counter
        :returns: OTP value
        """
        return self.generate_otp(self.timecode(for_time) + counter_offset)

    def now(self) -> str:
        """
        Generate the current time OTP

        :returns: OTP value
        """
        return self.at(time.time())

    def match(self, otp: Any, for_time: Optional[TimeLike] = None, valid_window: int = 0) -> Optional[int]:
        """
        Like verify, but returns the offset of the matching time step.
        """
        if for_time is None:
            for_time = time.time()
        offset = match(self.byte_secret(), otp, for_time, self.params, valid_window)
        if offset is None:
            logger.info("TOTP verification failed for account %s at time step %d", self.name, self.timecode(for_time))
        elif offset != 0:
            logger.debug("TOTP for account %s accepted with clock drift of %d step(s)", self.name, offset)
        return offset

    def verify(self, otp: Any, for_time: Optional[TimeLike] = None, valid_window: int = 0) -> bool:
        """
        Verifies the OTP passed in against the current time OTP.

        :param otp: the OTP to check against
        :param for_time: Time to check OTP at (defaults to now)
        :param valid_window: extends the validity to this many counter ticks before and after the current one
        :returns: True if verification succeeded, False otherwise
        """
        return self.match(otp, for_time, valid_window) is not None

    def provisioning_uri(self, name: Optional[str] = None, issuer_name: Optional[str] = None, **kwargs: str) -> str:
        """
        Returns the provisioning URI for the OTP.  This can then be
        encoded in a QR Code and used to provision an OTP app like
        Google Authenticator.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :param name: name of the user account
        :param issuer_name: the name of the OTP issuer; this will be the
            organization title of the OTP entry in Authenticator
        :returns: provisioning URI
        """
        return utils.build_uri(
            base32.encode(self.byte_secret(), padding=False),
            name=name if name else self.name,
            issuer=issuer_name if issuer_name else self.issuer,
            algorithm=self.algorithm,
            digits=self.digits,
            period=self.interval,
            **kwargs,
        )
