class TwoFactorError(Exception):
    """
    Base class for errors raised by twofactor.
    """


class EncodingError(TwoFactorError, ValueError):
    """
    Malformed Base32 text was passed where a secret was expected.
    """


class ConfigError(TwoFactorError, ValueError):
    """
    Invalid OTP parameters: period, digits, algorithm, window or URI.
    """


class EntropySourceError(TwoFactorError, RuntimeError):
    """
    The operating system's secure random source could not be used.
    """


class HashingUnavailable(TwoFactorError, RuntimeError):
    """
    A password digest could not be computed.
    """
