import hashlib
import logging
from hmac import compare_digest

from .exceptions import HashingUnavailable

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """
    Hex SHA-256 digest of a password, in the form the user store compares against.

    There is no fallback: if the digest cannot be computed the login must
    fail, the plaintext is never returned in its place.

    :raises HashingUnavailable: when the password cannot be encoded or hashed
    """
    if not isinstance(password, str):
        raise HashingUnavailable("password must be text")
    try:
        data = password.encode("utf-8")
        return hashlib.sha256(data).hexdigest()
    except ValueError as exc:
        # lone surrogates cannot be encoded
        logger.warning("Password hashing failed: %s", type(exc).__name__)
        raise HashingUnavailable("Password hashing failed") from exc


def verify_password(password: str, expected_digest: str) -> bool:
    """
    Compares the digest of ``password`` with a stored hex digest in constant time.
    """
    return compare_digest(hash_password(password).encode("ascii"), expected_digest.lower().encode("ascii", "replace"))
