import base64

from .exceptions import EncodingError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"


def encode(data: bytes, padding: bool = True) -> str:
    """
    Encodes raw secret bytes as RFC 4648 Base32 text.

    :param data: the bytes to encode
    :param padding: keep the trailing ``=`` characters. The otpauth scheme
        expects secrets without padding, so provisioning URIs pass False.
    :returns: uppercase Base32 text
    """
    text = base64.b32encode(bytes(data)).decode("ascii")
    if not padding:
        text = text.rstrip("=")
    return text


def decode(text: str) -> bytes:
    """
    Decodes Base32 text back into the original bytes.

    Lowercase input is accepted and padding is optional: whatever ``=``
    characters are present get stripped and the correct amount is added
    back before decoding.

    :param text: Base32 text, e.g. a stored secret
    :returns: the decoded bytes
    :raises EncodingError: if the text is not valid Base32
    """
    if not isinstance(text, str):
        raise EncodingError("Base32 input must be text, got {}".format(type(text).__name__))
    secret = text.rstrip("=")
    missing_padding = len(secret) % 8
    if missing_padding != 0:
        secret += "=" * (8 - missing_padding)
    try:
        return base64.b32decode(secret, casefold=True)
    except ValueError as exc:
        # binascii.Error and the non-ASCII ValueError both land here.
        # The message must not echo the secret.
        raise EncodingError("Malformed Base32 secret") from exc
