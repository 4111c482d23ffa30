"""Symmetric encryption of cookie values.

Cookie values are encrypted with Fernet (AES-128-CBC + HMAC-SHA256),
so a tampered or truncated value fails to decrypt instead of yielding
garbage. Fernet tokens are URL-safe base64 and travel in a cookie
without further escaping.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from crumbjar.errors import DecodingError


def derive_key(alias: str) -> str:
    """Return the 16-hex-character cipher key for a cookie alias.

    Every cookie sharing an alias shares a key, whatever its other
    settings.
    """
    return hashlib.sha256(alias.encode("utf-8")).hexdigest()[:16]


def _fernet_key(key: str) -> bytes:
    # Stretch the short key to the 32 bytes Fernet requires
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class Encrypter:
    """Encrypt and decrypt strings with a key string.

    Usage::

        encrypter = Encrypter(derive_key("session"))
        token = encrypter.encrypt("alice")
        assert encrypter.decrypt(token) == "alice"
    """

    __slots__ = ("_fernet",)

    def __init__(self, key: str) -> None:
        self._fernet = Fernet(_fernet_key(key))

    def encrypt(self, plain: str) -> str:
        """Encrypt *plain* and return the token as text."""
        return self._fernet.encrypt(plain.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Decrypt *token* back to text.

        Raises ``DecodingError`` if the token was tampered with, was
        produced under a different key, or is not a token at all.
        """
        try:
            plain = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken:
            msg = "Cookie value could not be decrypted"
            raise DecodingError(msg) from None
        try:
            return plain.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = "Decrypted cookie value is not valid UTF-8"
            raise DecodingError(msg) from exc
