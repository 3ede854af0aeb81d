"""
Authentication and signing utilities for the CLOB private API.

Every private request carries HMAC-SHA256 headers computed over the
timestamp, method, path and the exact body bytes that go on the wire.
"""

import base64
import binascii
import hashlib
import hmac
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .constants import (
    CONTENT_TYPE_JSON,
    POLY_API_KEY,
    POLY_API_PASSPHRASE,
    POLY_API_SIGNATURE,
    POLY_API_SIGNATURE_TYPE,
    POLY_API_TIMESTAMP,
    SIGNATURE_TYPE_GNOSIS_SAFE,
)
from .exceptions import AuthHeaderError

_URLSAFE_B64 = re.compile(r"^[A-Za-z0-9_-]+={0,2}$")
_MASK = "**********"


class Secret:
    """
    A string that refuses to be displayed or serialized.

    The wrapped value is only reachable through ``reveal()``, which is
    called where the HMAC is computed and where the passphrase header is
    written.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if isinstance(value, Secret):
            value = value.reveal()
        if not isinstance(value, str):
            raise TypeError("Secret value must be a string")
        self._value = value

    def reveal(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"Secret('{_MASK}')"

    __str__ = __repr__

    def __format__(self, format_spec: str) -> str:
        return repr(self)

    def __reduce__(self):
        raise TypeError("Secret values cannot be serialized")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return hmac.compare_digest(self._value.encode(), other._value.encode())

    def __hash__(self) -> int:
        return hash((Secret, hashlib.sha256(self._value.encode()).digest()))

    def __bool__(self) -> bool:
        return bool(self._value)


@dataclass(frozen=True)
class ApiCredentials:
    """Container for exchange-issued API credentials"""
    api_key: str
    api_secret: Secret
    passphrase: Secret

    def __post_init__(self):
        # Accept plain strings and wrap them
        object.__setattr__(self, "api_secret", Secret(self.api_secret))
        object.__setattr__(self, "passphrase", Secret(self.passphrase))

    @property
    def key_prefix(self) -> str:
        """First characters of the API key, safe to log."""
        return self.api_key[:8]

    def validate(self) -> bool:
        """
        Validate that key, secret and passphrase are all present.

        Returns:
            True if credentials are complete, False otherwise
        """
        return bool(self.api_key and self.api_secret and self.passphrase)


def decode_secret(api_secret: Secret) -> bytes:
    """Decode a URL-safe base64 secret, with or without padding."""
    text = api_secret.reveal()
    if not _URLSAFE_B64.match(text):
        raise AuthHeaderError("API secret is not valid URL-safe base64")
    unpadded = text.rstrip("=")
    try:
        return base64.urlsafe_b64decode(unpadded + "=" * (-len(unpadded) % 4))
    except (binascii.Error, ValueError) as e:
        raise AuthHeaderError("API secret is not valid URL-safe base64") from e


class HeaderSigner:
    """
    Computes L2 authentication headers for private CLOB requests.

    The HMAC key is the base64-decoded API secret. Setting
    ``raw_secret_key`` keys the HMAC with the secret string's own bytes
    instead, for checking that convention against live traffic.
    """

    def __init__(
        self,
        credentials: ApiCredentials,
        raw_secret_key: bool = False,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the signer with API credentials.

        Args:
            credentials: Credentials returned by the derivation handshake
            raw_secret_key: Use the undecoded secret as the HMAC key
            clock: Wall-clock source in seconds (default: time.time)
        """
        self.credentials = credentials
        self.raw_secret_key = raw_secret_key
        self._clock = clock or time.time

    def timestamp(self) -> str:
        """Current wall-clock time in whole milliseconds."""
        return str(int(self._clock() * 1000))

    def _hmac_key(self) -> bytes:
        if self.raw_secret_key:
            return self.credentials.api_secret.reveal().encode("utf-8")
        return decode_secret(self.credentials.api_secret)

    def sign(self, timestamp: str, method: str, path: str, body: bytes = b"") -> str:
        """
        Generate the base64 HMAC-SHA256 signature for a request.

        Args:
            timestamp: Millisecond timestamp string
            method: HTTP method, e.g. "POST"
            path: Request path as seen by the exchange, e.g. "/orders"
            body: Exact serialized body bytes

        Returns:
            Standard (padded) base64 encoding of the raw digest
        """
        try:
            prefix = f"{timestamp}{method}{path}".encode("ascii")
        except UnicodeEncodeError as e:
            raise AuthHeaderError("Timestamp, method and path must be ASCII") from e

        mac = hmac.new(self._hmac_key(), prefix, hashlib.sha256)
        mac.update(body)
        return base64.b64encode(mac.digest()).decode("ascii")

    def build_headers(self, method: str, path: str, body: bytes = b"") -> Dict[str, str]:
        """
        Get authentication headers for a private request.

        The timestamp is taken now, so headers must be built right before
        the request is sent and never reused.
        """
        if not path.startswith("/"):
            raise AuthHeaderError(f"Request path must start with '/', got {path!r}")

        timestamp = self.timestamp()
        signature = self.sign(timestamp, method.upper(), path, body)

        headers = {
            POLY_API_KEY: self.credentials.api_key,
            POLY_API_SIGNATURE: signature,
            POLY_API_TIMESTAMP: timestamp,
            POLY_API_PASSPHRASE: self.credentials.passphrase.reveal(),
            POLY_API_SIGNATURE_TYPE: SIGNATURE_TYPE_GNOSIS_SAFE,
            "Content-Type": CONTENT_TYPE_JSON,
        }
        for name, value in headers.items():
            if "\r" in value or "\n" in value:
                raise AuthHeaderError(f"Header {name} contains a line break")
        return headers
