"""
Error taxonomy for the CLOB execution client.

Every error carries a ``category`` so reports can tell authentication
failures apart from business rejections and transport problems.
"""

from typing import Any, Optional


class ClobExecError(Exception):
    """Base exception for all client errors."""

    category = "error"


class CredentialDerivationError(ClobExecError):
    """API credentials could not be derived from the signer identity."""

    category = "credentials"


class MetadataFetchError(ClobExecError):
    """Instrument metadata could not be fetched or parsed."""

    category = "metadata"

    def __init__(self, token_id: int, attribute: str, reason: str):
        super().__init__(
            f"Failed to fetch {attribute} for token {token_id}: {reason}"
        )
        self.token_id = token_id
        self.attribute = attribute
        self.reason = reason


class OrderBuildError(ClobExecError):
    """Order parameters failed validation or metadata is missing."""

    category = "validation"


class SigningError(ClobExecError):
    """The order signing capability rejected the order."""

    category = "signing"


class AuthHeaderError(ClobExecError):
    """Authentication headers could not be computed."""

    category = "auth"


class TransportError(ClobExecError):
    """Connection or IO failure while talking to the exchange."""

    category = "transport"


class ExchangeRejection(ClobExecError):
    """
    Non-2xx response from the exchange.

    ``response_data`` holds the parsed error payload (or the raw text when
    the body is not JSON) exactly as the exchange sent it.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        response_data: Optional[Any] = None,
        response_text: str = "",
        auth_failure: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data
        self.response_text = response_text
        self.auth_failure = auth_failure

    @property
    def category(self) -> str:
        return "auth" if self.auth_failure else "business"
