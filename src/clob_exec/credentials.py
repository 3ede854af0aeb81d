"""
Credential store for the CLOB private API.

Credentials are derived once per process through the signer's L1
handshake and held in memory afterwards. There is no refresh.
"""

import asyncio
import logging
from concurrent.futures import Executor
from typing import Any, Optional, Protocol

from .auth import ApiCredentials
from .exceptions import CredentialDerivationError

logger = logging.getLogger(__name__)


class CredentialSource(Protocol):
    """Anything that can perform the create-or-derive handshake."""

    def create_or_derive(self) -> Any:
        ...


def parse_credentials(raw: Any) -> ApiCredentials:
    """
    Parse a handshake response into ApiCredentials.

    Accepts the SDK's credential object (``api_key``, ``api_secret``,
    ``api_passphrase`` attributes) or the endpoint's JSON mapping
    (``apiKey``, ``secret``, ``passphrase``).
    """
    if raw is None:
        raise CredentialDerivationError("Credential endpoint returned no credentials")

    if isinstance(raw, dict):
        api_key = raw.get("apiKey") or raw.get("api_key")
        api_secret = raw.get("secret") or raw.get("api_secret")
        passphrase = raw.get("passphrase") or raw.get("api_passphrase")
    else:
        api_key = getattr(raw, "api_key", None)
        api_secret = getattr(raw, "api_secret", None)
        passphrase = getattr(raw, "api_passphrase", None)

    missing = [
        name for name, value in (
            ("api key", api_key), ("secret", api_secret), ("passphrase", passphrase)
        )
        if not isinstance(value, str) or not value
    ]
    if missing:
        raise CredentialDerivationError(
            f"Credential response is missing: {', '.join(missing)}"
        )

    return ApiCredentials(api_key=api_key, api_secret=api_secret, passphrase=passphrase)


class CredentialStore:
    """Holds the derived API credentials for the lifetime of the process."""

    def __init__(self, source: CredentialSource, executor: Optional[Executor] = None):
        self._source = source
        self._executor = executor
        self._credentials: Optional[ApiCredentials] = None

    @property
    def credentials(self) -> ApiCredentials:
        if self._credentials is None:
            raise CredentialDerivationError("Credentials have not been derived yet")
        return self._credentials

    @property
    def is_ready(self) -> bool:
        return self._credentials is not None

    async def derive(self) -> ApiCredentials:
        """
        Run the handshake once and keep the result.

        Later calls return the held credentials without network activity.

        Raises:
            CredentialDerivationError: the call failed, the signature was
                rejected, or the response could not be parsed
        """
        if self._credentials is not None:
            return self._credentials

        logger.info("Deriving API credentials...")
        loop = asyncio.get_running_loop()
        try:
            raw = await loop.run_in_executor(self._executor, self._source.create_or_derive)
        except CredentialDerivationError:
            raise
        except Exception as e:
            raise CredentialDerivationError(f"Credential derivation failed: {e}") from e

        credentials = parse_credentials(raw)
        self._credentials = credentials
        logger.info(f"Credentials acquired, API key: {credentials.key_prefix}...")
        return credentials
