"""
Keep-alive HTTP session for order submission.

Every request of a run (warm-up GETs and order POSTs) goes through one
pooled connection set, so only the first request pays for DNS, TCP and
TLS setup.
"""

import aiohttp
from typing import Optional

from .models.config import ConnectionConfig

# The loop is sequential; a small pool covers the concurrent warm-up GETs
POOL_SIZE = 10
# Idle connections are held for the whole run, even with long delays
KEEPALIVE_SECONDS = 3600
USER_AGENT = "clob-exec/1.0"


class SessionManager:
    """
    Owns the run's single ``aiohttp.ClientSession``.

    The connector keeps connections alive between orders and never forces
    a close after a response. aiohttp sets TCP_NODELAY on its sockets, so
    small order bodies are written without Nagle buffering.
    """

    def __init__(self, config: ConnectionConfig):
        self._config = config
        self._session: Optional[aiohttp.ClientSession] = None

    def _connector(self) -> aiohttp.TCPConnector:
        return aiohttp.TCPConnector(
            limit=POOL_SIZE,
            limit_per_host=POOL_SIZE,
            force_close=False,
            keepalive_timeout=KEEPALIVE_SECONDS,
            use_dns_cache=True,
            ttl_dns_cache=None,
        )

    async def create_session(self) -> aiohttp.ClientSession:
        """Return the open session, creating it on first use."""
        if self._session is not None and not self._session.closed:
            return self._session

        self._session = aiohttp.ClientSession(
            connector=self._connector(),
            timeout=aiohttp.ClientTimeout(total=self._config.timeout),
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
        return self._session

    async def close_session(self) -> None:
        """Close the session and its pooled connections."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        return self._session
