"""
Centralized HTTP client configuration.

Provides unified session management for both sync (requests) and async
(aiohttp) HTTP clients with:
- Shared headers (User-Agent, Origin/Referer for the catalog API)
- Fixed connect/read timeouts (no automatic retry anywhere)
- Connection pool limits for the async translation client
"""

from __future__ import annotations

import logging
import socket
from typing import Dict, Optional, Tuple

import aiohttp
import requests
from aiohttp import ClientTimeout, TCPConnector

logger = logging.getLogger(__name__)


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

# Headers for catalog API requests (JSON in, JSON out)
API_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Content-Type": "application/json",
    "Origin": "https://asmr.one",
    "Referer": "https://asmr.one/",
}

# Headers for the translation endpoint
TRANSLATE_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
}

DEFAULT_TIMEOUT_SECONDS = 10


class HttpClientConfig:
    """Central HTTP client configuration."""

    def __init__(
        self,
        connect_timeout: int = DEFAULT_TIMEOUT_SECONDS,
        read_timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_connections_per_host: int = 10,
        max_total_connections: int = 100,
    ):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_connections_per_host = max_connections_per_host
        self.max_total_connections = max_total_connections

    @property
    def requests_timeout(self) -> Tuple[int, int]:
        """(connect, read) tuple accepted by requests."""
        return self.connect_timeout, self.read_timeout

    def aiohttp_timeout(self) -> ClientTimeout:
        return ClientTimeout(
            total=None,
            connect=self.connect_timeout,
            sock_connect=self.connect_timeout,
            sock_read=self.read_timeout,
        )


class HttpClient:
    """
    Centralized HTTP client factory.

    Creates and configures both sync (requests) and async (aiohttp) sessions
    with shared configuration for headers and timeouts.
    """

    def __init__(self, config: Optional[HttpClientConfig] = None):
        self.config = config or HttpClientConfig()
        self._sync_session: Optional[requests.Session] = None
        self._async_session: Optional[aiohttp.ClientSession] = None

    def create_sync_session(self, headers: Optional[Dict[str, str]] = None) -> requests.Session:
        """
        Create a configured requests.Session for synchronous HTTP.

        Args:
            headers: Optional headers to use (defaults to API_HEADERS)
        """
        session = requests.Session()
        session.headers.update(headers or API_HEADERS)
        self._sync_session = session
        return session

    def get_sync_session(self) -> requests.Session:
        """Get existing session or create new one."""
        if self._sync_session is None:
            return self.create_sync_session()
        return self._sync_session

    async def create_async_session(
        self,
        headers: Optional[Dict[str, str]] = None,
    ) -> aiohttp.ClientSession:
        """
        Create a configured aiohttp.ClientSession for async HTTP.

        Must be called from inside the event loop that will use the session.
        """
        connector = TCPConnector(
            limit=self.config.max_total_connections,
            limit_per_host=self.config.max_connections_per_host,
            ttl_dns_cache=300,
            family=socket.AF_INET,
            force_close=False,
        )
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=self.config.aiohttp_timeout(),
            headers=headers or TRANSLATE_HEADERS,
            raise_for_status=False,
        )
        self._async_session = session
        return session

    async def close_async_session(self) -> None:
        if self._async_session is not None:
            await self._async_session.close()
            self._async_session = None

    def close(self) -> None:
        """Close the sync session."""
        if self._sync_session is not None:
            self._sync_session.close()
            self._sync_session = None


def create_http_client_from_settings(settings) -> HttpClient:
    """
    Create HttpClient configured from CatalogSettings.

    Args:
        settings: CatalogSettings instance to read timeouts from
    """
    timeout = int(getattr(settings, "request_timeout", DEFAULT_TIMEOUT_SECONDS))
    config = HttpClientConfig(connect_timeout=timeout, read_timeout=timeout)
    logger.debug(f"HTTP client timeouts: connect={timeout}s read={timeout}s")
    return HttpClient(config)
