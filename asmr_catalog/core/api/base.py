"""
Catalog API contract.

This module is intentionally DTO-agnostic.
Platform quirks are normalized inside platform clients.

Contract goals:
- Stable, minimal surface area
- Every listing returns {"works"/"playlists": [...], "pagination": {...}}
- Returns plain dict/list payloads (DTO creation belongs to managers)
- Any non-success response, timeout or parse failure raises APIError;
  there is no retry and no stale fallback
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

import logging
import requests

from asmr_catalog.core.http_client import API_HEADERS, DEFAULT_TIMEOUT_SECONDS


class APIError(RuntimeError):
    """Raised for platform HTTP / parsing errors."""


logger = logging.getLogger(__name__)

Timeout = Union[int, float, Tuple[float, float]]


class BaseAPIClient(ABC):
    """
    Authoritative catalog API contract.

    Hosts must NOT call platform clients directly; managers should.
    Platform clients must normalize quirks internally.
    """

    BASE_URL: str
    PLATFORM: str

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: Timeout = (DEFAULT_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS),
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self._configure_session()

    # ------------------------------------------------------------------
    # Session / Request helpers
    # ------------------------------------------------------------------

    def _configure_session(self) -> None:
        self.session.headers.update(API_HEADERS)

    def _auth_headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.BASE_URL}{path}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        url = self._url(path)

        if params:
            logger.info(f"API Request: {method} {url}?{urlencode(params, doseq=True)}")
        else:
            logger.info(f"API Request: {method} {url}")

        req_headers = dict(self.session.headers)
        req_headers.update(self._auth_headers())
        if headers:
            req_headers.update(headers)

        try:
            resp = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=req_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise APIError(f"{self.PLATFORM} request failed: {e}") from e

        if not resp.ok:
            raise APIError(f"{self.PLATFORM} API error {resp.status_code}: {resp.text}")
        return resp

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        resp = self._send(method, path, params=params, json_body=json_body, headers=headers)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise APIError(f"{self.PLATFORM} response is not JSON: {e}") from e

    def _request_text(self, method: str, path: str) -> str:
        return self._send(method, path).text

    # ------------------------------------------------------------------
    # Normalization helpers (platform-specific)
    # ------------------------------------------------------------------

    @abstractmethod
    def normalize_work(self, raw: dict) -> dict:
        """
        Convert raw work object -> normalized dict.
        Expected normalized keys (minimum):
          - id (int), title, circle_id, name, nsfw, release, has_subtitle
          - tags (list of {id, name, en_name}), vas (list of {id, name})
          - main_cover_url (optional)
        """

    @abstractmethod
    def normalize_pagination(self, raw: Any) -> dict:
        """
        Convert raw pagination object -> {current_page, page_size, total_count}.
        """

    # ------------------------------------------------------------------
    # Works
    # ------------------------------------------------------------------

    @abstractmethod
    def get_work_tracks(self, work_id: str) -> List[dict]:
        """Raw media tree children of a work (list of node objects)."""

    @abstractmethod
    def get_work(self, work_id: str) -> dict:
        """Single normalized work."""

    @abstractmethod
    def search_works(self, *, keyword: str, page: int, **kwargs: Any) -> Dict[str, Any]:
        """
        Returns a normalized page dict:
          - works (list of normalized works)
          - pagination ({current_page, page_size, total_count})
        """

    @abstractmethod
    def get_subtitle_text(self, url: str) -> str:
        """Raw subtitle file body."""
