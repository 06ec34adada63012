"""
Unofficial Google Translate endpoint (the "gtx" web client).

One call translates one newline-joined payload. The endpoint returns a nested
JSON array whose first element is a list of segments; the translated text is
the concatenation of every segment's first field.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp

from asmr_catalog.core.api.base import APIError
from asmr_catalog.core.http_client import HttpClient, TRANSLATE_HEADERS


GOOGLE_TRANSLATE_URL = "https://translate.googleapis.com/translate_a/single"

# Longer query strings are rejected by the endpoint; switch to a form body.
MAX_GET_URL_LENGTH = 1900

logger = logging.getLogger(__name__)


class GoogleTranslateClient:
    PLATFORM = "translate.googleapis.com"

    def __init__(self, http_client: Optional[HttpClient] = None):
        self._http_client = http_client or HttpClient()
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = await self._http_client.create_async_session(TRANSLATE_HEADERS)
            return self._session

    @staticmethod
    def _params(text: str, target_lang: str, source_lang: str) -> Dict[str, str]:
        return {
            "client": "gtx",
            "sl": source_lang,
            "tl": target_lang,
            "dt": "t",
            "q": text,
        }

    async def translate(self, text: str, target_lang: str, source_lang: str = "auto") -> str:
        if not text.strip():
            return text

        params = self._params(text, target_lang, source_lang)
        session = await self._get_session()

        use_post = len(GOOGLE_TRANSLATE_URL) + 1 + len(urlencode(params)) > MAX_GET_URL_LENGTH
        logger.debug(
            f"Translate request: {'POST' if use_post else 'GET'} "
            f"{len(text)} chars -> {target_lang}"
        )

        try:
            if use_post:
                query = {k: v for k, v in params.items() if k != "q"}
                request = session.post(GOOGLE_TRANSLATE_URL, params=query, data={"q": text})
            else:
                request = session.get(GOOGLE_TRANSLATE_URL, params=params)

            async with request as response:
                if response.status != 200:
                    body = await response.text()
                    raise APIError(f"{self.PLATFORM} error {response.status}: {body[:200]}")
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise APIError(f"{self.PLATFORM} request failed: {e}") from e
        except ValueError as e:
            raise APIError(f"{self.PLATFORM} response is not JSON: {e}") from e

        return self.parse_response(payload)

    def parse_response(self, payload: Any) -> str:
        try:
            segments = payload[0]
            return "".join(seg[0] for seg in segments if seg and seg[0])
        except (IndexError, KeyError, TypeError) as e:
            raise APIError(f"{self.PLATFORM} unexpected payload: {e}") from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
