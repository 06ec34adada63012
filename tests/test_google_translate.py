import asyncio

import aiohttp
import pytest

from asmr_catalog.core.api.base import APIError
from asmr_catalog.core.api.google_translate import GoogleTranslateClient


class FakeResponse:
    def __init__(self, payload=None, status=200):
        self.status = status
        self._payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def text(self):
        return str(self._payload)

    async def json(self, content_type=None):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.closed = False
        self.requests = []
        self._response = response
        self._error = error

    def _request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self._error is not None:
            raise self._error
        return self._response

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    async def close(self):
        self.closed = True


def _client(session):
    client = GoogleTranslateClient()
    client._session = session
    return client


PAYLOAD = [[["Hello ", "こんにちは ", None], ["world", "世界", None]], None, "ja"]


def test_segments_are_concatenated():
    session = FakeSession(FakeResponse(PAYLOAD))
    result = asyncio.run(_client(session).translate("こんにちは 世界", "en"))

    assert result == "Hello world"
    method, _, kwargs = session.requests[0]
    assert method == "GET"
    assert kwargs["params"]["tl"] == "en"
    assert kwargs["params"]["client"] == "gtx"


def test_long_payload_is_posted():
    session = FakeSession(FakeResponse(PAYLOAD))
    asyncio.run(_client(session).translate("あ" * 1500, "en"))

    method, _, kwargs = session.requests[0]
    assert method == "POST"
    assert "q" not in kwargs["params"]
    assert kwargs["data"]["q"] == "あ" * 1500


def test_blank_text_skips_request():
    session = FakeSession(FakeResponse(PAYLOAD))
    assert asyncio.run(_client(session).translate("  ", "en")) == "  "
    assert session.requests == []


def test_non_200_raises():
    session = FakeSession(FakeResponse("Too Many Requests", status=429))
    with pytest.raises(APIError):
        asyncio.run(_client(session).translate("x", "en"))


def test_client_error_raises():
    session = FakeSession(error=aiohttp.ClientConnectionError("down"))
    with pytest.raises(APIError):
        asyncio.run(_client(session).translate("x", "en"))


def test_timeout_raises():
    session = FakeSession(error=asyncio.TimeoutError())
    with pytest.raises(APIError):
        asyncio.run(_client(session).translate("x", "en"))


@pytest.mark.parametrize("payload", [None, [], {"error": 1}, [[1, 2]]])
def test_malformed_payload_raises(payload):
    with pytest.raises(APIError):
        GoogleTranslateClient().parse_response(payload)


def test_close_releases_session():
    session = FakeSession(FakeResponse(PAYLOAD))
    client = _client(session)
    asyncio.run(client.close())
    assert session.closed is True
