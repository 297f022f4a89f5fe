import asyncio

import pytest

from owsclient import conf, http
from owsclient.exceptions import FetchError
from owsclient.http import set_query_params


class TestSetQueryParams:
    def test_add(self):
        url = set_query_params("https://example.org/wms", {"SERVICE": "WMS"})
        assert url == "https://example.org/wms?SERVICE=WMS"

    def test_replace_case_insensitive(self):
        """Parameter names of OGC services are case-insensitive."""
        url = set_query_params(
            "https://example.org/wms?service=wfs&map=/data/geol.map&request=GetMap",
            {"SERVICE": "WMS", "REQUEST": "GetCapabilities"},
        )
        assert url == (
            "https://example.org/wms?map=%2Fdata%2Fgeol.map&SERVICE=WMS&REQUEST=GetCapabilities"
        )

    def test_empty_value(self):
        url = set_query_params("https://example.org/wms?language=fre&", {"TILED": True})
        assert url == "https://example.org/wms?language=fre&TILED="

    def test_idempotent(self):
        params = {"SERVICE": "WMS", "REQUEST": "GetCapabilities"}
        url = set_query_params("https://example.org/wms?foo=bar", params)
        assert set_query_params(url, params) == url


class FakeResponse:
    def __init__(self, status, content: bytes):
        self.status = status
        self.content = content

    async def read(self):
        return self.content

    async def text(self, errors="strict"):
        return self.content.decode("utf-8", errors=errors)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


class FakeSession:
    instances = []

    def __init__(self, status, content, **kwargs):
        self.status = status
        self.content = content
        self.kwargs = kwargs
        self.urls = []
        FakeSession.instances.append(self)

    def get(self, url):
        self.urls.append(url)
        return FakeResponse(self.status, self.content)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


class TestFetchDocument:
    @pytest.fixture()
    def session(self, monkeypatch):
        def _session(status, content):
            def _factory(**kwargs):
                return FakeSession(status, content, **kwargs)

            FakeSession.instances.clear()
            monkeypatch.setattr(http.aiohttp, "ClientSession", _factory)

        return _session

    def test_success(self, session):
        session(200, b"<root/>")
        result = asyncio.run(http.fetch_document("https://example.org/wms"))
        assert result == b"<root/>"

        fake = FakeSession.instances[0]
        assert fake.urls == ["https://example.org/wms"]
        assert fake.kwargs["headers"] == {"User-Agent": conf.OWSCLIENT_USER_AGENT}
        assert fake.kwargs["timeout"].total == conf.OWSCLIENT_FETCH_TIMEOUT

    def test_http_error(self, session):
        session(503, b"Service Unavailable")
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(http.fetch_document("https://example.org/wms"))

        assert exc_info.value.status == 503
        assert exc_info.value.text == "Service Unavailable"

    def test_undecoded(self, session):
        """The document is returned as-is, so the XML declaration decides the encoding."""
        content = '<?xml version="1.0" encoding="ISO-8859-1"?><root>Géologie</root>'.encode(
            "latin-1"
        )
        session(200, content)
        result = asyncio.run(http.fetch_document("https://example.org/wms"))
        assert result == content

    def test_http_error_invalid_text(self, session):
        session(500, b"Internal \xff error")
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(http.fetch_document("https://example.org/wms"))

        assert exc_info.value.text == "Internal \ufffd error"
