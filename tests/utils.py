from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import parse_qsl, urlsplit

from owsclient.exceptions import FetchError

logger = logging.getLogger(__name__)

FILES_ROOT = Path(__file__).parent.joinpath("files")


def read_file(name: str) -> str:
    return FILES_ROOT.joinpath(name).read_text(encoding="utf-8")


def get_request_name(url: str) -> str:
    """Tell which OGC request a URL performs (e.g. GetCapabilities)."""
    params = {name.upper(): value for name, value in parse_qsl(urlsplit(url).query)}
    return params.get("REQUEST", "")


class FakeFetcher:
    """A fetcher that returns the prepared documents, by request name.

    Each call is recorded, so tests can check how often a document is fetched.
    A response can also be an exception, which is raised instead.
    """

    def __init__(self, **responses: str | Exception):
        self.responses = responses
        self.urls = []

    async def __call__(self, url: str) -> str:
        self.urls.append(url)
        await asyncio.sleep(0)  # let other tasks run, as a real request would.

        request = get_request_name(url)
        try:
            response = self.responses[request]
        except KeyError:
            raise FetchError(url, 404, f"No fake response for {request}") from None

        if isinstance(response, Exception):
            raise response
        return response

    def count(self, request: str) -> int:
        return sum(1 for url in self.urls if get_request_name(url) == request)
