"""Fetching remote documents and building request URLs."""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import aiohttp

from owsclient import conf
from owsclient.exceptions import FetchError

logger = logging.getLogger(__name__)

__all__ = ("fetch_document", "set_query_params")


def set_query_params(url: str, params: dict[str, str | bool]) -> str:
    """Set the query parameters of a URL, replacing existing parameters with the same name.

    OGC services treat parameter names case-insensitive, so ``service=wms`` is
    replaced when ``SERVICE`` is given. Unrelated parameters are kept in place.
    A value of ``True`` gives an empty parameter value.
    """
    parts = urlsplit(url)
    new_names = {name.lower() for name in params}
    query = [
        (name, value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if name.lower() not in new_names
    ]
    query.extend((name, "" if value is True else value) for name, value in params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


async def fetch_document(url: str) -> bytes:
    """Fetch a document as raw bytes.

    The bytes are returned undecoded, so the XML parser follows the encoding
    that the document declares itself.

    :raises FetchError: When the server doesn't return a success response.
    :raises aiohttp.ClientError: When the connection fails.
    """
    timeout = aiohttp.ClientTimeout(total=conf.OWSCLIENT_FETCH_TIMEOUT)
    headers = {"User-Agent": conf.OWSCLIENT_USER_AGENT}
    logger.debug("Fetching %s", url)

    async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
        async with session.get(url) as response:
            if response.status != 200:
                error_text = await response.text(errors="replace")
                raise FetchError(url, response.status, error_text)
            return await response.read()
