"""Exceptions for reading remote OGC services.

Parsing problems are raised as :class:`ExternalParsingError` subclasses,
as these are caused by the remote document and not by internal bugs.
The endpoint classes only report failures through their readiness call,
where everything is wrapped in an :class:`EndpointError`.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager

import aiohttp

logger = logging.getLogger(__name__)

__all__ = (
    "OWSClientError",
    "ExternalParsingError",
    "MalformedDocument",
    "SchemaMismatch",
    "FetchError",
    "EndpointError",
    "EndpointNotReady",
    "wrap_endpoint_errors",
)


class OWSClientError(Exception):
    """Base class for all errors in this package."""


class ExternalParsingError(OWSClientError, ValueError):
    """Raise a ValueError for a parsing problem of external data."""


class MalformedDocument(ExternalParsingError):
    """The document misses its root element, a known version or a required element."""


class SchemaMismatch(OWSClientError, ValueError):
    """The payload doesn't have the expected structure (e.g. a GeoJSON without features)."""


class FetchError(OWSClientError):
    """The remote server didn't return a successful response."""

    def __init__(self, url: str, status: int, text: str = ""):
        super().__init__(f"Fetching {url} failed with HTTP {status}")
        self.url = url
        self.status = status
        self.text = text


class EndpointError(OWSClientError):
    """Fetching or parsing the document of an endpoint failed."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class EndpointNotReady(OWSClientError):
    """The endpoint data is read before :meth:`is_ready` completed."""


@contextmanager
def wrap_endpoint_errors(url: str):
    """Translate the failures of the fetch and parse collaborators into an EndpointError."""
    try:
        yield
    except EndpointError:
        raise
    except (OWSClientError, UnicodeError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.debug("Endpoint %s failed: %s", url, e)
        reason = str(e) or e.__class__.__name__
        raise EndpointError(f"Unable to read {url}: {reason}", url=url) from e
