"""The shared logic of the WMS and WFS endpoints.

An endpoint wraps a single remote service. Creating it starts fetching the
capabilities document; all accessors return ``None`` until that completed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import ClassVar, Union

from owsclient.cache import use_cache
from owsclient.exceptions import EndpointNotReady, wrap_endpoint_errors
from owsclient.http import fetch_document, set_query_params
from owsclient.types import ServiceInfo, WfsCapabilities, WmsCapabilities

logger = logging.getLogger(__name__)

__all__ = ("BaseEndpoint", "Fetcher")

#: A coroutine function that retrieves the document of a URL, as bytes or text.
Fetcher = Callable[[str], Awaitable[Union[bytes, str]]]


class BaseEndpoint:
    """Base class for endpoints that are initialized from a GetCapabilities document.

    Subclasses define the :attr:`service_type` and implement :meth:`parse_capabilities`.
    """

    service_type: ClassVar[str]

    def __init__(self, url: str, fetcher: Fetcher | None = None):
        """
        :param url: The endpoint url; can contain any query parameters,
            these will be used to initialize the endpoint.
        :param fetcher: Optional coroutine function to retrieve the documents.
        """
        self._fetcher = fetcher or fetch_document
        self._capabilities_url = set_query_params(
            url, {"SERVICE": self.service_type, "REQUEST": "GetCapabilities"}
        )
        self._capabilities = None

        # This fetches the capabilities document and parses its contents, only once.
        self._capabilities_task = asyncio.ensure_future(self._load_capabilities())
        self._capabilities_task.add_done_callback(self._on_capabilities_done)

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._capabilities_url}>"

    def parse_capabilities(self, xml_string: str | bytes):
        raise NotImplementedError()

    async def _load_capabilities(self):
        with wrap_endpoint_errors(self._capabilities_url):
            capabilities = await use_cache(
                self._fetch_capabilities,
                self.service_type,
                "CAPABILITIES",
                self._capabilities_url,
            )
        self._capabilities = capabilities  # only assigned when everything succeeded.

    def _on_capabilities_done(self, task: asyncio.Task):
        # Marks the error as retrieved, is_ready() still raises it.
        if not task.cancelled() and (error := task.exception()) is not None:
            logger.debug("%r failed: %s", self, error)

    async def _fetch_capabilities(self):
        xml_string = await self._fetcher(self._capabilities_url)
        return self.parse_capabilities(xml_string)

    async def is_ready(self):
        """Wait until the endpoint is ready to use.
        Returns the same endpoint object for convenience.

        :raises EndpointError: When the capabilities could not be fetched or parsed.
        """
        await self._capabilities_task
        return self

    @property
    def capabilities(self) -> WmsCapabilities | WfsCapabilities:
        """The complete capabilities data.

        :raises EndpointNotReady: When :meth:`is_ready` didn't complete yet.
        """
        if self._capabilities is None:
            raise EndpointNotReady(
                f"{self.service_type} endpoint {self._capabilities_url} is not ready"
            )
        return self._capabilities

    def get_service_info(self) -> ServiceInfo | None:
        """Returns the service information, or ``None`` when the endpoint isn't ready."""
        if self._capabilities is None:
            return None
        return self._capabilities.info

    def get_version(self) -> str | None:
        """Returns the protocol version that this endpoint uses.

        Note that if the URL used for initialization specifies a version,
        this version will most likely be used instead of the highest supported one.
        """
        if self._capabilities is None:
            return None
        return self._capabilities.version

    def get_operation_url(self, operation_name: str, method: str = "Get") -> str | None:
        """Returns the URL reported by the service for the given operation.

        :param operation_name: e.g. GetMap, GetFeature, etc.
        :param method: The HTTP method, either "Get" or "Post".
        """
        if self._capabilities is None:
            return None
        return self._capabilities.urls.get(operation_name, {}).get(method)

    def get_capabilities_url(self) -> str:
        """Returns the capabilities URL of the service.

        This is the URL reported by the service if available,
        otherwise the URL passed to the constructor.
        """
        base_url = self.get_operation_url("GetCapabilities")
        if not base_url:
            return self._capabilities_url
        return set_query_params(
            base_url, {"SERVICE": self.service_type, "REQUEST": "GetCapabilities"}
        )
