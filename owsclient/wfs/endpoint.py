"""The WFS endpoint, which gives access to a single remote WFS service."""

from __future__ import annotations

import logging

from owsclient.cache import use_cache
from owsclient.endpoint import BaseEndpoint
from owsclient.exceptions import wrap_endpoint_errors
from owsclient.http import set_query_params
from owsclient.parsers.xml import parse_xml_from_string, strip_namespace
from owsclient.types import FeatureTypeFull, FeatureTypeSummary, PropsDetails, WfsCapabilities
from owsclient.wfs.capabilities import parse_wfs_capabilities
from owsclient.wfs.featureprops import (
    compute_feature_props_details,
    parse_feature_props,
    parse_feature_props_geojson,
)
from owsclient.wfs.featuretypeinfo import parse_feature_type_info
from owsclient.wfs.versions import WfsDialect, get_dialect

logger = logging.getLogger(__name__)

__all__ = ("WfsEndpoint",)


def get_json_format(output_formats) -> str | None:
    """Find the output format that gives GeoJSON (e.g. ``application/json``)."""
    return next((name for name in output_formats if "json" in name.lower()), None)


class WfsEndpoint(BaseEndpoint):
    """Represents a WFS endpoint advertising several feature types.

    Creating the endpoint directly starts fetching the capabilities document,
    hence it needs to be constructed while an event loop is running::

        endpoint = await WfsEndpoint("https://example.org/wfs").is_ready()
        endpoint.get_feature_types()
    """

    service_type = "WFS"
    _capabilities: WfsCapabilities | None

    def parse_capabilities(self, xml_string: str | bytes) -> WfsCapabilities:
        return parse_wfs_capabilities(xml_string)

    @property
    def dialect(self) -> WfsDialect:
        return get_dialect(self.capabilities.version)

    def get_feature_types(self) -> list[FeatureTypeSummary] | None:
        """Returns the feature types, in the order of the capabilities document."""
        if self._capabilities is None:
            return None
        return list(self._capabilities.feature_types)

    def get_feature_type_summary(self, name: str) -> FeatureTypeSummary | None:
        """Returns the feature type by its name.

        The name may be given without its namespace prefix (e.g. ``places``
        for ``ns:places``), as long as this gives a single match.
        """
        if self._capabilities is None:
            return None

        feature_types = self._capabilities.feature_types
        for feature_type in feature_types:
            if feature_type.name == name:
                return feature_type

        local_name = strip_namespace(name)
        matches = [
            feature_type
            for feature_type in feature_types
            if strip_namespace(feature_type.name) == local_name
        ]
        if len(matches) > 1:
            logger.debug("Feature type name '%s' is ambiguous in %r", name, self)
        return matches[0] if len(matches) == 1 else None

    def get_single_feature_type_name(self) -> str | None:
        """If only one single feature type is available, return its name; otherwise None."""
        if self._capabilities is None:
            return None
        feature_types = self._capabilities.feature_types
        return feature_types[0].name if len(feature_types) == 1 else None

    def supports_json(self, feature_type_name: str | None = None) -> bool | None:
        """Tell whether the service can return GeoJSON,
        either for a single feature type or for the whole service.
        """
        if self._capabilities is None:
            return None
        return self._get_json_format(feature_type_name) is not None

    def _get_json_format(self, feature_type_name: str | None = None) -> str | None:
        output_formats = self._capabilities.info.output_formats
        if feature_type_name is not None:
            feature_type = self.get_feature_type_summary(feature_type_name)
            if feature_type is not None:
                output_formats = feature_type.output_formats
        return get_json_format(output_formats)

    def _get_request_url(self, operation_name: str, params: dict) -> str:
        """Build the GET request URL for an operation."""
        base_url = self.get_operation_url(operation_name) or self._capabilities_url
        return set_query_params(
            base_url,
            {
                "SERVICE": self.service_type,
                "REQUEST": operation_name,
                "VERSION": self.capabilities.version,
                **params,
            },
        )

    async def get_feature_type_full(self, name: str) -> FeatureTypeFull | None:
        """Returns the feature type with the types of its properties.
        This performs a DescribeFeatureType request.

        :returns: ``None`` when the feature type doesn't exist.
        :raises EndpointError: When the request or parsing failed.
        """
        await self.is_ready()
        feature_type = self.get_feature_type_summary(name)
        if feature_type is None:
            return None

        url = self._get_request_url(
            "DescribeFeatureType", {self.dialect.type_names_param: feature_type.name}
        )

        async def _fetch_feature_type_full():
            xml_string = await self._fetcher(url)
            return parse_feature_type_info(parse_xml_from_string(xml_string), feature_type)

        with wrap_endpoint_errors(url):
            return await use_cache(
                _fetch_feature_type_full, self.service_type, "DESCRIBE_FEATURE_TYPE", url
            )

    async def get_feature_type_props_details(self, name: str) -> PropsDetails | None:
        """Returns the unique values of each property, with the number of occurrences.
        This performs a GetFeature request without the geometry.

        :returns: ``None`` when the feature type doesn't exist.
        :raises EndpointError: When the requests or parsing failed.
        """
        feature_type_full = await self.get_feature_type_full(name)
        if feature_type_full is None:
            return None

        json_format = self._get_json_format(feature_type_full.name)
        params = {self.dialect.type_names_param: feature_type_full.name}
        if feature_type_full.properties:
            params["PROPERTYNAME"] = ",".join(feature_type_full.properties)
        if json_format:
            params["OUTPUTFORMAT"] = json_format
        url = self._get_request_url("GetFeature", params)
        version = self.capabilities.version

        async def _fetch_props_details():
            content = await self._fetcher(url)
            if json_format:
                features = parse_feature_props_geojson(content)
            else:
                features = parse_feature_props(
                    parse_xml_from_string(content), feature_type_full, version
                )
            return compute_feature_props_details(features)

        with wrap_endpoint_errors(url):
            return await use_cache(_fetch_props_details, self.service_type, "PROPS_DETAILS", url)
