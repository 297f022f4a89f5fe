"""Reading the property values of a GetFeature response.

Only the properties that the feature type declares are read,
and their values are converted into the declared scalar type.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

import orjson

from owsclient.exceptions import ExternalParsingError, SchemaMismatch
from owsclient.parsers.values import parse_boolean, parse_float, parse_integer
from owsclient.parsers.xml import (
    get_children_elements,
    get_element_attribute,
    get_element_text,
    get_root_element,
    strip_namespace,
)
from owsclient.types import (
    FeatureTypeFull,
    FeatureWithProps,
    PropDetails,
    PropertyType,
    PropsDetails,
    UniqueValue,
    freeze_mapping,
)
from owsclient.wfs.versions import get_dialect

logger = logging.getLogger(__name__)

__all__ = (
    "parse_feature_props",
    "parse_feature_props_geojson",
    "compute_feature_props_details",
)

VALUE_PARSERS = {
    PropertyType.integer: parse_integer,
    PropertyType.float: parse_float,
    PropertyType.boolean: parse_boolean,
}


def parse_property_value(prop_type: PropertyType | str, value: str) -> Any:
    """Convert the element text into the declared type.
    Malformed numbers become ``math.nan``, unknown types are kept as text.
    """
    try:
        parser = VALUE_PARSERS[prop_type]
    except KeyError:
        return value
    return parser(value)


def parse_feature_props(
    get_feature_doc, feature_type_full: FeatureTypeFull, version: str
) -> list[FeatureWithProps]:
    """Return the features of a GML GetFeature response, with their id and properties.

    :param get_feature_doc: The parsed GetFeature response.
    :param feature_type_full: The feature type that describes the property types.
    :param version: The WFS version that the service uses.
    """
    dialect = get_dialect(version)
    collection_el = get_root_element(get_feature_doc)
    properties = feature_type_full.properties

    features = []
    for member_el in dialect.read_feature_members(collection_el):
        values = {}
        for prop_el in get_children_elements(member_el):
            name = strip_namespace(prop_el.tag)
            if name in properties:
                values[name] = parse_property_value(properties[name], get_element_text(prop_el))

        features.append(
            FeatureWithProps(
                id=get_element_attribute(member_el, dialect.id_attribute),
                properties=values,
            )
        )

    logger.debug("Read %d features of %s", len(features), feature_type_full.name)
    return features


def parse_feature_props_geojson(payload: dict | str | bytes) -> list[FeatureWithProps]:
    """Return the features of a GeoJSON FeatureCollection, with their id and properties.

    :raises ExternalParsingError: When a text payload is not valid JSON.
    :raises SchemaMismatch: When the payload has no ``features`` list,
        or a feature is not a JSON object.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise ExternalParsingError(f"Unable to parse GeoJSON: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        raise SchemaMismatch("GeoJSON object is apparently not a FeatureCollection")

    features = []
    for feature in payload["features"]:
        if not isinstance(feature, dict):
            raise SchemaMismatch(f"GeoJSON feature is not an object: {feature!r:.100}")
        properties = feature.get("properties") or {}
        if not isinstance(properties, dict):
            raise SchemaMismatch(f"GeoJSON feature has invalid properties: {properties!r:.100}")
        features.append(FeatureWithProps(id=feature.get("id"), properties=dict(properties)))
    return features


def compute_feature_props_details(features: Iterable[FeatureWithProps]) -> PropsDetails:
    """Count the unique values of every property.

    Values are compared by type and value, so ``1``, ``1.0``, ``"1"`` and ``True``
    are counted separately. The values are listed in the order they are first seen.
    """
    counters: dict[str, dict] = {}
    for feature in features:
        for name, value in feature.properties.items():
            counter = counters.setdefault(name, {})
            key = _value_key(value)
            if key in counter:
                counter[key][1] += 1
            else:
                counter[key] = [value, 1]

    return freeze_mapping(
        {
            name: PropDetails(
                unique_values=tuple(
                    UniqueValue(value=value, count=count) for value, count in counter.values()
                )
            )
            for name, counter in counters.items()
        }
    )


def _value_key(value: Any):
    if isinstance(value, float) and math.isnan(value):
        return float, "nan"
    elif isinstance(value, (dict, list)):
        # GeoJSON may contain nested values.
        return type(value), orjson.dumps(value, option=orjson.OPT_SORT_KEYS)
    return type(value), value
