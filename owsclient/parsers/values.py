"""Conversion of the text values found in remote documents."""

from __future__ import annotations

import logging
import math
import re

logger = logging.getLogger(__name__)

__all__ = (
    "parse_integer",
    "parse_float",
    "parse_boolean",
    "parse_optional_float",
    "scale_hint_to_denominator",
)

# Only the leading number is read, trailing garbage (e.g. units) is ignored.
RE_INTEGER = re.compile(r"\A\s*([+-]?[0-9]+)")
RE_FLOAT = re.compile(r"\A\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
RE_INFINITY = re.compile(r"\A\s*([+-]?)Infinity")

# Standardized rendering pixel size of OGC services (0.28mm)
STANDARD_PIXEL_SIZE = 0.00028


def parse_integer(value: str) -> int | float:
    """Parse a base-10 integer. Returns ``math.nan`` for values that are not a number."""
    match = RE_INTEGER.match(value)
    if match is None:
        return math.nan
    return int(match.group(1))


def parse_float(value: str) -> float:
    """Parse a decimal number. Returns ``math.nan`` for values that are not a number."""
    match = RE_FLOAT.match(value)
    if match is None:
        if infinity := RE_INFINITY.match(value):
            return -math.inf if infinity.group(1) == "-" else math.inf
        return math.nan
    return float(match.group(1))


def parse_boolean(value: str) -> bool:
    """Only the literal "true" is considered to be true."""
    return value == "true"


def parse_optional_float(value: str | None) -> float | None:
    """Parse a float from an optional element/attribute text. Empty values give ``None``."""
    if not value:
        return None
    result = parse_float(value)
    if math.isnan(result):
        logger.debug("Ignoring non-numeric value '%s'", value)
        return None
    return result


def scale_hint_to_denominator(hint: float) -> float:
    """Translate a WMS 1.1.1 ``<ScaleHint>`` value into a scale denominator.

    The scale hint gives the ground size of the pixel diagonal,
    which translates to the scale by dividing it by the diagonal of a standard pixel.
    """
    return hint / math.sqrt(2) / STANDARD_PIXEL_SIZE
