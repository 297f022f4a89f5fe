import math

import pytest

from owsclient.parsers.values import (
    parse_boolean,
    parse_float,
    parse_integer,
    parse_optional_float,
    scale_hint_to_denominator,
)


@pytest.mark.parametrize(
    "value,expect",
    [("12", 12), ("-3", -3), (" 42", 42), ("12.7", 12), ("7 items", 7), ("+5", 5)],
)
def test_parse_integer(value, expect):
    assert parse_integer(value) == expect


@pytest.mark.parametrize("value", ["", "abc", "n/a", "."])
def test_parse_integer_invalid(value):
    """Prove that malformed numbers give NaN, not an exception."""
    assert math.isnan(parse_integer(value))


@pytest.mark.parametrize(
    "value,expect",
    [
        ("1.5", 1.5),
        ("-0.25", -0.25),
        (".5", 0.5),
        ("1e+07", 1e7),
        ("3.6e-2", 0.036),
        ("12.5m", 12.5),
        ("Infinity", math.inf),
        ("-Infinity", -math.inf),
    ],
)
def test_parse_float(value, expect):
    assert parse_float(value) == expect


@pytest.mark.parametrize("value", ["", "abc", "nan", "-"])
def test_parse_float_invalid(value):
    assert math.isnan(parse_float(value))


def test_parse_boolean():
    assert parse_boolean("true") is True
    assert parse_boolean("false") is False
    assert parse_boolean("True") is False
    assert parse_boolean("1") is False


def test_parse_optional_float():
    assert parse_optional_float("") is None
    assert parse_optional_float(None) is None
    assert parse_optional_float("foo") is None
    assert parse_optional_float("200000") == 200000.0


@pytest.mark.parametrize(
    "hint,expect",
    [
        (79.19595949289332, 200000),
        (3959.797974644666, 10000000),
        (3.5638181771802, 9000),
        (99.39092916358113, 251000),
    ],
)
def test_scale_hint_to_denominator(hint, expect):
    assert scale_hint_to_denominator(hint) == pytest.approx(expect)
