from __future__ import annotations

import math

import pytest

from jsonlp.exceptions import FormatError
from jsonlp.values import parse_numeric_value


def test_numbers_pass_through_unchanged() -> None:
    assert parse_numeric_value(2.5) == 2.5
    assert parse_numeric_value(-7) == -7.0
    assert isinstance(parse_numeric_value(3), float)


@pytest.mark.parametrize("text", ["inf", "infinity"])
def test_positive_infinity_sentinels(text: str) -> None:
    assert parse_numeric_value(text) == math.inf


@pytest.mark.parametrize("text", ["-inf", "-infinity", "ninf"])
def test_negative_infinity_sentinels(text: str) -> None:
    assert parse_numeric_value(text) == -math.inf


@pytest.mark.parametrize("text", ["+inf", "INF", "Infinity", " +INFINITY"])
def test_other_infinity_spellings_parse_like_strtod(text: str) -> None:
    assert parse_numeric_value(text) == math.inf


def test_signed_infinity_spelling_is_negative() -> None:
    assert parse_numeric_value("-Inf") == -math.inf


def test_hexadecimal_strings_are_parsed() -> None:
    assert parse_numeric_value("0x10") == 16.0
    assert parse_numeric_value("-0x1.8p1") == -3.0
    assert parse_numeric_value("0x10", strict=True) == 16.0


def test_nan_strings_are_parsed() -> None:
    assert math.isnan(parse_numeric_value("nan"))
    assert math.isnan(parse_numeric_value("NaN"))


def test_bare_hex_prefix_keeps_the_zero() -> None:
    assert parse_numeric_value("0x") == 0.0
    with pytest.raises(FormatError):
        parse_numeric_value("0x", strict=True)


def test_decimal_strings_are_parsed() -> None:
    assert parse_numeric_value("12.5") == 12.5
    assert parse_numeric_value("-1e3") == -1000.0
    assert parse_numeric_value(" .5") == 0.5


def test_non_numeric_string_is_zero(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="jsonlp.values"):
        assert parse_numeric_value("abc") == 0.0
    assert "abc" in caplog.text


def test_leading_number_is_kept() -> None:
    assert parse_numeric_value("7.25kg") == 7.25


@pytest.mark.parametrize("node", [None, True, False, [1.0], {"value": 1.0}])
def test_other_node_kinds_are_zero(node: object) -> None:
    assert parse_numeric_value(node) == 0.0


def test_strict_mode_rejects_malformed_strings() -> None:
    with pytest.raises(FormatError):
        parse_numeric_value("abc", strict=True)
    with pytest.raises(FormatError):
        parse_numeric_value("7.25kg", strict=True)
    assert parse_numeric_value("7.25", strict=True) == 7.25
    assert parse_numeric_value("ninf", strict=True) == -math.inf
