from __future__ import annotations

import math

from logchart.preprocess.values import (
    EMPTY_LABEL,
    category_label,
    coerce_number,
    is_number,
    js_string,
    to_number,
)


def test_to_number_reads_leading_numeric_prefix() -> None:
    assert to_number("12abc") == 12.0
    assert to_number("  3.5e2 bytes") == 350.0
    assert to_number(".5") == 0.5
    assert to_number("-7") == -7.0
    assert to_number(4) == 4.0


def test_to_number_returns_nan_for_non_numeric_input() -> None:
    assert math.isnan(to_number("abc"))
    assert math.isnan(to_number(None))
    assert math.isnan(to_number(True))
    assert math.isnan(to_number(""))


def test_coerce_number_maps_nan_to_zero() -> None:
    assert coerce_number("n/a") == 0.0
    assert coerce_number(None) == 0.0
    assert coerce_number("42") == 42.0


def test_is_number_excludes_booleans() -> None:
    assert is_number(1)
    assert is_number(1.5)
    assert not is_number(True)
    assert not is_number("1")


def test_js_string_formats_like_script_stringification() -> None:
    assert js_string(3.0) == "3"
    assert js_string(2.5) == "2.5"
    assert js_string(True) == "true"
    assert js_string(None) == "null"
    assert js_string(math.nan) == "NaN"
    assert js_string(-math.inf) == "-Infinity"


def test_category_label_names_missing_values() -> None:
    assert category_label(None) == EMPTY_LABEL
    assert category_label(404) == "404"
    assert category_label("web") == "web"
