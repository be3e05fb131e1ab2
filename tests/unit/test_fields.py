"""Unit tests for the defensive field helpers shared by adapters."""
from __future__ import annotations

import logging
import math

import pytest

from aptos_portfolio.protocols.fields import (
    dig,
    dig_dict,
    dig_list,
    each_item,
    human_to_raw,
    scale_amount,
    to_float,
    to_raw_amount,
)


class TestDig:
    def test_nested_path(self) -> None:
        assert dig({"a": {"b": [1, 2]}}, "a", "b", 1) == 2

    def test_missing_key_returns_default(self) -> None:
        assert dig({"a": {}}, "a", "b", default="x") == "x"

    def test_null_step_returns_default(self) -> None:
        assert dig({"a": None}, "a", "b", default=0) == 0

    def test_index_out_of_range(self) -> None:
        assert dig([1], 5) is None

    def test_wrong_container_type(self) -> None:
        assert dig("text", "a", default=1) == 1

    def test_dig_list_and_dict_coerce(self) -> None:
        assert dig_list({"a": "not a list"}, "a") == []
        assert dig_dict({"a": [1]}, "a") == {}


class TestToFloat:
    @pytest.mark.parametrize(
        "value, expected",
        [("2.50", 2.5), (3, 3.0), (None, 0.0), ("", 0.0), ("abc", 0.0), (True, 0.0)],
    )
    def test_coercion(self, value: object, expected: float) -> None:
        assert to_float(value) == expected

    def test_never_nan_or_inf(self) -> None:
        assert to_float("nan") == 0.0
        assert to_float(float("inf")) == 0.0
        assert not math.isnan(to_float("NaN", default=1.0))

    def test_custom_default(self) -> None:
        assert to_float(None, default=-1.0) == -1.0


class TestToRawAmount:
    def test_integer_string(self) -> None:
        assert to_raw_amount("100000000") == "100000000"

    def test_truncates_fraction(self) -> None:
        assert to_raw_amount("12.9") == "12"

    def test_keeps_sign(self) -> None:
        assert to_raw_amount(-5) == "-5"

    @pytest.mark.parametrize("value", [None, "", "garbage", False])
    def test_garbage_is_zero(self, value: object) -> None:
        assert to_raw_amount(value) == "0"

    def test_large_values_exact(self) -> None:
        assert to_raw_amount("123456789012345678901234567890") == "123456789012345678901234567890"


class TestScaling:
    def test_scale_amount(self) -> None:
        assert scale_amount("100000000", 8) == pytest.approx(1.0)

    def test_scale_amount_garbage(self) -> None:
        assert scale_amount("x", 8) == 0.0

    def test_human_to_raw(self) -> None:
        assert human_to_raw(1.5, 6) == "1500000"

    def test_human_to_raw_garbage(self) -> None:
        assert human_to_raw("nope", 6) == "0"


class TestEachItem:
    def test_skips_failing_items(self, caplog: pytest.LogCaptureFixture) -> None:
        def parse(item: int) -> list[int]:
            if item == 2:
                raise ValueError("bad item")
            return [item * 10]

        with caplog.at_level(logging.WARNING):
            result = each_item([1, 2, 3], parse, "test")

        assert result == [10, 30]
        assert "Skipping malformed test item #1" in caplog.text

    def test_multiple_results_per_item(self) -> None:
        assert each_item([1, 2], lambda i: [i] * i, "test") == [1, 2, 2]
