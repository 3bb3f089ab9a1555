"""
Conversão numérica: política tolerante (montagem do registro) e estrita (agregação).
"""

import math

import numpy as np
import pytest

from conselho.numeric import coerce_cell, coerce_edit, to_number


class TestCoerceCell:
    def test_comma_decimal(self):
        assert coerce_cell("7,5") == 7.5

    def test_plain_integer_stays_integer(self):
        v = coerce_cell("99")
        assert v == 99
        assert isinstance(v, int)

    def test_dot_is_thousands_separator(self):
        assert coerce_cell("1.234") == 1234
        assert coerce_cell("1.234,5") == 1234.5

    def test_signed(self):
        assert coerce_cell("-3,25") == -3.25
        assert coerce_cell("+4") == 4

    def test_numbers_are_identity(self):
        assert coerce_cell(80) == 80
        assert coerce_cell(7.5) == 7.5

    def test_non_finite_number_is_none(self):
        assert coerce_cell(float("inf")) is None

    def test_text_kept_trimmed(self):
        assert coerce_cell("  ATIVO ") == "ATIVO"
        assert coerce_cell("7,5a") == "7,5a"
        assert coerce_cell("1,2,3") == "1,2,3"

    @pytest.mark.parametrize("v", [None, "", "   ", float("nan")])
    def test_empty_is_none(self, v):
        assert coerce_cell(v) is None


class TestToNumber:
    @pytest.mark.parametrize("raw, expected", [
        ("7,5", 7.5),
        ("7.5", 7.5),
        ("99", 99.0),
        (" 8 ", 8.0),
        ("1.234,5", 1234.5),
        (80, 80.0),
        (np.float64(6.5), 6.5),
        (np.int64(3), 3.0),
    ])
    def test_numeric(self, raw, expected):
        assert to_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "7,5a", "1.2.3", float("nan"), float("inf"), True, [], "-"])
    def test_not_numeric_is_none(self, raw):
        assert to_number(raw) is None

    def test_result_is_finite_float(self):
        v = to_number("10")
        assert isinstance(v, float)
        assert math.isfinite(v)


class TestCoerceEdit:
    def test_number_text(self):
        assert coerce_edit("7,5") == 7.5
        assert coerce_edit("8") == 8

    def test_free_text_kept(self):
        assert coerce_edit(" dispensado ") == "dispensado"

    def test_blank_clears(self):
        assert coerce_edit("") is None
        assert coerce_edit("  ") is None
