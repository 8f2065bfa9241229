"""Tests for pt-BR display formatting."""

from __future__ import annotations

import pytest

from copa_unique.performance.formatting import (
    format_brl,
    format_brl_compact,
    format_growth,
    format_percent,
)


class TestFormatBrl:
    @pytest.mark.parametrize("value,expected", [
        (1234.4, "R$ 1.234"),
        (1234567, "R$ 1.234.567"),
        (0, "R$ 0"),
        (None, "R$ 0"),
        (float("nan"), "R$ 0"),
        (-1500, "-R$ 1.500"),
        ("abc", "R$ 0"),
    ])
    def test_values(self, value, expected: str) -> None:
        assert format_brl(value) == expected


class TestFormatBrlCompact:
    @pytest.mark.parametrize("value,expected", [
        (1_500_000, "R$ 1.5M"),
        (850_000, "R$ 850K"),
        (999, "R$ 999"),
        (-2_000, "-R$ 2K"),
        (None, "R$ 0"),
    ])
    def test_values(self, value, expected: str) -> None:
        assert format_brl_compact(value) == expected


class TestFormatGrowth:
    def test_undefined(self) -> None:
        assert format_growth(None) == "—"
        assert format_growth(float("nan")) == "—"

    def test_signs(self) -> None:
        assert format_growth(12.345) == "+12.3%"
        assert format_growth(-3) == "-3.0%"
        assert format_growth(0) == "0%"

    def test_decimals(self) -> None:
        assert format_growth(50, decimals=0) == "+50%"


class TestFormatPercent:
    def test_values(self) -> None:
        assert format_percent(84.6) == "85%"
        assert format_percent(84.56, 1) == "84.6%"
        assert format_percent(None) == "0%"
