"""Tests for MetricSet and Indicator validation."""

from __future__ import annotations

import math

import pydantic
import pytest

from regen_ratio.models.metrics import (
    FACTOR_DEFINITIONS,
    FACTOR_SYMBOLS,
    PRESSURE_SYMBOLS,
    REGENERATIVE_SYMBOLS,
    VALUE_MAX,
    VALUE_MIN,
    Indicator,
    MetricSet,
    clamp_value,
    normalize_symbol,
)


class TestClampValue:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (5, 5.0),
            ("7.5", 7.5),
            (0, VALUE_MIN),
            (-3, VALUE_MIN),
            (11, VALUE_MAX),
            (math.inf, VALUE_MAX),
            (math.nan, VALUE_MIN),
            ("abc", VALUE_MIN),
            (None, VALUE_MIN),
        ],
    )
    def test_clamp(self, raw, expected):
        assert clamp_value(raw) == expected


class TestFactorDefinitions:
    def test_seven_factors_in_order(self):
        assert FACTOR_SYMBOLS == ("L", "I", "F", "E", "X", "Fg", "Omega")

    def test_split(self):
        assert REGENERATIVE_SYMBOLS == ("L", "I", "F", "E")
        assert PRESSURE_SYMBOLS == ("X", "Fg", "Omega")

    def test_every_definition_has_description(self):
        for definition in FACTOR_DEFINITIONS.values():
            assert definition.display_name
            assert definition.description

    @pytest.mark.parametrize("alias", ["Omega", "Ω", "omega"])
    def test_omega_aliases(self, alias):
        assert normalize_symbol(alias) == "Omega"

    def test_unknown_symbol(self):
        with pytest.raises(KeyError):
            normalize_symbol("Z")


class TestMetricSet:
    def test_defaults_to_five(self):
        assert set(MetricSet().by_symbol().values()) == {5.0}

    def test_clamps_on_construction(self):
        metrics = MetricSet(L=0, I=-5, F=20, E="3")
        assert metrics.localized_identity == VALUE_MIN
        assert metrics.interconnection == VALUE_MIN
        assert metrics.feedback == VALUE_MAX
        assert metrics.evolutionary_capacity == 3.0

    def test_populate_by_field_name(self):
        assert MetricSet(extractive_pressure=2).get("X") == 2.0

    def test_frozen(self):
        metrics = MetricSet()
        with pytest.raises(pydantic.ValidationError):
            metrics.localized_identity = 1.0

    def test_with_factor_returns_clamped_copy(self):
        original = MetricSet()
        updated = original.with_factor("Fg", 42)
        assert updated.fragmentation == VALUE_MAX
        assert original.fragmentation == 5.0

    def test_serializes_with_symbols(self):
        dumped = MetricSet.uniform(2.0).model_dump(by_alias=True)
        assert list(dumped) == list(FACTOR_SYMBOLS)

    def test_round_trip_through_aliases(self):
        metrics = MetricSet(L=1, I=2, F=3, E=4, X=6, Fg=7, Omega=8)
        assert MetricSet.model_validate(metrics.model_dump(by_alias=True)) == metrics


class TestIndicator:
    def test_blank_name_defaults_from_id(self):
        assert Indicator(id=4).name == "Indicator 4"
        assert Indicator(id=4, name="   ").name == "Indicator 4"

    def test_value_clamped(self):
        assert Indicator(id=1, value=50).value == VALUE_MAX
        assert Indicator(id=1, value=math.nan).value == VALUE_MIN

    def test_null_comment(self):
        assert Indicator(id=1, comment=None).comment == ""

    def test_id_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            Indicator(id=0)
