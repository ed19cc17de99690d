"""Tests for salary normalisation across pay frequencies."""

import math

import pytest

from nearsearch.core.schemas import CompensationRange, SalaryFrequency
from nearsearch.pipeline.salary import (
    DAYS_PER_YEAR,
    HOURS_PER_YEAR,
    annual_bounds,
    convert_salary,
    format_salary_display,
    from_annual,
    is_reasonable_salary,
    ranges_overlap,
    salary_range_guide,
    to_annual,
)

H = SalaryFrequency.HOURLY
D = SalaryFrequency.DAILY
W = SalaryFrequency.WEEKLY
M = SalaryFrequency.MONTHLY
Y = SalaryFrequency.YEARLY


def _range(minimum: float | None = None, maximum: float | None = None, frequency: SalaryFrequency = Y) -> CompensationRange:
    return CompensationRange(minimum=minimum, maximum=maximum, frequency=frequency)


class TestConstants:
    def test_working_year(self) -> None:
        assert HOURS_PER_YEAR == 2080
        assert DAYS_PER_YEAR == 260


class TestToAnnual:
    def test_each_frequency(self) -> None:
        assert to_annual(15, H) == 31200
        assert to_annual(200, D) == 52000
        assert to_annual(1000, W) == 52000
        assert to_annual(4000, M) == 48000
        assert to_annual(35000, Y) == 35000

    def test_zero(self) -> None:
        for f in SalaryFrequency:
            assert to_annual(0, f) == 0


class TestFromAnnual:
    def test_each_frequency(self) -> None:
        assert from_annual(31200, H) == 15.0
        assert from_annual(52000, D) == 200.0
        assert from_annual(52000, W) == 1000.0
        assert from_annual(48000, M) == 4000.0
        assert from_annual(35000, Y) == 35000

    def test_rounds_to_two_decimals(self) -> None:
        assert from_annual(50000, H) == 24.04
        assert from_annual(100000, M) == 8333.33

    def test_round_trip(self) -> None:
        for f in SalaryFrequency:
            for x in (0.0, 1.0, 15.0, 23.5, 412.37, 1234.56, 31200.0):
                assert from_annual(to_annual(x, f), f) == pytest.approx(x, abs=0.005)


class TestConvertSalary:
    def test_same_frequency_unchanged(self) -> None:
        assert convert_salary(12.345, H, H) == 12.345

    def test_hourly_to_daily(self) -> None:
        assert convert_salary(15, H, D) == 120.0

    def test_yearly_to_monthly(self) -> None:
        assert convert_salary(36000, Y, M) == 3000.0


class TestAnnualBounds:
    def test_missing_bounds_are_infinite(self) -> None:
        assert annual_bounds(_range()) == (-math.inf, math.inf)

    def test_converted(self) -> None:
        assert annual_bounds(_range(10, 20, H)) == (20800, 41600)


class TestRangesOverlap:
    def test_hourly_entity_matches_yearly_minimum(self) -> None:
        query = _range(minimum=30000)
        entity = _range(minimum=15, frequency=H)
        assert ranges_overlap(query, entity) is True

    def test_entity_ceiling_below_query_floor(self) -> None:
        query = _range(minimum=30000)
        entity = _range(minimum=10, maximum=14, frequency=H)  # max 29,120/yr
        assert ranges_overlap(query, entity) is False

    def test_entity_floor_above_query_ceiling(self) -> None:
        query = _range(maximum=40000)
        entity = _range(minimum=4000, frequency=M)  # 48,000/yr
        assert ranges_overlap(query, entity) is False

    def test_touching_ranges_overlap(self) -> None:
        query = _range(minimum=52000, maximum=60000)
        entity = _range(minimum=150, maximum=200, frequency=D)  # up to 52,000/yr
        assert ranges_overlap(query, entity) is True

    def test_entity_without_ceiling(self) -> None:
        query = _range(minimum=90000, maximum=100000)
        entity = _range(minimum=20, frequency=H)
        assert ranges_overlap(query, entity) is True

    def test_entity_without_floor(self) -> None:
        query = _range(minimum=10000, maximum=20000)
        entity = _range(maximum=1000, frequency=W)
        assert ranges_overlap(query, entity) is True

    def test_unbounded_query_matches_everything(self) -> None:
        assert ranges_overlap(_range(), _range(1, 2, H)) is True

    def test_symmetric_in_arguments(self) -> None:
        a = _range(20, 30, H)
        b = _range(40000, 50000, Y)
        assert ranges_overlap(a, b) == ranges_overlap(b, a)


class TestDisplayHelpers:
    def test_format_range(self) -> None:
        assert format_salary_display(25000, 30000, Y) == "£25,000 - £30,000 per year"

    def test_format_single_value(self) -> None:
        assert format_salary_display(15, 15, H) == "£15 per hour"

    def test_format_decimals_and_currency(self) -> None:
        assert format_salary_display(24.04, 24.04, H, currency="$") == "$24.04 per hour"

    def test_range_guide(self) -> None:
        low, high, typical = salary_range_guide(D)
        assert (low, high) == (80, 800)
        assert typical == (120, 200, 280, 400)

    def test_reasonable_salary(self) -> None:
        assert is_reasonable_salary(15, H) is True
        assert is_reasonable_salary(500, H) is False
        assert is_reasonable_salary(35000, Y) is True
