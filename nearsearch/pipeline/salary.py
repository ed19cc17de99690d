"""Salary normalisation across pay frequencies.

Everything is compared on an annual basis. Internal comparisons use unrounded
values; only ``from_annual`` and the display helpers round.
"""

import math

from nearsearch.core.schemas import CompensationRange, SalaryFrequency

WORKING_HOURS_PER_DAY = 8
WORKING_DAYS_PER_WEEK = 5
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12

HOURS_PER_YEAR = WORKING_HOURS_PER_DAY * WORKING_DAYS_PER_WEEK * WEEKS_PER_YEAR  # 2080
DAYS_PER_YEAR = WORKING_DAYS_PER_WEEK * WEEKS_PER_YEAR  # 260

ANNUAL_FACTORS: dict[SalaryFrequency, int] = {
    SalaryFrequency.HOURLY: HOURS_PER_YEAR,
    SalaryFrequency.DAILY: DAYS_PER_YEAR,
    SalaryFrequency.WEEKLY: WEEKS_PER_YEAR,
    SalaryFrequency.MONTHLY: MONTHS_PER_YEAR,
    SalaryFrequency.YEARLY: 1,
}

# (min, max, typical steps) per frequency, for form hints and sanity checks.
SALARY_RANGE_GUIDES: dict[SalaryFrequency, tuple[float, float, tuple[float, ...]]] = {
    SalaryFrequency.HOURLY: (10, 100, (15, 25, 35, 50)),
    SalaryFrequency.DAILY: (80, 800, (120, 200, 280, 400)),
    SalaryFrequency.WEEKLY: (400, 4000, (600, 1000, 1400, 2000)),
    SalaryFrequency.MONTHLY: (1600, 16000, (2400, 4000, 5600, 8000)),
    SalaryFrequency.YEARLY: (20000, 200000, (30000, 50000, 70000, 100000)),
}

_DISPLAY_LABELS = {
    SalaryFrequency.HOURLY: "per hour",
    SalaryFrequency.DAILY: "per day",
    SalaryFrequency.WEEKLY: "per week",
    SalaryFrequency.MONTHLY: "per month",
    SalaryFrequency.YEARLY: "per year",
}


def to_annual(amount: float, frequency: SalaryFrequency) -> float:
    """Annual equivalent of ``amount`` paid at ``frequency``."""
    return amount * ANNUAL_FACTORS[frequency]


def from_annual(annual_amount: float, frequency: SalaryFrequency) -> float:
    """Amount per ``frequency`` for an annual figure, rounded to 2 decimals for display."""
    return round(annual_amount / ANNUAL_FACTORS[frequency], 2)


def convert_salary(
    amount: float,
    from_frequency: SalaryFrequency,
    to_frequency: SalaryFrequency,
) -> float:
    """Convert between two frequencies via the annual basis."""
    if from_frequency == to_frequency:
        return amount
    return from_annual(to_annual(amount, from_frequency), to_frequency)


def annual_bounds(compensation: CompensationRange) -> tuple[float, float]:
    """Annualised (min, max); missing bounds become -inf / +inf."""
    low = (
        to_annual(compensation.minimum, compensation.frequency)
        if compensation.minimum is not None
        else -math.inf
    )
    high = (
        to_annual(compensation.maximum, compensation.frequency)
        if compensation.maximum is not None
        else math.inf
    )
    return low, high


def ranges_overlap(query_range: CompensationRange, entity_range: CompensationRange) -> bool:
    """True when the two ranges share any annualised amount.

    An entity that only states a minimum is assumed to have no ceiling, and
    vice versa.
    """
    query_min, query_max = annual_bounds(query_range)
    entity_min, entity_max = annual_bounds(entity_range)
    return query_min <= entity_max and query_max >= entity_min


def salary_range_guide(frequency: SalaryFrequency) -> tuple[float, float, tuple[float, ...]]:
    return SALARY_RANGE_GUIDES[frequency]


def is_reasonable_salary(amount: float, frequency: SalaryFrequency) -> bool:
    low, high, _ = SALARY_RANGE_GUIDES[frequency]
    return low <= amount <= high


def format_salary_display(
    minimum: float,
    maximum: float,
    frequency: SalaryFrequency,
    currency: str = "£",
) -> str:
    """Human-readable range, e.g. ``£25,000 - £30,000 per year``."""
    label = _DISPLAY_LABELS[frequency]
    if minimum == maximum:
        return f"{currency}{_format_amount(minimum)} {label}"
    return f"{currency}{_format_amount(minimum)} - {currency}{_format_amount(maximum)} {label}"


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"
