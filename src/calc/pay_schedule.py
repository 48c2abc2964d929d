"""Pay frequency helpers shared by the paycheck calculators."""

import math
from typing import Any

PAY_PERIODS = {
    'weekly': 52,
    'biweekly': 26,
    'semimonthly': 24,
    'monthly': 12,
}

DEFAULT_PAY_PERIODS = 26


def pay_periods_per_year(frequency: str) -> int:
    """Number of paychecks per year; unknown frequencies are treated as biweekly."""
    if not isinstance(frequency, str):
        return DEFAULT_PAY_PERIODS
    return PAY_PERIODS.get(frequency.lower(), DEFAULT_PAY_PERIODS)


def parse_number(value: Any, default: float = 0.0) -> float:
    """Parse a user-entered number, returning default when it is malformed.

    Accepts ints, floats and strings such as "$1,200.50" or "6%". None, empty
    strings, booleans, NaN and infinities yield the default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace('$', '').replace(',', '').replace('%', '')
        if not cleaned:
            return default
        try:
            number = float(cleaned)
        except ValueError:
            return default
    else:
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number
