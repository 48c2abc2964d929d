from calc.pay_schedule import pay_periods_per_year
from model.PaycheckResult import PaycheckResult

SAME_THRESHOLD = 0.01

ROWS = (
    ('Gross Pay', 'gross_pay', False),
    ('Pre-Tax Ded.', 'pre_tax_deductions', True),
    ('Total Taxes', 'total_taxes', True),
    ('Post-Tax Ded.', 'post_tax_deductions', True),
    ('Net Pay', 'net_pay', False),
)


def difference(value_a: float, value_b: float, inverse: bool = False) -> dict:
    """Difference of B relative to A.

    `inverse` marks rows where a decrease is the favourable direction (taxes,
    deductions). Differences under one cent are reported as 'same'.
    """
    diff = value_b - value_a
    percent = diff / value_a * 100 if value_a != 0 else 0.0
    if abs(diff) < SAME_THRESHOLD:
        direction = 'same'
    elif (diff < 0) if inverse else (diff > 0):
        direction = 'better'
    else:
        direction = 'worse'
    return {'difference': diff, 'percent': percent, 'direction': direction}


def yearly(result: PaycheckResult, periods: int) -> dict:
    return {
        'gross': result.gross_pay * periods,
        'preTax': result.pre_tax_deductions * periods,
        'taxes': result.total_taxes * periods,
        'postTax': result.post_tax_deductions * periods,
        'net': result.net_pay * periods,
    }


def compare(name_a: str, result_a: PaycheckResult, frequency_a: str,
            name_b: str, result_b: PaycheckResult, frequency_b: str) -> dict:
    """Side-by-side comparison of two paycheck scenarios, per paycheck and per year.

    Row values are keyed 'a' and 'b'; the names are carried in scenarioA and scenarioB.
    """
    periods_a = pay_periods_per_year(frequency_a)
    periods_b = pay_periods_per_year(frequency_b)
    yearly_a = yearly(result_a, periods_a)
    yearly_b = yearly(result_b, periods_b)

    rows = []
    for label, attr, inverse in ROWS:
        a = getattr(result_a, attr)
        b = getattr(result_b, attr)
        rows.append({'category': label, 'a': a, 'b': b, **difference(a, b, inverse)})

    return {
        'scenarioA': {'name': name_a, 'periodsPerYear': periods_a, 'yearly': yearly_a},
        'scenarioB': {'name': name_b, 'periodsPerYear': periods_b, 'yearly': yearly_b},
        'rows': rows,
        'netPayDifference': result_b.net_pay - result_a.net_pay,
        'yearlyNetDifference': yearly_b['net'] - yearly_a['net'],
        'taxDifference': result_b.total_taxes - result_a.total_taxes,
        'yearlyTaxDifference': yearly_b['taxes'] - yearly_a['taxes'],
    }
