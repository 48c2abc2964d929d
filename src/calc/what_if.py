"""Marginal-rate what-if projection.

Given an already computed PaycheckResult, estimates how changing a single
contribution (as a percent of gross pay) moves take-home pay. The federal
marginal rate comes from a fixed 2024 single-filer ladder and the state
marginal rate is approximated from the effective state rate of the paycheck.
Everything here is a pure function of its inputs.
"""

from typing import Any, Iterable, List, Optional, Tuple

from calc.employer_match import MatchPolicy
from calc.pay_schedule import pay_periods_per_year, parse_number
from model.PaycheckResult import PaycheckResult
from model.WhatIfResult import AdjustableVariable, WhatIfResult

ADJUSTABLE_VARIABLES: List[AdjustableVariable] = [
    AdjustableVariable('401k', '401(k) Contribution', 'pretax', 23, True,
                       'Traditional 401(k) deferral; reduces federal and state taxable income'),
    AdjustableVariable('hsa', 'HSA Contribution', 'pretax', 8, False,
                       'Health savings account payroll contribution'),
    AdjustableVariable('fsa', 'FSA Contribution', 'pretax', 5, False,
                       'Flexible spending account election'),
    AdjustableVariable('health_premium', 'Health Insurance Premium', 'pretax', 15, False,
                       'Section 125 medical, dental and vision premiums'),
    AdjustableVariable('commuter', 'Commuter Benefits', 'pretax', 5, False,
                       'Pre-tax transit and parking'),
    AdjustableVariable('roth_401k', 'Roth 401(k)', 'posttax', 23, True,
                       'After-tax Roth deferral; no current tax effect'),
    AdjustableVariable('student_loan', 'Student Loan Payment', 'posttax', 20, False,
                       'Payroll-deducted student loan repayment'),
]

# 2024 single-filer ceilings (inclusive) and rates
FEDERAL_MARGINAL_LADDER = [
    (11600, 0.10),
    (47150, 0.12),
    (100525, 0.22),
    (191950, 0.24),
    (243725, 0.32),
    (609350, 0.35),
]
TOP_FEDERAL_MARGINAL_RATE = 0.37

DEFAULT_EFFECTIVE_STATE_RATE = 0.05
STATE_MARGINAL_MULTIPLIER = 1.2
STATE_MARGINAL_CAP = 0.13
# The state effective rate is annualized over 26 periods whatever the frequency
STATE_ANNUALIZATION_PERIODS = 26


def get_variable(variable_id: str) -> AdjustableVariable:
    for variable in ADJUSTABLE_VARIABLES:
        if variable.id == variable_id:
            return variable
    valid = ', '.join(v.id for v in ADJUSTABLE_VARIABLES)
    raise ValueError(f"Unknown variable '{variable_id}'. Valid variables: {valid}")


def what_if_options(spec: dict, variable: Optional[str] = None, percent: Any = None,
                    baseline: Any = None) -> Tuple[AdjustableVariable, Any, Any]:
    """Fill missing what-if options from the program's 'whatIf' block.

    The block's baselinePercent is the current contribution of its own
    variable, so it only applies when that variable is the one requested.
    Other variables start from 0.
    """
    defaults = spec.get('whatIf') or {}
    default_id = defaults.get('variable', '401k')
    adjustable = get_variable(variable or default_id)
    if percent is None:
        percent = defaults.get('adjustmentPercent', 6)
    if baseline is None:
        baseline = defaults.get('baselinePercent', 0) if adjustable.id == default_id else 0
    return adjustable, percent, baseline


def federal_marginal_rate(annual_taxable_income: float) -> float:
    for ceiling, rate in FEDERAL_MARGINAL_LADDER:
        if annual_taxable_income <= ceiling:
            return rate
    return TOP_FEDERAL_MARGINAL_RATE


def state_marginal_rate(state_tax: float, annual_taxable_income: float) -> float:
    if annual_taxable_income > 0:
        effective = state_tax * STATE_ANNUALIZATION_PERIODS / annual_taxable_income
    else:
        effective = DEFAULT_EFFECTIVE_STATE_RATE
    return min(effective * STATE_MARGINAL_MULTIPLIER, STATE_MARGINAL_CAP)


def clamp_percent(value: Any, variable: AdjustableVariable) -> float:
    """Parse a percent and clamp it into [0, variable.max_percent]."""
    percent = parse_number(value, 0.0)
    return max(0.0, min(percent, float(variable.max_percent)))


def project_what_if(result: PaycheckResult, gross_pay: float, pay_frequency: str,
                    adjustment_percent: Any, variable: AdjustableVariable,
                    match_policy: Optional[MatchPolicy] = None,
                    baseline_percent: Any = 0) -> WhatIfResult:
    """Project the paycheck impact of contributing adjustment_percent of gross pay.

    Args:
        result: The current paycheck breakdown.
        gross_pay: Gross pay per paycheck.
        pay_frequency: weekly, biweekly, semimonthly or monthly.
        adjustment_percent: Proposed contribution percent; clamped to the
            variable's range, malformed values count as 0.
        variable: Catalog entry being adjusted.
        match_policy: Employer match policy; only used for variables with a match.
        baseline_percent: Contribution percent already reflected in result.
            With the default of 0 the whole adjustment is treated as new.

    Returns:
        WhatIfResult with marginal rates, tax savings, net cost and new net pay.
    """
    periods = pay_periods_per_year(pay_frequency)
    percent = clamp_percent(adjustment_percent, variable)
    baseline = clamp_percent(baseline_percent, variable)

    adjustment_amount = gross_pay * percent / 100
    annual_adjustment = adjustment_amount * periods
    change = adjustment_amount - gross_pay * baseline / 100

    annual_taxable_income = result.taxable_income * periods
    federal_marginal = federal_marginal_rate(annual_taxable_income)
    state_marginal = state_marginal_rate(result.taxes.state_tax, annual_taxable_income)
    combined = federal_marginal + state_marginal

    if variable.is_pretax:
        tax_savings = change * combined
        net_cost = change - tax_savings
        effective_cost = (1 - combined) * 100
    else:
        tax_savings = 0.0
        net_cost = change
        effective_cost = 100.0
    if change != 0:
        effective_cost = net_cost / change * 100
    new_net_pay = result.net_pay - net_cost

    employer_match = 0.0
    if variable.has_employer_match and match_policy is not None and match_policy.enabled:
        matchable = gross_pay * min(percent, match_policy.match_up_to_percent) / 100
        employer_match = matchable * match_policy.match_rate / 100

    return WhatIfResult(
        variable_id=variable.id,
        adjustment_percent=percent,
        baseline_percent=baseline,
        adjustment_amount=adjustment_amount,
        annual_adjustment=annual_adjustment,
        change_amount=change,
        federal_marginal_rate=federal_marginal,
        state_marginal_rate=state_marginal,
        combined_marginal_rate=combined,
        tax_savings_per_paycheck=tax_savings,
        tax_savings_per_year=tax_savings * periods,
        net_cost_per_paycheck=net_cost,
        new_net_pay=new_net_pay,
        net_pay_difference=new_net_pay - result.net_pay,
        effective_cost_percent=effective_cost,
        employer_match_per_paycheck=employer_match,
        employer_match_per_year=employer_match * periods,
        periods_per_year=periods,
    )


def sweep(result: PaycheckResult, gross_pay: float, pay_frequency: str,
          variable: AdjustableVariable, percents: Optional[Iterable[float]] = None,
          match_policy: Optional[MatchPolicy] = None, baseline_percent: Any = 0) -> List[WhatIfResult]:
    """Run project_what_if across a range of percents (0..max in whole steps by default)."""
    if percents is None:
        percents = range(0, int(variable.max_percent) + 1)
    return [
        project_what_if(result, gross_pay, pay_frequency, p, variable, match_policy, baseline_percent)
        for p in percents
    ]
