import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))

from calc.employer_match import (
    EmployerMatchCalculator, MatchPolicy, is_retirement_deduction, retirement_contribution,
)
from model.PaycheckResult import Deduction


def test_policy_from_spec_defaults():
    policy = MatchPolicy.from_spec({})
    assert policy.enabled is True
    assert policy.base_match_percent == 2.0
    assert policy.match_rate == 50.0
    assert policy.match_up_to_percent == 6.0


def test_policy_from_spec_values(sample_spec):
    sample_spec['employerMatch'] = {'enabled': True, 'baseMatchPercent': 0, 'matchRate': 100, 'matchUpToPercent': 4}
    policy = MatchPolicy.from_spec(sample_spec)
    assert policy.base_match_percent == 0
    assert policy.match_rate == 100
    assert policy.match_up_to_percent == 4


def test_retirement_labels():
    assert is_retirement_deduction('401(k)')
    assert is_retirement_deduction('Roth 401k')
    assert is_retirement_deduction('457b plan')
    assert not is_retirement_deduction('HSA')
    assert not is_retirement_deduction('')


def test_retirement_contribution_sums_matching_lines():
    deductions = [Deduction('401(k)', 'percentage', 5), Deduction('HSA', 'fixed', 100),
                  Deduction('403(b)', 'fixed', 50)]
    assert retirement_contribution(deductions, 2000) == pytest.approx(150.0)


def test_match_capped_at_match_up_to_percent():
    calc = EmployerMatchCalculator(MatchPolicy())
    match = calc.match_for_percent(4000, 10)
    assert match['base'] == pytest.approx(80.0)
    assert match['match'] == pytest.approx(120.0)
    assert match['total'] == pytest.approx(200.0)


def test_disabled_policy_contributes_nothing():
    calc = EmployerMatchCalculator(MatchPolicy(enabled=False))
    assert calc.match_for_percent(4000, 6) == {'base': 0.0, 'match': 0.0, 'total': 0.0}


def test_calculate_annual_totals():
    calc = EmployerMatchCalculator(MatchPolicy())
    pre_tax = [Deduction('401(k)', 'percentage', 6), Deduction('HSA', 'fixed', 100)]
    result = calc.calculate(4000, 'biweekly', pre_tax, [])

    assert result['periodsPerYear'] == 26
    assert result['employeePerPay'] == pytest.approx(240.0)
    assert result['employeeContributionPercent'] == pytest.approx(6.0)
    assert result['annualEmployeeContribution'] == pytest.approx(6240.0)
    assert result['annualEmployerTotal'] == pytest.approx(5200.0)
    assert result['totalRetirementValue'] == pytest.approx(11440.0)
    assert result['freeMoneyPercent'] == pytest.approx(5200 / 6240 * 100)
    assert result['leavingMatchOnTable'] is False


def test_calculate_counts_roth_lines_and_flags_missed_match():
    calc = EmployerMatchCalculator(MatchPolicy())
    post_tax = [Deduction('Roth 401(k)', 'percentage', 3)]
    result = calc.calculate(4000, 'monthly', [], post_tax)

    assert result['rothRetirementPerPay'] == pytest.approx(120.0)
    assert result['employerMatchPerPay'] == pytest.approx(60.0)
    assert result['leavingMatchOnTable'] is True


def test_monthly_accumulation_reaches_annual_total():
    calc = EmployerMatchCalculator(MatchPolicy())
    result = calc.calculate(4000, 'biweekly', [Deduction('401k', 'percentage', 6)], [])
    monthly = result['monthly']
    assert [m['month'] for m in monthly][:3] == ['Jan', 'Feb', 'Mar']
    assert monthly[-1]['employee'] == pytest.approx(result['annualEmployeeContribution'])
    assert monthly[-1]['employer'] == pytest.approx(result['annualEmployerTotal'])


def test_zero_gross_has_no_contribution_percent():
    calc = EmployerMatchCalculator(MatchPolicy())
    result = calc.calculate(0, 'biweekly', [Deduction('401k', 'fixed', 100)], [])
    assert result['employeeContributionPercent'] == 0.0
