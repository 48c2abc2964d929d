import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.employer_match import MatchPolicy
from calc.what_if import (
    ADJUSTABLE_VARIABLES,
    STATE_MARGINAL_CAP,
    clamp_percent,
    federal_marginal_rate,
    get_variable,
    project_what_if,
    state_marginal_rate,
    sweep,
    what_if_options,
)


@pytest.fixture
def result(make_result):
    # 2000 gross, no deductions: taxable 2000 -> 52,000 a year
    return make_result(gross_pay=2000.0, federal=200.0, state=80.0)


def test_zero_adjustment_changes_nothing(result):
    w = project_what_if(result, 2000.0, 'biweekly', 0, get_variable('401k'))
    assert w.tax_savings_per_paycheck == 0
    assert w.net_cost_per_paycheck == 0
    assert w.new_net_pay == result.net_pay
    assert w.net_pay_difference == 0


def test_six_percent_of_2000_biweekly(result):
    w = project_what_if(result, 2000.0, 'biweekly', 6, get_variable('401k'))
    assert w.adjustment_amount == pytest.approx(120.0)
    assert w.annual_adjustment == pytest.approx(3120.0)
    assert w.periods_per_year == 26


def test_pretax_net_cost_never_exceeds_contribution(result):
    for variable in ADJUSTABLE_VARIABLES:
        if not variable.is_pretax:
            continue
        for percent in range(0, int(variable.max_percent) + 1):
            w = project_what_if(result, 2000.0, 'biweekly', percent, variable)
            assert w.net_cost_per_paycheck <= w.adjustment_amount + 1e-9


def test_posttax_net_cost_equals_contribution(result):
    variable = get_variable('roth_401k')
    w = project_what_if(result, 2000.0, 'biweekly', 10, variable)
    assert w.tax_savings_per_paycheck == 0
    assert w.net_cost_per_paycheck == pytest.approx(w.adjustment_amount)
    assert w.effective_cost_percent == pytest.approx(100.0)


def test_pretax_savings_use_combined_marginal_rate(result):
    w = project_what_if(result, 2000.0, 'biweekly', 10, get_variable('401k'))
    # 52,000 annual taxable -> 22% federal; state 80*26/52000 = 4% effective -> 4.8% marginal
    assert w.federal_marginal_rate == 0.22
    assert w.state_marginal_rate == pytest.approx(0.048)
    assert w.tax_savings_per_paycheck == pytest.approx(200.0 * 0.268)
    assert w.net_cost_per_paycheck == pytest.approx(200.0 * (1 - 0.268))
    assert w.new_net_pay == pytest.approx(result.net_pay - 200.0 * (1 - 0.268))
    assert w.effective_cost_percent == pytest.approx(73.2)


def test_federal_marginal_rate_examples():
    assert federal_marginal_rate(60000) == 0.22
    assert federal_marginal_rate(0) == 0.10
    assert federal_marginal_rate(11600) == 0.10
    assert federal_marginal_rate(11600.01) == 0.12
    assert federal_marginal_rate(1_000_000) == 0.37


def test_federal_marginal_rate_is_non_decreasing():
    incomes = [0, 11600, 11601, 47150, 47151, 100525, 100526, 191950, 191951,
               243725, 243726, 609350, 609351, 5_000_000]
    rates = [federal_marginal_rate(i) for i in incomes]
    assert rates == sorted(rates)


def test_state_marginal_rate_is_capped():
    # 20% effective * 1.2 would be 24%
    assert state_marginal_rate(400.0, 52000.0) == STATE_MARGINAL_CAP


def test_state_marginal_rate_defaults_without_income():
    assert state_marginal_rate(0.0, 0.0) == pytest.approx(0.06)


def test_state_rate_annualized_over_26_for_any_frequency(make_result):
    monthly = make_result(gross_pay=4333.33, federal=400.0, state=100.0)
    w = project_what_if(monthly, 4333.33, 'monthly', 5, get_variable('401k'))
    annual_taxable = 4333.33 * 12
    assert w.state_marginal_rate == pytest.approx(min(100.0 * 26 / annual_taxable * 1.2, 0.13))
    assert w.periods_per_year == 12


def test_percent_is_clamped_to_variable_range(result):
    variable = get_variable('hsa')
    assert clamp_percent(50, variable) == 8
    assert clamp_percent(-5, variable) == 0
    assert clamp_percent('abc', variable) == 0
    assert clamp_percent('6%', variable) == 6
    w = project_what_if(result, 2000.0, 'biweekly', 50, variable)
    assert w.adjustment_percent == 8
    assert w.adjustment_amount == pytest.approx(160.0)


def test_malformed_percent_counts_as_zero(result):
    w = project_what_if(result, 2000.0, 'biweekly', None, get_variable('401k'))
    assert w.adjustment_amount == 0
    assert w.new_net_pay == result.net_pay


def test_baseline_percent_reproduces_current_net_pay(result):
    w = project_what_if(result, 2000.0, 'biweekly', 6, get_variable('401k'), baseline_percent=6)
    assert w.change_amount == 0
    assert w.new_net_pay == result.net_pay
    assert w.effective_cost_percent == pytest.approx((1 - w.combined_marginal_rate) * 100)


def test_baseline_measures_only_the_change(result):
    variable = get_variable('401k')
    w = project_what_if(result, 2000.0, 'biweekly', 10, variable, baseline_percent=6)
    assert w.adjustment_amount == pytest.approx(200.0)
    assert w.change_amount == pytest.approx(80.0)
    assert w.net_cost_per_paycheck == pytest.approx(80.0 * (1 - w.combined_marginal_rate))


def test_lowering_contribution_raises_net_pay(result):
    w = project_what_if(result, 2000.0, 'biweekly', 2, get_variable('401k'), baseline_percent=6)
    assert w.change_amount == pytest.approx(-80.0)
    assert w.new_net_pay > result.net_pay


def test_employer_match_only_for_matched_variables(result):
    policy = MatchPolicy(enabled=True, base_match_percent=2, match_rate=50, match_up_to_percent=6)
    w = project_what_if(result, 2000.0, 'biweekly', 10, get_variable('401k'), policy)
    # 50% of min(10, 6)% of 2000
    assert w.employer_match_per_paycheck == pytest.approx(60.0)
    assert w.employer_match_per_year == pytest.approx(1560.0)

    hsa = project_what_if(result, 2000.0, 'biweekly', 5, get_variable('hsa'), policy)
    assert hsa.employer_match_per_paycheck == 0


def test_disabled_match_policy_gives_no_match(result):
    policy = MatchPolicy(enabled=False)
    w = project_what_if(result, 2000.0, 'biweekly', 6, get_variable('401k'), policy)
    assert w.employer_match_per_paycheck == 0


def test_unknown_variable_raises():
    with pytest.raises(ValueError):
        get_variable('crypto')


def test_sweep_covers_whole_range(result):
    variable = get_variable('fsa')
    rows = sweep(result, 2000.0, 'biweekly', variable)
    assert [r.adjustment_percent for r in rows] == [0, 1, 2, 3, 4, 5]
    costs = [r.net_cost_per_paycheck for r in rows]
    assert costs == sorted(costs)


def test_to_dict_has_all_fields(result):
    data = project_what_if(result, 2000.0, 'biweekly', 6, get_variable('401k')).to_dict()
    assert data['variable_id'] == '401k'
    assert 'new_net_pay' in data
    assert 'effective_cost_percent' in data


def test_options_default_to_program_block():
    spec = {'whatIf': {'variable': 'hsa', 'adjustmentPercent': 4, 'baselinePercent': 2}}
    variable, percent, baseline = what_if_options(spec)
    assert variable.id == 'hsa'
    assert (percent, baseline) == (4, 2)


def test_options_baseline_only_for_program_variable():
    spec = {'whatIf': {'variable': '401k', 'adjustmentPercent': 10, 'baselinePercent': 6}}
    assert what_if_options(spec, '401k')[2] == 6
    assert what_if_options(spec, 'hsa')[2] == 0
    assert what_if_options(spec, 'hsa', baseline=3)[2] == 3
    assert what_if_options({}, None)[0].id == '401k'
