import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))

from calc.scenario_comparison import compare, difference


def test_difference_directions():
    assert difference(100, 110)['direction'] == 'better'
    assert difference(100, 90)['direction'] == 'worse'
    # Lower taxes are better
    assert difference(100, 90, inverse=True)['direction'] == 'better'
    assert difference(100, 100.004)['direction'] == 'same'


def test_difference_percent():
    diff = difference(200, 250)
    assert diff['difference'] == pytest.approx(50)
    assert diff['percent'] == pytest.approx(25)
    assert difference(0, 10)['percent'] == 0.0


def test_compare_scenarios(make_result):
    current = make_result()
    lower_tax = make_result(federal=150.0)
    result = compare('current', current, 'biweekly', 'offer', lower_tax, 'monthly')

    assert result['netPayDifference'] == pytest.approx(50.0)
    assert result['taxDifference'] == pytest.approx(-50.0)
    assert result['scenarioA']['periodsPerYear'] == 26
    assert result['scenarioB']['periodsPerYear'] == 12
    assert result['yearlyNetDifference'] == pytest.approx(lower_tax.net_pay * 12 - current.net_pay * 26)

    rows = {row['category']: row for row in result['rows']}
    assert list(rows) == ['Gross Pay', 'Pre-Tax Ded.', 'Total Taxes', 'Post-Tax Ded.', 'Net Pay']
    assert rows['Total Taxes']['direction'] == 'better'
    assert rows['Net Pay']['direction'] == 'better'
    assert rows['Gross Pay']['direction'] == 'same'
    assert rows['Net Pay']['a'] == pytest.approx(current.net_pay)
    assert rows['Net Pay']['b'] == pytest.approx(lower_tax.net_pay)


def test_compare_keeps_columns_for_colliding_names(make_result):
    current = make_result()
    raise_ = make_result(gross_pay=2500.0)

    same = compare('offer', current, 'biweekly', 'offer', raise_, 'biweekly')
    net = same['rows'][-1]
    assert net['a'] == pytest.approx(current.net_pay)
    assert net['b'] == pytest.approx(raise_.net_pay)
    assert same['scenarioA']['name'] == 'offer'
    assert same['scenarioB']['name'] == 'offer'

    named = compare('category', current, 'biweekly', 'difference', raise_, 'biweekly')
    gross = named['rows'][0]
    assert gross['category'] == 'Gross Pay'
    assert gross['difference'] == pytest.approx(500.0)
