"""Tests for the console renderers."""

import json
import re

import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from calc.plan_calculator import PlanCalculator
from render.renderers import (
    BracketsRenderer,
    CompareRenderer,
    EmployerMatchRenderer,
    FireRenderer,
    PaycheckRenderer,
    PortfolioReturnsRenderer,
    RealEstateRenderer,
    RENDERER_REGISTRY,
    RMDRenderer,
    WaterfallRenderer,
    WhatIfRenderer,
    WhatIfSweepRenderer,
    YearlyProjectionRenderer,
    format_multiline_headers,
)


def amount(output, label):
    """Dollar value printed on the row with the given label."""
    match = re.search(rf'^\s+{re.escape(label)}:\s+\$\s*(-?[\d,]+\.\d\d)', output, re.MULTILINE)
    return float(match.group(1).replace(',', ''))


def sweep_row(output, percent):
    """Numeric columns of the sweep table row for a percent."""
    for line in output.splitlines():
        match = re.match(rf'^\s+{percent}%\s+(.*)$', line)
        if match:
            return [float(v.replace(',', '')) for v in match.group(1).split()]
    raise AssertionError(f"no sweep row for {percent}%")


@pytest.fixture(scope="module")
def calculator():
    return PlanCalculator()


@pytest.fixture
def plan_data(calculator, sample_spec):
    return calculator.calculate(sample_spec, 'sample')


@pytest.fixture
def texas_plan(calculator, sample_spec):
    spec = dict(sample_spec, zipCode='75201', grossPay=3000.0)
    return calculator.calculate(spec, 'texas')


class TestRendererRegistry:
    """Every --mode name maps to a renderer class."""

    def test_modes_registered(self):
        assert set(RENDERER_REGISTRY) == {
            'Paycheck', 'WhatIf', 'EmployerMatch', 'Fire', 'Waterfall',
            'YearlyProjection', 'Brackets', 'Compare', 'RMD', 'RealEstate', 'PortfolioReturns',
        }

    def test_registry_returns_correct_class(self):
        assert RENDERER_REGISTRY['Paycheck'] is PaycheckRenderer
        assert RENDERER_REGISTRY['Brackets'] is BracketsRenderer


class TestFormatMultilineHeaders:
    def test_short_headers_single_line(self):
        lines, sep = format_multiline_headers([("RMD", 8), ("Tax", 8)])
        assert len(lines) == 1
        assert lines[0].startswith("  Year")
        assert sep == "  ------ -------- --------"

    def test_long_header_wraps_and_key_label_on_last_line(self):
        lines, _ = format_multiline_headers([("Distribution Period", 12), ("Tax", 8)], first_label='Age', first_width=5)
        assert len(lines) == 2
        assert 'Age' not in lines[0]
        assert 'Age' in lines[1]


class TestPaycheckRenderer:
    def test_shows_program_and_year(self, plan_data, capsys):
        PaycheckRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "PAYCHECK FOR SAMPLE (2025)" in output
        assert "California 94105" in output

    def test_shows_deduction_lines(self, plan_data, capsys):
        PaycheckRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "401(k) (pre-tax):" in output
        assert "240.00" in output
        assert "Roth IRA (post-tax):" in output

    def test_shows_taxes_and_net(self, plan_data, capsys):
        PaycheckRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "Federal Income Tax:" in output
        assert "Social Security:" in output
        assert f"{plan_data.result.net_pay:,.2f}" in output
        assert "Local Tax" not in output

    def test_local_tax_shown_when_present(self, calculator, sample_spec, capsys):
        plan = calculator.calculate(dict(sample_spec, zipCode='10001'), 'nyc')
        PaycheckRenderer().render(plan)
        assert "Local Tax (New York City)" in capsys.readouterr().out


class TestWhatIfRenderers:
    def test_uses_program_what_if_block(self, plan_data, capsys):
        WhatIfRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "WHAT IF: 401(K) CONTRIBUTION" in output
        assert "Current Contribution:" in output
        assert "Employer Match per Paycheck:" in output

    def test_explicit_options(self, plan_data, capsys):
        WhatIfRenderer('roth_401k', 5).render(plan_data)
        output = capsys.readouterr().out
        assert "WHAT IF: ROTH 401(K)" in output
        assert "Post-tax" in output
        assert "Current Contribution" not in output

    def test_sweep_one_row_per_percent(self, plan_data, capsys):
        WhatIfSweepRenderer('fsa').render(plan_data)
        output = capsys.readouterr().out
        assert "FSA CONTRIBUTION SWEEP" in output
        rows = [line for line in output.splitlines() if re.match(r'^\s+\d+%', line)]
        assert len(rows) == 6

    def test_other_variable_ignores_program_baseline(self, plan_data, capsys):
        WhatIfRenderer('hsa', 0).render(plan_data)
        output = capsys.readouterr().out
        assert "Current Contribution" not in output
        assert amount(output, 'New Net Pay') == amount(output, 'Current Net Pay')
        assert amount(output, 'Net Pay Difference') == 0.0

    def test_program_variable_keeps_program_baseline(self, plan_data, capsys):
        WhatIfRenderer('401k', 6).render(plan_data)
        output = capsys.readouterr().out
        assert amount(output, 'New Net Pay') == pytest.approx(plan_data.result.net_pay, abs=0.01)

    def test_sweep_measures_from_program_baseline(self, plan_data, capsys):
        WhatIfSweepRenderer().render(plan_data)
        row = sweep_row(capsys.readouterr().out, 6)
        assert row[3] == pytest.approx(plan_data.result.net_pay, abs=0.01)

    def test_sweep_other_variable_starts_from_zero(self, plan_data, capsys):
        WhatIfSweepRenderer('hsa').render(plan_data)
        row = sweep_row(capsys.readouterr().out, 0)
        assert row[3] == pytest.approx(plan_data.result.net_pay, abs=0.01)


class TestProjectionRenderers:
    def test_employer_match(self, plan_data, capsys):
        EmployerMatchRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "EMPLOYER MATCH" in output
        assert "50% up to 6%" in output
        assert "11,440.00" in output

    def test_employer_match_disabled(self, plan_data, capsys):
        plan_data.spec['employerMatch'] = {'enabled': False}
        EmployerMatchRenderer().render(plan_data)
        assert "disabled" in capsys.readouterr().out

    def test_fire(self, plan_data, capsys):
        FireRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "FIRE CALCULATOR" in output
        assert "1,000,000.00" in output
        assert "Coast FIRE (by 65)" in output

    def test_waterfall_ends_at_net(self, plan_data, capsys):
        WaterfallRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "PAYCHECK FLOW" in output
        assert "Pre-Tax Deductions" in output
        assert output.strip().splitlines()[-1].endswith(f"{plan_data.result.net_pay:,.2f}")

    def test_yearly_projection(self, plan_data, capsys):
        YearlyProjectionRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "YEARLY PROJECTION (26 PAY PERIODS)" in output
        assert "Annual Gross:" in output
        assert "104,000.00" in output

    def test_brackets_marks_marginal(self, plan_data, capsys):
        BracketsRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "FEDERAL BRACKETS (SINGLE, 2025)" in output
        assert output.count("<- marginal") == 1

    def test_rmd(self, plan_data, capsys):
        RMDRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "REQUIRED MINIMUM DISTRIBUTIONS" in output
        assert f"{500000 / 24.6:,.2f}" in output

    def test_real_estate(self, plan_data, capsys):
        RealEstateRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "REAL ESTATE INVESTMENT" in output
        assert "60,000.00" in output
        assert "10-YEAR PROJECTION" in output

    def test_real_estate_rent_vs_buy_and_affordability(self, plan_data, capsys):
        RealEstateRenderer().render(plan_data)
        output = capsys.readouterr().out
        assert "RENT VS BUY" in output
        assert "comes out ahead." in output
        assert "AFFORDABILITY" in output
        assert amount(output, 'Annual Income') == pytest.approx(104000.0)
        assert "above the maximum" not in output

    def test_real_estate_over_budget(self, plan_data, capsys):
        plan_data.spec['realEstate']['purchasePrice'] = 2_000_000
        RealEstateRenderer().render(plan_data)
        assert "above the maximum for your income" in capsys.readouterr().out


class TestCompareRenderer:
    def test_side_by_side(self, plan_data, texas_plan, capsys):
        CompareRenderer(texas_plan).render(plan_data)
        output = capsys.readouterr().out
        assert "COMPARE: sample vs texas" in output
        assert "Net Pay" in output
        assert "Pay Periods" in output

    def test_same_program_names_disambiguated(self, plan_data, capsys):
        CompareRenderer(plan_data).render(plan_data)
        assert "COMPARE: sample vs sample (2)" in capsys.readouterr().out


class TestPortfolioReturnsRenderer:
    def test_no_trades(self, plan_data, tmp_path, capsys):
        PortfolioReturnsRenderer(str(tmp_path / 'trades.json')).render(plan_data)
        output = capsys.readouterr().out
        assert "PORTFOLIO RETURNS" in output
        assert "No closed trades recorded yet." in output

    def test_statistics(self, plan_data, tmp_path, capsys):
        path = tmp_path / 'trades.json'
        path.write_text(json.dumps({
            'stockTrades': [
                {'symbol': 'AAA', 'entry_price': 100, 'exit_price': 110, 'quantity': 10, 'exit_date': '2025-01-02'},
                {'symbol': 'BBB', 'entry_price': 50, 'exit_price': 45, 'quantity': 20, 'exit_date': '2025-01-03'},
            ],
            'optionTrades': [{'symbol': 'DDD', 'action': 'sell', 'total_value': 200, 'date': '2025-01-06'}],
        }))
        PortfolioReturnsRenderer(str(path)).render(plan_data)
        output = capsys.readouterr().out
        assert amount(output, 'Total P&L') == pytest.approx(200.0)
        assert "Sharpe Ratio:" in output
        assert "Max Drawdown:" in output
