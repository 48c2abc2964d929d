"""Tests for the MCP server tools module."""

import os
import sys
import json
import pytest
from unittest.mock import MagicMock

# Add src and mcp-server to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src')))
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server')))

from tools import MultiProgramTools, PaycheckPlannerTools
from calc.plan_calculator import PlanCalculator
from services.trade_plan import TradePlanError, TradePlanService
from services.webhook import BacktestStore, TradingViewWebhook


@pytest.fixture
def base_path(input_dir):
    return os.path.dirname(input_dir)


@pytest.fixture
def multi_tools(base_path):
    return MultiProgramTools(base_path)


@pytest.fixture
def tools(sample_spec):
    return PaycheckPlannerTools(PlanCalculator().calculate(sample_spec, 'sample'))


class TestPaycheckPlannerTools:
    """Tests for the single-program tools."""

    def test_calculate_paycheck(self, tools):
        result = tools.calculate_paycheck()
        assert result['tax_year'] == 2025
        assert result['periods_per_year'] == 26
        assert result['grossPay'] == 4000.0
        assert result['taxes']['stateName'] == 'California'
        assert result['netPay'] == pytest.approx(result['breakdown']['net'])

    def test_what_if_defaults_from_program(self, tools):
        result = tools.what_if()
        assert result['variable']['id'] == '401k'
        assert result['result']['adjustment_percent'] == 10
        assert result['result']['baseline_percent'] == 6
        assert result['current_net_pay'] == tools.plan.result.net_pay
        assert 'sweep' not in result

    def test_what_if_other_variable_starts_from_zero(self, tools):
        for variable in ('hsa', 'roth_401k'):
            result = tools.what_if(variable, 0)['result']
            assert result['baseline_percent'] == 0
            assert result['new_net_pay'] == pytest.approx(tools.plan.result.net_pay)
            assert result['net_pay_difference'] == 0

    def test_what_if_program_variable_at_baseline(self, tools):
        result = tools.what_if('401k', 6)['result']
        assert result['new_net_pay'] == pytest.approx(tools.plan.result.net_pay)

    def test_what_if_with_sweep(self, tools):
        result = tools.what_if('fsa', 2, include_sweep=True)
        assert result['variable']['id'] == 'fsa'
        assert len(result['sweep']) == 6

    def test_what_if_unknown_variable(self, tools):
        with pytest.raises(ValueError, match="Unknown variable"):
            tools.what_if('crypto', 5)

    def test_employer_match(self, tools):
        assert tools.employer_match()['annualEmployerTotal'] == pytest.approx(5200.0)

    def test_fire_projection(self, tools):
        assert tools.fire_projection()['fireNumber'] == pytest.approx(1_000_000)

    def test_paycheck_waterfall(self, tools):
        result = tools.paycheck_waterfall()
        assert result['steps'][0]['label'] == 'Gross Pay'
        assert result['steps'][-1]['remaining'] == pytest.approx(result['net_pay'])

    def test_yearly_projection(self, tools):
        assert tools.yearly_projection()['grossIncome'] == pytest.approx(104000.0)

    def test_rmd_projection(self, tools):
        assert tools.rmd_projection()['currentRmd'] == pytest.approx(500000 / 24.6)

    def test_real_estate(self, tools):
        assert tools.real_estate_investment()['downPayment'] == pytest.approx(60000)
        assert tools.mortgage_amortization()['loanAmount'] == pytest.approx(240000)

    def test_rent_vs_buy(self, tools):
        result = tools.rent_vs_buy()
        assert len(result['years']) == 10
        assert result['years'][0]['totalRentPaid'] == pytest.approx(2500 * 12)

    def test_affordability_defaults_to_annual_gross(self, tools):
        assert tools.affordability()['annualIncome'] == pytest.approx(104000.0)
        assert tools.affordability(20000)['withinBudget'] is False


class TestMultiProgramTools:
    """Tests for MultiProgramTools class."""

    def test_discovers_programs(self, multi_tools):
        assert sorted(multi_tools.programs) == ['sample', 'texas']
        assert multi_tools.default_program == 'sample'

    def test_explicit_default_program(self, base_path):
        assert MultiProgramTools(base_path, 'texas').default_program == 'texas'

    def test_invalid_program_skipped(self, base_path, input_dir):
        bad = os.path.join(input_dir, 'bad')
        os.makedirs(bad)
        with open(os.path.join(bad, 'spec.json'), 'w') as f:
            json.dump({'grossPay': -1, 'zipCode': '94105'}, f)
        assert 'bad' not in MultiProgramTools(base_path).programs

    def test_list_programs(self, multi_tools):
        result = multi_tools.list_programs()
        assert result['available_programs'] == ['sample', 'texas']
        assert result['programs_info']['texas']['gross_pay'] == 3000.0

    def test_per_program_results_include_program(self, multi_tools):
        assert multi_tools.calculate_paycheck()['program'] == 'sample'
        assert multi_tools.calculate_paycheck('texas')['program'] == 'texas'
        assert multi_tools.employer_match('texas')['program'] == 'texas'

    def test_unknown_program(self, multi_tools):
        with pytest.raises(ValueError, match="Program 'nope' not found"):
            multi_tools.calculate_paycheck('nope')

    def test_list_adjustable_variables(self, multi_tools):
        ids = [v['id'] for v in multi_tools.list_adjustable_variables()['variables']]
        assert ids[0] == '401k'
        assert 'roth_401k' in ids

    def test_reload_programs_reports_changes(self, multi_tools, input_dir, sample_spec):
        os.makedirs(os.path.join(input_dir, 'offer'))
        with open(os.path.join(input_dir, 'offer', 'spec.json'), 'w') as f:
            json.dump(dict(sample_spec, grossPay=5000.0), f)
        os.remove(os.path.join(input_dir, 'texas', 'spec.json'))

        result = multi_tools.reload_programs()
        assert result['status'] == 'success'
        assert result['changes'] == {'added': ['offer'], 'removed': ['texas'], 'reloaded': ['sample']}
        assert result['default_program'] == 'sample'

    def test_reload_resets_missing_default(self, base_path, input_dir):
        multi_tools = MultiProgramTools(base_path, 'texas')
        os.remove(os.path.join(input_dir, 'texas', 'spec.json'))
        assert multi_tools.reload_programs()['default_program'] == 'sample'

    def test_compare_programs(self, multi_tools):
        result = multi_tools.compare_programs('sample', 'texas')
        assert result['scenarioA']['name'] == 'sample'
        assert result['scenarioB']['name'] == 'texas'
        assert 'more per year' in result['summary']

    def test_compare_programs_errors(self, multi_tools):
        assert 'not found' in multi_tools.compare_programs('sample', 'nope')['error']
        assert 'different programs' in multi_tools.compare_programs('sample', 'sample')['error']

    def test_tradingview_webhook(self, base_path, tmp_path):
        webhook = TradingViewWebhook(store=BacktestStore(str(tmp_path / 'rows.json')), rng=lambda: 0.5)
        multi_tools = MultiProgramTools(base_path, webhook=webhook)

        assert multi_tools.tradingview_webhook({'symbol': 'spy', 'action': 'buy'})['status'] == 200
        assert multi_tools.tradingview_webhook({'symbol': 'spy'})['status'] == 400

    def test_refresh_price(self, base_path):
        trade_plans = MagicMock()
        trade_plans.refresh_price.return_value = {'price': 512.3}
        multi_tools = MultiProgramTools(base_path, trade_plans=trade_plans)

        assert multi_tools.refresh_price('spy') == {'ticker': 'SPY', 'price': 512.3}
        trade_plans.refresh_price.assert_called_once_with('SPY')

    def test_refresh_price_invalid_ticker(self, base_path):
        multi_tools = MultiProgramTools(base_path, trade_plans=MagicMock())
        with pytest.raises(TradePlanError):
            multi_tools.refresh_price('not valid')

    def test_generate_trade_plan_relays_status_and_body(self, base_path):
        trade_plans = MagicMock()
        trade_plans.handle.return_value = (200, {'entryPrice': 510.0, 'stopLoss': 495.0})
        multi_tools = MultiProgramTools(base_path, trade_plans=trade_plans)

        result = multi_tools.generate_trade_plan('spy', portfolio_size=50000, risk_percent=2)
        assert result == {'status': 200, 'entryPrice': 510.0, 'stopLoss': 495.0}
        payload = trade_plans.handle.call_args.args[0]
        assert payload == {'ticker': 'spy', 'action': None, 'portfolioSize': 50000, 'riskPercent': 2}
        assert trade_plans.handle.call_args.kwargs['authorization']

    def test_generate_trade_plan_validation_error(self, base_path):
        service = TradePlanService(market=MagicMock(api_key='finnhub'), gateway=MagicMock(api_key='gateway'))
        multi_tools = MultiProgramTools(base_path, trade_plans=service)

        result = multi_tools.generate_trade_plan('not valid')
        assert result['status'] == 400
        assert 'Invalid ticker' in result['error']

    def test_portfolio_returns(self, base_path, tmp_path):
        path = tmp_path / 'trades.json'
        multi_tools = MultiProgramTools(base_path, trades_path=str(path))
        assert multi_tools.portfolio_returns()['hasRealData'] is False

        path.write_text(json.dumps({'stockTrades': [
            {'symbol': 'AAA', 'entry_price': 100, 'exit_price': 110, 'quantity': 10, 'exit_date': '2025-01-02'},
        ]}))
        result = multi_tools.portfolio_returns(risk_free_rate=0.0)
        assert result['totalPnL'] == pytest.approx(100.0)
        assert result['winRate'] == pytest.approx(100.0)
