"""Paycheck Planner Tools for MCP Server.

This module provides the tool implementations that wrap the paycheck
calculators and expose their results through MCP.
"""

import logging
import os
import sys
from typing import Dict, List, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from calc.employer_match import EmployerMatchCalculator, MatchPolicy
from calc.fire_calculator import FireCalculator, FireInputs
from calc.plan_calculator import PlanCalculator, list_programs
from calc.portfolio_returns import DEFAULT_RISK_FREE_RATE, load_trades, portfolio_returns
from calc.real_estate import (
    RealEstateInputs, affordability_for, amortization_schedule, investment_analysis, rent_vs_buy_for,
)
from calc.rmd_calculator import RMDCalculator, RetirementInputs
from calc.scenario_comparison import compare
from calc.waterfall import waterfall_steps
from calc.what_if import ADJUSTABLE_VARIABLES, project_what_if, sweep, what_if_options
from model.PlanData import PlanData
from services.trade_plan import TradePlanService, validate_ticker
from services.webhook import TradingViewWebhook

logger = logging.getLogger(__name__)

# The stdio client is the signed-in local user
LOCAL_AUTHORIZATION = 'mcp-stdio'


class PaycheckPlannerTools:
    """Tools that wrap the paycheck calculators for one program."""

    def __init__(self, plan: PlanData):
        self.plan = plan
        self.program_name = plan.program_name

    @property
    def spec(self) -> dict:
        return self.plan.spec

    def calculate_paycheck(self) -> dict:
        """Gross-to-net breakdown for one paycheck."""
        return {
            "tax_year": self.plan.tax_year,
            "pay_frequency": self.plan.request.pay_frequency,
            "periods_per_year": self.plan.periods_per_year,
            "filing_status": self.plan.request.filing_status,
            "zip_code": self.plan.request.zip_code,
            **self.plan.result.to_dict(),
        }

    def what_if(self, variable: Optional[str] = None, percent: Optional[float] = None,
                baseline: Optional[float] = None, include_sweep: bool = False) -> dict:
        """Project a contribution change; missing arguments come from the 'whatIf' block."""
        adjustable, percent, baseline = what_if_options(self.spec, variable, percent, baseline)
        policy = MatchPolicy.from_spec(self.spec)

        result = project_what_if(self.plan.result, self.plan.result.gross_pay, self.plan.request.pay_frequency,
                                 percent, adjustable, policy, baseline)
        response = {
            "variable": adjustable.to_dict(),
            "current_net_pay": self.plan.result.net_pay,
            "result": result.to_dict(),
        }
        if include_sweep:
            response["sweep"] = [
                r.to_dict() for r in sweep(self.plan.result, self.plan.result.gross_pay,
                                           self.plan.request.pay_frequency, adjustable,
                                           match_policy=policy, baseline_percent=baseline)
            ]
        return response

    def employer_match(self) -> dict:
        policy = MatchPolicy.from_spec(self.spec)
        return EmployerMatchCalculator(policy).calculate(
            self.plan.result.gross_pay, self.plan.request.pay_frequency,
            self.plan.request.pre_tax_deductions, self.plan.request.post_tax_deductions)

    def fire_projection(self) -> dict:
        calculator = FireCalculator(FireInputs.from_spec(self.spec), MatchPolicy.from_spec(self.spec))
        return calculator.calculate(
            self.plan.result.gross_pay, self.plan.result.net_pay, self.plan.request.pay_frequency,
            self.plan.request.pre_tax_deductions, self.plan.request.post_tax_deductions)

    def paycheck_waterfall(self) -> dict:
        return {"gross_pay": self.plan.result.gross_pay,
                "net_pay": self.plan.result.net_pay,
                "steps": waterfall_steps(self.plan.result)}

    def yearly_projection(self) -> dict:
        return dict(self.plan.yearly)

    def rmd_projection(self, rmd_calculator: Optional[RMDCalculator] = None) -> dict:
        inputs = RetirementInputs.from_spec(self.spec)
        return (rmd_calculator or RMDCalculator()).calculate(inputs)

    def real_estate_investment(self) -> dict:
        return investment_analysis(RealEstateInputs.from_spec(self.spec))

    def mortgage_amortization(self) -> dict:
        inputs = RealEstateInputs.from_spec(self.spec)
        down_payment = inputs.purchase_price * inputs.down_payment_percent / 100
        return amortization_schedule(inputs.purchase_price, down_payment,
                                     inputs.interest_rate_percent, inputs.loan_term_years)

    def rent_vs_buy(self) -> dict:
        return rent_vs_buy_for(RealEstateInputs.from_spec(self.spec))

    def affordability(self, annual_income: Optional[float] = None) -> dict:
        """Home affordability; income defaults to the program's annual gross pay."""
        if annual_income is None:
            annual_income = self.plan.yearly.get('grossIncome', 0.0)
        return affordability_for(RealEstateInputs.from_spec(self.spec), annual_income)


class MultiProgramTools:
    """Manager for multiple paycheck programs.

    Discovers all available programs and caches their calculations,
    allowing queries to specify which program to use.
    """

    def __init__(self, base_path: str, default_program: Optional[str] = None,
                 calculator: Optional[PlanCalculator] = None,
                 trade_plans: Optional[TradePlanService] = None,
                 webhook: Optional[TradingViewWebhook] = None,
                 trades_path: Optional[str] = None):
        """Initialize and discover all available programs.

        Args:
            base_path: Path to the project root directory
            default_program: Default program to use when none specified
        """
        self.base_path = base_path
        self.input_dir = os.path.join(base_path, 'input-parameters')
        self.calculator = calculator or PlanCalculator()
        self.programs: Dict[str, PaycheckPlannerTools] = {}
        self.default_program = default_program
        self._trade_plans = trade_plans
        self._webhook = webhook
        self.trades_path = trades_path
        self._discover_programs()

    def _discover_programs(self):
        """Discover and load all available programs."""
        for name in list_programs(self.input_dir):
            try:
                plan = self.calculator.load_plan(name, self.input_dir)
            except (OSError, ValueError) as e:
                # Skip programs that fail to load; the rest stay available
                logger.warning("Failed to load program '%s': %s", name, e)
                continue
            self.programs[name] = PaycheckPlannerTools(plan)

        if self.default_program is None and self.programs:
            self.default_program = next(iter(self.programs))

    def _get_program(self, program: Optional[str] = None) -> PaycheckPlannerTools:
        """Get the specified program or the default."""
        program_name = program or self.default_program
        if program_name not in self.programs:
            available = list(self.programs.keys())
            raise ValueError(
                f"Program '{program_name}' not found. Available programs: {available}"
            )
        return self.programs[program_name]

    def _with_program(self, result: dict, program: Optional[str]) -> dict:
        result["program"] = program or self.default_program
        return result

    def list_programs(self) -> dict:
        """List all available programs."""
        programs_info = {}
        for name, tools in self.programs.items():
            programs_info[name] = {
                "tax_year": tools.plan.tax_year,
                "gross_pay": tools.plan.result.gross_pay,
                "pay_frequency": tools.plan.request.pay_frequency,
                "net_pay": tools.plan.result.net_pay,
            }

        return {
            "available_programs": list(self.programs.keys()),
            "default_program": self.default_program,
            "programs_info": programs_info,
        }

    def reload_programs(self) -> dict:
        """Reload all programs from disk, refreshing the cache."""
        old_programs = set(self.programs.keys())

        self.programs.clear()
        self._discover_programs()
        if self.default_program not in self.programs:
            self.default_program = next(iter(self.programs), None)

        new_programs = set(self.programs.keys())
        return {
            "status": "success",
            "message": f"Reloaded {len(self.programs)} programs",
            "programs_loaded": list(self.programs.keys()),
            "default_program": self.default_program,
            "changes": {
                "added": sorted(new_programs - old_programs),
                "removed": sorted(old_programs - new_programs),
                "reloaded": sorted(old_programs & new_programs),
            },
        }

    def calculate_paycheck(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).calculate_paycheck(), program)

    def list_adjustable_variables(self) -> dict:
        return {"variables": [v.to_dict() for v in ADJUSTABLE_VARIABLES]}

    def what_if(self, variable: Optional[str] = None, percent: Optional[float] = None,
                baseline: Optional[float] = None, include_sweep: bool = False,
                program: Optional[str] = None) -> dict:
        result = self._get_program(program).what_if(variable, percent, baseline, include_sweep)
        return self._with_program(result, program)

    def employer_match(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).employer_match(), program)

    def fire_projection(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).fire_projection(), program)

    def paycheck_waterfall(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).paycheck_waterfall(), program)

    def yearly_projection(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).yearly_projection(), program)

    def rmd_projection(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).rmd_projection(), program)

    def real_estate_investment(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).real_estate_investment(), program)

    def mortgage_amortization(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).mortgage_amortization(), program)

    def rent_vs_buy(self, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).rent_vs_buy(), program)

    def affordability(self, annual_income: Optional[float] = None, program: Optional[str] = None) -> dict:
        return self._with_program(self._get_program(program).affordability(annual_income), program)

    def compare_programs(self, program1: str, program2: str) -> dict:
        """Compare the paychecks of two programs side by side."""
        for name in (program1, program2):
            if name not in self.programs:
                return {"error": f"Program '{name}' not found. Available: {list(self.programs.keys())}"}
        if program1 == program2:
            return {"error": "Choose two different programs to compare"}

        plan1 = self.programs[program1].plan
        plan2 = self.programs[program2].plan
        comparison = compare(program1, plan1.result, plan1.request.pay_frequency,
                             program2, plan2.result, plan2.request.pay_frequency)
        net_diff = comparison['yearlyNetDifference']
        if abs(net_diff) < 0.01:
            summary = "Both programs take home the same amount per year."
        else:
            better = program2 if net_diff > 0 else program1
            summary = f"'{better}' takes home ${abs(net_diff):,.2f} more per year."
        comparison["summary"] = summary
        return comparison

    def tradingview_webhook(self, payload: dict) -> dict:
        """Process a TradingView alert payload."""
        if self._webhook is None:
            self._webhook = TradingViewWebhook()
        status, body = self._webhook.handle(payload)
        return {"status": status, **body}

    def refresh_price(self, ticker: str) -> dict:
        """Live quote for a ticker from the market data provider."""
        if self._trade_plans is None:
            self._trade_plans = TradePlanService()
        symbol = validate_ticker(ticker)
        return {"ticker": symbol, **self._trade_plans.refresh_price(symbol)}

    def generate_trade_plan(self, ticker: str, action: Optional[str] = None,
                            portfolio_size: Optional[float] = None,
                            risk_percent: Optional[float] = None) -> dict:
        """AI trade plan (or live price) for a ticker, relayed as status plus body."""
        if self._trade_plans is None:
            self._trade_plans = TradePlanService()
        payload = {
            'ticker': ticker,
            'action': action,
            'portfolioSize': portfolio_size,
            'riskPercent': risk_percent,
        }
        status, body = self._trade_plans.handle(payload, authorization=LOCAL_AUTHORIZATION)
        return {"status": status, **body}

    def portfolio_returns(self, risk_free_rate: Optional[float] = None) -> dict:
        """Return and risk statistics of the closed trades in the trades file."""
        stocks, options = load_trades(self.trades_path)
        rate = DEFAULT_RISK_FREE_RATE if risk_free_rate is None else risk_free_rate
        return portfolio_returns(stocks, options, rate)
