"""Renderer classes for displaying paycheck planning results.

Each renderer takes the PlanData of a loaded program and prints one view of
it to the console. Options (what-if variable, comparison program) are passed
to the renderer's constructor.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from calc.employer_match import EmployerMatchCalculator, MatchPolicy
from calc.fire_calculator import FireCalculator, FireInputs
from calc.paycheck_calculator import PaycheckCalculator
from calc.portfolio_returns import DEFAULT_RISK_FREE_RATE, load_trades, portfolio_returns
from calc.real_estate import (
    RealEstateInputs, affordability_for, amortization_schedule, investment_analysis, rent_vs_buy_for,
)
from calc.rmd_calculator import RMDCalculator, RetirementInputs
from calc.scenario_comparison import compare
from calc.waterfall import waterfall_steps
from calc.what_if import project_what_if, sweep, what_if_options
from model.PlanData import PlanData
from model.field_metadata import get_short_name, wrap_header

WIDTH = 60


def print_title(title: str) -> None:
    print()
    print("=" * WIDTH)
    print(f"{title:^{WIDTH}}")
    print("=" * WIDTH)


def print_section(title: str) -> None:
    print()
    print("-" * WIDTH)
    print(title)
    print("-" * WIDTH)


def print_row(label: str, amount: float, suffix: str = '') -> None:
    print(f"  {label + ':':<40} ${amount:>14,.2f}{suffix}")


def print_percent(label: str, percent: float) -> None:
    print(f"  {label + ':':<40} {percent:>14.2f}%")


def format_multiline_headers(columns: List[tuple], first_label: str = 'Year', first_width: int = 6) -> tuple[List[str], str]:
    """Format column headers with multi-line wrapping support.

    Args:
        columns: List of (header_text, width) tuples for each column
        first_label: Label of the leading key column
        first_width: Width of the leading key column

    Returns:
        Tuple of (list of header lines, separator line)
    """
    wrapped_headers = [(wrap_header(header, width), width) for header, width in columns]
    max_lines = max(len(lines) for lines, _ in wrapped_headers) if wrapped_headers else 1
    for lines, _ in wrapped_headers:
        while len(lines) < max_lines:
            lines.insert(0, "")

    header_lines = []
    for line_idx in range(max_lines):
        label = first_label if line_idx == max_lines - 1 else ''
        header_line = f"  {label:<{first_width}}"
        for lines, width in wrapped_headers:
            header_line += f" {lines[line_idx]:>{width}}"
        header_lines.append(header_line)

    sep_line = f"  {'-' * first_width}"
    for _, width in wrapped_headers:
        sep_line += f" {'-' * width}"
    return header_lines, sep_line


class BaseRenderer(ABC):
    """Abstract base class for all renderers."""

    @abstractmethod
    def render(self, data: PlanData) -> None:
        """Render the data to output.

        Args:
            data: The PlanData of the loaded program
        """
        pass


class PaycheckRenderer(BaseRenderer):
    """Gross-to-net breakdown of a single paycheck."""

    def render(self, data: PlanData) -> None:
        result = data.result
        taxes = result.taxes
        request = data.request

        print_title(f"PAYCHECK FOR {data.program_name.upper() or 'PROGRAM'} ({data.tax_year})")
        print(f"  {'Pay Frequency:':<40} {request.pay_frequency:>15}")
        print(f"  {'Filing Status:':<40} {request.filing_status:>15}")
        print(f"  {'Location:':<40} {taxes.state_name + ' ' + request.zip_code:>15}")

        print_section("DEDUCTIONS")
        for d in request.pre_tax_deductions:
            print_row(f"{d.name} (pre-tax)", d.amount(result.gross_pay))
        for d in request.post_tax_deductions:
            print_row(f"{d.name} (post-tax)", d.amount(result.gross_pay))

        print_section("TAXES")
        print_row("Federal Income Tax", taxes.federal_tax, f"  ({taxes.federal_rate})")
        print_row(f"State Income Tax ({taxes.state_name})", taxes.state_tax, f"  ({taxes.state_rate})")
        if taxes.local_tax > 0:
            print_row(f"Local Tax ({taxes.local_tax_name or 'Local'})", taxes.local_tax, f"  ({taxes.local_rate})")
        print_row("Social Security", taxes.social_security)
        print_row("Medicare", taxes.medicare)
        print(f"  {'-' * 40}")
        print_row("Total Taxes", result.total_taxes)

        print_section("SUMMARY")
        print_row("Gross Pay", result.gross_pay)
        print_row("Pre-Tax Deductions", -result.pre_tax_deductions)
        print_row("Taxable Income", result.taxable_income)
        print_row("Total Taxes", -result.total_taxes)
        print_row("Post-Tax Deductions", -result.post_tax_deductions)
        print(f"  {'=' * 40}")
        print_row("NET PAY", result.net_pay)
        if taxes.notes:
            print()
            print(f"  Note: {taxes.notes}")
        print()


class WhatIfRenderer(BaseRenderer):
    """Impact of changing one contribution variable on net pay.

    Missing options fall back to the program's 'whatIf' block.
    """

    def __init__(self, variable: Optional[str] = None, percent: Optional[float] = None,
                 baseline: Optional[float] = None):
        self.variable = variable
        self.percent = percent
        self.baseline = baseline

    def render(self, data: PlanData) -> None:
        variable, percent, baseline = what_if_options(data.spec, self.variable, self.percent, self.baseline)
        policy = MatchPolicy.from_spec(data.spec)

        w = project_what_if(data.result, data.result.gross_pay, data.request.pay_frequency,
                            percent, variable, policy, baseline)

        print_title(f"WHAT IF: {variable.label.upper()}")
        print(f"  {'Category:':<40} {'Pre-tax' if variable.is_pretax else 'Post-tax':>15}")
        print_percent("Contribution", w.adjustment_percent)
        if w.baseline_percent:
            print_percent("Current Contribution", w.baseline_percent)
        print_row("Contribution per Paycheck", w.adjustment_amount)
        print_row("Contribution per Year", w.annual_adjustment)

        print_section("MARGINAL RATES")
        print_percent("Federal Marginal", w.federal_marginal_rate * 100)
        print_percent("State Marginal (est.)", w.state_marginal_rate * 100)
        print_percent("Combined Marginal", w.combined_marginal_rate * 100)

        print_section("IMPACT")
        print_row("Tax Savings per Paycheck", w.tax_savings_per_paycheck)
        print_row("Tax Savings per Year", w.tax_savings_per_year)
        print_row("Net Cost per Paycheck", w.net_cost_per_paycheck)
        print_row("Current Net Pay", data.result.net_pay)
        print_row("New Net Pay", w.new_net_pay)
        print_row("Net Pay Difference", w.net_pay_difference)
        print_percent("Cost per Dollar Contributed", w.effective_cost_percent)
        if w.employer_match_per_paycheck > 0:
            print_row("Employer Match per Paycheck", w.employer_match_per_paycheck)
            print_row("Employer Match per Year", w.employer_match_per_year)
        print()


class WhatIfSweepRenderer(BaseRenderer):
    """Table of what-if results across the variable's whole range."""

    def __init__(self, variable: Optional[str] = None, baseline: Optional[float] = None):
        self.variable = variable
        self.baseline = baseline

    def render(self, data: PlanData) -> None:
        variable, _, baseline = what_if_options(data.spec, self.variable, baseline=self.baseline)
        results = sweep(data.result, data.result.gross_pay, data.request.pay_frequency, variable,
                        match_policy=MatchPolicy.from_spec(data.spec), baseline_percent=baseline)

        print_title(f"{variable.label.upper()} SWEEP")
        columns = [("Per Paycheck", 12), ("Tax Savings", 12), ("Net Cost", 12), ("New Net Pay", 12), ("Employer Match", 12)]
        header_lines, sep_line = format_multiline_headers(columns, first_label='Pct', first_width=5)
        for line in header_lines:
            print(line)
        print(sep_line)
        for w in results:
            print(f"  {w.adjustment_percent:>4.0f}%"
                  f" {w.adjustment_amount:>12,.2f} {w.tax_savings_per_paycheck:>12,.2f}"
                  f" {w.net_cost_per_paycheck:>12,.2f} {w.new_net_pay:>12,.2f}"
                  f" {w.employer_match_per_paycheck:>12,.2f}")
        print()


class EmployerMatchRenderer(BaseRenderer):
    """Employer retirement match projection."""

    def render(self, data: PlanData) -> None:
        policy = MatchPolicy.from_spec(data.spec)
        m = EmployerMatchCalculator(policy).calculate(
            data.result.gross_pay, data.request.pay_frequency,
            data.request.pre_tax_deductions, data.request.post_tax_deductions)

        print_title("EMPLOYER MATCH & RETIREMENT PROJECTION")
        if not policy.enabled:
            print("  Employer match is disabled for this program.")
        print_percent("Your Contribution", m['employeeContributionPercent'])
        print_percent("Base Employer Contribution", policy.base_match_percent)
        print(f"  {'Match Formula:':<40} {f'{policy.match_rate:g}% up to {policy.match_up_to_percent:g}%':>15}")

        print_section("PER PAYCHECK")
        print_row("Your Contribution", m['employeePerPay'])
        print_row("Employer Base", m['employerBasePerPay'])
        print_row("Employer Match", m['employerMatchPerPay'])

        print_section("PER YEAR")
        print_row("Your Contribution", m['annualEmployeeContribution'])
        print_row("Employer Base", m['annualEmployerBase'])
        print_row("Employer Match", m['annualEmployerMatch'])
        print(f"  {'-' * 40}")
        print_row("Total Retirement Value", m['totalRetirementValue'])
        print_percent("Free Money", m['freeMoneyPercent'])
        if m['leavingMatchOnTable']:
            print()
            print(f"  Tip: contribute at least {policy.match_up_to_percent:g}% to get the full employer match.")
        print()


class FireRenderer(BaseRenderer):
    """FIRE targets and timeline based on paycheck savings."""

    def render(self, data: PlanData) -> None:
        inputs = FireInputs.from_spec(data.spec)
        f = FireCalculator(inputs, MatchPolicy.from_spec(data.spec)).calculate(
            data.result.gross_pay, data.result.net_pay, data.request.pay_frequency,
            data.request.pre_tax_deductions, data.request.post_tax_deductions)

        def when(years, age) -> str:
            return f"{years} yrs (age {age})" if years is not None else "100+ yrs"

        print_title("FIRE CALCULATOR")
        print_row("Annual Savings (incl. match)", f['annualSavings'])
        print_percent("Savings Rate", f['savingsRate'])
        print(f"  {f['insight']}")

        print_section("TARGETS")
        print_row("Lean FIRE", f['leanFireNumber'], f"  {when(f['yearsToLeanFire'], f['leanFireAge'])}")
        print_row("FIRE", f['fireNumber'], f"  {when(f['yearsToFire'], f['fireAge'])}")
        print_row("Fat FIRE", f['fatFireNumber'], f"  {when(f['yearsToFatFire'], f['fatFireAge'])}")
        print_row("Coast FIRE (by 65)", f['coastFireNumber'], "  reached" if f['coastFireReached'] else "")
        print_percent("Progress to FIRE", f['progressPercent'])

        print_section("PROJECTION")
        print(f"  {'Age':<6} {'Portfolio':>16}")
        for row in f['projection'][::5]:
            print(f"  {row['age']:<6} ${row['portfolio']:>15,.0f}")
        print()


class WaterfallRenderer(BaseRenderer):
    """Gross pay flowing down to net pay step by step."""

    def render(self, data: PlanData) -> None:
        print_title("PAYCHECK FLOW")
        print(f"  {'Step':<24} {'Amount':>12} {'Remaining':>12} {'% Gross':>8}")
        print(f"  {'-' * 24} {'-' * 12} {'-' * 12} {'-' * 8}")
        for step in waterfall_steps(data.result):
            print(f"  {step['label']:<24} {step['amount']:>12,.2f} {step['remaining']:>12,.2f} {step['percentOfGross']:>7.1f}%")
        print(f"  {'Net Pay':<24} {data.result.net_pay:>12,.2f}")
        print()


class YearlyProjectionRenderer(BaseRenderer):
    """Paycheck annualized over the pay periods of one year."""

    ROWS = (
        ('annual_gross', 'grossIncome'),
        ('annual_pre_tax_deductions', 'preTaxDeductions'),
        ('annual_taxable_income', 'taxableIncome'),
        ('annual_federal_tax', 'federalTax'),
        ('annual_state_tax', 'stateTax'),
        ('annual_local_tax', 'localTax'),
        ('annual_social_security', 'socialSecurity'),
        ('annual_medicare', 'medicare'),
        ('annual_total_taxes', 'totalTaxes'),
        ('annual_post_tax_deductions', 'postTaxDeductions'),
        ('annual_net_pay', 'netPay'),
        ('monthly_net_pay', 'monthlyNet'),
    )

    def render(self, data: PlanData) -> None:
        yearly = data.yearly
        print_title(f"YEARLY PROJECTION ({data.periods_per_year} PAY PERIODS)")
        for field_name, key in self.ROWS:
            print_row(get_short_name(field_name), yearly.get(key, 0.0))
        print_percent(get_short_name('effective_tax_rate'), yearly.get('effectiveTaxRate', 0.0) * 100)
        print()


class BracketsRenderer(BaseRenderer):
    """How annual taxable income fills the federal brackets."""

    def __init__(self, calculator: Optional[PaycheckCalculator] = None):
        self.calculator = calculator

    def render(self, data: PlanData) -> None:
        calculator = self.calculator or PaycheckCalculator.from_reference(data.tax_year)
        request = data.request
        annual = data.result.taxable_income * data.periods_per_year
        federal_taxable = calculator.federal.taxableIncome(annual, data.tax_year, request.filing_status, request.allowances)

        print_title(f"FEDERAL BRACKETS ({request.filing_status.upper()}, {data.tax_year})")
        print_row("Annual Taxable Income", annual)
        print_row("Federal Taxable Income", federal_taxable)
        print()
        print(f"  {'Rate':>6} {'From':>12} {'To':>12} {'In Bracket':>12} {'Tax':>12}")
        print(f"  {'-' * 6} {'-' * 12} {'-' * 12} {'-' * 12} {'-' * 12}")
        for row in calculator.bracket_fill(federal_taxable, data.tax_year, request.filing_status):
            upper = f"{row['max']:,.0f}" if row['max'] < 1e12 else "and up"
            marker = "  <- marginal" if row['isCurrent'] else ""
            print(f"  {row['rate'] * 100:>5.1f}% {row['min']:>12,.0f} {upper:>12} "
                  f"{row['taxable']:>12,.2f} {row['taxAmount']:>12,.2f}{marker}")
        print()


class CompareRenderer(BaseRenderer):
    """Side-by-side comparison of the loaded program against another."""

    def __init__(self, other: PlanData):
        self.other = other

    def render(self, data: PlanData) -> None:
        name_a = data.program_name or 'A'
        name_b = self.other.program_name or 'B'
        if name_a == name_b:
            name_b = f"{name_b} (2)"
        c = compare(name_a, data.result, data.request.pay_frequency,
                    name_b, self.other.result, self.other.request.pay_frequency)

        print_title(f"COMPARE: {name_a} vs {name_b}")
        print(f"  {'':<16} {name_a[:14]:>14} {name_b[:14]:>14} {'Difference':>14}")
        print(f"  {'-' * 16} {'-' * 14} {'-' * 14} {'-' * 14}")
        for row in c['rows']:
            flag = {'better': ' +', 'worse': ' -', 'same': ''}[row['direction']]
            print(f"  {row['category']:<16} {row['a']:>14,.2f} {row['b']:>14,.2f} {row['difference']:>14,.2f}{flag}")

        print_section("PER YEAR")
        print(f"  {'Pay Periods':<16} {c['scenarioA']['periodsPerYear']:>14} {c['scenarioB']['periodsPerYear']:>14}")
        print(f"  {'Net Pay':<16} {c['scenarioA']['yearly']['net']:>14,.2f} {c['scenarioB']['yearly']['net']:>14,.2f}"
              f" {c['yearlyNetDifference']:>14,.2f}")
        print(f"  {'Total Taxes':<16} {c['scenarioA']['yearly']['taxes']:>14,.2f} {c['scenarioB']['yearly']['taxes']:>14,.2f}"
              f" {c['yearlyTaxDifference']:>14,.2f}")
        print()


class RMDRenderer(BaseRenderer):
    """Required minimum distributions from the program's 'retirement' block."""

    def __init__(self, calculator: Optional[RMDCalculator] = None):
        self.calculator = calculator

    def render(self, data: PlanData) -> None:
        inputs = RetirementInputs.from_spec(data.spec)
        r = (self.calculator or RMDCalculator()).calculate(inputs)

        print_title("REQUIRED MINIMUM DISTRIBUTIONS")
        print_row("Account Balance", inputs.account_balance)
        print(f"  {'Current Age:':<40} {inputs.current_age:>15}")
        print(f"  {'RMD Start Age:':<40} {r['rmdStartAge']:>15}")
        print(f"  {'Distribution Period:':<40} {r['distributionPeriod']:>15.1f}")
        print_row("Current RMD", r['currentRmd'])
        print_row("Tax on RMD", r['taxOnRmd'])
        print_row("After-Tax RMD", r['afterTaxRmd'])

        print_section("PROJECTION")
        columns = [("Balance", 14), ("Distribution Period", 12), ("RMD", 12), ("Tax", 12), ("Cumulative RMD", 14)]
        header_lines, sep_line = format_multiline_headers(columns, first_label='Age', first_width=5)
        for line in header_lines:
            print(line)
        print(sep_line)
        for row in r['projection']:
            print(f"  {row['age']:<5} {row['balance']:>14,.0f} {row['distributionPeriod']:>12.1f}"
                  f" {row['rmd']:>12,.0f} {row['tax']:>12,.0f} {row['cumulativeRmd']:>14,.0f}")

        print()
        print_row("Final Balance", r['finalBalance'])
        print_row("Total RMDs", r['totalRmds'])
        print_row("Total Taxes", r['totalTaxes'])
        print()


class RealEstateRenderer(BaseRenderer):
    """Rental property analysis from the program's 'realEstate' block."""

    def render(self, data: PlanData) -> None:
        inputs = RealEstateInputs.from_spec(data.spec)
        a = investment_analysis(inputs)
        loan = amortization_schedule(inputs.purchase_price, a['downPayment'],
                                     inputs.interest_rate_percent, inputs.loan_term_years)

        print_title("REAL ESTATE INVESTMENT")
        print_row("Purchase Price", inputs.purchase_price)
        print_row("Down Payment", a['downPayment'])
        print_row("Loan Amount", a['loanAmount'])

        print_section("MONTHLY")
        print_row("Effective Rent (after vacancy)", a['effectiveRent'])
        print_row("Mortgage", a['monthlyMortgage'])
        print_row("Property Tax", a['monthlyPropertyTax'])
        print_row("Insurance", a['monthlyInsurance'])
        print_row("Maintenance", a['monthlyMaintenance'])
        print(f"  {'-' * 40}")
        print_row("Cash Flow", a['monthlyCashFlow'])

        print_section("RETURNS")
        print_row("Annual Cash Flow", a['annualCashFlow'])
        print_row("Net Operating Income", a['noi'])
        print_percent("Cap Rate", a['capRate'])
        print_percent("Cash on Cash", a['cashOnCash'])
        print_row("Total Interest over Loan", loan['totalInterest'])

        print_section("10-YEAR PROJECTION")
        print(f"  {'Year':<6} {'Value':>14} {'Equity':>14} {'Cum. Cash Flow':>16}")
        for row in a['projection']:
            print(f"  {row['year']:<6} {row['propertyValue']:>14,.0f} {row['equity']:>14,.0f} {row['cumulativeCashFlow']:>16,.0f}")

        rvb = rent_vs_buy_for(inputs)
        print_section("RENT VS BUY")
        print_row("Monthly Mortgage", rvb['monthlyMortgage'])
        print(f"  {'Year':<6} {'Rent Wealth':>14} {'Buy Wealth':>14} {'Rent Paid':>16}")
        for row in rvb['years']:
            print(f"  {row['year']:<6} {row['rentWealth']:>14,.0f} {row['buyWealth']:>14,.0f} {row['totalRentPaid']:>16,.0f}")
        final = rvb['years'][-1]
        print(f"  {'Buying comes out ahead.' if final['buyWealth'] > final['rentWealth'] else 'Renting comes out ahead.'}")

        afford = affordability_for(inputs, data.yearly.get('grossIncome', 0.0))
        print_section("AFFORDABILITY")
        print_row("Annual Income", afford['annualIncome'])
        print_row("Max Housing Payment", afford['maxHousingPayment'])
        print_row("Max Home Price", afford['maxHomePrice'])
        print_row("Conservative Price (28%)", afford['conservativePrice'])
        print_percent("Projected DTI", afford['projectedDti'])
        if not afford['withinBudget']:
            print("  This purchase price is above the maximum for your income.")
        print()



class PortfolioReturnsRenderer(BaseRenderer):
    """Return and risk statistics of closed trades from the trades file."""

    def __init__(self, trades_path: Optional[str] = None, risk_free_rate: float = DEFAULT_RISK_FREE_RATE):
        self.trades_path = trades_path
        self.risk_free_rate = risk_free_rate

    def render(self, data: PlanData) -> None:
        stocks, options = load_trades(self.trades_path)
        s = portfolio_returns(stocks, options, self.risk_free_rate)

        print_title("PORTFOLIO RETURNS")
        if not s['hasRealData']:
            print("  No closed trades recorded yet.")
            print()
            return
        print(f"  {'Trades:':<40} {s['totalTrades']:>15}")
        print_row("Total P&L", s['totalPnL'])
        print_percent("Win Rate", s['winRate'])
        print_row("Average Win", s['averageWin'])
        print_row("Average Loss", s['averageLoss'])
        print(f"  {'Profit Factor:':<40} {s['profitFactor']:>15.2f}")

        print_section("RISK")
        print_percent("Annualized Return", s['annualizedReturn'])
        print_percent("Annualized Volatility", s['annualizedVolatility'])
        print_percent("Max Drawdown", s['maxDrawdown'])
        print(f"  {'Sharpe Ratio:':<40} {s['sharpeRatio']:>15.2f}")
        print(f"  {'Sortino Ratio:':<40} {s['sortinoRatio']:>15.2f}")
        print(f"  {'Calmar Ratio:':<40} {s['calmarRatio']:>15.2f}")
        print()


# Registry of renderers selectable with --mode. Renderers that need options
# are built by the caller; the classes here are instantiated with defaults.
RENDERER_REGISTRY = {
    'Paycheck': PaycheckRenderer,
    'WhatIf': WhatIfRenderer,
    'EmployerMatch': EmployerMatchRenderer,
    'Fire': FireRenderer,
    'Waterfall': WaterfallRenderer,
    'YearlyProjection': YearlyProjectionRenderer,
    'Brackets': BracketsRenderer,
    'Compare': CompareRenderer,
    'RMD': RMDRenderer,
    'RealEstate': RealEstateRenderer,
    'PortfolioReturns': PortfolioReturnsRenderer,
}
