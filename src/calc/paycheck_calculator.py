import logging
from typing import Dict, List, Optional, Protocol

from calc.pay_schedule import pay_periods_per_year
from model.PaycheckResult import PaycheckRequest, PaycheckResult, TaxWithholding, total_deductions
from tax.FederalDetails import FederalDetails
from tax.StateDetails import StateDetails
from tax.SocialSecurityDetails import SocialSecurityDetails
from tax.MedicareDetails import MedicareDetails

logger = logging.getLogger(__name__)

FALLBACK_FEDERAL_RATE = 0.12
FALLBACK_STATE_RATE = 0.05
FALLBACK_SS_RATE = 0.062
FALLBACK_SS_WAGE_BASE = 168600
FALLBACK_MEDICARE_RATE = 0.0145


class WithholdingProvider(Protocol):
    def withholding(self, request: PaycheckRequest, taxable_income: float, tax_year: int) -> TaxWithholding:
        ...


def format_rate(rate: float) -> str:
    return f"{rate * 100:.2f}%"


def fallback_withholding(gross_pay: float, taxable_income: float, periods_per_year: int = 26) -> TaxWithholding:
    """Flat estimate used when a withholding provider cannot produce figures.

    Federal 12% and state 5% of taxable income, Social Security capped at the
    per-period share of the 2024 wage base, Medicare 1.45% of gross.
    """
    return TaxWithholding(
        federal_tax=taxable_income * FALLBACK_FEDERAL_RATE,
        state_tax=taxable_income * FALLBACK_STATE_RATE,
        state_name='Unknown',
        local_tax=0.0,
        local_tax_name=None,
        social_security=min(gross_pay * FALLBACK_SS_RATE, FALLBACK_SS_WAGE_BASE * FALLBACK_SS_RATE / periods_per_year),
        medicare=gross_pay * FALLBACK_MEDICARE_RATE,
        federal_rate='12%',
        state_rate='5%',
        local_rate='N/A',
        notes='Using estimated rates. Please verify with a tax professional.',
    )


class PaycheckCalculator:
    """Computes a gross-to-net paycheck using injected detail providers.

    Pass hydrated instances of the tax detail classes into the constructor so
    file I/O stays with the caller. An optional withholding provider (for
    example the AI payroll provider) replaces the local bracket estimate.
    """

    def __init__(self, federal: FederalDetails, state: StateDetails,
                 social_security: SocialSecurityDetails, medicare: MedicareDetails,
                 withholding_provider: Optional[WithholdingProvider] = None):
        self.federal = federal
        self.state = state
        self.social_security = social_security
        self.medicare = medicare
        self.withholding_provider = withholding_provider

    @classmethod
    def from_reference(cls, final_year: int, inflation_rate: float = 0.03,
                       withholding_provider: Optional[WithholdingProvider] = None) -> 'PaycheckCalculator':
        """Load every tax table from reference/ up to final_year."""
        return cls(
            federal=FederalDetails(inflation_rate, final_year),
            state=StateDetails(inflation_rate, final_year),
            social_security=SocialSecurityDetails(inflation_rate, final_year),
            medicare=MedicareDetails.from_reference(),
            withholding_provider=withholding_provider,
        )

    def estimate_withholding(self, request: PaycheckRequest, taxable_income: float, tax_year: int) -> TaxWithholding:
        """Bracket-aware local estimate of the taxes withheld from one paycheck."""
        periods = pay_periods_per_year(request.pay_frequency)
        annual_taxable = taxable_income * periods

        federal_taxable = self.federal.taxableIncome(annual_taxable, tax_year, request.filing_status, request.allowances)
        federal_result = self.federal.taxBurden(federal_taxable, tax_year, request.filing_status)
        federal_tax = federal_result.totalFederalTax / periods

        state_info = self.state.stateInfo(request.zip_code)
        state_tax = self.state.taxBurden(annual_taxable, request.zip_code, tax_year) / periods

        locality = self.state.locality(request.zip_code)
        local_tax = self.state.localTax(taxable_income, request.zip_code)

        social_security = self.social_security.per_period_contribution(request.gross_pay, periods, tax_year)
        medicare = self.medicare.per_period_contribution(request.gross_pay, periods)

        def effective(amount: float) -> float:
            return amount / taxable_income if taxable_income > 0 else 0.0

        notes = f"Estimated for {state_info['name']} using {tax_year} federal brackets ({request.filing_status})."
        if state_info.get('rate', 0) <= 0 and state_info.get('code'):
            notes += f" {state_info['name']} has no state income tax."

        return TaxWithholding(
            federal_tax=federal_tax,
            state_tax=state_tax,
            state_name=state_info['name'],
            local_tax=local_tax,
            local_tax_name=locality['name'] if locality else None,
            social_security=social_security,
            medicare=medicare,
            federal_rate=format_rate(effective(federal_tax)),
            state_rate=format_rate(effective(state_tax)),
            local_rate=format_rate(locality['rate']) if locality else 'N/A',
            notes=notes,
        )

    def calculate(self, request: PaycheckRequest, tax_year: int) -> PaycheckResult:
        pre_tax = total_deductions(request.pre_tax_deductions, request.gross_pay)
        post_tax = total_deductions(request.post_tax_deductions, request.gross_pay)
        taxable_income = request.gross_pay - pre_tax

        if self.withholding_provider is not None:
            taxes = self.withholding_provider.withholding(request, taxable_income, tax_year)
        else:
            taxes = self.estimate_withholding(request, taxable_income, tax_year)

        result = PaycheckResult.build(request.gross_pay, pre_tax, taxes, post_tax)
        logger.debug("Paycheck for %s: gross %.2f net %.2f", request.zip_code, result.gross_pay, result.net_pay)
        return result

    def calculate_spec(self, spec: dict) -> PaycheckResult:
        """Validate a program spec and compute its paycheck for spec['taxYear']."""
        request = PaycheckRequest.from_spec(spec)
        return self.calculate(request, spec.get('taxYear', self.federal.final_year))

    def bracket_fill(self, annual_taxable: float, tax_year: int, filing_status: str = 'single') -> List[Dict]:
        """Show how annual taxable income fills each federal bracket.

        Returns the brackets that hold income plus the current one, each with
        the taxable amount inside it, the tax on that amount and whether it is
        the bracket the last dollar falls in.
        """
        rows = []
        floor = 0.0
        for b in self.federal.brackets(tax_year, filing_status):
            ceiling = b['maxIncome']
            taxable = max(0.0, min(annual_taxable, ceiling) - floor)
            is_current = floor < annual_taxable <= ceiling
            if taxable > 0 or is_current:
                rows.append({
                    'rate': b['rate'],
                    'min': floor,
                    'max': ceiling,
                    'taxable': taxable,
                    'taxAmount': taxable * b['rate'],
                    'isCurrent': is_current,
                })
            floor = ceiling
        return rows


def yearly_projection(result: PaycheckResult, pay_frequency: str, wage_base: float = FALLBACK_SS_WAGE_BASE,
                      ss_rate: float = FALLBACK_SS_RATE) -> Dict[str, float]:
    """Annualize a paycheck; Social Security is capped at the wage base."""
    periods = pay_periods_per_year(pay_frequency)
    social_security = min(result.taxes.social_security * periods, wage_base * ss_rate)
    federal = result.taxes.federal_tax * periods
    state = result.taxes.state_tax * periods
    local = result.taxes.local_tax * periods
    medicare = result.taxes.medicare * periods
    total_taxes = federal + state + local + social_security + medicare
    gross = result.gross_pay * periods
    pre_tax = result.pre_tax_deductions * periods
    post_tax = result.post_tax_deductions * periods
    net = gross - pre_tax - total_taxes - post_tax
    return {
        'periodsPerYear': periods,
        'grossIncome': gross,
        'preTaxDeductions': pre_tax,
        'taxableIncome': result.taxable_income * periods,
        'federalTax': federal,
        'stateTax': state,
        'localTax': local,
        'socialSecurity': social_security,
        'medicare': medicare,
        'totalTaxes': total_taxes,
        'effectiveTaxRate': total_taxes / gross if gross > 0 else 0.0,
        'postTaxDeductions': post_tax,
        'netPay': net,
        'monthlyNet': net / 12,
    }
