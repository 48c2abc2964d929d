"""Computed paycheck plan for one program.

PlanData bundles the program spec with the paycheck computed from it and
exposes a flat field view used by the shell 'get' command and the MCP tools.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from model.PaycheckResult import PaycheckRequest, PaycheckResult


@dataclass
class PlanData:
    program_name: str
    spec: dict
    tax_year: int
    request: PaycheckRequest
    result: PaycheckResult
    periods_per_year: int
    yearly: Dict[str, float] = field(default_factory=dict)

    def fields(self) -> Dict[str, Any]:
        """Flat mapping of field name to value for the current paycheck."""
        taxes = self.result.taxes
        values = {
            'tax_year': self.tax_year,
            'zip_code': self.request.zip_code,
            'state_name': taxes.state_name,
            'local_tax_name': taxes.local_tax_name or '',
            'filing_status': self.request.filing_status,
            'allowances': self.request.allowances,
            'pay_frequency': self.request.pay_frequency,
            'pay_periods_per_year': self.periods_per_year,
            'gross_pay': self.result.gross_pay,
            'pre_tax_deductions': self.result.pre_tax_deductions,
            'taxable_income': self.result.taxable_income,
            'federal_tax': taxes.federal_tax,
            'state_tax': taxes.state_tax,
            'local_tax': taxes.local_tax,
            'social_security': taxes.social_security,
            'medicare': taxes.medicare,
            'total_taxes': self.result.total_taxes,
            'post_tax_deductions': self.result.post_tax_deductions,
            'net_pay': self.result.net_pay,
        }
        yearly_names = {
            'grossIncome': 'annual_gross',
            'preTaxDeductions': 'annual_pre_tax_deductions',
            'taxableIncome': 'annual_taxable_income',
            'federalTax': 'annual_federal_tax',
            'stateTax': 'annual_state_tax',
            'localTax': 'annual_local_tax',
            'socialSecurity': 'annual_social_security',
            'medicare': 'annual_medicare',
            'totalTaxes': 'annual_total_taxes',
            'effectiveTaxRate': 'effective_tax_rate',
            'postTaxDeductions': 'annual_post_tax_deductions',
            'netPay': 'annual_net_pay',
            'monthlyNet': 'monthly_net_pay',
        }
        for key, name in yearly_names.items():
            if key in self.yearly:
                values[name] = self.yearly[key]
        return values

    def field_names(self) -> List[str]:
        return list(self.fields().keys())

    def get(self, field_name: str) -> Any:
        values = self.fields()
        if field_name not in values:
            raise KeyError(f"Unknown field '{field_name}'")
        return values[field_name]

    def to_dict(self) -> dict:
        return {
            'program': self.program_name,
            'taxYear': self.tax_year,
            'payFrequency': self.request.pay_frequency,
            'periodsPerYear': self.periods_per_year,
            'paycheck': self.result.to_dict(),
            'yearly': self.yearly,
        }
