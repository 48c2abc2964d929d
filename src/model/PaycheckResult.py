"""Data classes for a single paycheck computation.

A PaycheckResult is rebuilt from its inputs on every recompute; nothing here
carries identity or persistence. The camelCase wire names used by to_dict()
and from_dict() match the JSON returned to dashboard clients.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional


DEDUCTION_TYPES = ('percentage', 'fixed')
VALID_FILING_STATUSES = ('single', 'married', 'married_separately', 'head_of_household')
VALID_PAY_FREQUENCIES = ('weekly', 'biweekly', 'semimonthly', 'monthly')

MAX_GROSS_PAY = 10_000_000
MAX_DEDUCTION_VALUE = 1_000_000
MAX_DEDUCTION_LINES = 20
MAX_ALLOWANCES = 20
ZIP_REGEX = re.compile(r'^\d{5}$')


@dataclass
class Deduction:
    """A single payroll deduction line.

    `type` is either 'percentage' (value is a percent of gross pay) or
    'fixed' (value is a dollar amount per paycheck).
    """
    name: str
    type: str
    value: float

    def amount(self, gross_pay: float) -> float:
        """Dollar amount of this deduction for one paycheck."""
        if self.type == 'percentage':
            return gross_pay * self.value / 100
        return self.value

    def to_dict(self) -> dict:
        return {'name': self.name, 'type': self.type, 'value': self.value}

    @classmethod
    def from_dict(cls, data: dict) -> Optional['Deduction']:
        """Build a validated deduction, or None when the line is unusable.

        'amount' is accepted as an alias for 'fixed', and 'label' for 'name'.
        """
        if not isinstance(data, dict):
            return None
        kind = data.get('type')
        if kind == 'amount':
            kind = 'fixed'
        value = data.get('value')
        if kind not in DEDUCTION_TYPES:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if value < 0 or value > MAX_DEDUCTION_VALUE:
            return None
        name = str(data.get('name') or data.get('label') or 'Deduction')[:100]
        return cls(name=name, type=kind, value=float(value))


def total_deductions(deductions: List[Deduction], gross_pay: float) -> float:
    """Sum the dollar amounts of deduction lines for one paycheck."""
    return sum(d.amount(gross_pay) for d in deductions)


def parse_deductions(raw) -> List[Deduction]:
    """Validate a raw list of deduction dicts, keeping at most 20 usable lines."""
    if not isinstance(raw, list):
        return []
    parsed = (Deduction.from_dict(d) for d in raw[:MAX_DEDUCTION_LINES])
    return [d for d in parsed if d is not None]


@dataclass
class PaycheckRequest:
    """Validated inputs for a gross-to-net computation."""
    gross_pay: float
    zip_code: str
    pay_frequency: str = 'biweekly'
    filing_status: str = 'single'
    allowances: int = 0
    pre_tax_deductions: List[Deduction] = field(default_factory=list)
    post_tax_deductions: List[Deduction] = field(default_factory=list)

    @classmethod
    def from_spec(cls, spec: dict) -> 'PaycheckRequest':
        """Build a request from a program spec.json dictionary.

        Raises:
            ValueError: if gross pay or ZIP code are missing or invalid.
        """
        gross_pay = spec.get('grossPay')
        if isinstance(gross_pay, bool) or not isinstance(gross_pay, (int, float)) \
                or gross_pay <= 0 or gross_pay > MAX_GROSS_PAY:
            raise ValueError('Gross pay must be a positive number up to $10,000,000')

        zip_code = str(spec.get('zipCode') or '').strip()
        if not ZIP_REGEX.match(zip_code):
            raise ValueError('Valid 5-digit ZIP code is required')

        frequency = spec.get('payFrequency')
        if frequency not in VALID_PAY_FREQUENCIES:
            frequency = 'biweekly'
        filing_status = spec.get('filingStatus')
        if filing_status not in VALID_FILING_STATUSES:
            filing_status = 'single'
        allowances = spec.get('allowances')
        if isinstance(allowances, bool) or not isinstance(allowances, int) \
                or allowances < 0 or allowances > MAX_ALLOWANCES:
            allowances = 0

        return cls(
            gross_pay=float(gross_pay),
            zip_code=zip_code,
            pay_frequency=frequency,
            filing_status=filing_status,
            allowances=allowances,
            pre_tax_deductions=parse_deductions(spec.get('preTaxDeductions')),
            post_tax_deductions=parse_deductions(spec.get('postTaxDeductions')),
        )


@dataclass
class TaxWithholding:
    """Per-paycheck tax withholding amounts."""
    federal_tax: float
    state_tax: float
    state_name: str
    local_tax: float
    social_security: float
    medicare: float
    local_tax_name: Optional[str] = None
    federal_rate: str = ''
    state_rate: str = ''
    local_rate: str = 'N/A'
    notes: str = ''

    @property
    def total(self) -> float:
        return self.federal_tax + self.state_tax + self.local_tax + self.social_security + self.medicare

    def to_dict(self) -> dict:
        return {
            'federalTax': self.federal_tax,
            'stateTax': self.state_tax,
            'stateName': self.state_name,
            'localTax': self.local_tax,
            'localTaxName': self.local_tax_name,
            'socialSecurity': self.social_security,
            'medicare': self.medicare,
            'taxBreakdown': {
                'federalRate': self.federal_rate,
                'stateRate': self.state_rate,
                'localRate': self.local_rate,
            },
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TaxWithholding':
        breakdown = data.get('taxBreakdown') or {}
        return cls(
            federal_tax=float(data.get('federalTax', 0) or 0),
            state_tax=float(data.get('stateTax', 0) or 0),
            state_name=str(data.get('stateName') or 'Unknown'),
            local_tax=float(data.get('localTax', 0) or 0),
            local_tax_name=data.get('localTaxName'),
            social_security=float(data.get('socialSecurity', 0) or 0),
            medicare=float(data.get('medicare', 0) or 0),
            federal_rate=str(breakdown.get('federalRate', '')),
            state_rate=str(breakdown.get('stateRate', '')),
            local_rate=str(breakdown.get('localRate', 'N/A')),
            notes=str(data.get('notes') or ''),
        )


@dataclass
class PaycheckResult:
    """Gross-to-net breakdown of one paycheck.

    taxable_income, total_taxes and net_pay are derived from the other
    fields; use build() so they always agree with the inputs.
    """
    gross_pay: float
    pre_tax_deductions: float
    taxable_income: float
    taxes: TaxWithholding
    total_taxes: float
    post_tax_deductions: float
    net_pay: float

    @classmethod
    def build(cls, gross_pay: float, pre_tax_deductions: float, taxes: TaxWithholding,
              post_tax_deductions: float) -> 'PaycheckResult':
        taxable_income = gross_pay - pre_tax_deductions
        total_taxes = taxes.total
        return cls(
            gross_pay=gross_pay,
            pre_tax_deductions=pre_tax_deductions,
            taxable_income=taxable_income,
            taxes=taxes,
            total_taxes=total_taxes,
            post_tax_deductions=post_tax_deductions,
            net_pay=taxable_income - total_taxes - post_tax_deductions,
        )

    def breakdown(self) -> Dict[str, float]:
        return {
            'gross': self.gross_pay,
            'preTax': self.pre_tax_deductions,
            'federal': self.taxes.federal_tax,
            'state': self.taxes.state_tax,
            'local': self.taxes.local_tax,
            'socialSecurity': self.taxes.social_security,
            'medicare': self.taxes.medicare,
            'postTax': self.post_tax_deductions,
            'net': self.net_pay,
        }

    def to_dict(self) -> dict:
        return {
            'grossPay': self.gross_pay,
            'preTaxDeductions': self.pre_tax_deductions,
            'taxableIncome': self.taxable_income,
            'taxes': self.taxes.to_dict(),
            'totalTaxes': self.total_taxes,
            'postTaxDeductions': self.post_tax_deductions,
            'netPay': self.net_pay,
            'breakdown': self.breakdown(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PaycheckResult':
        taxes = TaxWithholding.from_dict(data.get('taxes') or {})
        return cls.build(
            gross_pay=float(data['grossPay']),
            pre_tax_deductions=float(data.get('preTaxDeductions', 0) or 0),
            taxes=taxes,
            post_tax_deductions=float(data.get('postTaxDeductions', 0) or 0),
        )
