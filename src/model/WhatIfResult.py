from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class AdjustableVariable:
    """A contribution the what-if engine can adjust as a percent of gross pay."""
    id: str
    label: str
    category: str  # 'pretax' or 'posttax'
    max_percent: float
    has_employer_match: bool = False
    description: str = ''

    @property
    def is_pretax(self) -> bool:
        return self.category == 'pretax'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'label': self.label,
            'category': self.category,
            'maxPercent': self.max_percent,
            'hasEmployerMatch': self.has_employer_match,
            'description': self.description,
        }


@dataclass
class WhatIfResult:
    """Projected impact of changing one contribution variable on a paycheck."""
    variable_id: str
    adjustment_percent: float
    baseline_percent: float
    adjustment_amount: float
    annual_adjustment: float
    change_amount: float
    federal_marginal_rate: float
    state_marginal_rate: float
    combined_marginal_rate: float
    tax_savings_per_paycheck: float
    tax_savings_per_year: float
    net_cost_per_paycheck: float
    new_net_pay: float
    net_pay_difference: float
    effective_cost_percent: float
    employer_match_per_paycheck: float = 0.0
    employer_match_per_year: float = 0.0
    periods_per_year: int = 26
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
