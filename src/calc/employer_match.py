"""Employer retirement match projection.

Retirement deduction lines are recognized by their label (401(k), 403(b),
457(b) and Roth 401(k) variants), both pre-tax and post-tax.
"""

from dataclasses import dataclass
from typing import List

from calc.pay_schedule import pay_periods_per_year, parse_number
from model.PaycheckResult import Deduction

RETIREMENT_LABELS = ('401(k)', '401k', '403(b)', '403b', '457(b)', '457b', 'Roth 401(k)', 'Roth 401k')
MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


@dataclass
class MatchPolicy:
    enabled: bool = True
    base_match_percent: float = 2.0
    match_rate: float = 50.0
    match_up_to_percent: float = 6.0

    @classmethod
    def from_spec(cls, spec: dict) -> 'MatchPolicy':
        """Read the 'employerMatch' block of a program spec; missing values use defaults."""
        data = spec.get('employerMatch') or {}
        return cls(
            enabled=bool(data.get('enabled', True)),
            base_match_percent=parse_number(data.get('baseMatchPercent'), 2.0),
            match_rate=parse_number(data.get('matchRate'), 50.0),
            match_up_to_percent=parse_number(data.get('matchUpToPercent'), 6.0),
        )


def is_retirement_deduction(label: str) -> bool:
    lower = (label or '').lower()
    return any(r.lower() in lower for r in RETIREMENT_LABELS)


def retirement_contribution(deductions: List[Deduction], gross_pay: float) -> float:
    """Per-paycheck dollars going to retirement deduction lines."""
    return sum(d.amount(gross_pay) for d in deductions if is_retirement_deduction(d.name))


class EmployerMatchCalculator:
    """Projects employee and employer retirement contributions for one policy."""

    def __init__(self, policy: MatchPolicy):
        self.policy = policy

    def match_for_percent(self, gross_pay: float, employee_percent: float) -> dict:
        """Employer base and match dollars per paycheck for a contribution percent."""
        if not self.policy.enabled:
            return {'base': 0.0, 'match': 0.0, 'total': 0.0}
        base = self.policy.base_match_percent / 100 * gross_pay
        matchable_percent = min(employee_percent, self.policy.match_up_to_percent)
        match = self.policy.match_rate / 100 * matchable_percent / 100 * gross_pay
        return {'base': base, 'match': match, 'total': base + match}

    def calculate(self, gross_pay: float, pay_frequency: str,
                  pre_tax_deductions: List[Deduction], post_tax_deductions: List[Deduction]) -> dict:
        periods = pay_periods_per_year(pay_frequency)

        pre_tax_retirement = retirement_contribution(pre_tax_deductions, gross_pay)
        roth_retirement = retirement_contribution(post_tax_deductions, gross_pay)
        employee_per_pay = pre_tax_retirement + roth_retirement
        employee_percent = employee_per_pay / gross_pay * 100 if gross_pay > 0 else 0.0

        employer = self.match_for_percent(gross_pay, employee_percent)

        annual_employee = employee_per_pay * periods
        annual_employer_base = employer['base'] * periods
        annual_employer_match = employer['match'] * periods
        annual_employer_total = employer['total'] * periods

        monthly = [
            {
                'month': MONTHS[i],
                'employee': annual_employee / 12 * (i + 1),
                'employer': annual_employer_total / 12 * (i + 1),
            }
            for i in range(12)
        ]

        free_money_percent = annual_employer_total / annual_employee * 100 if annual_employee > 0 else 0.0

        return {
            'periodsPerYear': periods,
            'annualGross': gross_pay * periods,
            'preTaxRetirementPerPay': pre_tax_retirement,
            'rothRetirementPerPay': roth_retirement,
            'employeePerPay': employee_per_pay,
            'employeeContributionPercent': employee_percent,
            'employerBasePerPay': employer['base'],
            'employerMatchPerPay': employer['match'],
            'employerTotalPerPay': employer['total'],
            'annualEmployeeContribution': annual_employee,
            'annualEmployerBase': annual_employer_base,
            'annualEmployerMatch': annual_employer_match,
            'annualEmployerTotal': annual_employer_total,
            'totalRetirementValue': annual_employee + annual_employer_total,
            'freeMoneyPercent': free_money_percent,
            'leavingMatchOnTable': self.policy.enabled and employee_percent < self.policy.match_up_to_percent,
            'monthly': monthly,
        }
