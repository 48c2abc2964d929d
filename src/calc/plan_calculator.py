"""Loads paycheck programs from input-parameters/ and computes their plans."""

import json
import logging
import os
from typing import List, Optional

import settings
from calc.pay_schedule import pay_periods_per_year
from calc.paycheck_calculator import PaycheckCalculator, WithholdingProvider, yearly_projection
from model.PaycheckResult import PaycheckRequest
from model.PlanData import PlanData

logger = logging.getLogger(__name__)

DEFAULT_TAX_YEAR = 2025
DEFAULT_INFLATION_RATE = 0.03


def list_programs(input_dir: Optional[str] = None) -> List[str]:
    """Names of program folders that contain a spec.json."""
    input_dir = input_dir or settings.INPUT_PARAMETERS_DIR
    if not os.path.exists(input_dir):
        return []
    return [
        item for item in sorted(os.listdir(input_dir))
        if os.path.isfile(os.path.join(input_dir, item, 'spec.json'))
    ]


def spec_path(program_name: str, input_dir: Optional[str] = None) -> str:
    return os.path.join(input_dir or settings.INPUT_PARAMETERS_DIR, program_name, 'spec.json')


def load_spec(program_name: str, input_dir: Optional[str] = None) -> dict:
    path = spec_path(program_name, input_dir)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Spec file not found: {path}")
    with open(path, 'r') as f:
        return json.load(f)


class PlanCalculator:
    """Builds PlanData for program specs.

    Tax tables are loaded once per tax year and reused across programs.
    """

    def __init__(self, withholding_provider: Optional[WithholdingProvider] = None,
                 inflation_rate: float = DEFAULT_INFLATION_RATE):
        self.withholding_provider = withholding_provider
        self.inflation_rate = inflation_rate
        self._calculators = {}

    def paycheck_calculator(self, tax_year: int) -> PaycheckCalculator:
        if tax_year not in self._calculators:
            self._calculators[tax_year] = PaycheckCalculator.from_reference(
                tax_year, self.inflation_rate, self.withholding_provider)
        return self._calculators[tax_year]

    def calculate(self, spec: dict, program_name: str = '') -> PlanData:
        tax_year = spec.get('taxYear', DEFAULT_TAX_YEAR)
        request = PaycheckRequest.from_spec(spec)
        calculator = self.paycheck_calculator(tax_year)
        result = calculator.calculate(request, tax_year)

        ss_data = calculator.social_security.get_data_for_year(tax_year)
        yearly = yearly_projection(result, request.pay_frequency,
                                   ss_data['maximumTaxedIncome'], ss_data['employeePortion'])
        logger.info("Computed plan '%s' for %d: net pay %.2f", program_name, tax_year, result.net_pay)
        return PlanData(
            program_name=program_name,
            spec=spec,
            tax_year=tax_year,
            request=request,
            result=result,
            periods_per_year=pay_periods_per_year(request.pay_frequency),
            yearly=yearly,
        )

    def load_plan(self, program_name: str, input_dir: Optional[str] = None) -> PlanData:
        return self.calculate(load_spec(program_name, input_dir), program_name)


def load_plan(program_name: str, withholding_provider: Optional[WithholdingProvider] = None) -> PlanData:
    """Load and calculate plan data for the given program.

    Raises:
        FileNotFoundError: if input-parameters/<program_name>/spec.json is missing.
        ValueError: if the spec has invalid gross pay or ZIP code.
    """
    return PlanCalculator(withholding_provider).load_plan(program_name)
