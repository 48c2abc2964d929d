"""Pytest configuration for the paycheck-planner test suite."""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from model.PaycheckResult import PaycheckResult, TaxWithholding


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


SAMPLE_SPEC = {
    "taxYear": 2025,
    "grossPay": 4000.00,
    "payFrequency": "biweekly",
    "zipCode": "94105",
    "filingStatus": "single",
    "allowances": 0,
    "preTaxDeductions": [
        {"name": "401(k)", "type": "percentage", "value": 6},
        {"name": "HSA", "type": "fixed", "value": 100.00}
    ],
    "postTaxDeductions": [
        {"name": "Roth IRA", "type": "fixed", "value": 150.00}
    ],
    "employerMatch": {"enabled": True, "baseMatchPercent": 2, "matchRate": 50, "matchUpToPercent": 6},
    "whatIf": {"variable": "401k", "adjustmentPercent": 10, "baselinePercent": 6},
    "fire": {"currentAge": 30, "currentSavings": 50000, "annualExpenses": 40000,
             "expectedReturnPercent": 7, "safeWithdrawalRatePercent": 4},
    "retirement": {"accountBalance": 500000, "currentAge": 75, "expectedReturnPercent": 5,
                   "taxRatePercent": 22, "projectionYears": 5},
    "realEstate": {"purchasePrice": 300000, "downPaymentPercent": 20, "interestRatePercent": 6,
                   "loanTermYears": 30, "monthlyRent": 2500}
}


def _make_result(gross_pay=2000.0, pre_tax=0.0, federal=200.0, state=80.0, local=0.0,
                social_security=124.0, medicare=29.0, post_tax=0.0, local_name=None) -> PaycheckResult:
    """Build a PaycheckResult from explicit withholding amounts."""
    taxes = TaxWithholding(
        federal_tax=federal,
        state_tax=state,
        state_name='California',
        local_tax=local,
        local_tax_name=local_name,
        social_security=social_security,
        medicare=medicare,
    )
    return PaycheckResult.build(gross_pay, pre_tax, taxes, post_tax)


@pytest.fixture
def sample_spec():
    return json.loads(json.dumps(SAMPLE_SPEC))


@pytest.fixture
def input_dir(tmp_path, sample_spec):
    """An input-parameters directory with 'sample' and 'texas' programs."""
    root = tmp_path / 'input-parameters'
    (root / 'sample').mkdir(parents=True)
    (root / 'sample' / 'spec.json').write_text(json.dumps(sample_spec))

    texas = dict(sample_spec, zipCode='75201', grossPay=3000.0)
    (root / 'texas').mkdir()
    (root / 'texas' / 'spec.json').write_text(json.dumps(texas))

    # A folder without spec.json is not a program
    (root / 'empty').mkdir()
    return str(root)


@pytest.fixture
def make_result():
    return _make_result
