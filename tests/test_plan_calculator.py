"""Tests for loading programs from input-parameters/ and computing their plans."""

import os
import sys

import pytest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.plan_calculator import PlanCalculator, list_programs, load_spec, spec_path
from model.PlanData import PlanData


class TestProgramDiscovery:
    def test_lists_folders_with_spec(self, input_dir):
        assert list_programs(input_dir) == ['sample', 'texas']

    def test_missing_directory(self, tmp_path):
        assert list_programs(str(tmp_path / 'nowhere')) == []

    def test_spec_path(self, input_dir):
        assert spec_path('sample', input_dir) == os.path.join(input_dir, 'sample', 'spec.json')

    def test_load_spec(self, input_dir):
        assert load_spec('texas', input_dir)['zipCode'] == '75201'

    def test_load_spec_missing(self, input_dir):
        with pytest.raises(FileNotFoundError, match="Spec file not found"):
            load_spec('empty', input_dir)


class TestPlanCalculator:
    def test_load_plan(self, input_dir):
        plan = PlanCalculator().load_plan('sample', input_dir)

        assert isinstance(plan, PlanData)
        assert plan.program_name == 'sample'
        assert plan.tax_year == 2025
        assert plan.periods_per_year == 26
        assert plan.result.gross_pay == 4000.0
        assert plan.result.pre_tax_deductions == pytest.approx(340.0)
        assert plan.result.post_tax_deductions == pytest.approx(150.0)
        assert plan.result.taxes.state_name == 'California'
        assert plan.yearly['grossIncome'] == pytest.approx(104000.0)

    def test_no_income_tax_state(self, input_dir):
        plan = PlanCalculator().load_plan('texas', input_dir)
        assert plan.result.taxes.state_tax == 0.0
        assert plan.result.taxes.state_name == 'Texas'

    def test_net_pay_identity(self, input_dir):
        result = PlanCalculator().load_plan('sample', input_dir).result
        assert result.net_pay == pytest.approx(
            result.gross_pay - result.pre_tax_deductions - result.total_taxes - result.post_tax_deductions)

    def test_tax_tables_reused_per_year(self):
        calculator = PlanCalculator()
        assert calculator.paycheck_calculator(2025) is calculator.paycheck_calculator(2025)

    def test_default_tax_year(self, sample_spec):
        del sample_spec['taxYear']
        assert PlanCalculator().calculate(sample_spec, 'sample').tax_year == 2025

    def test_invalid_spec_raises(self, sample_spec):
        sample_spec['zipCode'] = '9410'
        with pytest.raises(ValueError, match="ZIP"):
            PlanCalculator().calculate(sample_spec)

    def test_withholding_provider_used(self, sample_spec, make_result):
        provider = MagicMock()
        provider.withholding.return_value = make_result(federal=321.0).taxes
        plan = PlanCalculator(provider).calculate(sample_spec, 'sample')

        provider.withholding.assert_called_once()
        assert plan.result.taxes.federal_tax == 321.0
