"""Interactive spec.json generator for paycheck planning.

This module provides an interactive command-line interface to generate
a spec.json configuration file by prompting users for their paycheck,
deductions and the optional planning blocks (employer match, what-if,
FIRE, retirement and real estate).
"""

import os
import json
from datetime import datetime
from typing import Any, Optional

from calc.what_if import ADJUSTABLE_VARIABLES
from model.PaycheckResult import (
    DEDUCTION_TYPES,
    MAX_ALLOWANCES,
    MAX_DEDUCTION_LINES,
    MAX_DEDUCTION_VALUE,
    MAX_GROSS_PAY,
    VALID_FILING_STATUSES,
    VALID_PAY_FREQUENCIES,
    ZIP_REGEX,
)


def prompt_int(prompt: str, default: Optional[int] = None, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
    """Prompt for an integer value with optional default and validation."""
    while True:
        default_str = f" [{default}]" if default is not None else ""
        try:
            value = input(f"{prompt}{default_str}: ").strip()
            if value == "" and default is not None:
                return default
            result = int(value)
            if min_val is not None and result < min_val:
                print(f"  Value must be at least {min_val}")
                continue
            if max_val is not None and result > max_val:
                print(f"  Value must be at most {max_val}")
                continue
            return result
        except ValueError:
            print("  Please enter a valid integer")


def prompt_percent(prompt: str, default: Optional[float] = None, max_val: float = 100.0) -> float:
    """Prompt for a percentage, returned as entered (15 means 15%)."""
    while True:
        default_display = f" [{default:g}%]" if default is not None else ""
        try:
            value = input(f"{prompt} (%){default_display}: ").strip().rstrip('%')
            if value == "" and default is not None:
                return default
            result = float(value)
            if result < 0:
                print("  Percentage cannot be negative")
                continue
            if result > max_val:
                print(f"  Percentage cannot exceed {max_val:g}%")
                continue
            return result
        except ValueError:
            print("  Please enter a valid percentage (e.g., 6 for 6%)")


def prompt_currency(prompt: str, default: Optional[float] = None, min_val: float = 0, max_val: Optional[float] = None) -> float:
    """Prompt for a currency value."""
    while True:
        default_str = f" [${default:,.2f}]" if default is not None else ""
        try:
            value = input(f"{prompt} ($){default_str}: ").strip().lstrip('$').replace(',', '')
            if value == "" and default is not None:
                return default
            result = float(value)
            if result < min_val:
                print(f"  Value must be at least ${min_val:,.2f}")
                continue
            if max_val is not None and result > max_val:
                print(f"  Value must be at most ${max_val:,.2f}")
                continue
            return result
        except ValueError:
            print("  Please enter a valid dollar amount (e.g., 4000 or 4,000)")


def prompt_yes_no(prompt: str, default: bool = False) -> bool:
    """Prompt for a yes/no answer."""
    default_str = "Y/n" if default else "y/N"
    while True:
        value = input(f"{prompt} [{default_str}]: ").strip().lower()
        if value == "":
            return default
        if value in ('y', 'yes'):
            return True
        if value in ('n', 'no'):
            return False
        print("  Please enter 'y' or 'n'")


def prompt_string(prompt: str, default: Optional[str] = None) -> str:
    """Prompt for a string value."""
    default_str = f" [{default}]" if default else ""
    value = input(f"{prompt}{default_str}: ").strip()
    if value == "" and default:
        return default
    return value


def prompt_choice(prompt: str, choices: list[str], default: Optional[str] = None) -> str:
    """Prompt for a choice from a list of options."""
    choices_str = "/".join(choices)
    default_str = f" [{default}]" if default else ""
    while True:
        value = input(f"{prompt} ({choices_str}){default_str}: ").strip()
        if value == "" and default:
            return default
        # Case-insensitive match
        for choice in choices:
            if value.lower() == choice.lower():
                return choice
        print(f"  Please enter one of: {choices_str}")


def prompt_zip(prompt: str, default: Optional[str] = None) -> str:
    """Prompt for a 5-digit ZIP code."""
    while True:
        value = prompt_string(prompt, default)
        if ZIP_REGEX.match(value):
            return value
        print("  Please enter a valid 5-digit ZIP code")


def prompt_deductions(kind: str, existing: list) -> list[dict]:
    """Prompt for a list of deduction lines.

    Existing lines are offered one by one and may be kept or dropped, then new
    lines are added until the user stops or the line limit is reached.
    """
    deductions = []
    for d in existing:
        if not isinstance(d, dict):
            continue
        unit = '%' if d.get('type') == 'percentage' else ' $'
        if prompt_yes_no(f"Keep {kind} deduction '{d.get('name')}' ({d.get('value')}{unit})?", default=True):
            deductions.append(d)

    while len(deductions) < MAX_DEDUCTION_LINES and prompt_yes_no(f"Add a {kind} deduction?", default=False):
        name = prompt_string("  Name (e.g., 401(k), HSA, Medical Premium)")[:100]
        if not name:
            print("  Name is required")
            continue
        deduction_type = prompt_choice("  Type", list(DEDUCTION_TYPES), default='fixed')
        if deduction_type == 'percentage':
            value = prompt_percent("  Percent of gross pay")
        else:
            value = prompt_currency("  Amount per paycheck", max_val=MAX_DEDUCTION_VALUE)
        deductions.append({'name': name, 'type': deduction_type, 'value': value})
    return deductions


def print_section(title: str) -> None:
    """Print a section header."""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)
    print()


def load_existing_spec(program_name: str, base_path: str) -> Optional[dict]:
    """Load an existing spec.json if it exists.

    Args:
        program_name: Name of the program folder
        base_path: Base path to the project directory

    Returns:
        The spec dictionary if it exists, None otherwise
    """
    spec_path = os.path.join(base_path, 'input-parameters', program_name, 'spec.json')
    if os.path.exists(spec_path):
        try:
            with open(spec_path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return None
    return None


def generate_spec(existing_spec: Optional[dict] = None) -> dict:
    """Interactive wizard to generate a spec.json configuration.

    Args:
        existing_spec: Optional existing spec to use for default values
    """
    current_year = datetime.now().year
    ex = existing_spec or {}

    spec: dict[str, Any] = {}

    # =========================================================================
    # PAYCHECK
    # =========================================================================
    print_section("Paycheck")

    spec['taxYear'] = prompt_int(
        "Tax year",
        default=ex.get('taxYear', current_year),
        min_val=2024,
        max_val=current_year + 5
    )

    spec['grossPay'] = prompt_currency(
        "Gross pay per paycheck",
        default=ex.get('grossPay'),
        min_val=0.01,
        max_val=MAX_GROSS_PAY
    )

    spec['payFrequency'] = prompt_choice(
        "Pay frequency",
        list(VALID_PAY_FREQUENCIES),
        default=ex.get('payFrequency', 'biweekly')
    )

    spec['zipCode'] = prompt_zip("Work ZIP code", default=ex.get('zipCode'))

    spec['filingStatus'] = prompt_choice(
        "Filing status",
        list(VALID_FILING_STATUSES),
        default=ex.get('filingStatus', 'single')
    )

    spec['allowances'] = prompt_int(
        "W-4 allowances",
        default=ex.get('allowances', 0),
        min_val=0,
        max_val=MAX_ALLOWANCES
    )

    # =========================================================================
    # DEDUCTIONS
    # =========================================================================
    print_section("Deductions")
    print("Pre-tax deductions reduce taxable income (401(k), HSA, FSA, premiums).")
    print("Post-tax deductions come out after taxes (Roth 401(k), Roth IRA, ESPP).")
    print()

    spec['preTaxDeductions'] = prompt_deductions('pre-tax', ex.get('preTaxDeductions', []))
    spec['postTaxDeductions'] = prompt_deductions('post-tax', ex.get('postTaxDeductions', []))

    # =========================================================================
    # EMPLOYER MATCH
    # =========================================================================
    print_section("Employer Match")

    ex_match = ex.get('employerMatch', {})
    if prompt_yes_no("Does your employer contribute to your retirement plan?", default=ex_match.get('enabled', True)):
        spec['employerMatch'] = {
            'enabled': True,
            'baseMatchPercent': prompt_percent(
                "Base contribution (paid regardless of yours)",
                default=ex_match.get('baseMatchPercent', 2.0)
            ),
            'matchRate': prompt_percent(
                "Match rate on your contributions",
                default=ex_match.get('matchRate', 50.0),
                max_val=200.0
            ),
            'matchUpToPercent': prompt_percent(
                "Matched up to this percent of pay",
                default=ex_match.get('matchUpToPercent', 6.0)
            ),
        }
    else:
        spec['employerMatch'] = {'enabled': False}

    # =========================================================================
    # WHAT-IF DEFAULTS
    # =========================================================================
    print_section("What-If Defaults")

    ex_what_if = ex.get('whatIf', {})
    variable_ids = [v.id for v in ADJUSTABLE_VARIABLES]
    variable = prompt_choice(
        "Variable to explore",
        variable_ids,
        default=ex_what_if.get('variable', '401k')
    )
    max_percent = next(v.max_percent for v in ADJUSTABLE_VARIABLES if v.id == variable)
    spec['whatIf'] = {
        'variable': variable,
        'adjustmentPercent': prompt_percent(
            "Contribution to try",
            default=ex_what_if.get('adjustmentPercent', 10.0),
            max_val=max_percent
        ),
        'baselinePercent': prompt_percent(
            "Current contribution",
            default=ex_what_if.get('baselinePercent', 0.0),
            max_val=max_percent
        ),
    }

    # =========================================================================
    # OPTIONAL PLANNING BLOCKS
    # =========================================================================
    ex_fire = ex.get('fire', {})
    if prompt_yes_no("Configure FIRE planning?", default='fire' in ex):
        print_section("FIRE")
        spec['fire'] = {
            'currentAge': prompt_int("Current age", default=ex_fire.get('currentAge', 30), min_val=16, max_val=100),
            'currentSavings': prompt_currency("Current invested savings", default=ex_fire.get('currentSavings', 0.0)),
            'annualExpenses': prompt_currency("Annual expenses in retirement", default=ex_fire.get('annualExpenses', 50000.0)),
            'expectedReturnPercent': prompt_percent("Expected annual return", default=ex_fire.get('expectedReturnPercent', 7.0)),
            'safeWithdrawalRatePercent': prompt_percent(
                "Safe withdrawal rate",
                default=ex_fire.get('safeWithdrawalRatePercent', 4.0)
            ),
        }
    elif 'fire' in ex:
        spec['fire'] = ex_fire

    ex_retirement = ex.get('retirement', {})
    if prompt_yes_no("Configure required minimum distributions?", default='retirement' in ex):
        print_section("Required Minimum Distributions")
        spec['retirement'] = {
            'accountBalance': prompt_currency("Tax-deferred account balance", default=ex_retirement.get('accountBalance', 1000000.0)),
            'currentAge': prompt_int("Current age", default=ex_retirement.get('currentAge', 73), min_val=50, max_val=120),
            'expectedReturnPercent': prompt_percent("Expected annual return", default=ex_retirement.get('expectedReturnPercent', 5.0)),
            'taxRatePercent': prompt_percent("Tax rate on distributions", default=ex_retirement.get('taxRatePercent', 22.0)),
            'projectionYears': prompt_int("Years to project", default=ex_retirement.get('projectionYears', 20), min_val=1, max_val=50),
        }
    elif 'retirement' in ex:
        spec['retirement'] = ex_retirement

    ex_real_estate = ex.get('realEstate', {})
    if prompt_yes_no("Configure a rental property?", default='realEstate' in ex):
        print_section("Real Estate")
        spec['realEstate'] = {
            'purchasePrice': prompt_currency("Purchase price", default=ex_real_estate.get('purchasePrice', 300000.0)),
            'downPaymentPercent': prompt_percent("Down payment", default=ex_real_estate.get('downPaymentPercent', 20.0)),
            'interestRatePercent': prompt_percent("Mortgage interest rate", default=ex_real_estate.get('interestRatePercent', 7.0)),
            'loanTermYears': prompt_int("Loan term in years", default=ex_real_estate.get('loanTermYears', 30), min_val=1, max_val=50),
            'monthlyRent': prompt_currency("Monthly rent", default=ex_real_estate.get('monthlyRent', 2000.0)),
            'propertyTaxRatePercent': prompt_percent("Property tax rate", default=ex_real_estate.get('propertyTaxRatePercent', 1.2)),
            'insuranceAnnual': prompt_currency("Annual insurance", default=ex_real_estate.get('insuranceAnnual', 1500.0)),
            'maintenancePercent': prompt_percent("Annual maintenance (% of price)", default=ex_real_estate.get('maintenancePercent', 1.0)),
            'vacancyRatePercent': prompt_percent("Vacancy rate", default=ex_real_estate.get('vacancyRatePercent', 5.0)),
            'appreciationRatePercent': prompt_percent(
                "Annual appreciation",
                default=ex_real_estate.get('appreciationRatePercent', 3.0)
            ),
        }
    elif 'realEstate' in ex:
        spec['realEstate'] = ex_real_estate

    return spec


def save_spec(spec: dict, program_name: str, base_path: str) -> str:
    """Save the spec to a JSON file.

    Args:
        spec: The specification dictionary
        program_name: Name for the program folder
        base_path: Base path to the project directory

    Returns:
        Path to the saved file
    """
    program_dir = os.path.join(base_path, 'input-parameters', program_name)
    os.makedirs(program_dir, exist_ok=True)

    spec_path = os.path.join(program_dir, 'spec.json')
    with open(spec_path, 'w') as f:
        json.dump(spec, f, indent=2)

    return spec_path


def list_existing_programs(base_path: str) -> list[str]:
    """List all existing programs in the input-parameters directory."""
    input_params_path = os.path.join(base_path, 'input-parameters')
    if not os.path.exists(input_params_path):
        return []

    programs = []
    for name in os.listdir(input_params_path):
        program_dir = os.path.join(input_params_path, name)
        spec_path = os.path.join(program_dir, 'spec.json')
        if os.path.isdir(program_dir) and os.path.exists(spec_path):
            programs.append(name)

    return sorted(programs)


def run_generator() -> Optional[str]:
    """Run the interactive generator and return the program name if successful."""
    try:
        base_path = os.path.normpath(os.path.join(os.path.dirname(__file__), '..'))

        print()
        print("╔════════════════════════════════════════════════════════════╗")
        print("║       Paycheck Planner - Configuration Generator          ║")
        print("╚════════════════════════════════════════════════════════════╝")
        print()

        existing_programs = list_existing_programs(base_path)
        if existing_programs:
            print("Existing programs:")
            for prog in existing_programs:
                print(f"  - {prog}")
            print()
            print("Enter an existing program name to update it, or a new name to create.")
        else:
            print("No existing programs found. Enter a name for your new program.")
        print()

        program_name = prompt_string(
            "Program name",
            default="mypaycheck"
        )

        # Clean up the name (remove spaces, special chars)
        program_name = "".join(c if c.isalnum() or c in '-_' else '_' for c in program_name)

        existing_spec = load_existing_spec(program_name, base_path)
        if existing_spec:
            print()
            print(f"Found existing program '{program_name}'. Values will be used as defaults.")
        else:
            print()
            print(f"Creating new program '{program_name}'.")

        spec = generate_spec(existing_spec)
        spec_path = save_spec(spec, program_name, base_path)

        print()
        print("╔════════════════════════════════════════════════════════════╗")
        print("║                    Configuration Saved!                    ║")
        print("╚════════════════════════════════════════════════════════════╝")
        print()
        print(f"  Saved to: {spec_path}")
        print()
        print("  To see your paycheck:")
        print(f"    python src/Program.py {program_name}")
        print()
        print("  Other modes:")
        print(f"    python src/Program.py {program_name} --mode WhatIf")
        print(f"    python src/Program.py {program_name} --mode EmployerMatch")
        print(f"    python src/Program.py {program_name} --mode Fire")
        print()

        return program_name

    except KeyboardInterrupt:
        print("\n\nCancelled. No changes made.")
        return None


if __name__ == "__main__":
    run_generator()
