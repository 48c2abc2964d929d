#!/usr/bin/env python3
"""Interactive command shell for paycheck what-if exploration.

This module provides an interactive shell that loads a paycheck program
at startup and lets you query its fields, change inputs and see how a
contribution change would move your net pay.

Usage:
    python src/shell.py [program_name]

Commands:
    load <program_name>             - Load a paycheck program
    paycheck                        - Show the gross-to-net breakdown
    variables                       - List adjustable contribution variables
    whatif <variable> <pct> [base]  - Project a contribution change
    sweep <variable>                - Table of a variable across its range
    match                           - Employer match projection
    fire                            - FIRE targets and timeline
    waterfall                       - Step-by-step gross-to-net flow
    get <fields>                    - Query fields from the paycheck
    fields                          - List all available fields
    set <field> <value>             - Change an input and recompute
    generate                        - Create or update a program
    help                            - Show help message
    exit/quit                       - Exit the shell

Examples:
    > whatif 401k 10
    > whatif hsa 5 2
    > get net_pay, total_taxes
    > set gross_pay 4500
"""

import sys
import os
import cmd
import copy
import readline

# Configure readline for tab completion
# This must be done before the cmd.Cmd class is used
try:
    if 'libedit' in readline.__doc__:
        # macOS uses libedit which has different syntax
        readline.parse_and_bind("bind ^I rl_complete")
    else:
        readline.parse_and_bind("tab: complete")
except (AttributeError, TypeError):
    pass  # readline might not be fully available

# Add src directory to path for imports
sys.path.insert(0, os.path.dirname(__file__))

import settings
from calc.plan_calculator import PlanCalculator, list_programs
from calc.what_if import ADJUSTABLE_VARIABLES
from model.PlanData import PlanData
from model.field_metadata import FIELD_METADATA, get_short_name, get_description
from render.renderers import (
    EmployerMatchRenderer,
    FireRenderer,
    PaycheckRenderer,
    WaterfallRenderer,
    WhatIfRenderer,
    WhatIfSweepRenderer,
)
from spec_generator import run_generator

# Fields that 'set' may change, mapped to their spec.json key
SETTABLE_FIELDS = {
    'gross_pay': ('grossPay', float),
    'zip_code': ('zipCode', str),
    'pay_frequency': ('payFrequency', str),
    'filing_status': ('filingStatus', str),
    'allowances': ('allowances', int),
    'tax_year': ('taxYear', int),
}

FIELD_CATEGORIES = {
    "Program": ["tax_year", "zip_code", "state_name", "local_tax_name", "filing_status",
                "allowances", "pay_frequency", "pay_periods_per_year"],
    "Paycheck": ["gross_pay", "pre_tax_deductions", "taxable_income", "federal_tax", "state_tax",
                 "local_tax", "social_security", "medicare", "total_taxes", "post_tax_deductions", "net_pay"],
    "Yearly": ["annual_gross", "annual_pre_tax_deductions", "annual_taxable_income", "annual_federal_tax",
               "annual_state_tax", "annual_local_tax", "annual_social_security", "annual_medicare",
               "annual_total_taxes", "effective_tax_rate", "annual_post_tax_deductions", "annual_net_pay",
               "monthly_net_pay"],
}

_calculator = PlanCalculator()


def load_plan(program_name: str) -> PlanData:
    """Load and calculate plan data for the given program.

    Args:
        program_name: Name of the program folder in input-parameters

    Returns:
        Calculated PlanData object
    """
    return _calculator.load_plan(program_name)


def format_value(value) -> str:
    """Format a value for display."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    elif isinstance(value, float):
        if value == 0:
            return "$0.00"
        elif abs(value) < 1:
            return f"{value:.4f}"
        else:
            return f"${value:,.2f}"
    elif isinstance(value, int):
        return str(value)
    else:
        return str(value)


class PaycheckShell(cmd.Cmd):
    """Interactive shell for paycheck what-if exploration."""

    intro = """
Paycheck Planner Interactive Shell
==================================
Type 'help' for available commands.
Type 'fields' to see available data fields.
Type 'exit' or 'quit' to exit.
"""
    prompt = '> '

    def __init__(self, plan_data: PlanData = None, program_name: str = None, calculator: PlanCalculator = None):
        super().__init__()
        self.plan_data = plan_data
        self.program_name = program_name
        self.calculator = calculator or _calculator
        self.available_fields = list(FIELD_METADATA.keys())
        self._update_intro()

    def preloop(self):
        """Set up readline before entering the command loop."""
        try:
            # Space and comma separate arguments
            readline.set_completer_delims(' \t\n,')
            if 'libedit' in (readline.__doc__ or ''):
                readline.parse_and_bind("bind ^I rl_complete")
            else:
                readline.parse_and_bind("tab: complete")
        except (AttributeError, TypeError):
            pass  # readline might not be fully available

    def _update_intro(self):
        """Update the intro message based on current state."""
        if self.plan_data and self.program_name:
            result = self.plan_data.result
            self.intro = f"""
Paycheck Planner Interactive Shell
==================================
Program: {self.program_name} ({self.plan_data.tax_year}, {self.plan_data.request.pay_frequency})
Gross pay: {format_value(result.gross_pay)}   Net pay: {format_value(result.net_pay)}

Type 'help' for available commands.
Type 'fields' to see available data fields.
Type 'exit' or 'quit' to exit.
"""
        else:
            self.intro = """
Paycheck Planner Interactive Shell
==================================
No program loaded. Use 'load <program_name>' or 'generate' to get started.

Type 'help' for available commands.
Type 'exit' or 'quit' to exit.
"""

    def _require_plan(self) -> bool:
        """Check if a plan is loaded. Returns True if loaded, False otherwise."""
        if self.plan_data is None:
            print("No program loaded. Use 'load <program_name>' or 'generate' first.")
            return False
        return True

    def do_load(self, arg: str):
        """Load a paycheck program.

        Usage: load <program_name>

        If no program name is given and a program is already loaded, reloads it.
        """
        program_name = arg.strip() if arg.strip() else self.program_name

        if not program_name:
            print("Please specify a program name.")
            print("Available programs:")
            for item in list_programs():
                print(f"  - {item}")
            return

        try:
            print(f"Loading program '{program_name}'...")
            self.plan_data = self.calculator.load_plan(program_name)
            self.program_name = program_name
            print("Program loaded successfully!")
            print(f"Net pay: {format_value(self.plan_data.result.net_pay)} per paycheck")
        except FileNotFoundError as e:
            print(f"Error: {e}")
        except ValueError as e:
            print(f"Error loading program: {e}")

    def do_paycheck(self, arg: str):
        """Show the gross-to-net breakdown of the loaded program."""
        if not self._require_plan():
            return
        PaycheckRenderer().render(self.plan_data)

    def do_variables(self, arg: str):
        """List the contribution variables that whatif and sweep accept."""
        print("\nAdjustable variables:")
        print("=" * 70)
        for v in ADJUSTABLE_VARIABLES:
            match = " (employer match)" if v.has_employer_match else ""
            print(f"  {v.id:<10} {v.label:<18} {v.category:<9} 0-{v.max_percent:g}%{match}")
            if v.description:
                print(f"  {'':<10} {v.description}")
        print()

    def do_whatif(self, arg: str):
        """Project the effect of contributing a percent of gross pay.

        Usage: whatif <variable> <percent> [baseline_percent]

        The baseline is what you contribute today; the change is measured
        from it. Without one, the program's whatIf baseline is used for its
        own variable and 0 for any other. Use 'variables' to list the ids.

        Examples:
            whatif 401k 10
            whatif hsa 5 2
        """
        if not self._require_plan():
            return
        parts = arg.split()
        if len(parts) < 2:
            print("Usage: whatif <variable> <percent> [baseline_percent]")
            return
        try:
            percent = float(parts[1])
            baseline = float(parts[2]) if len(parts) > 2 else None
        except ValueError:
            print("Error: percent and baseline must be numbers")
            return
        try:
            WhatIfRenderer(parts[0], percent, baseline).render(self.plan_data)
        except ValueError as e:
            print(f"Error: {e}")

    def do_sweep(self, arg: str):
        """Show a variable's what-if results across its whole range.

        Usage: sweep <variable> [baseline_percent]
        """
        if not self._require_plan():
            return
        parts = arg.split()
        if not parts:
            print("Usage: sweep <variable> [baseline_percent]")
            return
        try:
            baseline = float(parts[1]) if len(parts) > 1 else None
            WhatIfSweepRenderer(parts[0], baseline).render(self.plan_data)
        except ValueError as e:
            print(f"Error: {e}")

    def do_match(self, arg: str):
        """Show the employer match projection for the loaded program."""
        if not self._require_plan():
            return
        EmployerMatchRenderer().render(self.plan_data)

    def do_fire(self, arg: str):
        """Show FIRE targets and timeline for the loaded program."""
        if not self._require_plan():
            return
        try:
            FireRenderer().render(self.plan_data)
        except ValueError as e:
            print(f"Error: {e}")

    def do_waterfall(self, arg: str):
        """Show how gross pay flows down to net pay."""
        if not self._require_plan():
            return
        WaterfallRenderer().render(self.plan_data)

    def do_get(self, arg: str):
        """Query field(s) from the loaded paycheck.

        Usage: get <fields>

        Arguments:
            fields - Comma-separated list of field names

        Examples:
            get net_pay
            get federal_tax, state_tax, total_taxes
        """
        if not self._require_plan():
            return

        field_names = [f.strip() for f in arg.split(',') if f.strip()]
        if not field_names:
            print("Error: Please specify at least one field to query.")
            print("Usage: get <fields>")
            print("Example: get net_pay, total_taxes")
            return

        values = self.plan_data.fields()
        invalid_fields = [f for f in field_names if f not in values]
        if invalid_fields:
            print(f"Error: Unknown field(s): {', '.join(invalid_fields)}")
            print("Use 'fields' command to see available field names.")
            return

        width = max(len(get_short_name(f)) for f in field_names)
        print()
        for field_name in field_names:
            print(f"  {get_short_name(field_name):<{width}}  {format_value(values[field_name]):>16}")
        print()

    def do_fields(self, arg: str):
        """List all available fields that can be queried.

        Usage: fields [field_name]

        If a field name is provided, shows detailed info for that field.
        Otherwise, shows all fields grouped by category.
        """
        if arg.strip():
            field_name = arg.strip()
            info = FIELD_METADATA.get(field_name)
            if info is None:
                print(f"Error: Unknown field '{field_name}'")
                print("Use 'fields' without arguments to see all available fields.")
                return
            print(f"\n{field_name}:")
            print(f"  Short name: {info.short_name}")
            print(f"  Description: {info.description}")
            if field_name in SETTABLE_FIELDS:
                print("  Settable: yes")
            print()
            return

        print("\nAvailable fields:")
        print("=" * 70)
        for category, names in FIELD_CATEGORIES.items():
            print(f"\n{category}:")
            for name in names:
                marker = "*" if name in SETTABLE_FIELDS else " "
                print(f" {marker}{name:<28} [{get_short_name(name):<15}] {get_description(name)}")
        print("\n  * can be changed with 'set'")
        print()

    def do_set(self, arg: str):
        """Change a paycheck input and recompute.

        Usage: set <field> <value>

        Settable fields: gross_pay, zip_code, pay_frequency, filing_status,
        allowances, tax_year. Changes apply to this session only; they are
        not written back to spec.json.

        Examples:
            set gross_pay 4500
            set zip_code 10001
            set pay_frequency monthly
        """
        if not self._require_plan():
            return
        parts = arg.split(None, 1)
        if len(parts) != 2:
            print("Usage: set <field> <value>")
            return
        field_name, raw = parts[0], parts[1].strip()
        if field_name not in SETTABLE_FIELDS:
            print(f"Error: '{field_name}' cannot be set. Settable: {', '.join(SETTABLE_FIELDS)}")
            return

        key, convert = SETTABLE_FIELDS[field_name]
        try:
            value = convert(raw)
        except ValueError:
            print(f"Error: invalid value '{raw}' for {field_name}")
            return

        spec = copy.deepcopy(self.plan_data.spec)
        spec[key] = value
        previous_net = self.plan_data.result.net_pay
        try:
            self.plan_data = self.calculator.calculate(spec, self.program_name)
        except ValueError as e:
            print(f"Error: {e}")
            return

        new_net = self.plan_data.result.net_pay
        print(f"{field_name} = {format_value(value)}")
        print(f"Net pay: {format_value(previous_net)} -> {format_value(new_net)} ({new_net - previous_net:+,.2f})")

    def do_generate(self, arg: str):
        """Launch the interactive wizard to create or update a program.

        Usage: generate

        After generating a program, you will be prompted to load it.
        """
        print()
        program_name = run_generator()
        if program_name:
            print()
            reload_choice = input(f"Would you like to load '{program_name}' now? [Y/n]: ").strip().lower()
            if reload_choice in ('', 'y', 'yes'):
                self.do_load(program_name)

    def do_help(self, arg: str):
        """Show help for available commands."""
        if arg:
            super().do_help(arg)
        else:
            print("""
Available Commands:
==================

  load [program_name]
      Load a paycheck program. Shows available programs if none specified.

  paycheck
      Show the gross-to-net breakdown.

  variables
      List the contribution variables that whatif and sweep accept.

  whatif <variable> <percent> [baseline_percent]
      Project contributing <percent> of gross pay, measured from the
      baseline you contribute today.

      Examples:
        whatif 401k 10
        whatif hsa 5 2

  sweep <variable> [baseline_percent]
      Table of what-if results across the variable's range.

  match
      Employer match per paycheck and per year.

  fire
      FIRE numbers and timeline from your paycheck savings.

  waterfall
      Step-by-step flow from gross to net pay.

  get <fields>
      Query one or more comma-separated fields.

  fields [field_name]
      List all available field names, or details for one field.

  set <field> <value>
      Change gross_pay, zip_code, pay_frequency, filing_status,
      allowances or tax_year and recompute.

  generate
      Launch the interactive wizard to create or update a program.

  help [command]
      Show this help message or help for a specific command.

  exit, quit
      Exit the shell.
""")

    def do_exit(self, arg: str):
        """Exit the shell."""
        print("Goodbye!")
        return True

    def do_quit(self, arg: str):
        """Exit the shell."""
        return self.do_exit(arg)

    def do_EOF(self, arg: str):
        """Handle Ctrl+D to exit."""
        print()
        return self.do_exit(arg)

    def emptyline(self):
        """Do nothing on empty line."""
        pass

    def default(self, line: str):
        """Handle unknown commands."""
        print(f"Unknown command: {line}")
        print("Type 'help' for available commands.")

    def _complete_fields(self, text: str, names: list) -> list:
        # Case-insensitive substring match
        if not text:
            return list(names)
        text_lower = text.lower()
        return [f for f in names if text_lower in f.lower()]

    def complete_get(self, text, line, begidx, endidx):
        """Tab completion for the get command."""
        return self._complete_fields(text, self.available_fields)

    def complete_fields(self, text, line, begidx, endidx):
        """Tab completion for the fields command."""
        return self._complete_fields(text, self.available_fields)

    def complete_set(self, text, line, begidx, endidx):
        """Tab completion for the set command (first argument only)."""
        if len(line[:begidx].split()) > 1:
            return []
        return self._complete_fields(text, SETTABLE_FIELDS.keys())

    def _complete_variable(self, text, line, begidx):
        if len(line[:begidx].split()) > 1:
            return []
        return [v.id for v in ADJUSTABLE_VARIABLES if v.id.startswith(text)]

    def complete_whatif(self, text, line, begidx, endidx):
        """Tab completion for the whatif command."""
        return self._complete_variable(text, line, begidx)

    def complete_sweep(self, text, line, begidx, endidx):
        """Tab completion for the sweep command."""
        return self._complete_variable(text, line, begidx)

    def complete_load(self, text, line, begidx, endidx):
        """Tab completion for the load command."""
        return [p for p in list_programs() if p.startswith(text)]

    def complete_help(self, text, line, begidx, endidx):
        """Tab completion for the help command."""
        commands = ['load', 'paycheck', 'variables', 'whatif', 'sweep', 'match', 'fire', 'waterfall',
                    'get', 'fields', 'set', 'generate', 'exit', 'quit']
        return [c for c in commands if c.startswith(text)]


def main():
    settings.setup_logging()
    program_name = sys.argv[1] if len(sys.argv) > 1 else settings.default_program()

    if program_name:
        try:
            print(f"Loading program '{program_name}'...")
            plan_data = load_plan(program_name)
            print("Program loaded successfully!")
        except FileNotFoundError as e:
            print(f"Error: {e}")
            sys.exit(1)
        except ValueError as e:
            print(f"Error loading program: {e}")
            sys.exit(1)
        shell = PaycheckShell(plan_data, program_name)
    else:
        # Start shell without a loaded program
        shell = PaycheckShell()
    shell.cmdloop()


if __name__ == "__main__":
    main()
