import sys
import argparse
import logging

import settings
from calc.plan_calculator import PlanCalculator
from calc.what_if import ADJUSTABLE_VARIABLES
from render.renderers import (
    BracketsRenderer,
    CompareRenderer,
    WhatIfRenderer,
    RENDERER_REGISTRY,
)
from services.llm_gateway import AIWithholdingProvider, LLMGatewayClient
from spec_generator import run_generator

logger = logging.getLogger(__name__)


def build_renderer(args, calculator: PlanCalculator, tax_year: int):
    """Instantiate the renderer for --mode, passing the options it needs."""
    if args.mode == 'WhatIf':
        return WhatIfRenderer(args.variable, args.percent, args.baseline)
    if args.mode == 'Compare':
        if not args.compare:
            raise ValueError("--compare <program> is required for Compare mode")
        return CompareRenderer(calculator.load_plan(args.compare))
    if args.mode == 'Brackets':
        return BracketsRenderer(calculator.paycheck_calculator(tax_year))
    return RENDERER_REGISTRY[args.mode]()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Paycheck calculator and contribution what-if planner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  Paycheck          Gross-to-net breakdown of one paycheck (default)
  WhatIf            Impact of a contribution change on net pay
  EmployerMatch     Employer retirement match per paycheck and per year
  Fire              FIRE numbers and timeline from paycheck savings
  Waterfall         Step-by-step flow from gross to net pay
  YearlyProjection  Paycheck annualized over the pay periods of a year
  Brackets          How taxable income fills the federal brackets
  Compare           Side-by-side comparison with another program
  RMD               Required minimum distribution projection
  RealEstate        Rental property returns, rent vs buy and affordability
  PortfolioReturns  Win rate, Sharpe, drawdown and other stats of closed trades

Examples:
  python src/Program.py example
  python src/Program.py example --mode WhatIf --variable 401k --percent 10
  python src/Program.py example --mode WhatIf --variable hsa --percent 5 --baseline 2
  python src/Program.py example --mode Compare --compare quickexample
  python src/Program.py --generate
        """
    )
    parser.add_argument('program_name', nargs='?', help='Name of the program (folder in input-parameters)')
    parser.add_argument('--mode', '-m',
                        choices=list(RENDERER_REGISTRY.keys()),
                        default='Paycheck',
                        help='Output mode (default: Paycheck)')
    parser.add_argument('--variable',
                        choices=[v.id for v in ADJUSTABLE_VARIABLES],
                        help='Variable to adjust in WhatIf mode')
    parser.add_argument('--percent', type=float,
                        help='Contribution percent of gross pay in WhatIf mode')
    parser.add_argument('--baseline', type=float,
                        help='Current contribution percent the WhatIf change is measured from')
    parser.add_argument('--compare', '-c',
                        help='Second program to compare against in Compare mode')
    parser.add_argument('--ai', action='store_true',
                        help='Estimate withholding with the LLM payroll gateway (falls back to flat rates)')
    parser.add_argument('--generate', '-g',
                        action='store_true',
                        help='Launch interactive wizard to create a new spec.json configuration')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)
    settings.setup_logging('DEBUG' if args.verbose else None)

    # If --generate flag is set, run the interactive generator
    if args.generate:
        program_name = run_generator()
        if program_name is None:
            sys.exit(0)
        run_plan = input("Would you like to run the plan now? [Y/n]: ").strip().lower()
        if run_plan in ('', 'y', 'yes'):
            args.program_name = program_name
        else:
            sys.exit(0)

    program_name = args.program_name or settings.default_program()
    if not program_name:
        parser.error("program_name is required (or use --generate to create a new configuration)")

    provider = AIWithholdingProvider(LLMGatewayClient()) if args.ai else None
    calculator = PlanCalculator(provider)
    try:
        data = calculator.load_plan(program_name)
        renderer = build_renderer(args, calculator, data.tax_year)
    except FileNotFoundError as e:
        print(str(e))
        sys.exit(1)
    except ValueError as e:
        logger.debug("Invalid program %s", program_name, exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)

    renderer.render(data)


if __name__ == "__main__":
    main()
