#!/usr/bin/env python3
"""MCP Server for Paycheck Planner.

This server exposes paycheck, what-if and planning calculations as MCP
tools, allowing AI assistants to answer questions about a user's pay.
"""

import os
import sys
import json
import asyncio
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

import settings
from calc.what_if import ADJUSTABLE_VARIABLES
from tools import MultiProgramTools


# Create the MCP server
server = Server("paycheck-planner")

# Global tools instance (initialized on first use)
tools: MultiProgramTools | None = None


def get_tools() -> MultiProgramTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        base_path = os.path.join(os.path.dirname(__file__), '..')
        tools = MultiProgramTools(base_path, settings.default_program())
    return tools


# Common program parameter schema
PROGRAM_PARAM = {
    "type": "string",
    "description": "The program name (folder in input-parameters). If not specified, uses the default program. Use list_programs to see available programs."
}

PROGRAM_ONLY_SCHEMA = {
    "type": "object",
    "properties": {
        "program": PROGRAM_PARAM
    },
    "required": []
}

NO_ARGS_SCHEMA = {
    "type": "object",
    "properties": {},
    "required": []
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available paycheck planning tools."""
    return [
        Tool(
            name="list_programs",
            description="List all available paycheck programs with their gross pay, pay frequency and net pay.",
            inputSchema=NO_ARGS_SCHEMA
        ),
        Tool(
            name="reload_programs",
            description="Reload all programs from disk. Use this after adding, modifying, or removing program spec.json files.",
            inputSchema=NO_ARGS_SCHEMA
        ),
        Tool(
            name="calculate_paycheck",
            description="Gross-to-net breakdown of one paycheck: pre-tax deductions, federal, state, local, Social Security and Medicare withholding, post-tax deductions and net pay.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="list_adjustable_variables",
            description="List the contribution variables the what_if tool can adjust (401k, Roth 401k, HSA, FSA, commuter benefits and others) with their limits.",
            inputSchema=NO_ARGS_SCHEMA
        ),
        Tool(
            name="what_if",
            description="Project how contributing a percent of gross pay to a variable changes net pay, using marginal federal and state rates. Reports tax savings, net cost, new net pay and employer match.",
            inputSchema={
                "type": "object",
                "properties": {
                    "variable": {
                        "type": "string",
                        "enum": [v.id for v in ADJUSTABLE_VARIABLES],
                        "description": "Variable to adjust. Defaults to the program's whatIf.variable."
                    },
                    "percent": {
                        "type": "number",
                        "description": "Contribution as percent of gross pay. Defaults to the program's whatIf.adjustmentPercent."
                    },
                    "baseline": {
                        "type": "number",
                        "description": "Percent contributed today; the change is measured from it. Defaults to whatIf.baselinePercent for the program's whatIf.variable and 0 for any other variable."
                    },
                    "include_sweep": {
                        "type": "boolean",
                        "description": "Also return results for every whole percent in the variable's range."
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="employer_match",
            description="Employer retirement match per paycheck, per year and by month, and whether match is being left on the table.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="fire_projection",
            description="FIRE numbers (lean, regular, fat, coast), years to reach each and a portfolio projection from the paycheck's savings.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="paycheck_waterfall",
            description="Step-by-step flow from gross pay to net pay with the remaining amount and percent of gross at each step.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="yearly_projection",
            description="The paycheck annualized over the year's pay periods, with Social Security capped at the wage base.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="compare_programs",
            description="Compare the paychecks of two programs side by side, per paycheck and per year.",
            inputSchema={
                "type": "object",
                "properties": {
                    "program1": {
                        "type": "string",
                        "description": "First program name to compare"
                    },
                    "program2": {
                        "type": "string",
                        "description": "Second program name to compare"
                    }
                },
                "required": ["program1", "program2"]
            }
        ),
        Tool(
            name="rmd_projection",
            description="Required minimum distributions from the program's retirement block using the IRS Uniform Lifetime Table.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="real_estate_investment",
            description="Rental property analysis from the program's realEstate block: cash flow, NOI, cap rate, cash-on-cash and a 10-year projection.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="mortgage_amortization",
            description="Yearly principal, interest and balance for the mortgage in the program's realEstate block.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="rent_vs_buy",
            description="Ten-year wealth comparison of renting (investing the down payment) against buying the home in the program's realEstate block.",
            inputSchema=PROGRAM_ONLY_SCHEMA
        ),
        Tool(
            name="affordability",
            description="Maximum home price under the realEstate block's debt-to-income limit and under the 28% front-end ratio, and whether its purchase price fits.",
            inputSchema={
                "type": "object",
                "properties": {
                    "annual_income": {
                        "type": "number",
                        "description": "Gross annual income. Defaults to the program's annual gross pay."
                    },
                    "program": PROGRAM_PARAM
                },
                "required": []
            }
        ),
        Tool(
            name="tradingview_webhook",
            description="Process a TradingView alert: normalize the signal and record a backtest row when a user_id is present.",
            inputSchema={
                "type": "object",
                "properties": {
                    "payload": {
                        "type": "object",
                        "description": "Alert body with symbol, action and optional price, strategy, user_id, quantity, timeframe, entry_condition, exit_condition"
                    }
                },
                "required": ["payload"]
            }
        ),
        Tool(
            name="refresh_price",
            description="Fetch the live price, change, high, low and previous close for a stock ticker.",
            inputSchema={
                "type": "object",
                "properties": {
                    "ticker": {
                        "type": "string",
                        "description": "Ticker symbol, 1-10 letters"
                    }
                },
                "required": ["ticker"]
            }
        ),
        Tool(
            name="generate_trade_plan",
            description="AI trade plan for a ticker from live market data: entry, stop-loss, three take-profit levels, sentiment and a position size from the portfolio and risk budget. Returns the HTTP-style status with the plan or an error.",
            inputSchema={
                "type": "object",
                "properties": {
                    "ticker": {
                        "type": "string",
                        "description": "Ticker symbol, 1-10 letters"
                    },
                    "action": {
                        "type": "string",
                        "enum": ["analyze", "refresh_price"],
                        "description": "analyze (default) builds a plan; refresh_price only fetches the live quote."
                    },
                    "portfolio_size": {
                        "type": "number",
                        "description": "Portfolio size in dollars. Defaults to 25000."
                    },
                    "risk_percent": {
                        "type": "number",
                        "description": "Percent of the portfolio risked on the trade. Defaults to 1."
                    }
                },
                "required": ["ticker"]
            }
        ),
        Tool(
            name="portfolio_returns",
            description="Win rate, average win and loss, profit factor, annualized return and volatility, Sharpe, Sortino, max drawdown and Calmar of the closed trades in the trades file.",
            inputSchema={
                "type": "object",
                "properties": {
                    "risk_free_rate": {
                        "type": "number",
                        "description": "Annual risk-free rate as a fraction. Defaults to 0.05."
                    }
                },
                "required": []
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        pp_tools = get_tools()
        program = arguments.get("program")

        if name == "list_programs":
            result = pp_tools.list_programs()
        elif name == "reload_programs":
            result = pp_tools.reload_programs()
        elif name == "calculate_paycheck":
            result = pp_tools.calculate_paycheck(program)
        elif name == "list_adjustable_variables":
            result = pp_tools.list_adjustable_variables()
        elif name == "what_if":
            result = pp_tools.what_if(
                arguments.get("variable"),
                arguments.get("percent"),
                arguments.get("baseline"),
                bool(arguments.get("include_sweep", False)),
                program
            )
        elif name == "employer_match":
            result = pp_tools.employer_match(program)
        elif name == "fire_projection":
            result = pp_tools.fire_projection(program)
        elif name == "paycheck_waterfall":
            result = pp_tools.paycheck_waterfall(program)
        elif name == "yearly_projection":
            result = pp_tools.yearly_projection(program)
        elif name == "compare_programs":
            result = pp_tools.compare_programs(arguments["program1"], arguments["program2"])
        elif name == "rmd_projection":
            result = pp_tools.rmd_projection(program)
        elif name == "real_estate_investment":
            result = pp_tools.real_estate_investment(program)
        elif name == "mortgage_amortization":
            result = pp_tools.mortgage_amortization(program)
        elif name == "rent_vs_buy":
            result = pp_tools.rent_vs_buy(program)
        elif name == "affordability":
            result = pp_tools.affordability(arguments.get("annual_income"), program)
        elif name == "tradingview_webhook":
            result = pp_tools.tradingview_webhook(arguments["payload"])
        elif name == "refresh_price":
            result = pp_tools.refresh_price(arguments["ticker"])
        elif name == "generate_trade_plan":
            result = pp_tools.generate_trade_plan(
                arguments["ticker"],
                arguments.get("action"),
                arguments.get("portfolio_size"),
                arguments.get("risk_percent")
            )
        elif name == "portfolio_returns":
            result = pp_tools.portfolio_returns(arguments.get("risk_free_rate"))
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    settings.setup_logging()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
