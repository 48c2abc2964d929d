"""Tests for the MCP server module."""

import os
import sys
import json
import pytest
from unittest.mock import MagicMock, patch

# Add src and mcp-server to path for imports BEFORE importing mcp modules
MCP_SERVER_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server'))
SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src'))

if MCP_SERVER_PATH not in sys.path:
    sys.path.insert(0, MCP_SERVER_PATH)
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from mcp.types import Tool, TextContent

# Import server module - need to import from the mcp-server directory
import importlib.util
server_spec = importlib.util.spec_from_file_location("mcp_server", os.path.join(MCP_SERVER_PATH, "server.py"))
mcp_server = importlib.util.module_from_spec(server_spec)
server_spec.loader.exec_module(mcp_server)

EXPECTED_TOOLS = [
    'list_programs',
    'reload_programs',
    'calculate_paycheck',
    'list_adjustable_variables',
    'what_if',
    'employer_match',
    'fire_projection',
    'paycheck_waterfall',
    'yearly_projection',
    'compare_programs',
    'rmd_projection',
    'real_estate_investment',
    'mortgage_amortization',
    'rent_vs_buy',
    'affordability',
    'tradingview_webhook',
    'refresh_price',
    'generate_trade_plan',
    'portfolio_returns',
]


@pytest.fixture
def test_tools(input_dir):
    """Point the server at a temporary input-parameters directory."""
    mcp_server.tools = mcp_server.MultiProgramTools(
        os.path.dirname(input_dir), trades_path=os.path.join(os.path.dirname(input_dir), 'trades.json'))
    yield mcp_server.tools
    mcp_server.tools = None


async def call(name, arguments):
    result = await mcp_server.call_tool(name, arguments)
    assert len(result) == 1
    assert isinstance(result[0], TextContent)
    return json.loads(result[0].text)


class TestServerConfiguration:
    """Tests for server configuration and setup."""

    def test_server_name(self):
        assert mcp_server.server.name == "paycheck-planner"

    def test_program_param_schema(self):
        assert mcp_server.PROGRAM_PARAM['type'] == 'string'
        assert 'description' in mcp_server.PROGRAM_PARAM


class TestGetTools:
    """Tests for get_tools function."""

    def setup_method(self):
        mcp_server.tools = None

    def teardown_method(self):
        mcp_server.tools = None

    def test_get_tools_initializes_on_first_call(self):
        tools = mcp_server.get_tools()
        # Check by class name since we're using dynamic imports
        assert tools.__class__.__name__ == 'MultiProgramTools'

    def test_get_tools_returns_cached_instance(self):
        assert mcp_server.get_tools() is mcp_server.get_tools()

    @patch.dict(os.environ, {'PAYCHECK_PLANNER_PROGRAM': 'quickexample'})
    def test_get_tools_uses_env_default_program(self):
        assert mcp_server.get_tools().default_program == 'quickexample'


class TestListTools:
    """Tests for list_tools function."""

    @pytest.mark.asyncio
    async def test_list_tools_contains_expected_tools(self):
        tools = await mcp_server.list_tools()
        assert all(isinstance(t, Tool) for t in tools)
        assert [t.name for t in tools] == EXPECTED_TOOLS

    @pytest.mark.asyncio
    async def test_tools_have_descriptions_and_object_schemas(self):
        for tool in await mcp_server.list_tools():
            assert tool.description
            assert tool.inputSchema['type'] == 'object'

    @pytest.mark.asyncio
    async def test_required_arguments(self):
        tools = {t.name: t for t in await mcp_server.list_tools()}
        assert tools['compare_programs'].inputSchema['required'] == ['program1', 'program2']
        assert tools['tradingview_webhook'].inputSchema['required'] == ['payload']
        assert tools['refresh_price'].inputSchema['required'] == ['ticker']
        assert tools['generate_trade_plan'].inputSchema['required'] == ['ticker']
        assert tools['affordability'].inputSchema['required'] == []
        assert tools['what_if'].inputSchema['required'] == []

    @pytest.mark.asyncio
    async def test_what_if_variable_enum(self):
        tools = {t.name: t for t in await mcp_server.list_tools()}
        enum = tools['what_if'].inputSchema['properties']['variable']['enum']
        assert '401k' in enum
        assert 'student_loan' in enum


class TestCallTool:
    """Tests for call_tool function."""

    @pytest.mark.asyncio
    async def test_call_list_programs(self, test_tools):
        data = await call('list_programs', {})
        assert data['available_programs'] == ['sample', 'texas']

    @pytest.mark.asyncio
    async def test_call_calculate_paycheck(self, test_tools):
        data = await call('calculate_paycheck', {'program': 'texas'})
        assert data['program'] == 'texas'
        assert data['taxes']['stateTax'] == 0.0

    @pytest.mark.asyncio
    async def test_call_what_if(self, test_tools):
        data = await call('what_if', {'variable': 'hsa', 'percent': 4, 'include_sweep': True})
        assert data['variable']['id'] == 'hsa'
        assert data['result']['adjustment_percent'] == 4
        assert len(data['sweep']) == 9

    @pytest.mark.asyncio
    async def test_call_compare_programs(self, test_tools):
        data = await call('compare_programs', {'program1': 'sample', 'program2': 'texas'})
        assert 'summary' in data

    @pytest.mark.asyncio
    async def test_call_per_program_tools(self, test_tools):
        for name in ('employer_match', 'fire_projection', 'paycheck_waterfall', 'yearly_projection',
                     'rmd_projection', 'real_estate_investment', 'mortgage_amortization',
                     'rent_vs_buy', 'affordability'):
            data = await call(name, {'program': 'sample'})
            assert data['program'] == 'sample', name

    @pytest.mark.asyncio
    async def test_call_affordability_with_income(self, test_tools):
        data = await call('affordability', {'annual_income': 20000})
        assert data['annualIncome'] == 20000
        assert data['withinBudget'] is False

    @pytest.mark.asyncio
    async def test_call_generate_trade_plan(self, test_tools):
        test_tools._trade_plans = MagicMock()
        test_tools._trade_plans.handle.return_value = (400, {'error': 'Invalid action'})
        data = await call('generate_trade_plan', {'ticker': 'SPY', 'action': 'sell'})
        assert data == {'status': 400, 'error': 'Invalid action'}
        payload = test_tools._trade_plans.handle.call_args.args[0]
        assert payload['ticker'] == 'SPY'
        assert payload['action'] == 'sell'

    @pytest.mark.asyncio
    async def test_call_portfolio_returns_without_trades(self, test_tools):
        data = await call('portfolio_returns', {})
        assert data['hasRealData'] is False
        assert data['totalTrades'] == 0

    @pytest.mark.asyncio
    async def test_unknown_tool(self, test_tools):
        data = await call('get_tax_details', {})
        assert data == {'error': 'Unknown tool: get_tax_details'}

    @pytest.mark.asyncio
    async def test_errors_become_error_payloads(self, test_tools):
        data = await call('calculate_paycheck', {'program': 'nope'})
        assert "Program 'nope' not found" in data['error']

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, test_tools):
        data = await call('refresh_price', {})
        assert 'error' in data
