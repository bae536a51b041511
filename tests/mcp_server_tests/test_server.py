"""Tests for the MCP server module."""

import os
import sys
import json
import pytest
from unittest.mock import patch

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

ENV = {'ROTH_PLANNER_CLIENT': 'example', 'ROTH_PLANNER_START_YEAR': '2026'}


class TestServerConfiguration:
    """Tests for server configuration and setup."""

    def test_server_name(self):
        assert mcp_server.server.name == "roth-conversion-planner"

    def test_client_param_schema(self):
        assert mcp_server.CLIENT_PARAM['type'] == 'string'
        assert 'description' in mcp_server.CLIENT_PARAM


class TestGetTools:
    """Tests for get_tools function."""

    def setup_method(self):
        mcp_server.tools = None

    def teardown_method(self):
        mcp_server.tools = None

    @patch.dict(os.environ, ENV)
    def test_get_tools_initializes_on_first_call(self):
        tools = mcp_server.get_tools()
        assert tools is not None
        # Check by class name since we're using dynamic imports
        assert tools.__class__.__name__ == 'MultiClientTools'

    @patch.dict(os.environ, ENV)
    def test_get_tools_returns_cached_instance(self):
        assert mcp_server.get_tools() is mcp_server.get_tools()

    @patch.dict(os.environ, ENV)
    def test_get_tools_uses_env_settings(self):
        tools = mcp_server.get_tools()
        assert tools.default_client == 'example'
        assert tools.start_year == 2026


class TestListTools:
    """Tests for list_tools function."""

    @pytest.mark.asyncio
    async def test_list_tools_contains_expected_tools(self):
        tools = await mcp_server.list_tools()
        assert all(isinstance(t, Tool) for t in tools)
        assert [t.name for t in tools] == [
            'list_clients',
            'reload_clients',
            'list_products',
            'run_projection',
            'compare_strategies',
            'run_sensitivity',
            'analyze_breakeven',
            'analyze_widow_penalty',
            'get_year_detail',
        ]

    @pytest.mark.asyncio
    async def test_tools_have_descriptions_and_schemas(self):
        for tool in await mcp_server.list_tools():
            assert tool.description
            assert tool.inputSchema['type'] == 'object'

    @pytest.mark.asyncio
    async def test_client_tools_accept_client(self):
        for tool in await mcp_server.list_tools():
            if tool.name not in ('list_clients', 'reload_clients', 'list_products'):
                assert 'client' in tool.inputSchema['properties']

    @pytest.mark.asyncio
    async def test_get_year_detail_requires_year(self):
        tools = await mcp_server.list_tools()
        detail = next(t for t in tools if t.name == 'get_year_detail')
        assert detail.inputSchema['required'] == ['year']


class TestCallTool:
    """Tests for call_tool function."""

    def setup_method(self):
        mcp_server.tools = None

    def teardown_method(self):
        mcp_server.tools = None

    async def call(self, name, arguments):
        with patch.dict(os.environ, ENV):
            result = await mcp_server.call_tool(name, arguments)
        assert len(result) == 1
        assert isinstance(result[0], TextContent)
        assert result[0].type == 'text'
        return json.loads(result[0].text)

    @pytest.mark.asyncio
    async def test_call_list_clients(self):
        data = await self.call('list_clients', {})
        assert 'example' in data['available_clients']

    @pytest.mark.asyncio
    async def test_call_run_projection(self):
        data = await self.call('run_projection', {'client': 'example', 'include_years': False})
        assert data['client'] == 'example'
        assert 'break_even_age' in data
        assert 'baseline' not in data

    @pytest.mark.asyncio
    async def test_call_get_year_detail(self):
        data = await self.call('get_year_detail', {'year': 2027})
        assert data['year'] == 2027
        assert data['strategy']['age'] == 63

    @pytest.mark.asyncio
    async def test_call_analyze_breakeven(self):
        data = await self.call('analyze_breakeven', {})
        assert 'sustained_break_even_age' in data

    @pytest.mark.asyncio
    async def test_call_list_products(self):
        data = await self.call('list_products', {})
        assert 'guaranteed_income_products' in data

    @pytest.mark.asyncio
    async def test_widow_for_single_client_returns_error(self):
        data = await self.call('analyze_widow_penalty', {'client': 'example'})
        assert 'married filing jointly' in data['error']

    @pytest.mark.asyncio
    async def test_unknown_client_returns_error(self):
        data = await self.call('run_projection', {'client': 'nobody'})
        assert 'not found' in data['error']

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self):
        data = await self.call('unknown_tool', {})
        assert 'Unknown tool' in data['error']
