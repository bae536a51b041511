#!/usr/bin/env python3
"""MCP Server for the Roth Conversion Planner.

This server exposes the conversion simulation and its analyses as MCP
tools, allowing AI assistants to answer questions about a client's
conversion plan.
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

from tools import MultiClientTools


# Create the MCP server
server = Server("roth-conversion-planner")

# Global tools instance (initialized on startup)
tools: MultiClientTools | None = None


def get_tools() -> MultiClientTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        # Default client and first projection year can be set via env vars
        default_client = os.environ.get('ROTH_PLANNER_CLIENT')
        start_year = os.environ.get('ROTH_PLANNER_START_YEAR')
        base_path = os.path.join(os.path.dirname(__file__), '..')
        tools = MultiClientTools(base_path, default_client, int(start_year) if start_year else None)
    return tools


# Common client parameter schema
CLIENT_PARAM = {
    "type": "string",
    "description": "The client name (folder in input-parameters). If not specified, uses the default client. Use list_clients to see available clients."
}


def _tool(name: str, description: str, properties: dict = None, required: list = None) -> Tool:
    props = {"client": CLIENT_PARAM}
    props.update(properties or {})
    return Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": props,
            "required": required or []
        }
    )


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available simulation tools."""
    return [
        Tool(
            name="list_clients",
            description="List all available client records with their age, filing status, projection horizon and product.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        Tool(
            name="reload_clients",
            description="Reload all client records from disk. Use this after adding or editing client.json files to refresh the cache without restarting the server.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        Tool(
            name="list_products",
            description="List the conversion strategies, growth annuity products and guaranteed-income products the simulator knows.",
            inputSchema={"type": "object", "properties": {}, "required": []}
        ),
        _tool(
            "run_projection",
            "Run the baseline (no conversion) and conversion strategy projections for a client. Returns break-even age, lifetime tax savings, heir benefit, summary metrics and, optionally, every projected year. Money is in cents.",
            {
                "include_years": {
                    "type": "boolean",
                    "description": "Include the year-by-year rows for both scenarios (default true)"
                }
            }
        ),
        _tool(
            "compare_strategies",
            "Simulate the conservative, moderate, aggressive and IRMAA-safe strategies for a client and report which ends with the most wealth."
        ),
        _tool(
            "run_sensitivity",
            "Re-run the projection under seven growth-rate and tax-rate scenarios and report the range of ending wealth and break-even ages."
        ),
        _tool(
            "analyze_breakeven",
            "List every year the strategy and the baseline trade the lead in net worth, with the simple and sustained break-even ages."
        ),
        _tool(
            "analyze_widow_penalty",
            "For a married couple, estimate the extra federal tax the survivor pays filing single after the spouse's death.",
            {
                "death_year": {
                    "type": "integer",
                    "description": "Optional: year of the spouse's death. Defaults to the spouse reaching 85, at least five years out."
                }
            }
        ),
        _tool(
            "get_year_detail",
            "Get the baseline and strategy rows (balances, income, every tax) for one projected year.",
            {
                "year": {
                    "type": "integer",
                    "description": "The calendar year to show"
                }
            },
            ["year"]
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        planner = get_tools()
        client = arguments.get("client")

        if name == "list_clients":
            result = planner.list_clients()
        elif name == "reload_clients":
            result = planner.reload_clients()
        elif name == "list_products":
            result = planner.list_products()
        elif name == "run_projection":
            result = planner.run_projection(client, arguments.get("include_years", True))
        elif name == "compare_strategies":
            result = planner.compare_strategies(client)
        elif name == "run_sensitivity":
            result = planner.run_sensitivity(client)
        elif name == "analyze_breakeven":
            result = planner.analyze_breakeven(client)
        elif name == "analyze_widow_penalty":
            result = planner.analyze_widow_penalty(arguments.get("death_year"), client)
        elif name == "get_year_detail":
            result = planner.get_year_detail(arguments["year"], client)
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
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
