# Copyright PulseMCP contributors. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""pulsemcp dynamodb MCP Server implementation."""

import argparse
import os
import sys
from dotenv import load_dotenv
from loguru import logger
from mcp.server.fastmcp import FastMCP
from pulsemcp.common.consts import NOT_SET
from pulsemcp.common.env import EnvVar, validate_environment
from pulsemcp.common.errors import ConfigurationError
from pulsemcp.common.logs import configure_logging
from pulsemcp.common.resources import register_config_resource
from pulsemcp.common.tools import ToolFilterConfig, filter_tools, register_tools
from pulsemcp.dynamodb_mcp_server.client import DynamoDBApi, DynamoDBClient
from pulsemcp.dynamodb_mcp_server.consts import (
    DEFAULT_REGION,
    SERVER_NAME,
    SERVER_VERSION,
    TOOL_GROUPS,
)
from pulsemcp.dynamodb_mcp_server.models import TableFilter
from pulsemcp.dynamodb_mcp_server.tools import build_tools
from typing import Callable, Optional


SERVER_INSTRUCTIONS = """
This server works with Amazon DynamoDB tables using plain JSON items.

Use dynamodb_list_tables and dynamodb_describe_table to discover tables and their keys.
Prefer dynamodb_query over dynamodb_scan when the partition key is known. Paginate with
the LastEvaluatedKey of a result passed back as exclusive_start_key.
"""

OPTIONAL_ENV = [
    EnvVar('AWS_REGION', 'AWS region of the tables', default=DEFAULT_REGION),
    EnvVar('AWS_PROFILE', 'AWS credentials profile'),
    EnvVar('DYNAMODB_ENDPOINT', 'Custom endpoint, e.g. http://localhost:8000 for DynamoDB Local'),
    EnvVar(
        'DYNAMODB_ENABLED_TOOL_GROUPS', 'Comma separated tool groups (readonly, readwrite, admin)'
    ),
    EnvVar('DYNAMODB_ENABLED_TOOLS', 'Comma separated tool names to enable exclusively'),
    EnvVar('DYNAMODB_DISABLED_TOOLS', 'Comma separated tool names to disable'),
    EnvVar('DYNAMODB_ALLOWED_TABLES', 'Comma separated tables the tools may access'),
]


def build_config(table_filter: TableFilter) -> dict:
    """Snapshot of the server configuration."""
    allowed = table_filter.allowed_tables
    return {
        'server': {'name': SERVER_NAME, 'version': SERVER_VERSION},
        'environment': {
            'AWS_REGION': os.getenv('AWS_REGION') or DEFAULT_REGION,
            'AWS_PROFILE': os.getenv('AWS_PROFILE') or NOT_SET,
            'DYNAMODB_ENDPOINT': os.getenv('DYNAMODB_ENDPOINT') or NOT_SET,
        },
        'allowedTables': sorted(allowed) if allowed is not None else 'all',
        'capabilities': {'tools': True, 'resources': True},
    }


def create_server(
    client_factory: Optional[Callable[[], DynamoDBApi]] = None,
    table_filter: Optional[TableFilter] = None,
    tool_filter: Optional[ToolFilterConfig] = None,
) -> FastMCP:
    """Create the DynamoDB MCP server.

    Args:
        client_factory: Returns the DynamoDB client, defaults to one built from the environment
        table_filter: Table allow-list, defaults to one parsed from DYNAMODB_ALLOWED_TABLES
        tool_filter: Tool filter, defaults to one parsed from the environment

    Returns:
        The configured server
    """
    if client_factory is None:
        client = DynamoDBClient(
            region_name=os.getenv('AWS_REGION'),
            profile_name=os.getenv('AWS_PROFILE'),
            endpoint_url=os.getenv('DYNAMODB_ENDPOINT'),
        )

        def client_factory() -> DynamoDBApi:
            return client

    if table_filter is None:
        table_filter = TableFilter.from_env()

    definitions = build_tools(client_factory, table_filter)
    if tool_filter is None:
        tool_filter = ToolFilterConfig.from_env(
            TOOL_GROUPS,
            [definition.name for definition in definitions],
            groups_var='DYNAMODB_ENABLED_TOOL_GROUPS',
            enabled_tools_var='DYNAMODB_ENABLED_TOOLS',
            disabled_tools_var='DYNAMODB_DISABLED_TOOLS',
            readonly_variants=False,
        )

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    register_tools(mcp, filter_tools(definitions, tool_filter))
    register_config_resource(mcp, 'dynamodb://config', lambda: build_config(table_filter))
    return mcp


def main():
    """Run the MCP server with CLI argument support."""
    parser = argparse.ArgumentParser(description='MCP server for Amazon DynamoDB')
    parser.add_argument('--log-level', type=str, help='Log level (default: FASTMCP_LOG_LEVEL)')
    args = parser.parse_args()

    load_dotenv()
    configure_logging(args.log_level)

    try:
        validate_environment(SERVER_NAME, [], OPTIONAL_ENV)
        mcp = create_server()
    except ConfigurationError as e:
        logger.error(f'Configuration error: {e}')
        sys.exit(1)

    logger.info(f'Starting {SERVER_NAME} v{SERVER_VERSION}')
    try:
        mcp.run(transport='stdio')
    except Exception as e:
        logger.exception(f'Server error: {e}')
        sys.exit(1)


if __name__ == '__main__':
    main()
