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

"""pulsemcp appsignal MCP Server implementation."""

import argparse
import os
import sys
from dotenv import load_dotenv
from loguru import logger
from mcp.server.fastmcp import FastMCP
from pulsemcp.appsignal_mcp_server.client import AppsignalApi, AppsignalClient
from pulsemcp.appsignal_mcp_server.consts import SERVER_NAME, SERVER_VERSION, TOOL_GROUPS
from pulsemcp.appsignal_mcp_server.tools import build_tools
from pulsemcp.common.consts import NOT_SET
from pulsemcp.common.env import EnvVar, validate_environment
from pulsemcp.common.errors import ConfigurationError
from pulsemcp.common.logs import configure_logging
from pulsemcp.common.resources import mask_secret, register_config_resource
from pulsemcp.common.state import SessionStateStore
from pulsemcp.common.tools import ToolFilterConfig, filter_tools, register_tools
from typing import Callable, Optional


SERVER_INSTRUCTIONS = """
This server gives access to AppSignal monitoring data: exception, log and performance
incidents, exception samples and application logs.

Call get_apps first, then select_app_id to choose the app the other tools query. When the
APPSIGNAL_APP_ID environment variable is set, the app is preselected and cannot be changed.
"""

REQUIRED_ENV = [
    EnvVar('APPSIGNAL_API_KEY', 'AppSignal personal API token', 'your-api-token'),
]

OPTIONAL_ENV = [
    EnvVar('APPSIGNAL_APP_ID', 'App ID to preselect and lock for every session'),
    EnvVar(
        'APPSIGNAL_ENABLED_TOOL_GROUPS',
        'Comma separated tool groups (apps, exceptions, logs, performance, or <group>_readonly)',
    ),
    EnvVar('APPSIGNAL_ENABLED_TOOLS', 'Comma separated tool names to enable exclusively'),
    EnvVar('APPSIGNAL_DISABLED_TOOLS', 'Comma separated tool names to disable'),
]


def build_config(state_store: SessionStateStore) -> dict:
    """Snapshot of the server configuration with secrets masked."""
    return {
        'server': {'name': SERVER_NAME, 'version': SERVER_VERSION},
        'environment': {
            'APPSIGNAL_API_KEY': mask_secret(os.getenv('APPSIGNAL_API_KEY')),
            'APPSIGNAL_APP_ID': os.getenv('APPSIGNAL_APP_ID') or NOT_SET,
        },
        'state': {
            'initialAppId': state_store.initial_id,
            'appLocked': state_store.initial_id is not None,
        },
        'capabilities': {'tools': True, 'resources': True},
    }


def create_server(
    client_factory: Optional[Callable[[], AppsignalApi]] = None,
    state_store: Optional[SessionStateStore] = None,
    tool_filter: Optional[ToolFilterConfig] = None,
) -> FastMCP:
    """Create the AppSignal MCP server.

    Args:
        client_factory: Returns the AppSignal client, defaults to one built from the environment
        state_store: Per-session app selection, defaults to one seeded from APPSIGNAL_APP_ID
        tool_filter: Tool filter, defaults to one parsed from the environment

    Returns:
        The configured server
    """
    if client_factory is None:
        client = AppsignalClient(os.environ['APPSIGNAL_API_KEY'])

        def client_factory() -> AppsignalApi:
            return client

    if state_store is None:
        state_store = SessionStateStore(os.getenv('APPSIGNAL_APP_ID'))

    definitions = build_tools(client_factory, state_store)
    if tool_filter is None:
        tool_filter = ToolFilterConfig.from_env(
            TOOL_GROUPS,
            [definition.name for definition in definitions],
            groups_var='APPSIGNAL_ENABLED_TOOL_GROUPS',
            enabled_tools_var='APPSIGNAL_ENABLED_TOOLS',
            disabled_tools_var='APPSIGNAL_DISABLED_TOOLS',
        )

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    register_tools(mcp, filter_tools(definitions, tool_filter))
    register_config_resource(mcp, 'appsignal://config', lambda: build_config(state_store))
    return mcp


def main():
    """Run the MCP server with CLI argument support."""
    parser = argparse.ArgumentParser(description='MCP server for AppSignal monitoring data')
    parser.add_argument('--log-level', type=str, help='Log level (default: FASTMCP_LOG_LEVEL)')
    args = parser.parse_args()

    load_dotenv()
    configure_logging(args.log_level)

    try:
        validate_environment(SERVER_NAME, REQUIRED_ENV, OPTIONAL_ENV)
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
