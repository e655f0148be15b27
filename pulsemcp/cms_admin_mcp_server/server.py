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

"""pulsemcp cms-admin MCP Server implementation."""

import argparse
import os
import sys
from dotenv import load_dotenv
from loguru import logger
from mcp.server.fastmcp import FastMCP
from pulsemcp.cms_admin_mcp_server.client import CmsAdminApi, CmsAdminClient
from pulsemcp.cms_admin_mcp_server.consts import (
    DEFAULT_API_URL,
    SERVER_NAME,
    SERVER_VERSION,
    TOOL_GROUPS,
)
from pulsemcp.cms_admin_mcp_server.tools import build_tools
from pulsemcp.common.env import EnvVar, validate_environment
from pulsemcp.common.errors import ConfigurationError
from pulsemcp.common.logs import configure_logging
from pulsemcp.common.resources import mask_secret, register_config_resource
from pulsemcp.common.tools import ToolFilterConfig, filter_tools, register_tools
from typing import Callable, Optional


SERVER_INSTRUCTIONS = """
This server manages PulseMCP content: newsletter posts and authors, the queue of MCP
implementations waiting for review, and MCP server records.

Use get_authors to find an author_slug before draft_newsletter_post. New posts are always
drafts.
"""

REQUIRED_ENV = [
    EnvVar('PULSEMCP_ADMIN_API_KEY', 'PulseMCP admin API key', 'your-admin-api-key'),
]

OPTIONAL_ENV = [
    EnvVar('PULSEMCP_ADMIN_API_URL', 'PulseMCP admin API base URL', default=DEFAULT_API_URL),
    EnvVar(
        'TOOL_GROUPS',
        'Comma separated tool groups (newsletter, server_queue, mcp_servers, '
        'or <group>_readonly)',
    ),
]


def build_config() -> dict:
    """Snapshot of the server configuration with secrets masked."""
    return {
        'server': {'name': SERVER_NAME, 'version': SERVER_VERSION},
        'environment': {
            'PULSEMCP_ADMIN_API_KEY': mask_secret(os.getenv('PULSEMCP_ADMIN_API_KEY')),
            'PULSEMCP_ADMIN_API_URL': os.getenv('PULSEMCP_ADMIN_API_URL') or DEFAULT_API_URL,
            'TOOL_GROUPS': os.getenv('TOOL_GROUPS') or ','.join(TOOL_GROUPS),
        },
        'capabilities': {'tools': True, 'resources': True},
    }


def create_server(
    client_factory: Optional[Callable[[], CmsAdminApi]] = None,
    tool_filter: Optional[ToolFilterConfig] = None,
) -> FastMCP:
    """Create the PulseMCP CMS admin MCP server.

    Args:
        client_factory: Returns the admin API client, defaults to one built from the environment
        tool_filter: Tool filter, defaults to one parsed from TOOL_GROUPS

    Returns:
        The configured server
    """
    if client_factory is None:
        client = CmsAdminClient(
            os.environ['PULSEMCP_ADMIN_API_KEY'], os.getenv('PULSEMCP_ADMIN_API_URL')
        )

        def client_factory() -> CmsAdminApi:
            return client

    definitions = build_tools(client_factory)
    if tool_filter is None:
        tool_filter = ToolFilterConfig.from_env(
            TOOL_GROUPS,
            [definition.name for definition in definitions],
            groups_var='TOOL_GROUPS',
        )

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    register_tools(mcp, filter_tools(definitions, tool_filter))
    register_config_resource(mcp, 'pulsemcp-cms-admin://config', build_config)
    return mcp


def main():
    """Run the MCP server with CLI argument support."""
    parser = argparse.ArgumentParser(description='MCP server for the PulseMCP CMS admin API')
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
