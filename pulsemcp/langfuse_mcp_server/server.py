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

"""pulsemcp langfuse MCP Server implementation."""

import argparse
import os
import sys
from dotenv import load_dotenv
from loguru import logger
from mcp.server.fastmcp import FastMCP
from pulsemcp.common.env import EnvVar, validate_environment
from pulsemcp.common.errors import ConfigurationError
from pulsemcp.common.logs import configure_logging
from pulsemcp.common.resources import mask_secret, register_config_resource
from pulsemcp.common.tools import ToolFilterConfig, filter_tools, register_tools
from pulsemcp.langfuse_mcp_server.client import LangfuseApi, LangfuseClient
from pulsemcp.langfuse_mcp_server.consts import (
    DEFAULT_BASE_URL,
    SERVER_NAME,
    SERVER_VERSION,
    TOOL_GROUPS,
)
from pulsemcp.langfuse_mcp_server.tools import build_tools
from typing import Callable, Optional


SERVER_INSTRUCTIONS = """
This server gives read-only access to LLM traces and observations recorded in Langfuse.

Start with get_traces to find traces, then use get_trace_detail for a full trace, or
get_observations with a trace_id to walk its generations and spans. Large field values are
truncated and saved to files so responses stay small.
"""

REQUIRED_ENV = [
    EnvVar('LANGFUSE_PUBLIC_KEY', 'Langfuse project public key', 'pk-lf-...'),
    EnvVar('LANGFUSE_SECRET_KEY', 'Langfuse project secret key', 'sk-lf-...'),
]

OPTIONAL_ENV = [
    EnvVar('LANGFUSE_BASE_URL', 'Langfuse API base URL', default=DEFAULT_BASE_URL),
    EnvVar('LANGFUSE_ENABLED_TOOL_GROUPS', 'Comma separated tool groups (traces, observations)'),
]


def build_config() -> dict:
    """Snapshot of the server configuration with secrets masked."""
    return {
        'server': {'name': SERVER_NAME, 'version': SERVER_VERSION},
        'environment': {
            'LANGFUSE_PUBLIC_KEY': mask_secret(os.getenv('LANGFUSE_PUBLIC_KEY')),
            'LANGFUSE_SECRET_KEY': mask_secret(os.getenv('LANGFUSE_SECRET_KEY')),
            'LANGFUSE_BASE_URL': os.getenv('LANGFUSE_BASE_URL') or DEFAULT_BASE_URL,
        },
        'capabilities': {'tools': True, 'resources': True},
    }


def create_server(
    client_factory: Optional[Callable[[], LangfuseApi]] = None,
    tool_filter: Optional[ToolFilterConfig] = None,
) -> FastMCP:
    """Create the Langfuse MCP server.

    Args:
        client_factory: Returns the Langfuse client, defaults to one built from the environment
        tool_filter: Tool filter, defaults to one parsed from the environment

    Returns:
        The configured server
    """
    if client_factory is None:
        client = LangfuseClient(
            os.environ['LANGFUSE_PUBLIC_KEY'],
            os.environ['LANGFUSE_SECRET_KEY'],
            os.getenv('LANGFUSE_BASE_URL'),
        )

        def client_factory() -> LangfuseApi:
            return client

    definitions = build_tools(client_factory)
    if tool_filter is None:
        tool_filter = ToolFilterConfig.from_env(
            TOOL_GROUPS,
            [definition.name for definition in definitions],
            groups_var='LANGFUSE_ENABLED_TOOL_GROUPS',
            readonly_variants=False,
        )

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    register_tools(mcp, filter_tools(definitions, tool_filter))
    register_config_resource(mcp, 'langfuse://config', build_config)
    return mcp


def main():
    """Run the MCP server with CLI argument support."""
    parser = argparse.ArgumentParser(description='MCP server for Langfuse traces')
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
