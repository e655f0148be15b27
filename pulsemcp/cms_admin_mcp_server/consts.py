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

"""Constants for the PulseMCP CMS admin MCP server."""

SERVER_NAME = 'pulsemcp-cms-admin-mcp-server'
SERVER_VERSION = '0.1.0'

DEFAULT_API_URL = 'https://admin.pulsemcp.com'

DEFAULT_SEARCH_LIMIT = 30
MAX_SEARCH_LIMIT = 100
# Implementations fetched when matching an MCP server to its implementation
SERVER_MATCH_LIMIT = 50

# Tool groups
GROUP_NEWSLETTER = 'newsletter'
GROUP_SERVER_QUEUE = 'server_queue'
GROUP_MCP_SERVERS = 'mcp_servers'
TOOL_GROUPS = [GROUP_NEWSLETTER, GROUP_SERVER_QUEUE, GROUP_MCP_SERVERS]

# API paths
POSTS_PATH = '/supervisor/posts'
AUTHORS_PATH = '/supervisor/authors'
MCP_SERVERS_PATH = '/supervisor/mcp_servers'
MCP_CLIENTS_PATH = '/supervisor/mcp_clients'
IMPLEMENTATIONS_SEARCH_PATH = '/api/implementations/search'
DRAFT_IMPLEMENTATIONS_PATH = '/api/implementations/drafts'
