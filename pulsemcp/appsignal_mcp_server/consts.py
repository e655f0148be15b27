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

"""Constants for the AppSignal MCP server."""

SERVER_NAME = 'appsignal-mcp-server'
SERVER_VERSION = '0.1.0'

GRAPHQL_BASE_URL = 'https://appsignal.com'
GRAPHQL_PATH = '/graphql'

# Listing defaults
DEFAULT_STATES = ['OPEN']
DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0
DEFAULT_LOG_LIMIT = 50
MAX_LOG_LIMIT = 1000

NO_APP_SELECTED = (
    'No app ID selected. Please use select_app_id tool first or set '
    'APPSIGNAL_APP_ID environment variable.'
)

# Tool groups
GROUP_APPS = 'apps'
GROUP_EXCEPTIONS = 'exceptions'
GROUP_LOGS = 'logs'
GROUP_PERFORMANCE = 'performance'
TOOL_GROUPS = [GROUP_APPS, GROUP_EXCEPTIONS, GROUP_LOGS, GROUP_PERFORMANCE]
