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

"""Constants for the Langfuse MCP server."""

SERVER_NAME = 'langfuse-mcp-server'
SERVER_VERSION = '0.1.0'

DEFAULT_BASE_URL = 'https://cloud.langfuse.com'

# Truncation
TRUNCATION_THRESHOLD = 1000
MAX_HINT_LENGTH = 64
DEFAULT_HINT = 'field'
SPILL_DIRECTORY_NAME = 'langfuse-mcp'

# Listing
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Tool groups
GROUP_TRACES = 'traces'
GROUP_OBSERVATIONS = 'observations'
TOOL_GROUPS = [GROUP_TRACES, GROUP_OBSERVATIONS]
