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

"""Constants shared by the PulseMCP MCP servers."""

# Logging
DEFAULT_LOG_LEVEL = 'WARNING'
LOG_FILE_ROTATION = '10 MB'
LOG_FILE_RETENTION = 5

# HTTP
DEFAULT_HTTP_TIMEOUT = 30.0
USER_AGENT = 'pulsemcp-mcp-servers/0.1.0'

# Pagination
DEFAULT_SCAN_PAGE_SIZE = 50

# Config resources
REDACTED = '***configured***'
NOT_SET = 'not set'

# Tool groups
READONLY_GROUP_SUFFIX = '_readonly'
