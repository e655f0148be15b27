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

"""Constants for the DynamoDB MCP server."""

SERVER_NAME = 'dynamodb-mcp-server'
SERVER_VERSION = '0.1.0'

DEFAULT_REGION = 'us-east-1'
USER_AGENT_EXTRA = 'MCP/PulseDynamoDBServer'

MAX_BATCH_GET_KEYS = 100
MAX_BATCH_WRITE_REQUESTS = 25

# Tool groups
GROUP_READONLY = 'readonly'
GROUP_READWRITE = 'readwrite'
GROUP_ADMIN = 'admin'
TOOL_GROUPS = [GROUP_READONLY, GROUP_READWRITE, GROUP_ADMIN]

TABLE_NOT_ALLOWED = (
    "Access denied: Table '{table}' is not in the allowed tables list. "
    'Configure DYNAMODB_ALLOWED_TABLES to include this table.'
)

# ClientError code to message
CLIENT_ERROR_MESSAGES = {
    'ResourceNotFoundException': 'Table or index not found',
    'AccessDeniedException': 'Permission denied',
    'UnrecognizedClientException': 'Invalid AWS credentials',
    'ProvisionedThroughputExceededException': 'Rate limit exceeded. Please try again later.',
    'ThrottlingException': 'Rate limit exceeded. Please try again later.',
    'RequestLimitExceeded': 'Rate limit exceeded. Please try again later.',
    'ConditionalCheckFailedException': 'Condition check failed',
    'ValidationException': 'Validation failed: {message}',
    'ResourceInUseException': 'Table is in use: {message}',
}
