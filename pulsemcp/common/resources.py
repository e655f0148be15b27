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

"""Config resources reporting a server's environment derived settings."""

import json
from mcp.server.fastmcp import FastMCP
from pulsemcp.common.consts import NOT_SET, REDACTED
from typing import Any, Callable, Dict, Optional


def mask_secret(value: Optional[str]) -> str:
    """Report whether a secret is set without revealing it."""
    return REDACTED if value else NOT_SET


def register_config_resource(
    mcp: FastMCP,
    uri: str,
    build: Callable[[], Dict[str, Any]],
    description: str = 'Server configuration and status',
) -> None:
    """Expose a JSON configuration snapshot at uri.

    Args:
        mcp: The server
        uri: Resource URI, e.g. 'appsignal://config'
        build: Returns the snapshot; secrets must already be masked
        description: Resource description
    """

    def read_config() -> str:
        return json.dumps(build(), indent=2)

    mcp.resource(
        uri,
        name='config',
        description=description,
        mime_type='application/json',
    )(read_config)
