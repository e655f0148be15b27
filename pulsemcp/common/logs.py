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

"""Loguru configuration for the PulseMCP MCP servers.

stdout carries the stdio transport, so every sink goes to stderr or to a file.
"""

import os
import sys
from loguru import logger
from pulsemcp.common.consts import DEFAULT_LOG_LEVEL, LOG_FILE_RETENTION, LOG_FILE_ROTATION


LOG_FORMAT = '{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}'


def configure_logging(level: str | None = None) -> str:
    """Replace loguru's default handler with the server sinks.

    Args:
        level: Explicit log level. Falls back to FASTMCP_LOG_LEVEL, then WARNING.

    Returns:
        The effective log level.
    """
    log_level = (level or os.getenv('FASTMCP_LOG_LEVEL', DEFAULT_LOG_LEVEL)).upper()

    logger.remove()
    logger.add(sys.stderr, level=log_level, format=LOG_FORMAT)

    log_file = os.getenv('MCP_LOG_FILE')
    if log_file:
        logger.add(
            log_file,
            level=log_level,
            rotation=LOG_FILE_ROTATION,
            retention=LOG_FILE_RETENTION,
            format=LOG_FORMAT,
        )

    return log_level
