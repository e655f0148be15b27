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

"""Truncation of oversized string fields in Langfuse payloads.

Strings longer than the threshold are replaced by a preview and the full text
is written to a side file, so agents can grep large inputs and outputs
instead of receiving them inline.
"""

import itertools
import re
import secrets
import tempfile
from loguru import logger
from pathlib import Path
from pulsemcp.langfuse_mcp_server.consts import (
    DEFAULT_HINT,
    MAX_HINT_LENGTH,
    SPILL_DIRECTORY_NAME,
    TRUNCATION_THRESHOLD,
)
from typing import Any, Optional


_UNSAFE_CHARACTERS = re.compile(r'[^A-Za-z0-9_.-]')

_file_counter = itertools.count(1)


def spill_directory() -> Path:
    """Return the shared directory holding side files, creating it if needed."""
    directory = Path(tempfile.gettempdir()) / SPILL_DIRECTORY_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def sanitize_hint(hint: str) -> str:
    """Turn a field path into a safe, bounded file name fragment."""
    cleaned = _UNSAFE_CHARACTERS.sub('_', hint)[:MAX_HINT_LENGTH]
    return cleaned or DEFAULT_HINT


def write_side_file(text: str, hint: str, directory: Optional[Path] = None) -> Path:
    """Write text to a new side file and return its path.

    Args:
        text: Full content to save
        hint: Field path the content came from
        directory: Target directory, defaults to the shared spill directory

    Returns:
        The path of the written file
    """
    directory = directory or spill_directory()
    name = f'{next(_file_counter)}-{secrets.token_hex(4)}-{sanitize_hint(hint)}.txt'
    path = directory / name
    path.write_bytes(text.encode('utf-8'))
    logger.debug(f'Saved {len(text)} chars to {path}')
    return path


def truncate_large_fields(
    value: Any,
    path: str = '',
    directory: Optional[Path] = None,
    threshold: int = TRUNCATION_THRESHOLD,
) -> Any:
    """Recursively replace long strings with a preview and a side file pointer.

    Mappings and sequences keep their keys, order and shape. Strings of at most
    `threshold` characters and all other values are returned unchanged. Errors
    writing a side file propagate to the caller.

    Args:
        value: JSON-like value
        path: Field path of value, used to name side files
        directory: Directory for side files, defaults to the shared spill directory
        threshold: Maximum length of a string kept inline

    Returns:
        A new value with long strings replaced
    """
    if isinstance(value, str):
        if len(value) <= threshold:
            return value
        file_path = write_side_file(value, path or DEFAULT_HINT, directory)
        return (
            f'{value[:threshold]}... [TRUNCATED: {len(value)} chars total. '
            f'Full content saved to {file_path}]'
        )
    if isinstance(value, dict):
        return {
            key: truncate_large_fields(
                item, f'{path}.{key}' if path else str(key), directory, threshold
            )
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [
            truncate_large_fields(item, f'{path}[{index}]', directory, threshold)
            for index, item in enumerate(value)
        ]
    return value
