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

"""Exceptions and tool error handling for the PulseMCP MCP servers."""

from functools import wraps
from inspect import iscoroutinefunction
from loguru import logger
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import ValidationError
from typing import Any, Callable, Dict, Iterable, Optional


DEFAULT_STATUS_MESSAGES: Dict[int, str] = {
    401: 'Invalid API key',
    403: 'Permission denied',
    404: '{resource} not found',
    422: 'Validation failed: {detail}',
    429: 'Rate limit exceeded. Please try again later.',
}

GENERIC_STATUS_MESSAGE = 'Request failed with status {status_code}'

UNKNOWN_VALIDATION_ERROR = 'Unknown validation error'


class PulseMcpError(Exception):
    """Base exception for the PulseMCP MCP servers."""

    pass


class ConfigurationError(PulseMcpError):
    """Raised when required environment configuration is missing or invalid."""

    def __init__(self, message: str, missing: Optional[Iterable[str]] = None):
        """Initialize the ConfigurationError.

        Args:
            message: Human readable description of the problem
            missing: Names of the environment variables that are missing
        """
        self.missing = list(missing or [])
        super().__init__(message)


class ApiError(PulseMcpError):
    """Raised when a remote API answers with a non-success status."""

    def __init__(self, status_code: int, message: str):
        """Initialize the ApiError.

        Args:
            status_code: HTTP status code returned by the remote API
            message: Fixed message for the status code
        """
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class RecordNotFoundError(PulseMcpError):
    """Raised when a paginated listing is exhausted without finding a record."""

    pass


class AccessDeniedError(PulseMcpError):
    """Raised when a local policy refuses an operation."""

    pass


class SelectionRequiredError(PulseMcpError):
    """Raised when a tool needs a selected resource and none is selected."""

    pass


class SelectionLockedError(PulseMcpError):
    """Raised when changing a selection that was pinned by the environment."""

    pass


def error_for_status(
    status_code: int,
    resource: str = 'Resource',
    messages: Optional[Dict[int, str]] = None,
    detail: Optional[str] = None,
) -> ApiError:
    """Build the ApiError for a non-success status code.

    The message only depends on the status code, the per-client overrides, the
    resource label used for 404 and the server supplied detail used for 422.

    Args:
        status_code: HTTP status code
        resource: Label used in the 404 message
        messages: Per-client message templates overriding the defaults
        detail: Validation detail used in the 422 message

    Returns:
        The ApiError to raise
    """
    templates = {**DEFAULT_STATUS_MESSAGES, **(messages or {})}
    template = templates.get(status_code, GENERIC_STATUS_MESSAGE)
    message = template.format(
        resource=resource,
        detail=detail or UNKNOWN_VALIDATION_ERROR,
        status_code=status_code,
    )
    return ApiError(status_code, message)


def handle_tool_errors(action: str) -> Callable:
    """Decorator converting tool failures into MCP tool errors.

    FastMCP turns a ToolError raised by a tool into a result with isError set,
    so a failed call never ends the session.

    Args:
        action: Phrase describing the operation, e.g. 'fetching apps'

    Returns:
        The decorator
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any):
            try:
                if iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                return func(*args, **kwargs)
            except ToolError:
                raise
            except ValidationError as error:
                message = f'Invalid input: {error}'
                logger.warning(f'{func.__name__}: {message}')
                await _report(kwargs.get('ctx'), message)
                raise ToolError(message) from error
            except Exception as error:
                message = f'Error {action}: {error}'
                logger.error(f'{func.__name__} failed with {type(error).__name__}: {error}')
                await _report(kwargs.get('ctx'), message)
                raise ToolError(message) from error

        return wrapper

    return decorator


async def _report(ctx: Any, message: str) -> None:
    if ctx is None:
        return
    try:
        await ctx.error(message)
    except Exception as error:
        logger.warning(f'Could not send error to the client: {error}')
