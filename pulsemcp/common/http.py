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

"""Async HTTP client base shared by the REST and GraphQL integrations."""

import httpx
from loguru import logger
from pulsemcp.common.consts import DEFAULT_HTTP_TIMEOUT, USER_AGENT
from pulsemcp.common.errors import ApiError, error_for_status
from typing import Any, Dict, Optional


class ApiHttpClient:
    """Issues one request per call and maps non-success statuses onto ApiError.

    Subclasses override `error_messages` to replace the default message of a
    status code. No request is ever retried.
    """

    error_messages: Dict[int, str] = {}

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[httpx.Auth] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL every request path is resolved against
            headers: Headers sent with every request
            auth: Optional httpx authentication
            timeout: Request timeout in seconds
            transport: Optional transport, used by tests to stub the remote API
        """
        self.base_url = base_url.rstrip('/')
        self.headers = {'User-Agent': USER_AGENT, **(headers or {})}
        self.auth = auth
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            auth=self.auth,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        resource: str = 'Resource',
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            params: Query parameters, None values are dropped
            json: JSON request body
            resource: Label used in the 404 error message

        Returns:
            The decoded JSON body, or None for an empty response
        """
        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug(f'{method} {self.base_url}{path} params={query}')

        async with self._client() as client:
            response = await client.request(method, path, params=query, json=json)

        if not response.is_success:
            raise self.error_for_response(response, resource)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def error_for_response(self, response: httpx.Response, resource: str) -> ApiError:
        """Map a failed response to its fixed ApiError."""
        detail = validation_detail(response) if response.status_code == 422 else None
        logger.debug(f'Request failed with status {response.status_code}')
        return error_for_status(
            response.status_code,
            resource=resource,
            messages=self.error_messages,
            detail=detail,
        )


def validation_detail(response: httpx.Response) -> Optional[str]:
    """Extract the validation messages from a 422 body.

    Accepts `{"errors": [...]}` and `{"error": "..."}` bodies.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    errors = body.get('errors')
    if isinstance(errors, list) and errors:
        return ', '.join(str(error) for error in errors)
    if body.get('error'):
        return str(body['error'])
    return None
