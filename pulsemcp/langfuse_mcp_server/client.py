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

"""Langfuse public API client."""

import httpx
from abc import ABC, abstractmethod
from pulsemcp.common.http import ApiHttpClient
from pulsemcp.langfuse_mcp_server.consts import DEFAULT_BASE_URL
from typing import Any, Dict, Optional


class LangfuseApi(ABC):
    """Operations the Langfuse tools rely on."""

    @abstractmethod
    async def get_traces(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """List traces. Returns {'data': [...], 'meta': {...}}."""
        pass

    @abstractmethod
    async def get_trace(self, trace_id: str) -> Dict[str, Any]:
        """Get one trace with its observations and scores."""
        pass

    @abstractmethod
    async def get_observations(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """List observations. Returns {'data': [...], 'meta': {...}}."""
        pass

    @abstractmethod
    async def get_observation(self, observation_id: str) -> Dict[str, Any]:
        """Get one observation including its input and output."""
        pass


class LangfuseClient(ApiHttpClient, LangfuseApi):
    """LangfuseApi backed by the Langfuse public REST API."""

    error_messages = {
        401: 'Invalid Langfuse credentials. Check LANGFUSE_PUBLIC_KEY and LANGFUSE_SECRET_KEY',
        403: 'Langfuse credentials lack access to this project',
    }

    def __init__(
        self,
        public_key: str,
        secret_key: str,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client with a project key pair."""
        super().__init__(
            base_url or DEFAULT_BASE_URL,
            auth=httpx.BasicAuth(public_key, secret_key),
            transport=transport,
        )

    async def get_traces(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """List traces."""
        return await self.request('GET', '/api/public/traces', params=params, resource='Traces')

    async def get_trace(self, trace_id: str) -> Dict[str, Any]:
        """Get one trace."""
        return await self.request(
            'GET', f'/api/public/traces/{trace_id}', resource='Trace'
        )

    async def get_observations(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """List observations."""
        return await self.request(
            'GET', '/api/public/observations', params=params, resource='Observations'
        )

    async def get_observation(self, observation_id: str) -> Dict[str, Any]:
        """Get one observation."""
        return await self.request(
            'GET',
            f'/api/public/observations/{observation_id}',
            resource='Observation',
        )
