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

"""Langfuse tools."""

import json
from mcp.server.fastmcp import Context
from pulsemcp.common.errors import handle_tool_errors
from pulsemcp.common.tools import ToolDefinition
from pulsemcp.langfuse_mcp_server.client import LangfuseApi
from pulsemcp.langfuse_mcp_server.consts import (
    DEFAULT_PAGE_LIMIT,
    GROUP_OBSERVATIONS,
    GROUP_TRACES,
    MAX_PAGE_LIMIT,
)
from pulsemcp.langfuse_mcp_server.models import ObservationSummary, TraceSummary
from pulsemcp.langfuse_mcp_server.truncation import truncate_large_fields
from pydantic import Field
from typing import Any, Callable, List, Optional


ClientFactory = Callable[[], LangfuseApi]

TRUNCATION_NOTE = (
    'Any field value exceeding 1000 characters is truncated and the full value is saved '
    'to a file in the temp directory. The truncated text includes the file path; grep '
    'that file to search within large values.'
)


def _render(value: Any) -> str:
    return json.dumps(truncate_large_fields(value), indent=2)


def get_traces_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_traces tool."""

    @handle_tool_errors('listing traces')
    async def get_traces(
        ctx: Context,
        page: int = Field(1, ge=1, description='Page number (starts at 1).'),
        limit: int = Field(
            DEFAULT_PAGE_LIMIT,
            ge=1,
            le=MAX_PAGE_LIMIT,
            description='Number of traces per page (1-100). Use smaller values to reduce response size.',
        ),
        user_id: Optional[str] = Field(None, description='Filter by user ID.'),
        name: Optional[str] = Field(None, description='Filter by trace name (exact match).'),
        session_id: Optional[str] = Field(None, description='Filter by session ID.'),
        from_timestamp: Optional[str] = Field(
            None,
            description='Only traces created on or after this ISO 8601 datetime, e.g. "2025-01-01T00:00:00Z".',
        ),
        to_timestamp: Optional[str] = Field(
            None, description='Only traces created before this ISO 8601 datetime.'
        ),
        order_by: Optional[str] = Field(
            None,
            description='Sort order as "field.direction", e.g. "timestamp.desc". Fields: id, timestamp, name, userId, release, version, public, bookmarked, sessionId.',
        ),
        tags: Optional[List[str]] = Field(
            None, description='Only traces containing ALL of these tags.'
        ),
        version: Optional[str] = Field(None, description='Filter by trace version.'),
        release: Optional[str] = Field(None, description='Filter by release.'),
        environment: Optional[List[str]] = Field(
            None, description='Filter by environment(s), e.g. ["production", "staging"].'
        ),
    ) -> str:
        response = await client_factory().get_traces(
            {
                'page': page,
                'limit': limit,
                'userId': user_id,
                'name': name,
                'sessionId': session_id,
                'fromTimestamp': from_timestamp,
                'toTimestamp': to_timestamp,
                'orderBy': order_by,
                'tags': tags,
                'version': version,
                'release': release,
                'environment': environment,
            }
        )
        data = [TraceSummary.from_trace(trace).to_json_dict() for trace in response['data']]
        return _render({'data': data, 'meta': response.get('meta', {})})

    return ToolDefinition(
        name='get_traces',
        fn=get_traces,
        description=(
            'List traces from Langfuse with optional filters and pagination.\n\n'
            'Returns a summary of each trace: id, name, timestamp, userId, latency, totalCost, '
            'tags, and observation/score counts. Input and output are omitted; use '
            'get_trace_detail for the full trace.\n\n'
            f'{TRUNCATION_NOTE}\n\n'
            'The response includes meta.totalItems and meta.totalPages for pagination.'
        ),
        group=GROUP_TRACES,
    )


def get_trace_detail_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_trace_detail tool."""

    @handle_tool_errors('getting trace detail')
    async def get_trace_detail(
        ctx: Context,
        trace_id: str = Field(..., min_length=1, description='The trace ID.'),
    ) -> str:
        return _render(await client_factory().get_trace(trace_id))

    return ToolDefinition(
        name='get_trace_detail',
        fn=get_trace_detail,
        description=(
            'Get a single trace with its input, output, metadata, observations and scores.\n\n'
            f'{TRUNCATION_NOTE}'
        ),
        group=GROUP_TRACES,
    )


def get_observations_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_observations tool."""

    @handle_tool_errors('listing observations')
    async def get_observations(
        ctx: Context,
        page: int = Field(1, ge=1, description='Page number (starts at 1).'),
        limit: int = Field(
            DEFAULT_PAGE_LIMIT,
            ge=1,
            le=MAX_PAGE_LIMIT,
            description='Number of observations per page (1-100).',
        ),
        trace_id: Optional[str] = Field(
            None,
            description='Filter by trace ID. Use it to get all observations of one trace.',
        ),
        name: Optional[str] = Field(None, description='Filter by observation name (exact match).'),
        user_id: Optional[str] = Field(None, description='Filter by user ID.'),
        type: Optional[str] = Field(
            None, description='Filter by observation type: GENERATION, SPAN, or EVENT.'
        ),
        level: Optional[str] = Field(
            None, description='Filter by level: DEBUG, DEFAULT, WARNING, or ERROR.'
        ),
        parent_observation_id: Optional[str] = Field(
            None, description='Filter by parent observation ID to get direct children.'
        ),
        from_start_time: Optional[str] = Field(
            None, description='Only observations starting on or after this ISO 8601 datetime.'
        ),
        to_start_time: Optional[str] = Field(
            None, description='Only observations starting before this ISO 8601 datetime.'
        ),
        version: Optional[str] = Field(None, description='Filter by observation version.'),
        environment: Optional[List[str]] = Field(
            None, description='Filter by environment(s), e.g. ["production"].'
        ),
    ) -> str:
        response = await client_factory().get_observations(
            {
                'page': page,
                'limit': limit,
                'traceId': trace_id,
                'name': name,
                'userId': user_id,
                'type': type,
                'level': level,
                'parentObservationId': parent_observation_id,
                'fromStartTime': from_start_time,
                'toStartTime': to_start_time,
                'version': version,
                'environment': environment,
            }
        )
        data = [
            ObservationSummary.model_validate(observation).to_json_dict()
            for observation in response['data']
        ]
        return _render({'data': data, 'meta': response.get('meta', {})})

    return ToolDefinition(
        name='get_observations',
        fn=get_observations,
        description=(
            'List observations (generations, spans, events) with optional filters.\n\n'
            'Returns a summary of each observation: id, traceId, type, name, model, timing, '
            'level, and usage/cost metrics. Input and output are omitted; use get_observation '
            'for the full observation.\n\n'
            f'{TRUNCATION_NOTE}'
        ),
        group=GROUP_OBSERVATIONS,
    )


def get_observation_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_observation tool."""

    @handle_tool_errors('getting observation')
    async def get_observation(
        ctx: Context,
        observation_id: str = Field(..., min_length=1, description='The observation ID.'),
    ) -> str:
        return _render(await client_factory().get_observation(observation_id))

    return ToolDefinition(
        name='get_observation',
        fn=get_observation,
        description=(
            'Get a single observation including its input, output, model parameters and usage.\n\n'
            f'{TRUNCATION_NOTE}'
        ),
        group=GROUP_OBSERVATIONS,
    )


TOOL_FACTORIES = [
    get_traces_tool,
    get_trace_detail_tool,
    get_observations_tool,
    get_observation_tool,
]


def build_tools(client_factory: ClientFactory) -> List[ToolDefinition]:
    """Build every Langfuse tool definition."""
    return [factory(client_factory) for factory in TOOL_FACTORIES]
