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

"""AppSignal tools.

Every tool except get_apps and select_app_id works on the app selected for the
calling session.
"""

import json
from mcp.server.fastmcp import Context
from pulsemcp.appsignal_mcp_server.client import AppsignalApi
from pulsemcp.appsignal_mcp_server.consts import (
    DEFAULT_LIMIT,
    DEFAULT_LOG_LIMIT,
    DEFAULT_OFFSET,
    DEFAULT_STATES,
    GROUP_APPS,
    GROUP_EXCEPTIONS,
    GROUP_LOGS,
    GROUP_PERFORMANCE,
    MAX_LOG_LIMIT,
    NO_APP_SELECTED,
)
from pulsemcp.common.errors import handle_tool_errors
from pulsemcp.common.state import SessionStateStore
from pulsemcp.common.tools import ToolDefinition
from pydantic import Field
from typing import Any, Callable, List, Literal, Optional


ClientFactory = Callable[[], AppsignalApi]

IncidentState = Literal['OPEN', 'WIP', 'CLOSED']
Severity = Literal['debug', 'info', 'warn', 'error', 'fatal']

STATES_DESCRIPTION = (
    'Filter incidents by state(s). OPEN = active, WIP = being investigated, '
    'CLOSED = resolved. Defaults to ["OPEN"].'
)


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2)


def get_apps_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_apps tool."""

    @handle_tool_errors('fetching apps')
    async def get_apps(ctx: Context) -> str:
        apps = await client_factory().get_apps()
        selected = state_store.for_context(ctx).selected_id
        return _dump(
            {
                'apps': [app.to_json_dict() for app in apps],
                'selectedAppId': selected,
            }
        )

    return ToolDefinition(
        name='get_apps',
        fn=get_apps,
        description=(
            'List all AppSignal applications available to the API key, with their IDs, '
            'names and environments. Use select_app_id to choose the app the other tools '
            'work on.'
        ),
        group=GROUP_APPS,
    )


def select_app_id_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the select_app_id tool."""

    @handle_tool_errors('selecting app')
    async def select_app_id(
        ctx: Context,
        app_id: str = Field(..., min_length=1, description='The app ID returned by get_apps.'),
    ) -> str:
        state = state_store.for_context(ctx)
        apps = await client_factory().get_apps()
        app = next((app for app in apps if app.id == app_id), None)
        if app is None:
            raise ValueError(f'App ID {app_id} not found. Use get_apps to list available apps.')
        state.select(app_id)
        return f'Selected app {app.name} ({app.environment}) with ID {app_id}.'

    return ToolDefinition(
        name='select_app_id',
        fn=select_app_id,
        description=(
            'Select the AppSignal application used by the incident and log tools for this '
            'session. Fails when APPSIGNAL_APP_ID pins a different app.'
        ),
        group=GROUP_APPS,
    )


def get_exception_incidents_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_exception_incidents tool."""

    @handle_tool_errors('fetching exception incidents')
    async def get_exception_incidents(
        ctx: Context,
        states: Optional[List[IncidentState]] = Field(
            None, description=STATES_DESCRIPTION
        ),
        limit: int = Field(DEFAULT_LIMIT, ge=1, description='Maximum number of incidents.'),
        offset: int = Field(DEFAULT_OFFSET, ge=0, description='Number of incidents to skip.'),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        result = await client_factory().get_exception_incidents(
            app_id, states or DEFAULT_STATES, limit, offset
        )
        return _dump(result.to_json_dict())

    return ToolDefinition(
        name='get_exception_incidents',
        fn=get_exception_incidents,
        description=(
            'List exception incidents of the selected app. Exception incidents group similar '
            'errors together; use this for an overview of errors affecting the app, '
            'with state filtering and pagination.'
        ),
        group=GROUP_EXCEPTIONS,
    )


def get_exception_incident_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_exception_incident tool."""

    @handle_tool_errors('fetching exception incident details')
    async def get_exception_incident(
        ctx: Context,
        incident_id: str = Field(
            ..., min_length=1, description='The incident ID or number.'
        ),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        return _dump(await client_factory().get_exception_incident(app_id, incident_id))

    return ToolDefinition(
        name='get_exception_incident',
        fn=get_exception_incident,
        description=(
            'Get details of one open exception incident of the selected app: exception name, '
            'message, occurrence count and affected actions.'
        ),
        group=GROUP_EXCEPTIONS,
    )


def get_exception_incident_sample_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_exception_incident_sample tool."""

    @handle_tool_errors('fetching exception incident sample')
    async def get_exception_incident_sample(
        ctx: Context,
        incident_id: str = Field(..., min_length=1, description='The incident ID or number.'),
        offset: int = Field(
            0, ge=0, description='Which sample to fetch, 0 being the most recent.'
        ),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        sample = await client_factory().get_exception_incident_sample(app_id, incident_id, offset)
        return _dump(sample.to_json_dict())

    return ToolDefinition(
        name='get_exception_incident_sample',
        fn=get_exception_incident_sample,
        description=(
            'Get one sample occurrence of an exception incident, with backtrace, request '
            'parameters, session data and the deploy marker where it first appeared.'
        ),
        group=GROUP_EXCEPTIONS,
    )


def get_log_incidents_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_log_incidents tool."""

    @handle_tool_errors('fetching log incidents')
    async def get_log_incidents(
        ctx: Context,
        states: Optional[List[IncidentState]] = Field(
            None, description=STATES_DESCRIPTION
        ),
        limit: int = Field(DEFAULT_LIMIT, ge=1, description='Maximum number of incidents.'),
        offset: int = Field(DEFAULT_OFFSET, ge=0, description='Number of incidents to skip.'),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        result = await client_factory().get_log_incidents(
            app_id, states or DEFAULT_STATES, limit, offset
        )
        return _dump(result.to_json_dict())

    return ToolDefinition(
        name='get_log_incidents',
        fn=get_log_incidents,
        description=(
            'List log incidents of the selected app. Log incidents are raised by log triggers '
            'matching patterns in application logs.'
        ),
        group=GROUP_LOGS,
    )


def get_log_incident_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_log_incident tool."""

    @handle_tool_errors('fetching log incident details')
    async def get_log_incident(
        ctx: Context,
        incident_id: str = Field(..., min_length=1, description='The incident ID or number.'),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        return _dump(await client_factory().get_log_incident(app_id, incident_id))

    return ToolDefinition(
        name='get_log_incident',
        fn=get_log_incident,
        description=(
            'Get details of one open log incident of the selected app, including the trigger '
            'query and severities that raised it.'
        ),
        group=GROUP_LOGS,
    )


def search_logs_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the search_logs tool."""

    @handle_tool_errors('searching logs')
    async def search_logs(
        ctx: Context,
        query: str = Field(
            ..., description='Search query matched against log messages and attributes.'
        ),
        limit: int = Field(
            DEFAULT_LOG_LIMIT,
            ge=1,
            le=MAX_LOG_LIMIT,
            description='Maximum number of log lines to return (max 1000).',
        ),
        severities: Optional[List[Severity]] = Field(
            None, description='Only return lines with these severities. Default: all.'
        ),
        start: Optional[str] = Field(
            None, description='ISO 8601 start of the time range, e.g. "2024-01-15T00:00:00Z".'
        ),
        end: Optional[str] = Field(None, description='ISO 8601 end of the time range.'),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        lines = await client_factory().search_logs(app_id, query, limit, severities, start, end)
        return _dump({'lines': lines, 'count': len(lines)})

    return ToolDefinition(
        name='search_logs',
        fn=search_logs,
        description=(
            'Search the application logs of the selected app by content, filtered by severity '
            'and time range.'
        ),
        group=GROUP_LOGS,
    )


def get_performance_incidents_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_performance_incidents tool."""

    @handle_tool_errors('fetching performance incidents')
    async def get_performance_incidents(
        ctx: Context,
        states: Optional[List[IncidentState]] = Field(
            None, description=STATES_DESCRIPTION
        ),
        limit: int = Field(DEFAULT_LIMIT, ge=1, description='Maximum number of incidents.'),
        offset: int = Field(DEFAULT_OFFSET, ge=0, description='Number of incidents to skip.'),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        result = await client_factory().get_performance_incidents(
            app_id, states or DEFAULT_STATES, limit, offset
        )
        return _dump(result.to_json_dict())

    return ToolDefinition(
        name='get_performance_incidents',
        fn=get_performance_incidents,
        description=(
            'List performance incidents of the selected app: slow endpoints, queries and '
            'N+1 patterns, with mean duration and occurrence counts.'
        ),
        group=GROUP_PERFORMANCE,
    )


def get_performance_incident_tool(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> ToolDefinition:
    """Build the get_performance_incident tool."""

    @handle_tool_errors('fetching performance incident details')
    async def get_performance_incident(
        ctx: Context,
        incident_id: str = Field(..., min_length=1, description='The incident ID or number.'),
    ) -> str:
        app_id = state_store.for_context(ctx).require(NO_APP_SELECTED)
        return _dump(await client_factory().get_performance_incident(app_id, incident_id))

    return ToolDefinition(
        name='get_performance_incident',
        fn=get_performance_incident,
        description='Get details of one open performance incident of the selected app.',
        group=GROUP_PERFORMANCE,
    )


TOOL_FACTORIES = [
    get_apps_tool,
    select_app_id_tool,
    get_exception_incidents_tool,
    get_exception_incident_tool,
    get_exception_incident_sample_tool,
    get_log_incidents_tool,
    get_log_incident_tool,
    search_logs_tool,
    get_performance_incidents_tool,
    get_performance_incident_tool,
]


def build_tools(
    client_factory: ClientFactory, state_store: SessionStateStore
) -> List[ToolDefinition]:
    """Build every AppSignal tool definition."""
    return [factory(client_factory, state_store) for factory in TOOL_FACTORIES]
