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

"""Tests for the Langfuse tools."""

import json
import pytest
from mcp.server.fastmcp.exceptions import ToolError
from pulsemcp.common.errors import ApiError
from pulsemcp.langfuse_mcp_server import truncation
from pulsemcp.langfuse_mcp_server.client import LangfuseApi
from pulsemcp.langfuse_mcp_server.tools import build_tools


TRACE = {
    'id': 't-1',
    'name': 'chat',
    'timestamp': '2025-01-01T00:00:00.000Z',
    'userId': 'u-1',
    'sessionId': 's-1',
    'tags': ['prod'],
    'latency': 2.5,
    'totalCost': 0.01,
    'input': 'secret prompt',
    'output': 'answer',
    'observations': ['o-1', 'o-2'],
    'scores': ['sc-1'],
    'htmlPath': '/project/p/traces/t-1',
}

OBSERVATION = {
    'id': 'o-1',
    'traceId': 't-1',
    'type': 'GENERATION',
    'name': 'llm',
    'model': 'gpt-4o',
    'startTime': '2025-01-01T00:00:00.000Z',
    'input': {'messages': [{'role': 'user', 'content': 'hi'}]},
    'output': 'hello',
    'usageDetails': {'input': 10, 'output': 2},
}


class FakeLangfuse(LangfuseApi):
    """In-memory LangfuseApi recording the parameters it receives."""

    def __init__(self, error=None):
        """Initialize with an optional error raised by every call."""
        self.error = error
        self.params = []

    async def _answer(self, params, result):
        self.params.append(params)
        if self.error:
            raise self.error
        return result

    async def get_traces(self, params):
        """List traces."""
        return await self._answer(params, {'data': [TRACE], 'meta': {'totalItems': 1}})

    async def get_trace(self, trace_id):
        """Get a trace."""
        return await self._answer({'id': trace_id}, {**TRACE, 'input': 'p' * 1500})

    async def get_observations(self, params):
        """List observations."""
        return await self._answer(params, {'data': [OBSERVATION], 'meta': {'totalItems': 1}})

    async def get_observation(self, observation_id):
        """Get an observation."""
        return await self._answer({'id': observation_id}, OBSERVATION)


@pytest.fixture(autouse=True)
def spill_to_tmp(monkeypatch, tmp_path):
    """Write side files below tmp_path."""
    monkeypatch.setattr(truncation, 'spill_directory', lambda: tmp_path)
    return tmp_path


def _tools(client):
    return {definition.name: definition for definition in build_tools(lambda: client)}


TRACE_ARGS = {
    'page': 1,
    'limit': 10,
    'user_id': None,
    'name': None,
    'session_id': None,
    'from_timestamp': None,
    'to_timestamp': None,
    'order_by': None,
    'tags': None,
    'version': None,
    'release': None,
    'environment': None,
}

OBSERVATION_ARGS = {
    'page': 1,
    'limit': 10,
    'trace_id': None,
    'name': None,
    'user_id': None,
    'type': None,
    'level': None,
    'parent_observation_id': None,
    'from_start_time': None,
    'to_start_time': None,
    'version': None,
    'environment': None,
}


class TestBuildTools:
    """Tests for the tool definitions."""

    def test_names_and_groups(self):
        """Four read-only tools in the traces and observations groups."""
        tools = _tools(FakeLangfuse())

        assert {name: tool.group for name, tool in tools.items()} == {
            'get_traces': 'traces',
            'get_trace_detail': 'traces',
            'get_observations': 'observations',
            'get_observation': 'observations',
        }
        assert all(tool.readonly for tool in tools.values())
        assert 'truncated' in tools['get_traces'].description


class TestTraceTools:
    """Tests for get_traces and get_trace_detail."""

    @pytest.mark.asyncio
    async def test_get_traces_summarizes(self, ctx):
        """Traces are summarized without input and output."""
        client = FakeLangfuse()
        tool = _tools(client)['get_traces'].fn

        result = json.loads(
            await tool(ctx=ctx, **{**TRACE_ARGS, 'user_id': 'u-1', 'tags': ['prod']})
        )

        (summary,) = result['data']
        assert summary['id'] == 't-1'
        assert summary['userId'] == 'u-1'
        assert summary['totalCost'] == 0.01
        assert summary['observationCount'] == 2
        assert summary['scoreCount'] == 1
        assert 'input' not in summary
        assert 'output' not in summary
        assert 'environment' not in summary
        assert result['meta'] == {'totalItems': 1}
        assert client.params[0]['userId'] == 'u-1'
        assert client.params[0]['tags'] == ['prod']
        assert client.params[0]['limit'] == 10

    @pytest.mark.asyncio
    async def test_get_trace_detail_truncates(self, ctx, spill_to_tmp):
        """Large fields in the trace detail are saved to side files."""
        tool = _tools(FakeLangfuse())['get_trace_detail'].fn

        result = json.loads(await tool(ctx=ctx, trace_id='t-1'))

        assert result['input'].startswith('p' * 1000 + '... [TRUNCATED: 1500 chars total.')
        assert result['output'] == 'answer'
        (saved,) = spill_to_tmp.iterdir()
        assert saved.read_text() == 'p' * 1500

    @pytest.mark.asyncio
    async def test_errors_become_tool_errors(self, ctx):
        """Client errors are reported with the failing action."""
        client = FakeLangfuse(error=ApiError(404, 'Trace not found'))
        tool = _tools(client)['get_trace_detail'].fn

        with pytest.raises(ToolError, match='Error getting trace detail: Trace not found'):
            await tool(ctx=ctx, trace_id='missing')


class TestObservationTools:
    """Tests for get_observations and get_observation."""

    @pytest.mark.asyncio
    async def test_get_observations_summarizes(self, ctx):
        """Observations are summarized and filters passed with API names."""
        client = FakeLangfuse()
        tool = _tools(client)['get_observations'].fn

        result = json.loads(
            await tool(ctx=ctx, **{**OBSERVATION_ARGS, 'trace_id': 't-1', 'type': 'GENERATION'})
        )

        (summary,) = result['data']
        assert summary['traceId'] == 't-1'
        assert summary['model'] == 'gpt-4o'
        assert summary['usageDetails'] == {'input': 10, 'output': 2}
        assert 'input' not in summary
        assert 'endTime' not in summary
        assert 'costDetails' not in summary
        assert None not in summary.values()
        assert client.params[0]['traceId'] == 't-1'
        assert client.params[0]['type'] == 'GENERATION'

    @pytest.mark.asyncio
    async def test_get_observation(self, ctx):
        """A single observation is returned in full."""
        tool = _tools(FakeLangfuse())['get_observation'].fn

        result = json.loads(await tool(ctx=ctx, observation_id='o-1'))

        assert result['input'] == {'messages': [{'role': 'user', 'content': 'hi'}]}
        assert result['output'] == 'hello'

    @pytest.mark.asyncio
    async def test_listing_error(self, ctx):
        """Listing failures name the action."""
        client = FakeLangfuse(error=ApiError(429, 'Rate limit exceeded. Please try again later.'))
        tool = _tools(client)['get_observations'].fn

        with pytest.raises(ToolError, match='^Error listing observations: Rate limit exceeded'):
            await tool(ctx=ctx, **OBSERVATION_ARGS)
        ctx.error.assert_awaited_once()
