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

"""Tests for the AppSignal server setup."""

import json
import pytest
from pulsemcp.appsignal_mcp_server import server
from pulsemcp.common.state import SessionStateStore
from unittest.mock import MagicMock, patch


ALL_TOOLS = {
    'get_apps',
    'select_app_id',
    'get_exception_incidents',
    'get_exception_incident',
    'get_exception_incident_sample',
    'get_log_incidents',
    'get_log_incident',
    'search_logs',
    'get_performance_incidents',
    'get_performance_incident',
}


@pytest.fixture
def appsignal_env(monkeypatch):
    """An AppSignal API key and no tool configuration."""
    monkeypatch.setenv('APPSIGNAL_API_KEY', 'token-1')
    for name in [
        'APPSIGNAL_APP_ID',
        'APPSIGNAL_ENABLED_TOOL_GROUPS',
        'APPSIGNAL_ENABLED_TOOLS',
        'APPSIGNAL_DISABLED_TOOLS',
    ]:
        monkeypatch.delenv(name, raising=False)


async def _tool_names(mcp):
    return {tool.name for tool in await mcp.list_tools()}


class TestCreateServer:
    """Tests for create_server."""

    @pytest.mark.asyncio
    async def test_all_tools(self, appsignal_env):
        """Every tool is registered by default."""
        assert await _tool_names(server.create_server()) == ALL_TOOLS

    @pytest.mark.asyncio
    async def test_groups(self, appsignal_env, monkeypatch):
        """Tool groups limit the registered tools."""
        monkeypatch.setenv('APPSIGNAL_ENABLED_TOOL_GROUPS', 'apps,logs')

        assert await _tool_names(server.create_server(client_factory=MagicMock())) == {
            'get_apps',
            'select_app_id',
            'get_log_incidents',
            'get_log_incident',
            'search_logs',
        }

    @pytest.mark.asyncio
    async def test_enabled_and_disabled_tools(self, appsignal_env, monkeypatch):
        """Explicit tool lists are honored."""
        monkeypatch.setenv('APPSIGNAL_DISABLED_TOOLS', 'search_logs,get_apps')

        names = await _tool_names(server.create_server(client_factory=MagicMock()))
        assert names == ALL_TOOLS - {'search_logs', 'get_apps'}

        monkeypatch.setenv('APPSIGNAL_ENABLED_TOOLS', 'get_apps')
        names = await _tool_names(server.create_server(client_factory=MagicMock()))
        assert names == {'get_apps'}

    @pytest.mark.asyncio
    async def test_enumerated_inputs(self, appsignal_env):
        """Incident states and log severities are advertised as enums."""
        tools = {
            tool.name: json.dumps(tool.inputSchema)
            for tool in await server.create_server(client_factory=MagicMock()).list_tools()
        }

        for name in ['get_exception_incidents', 'get_log_incidents', 'get_performance_incidents']:
            assert '["OPEN", "WIP", "CLOSED"]' in tools[name]
        assert '["debug", "info", "warn", "error", "fatal"]' in tools['search_logs']

    @pytest.mark.asyncio
    async def test_app_id_locks_selection(self, appsignal_env, monkeypatch):
        """APPSIGNAL_APP_ID seeds a locked selection reported by the config resource."""
        monkeypatch.setenv('APPSIGNAL_APP_ID', 'app-1')

        mcp = server.create_server(client_factory=MagicMock())
        contents = list(await mcp.read_resource('appsignal://config'))
        config = json.loads(contents[0].content)

        assert config['state'] == {'initialAppId': 'app-1', 'appLocked': True}
        assert config['environment']['APPSIGNAL_API_KEY'] == '***configured***'
        assert 'token-1' not in contents[0].content

    @pytest.mark.asyncio
    async def test_explicit_state_store(self, appsignal_env):
        """A provided state store is used as is."""
        mcp = server.create_server(
            client_factory=MagicMock(), state_store=SessionStateStore('app-7')
        )

        config = json.loads(list(await mcp.read_resource('appsignal://config'))[0].content)

        assert config['state']['initialAppId'] == 'app-7'


class TestMain:
    """Tests for main."""

    def test_missing_api_key(self, monkeypatch):
        """main exits when APPSIGNAL_API_KEY is missing."""
        monkeypatch.delenv('APPSIGNAL_API_KEY', raising=False)
        monkeypatch.setattr('sys.argv', ['appsignal-mcp-server'])

        with patch.object(server, 'load_dotenv'), pytest.raises(SystemExit) as exc_info:
            server.main()

        assert exc_info.value.code == 1

    def test_server_error_exits(self, appsignal_env, monkeypatch):
        """A crash of the transport exits with status 1."""
        monkeypatch.setattr('sys.argv', ['appsignal-mcp-server'])
        mcp = MagicMock()
        mcp.run.side_effect = RuntimeError('boom')

        with (
            patch.object(server, 'load_dotenv'),
            patch.object(server, 'create_server', return_value=mcp),
            pytest.raises(SystemExit) as exc_info,
        ):
            server.main()

        assert exc_info.value.code == 1
