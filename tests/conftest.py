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

"""Shared fixtures for the PulseMCP MCP server tests."""

import httpx
import pytest
import sys
from loguru import logger
from unittest.mock import AsyncMock


class FakeSession:
    """Stand-in for an MCP server session. Instances are weak-referenceable."""

    pass


def make_context(session=None):
    """Create a mocked tool Context bound to a session."""
    ctx = AsyncMock()
    ctx.session = session or FakeSession()
    return ctx


def json_transport(routes):
    """Build an httpx MockTransport answering from a route table.

    Args:
        routes: Maps (method, path) to a Response, or to a callable taking the
            request and returning a Response

    Returns:
        The transport; every handled request is appended to transport.requests
    """
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        route = routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={'error': 'no route'})
        return route(request) if callable(route) else route

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


@pytest.fixture
def ctx():
    """A mocked tool Context with its own session."""
    return make_context()


@pytest.fixture
def context_factory():
    """Factory for mocked Contexts, optionally sharing a session."""
    return make_context


@pytest.fixture
def mock_api():
    """Factory for route table transports, see json_transport."""
    return json_transport


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.setenv('AWS_REGION', 'us-east-1')
    monkeypatch.delenv('AWS_PROFILE', raising=False)


@pytest.fixture(autouse=True)
def reset_logger():
    """Restore loguru's default stderr handler after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr)
