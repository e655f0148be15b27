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

"""PulseMCP admin API client."""

import httpx
from abc import ABC, abstractmethod
from loguru import logger
from pulsemcp.cms_admin_mcp_server.consts import (
    AUTHORS_PATH,
    DEFAULT_API_URL,
    DRAFT_IMPLEMENTATIONS_PATH,
    IMPLEMENTATIONS_SEARCH_PATH,
    MCP_CLIENTS_PATH,
    MCP_SERVERS_PATH,
    POSTS_PATH,
    SERVER_MATCH_LIMIT,
)
from pulsemcp.cms_admin_mcp_server.models import (
    Author,
    AuthorList,
    ImplementationList,
    McpClient,
    McpServer,
    Post,
    PostList,
    UnifiedMcpServer,
)
from pulsemcp.common.http import ApiHttpClient
from typing import Any, Dict, Optional


class CmsAdminApi(ABC):
    """Operations the CMS admin tools rely on."""

    @abstractmethod
    async def get_posts(
        self,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        direction: Optional[str] = None,
        page: Optional[int] = None,
    ) -> PostList:
        """List newsletter posts."""
        pass

    @abstractmethod
    async def get_post(self, slug: str) -> Post:
        """Get one post by slug."""
        pass

    @abstractmethod
    async def create_post(self, params: Dict[str, Any]) -> Post:
        """Create a post."""
        pass

    @abstractmethod
    async def update_post(self, slug: str, params: Dict[str, Any]) -> Post:
        """Update the given fields of a post."""
        pass

    @abstractmethod
    async def get_authors(
        self, search: Optional[str] = None, page: Optional[int] = None
    ) -> AuthorList:
        """List authors."""
        pass

    @abstractmethod
    async def get_author_by_slug(self, slug: str) -> Author:
        """Get one author by slug."""
        pass

    @abstractmethod
    async def get_mcp_server_by_slug(self, slug: str) -> McpServer:
        """Get one MCP server record by slug."""
        pass

    @abstractmethod
    async def get_mcp_client_by_slug(self, slug: str) -> McpClient:
        """Get one MCP client record by slug."""
        pass

    @abstractmethod
    async def search_implementations(
        self,
        query: str,
        type: str = 'all',
        status: str = 'live',
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ImplementationList:
        """Search server and client implementations."""
        pass

    @abstractmethod
    async def get_draft_implementations(
        self, page: Optional[int] = None, search: Optional[str] = None
    ) -> ImplementationList:
        """List implementations waiting in draft status."""
        pass

    async def get_mcp_server(self, slug: str) -> UnifiedMcpServer:
        """Get an MCP server together with the implementation that lists it.

        Fetches the server by slug, then searches implementations for the slug
        and keeps the one whose mcp_server_id matches the server.

        Args:
            slug: Slug of the MCP server

        Returns:
            The server, with implementation None when no implementation matches
        """
        server = await self.get_mcp_server_by_slug(slug)
        results = await self.search_implementations(
            slug, type='server', status='all', limit=SERVER_MATCH_LIMIT
        )
        implementation = next(
            (impl for impl in results.implementations if impl.mcp_server_id == server.id),
            None,
        )
        if implementation is None:
            logger.debug(f'No implementation references MCP server {slug} ({server.id})')
        return UnifiedMcpServer(server=server, implementation=implementation)


class CmsAdminClient(ApiHttpClient, CmsAdminApi):
    """CmsAdminApi backed by the PulseMCP admin REST API."""

    error_messages = {403: 'User lacks admin privileges'}

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client with an admin API key."""
        super().__init__(
            base_url or DEFAULT_API_URL,
            headers={'X-API-Key': api_key, 'Accept': 'application/json'},
            transport=transport,
        )

    async def get_posts(
        self,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        direction: Optional[str] = None,
        page: Optional[int] = None,
    ) -> PostList:
        """List newsletter posts."""
        body = await self.request(
            'GET',
            POSTS_PATH,
            params={'search': search, 'sort': sort, 'direction': direction, 'page': page},
            resource='Posts',
        )
        return PostList.model_validate(_list_body(body, 'posts'))

    async def get_post(self, slug: str) -> Post:
        """Get one post by slug."""
        body = await self.request('GET', f'{POSTS_PATH}/{slug}', resource='Post')
        return Post.model_validate(body)

    async def create_post(self, params: Dict[str, Any]) -> Post:
        """Create a post."""
        body = await self.request('POST', POSTS_PATH, json={'post': params}, resource='Post')
        return Post.model_validate(body)

    async def update_post(self, slug: str, params: Dict[str, Any]) -> Post:
        """Update the given fields of a post."""
        body = await self.request(
            'PUT', f'{POSTS_PATH}/{slug}', json={'post': params}, resource='Post'
        )
        return Post.model_validate(body)

    async def get_authors(
        self, search: Optional[str] = None, page: Optional[int] = None
    ) -> AuthorList:
        """List authors."""
        body = await self.request(
            'GET', AUTHORS_PATH, params={'search': search, 'page': page}, resource='Authors'
        )
        return AuthorList.model_validate(_list_body(body, 'authors'))

    async def get_author_by_slug(self, slug: str) -> Author:
        """Get one author by slug."""
        body = await self.request('GET', f'{AUTHORS_PATH}/{slug}', resource='Author')
        return Author.model_validate(body)

    async def get_mcp_server_by_slug(self, slug: str) -> McpServer:
        """Get one MCP server record by slug."""
        body = await self.request('GET', f'{MCP_SERVERS_PATH}/{slug}', resource='MCP server')
        return McpServer.model_validate(body)

    async def get_mcp_client_by_slug(self, slug: str) -> McpClient:
        """Get one MCP client record by slug."""
        body = await self.request('GET', f'{MCP_CLIENTS_PATH}/{slug}', resource='MCP client')
        return McpClient.model_validate(body)

    async def search_implementations(
        self,
        query: str,
        type: str = 'all',
        status: str = 'live',
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ImplementationList:
        """Search server and client implementations."""
        body = await self.request(
            'GET',
            IMPLEMENTATIONS_SEARCH_PATH,
            params={'q': query, 'type': type, 'status': status, 'limit': limit, 'offset': offset},
            resource='Implementations',
        )
        return ImplementationList.model_validate(_list_body(body, 'implementations'))

    async def get_draft_implementations(
        self, page: Optional[int] = None, search: Optional[str] = None
    ) -> ImplementationList:
        """List implementations waiting in draft status."""
        body = await self.request(
            'GET',
            DRAFT_IMPLEMENTATIONS_PATH,
            params={'page': page, 'search': search},
            resource='Draft implementations',
        )
        return ImplementationList.model_validate(_list_body(body, 'implementations'))


def _list_body(body: Optional[Dict[str, Any]], key: str) -> Dict[str, Any]:
    """Normalize a list response to {key: [...], 'pagination': ...}.

    The API returns items either under their own key or under `data`.
    """
    body = body or {}
    items = body.get(key)
    if items is None:
        items = body.get('data') or []
    return {key: items, 'pagination': body.get('pagination')}
