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

"""PulseMCP CMS admin tools."""

import asyncio
from mcp.server.fastmcp import Context
from pulsemcp.cms_admin_mcp_server.client import CmsAdminApi
from pulsemcp.cms_admin_mcp_server.consts import (
    DEFAULT_SEARCH_LIMIT,
    GROUP_MCP_SERVERS,
    GROUP_NEWSLETTER,
    GROUP_SERVER_QUEUE,
    MAX_SEARCH_LIMIT,
)
from pulsemcp.cms_admin_mcp_server.formatting import (
    format_author_list,
    format_draft_implementations,
    format_post,
    format_post_list,
    format_saved_post,
    format_search_results,
    format_unified_server,
)
from pulsemcp.common.errors import handle_tool_errors
from pulsemcp.common.tools import ToolDefinition
from pydantic import Field
from typing import Any, Callable, Dict, List, Literal, Optional


ClientFactory = Callable[[], CmsAdminApi]

Category = Literal['newsletter', 'other']

NO_CHANGES = 'No changes provided. Please specify at least one field to update.'

page = Field(None, ge=1, description='Page number for pagination, starting from 1. Default: 1')
post_slug = Field(
    ...,
    min_length=1,
    description='Unique slug of the post, e.g. "introducing-claude-mcp-protocol"',
)
image_url = Field(None, description='URL of the hero image displayed at the top of the post')
preview_image_url = Field(None, description='URL of the image shown in post listings')
share_image = Field(None, description='URL of the social media sharing (Open Graph) image')
title_tag = Field(None, description='SEO title tag, defaults to the post title')
short_title = Field(None, description='Abbreviated title for navigation')
short_description = Field(None, description='Brief 1-2 sentence summary for listings')
description_tag = Field(None, description='SEO meta description, under 160 characters')
last_updated = Field(None, description='ISO 8601 date of the last content revision')
table_of_contents = Field(None, description='Table of contents as HTML or JSON')
featured_server_slugs = Field(
    None, description='Slugs of MCP servers to feature, e.g. ["github", "slack"]'
)
featured_client_slugs = Field(
    None, description='Slugs of MCP clients to feature, e.g. ["claude-desktop", "cline"]'
)


async def _featured_ids(
    client: CmsAdminApi,
    server_slugs: Optional[List[str]],
    client_slugs: Optional[List[str]],
) -> Dict[str, List[int]]:
    """Resolve featured server and client slugs to their IDs."""
    ids: Dict[str, List[int]] = {}
    if server_slugs is not None:
        servers = await asyncio.gather(
            *(client.get_mcp_server_by_slug(slug) for slug in server_slugs)
        )
        ids['featured_mcp_server_ids'] = [server.id for server in servers]
    if client_slugs is not None:
        clients = await asyncio.gather(
            *(client.get_mcp_client_by_slug(slug) for slug in client_slugs)
        )
        ids['featured_mcp_client_ids'] = [mcp_client.id for mcp_client in clients]
    return ids


def _set_fields(**fields: Any) -> Dict[str, Any]:
    return {name: value for name, value in fields.items() if value is not None}


def get_newsletter_posts_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_newsletter_posts tool."""

    @handle_tool_errors('fetching newsletter posts')
    async def get_newsletter_posts(
        ctx: Context,
        search: Optional[str] = Field(
            None, description='Filter posts by title, content or author name'
        ),
        sort: Optional[str] = Field(
            None,
            description='Sort field: created_at, updated_at, title or status. Default: created_at',
        ),
        direction: Optional[Literal['asc', 'desc']] = Field(
            None, description='Sort direction. Default: desc'
        ),
        page: Optional[int] = page,
    ) -> str:
        result = await client_factory().get_posts(search, sort, direction, page)
        return format_post_list(result)

    return ToolDefinition(
        name='get_newsletter_posts',
        fn=get_newsletter_posts,
        description=(
            'List newsletter posts in the PulseMCP CMS with search, sorting and pagination. '
            'Status draft means unpublished, live means published on the website.'
        ),
        group=GROUP_NEWSLETTER,
    )


def get_newsletter_post_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_newsletter_post tool."""

    @handle_tool_errors('fetching post')
    async def get_newsletter_post(ctx: Context, slug: str = post_slug) -> str:
        return format_post(await client_factory().get_post(slug))

    return ToolDefinition(
        name='get_newsletter_post',
        fn=get_newsletter_post,
        description=(
            'Get a newsletter post by slug, formatted as markdown with its raw HTML body, '
            'table of contents, SEO fields and featured servers and clients.'
        ),
        group=GROUP_NEWSLETTER,
    )


def draft_newsletter_post_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the draft_newsletter_post tool."""

    @handle_tool_errors('creating draft post')
    async def draft_newsletter_post(
        ctx: Context,
        title: str = Field(..., min_length=1, description='Title of the post'),
        body: str = Field(..., description='Full HTML body of the post'),
        slug: str = Field(..., min_length=1, description='Unique URL-friendly identifier'),
        author_slug: str = Field(
            ..., min_length=1, description='Slug of the author. Use get_authors to find one'
        ),
        category: Category = Field('newsletter', description='newsletter or other'),
        image_url: Optional[str] = image_url,
        preview_image_url: Optional[str] = preview_image_url,
        share_image: Optional[str] = share_image,
        title_tag: Optional[str] = title_tag,
        short_title: Optional[str] = short_title,
        short_description: Optional[str] = short_description,
        description_tag: Optional[str] = description_tag,
        last_updated: Optional[str] = last_updated,
        table_of_contents: Optional[Any] = table_of_contents,
        featured_mcp_server_slugs: Optional[List[str]] = featured_server_slugs,
        featured_mcp_client_slugs: Optional[List[str]] = featured_client_slugs,
    ) -> str:
        client = client_factory()
        author = await client.get_author_by_slug(author_slug)
        params = _set_fields(
            title=title,
            body=body,
            slug=slug,
            category=category,
            image_url=image_url,
            preview_image_url=preview_image_url,
            share_image=share_image,
            title_tag=title_tag,
            short_title=short_title,
            short_description=short_description,
            description_tag=description_tag,
            last_updated=last_updated,
            table_of_contents=table_of_contents,
        )
        params.update(
            await _featured_ids(client, featured_mcp_server_slugs, featured_mcp_client_slugs)
        )
        params['author_id'] = author.id
        params['status'] = 'draft'
        post = await client.create_post(params)
        return format_saved_post(post, 'Successfully created draft newsletter post!')

    return ToolDefinition(
        name='draft_newsletter_post',
        fn=draft_newsletter_post,
        description=(
            'Create a newsletter post. Posts are always created as drafts and are published '
            'later through the CMS. Featured server and client slugs are resolved to IDs.'
        ),
        group=GROUP_NEWSLETTER,
        readonly=False,
    )


def update_newsletter_post_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the update_newsletter_post tool."""

    @handle_tool_errors('updating post')
    async def update_newsletter_post(
        ctx: Context,
        slug: str = post_slug,
        title: Optional[str] = Field(None, description='New title'),
        body: Optional[str] = Field(None, description='New HTML body'),
        category: Optional[Category] = Field(None, description='newsletter or other'),
        image_url: Optional[str] = image_url,
        preview_image_url: Optional[str] = preview_image_url,
        share_image: Optional[str] = share_image,
        title_tag: Optional[str] = title_tag,
        short_title: Optional[str] = short_title,
        short_description: Optional[str] = short_description,
        description_tag: Optional[str] = description_tag,
        last_updated: Optional[str] = last_updated,
        table_of_contents: Optional[Any] = table_of_contents,
        featured_mcp_server_slugs: Optional[List[str]] = featured_server_slugs,
        featured_mcp_client_slugs: Optional[List[str]] = featured_client_slugs,
    ) -> str:
        params = _set_fields(
            title=title,
            body=body,
            category=category,
            image_url=image_url,
            preview_image_url=preview_image_url,
            share_image=share_image,
            title_tag=title_tag,
            short_title=short_title,
            short_description=short_description,
            description_tag=description_tag,
            last_updated=last_updated,
            table_of_contents=table_of_contents,
        )
        fields = list(params)
        if featured_mcp_server_slugs is not None:
            fields.append('featured_mcp_servers (converted from slugs)')
        if featured_mcp_client_slugs is not None:
            fields.append('featured_mcp_clients (converted from slugs)')
        if not fields:
            return NO_CHANGES

        client = client_factory()
        params.update(
            await _featured_ids(client, featured_mcp_server_slugs, featured_mcp_client_slugs)
        )
        post = await client.update_post(slug, params)
        return format_saved_post(post, 'Successfully updated newsletter post!', fields)

    return ToolDefinition(
        name='update_newsletter_post',
        fn=update_newsletter_post,
        description=(
            'Update the given fields of a newsletter post, identified by slug. Only the '
            'fields passed are changed; the status cannot be changed.'
        ),
        group=GROUP_NEWSLETTER,
        readonly=False,
    )


def get_authors_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_authors tool."""

    @handle_tool_errors('fetching authors')
    async def get_authors(
        ctx: Context,
        search: Optional[str] = Field(None, description='Filter authors by name'),
        page: Optional[int] = page,
    ) -> str:
        return format_author_list(await client_factory().get_authors(search, page))

    return ToolDefinition(
        name='get_authors',
        fn=get_authors,
        description=(
            'List the authors who can write newsletter posts. Use it to find the author_slug '
            'for draft_newsletter_post.'
        ),
        group=GROUP_NEWSLETTER,
    )


def search_mcp_implementations_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the search_mcp_implementations tool."""

    @handle_tool_errors('searching MCP implementations')
    async def search_mcp_implementations(
        ctx: Context,
        query: str = Field(
            ..., min_length=1, description='Matched against name, description, provider or slug'
        ),
        type: Literal['server', 'client', 'all'] = Field('all', description='Implementation type'),
        status: Literal['draft', 'live', 'archived', 'all'] = Field(
            'live', description='Implementation status'
        ),
        limit: int = Field(
            DEFAULT_SEARCH_LIMIT,
            ge=1,
            le=MAX_SEARCH_LIMIT,
            description='Maximum number of results (1-100)',
        ),
        offset: int = Field(0, ge=0, description='Number of results to skip'),
    ) -> str:
        result = await client_factory().search_implementations(query, type, status, limit, offset)
        return format_search_results(result, query, offset, limit)

    return ToolDefinition(
        name='search_mcp_implementations',
        fn=search_mcp_implementations,
        description='Search MCP servers and clients in the PulseMCP registry.',
        group=GROUP_SERVER_QUEUE,
    )


def get_draft_mcp_implementations_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_draft_mcp_implementations tool."""

    @handle_tool_errors('fetching draft MCP implementations')
    async def get_draft_mcp_implementations(
        ctx: Context,
        page: Optional[int] = page,
        search: Optional[str] = Field(
            None, description='Filter drafts by name or description'
        ),
    ) -> str:
        result = await client_factory().get_draft_implementations(page, search)
        return format_draft_implementations(result)

    return ToolDefinition(
        name='get_draft_mcp_implementations',
        fn=get_draft_mcp_implementations,
        description=(
            'List MCP implementations in draft status waiting for review, with their linked '
            'MCP server or client.'
        ),
        group=GROUP_SERVER_QUEUE,
    )


def get_mcp_server_tool(client_factory: ClientFactory) -> ToolDefinition:
    """Build the get_mcp_server tool."""

    @handle_tool_errors('fetching MCP server')
    async def get_mcp_server(
        ctx: Context,
        slug: str = Field(
            ..., min_length=1, description='Slug of the MCP server, e.g. "filesystem"'
        ),
    ) -> str:
        return format_unified_server(await client_factory().get_mcp_server(slug))

    return ToolDefinition(
        name='get_mcp_server',
        fn=get_mcp_server,
        description=(
            'Get an MCP server by slug, combining the server record with the implementation '
            'that lists it: provider, source code, remotes, tags and download statistics.'
        ),
        group=GROUP_MCP_SERVERS,
    )


TOOL_FACTORIES = [
    get_newsletter_posts_tool,
    get_newsletter_post_tool,
    draft_newsletter_post_tool,
    update_newsletter_post_tool,
    get_authors_tool,
    search_mcp_implementations_tool,
    get_draft_mcp_implementations_tool,
    get_mcp_server_tool,
]


def build_tools(client_factory: ClientFactory) -> List[ToolDefinition]:
    """Build every CMS admin tool definition."""
    return [factory(client_factory) for factory in TOOL_FACTORIES]
