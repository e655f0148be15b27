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

"""Markdown rendering of admin API records for tool output."""

from pulsemcp.cms_admin_mcp_server.models import (
    AuthorList,
    ImplementationList,
    McpImplementation,
    Post,
    PostList,
    UnifiedMcpServer,
)
from typing import Iterable, List, Optional


def format_date(value: Optional[str]) -> str:
    """Date part of an ISO 8601 timestamp."""
    return value[:10] if value else 'unknown'


def _page_info(pagination) -> str:
    if pagination is None or pagination.current_page is None:
        return ''
    return f' (page {pagination.current_page} of {pagination.total_pages})'


def format_post_list(result: PostList) -> str:
    """Render a page of posts as a numbered list."""
    lines = [f'Found {len(result.posts)} newsletter posts{_page_info(result.pagination)}:', '']
    for index, post in enumerate(result.posts, start=1):
        lines.append(f'{index}. **{post.title}** ({post.slug})')
        lines.append(f'   Status: {post.status} | Category: {post.category}')
        if post.author:
            lines.append(f'   Author: {post.author.name}')
        lines.append(f'   Created: {format_date(post.created_at)}')
        if post.short_description:
            lines.append(f'   {post.short_description}')
        lines.append('')
    return '\n'.join(lines).strip()


def format_post(post: Post) -> str:
    """Render a post with its body and every metadata field that is set."""
    lines = [f'# {post.title}', '', f'**Slug:** {post.slug}']
    lines.append(f'**Status:** {post.status} | **Category:** {post.category}')
    if post.author:
        lines.append(f'**Author:** {post.author.name} (ID: {post.author.id})')
    elif post.author_id:
        lines.append(f'**Author ID:** {post.author_id}')
    lines.append(f'**Created:** {format_date(post.created_at)}')
    lines.append(f'**Updated:** {format_date(post.updated_at)}')
    if post.last_updated:
        lines.append(f'**Last Updated:** {post.last_updated}')
    lines.append('')
    if post.short_title:
        lines.append(f'**Short Title:** {post.short_title}')
    if post.short_description:
        lines.extend([f'**Summary:** {post.short_description}', ''])

    lines.extend(['## Content', '', post.body or '*Content not available*', ''])
    if post.table_of_contents:
        lines.extend(['## Table of Contents', '', str(post.table_of_contents), ''])

    lines.extend(['## Metadata', ''])
    metadata = [
        ('Image URL', post.image_url),
        ('Preview Image', post.preview_image_url),
        ('Share Image', post.share_image),
        ('Title Tag', post.title_tag),
        ('Description Tag', post.description_tag),
        ('Featured MCP Servers', _join(post.featured_mcp_server_ids)),
        ('Featured MCP Clients', _join(post.featured_mcp_client_ids)),
    ]
    lines.extend(f'- **{label}:** {value}' for label, value in metadata if value)
    return '\n'.join(lines).strip()


def format_saved_post(post: Post, heading: str, fields: Iterable[str] = ()) -> str:
    """Render the confirmation shown after creating or updating a post."""
    lines = [heading, '', f'**Title:** {post.title}', f'**Slug:** {post.slug}']
    lines.append(f'**Status:** {post.status}')
    lines.append(f'**Category:** {post.category}')
    if post.author:
        lines.append(f'**Author:** {post.author.name}')
    fields = list(fields)
    if fields:
        lines.append(f'**Updated:** {format_date(post.updated_at)}')
        lines.extend(['', '**Fields updated:**'])
        lines.extend(f'- {field}' for field in fields)
    else:
        lines.append(f'**Created:** {format_date(post.created_at)}')
        if post.short_description:
            lines.extend(['', f'**Summary:** {post.short_description}'])
        lines.extend(['', 'The draft has been saved and can be edited or published later.'])
    return '\n'.join(lines)


def format_author_list(result: AuthorList) -> str:
    """Render a page of authors."""
    lines = [f'Found {len(result.authors)} authors{_page_info(result.pagination)}', '']
    if not result.authors:
        lines.append('No authors found matching your criteria.')
    for author in result.authors:
        lines.append(f'## {author.name}')
        lines.append(f'**Slug:** {author.slug}')
        if author.bio:
            lines.append(f'**Bio:** {author.bio}')
        if author.image_url:
            lines.append(f'**Avatar:** {author.image_url}')
        lines.extend([f'**Created:** {format_date(author.created_at)}', ''])
    return '\n'.join(lines).strip()


def format_search_results(
    result: ImplementationList, query: str, offset: int, limit: int
) -> str:
    """Render implementation search results with a hint for the next page."""
    count = len(result.implementations)
    header = f'Found {count} MCP implementation(s) matching "{query}"'
    if result.pagination and result.pagination.total_count is not None:
        header += f' (showing {count} of {result.pagination.total_count} total)'
    lines = [f'{header}:', '']
    for index, impl in enumerate(result.implementations, start=1):
        lines.append(f'{index}. **{impl.name}** ({impl.type})')
        lines.extend(_implementation_lines(impl))
        lines.append('')
    if result.pagination and result.pagination.has_next:
        lines.extend(
            ['---', f'More results available. Use offset={offset + limit} to see the next page.']
        )
    return '\n'.join(lines).strip()


def format_draft_implementations(result: ImplementationList) -> str:
    """Render draft implementations with their linked server or client."""
    header = f'Found {len(result.implementations)} draft MCP implementations'
    pagination = result.pagination
    if pagination and pagination.current_page is not None:
        header += (
            f' (page {pagination.current_page} of {pagination.total_pages}, '
            f'total: {pagination.total_count})'
        )
    lines = [f'{header}:', '']
    for index, impl in enumerate(result.implementations, start=1):
        lines.append(f'{index}. **{impl.name}** ({impl.slug})')
        lines.append(f'   ID: {impl.id} | Type: {impl.type} | Status: {impl.status}')
        if impl.short_description:
            lines.append(f'   Description: {impl.short_description}')
        if impl.internal_notes:
            lines.append(f'   Internal Notes: {impl.internal_notes}')
        if impl.github_owner and impl.github_repo:
            repo = f'{impl.github_owner}/{impl.github_repo}'
            if impl.github_subfolder:
                repo += f'/{impl.github_subfolder}'
            lines.append(f'   GitHub: {repo}')
        if impl.mcp_server:
            lines.append(
                f'   Linked MCP Server: {impl.mcp_server.slug} (ID: {impl.mcp_server.id})'
            )
        elif impl.mcp_server_id:
            lines.append(f'   Linked MCP Server ID: {impl.mcp_server_id} (details not available)')
        if impl.mcp_client:
            lines.append(
                f'   Linked MCP Client: {impl.mcp_client.slug} (ID: {impl.mcp_client.id})'
            )
        elif impl.mcp_client_id:
            lines.append(f'   Linked MCP Client ID: {impl.mcp_client_id} (details not available)')
        lines.append(
            f'   Created: {format_date(impl.created_at)} | '
            f'Updated: {format_date(impl.updated_at)}'
        )
        lines.append('')
    return '\n'.join(lines).strip()


def format_unified_server(unified: UnifiedMcpServer) -> str:
    """Render an MCP server merged with its implementation."""
    server = unified.server
    impl = unified.implementation
    lines = [f'# {unified.name}', '', f'**Slug:** `{server.slug}`']
    if impl is not None:
        lines.append(f'**Implementation ID:** {impl.id}')
        lines.append(f'**Status:** {impl.status}')
    else:
        lines.append('**Implementation ID:** None (no implementation lists this server)')
        lines.append('**Status:** draft')
    classification = (impl.classification if impl else None) or server.classification
    if classification:
        lines.append(f'**Classification:** {classification}')
    language = (impl.implementation_language if impl else None) or server.implementation_language
    if language:
        lines.append(f'**Language:** {language}')
    if impl is not None and impl.url:
        lines.append(f'**URL:** {impl.url}')
    if impl is not None and impl.short_description:
        lines.extend(['', '**Short Description:**', impl.short_description])
    if impl is not None and impl.description:
        lines.extend(['', '**Full Description:**', impl.description])

    if impl is not None and impl.provider_name:
        lines.extend(['', '## Provider', f'- **Name:** {impl.provider_name}'])
        if impl.provider_url:
            lines.append(f'- **URL:** {impl.provider_url}')
    if impl is not None and impl.github_owner and impl.github_repo:
        lines.extend(['', '## Source Code'])
        lines.append(f'- **GitHub:** https://github.com/{impl.github_owner}/{impl.github_repo}')
        if impl.github_stars is not None:
            lines.append(f'- **Stars:** {impl.github_stars:,}')

    if server.remotes:
        lines.extend(['', f'## Remote Endpoints ({len(server.remotes)})'])
        for index, remote in enumerate(server.remotes, start=1):
            name = remote.get('display_name') or remote.get('url_direct') or 'Endpoint'
            lines.append(f'{index}. {name}')
            for key, label in (('url_direct', 'Direct URL'), ('transport', 'Transport')):
                if remote.get(key):
                    lines.append(f'   - **{label}:** {remote[key]}')
    if server.tags:
        lines.extend(['', '## Tags', ', '.join(f'`{tag.get("name")}`' for tag in server.tags)])

    downloads = [
        ('Total', server.downloads_estimate_total),
        ('Last 30 days', server.downloads_estimate_last_30_days),
        ('Last 7 days', server.downloads_estimate_last_7_days),
    ]
    if any(value is not None for _, value in downloads):
        lines.extend(['', '## Download Statistics'])
        lines.extend(
            f'- **{label}:** {value:,}' for label, value in downloads if value is not None
        )

    if impl is not None and impl.internal_notes:
        lines.extend(['', '## Internal Notes', impl.internal_notes])
    return '\n'.join(lines)


def _implementation_lines(impl: McpImplementation) -> List[str]:
    status = f'   Status: {impl.status}'
    if impl.classification:
        status += f' | Classification: {impl.classification}'
    lines = [f'   Slug: {impl.slug}', status]
    if impl.provider_name:
        lines.append(f'   Provider: {impl.provider_name}')
    if impl.implementation_language:
        lines.append(f'   Language: {impl.implementation_language}')
    if impl.github_stars is not None:
        lines.append(f'   GitHub Stars: {impl.github_stars}')
    if impl.short_description:
        lines.append(f'   {impl.short_description}')
    if impl.url:
        lines.append(f'   URL: {impl.url}')
    if impl.mcp_server_id:
        lines.append(f'   MCP Server ID: {impl.mcp_server_id}')
    if impl.mcp_client_id:
        lines.append(f'   MCP Client ID: {impl.mcp_client_id}')
    return lines


def _join(values: List[int]) -> str:
    return ', '.join(str(value) for value in values)
