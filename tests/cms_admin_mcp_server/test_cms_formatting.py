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

"""Tests for the markdown rendering of admin API records."""

from pulsemcp.cms_admin_mcp_server.formatting import (
    format_author_list,
    format_date,
    format_draft_implementations,
    format_post,
    format_post_list,
    format_saved_post,
    format_search_results,
    format_unified_server,
)
from pulsemcp.cms_admin_mcp_server.models import (
    AuthorList,
    ImplementationList,
    McpServer,
    Post,
    PostList,
    UnifiedMcpServer,
)


POST = Post.model_validate(
    {
        'id': 1,
        'title': 'MCP Weekly',
        'slug': 'mcp-weekly',
        'body': '<p>Hello</p>',
        'status': 'live',
        'author': {'id': 4, 'name': 'Ada'},
        'created_at': '2025-01-02T10:00:00Z',
        'updated_at': '2025-01-03T10:00:00Z',
        'title_tag': 'MCP Weekly | PulseMCP',
        'featured_mcp_server_ids': [7, 8],
    }
)


def test_format_date():
    """Only the date part is kept."""
    assert format_date('2025-01-02T10:00:00Z') == '2025-01-02'
    assert format_date(None) == 'unknown'


class TestPosts:
    """Tests for post rendering."""

    def test_post_list(self):
        """Posts are numbered with their page."""
        result = PostList.model_validate(
            {
                'posts': [POST.model_dump()],
                'pagination': {'current_page': 1, 'total_pages': 2},
            }
        )

        text = format_post_list(result)

        assert text.startswith('Found 1 newsletter posts (page 1 of 2):')
        assert '1. **MCP Weekly** (mcp-weekly)' in text
        assert 'Author: Ada' in text
        assert 'Created: 2025-01-02' in text

    def test_post(self):
        """The body and set metadata are rendered."""
        text = format_post(POST)

        assert text.startswith('# MCP Weekly')
        assert '**Slug:** mcp-weekly' in text
        assert '## Content\n\n<p>Hello</p>' in text
        assert '- **Title Tag:** MCP Weekly | PulseMCP' in text
        assert '- **Featured MCP Servers:** 7, 8' in text
        assert 'Featured MCP Clients' not in text

    def test_post_without_body(self):
        """A missing body is called out."""
        post = Post(id=2, title='Empty', slug='empty')

        assert '*Content not available*' in format_post(post)

    def test_created_confirmation(self):
        """New drafts end with the draft notice."""
        text = format_saved_post(POST, 'Successfully created draft newsletter post!')

        assert text.splitlines()[0] == 'Successfully created draft newsletter post!'
        assert text.endswith('The draft has been saved and can be edited or published later.')

    def test_updated_confirmation(self):
        """Updates list the changed fields."""
        text = format_saved_post(POST, 'Successfully updated newsletter post!', ['title', 'body'])

        assert '**Fields updated:**\n- title\n- body' in text
        assert 'The draft has been saved' not in text


def test_empty_author_list():
    """An empty author page says so."""
    text = format_author_list(AuthorList())

    assert 'No authors found matching your criteria.' in text


class TestImplementations:
    """Tests for implementation rendering."""

    def test_search_results_with_next_page(self):
        """A next page hint carries the next offset."""
        result = ImplementationList.model_validate(
            {
                'implementations': [
                    {
                        'id': 1,
                        'name': 'GitHub',
                        'slug': 'github',
                        'type': 'server',
                        'status': 'live',
                        'provider_name': 'GitHub',
                        'github_stars': 1200,
                    }
                ],
                'pagination': {'total_count': 45, 'has_next': True},
            }
        )

        text = format_search_results(result, 'git', offset=30, limit=30)

        assert text.startswith('Found 1 MCP implementation(s) matching "git" (showing 1 of 45 total):')
        assert '1. **GitHub** (server)' in text
        assert 'GitHub Stars: 1200' in text
        assert text.endswith('More results available. Use offset=60 to see the next page.')

    def test_drafts(self):
        """Drafts show their linked server."""
        result = ImplementationList.model_validate(
            {
                'implementations': [
                    {
                        'id': 5,
                        'name': 'Slack',
                        'slug': 'slack',
                        'type': 'server',
                        'status': 'draft',
                        'github_owner': 'acme',
                        'github_repo': 'mcp',
                        'github_subfolder': 'slack',
                        'mcp_server': {'id': 9, 'slug': 'slack'},
                        'mcp_client_id': 3,
                    }
                ],
                'pagination': {'current_page': 1, 'total_pages': 1, 'total_count': 1},
            }
        )

        text = format_draft_implementations(result)

        assert text.startswith('Found 1 draft MCP implementations (page 1 of 1, total: 1):')
        assert 'GitHub: acme/mcp/slack' in text
        assert 'Linked MCP Server: slack (ID: 9)' in text
        assert 'Linked MCP Client ID: 3 (details not available)' in text


class TestUnifiedServer:
    """Tests for format_unified_server."""

    SERVER = McpServer.model_validate(
        {
            'id': 7,
            'slug': 'filesystem',
            'name': 'Filesystem',
            'classification': 'reference',
            'remotes': [{'display_name': 'Hosted', 'url_direct': 'https://fs.test/mcp'}],
            'tags': [{'name': 'files'}, {'name': 'local'}],
            'downloads_estimate_total': 12345,
        }
    )

    def test_without_implementation(self):
        """A server without implementation says so and keeps its own details."""
        text = format_unified_server(UnifiedMcpServer(server=self.SERVER))

        assert text.startswith('# Filesystem')
        assert '**Implementation ID:** None (no implementation lists this server)' in text
        assert '**Classification:** reference' in text
        assert '1. Hosted\n   - **Direct URL:** https://fs.test/mcp' in text
        assert '`files`, `local`' in text
        assert '- **Total:** 12,345' in text

    def test_with_implementation(self):
        """Implementation fields take precedence."""
        unified = UnifiedMcpServer.model_validate(
            {
                'server': self.SERVER.model_dump(),
                'implementation': {
                    'id': 2,
                    'name': 'Filesystem MCP',
                    'slug': 'filesystem',
                    'type': 'server',
                    'status': 'live',
                    'classification': 'official',
                    'provider_name': 'Anthropic',
                    'github_owner': 'modelcontextprotocol',
                    'github_repo': 'servers',
                    'github_stars': 50000,
                    'internal_notes': 'Reviewed',
                },
            }
        )

        text = format_unified_server(unified)

        assert text.startswith('# Filesystem MCP')
        assert '**Implementation ID:** 2' in text
        assert '**Classification:** official' in text
        assert '- **GitHub:** https://github.com/modelcontextprotocol/servers' in text
        assert '- **Stars:** 50,000' in text
        assert text.endswith('## Internal Notes\nReviewed')
