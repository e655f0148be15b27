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

"""Data models for the PulseMCP admin API."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class CmsModel(BaseModel):
    """Base model. Unknown fields returned by the API are ignored."""

    model_config = ConfigDict(extra='ignore')


class Pagination(CmsModel):
    """Pagination block of list responses."""

    current_page: Optional[int] = None
    total_pages: Optional[int] = None
    total_count: Optional[int] = None
    has_next: Optional[bool] = None


class AuthorRef(CmsModel):
    """Author embedded in a post."""

    id: int
    name: str


class Post(CmsModel):
    """A newsletter post. The list endpoint omits the body."""

    id: int
    title: str
    slug: str
    body: Optional[str] = None
    author_id: Optional[int] = None
    status: str = 'draft'
    category: str = 'newsletter'
    image_url: Optional[str] = None
    preview_image_url: Optional[str] = None
    share_image: Optional[str] = None
    title_tag: Optional[str] = None
    short_title: Optional[str] = None
    short_description: Optional[str] = None
    description_tag: Optional[str] = None
    last_updated: Optional[str] = None
    table_of_contents: Optional[Any] = None
    featured_mcp_server_ids: List[int] = Field(default_factory=list)
    featured_mcp_client_ids: List[int] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    author: Optional[AuthorRef] = None


class PostList(CmsModel):
    """A page of posts."""

    posts: List[Post] = Field(default_factory=list)
    pagination: Optional[Pagination] = None


class Author(CmsModel):
    """A post author."""

    id: int
    name: str
    slug: str
    bio: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AuthorList(CmsModel):
    """A page of authors."""

    authors: List[Author] = Field(default_factory=list)
    pagination: Optional[Pagination] = None


class McpServer(CmsModel):
    """An MCP server record, as returned by the supervisor endpoints."""

    id: int
    slug: str
    name: Optional[str] = None
    description: Optional[str] = None
    classification: Optional[str] = None
    implementation_language: Optional[str] = None
    registry_package_id: Optional[int] = None
    registry_package_soft_verified: Optional[bool] = None
    downloads_estimate_last_7_days: Optional[int] = None
    downloads_estimate_last_30_days: Optional[int] = None
    downloads_estimate_total: Optional[int] = None
    tags: List[Dict[str, Any]] = Field(default_factory=list)
    remotes: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class McpClient(CmsModel):
    """An MCP client record."""

    id: int
    slug: str
    name: Optional[str] = None


class McpImplementation(CmsModel):
    """A server or client listing in the registry."""

    id: int
    name: str
    slug: str
    type: str
    status: str
    short_description: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = Field(None, validation_alias=AliasChoices('marketing_url', 'url'))
    provider_name: Optional[str] = None
    provider_slug: Optional[str] = None
    provider_url: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    github_subfolder: Optional[str] = None
    github_stars: Optional[int] = None
    classification: Optional[str] = None
    implementation_language: Optional[str] = None
    internal_notes: Optional[str] = None
    mcp_server_id: Optional[int] = None
    mcp_client_id: Optional[int] = None
    mcp_server: Optional[McpServer] = None
    mcp_client: Optional[McpClient] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ImplementationList(CmsModel):
    """A page of implementations."""

    implementations: List[McpImplementation] = Field(default_factory=list)
    pagination: Optional[Pagination] = None


class UnifiedMcpServer(CmsModel):
    """An MCP server merged with the implementation that lists it.

    implementation is None when no implementation references the server.
    """

    server: McpServer
    implementation: Optional[McpImplementation] = None

    @property
    def name(self) -> str:
        """Implementation name, falling back to the server name or slug."""
        if self.implementation is not None:
            return self.implementation.name
        return self.server.name or self.server.slug
