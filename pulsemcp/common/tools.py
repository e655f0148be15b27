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

"""Tool definitions, environment driven tool filtering and registration."""

import os
from dataclasses import dataclass
from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pulsemcp.common.consts import READONLY_GROUP_SUFFIX
from pydantic import BaseModel, ConfigDict
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, List, Mapping, Optional


@dataclass(frozen=True)
class ToolDefinition:
    """A tool produced by a tool factory, ready to be registered."""

    name: str
    fn: Callable[..., Awaitable[Any]]
    description: str
    group: str
    readonly: bool = True


class ToolFilterConfig(BaseModel):
    """Which tools a server exposes. Resolved once at startup.

    Priority: enabled_tools > disabled_tools > enabled_groups. None for
    enabled_groups or enabled_tools means no restriction from that setting.
    A group selector ending in `_readonly` enables only the read-only tools of
    the group.
    """

    model_config = ConfigDict(frozen=True)

    enabled_groups: Optional[FrozenSet[str]] = None
    enabled_tools: Optional[FrozenSet[str]] = None
    disabled_tools: FrozenSet[str] = frozenset()

    @classmethod
    def from_env(
        cls,
        groups: Iterable[str],
        tool_names: Iterable[str],
        groups_var: str,
        enabled_tools_var: Optional[str] = None,
        disabled_tools_var: Optional[str] = None,
        readonly_variants: bool = True,
        default_groups: Optional[Iterable[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'ToolFilterConfig':
        """Parse the filter from comma separated environment variables.

        Args:
            groups: Base group names the server knows about
            tool_names: Names of every tool the server defines
            groups_var: Variable listing enabled groups
            enabled_tools_var: Variable listing the only tools to enable
            disabled_tools_var: Variable listing tools to remove
            readonly_variants: Whether `<group>_readonly` selectors are recognized
            default_groups: Groups enabled when groups_var is unset
            environ: Environment mapping, defaults to os.environ

        Returns:
            The parsed configuration
        """
        env = os.environ if environ is None else environ
        groups = list(groups)
        selectors = set(groups)
        if readonly_variants:
            selectors.update(f'{group}{READONLY_GROUP_SUFFIX}' for group in groups)
        names = set(tool_names)

        enabled_groups = _parse_list(env.get(groups_var), selectors, groups_var)
        if enabled_groups is None and default_groups is not None:
            enabled_groups = frozenset(default_groups)

        enabled_tools = None
        if enabled_tools_var:
            enabled_tools = _parse_list(env.get(enabled_tools_var), names, enabled_tools_var)

        disabled_tools = None
        if disabled_tools_var:
            disabled_tools = _parse_list(env.get(disabled_tools_var), names, disabled_tools_var)

        return cls(
            enabled_groups=enabled_groups,
            enabled_tools=enabled_tools,
            disabled_tools=disabled_tools or frozenset(),
        )

    def is_enabled(self, definition: ToolDefinition) -> bool:
        """Return whether a tool passes the filter."""
        if self.enabled_tools is not None:
            return definition.name in self.enabled_tools
        if definition.name in self.disabled_tools:
            return False
        if self.enabled_groups is None:
            return True
        if definition.group in self.enabled_groups:
            return True
        return (
            definition.readonly
            and f'{definition.group}{READONLY_GROUP_SUFFIX}' in self.enabled_groups
        )


def _parse_list(value: Optional[str], allowed: set, variable: str) -> Optional[FrozenSet[str]]:
    if not value:
        return None
    entries = [entry.strip().lower() for entry in value.split(',') if entry.strip()]
    unknown = [entry for entry in entries if entry not in allowed]
    if unknown:
        logger.warning(
            f'Ignoring unknown entries in {variable}: {", ".join(unknown)}. '
            f'Valid entries: {", ".join(sorted(allowed))}'
        )
    known = frozenset(entry for entry in entries if entry in allowed)
    return known or None


def filter_tools(
    definitions: Iterable[ToolDefinition], config: Optional[ToolFilterConfig] = None
) -> List[ToolDefinition]:
    """Keep the definitions enabled by the configuration, in order."""
    config = config or ToolFilterConfig()
    return [definition for definition in definitions if config.is_enabled(definition)]


def register_tools(mcp: FastMCP, definitions: Iterable[ToolDefinition]) -> List[str]:
    """Register tool definitions with a FastMCP server.

    Args:
        mcp: The server
        definitions: Definitions to register

    Returns:
        The registered tool names

    Raises:
        ValueError: If two definitions share a name
    """
    registered: List[str] = []
    for definition in definitions:
        if definition.name in registered:
            raise ValueError(f'Duplicate tool name: {definition.name}')
        mcp.add_tool(
            definition.fn,
            name=definition.name,
            description=definition.description,
            annotations=ToolAnnotations(readOnlyHint=definition.readonly),
        )
        registered.append(definition.name)
    logger.info(f'Registered {len(registered)} tools: {", ".join(registered)}')
    return registered
