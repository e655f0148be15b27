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

"""Per-session selection state handed to tool handlers."""

from loguru import logger
from mcp.server.fastmcp import Context
from pulsemcp.common.errors import SelectionLockedError, SelectionRequiredError
from typing import Optional
from weakref import WeakKeyDictionary


class SessionState:
    """The resource selected for one MCP session.

    A selection seeded from the environment is locked and cannot be changed
    by tools.
    """

    def __init__(self, selected_id: Optional[str] = None, locked: bool = False):
        """Initialize the session state.

        Args:
            selected_id: Initially selected resource ID
            locked: Whether the selection is pinned
        """
        self.selected_id = selected_id
        self.locked = locked and selected_id is not None

    def select(self, resource_id: str) -> None:
        """Select a resource for subsequent tool calls."""
        if self.locked and resource_id != self.selected_id:
            raise SelectionLockedError(
                f'Selection is locked to {self.selected_id} by the environment and '
                f'cannot be changed to {resource_id}'
            )
        self.selected_id = resource_id

    def require(self, message: str) -> str:
        """Return the selected ID or raise SelectionRequiredError with message."""
        if self.selected_id is None:
            raise SelectionRequiredError(message)
        return self.selected_id


class SessionStateStore:
    """Maps MCP sessions to their SessionState.

    States are dropped together with their session.
    """

    def __init__(self, initial_id: Optional[str] = None):
        """Initialize the store.

        Args:
            initial_id: Selection every new session starts with, locked
        """
        self.initial_id = initial_id or None
        self._states: WeakKeyDictionary = WeakKeyDictionary()

    def new_state(self) -> SessionState:
        """Create a state seeded with the initial selection."""
        return SessionState(self.initial_id, locked=self.initial_id is not None)

    def for_context(self, ctx: Context) -> SessionState:
        """Return the state of the session behind a tool call context."""
        session = ctx.session
        state = self._states.get(session)
        if state is None:
            state = self.new_state()
            self._states[session] = state
            logger.debug(f'Created session state (selected: {state.selected_id})')
        return state
