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

"""List view models for the Langfuse MCP server."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class LangfuseModel(BaseModel):
    """Base model reading and writing Langfuse's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump with camelCase keys, omitting unset values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode='json')


class TraceSummary(LangfuseModel):
    """A trace without its input and output."""

    id: str
    name: Optional[str] = None
    timestamp: Optional[str] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    tags: Optional[List[str]] = None
    environment: Optional[str] = None
    latency: Optional[float] = None
    total_cost: Optional[float] = None
    observation_count: int = 0
    score_count: int = 0
    html_path: Optional[str] = None

    @classmethod
    def from_trace(cls, trace: Dict[str, Any]) -> 'TraceSummary':
        """Build the summary of a trace returned by the traces listing."""
        return cls.model_validate(
            {
                **trace,
                'observationCount': len(trace.get('observations') or []),
                'scoreCount': len(trace.get('scores') or []),
            }
        )


class ObservationSummary(LangfuseModel):
    """An observation without its input and output."""

    id: str
    trace_id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    model: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    level: Optional[str] = None
    status_message: Optional[str] = None
    parent_observation_id: Optional[str] = None
    latency: Optional[float] = None
    usage_details: Optional[Dict[str, Any]] = None
    cost_details: Optional[Dict[str, Any]] = None
    version: Optional[str] = None
    environment: Optional[str] = None
