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

"""Data models for the AppSignal MCP server."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class AppsignalModel(BaseModel):
    """Base model reading and writing AppSignal's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump with camelCase keys, omitting unset values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode='json')


class App(AppsignalModel):
    """An AppSignal application."""

    id: str
    name: str
    environment: str


class IncidentList(AppsignalModel):
    """One page of incidents."""

    incidents: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False


class ErrorCause(AppsignalModel):
    """A chained cause of an exception."""

    name: str
    message: Optional[str] = None
    first_line: Optional[str] = None


class FirstMarker(AppsignalModel):
    """The deploy marker where an exception first appeared."""

    revision: Optional[str] = None
    short_revision: Optional[str] = None
    live_for: Optional[int] = None
    live_for_in_words: Optional[str] = None
    exception_rate: Optional[float] = None
    exception_count: Optional[int] = None
    created_at: Optional[str] = None


class ExceptionIncidentSample(AppsignalModel):
    """One sample of an exception incident with a flattened backtrace."""

    id: str
    timestamp: Optional[str] = None
    message: Optional[str] = None
    backtrace: List[str] = Field(default_factory=list)
    action: Optional[str] = None
    namespace: Optional[str] = None
    revision: Optional[str] = None
    version: Optional[str] = None
    duration: Optional[float] = None
    queue_duration: Optional[float] = None
    params: Optional[Dict[str, Any]] = None
    custom_data: Optional[Dict[str, Any]] = None
    session_data: Optional[Dict[str, Any]] = None
    overview: Optional[List[Dict[str, Any]]] = None
    environment: Optional[List[Dict[str, Any]]] = None
    error_causes: Optional[List[ErrorCause]] = None
    first_marker: Optional[FirstMarker] = None


def format_frame(frame: Optional[Dict[str, Any]]) -> Optional[str]:
    """Render a backtrace frame as 'path:line in method'."""
    if not frame:
        return None
    return f'{frame.get("path")}:{frame.get("line")} in {frame.get("method")}'


def sample_from_graphql(sample: Dict[str, Any]) -> ExceptionIncidentSample:
    """Convert a raw GraphQL sample into an ExceptionIncidentSample."""
    exception = sample.get('exception') or {}
    causes = sample.get('errorCauses')
    return ExceptionIncidentSample(
        id=sample['id'],
        timestamp=sample.get('time'),
        message=exception.get('message'),
        backtrace=[
            line
            for line in (format_frame(frame) for frame in exception.get('backtrace') or [])
            if line
        ],
        action=sample.get('action'),
        namespace=sample.get('namespace'),
        revision=sample.get('revision'),
        version=sample.get('version'),
        duration=sample.get('duration') or None,
        queue_duration=sample.get('queueDuration') or None,
        params=sample.get('params') or None,
        custom_data=sample.get('customData') or None,
        session_data=sample.get('sessionData') or None,
        overview=sample.get('overview'),
        environment=sample.get('environment'),
        error_causes=[
            ErrorCause(
                name=cause.get('name'),
                message=cause.get('message'),
                first_line=format_frame(cause.get('firstLine')),
            )
            for cause in causes
        ]
        if causes is not None
        else None,
        first_marker=FirstMarker.model_validate(sample['firstMarker'])
        if sample.get('firstMarker')
        else None,
    )
