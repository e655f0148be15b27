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

"""AppSignal GraphQL API client."""

import httpx
from abc import ABC, abstractmethod
from loguru import logger
from pulsemcp.appsignal_mcp_server.consts import GRAPHQL_BASE_URL, GRAPHQL_PATH
from pulsemcp.appsignal_mcp_server.models import (
    App,
    ExceptionIncidentSample,
    IncidentList,
    sample_from_graphql,
)
from pulsemcp.common.errors import ApiError, RecordNotFoundError
from pulsemcp.common.http import ApiHttpClient
from pulsemcp.common.pagination import find_in_pages
from typing import Any, Dict, List, Optional


APPS_QUERY = """
query GetApps {
  viewer {
    organizations {
      apps {
        id
        name
        environment
      }
    }
  }
}
"""

EXCEPTION_INCIDENTS_QUERY = """
query GetExceptionIncidents($limit: Int!, $offset: Int!, $state: IncidentStateEnum) {
  viewer {
    organizations {
      apps {
        id
        exceptionIncidents(limit: $limit, offset: $offset, state: $state, order: LAST) {
          id
          number
          count
          lastOccurredAt
          createdAt
          exceptionName
          exceptionMessage
          state
          namespace
          severity
          actionNames
          hasSamplesInRetention
        }
      }
    }
  }
}
"""

LOG_INCIDENTS_QUERY = """
query GetLogIncidents($limit: Int!, $offset: Int!, $state: IncidentStateEnum) {
  viewer {
    organizations {
      apps {
        id
        logIncidents(limit: $limit, offset: $offset, state: $state, order: LAST) {
          id
          number
          description
          severity
          state
          count
          createdAt
          lastOccurredAt
          updatedAt
          digests
          trigger {
            id
            name
            description
            query
            severities
            sourceIds
          }
        }
      }
    }
  }
}
"""

PERFORMANCE_INCIDENTS_QUERY = """
query GetPerformanceIncidents($limit: Int!, $offset: Int!, $state: IncidentStateEnum) {
  viewer {
    organizations {
      apps {
        id
        performanceIncidents(limit: $limit, offset: $offset, state: $state, order: LAST) {
          id
          number
          state
          severity
          actionNames
          namespace
          mean
          count
          scopedCount
          totalDuration
          description
          digests
          hasNPlusOne
          hasSamplesInRetention
          createdAt
          lastOccurredAt
          lastSampleOccurredAt
          updatedAt
        }
      }
    }
  }
}
"""

EXCEPTION_SAMPLES_QUERY = """
query GetExceptionIncidentSamples($limit: Int!, $offset: Int!) {
  viewer {
    organizations {
      apps {
        id
        exceptionIncidents(state: OPEN, limit: 50) {
          id
          samples(limit: $limit, offset: $offset) {
            id
            time
            action
            namespace
            revision
            version
            duration
            queueDuration
            params
            customData
            sessionData
            overview { key value }
            environment { key value }
            firstMarker {
              revision
              shortRevision
              liveFor
              liveForInWords
              exceptionRate
              exceptionCount
              createdAt
            }
            exception {
              message
              name
              backtrace { path line method }
            }
            errorCauses {
              name
              message
              firstLine { path line method }
            }
          }
        }
      }
    }
  }
}
"""

SEARCH_LOGS_QUERY = """
query SearchLogs(
  $appId: String!
  $query: String
  $limit: Int
  $severities: [SeverityEnum!]
  $start: DateTime
  $end: DateTime
) {
  app(id: $appId) {
    id
    logs {
      lines(query: $query, limit: $limit, severities: $severities, start: $start, end: $end) {
        id
        timestamp
        message
        severity
        hostname
        group
        attributes { key value }
      }
    }
  }
}
"""

# GraphQL field holding each incident kind
EXCEPTION_INCIDENTS = 'exceptionIncidents'
LOG_INCIDENTS = 'logIncidents'
PERFORMANCE_INCIDENTS = 'performanceIncidents'

INCIDENT_QUERIES = {
    EXCEPTION_INCIDENTS: EXCEPTION_INCIDENTS_QUERY,
    LOG_INCIDENTS: LOG_INCIDENTS_QUERY,
    PERFORMANCE_INCIDENTS: PERFORMANCE_INCIDENTS_QUERY,
}


class GraphQLError(ApiError):
    """Raised when a GraphQL response carries errors."""

    def __init__(self, messages: List[str]):
        """Initialize the GraphQLError with the messages of the errors array."""
        self.messages = messages
        super().__init__(200, f'GraphQL error: {"; ".join(messages)}')


class AppsignalApi(ABC):
    """Operations the AppSignal tools rely on."""

    @abstractmethod
    async def get_apps(self) -> List[App]:
        """List the apps of every organization of the API key."""
        pass

    @abstractmethod
    async def get_exception_incidents(
        self, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        """List exception incidents."""
        pass

    @abstractmethod
    async def get_exception_incident(self, app_id: str, incident_id: str) -> Dict[str, Any]:
        """Find one open exception incident."""
        pass

    @abstractmethod
    async def get_exception_incident_sample(
        self, app_id: str, incident_id: str, offset: int
    ) -> ExceptionIncidentSample:
        """Get the sample at offset of an exception incident."""
        pass

    @abstractmethod
    async def get_log_incidents(
        self, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        """List log incidents."""
        pass

    @abstractmethod
    async def get_log_incident(self, app_id: str, incident_id: str) -> Dict[str, Any]:
        """Find one open log incident."""
        pass

    @abstractmethod
    async def get_performance_incidents(
        self, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        """List performance incidents."""
        pass

    @abstractmethod
    async def get_performance_incident(self, app_id: str, incident_id: str) -> Dict[str, Any]:
        """Find one open performance incident."""
        pass

    @abstractmethod
    async def search_logs(
        self,
        app_id: str,
        query: str,
        limit: int,
        severities: Optional[List[str]] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Search log lines."""
        pass


class AppsignalClient(ApiHttpClient, AppsignalApi):
    """AppsignalApi backed by the AppSignal GraphQL API."""

    error_messages = {
        401: 'Invalid API key. Check APPSIGNAL_API_KEY',
        403: 'API key lacks access to this app',
    }

    def __init__(
        self,
        api_key: str,
        base_url: str = GRAPHQL_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client with a personal API token."""
        super().__init__(base_url, transport=transport)
        self.api_key = api_key

    async def graphql(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Run a GraphQL query and return its data.

        Raises:
            ApiError: If the HTTP request fails
            GraphQLError: If the response carries GraphQL errors
        """
        body = await self.request(
            'POST',
            GRAPHQL_PATH,
            params={'token': self.api_key},
            json={'query': query, 'variables': variables or {}},
            resource='AppSignal GraphQL endpoint',
        )
        body = body or {}
        if body.get('errors'):
            raise GraphQLError([error.get('message', str(error)) for error in body['errors']])
        return body.get('data') or {}

    async def get_apps(self) -> List[App]:
        """List the apps of every organization of the API key."""
        data = await self.graphql(APPS_QUERY)
        return [
            App.model_validate(app)
            for organization in data['viewer']['organizations']
            for app in organization['apps']
        ]

    async def _incident_page(
        self, field: str, app_id: str, state: Optional[str], limit: int, offset: int
    ) -> List[Dict[str, Any]]:
        data = await self.graphql(
            INCIDENT_QUERIES[field], {'limit': limit, 'offset': offset, 'state': state}
        )
        return _app_field(data, app_id, field)

    async def _incident_list(
        self, field: str, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        # AppSignal filters on a single state per query
        incidents: List[Dict[str, Any]] = []
        has_more = False
        for state in states:
            page = await self._incident_page(field, app_id, state, limit, offset)
            incidents.extend(page)
            has_more = has_more or len(page) == limit
        return IncidentList(incidents=incidents, total=len(incidents), has_more=has_more)

    async def _find_incident(
        self, field: str, app_id: str, incident_id: str, not_found_message: str
    ) -> Dict[str, Any]:
        async def fetch_page(limit: int, offset: int) -> List[Dict[str, Any]]:
            return await self._incident_page(field, app_id, 'OPEN', limit, offset)

        return await find_in_pages(
            fetch_page,
            lambda incident: _matches(incident, incident_id),
            not_found_message,
        )

    async def get_exception_incidents(
        self, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        """List exception incidents."""
        return await self._incident_list(EXCEPTION_INCIDENTS, app_id, states, limit, offset)

    async def get_exception_incident(self, app_id: str, incident_id: str) -> Dict[str, Any]:
        """Find one open exception incident by ID or number."""
        return await self._find_incident(
            EXCEPTION_INCIDENTS,
            app_id,
            incident_id,
            f'Exception incident {incident_id} not found for app {app_id}',
        )

    async def get_exception_incident_sample(
        self, app_id: str, incident_id: str, offset: int
    ) -> ExceptionIncidentSample:
        """Get the sample at offset of an exception incident."""
        data = await self.graphql(EXCEPTION_SAMPLES_QUERY, {'limit': 1, 'offset': offset})
        samples: List[Dict[str, Any]] = []
        for incident in _app_field(data, app_id, EXCEPTION_INCIDENTS):
            if _matches(incident, incident_id):
                samples = incident.get('samples') or []
                break
        if not samples:
            raise RecordNotFoundError(
                f'No samples found for exception incident {incident_id} at offset {offset}'
            )
        return sample_from_graphql(samples[0])

    async def get_log_incidents(
        self, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        """List log incidents."""
        return await self._incident_list(LOG_INCIDENTS, app_id, states, limit, offset)

    async def get_log_incident(self, app_id: str, incident_id: str) -> Dict[str, Any]:
        """Find one open log incident by ID or number."""
        incident = await self._find_incident(
            LOG_INCIDENTS,
            app_id,
            incident_id,
            f'Log incident {incident_id} not found for app {app_id}',
        )
        if incident.get('state'):
            incident = {**incident, 'state': incident['state'].lower()}
        return incident

    async def get_performance_incidents(
        self, app_id: str, states: List[str], limit: int, offset: int
    ) -> IncidentList:
        """List performance incidents."""
        return await self._incident_list(PERFORMANCE_INCIDENTS, app_id, states, limit, offset)

    async def get_performance_incident(self, app_id: str, incident_id: str) -> Dict[str, Any]:
        """Find one open performance incident by ID or number."""
        return await self._find_incident(
            PERFORMANCE_INCIDENTS,
            app_id,
            incident_id,
            f'Performance incident {incident_id} not found for app {app_id}',
        )

    async def search_logs(
        self,
        app_id: str,
        query: str,
        limit: int,
        severities: Optional[List[str]] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Search log lines."""
        data = await self.graphql(
            SEARCH_LOGS_QUERY,
            {
                'appId': app_id,
                'query': query,
                'limit': limit,
                'severities': severities,
                'start': start,
                'end': end,
            },
        )
        app = data.get('app') or {}
        lines = (app.get('logs') or {}).get('lines') or []
        logger.debug(f'search_logs returned {len(lines)} lines')
        return lines


def _app_field(data: Dict[str, Any], app_id: str, field: str) -> List[Dict[str, Any]]:
    for organization in data.get('viewer', {}).get('organizations', []):
        for app in organization.get('apps', []):
            if app.get('id') == app_id:
                return app.get(field) or []
    return []


def _matches(incident: Dict[str, Any], incident_id: str) -> bool:
    return str(incident.get('id')) == incident_id or str(incident.get('number')) == incident_id
