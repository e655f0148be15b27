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

"""DynamoDB client working with plain JSON items."""

import boto3
import os
from abc import ABC, abstractmethod
from botocore.config import Config
from botocore.exceptions import ClientError
from loguru import logger
from pulsemcp.common.errors import ApiError
from pulsemcp.dynamodb_mcp_server.consts import (
    CLIENT_ERROR_MESSAGES,
    DEFAULT_REGION,
    USER_AGENT_EXTRA,
)
from pulsemcp.dynamodb_mcp_server.models import (
    AttributeDefinition,
    KeySchemaElement,
    ProvisionedThroughput,
    WriteRequest,
    from_attribute_values,
    to_attribute_values,
)
from typing import Any, Dict, List, Optional


def get_dynamodb_client(
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
):
    """Create a boto3 DynamoDB client.

    The region falls back to AWS_REGION, then us-east-1. Credentials come from
    the profile when given, otherwise from the default credential chain.
    """
    region = region_name or os.getenv('AWS_REGION') or DEFAULT_REGION
    config = Config(user_agent_extra=USER_AGENT_EXTRA)
    if profile_name:
        session = boto3.Session(profile_name=profile_name, region_name=region)
    else:
        session = boto3.Session(region_name=region)
    return session.client('dynamodb', config=config, endpoint_url=endpoint_url)


def error_for_client_error(error: ClientError) -> ApiError:
    """Map a botocore ClientError onto an ApiError with a fixed message."""
    code = error.response.get('Error', {}).get('Code', 'Unknown')
    message = error.response.get('Error', {}).get('Message', '')
    status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode', 400)
    template = CLIENT_ERROR_MESSAGES.get(code, 'DynamoDB request failed ({code}): {message}')
    return ApiError(status, template.format(code=code, message=message))


class DynamoDBApi(ABC):
    """Operations the DynamoDB tools rely on. Items are plain JSON objects."""

    @abstractmethod
    async def list_tables(
        self, limit: Optional[int] = None, exclusive_start_table_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """List table names."""
        pass

    @abstractmethod
    async def describe_table(self, table_name: str) -> Dict[str, Any]:
        """Describe a table."""
        pass

    @abstractmethod
    async def create_table(
        self,
        table_name: str,
        key_schema: List[KeySchemaElement],
        attribute_definitions: List[AttributeDefinition],
        billing_mode: str,
        provisioned_throughput: Optional[ProvisionedThroughput] = None,
    ) -> Dict[str, Any]:
        """Create a table."""
        pass

    @abstractmethod
    async def delete_table(self, table_name: str) -> Dict[str, Any]:
        """Delete a table."""
        pass

    @abstractmethod
    async def update_table(
        self,
        table_name: str,
        billing_mode: Optional[str] = None,
        provisioned_throughput: Optional[ProvisionedThroughput] = None,
    ) -> Dict[str, Any]:
        """Change billing mode or provisioned capacity."""
        pass

    @abstractmethod
    async def get_item(
        self, table_name: str, key: Dict[str, Any], **options: Any
    ) -> Dict[str, Any]:
        """Get one item by primary key."""
        pass

    @abstractmethod
    async def put_item(
        self, table_name: str, item: Dict[str, Any], **options: Any
    ) -> Dict[str, Any]:
        """Create or replace an item."""
        pass

    @abstractmethod
    async def update_item(
        self, table_name: str, key: Dict[str, Any], update_expression: str, **options: Any
    ) -> Dict[str, Any]:
        """Update attributes of an item."""
        pass

    @abstractmethod
    async def delete_item(
        self, table_name: str, key: Dict[str, Any], **options: Any
    ) -> Dict[str, Any]:
        """Delete an item."""
        pass

    @abstractmethod
    async def query(
        self, table_name: str, key_condition_expression: str, **options: Any
    ) -> Dict[str, Any]:
        """Query items by key condition."""
        pass

    @abstractmethod
    async def scan(self, table_name: str, **options: Any) -> Dict[str, Any]:
        """Scan a table or index."""
        pass

    @abstractmethod
    async def batch_get_items(
        self, request_items: Dict[str, List[Dict[str, Any]]]
    ) -> Dict[str, Any]:
        """Get items from several tables by primary key."""
        pass

    @abstractmethod
    async def batch_write_items(
        self, request_items: Dict[str, List[WriteRequest]]
    ) -> Dict[str, Any]:
        """Put and delete items across several tables."""
        pass


class DynamoDBClient(DynamoDBApi):
    """DynamoDBApi backed by boto3."""

    def __init__(self, client=None, **client_options: Any):
        """Initialize with a boto3 client, or options for get_dynamodb_client."""
        self.client = client or get_dynamodb_client(**client_options)

    def _call(self, operation: str, **params: Any) -> Dict[str, Any]:
        params = {name: value for name, value in params.items() if value is not None}
        logger.debug(f'DynamoDB {operation} {params.get("TableName", "")}')
        try:
            return getattr(self.client, operation)(**params)
        except ClientError as e:
            raise error_for_client_error(e) from e

    async def list_tables(
        self, limit: Optional[int] = None, exclusive_start_table_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """List table names."""
        response = self._call(
            'list_tables', Limit=limit, ExclusiveStartTableName=exclusive_start_table_name
        )
        return {
            'TableNames': response.get('TableNames', []),
            'LastEvaluatedTableName': response.get('LastEvaluatedTableName'),
        }

    async def describe_table(self, table_name: str) -> Dict[str, Any]:
        """Describe a table."""
        return self._call('describe_table', TableName=table_name)['Table']

    async def create_table(
        self,
        table_name: str,
        key_schema: List[KeySchemaElement],
        attribute_definitions: List[AttributeDefinition],
        billing_mode: str,
        provisioned_throughput: Optional[ProvisionedThroughput] = None,
    ) -> Dict[str, Any]:
        """Create a table."""
        response = self._call(
            'create_table',
            TableName=table_name,
            KeySchema=[
                {'AttributeName': element.attribute_name, 'KeyType': element.key_type}
                for element in key_schema
            ],
            AttributeDefinitions=[
                {
                    'AttributeName': definition.attribute_name,
                    'AttributeType': definition.attribute_type,
                }
                for definition in attribute_definitions
            ],
            BillingMode=billing_mode,
            ProvisionedThroughput=_throughput(provisioned_throughput),
        )
        return response['TableDescription']

    async def delete_table(self, table_name: str) -> Dict[str, Any]:
        """Delete a table."""
        return self._call('delete_table', TableName=table_name)['TableDescription']

    async def update_table(
        self,
        table_name: str,
        billing_mode: Optional[str] = None,
        provisioned_throughput: Optional[ProvisionedThroughput] = None,
    ) -> Dict[str, Any]:
        """Change billing mode or provisioned capacity."""
        response = self._call(
            'update_table',
            TableName=table_name,
            BillingMode=billing_mode,
            ProvisionedThroughput=_throughput(provisioned_throughput),
        )
        return response['TableDescription']

    async def get_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        projection_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        consistent_read: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Get one item by primary key."""
        response = self._call(
            'get_item',
            TableName=table_name,
            Key=to_attribute_values(key),
            ProjectionExpression=projection_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ConsistentRead=consistent_read,
        )
        return {'Item': from_attribute_values(response.get('Item'))}

    async def put_item(
        self,
        table_name: str,
        item: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create or replace an item."""
        self._call(
            'put_item',
            TableName=table_name,
            Item=to_attribute_values(item),
            ConditionExpression=condition_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=to_attribute_values(expression_attribute_values),
        )
        return {'Item': item}

    async def update_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        update_expression: str,
        condition_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        return_values: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Update attributes of an item."""
        response = self._call(
            'update_item',
            TableName=table_name,
            Key=to_attribute_values(key),
            UpdateExpression=update_expression,
            ConditionExpression=condition_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=to_attribute_values(expression_attribute_values),
            ReturnValues=return_values,
        )
        return {'Attributes': from_attribute_values(response.get('Attributes'))}

    async def delete_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Delete an item and return its previous attributes."""
        response = self._call(
            'delete_item',
            TableName=table_name,
            Key=to_attribute_values(key),
            ConditionExpression=condition_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=to_attribute_values(expression_attribute_values),
            ReturnValues='ALL_OLD',
        )
        return {'Attributes': from_attribute_values(response.get('Attributes'))}

    async def query(
        self,
        table_name: str,
        key_condition_expression: str,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        filter_expression: Optional[str] = None,
        projection_expression: Optional[str] = None,
        index_name: Optional[str] = None,
        limit: Optional[int] = None,
        scan_index_forward: Optional[bool] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Query items by key condition."""
        response = self._call(
            'query',
            TableName=table_name,
            KeyConditionExpression=key_condition_expression,
            ExpressionAttributeValues=to_attribute_values(expression_attribute_values),
            ExpressionAttributeNames=expression_attribute_names,
            FilterExpression=filter_expression,
            ProjectionExpression=projection_expression,
            IndexName=index_name,
            Limit=limit,
            ScanIndexForward=scan_index_forward,
            ExclusiveStartKey=to_attribute_values(exclusive_start_key),
        )
        return _page(response)

    async def scan(
        self,
        table_name: str,
        filter_expression: Optional[str] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        projection_expression: Optional[str] = None,
        index_name: Optional[str] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Scan a table or index."""
        response = self._call(
            'scan',
            TableName=table_name,
            FilterExpression=filter_expression,
            ExpressionAttributeValues=to_attribute_values(expression_attribute_values),
            ExpressionAttributeNames=expression_attribute_names,
            ProjectionExpression=projection_expression,
            IndexName=index_name,
            Limit=limit,
            ExclusiveStartKey=to_attribute_values(exclusive_start_key),
        )
        return _page(response)

    async def batch_get_items(
        self, request_items: Dict[str, List[Dict[str, Any]]]
    ) -> Dict[str, Any]:
        """Get items from several tables by primary key."""
        response = self._call(
            'batch_get_item',
            RequestItems={
                table: {'Keys': [to_attribute_values(key) for key in keys]}
                for table, keys in request_items.items()
            },
        )
        return {
            'Responses': {
                table: [from_attribute_values(item) for item in items]
                for table, items in response.get('Responses', {}).items()
            },
            'UnprocessedKeys': {
                table: [from_attribute_values(key) for key in request.get('Keys', [])]
                for table, request in response.get('UnprocessedKeys', {}).items()
            },
        }

    async def batch_write_items(
        self, request_items: Dict[str, List[WriteRequest]]
    ) -> Dict[str, Any]:
        """Put and delete items across several tables."""
        response = self._call(
            'batch_write_item',
            RequestItems={
                table: [_write_request(request) for request in requests]
                for table, requests in request_items.items()
            },
        )
        unprocessed = response.get('UnprocessedItems', {})
        return {
            'ProcessedCount': sum(len(requests) for requests in request_items.values())
            - sum(len(requests) for requests in unprocessed.values()),
            'UnprocessedCount': sum(len(requests) for requests in unprocessed.values()),
        }


def _throughput(throughput: Optional[ProvisionedThroughput]) -> Optional[Dict[str, int]]:
    if throughput is None:
        return None
    return {
        'ReadCapacityUnits': throughput.read_capacity_units,
        'WriteCapacityUnits': throughput.write_capacity_units,
    }


def _write_request(request: WriteRequest) -> Dict[str, Any]:
    if request.put_item is not None:
        return {'PutRequest': {'Item': to_attribute_values(request.put_item)}}
    return {'DeleteRequest': {'Key': to_attribute_values(request.delete_key)}}


def _page(response: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'Items': [from_attribute_values(item) for item in response.get('Items', [])],
        'Count': response.get('Count'),
        'ScannedCount': response.get('ScannedCount'),
        'LastEvaluatedKey': from_attribute_values(response.get('LastEvaluatedKey')),
    }
