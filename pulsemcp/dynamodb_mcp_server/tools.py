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

"""DynamoDB tools.

Tools are grouped as readonly, readwrite and admin. Every table-scoped tool
checks the table against the allow-list before calling DynamoDB.
"""

from mcp.server.fastmcp import Context
from pulsemcp.common.errors import handle_tool_errors
from pulsemcp.common.tools import ToolDefinition
from pulsemcp.dynamodb_mcp_server.client import DynamoDBApi
from pulsemcp.dynamodb_mcp_server.consts import (
    GROUP_ADMIN,
    GROUP_READONLY,
    GROUP_READWRITE,
    MAX_BATCH_GET_KEYS,
    MAX_BATCH_WRITE_REQUESTS,
)
from pulsemcp.dynamodb_mcp_server.models import (
    AttributeDefinition,
    KeySchemaElement,
    ProvisionedThroughput,
    TableFilter,
    WriteRequest,
    to_json,
)
from pydantic import Field
from typing import Any, Callable, Dict, List, Literal, Optional


ClientFactory = Callable[[], DynamoDBApi]

BillingMode = Literal['PAY_PER_REQUEST', 'PROVISIONED']
ReturnValue = Literal['NONE', 'ALL_OLD', 'UPDATED_OLD', 'ALL_NEW', 'UPDATED_NEW']

table_name = Field(..., min_length=1, description='Name of the table')
key = Field(
    ...,
    description=(
        'Primary key of the item as plain JSON, '
        'e.g. {"userId": "123", "createdAt": 1700000000}'
    ),
)
index_name = Field(None, description='Name of a global or local secondary index')
filter_expression = Field(
    None, description='Condition applied to results after they are read, e.g. "age > :minAge"'
)
projection_expression = Field(None, description='Attributes to return, e.g. "id, #n, email"')
expression_attribute_names = Field(
    None, description='Substitution tokens for attribute names, e.g. {"#n": "name"}'
)
expression_attribute_values = Field(
    None, description='Values substituted in expressions as plain JSON, e.g. {":minAge": 21}'
)
condition_expression = Field(
    None, description='Condition that must hold for the write to succeed'
)
limit = Field(None, ge=1, description='Maximum number of items to evaluate')
exclusive_start_key = Field(
    None, description='LastEvaluatedKey of the previous page, to continue paginating'
)
provisioned_throughput = Field(
    None, description='Read and write capacity units, required for PROVISIONED billing'
)


def list_tables_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_list_tables tool."""

    @handle_tool_errors('listing tables')
    async def dynamodb_list_tables(
        ctx: Context,
        limit: Optional[int] = Field(
            None, ge=1, le=100, description='Maximum number of table names to return (1-100)'
        ),
        exclusive_start_table_name: Optional[str] = Field(
            None, description='LastEvaluatedTableName of the previous page'
        ),
    ) -> str:
        result = await client_factory().list_tables(limit, exclusive_start_table_name)
        result['TableNames'] = table_filter.filter(result['TableNames'])
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_list_tables',
        fn=dynamodb_list_tables,
        description='List DynamoDB tables in the configured region, with pagination.',
        group=GROUP_READONLY,
    )


def describe_table_tool(
    client_factory: ClientFactory, table_filter: TableFilter
) -> ToolDefinition:
    """Build the dynamodb_describe_table tool."""

    @handle_tool_errors('describing table')
    async def dynamodb_describe_table(ctx: Context, table_name: str = table_name) -> str:
        table_filter.check(table_name)
        return to_json(await client_factory().describe_table(table_name))

    return ToolDefinition(
        name='dynamodb_describe_table',
        fn=dynamodb_describe_table,
        description=(
            'Describe a table: key schema, attribute definitions, indexes, billing mode, '
            'item count and status.'
        ),
        group=GROUP_READONLY,
    )


def get_item_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_get_item tool."""

    @handle_tool_errors('getting item')
    async def dynamodb_get_item(
        ctx: Context,
        table_name: str = table_name,
        key: Dict[str, Any] = key,
        projection_expression: Optional[str] = projection_expression,
        expression_attribute_names: Optional[Dict[str, str]] = expression_attribute_names,
        consistent_read: Optional[bool] = Field(
            None, description='Use a strongly consistent read'
        ),
    ) -> str:
        table_filter.check(table_name)
        result = await client_factory().get_item(
            table_name,
            key,
            projection_expression=projection_expression,
            expression_attribute_names=expression_attribute_names,
            consistent_read=consistent_read,
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_get_item',
        fn=dynamodb_get_item,
        description='Get a single item by its primary key. Item is null when no item matches.',
        group=GROUP_READONLY,
    )


def query_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_query tool."""

    @handle_tool_errors('querying table')
    async def dynamodb_query(
        ctx: Context,
        table_name: str = table_name,
        key_condition_expression: str = Field(
            ..., description='Key condition, e.g. "userId = :uid AND createdAt > :since"'
        ),
        expression_attribute_values: Optional[Dict[str, Any]] = expression_attribute_values,
        expression_attribute_names: Optional[Dict[str, str]] = expression_attribute_names,
        filter_expression: Optional[str] = filter_expression,
        projection_expression: Optional[str] = projection_expression,
        index_name: Optional[str] = index_name,
        limit: Optional[int] = limit,
        scan_index_forward: Optional[bool] = Field(
            None, description='Sort ascending by sort key (default true); false for descending'
        ),
        exclusive_start_key: Optional[Dict[str, Any]] = exclusive_start_key,
    ) -> str:
        table_filter.check(table_name)
        result = await client_factory().query(
            table_name,
            key_condition_expression,
            expression_attribute_values=expression_attribute_values,
            expression_attribute_names=expression_attribute_names,
            filter_expression=filter_expression,
            projection_expression=projection_expression,
            index_name=index_name,
            limit=limit,
            scan_index_forward=scan_index_forward,
            exclusive_start_key=exclusive_start_key,
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_query',
        fn=dynamodb_query,
        description=(
            'Query items sharing a partition key, optionally narrowed by sort key condition and '
            'filter. Use LastEvaluatedKey with exclusive_start_key to paginate.'
        ),
        group=GROUP_READONLY,
    )


def scan_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_scan tool."""

    @handle_tool_errors('scanning table')
    async def dynamodb_scan(
        ctx: Context,
        table_name: str = table_name,
        filter_expression: Optional[str] = filter_expression,
        expression_attribute_values: Optional[Dict[str, Any]] = expression_attribute_values,
        expression_attribute_names: Optional[Dict[str, str]] = expression_attribute_names,
        projection_expression: Optional[str] = projection_expression,
        index_name: Optional[str] = index_name,
        limit: Optional[int] = limit,
        exclusive_start_key: Optional[Dict[str, Any]] = exclusive_start_key,
    ) -> str:
        table_filter.check(table_name)
        result = await client_factory().scan(
            table_name,
            filter_expression=filter_expression,
            expression_attribute_values=expression_attribute_values,
            expression_attribute_names=expression_attribute_names,
            projection_expression=projection_expression,
            index_name=index_name,
            limit=limit,
            exclusive_start_key=exclusive_start_key,
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_scan',
        fn=dynamodb_scan,
        description=(
            'Read every item of a table or index, optionally filtered. Scans read the whole '
            'table; prefer dynamodb_query when the partition key is known.'
        ),
        group=GROUP_READONLY,
    )


def batch_get_items_tool(
    client_factory: ClientFactory, table_filter: TableFilter
) -> ToolDefinition:
    """Build the dynamodb_batch_get_items tool."""

    @handle_tool_errors('batch getting items')
    async def dynamodb_batch_get_items(
        ctx: Context,
        request_items: Dict[str, List[Dict[str, Any]]] = Field(
            ...,
            description='Map of table name to primary keys to fetch, at most 100 keys in total',
        ),
    ) -> str:
        for name in request_items:
            table_filter.check(name)
        total = sum(len(keys) for keys in request_items.values())
        if total > MAX_BATCH_GET_KEYS:
            raise ValueError(f'At most {MAX_BATCH_GET_KEYS} keys per batch, got {total}')
        return to_json(await client_factory().batch_get_items(request_items))

    return ToolDefinition(
        name='dynamodb_batch_get_items',
        fn=dynamodb_batch_get_items,
        description='Get up to 100 items from one or more tables by primary key in one call.',
        group=GROUP_READONLY,
    )


def put_item_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_put_item tool."""

    @handle_tool_errors('putting item')
    async def dynamodb_put_item(
        ctx: Context,
        table_name: str = table_name,
        item: Dict[str, Any] = Field(
            ..., description='The item as plain JSON, including its primary key attributes'
        ),
        condition_expression: Optional[str] = condition_expression,
        expression_attribute_names: Optional[Dict[str, str]] = expression_attribute_names,
        expression_attribute_values: Optional[Dict[str, Any]] = expression_attribute_values,
    ) -> str:
        table_filter.check(table_name)
        result = await client_factory().put_item(
            table_name,
            item,
            condition_expression=condition_expression,
            expression_attribute_names=expression_attribute_names,
            expression_attribute_values=expression_attribute_values,
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_put_item',
        fn=dynamodb_put_item,
        description=(
            'Create an item or replace an existing item with the same primary key. Use '
            'condition_expression, e.g. "attribute_not_exists(id)", to avoid overwrites.'
        ),
        group=GROUP_READWRITE,
        readonly=False,
    )


def update_item_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_update_item tool."""

    @handle_tool_errors('updating item')
    async def dynamodb_update_item(
        ctx: Context,
        table_name: str = table_name,
        key: Dict[str, Any] = key,
        update_expression: str = Field(
            ..., description='Update expression, e.g. "SET #s = :status REMOVE tempFlag"'
        ),
        condition_expression: Optional[str] = condition_expression,
        expression_attribute_names: Optional[Dict[str, str]] = expression_attribute_names,
        expression_attribute_values: Optional[Dict[str, Any]] = expression_attribute_values,
        return_values: ReturnValue = Field(
            'ALL_NEW', description='Which attributes to return after the update'
        ),
    ) -> str:
        table_filter.check(table_name)
        result = await client_factory().update_item(
            table_name,
            key,
            update_expression,
            condition_expression=condition_expression,
            expression_attribute_names=expression_attribute_names,
            expression_attribute_values=expression_attribute_values,
            return_values=return_values,
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_update_item',
        fn=dynamodb_update_item,
        description='Update attributes of an existing item, or create it if it does not exist.',
        group=GROUP_READWRITE,
        readonly=False,
    )


def delete_item_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_delete_item tool."""

    @handle_tool_errors('deleting item')
    async def dynamodb_delete_item(
        ctx: Context,
        table_name: str = table_name,
        key: Dict[str, Any] = key,
        condition_expression: Optional[str] = condition_expression,
        expression_attribute_names: Optional[Dict[str, str]] = expression_attribute_names,
        expression_attribute_values: Optional[Dict[str, Any]] = expression_attribute_values,
    ) -> str:
        table_filter.check(table_name)
        result = await client_factory().delete_item(
            table_name,
            key,
            condition_expression=condition_expression,
            expression_attribute_names=expression_attribute_names,
            expression_attribute_values=expression_attribute_values,
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_delete_item',
        fn=dynamodb_delete_item,
        description='Delete an item by primary key and return its previous attributes.',
        group=GROUP_READWRITE,
        readonly=False,
    )


def batch_write_items_tool(
    client_factory: ClientFactory, table_filter: TableFilter
) -> ToolDefinition:
    """Build the dynamodb_batch_write_items tool."""

    @handle_tool_errors('batch writing items')
    async def dynamodb_batch_write_items(
        ctx: Context,
        request_items: Dict[str, List[WriteRequest]] = Field(
            ...,
            description=(
                'Map of table name to write requests. Each request has either put_item (the '
                'item) or delete_key (the primary key). At most 25 requests in total.'
            ),
        ),
    ) -> str:
        for name in request_items:
            table_filter.check(name)
        total = sum(len(requests) for requests in request_items.values())
        if total > MAX_BATCH_WRITE_REQUESTS:
            raise ValueError(
                f'At most {MAX_BATCH_WRITE_REQUESTS} write requests per batch, got {total}'
            )
        return to_json(await client_factory().batch_write_items(request_items))

    return ToolDefinition(
        name='dynamodb_batch_write_items',
        fn=dynamodb_batch_write_items,
        description='Put and delete up to 25 items across one or more tables in one call.',
        group=GROUP_READWRITE,
        readonly=False,
    )


def create_table_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_create_table tool."""

    @handle_tool_errors('creating table')
    async def dynamodb_create_table(
        ctx: Context,
        table_name: str = Field(..., min_length=3, max_length=255, description='Table name'),
        key_schema: List[KeySchemaElement] = Field(
            ...,
            min_length=1,
            max_length=2,
            description='Partition key (HASH) and optional sort key (RANGE)',
        ),
        attribute_definitions: List[AttributeDefinition] = Field(
            ..., min_length=1, description='Types of the key attributes: S, N or B'
        ),
        billing_mode: BillingMode = Field(
            'PAY_PER_REQUEST', description='On-demand (PAY_PER_REQUEST) or PROVISIONED'
        ),
        provisioned_throughput: Optional[ProvisionedThroughput] = provisioned_throughput,
    ) -> str:
        table_filter.check(table_name)
        if billing_mode == 'PROVISIONED' and provisioned_throughput is None:
            raise ValueError('provisioned_throughput is required for PROVISIONED billing')
        result = await client_factory().create_table(
            table_name, key_schema, attribute_definitions, billing_mode, provisioned_throughput
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_create_table',
        fn=dynamodb_create_table,
        description='Create a table with a partition key and optional sort key.',
        group=GROUP_ADMIN,
        readonly=False,
    )


def delete_table_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_delete_table tool."""

    @handle_tool_errors('deleting table')
    async def dynamodb_delete_table(ctx: Context, table_name: str = table_name) -> str:
        table_filter.check(table_name)
        return to_json(await client_factory().delete_table(table_name))

    return ToolDefinition(
        name='dynamodb_delete_table',
        fn=dynamodb_delete_table,
        description='Permanently delete a table and all of its items. This cannot be undone.',
        group=GROUP_ADMIN,
        readonly=False,
    )


def update_table_tool(client_factory: ClientFactory, table_filter: TableFilter) -> ToolDefinition:
    """Build the dynamodb_update_table tool."""

    @handle_tool_errors('updating table')
    async def dynamodb_update_table(
        ctx: Context,
        table_name: str = table_name,
        billing_mode: Optional[BillingMode] = Field(None, description='New billing mode'),
        provisioned_throughput: Optional[ProvisionedThroughput] = provisioned_throughput,
    ) -> str:
        table_filter.check(table_name)
        if billing_mode is None and provisioned_throughput is None:
            raise ValueError('Provide billing_mode or provisioned_throughput')
        result = await client_factory().update_table(
            table_name, billing_mode, provisioned_throughput
        )
        return to_json(result)

    return ToolDefinition(
        name='dynamodb_update_table',
        fn=dynamodb_update_table,
        description='Change the billing mode or provisioned capacity of a table.',
        group=GROUP_ADMIN,
        readonly=False,
    )


TOOL_FACTORIES = [
    list_tables_tool,
    describe_table_tool,
    get_item_tool,
    query_tool,
    scan_tool,
    batch_get_items_tool,
    put_item_tool,
    update_item_tool,
    delete_item_tool,
    batch_write_items_tool,
    create_table_tool,
    delete_table_tool,
    update_table_tool,
]


def build_tools(client_factory: ClientFactory, table_filter: TableFilter) -> List[ToolDefinition]:
    """Build every DynamoDB tool definition."""
    return [factory(client_factory, table_filter) for factory in TOOL_FACTORIES]
