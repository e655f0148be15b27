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

"""Tests for the boto3 backed DynamoDB client."""

import boto3
import pytest
from botocore.exceptions import ClientError
from decimal import Decimal
from moto import mock_aws
from pulsemcp.common.errors import ApiError
from pulsemcp.dynamodb_mcp_server.client import (
    DynamoDBClient,
    error_for_client_error,
    get_dynamodb_client,
)
from pulsemcp.dynamodb_mcp_server.models import (
    AttributeDefinition,
    KeySchemaElement,
    ProvisionedThroughput,
    WriteRequest,
)


def _client_error(code, message='details', status=400):
    return ClientError(
        {
            'Error': {'Code': code, 'Message': message},
            'ResponseMetadata': {'HTTPStatusCode': status},
        },
        'PutItem',
    )


@pytest.fixture
def dynamodb(aws_credentials):
    """A DynamoDBClient on a mocked AWS account with a users table."""
    with mock_aws():
        boto_client = boto3.client('dynamodb', region_name='us-east-1')
        boto_client.create_table(
            TableName='users',
            KeySchema=[
                {'AttributeName': 'pk', 'KeyType': 'HASH'},
                {'AttributeName': 'sk', 'KeyType': 'RANGE'},
            ],
            AttributeDefinitions=[
                {'AttributeName': 'pk', 'AttributeType': 'S'},
                {'AttributeName': 'sk', 'AttributeType': 'N'},
            ],
            BillingMode='PAY_PER_REQUEST',
        )
        yield DynamoDBClient(client=boto_client)


class TestErrorMapping:
    """Tests for error_for_client_error."""

    @pytest.mark.parametrize(
        'code,expected',
        [
            ('ResourceNotFoundException', 'Table or index not found'),
            ('AccessDeniedException', 'Permission denied'),
            ('ThrottlingException', 'Rate limit exceeded. Please try again later.'),
            ('ConditionalCheckFailedException', 'Condition check failed'),
            ('ValidationException', 'Validation failed: details'),
            ('SomethingNew', 'DynamoDB request failed (SomethingNew): details'),
        ],
    )
    def test_codes(self, code, expected):
        """Error codes map to fixed messages."""
        error = error_for_client_error(_client_error(code))

        assert isinstance(error, ApiError)
        assert error.message == expected
        assert error.status_code == 400


class TestGetDynamodbClient:
    """Tests for get_dynamodb_client."""

    def test_region_and_user_agent(self, aws_credentials, monkeypatch):
        """The region falls back to AWS_REGION and the user agent is tagged."""
        monkeypatch.setenv('AWS_REGION', 'eu-west-1')

        client = get_dynamodb_client()

        assert client.meta.region_name == 'eu-west-1'
        assert 'MCP/PulseDynamoDBServer' in client.meta.config.user_agent_extra

    def test_explicit_region_and_endpoint(self, aws_credentials):
        """An explicit region and endpoint win."""
        client = get_dynamodb_client(region_name='us-west-2', endpoint_url='http://localhost:8000')

        assert client.meta.region_name == 'us-west-2'
        assert client.meta.endpoint_url == 'http://localhost:8000'


class TestTables:
    """Tests for the table operations."""

    @pytest.mark.asyncio
    async def test_list_and_describe(self, dynamodb):
        """Tables are listed and described."""
        tables = await dynamodb.list_tables()
        table = await dynamodb.describe_table('users')

        assert tables['TableNames'] == ['users']
        assert table['TableName'] == 'users'
        assert table['KeySchema'][0] == {'AttributeName': 'pk', 'KeyType': 'HASH'}

    @pytest.mark.asyncio
    async def test_describe_missing(self, dynamodb):
        """A missing table maps to a not found error."""
        with pytest.raises(ApiError, match='^Table or index not found$'):
            await dynamodb.describe_table('missing')

    @pytest.mark.asyncio
    async def test_create_update_delete(self, dynamodb):
        """Tables are created, updated and deleted."""
        created = await dynamodb.create_table(
            'orders',
            [KeySchemaElement(attribute_name='id', key_type='HASH')],
            [AttributeDefinition(attribute_name='id', attribute_type='S')],
            'PROVISIONED',
            ProvisionedThroughput(read_capacity_units=5, write_capacity_units=5),
        )
        updated = await dynamodb.update_table(
            'orders',
            provisioned_throughput=ProvisionedThroughput(
                read_capacity_units=10, write_capacity_units=5
            ),
        )
        deleted = await dynamodb.delete_table('orders')

        assert created['TableName'] == 'orders'
        assert updated['ProvisionedThroughput']['ReadCapacityUnits'] == 10
        assert deleted['TableName'] == 'orders'
        assert (await dynamodb.list_tables())['TableNames'] == ['users']


class TestItems:
    """Tests for the item operations."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, dynamodb):
        """Items round trip as plain JSON."""
        item = {'pk': 'u-1', 'sk': 1, 'name': 'Ada', 'score': 9.5, 'tags': ['x']}

        assert await dynamodb.put_item('users', item) == {'Item': item}
        result = await dynamodb.get_item('users', {'pk': 'u-1', 'sk': 1})

        assert result['Item']['name'] == 'Ada'
        assert result['Item']['score'] == Decimal('9.5')
        assert result['Item']['tags'] == ['x']

    @pytest.mark.asyncio
    async def test_get_missing_item(self, dynamodb):
        """A missing item is None."""
        assert await dynamodb.get_item('users', {'pk': 'none', 'sk': 0}) == {'Item': None}

    @pytest.mark.asyncio
    async def test_conditional_put(self, dynamodb):
        """A failing condition maps to a fixed error."""
        await dynamodb.put_item('users', {'pk': 'u-1', 'sk': 1})

        with pytest.raises(ApiError, match='^Condition check failed$'):
            await dynamodb.put_item(
                'users', {'pk': 'u-1', 'sk': 1}, condition_expression='attribute_not_exists(pk)'
            )

    @pytest.mark.asyncio
    async def test_update_and_delete(self, dynamodb):
        """Updates return the new attributes and deletes the old ones."""
        await dynamodb.put_item('users', {'pk': 'u-1', 'sk': 1, 'visits': 1})

        updated = await dynamodb.update_item(
            'users',
            {'pk': 'u-1', 'sk': 1},
            'SET visits = visits + :inc, #s = :status',
            expression_attribute_names={'#s': 'status'},
            expression_attribute_values={':inc': 1, ':status': 'active'},
            return_values='ALL_NEW',
        )
        deleted = await dynamodb.delete_item('users', {'pk': 'u-1', 'sk': 1})

        assert updated['Attributes']['visits'] == Decimal('2')
        assert updated['Attributes']['status'] == 'active'
        assert deleted['Attributes']['status'] == 'active'
        assert (await dynamodb.get_item('users', {'pk': 'u-1', 'sk': 1}))['Item'] is None

    @pytest.mark.asyncio
    async def test_query_and_scan(self, dynamodb):
        """Queries and scans return plain items and pagination keys."""
        for sk in range(1, 4):
            await dynamodb.put_item('users', {'pk': 'u-1', 'sk': sk, 'score': sk * 10})
        await dynamodb.put_item('users', {'pk': 'u-2', 'sk': 1, 'score': 50})

        queried = await dynamodb.query(
            'users',
            'pk = :pk AND sk > :sk',
            expression_attribute_values={':pk': 'u-1', ':sk': 1},
            scan_index_forward=False,
        )
        paged = await dynamodb.query(
            'users', 'pk = :pk', expression_attribute_values={':pk': 'u-1'}, limit=1
        )
        scanned = await dynamodb.scan(
            'users', filter_expression='score >= :min', expression_attribute_values={':min': 30}
        )

        assert [item['sk'] for item in queried['Items']] == [3, 2]
        assert queried['Count'] == 2
        assert paged['LastEvaluatedKey'] == {'pk': 'u-1', 'sk': Decimal('1')}
        assert sorted(item['score'] for item in scanned['Items']) == [30, 50]

    @pytest.mark.asyncio
    async def test_batches(self, dynamodb):
        """Batch writes and gets work across requests."""
        written = await dynamodb.batch_write_items(
            {
                'users': [
                    WriteRequest(put_item={'pk': 'a', 'sk': 1}),
                    WriteRequest(put_item={'pk': 'b', 'sk': 1}),
                ]
            }
        )
        removed = await dynamodb.batch_write_items(
            {'users': [WriteRequest(delete_key={'pk': 'b', 'sk': 1})]}
        )
        fetched = await dynamodb.batch_get_items(
            {'users': [{'pk': 'a', 'sk': 1}, {'pk': 'b', 'sk': 1}]}
        )

        assert written == {'ProcessedCount': 2, 'UnprocessedCount': 0}
        assert removed == {'ProcessedCount': 1, 'UnprocessedCount': 0}
        assert [item['pk'] for item in fetched['Responses']['users']] == ['a']
        assert fetched['UnprocessedKeys'] == {}
