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

"""Data models and item conversion for the DynamoDB MCP server."""

import base64
import json
import os
from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer
from decimal import Decimal
from pulsemcp.common.errors import AccessDeniedError
from pulsemcp.dynamodb_mcp_server.consts import TABLE_NOT_ALLOWED
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, FrozenSet, Iterable, List, Literal, Mapping, Optional


_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


class KeySchemaElement(BaseModel):
    """A key attribute of a table."""

    attribute_name: str = Field(..., min_length=1)
    key_type: Literal['HASH', 'RANGE']


class AttributeDefinition(BaseModel):
    """Type of an attribute used in a key schema."""

    attribute_name: str = Field(..., min_length=1)
    attribute_type: Literal['S', 'N', 'B']


class ProvisionedThroughput(BaseModel):
    """Provisioned read and write capacity."""

    read_capacity_units: int = Field(..., ge=1)
    write_capacity_units: int = Field(..., ge=1)


class WriteRequest(BaseModel):
    """One put or delete in a batch write."""

    put_item: Optional[Dict[str, Any]] = Field(None, description='Item to put')
    delete_key: Optional[Dict[str, Any]] = Field(None, description='Primary key to delete')

    @model_validator(mode='after')
    def check_one_action(self) -> 'WriteRequest':
        """Exactly one of put_item and delete_key must be set."""
        if (self.put_item is None) == (self.delete_key is None):
            raise ValueError('Each write request needs exactly one of put_item or delete_key')
        return self


class TableFilter(BaseModel):
    """Restricts table-scoped operations to an allow-list.

    None means every table is allowed.
    """

    model_config = ConfigDict(frozen=True)

    allowed_tables: Optional[FrozenSet[str]] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'TableFilter':
        """Parse DYNAMODB_ALLOWED_TABLES (comma separated, case sensitive)."""
        env = os.environ if environ is None else environ
        value = env.get('DYNAMODB_ALLOWED_TABLES') or ''
        tables = frozenset(table.strip() for table in value.split(',') if table.strip())
        return cls(allowed_tables=tables or None)

    def is_allowed(self, table_name: str) -> bool:
        """Return whether table_name may be used."""
        return self.allowed_tables is None or table_name in self.allowed_tables

    def check(self, table_name: str) -> None:
        """Raise AccessDeniedError if table_name is not allowed."""
        if not self.is_allowed(table_name):
            raise AccessDeniedError(TABLE_NOT_ALLOWED.format(table=table_name))

    def filter(self, table_names: Iterable[str]) -> List[str]:
        """Keep the allowed table names, in order."""
        return [name for name in table_names if self.is_allowed(name)]


def to_attribute_values(item: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a plain JSON item to DynamoDB AttributeValue format."""
    if item is None:
        return None
    # boto3 only accepts Decimal for non-integer numbers
    item = json.loads(json.dumps(item), parse_float=Decimal)
    return {name: _serializer.serialize(value) for name, value in item.items()}


def from_attribute_values(item: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a DynamoDB AttributeValue item to plain Python values."""
    if item is None:
        return None
    return {name: _deserializer.deserialize(value) for name, value in item.items()}


class DynamoDBEncoder(json.JSONEncoder):
    """JSON encoder for values read from DynamoDB."""

    def default(self, o):
        """Encode Decimal, set and Binary values."""
        if isinstance(o, Decimal):
            return int(o) if o == o.to_integral_value() else float(o)
        if isinstance(o, (set, frozenset)):
            return sorted(o, key=str)
        if isinstance(o, Binary):
            return base64.b64encode(o.value).decode('ascii')
        if isinstance(o, bytes):
            return base64.b64encode(o).decode('ascii')
        if hasattr(o, 'isoformat'):
            return o.isoformat()
        return super().default(o)


def to_json(value: Any) -> str:
    """Serialize a result to indented JSON."""
    return json.dumps(value, indent=2, cls=DynamoDBEncoder)
