"""
DynamoDB table adapter using boto3.

boto3 is synchronous, so every call runs in a worker thread. Credentials
come from the default provider chain (instance role, env vars, ~/.aws);
none are ever configured here.

Attribute types used:
    id        -> S    (partition key)
    title     -> S
    priority  -> N
    completed -> BOOL
    tags      -> L
    metadata  -> M
"""

import asyncio
import logging
from decimal import Context, Decimal
from typing import Any, Dict, List, Optional, Tuple

from tasktable.codec import to_number
from tasktable.db.interface import (
    KEY_ATTRIBUTE,
    ConditionFailed,
    TableAdapter,
    check_table_name,
)

logger = logging.getLogger(__name__)

try:
    import boto3
    from botocore.exceptions import ClientError
    HAS_BOTO3 = True
except ImportError:
    HAS_BOTO3 = False
    boto3 = None
    ClientError = None

CONDITION_EXISTS = f"attribute_exists(#{KEY_ATTRIBUTE})"

# DynamoDB numbers carry at most 38 significant digits
NUMBER_CONTEXT = Context(prec=38)


class DynamoDBAdapter(TableAdapter):
    """DynamoDB-backed task table."""

    def __init__(
        self,
        table: str = "Tasks",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize DynamoDB adapter.

        Args:
            table: Table name
            region: AWS region
            endpoint_url: Optional endpoint override (e.g. DynamoDB Local)
        """
        if not HAS_BOTO3:
            raise RuntimeError(
                "boto3 not installed. Run: pip install tasktable[dynamodb]"
            )

        self._table_name = check_table_name(table)
        self.region = region
        self.endpoint_url = endpoint_url
        self._resource = None
        self._table = None

    @property
    def backend(self) -> str:
        return "dynamodb"

    @property
    def table_name(self) -> str:
        return self._table_name

    async def connect(self) -> None:
        if self._resource is not None:
            return

        kwargs = {"region_name": self.region}
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        self._resource = boto3.resource("dynamodb", **kwargs)
        self._table = self._resource.Table(self._table_name)
        logger.info(f"DynamoDB table {self._table_name} in {self.region}")

    async def close(self) -> None:
        self._resource = None
        self._table = None

    async def _get_table(self):
        if self._table is None:
            await self.connect()
        return self._table

    async def put(self, item: Dict[str, Any]) -> None:
        table = await self._get_table()
        await asyncio.to_thread(table.put_item, Item=to_dynamo(item))

    async def scan_all(self) -> List[Dict[str, Any]]:
        """Scan every page; a single Scan stops at 1 MB."""
        table = await self._get_table()
        items = []
        kwargs = {}
        while True:
            page = await asyncio.to_thread(table.scan, **kwargs)
            items.extend(from_dynamo(item) for item in page.get("Items", []))
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    async def conditional_update(
        self,
        key: str,
        assignments: Dict[str, Any],
    ) -> Dict[str, Any]:
        table = await self._get_table()
        expression, names, values = build_update_expression(assignments)
        names[f"#{KEY_ATTRIBUTE}"] = KEY_ATTRIBUTE

        try:
            result = await asyncio.to_thread(
                table.update_item,
                Key={KEY_ATTRIBUTE: key},
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=to_dynamo(values),
                ConditionExpression=CONDITION_EXISTS,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _is_conditional_check_failed(e):
                raise ConditionFailed(key) from e
            raise

        return from_dynamo(result.get("Attributes") or {})

    async def conditional_delete(self, key: str) -> None:
        table = await self._get_table()
        try:
            await asyncio.to_thread(
                table.delete_item,
                Key={KEY_ATTRIBUTE: key},
                ConditionExpression=CONDITION_EXISTS,
                ExpressionAttributeNames={f"#{KEY_ATTRIBUTE}": KEY_ATTRIBUTE},
            )
        except ClientError as e:
            if _is_conditional_check_failed(e):
                raise ConditionFailed(key) from e
            raise

    async def ensure_table(self) -> bool:
        """Create the table on demand billing; only the key is declared."""
        await self._get_table()
        client = self._resource.meta.client

        try:
            await asyncio.to_thread(client.describe_table, TableName=self._table_name)
            logger.info(f"Table {self._table_name} already exists")
            return False
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                raise

        result = await asyncio.to_thread(
            client.create_table,
            TableName=self._table_name,
            AttributeDefinitions=[
                {"AttributeName": KEY_ATTRIBUTE, "AttributeType": "S"},
            ],
            KeySchema=[
                {"AttributeName": KEY_ATTRIBUTE, "KeyType": "HASH"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        status = result.get("TableDescription", {}).get("TableStatus")
        logger.info(f"Created table {self._table_name}, status: {status}")

        waiter = client.get_waiter("table_exists")
        await asyncio.to_thread(waiter.wait, TableName=self._table_name)
        return True

    async def ping(self) -> bool:
        await self._get_table()
        client = self._resource.meta.client
        result = await asyncio.to_thread(client.describe_table, TableName=self._table_name)
        return result.get("Table", {}).get("TableStatus") == "ACTIVE"


def build_update_expression(
    assignments: Dict[str, Any],
) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """
    Render assignments as a DynamoDB SET expression.

    Every attribute name goes through a #placeholder so reserved words
    are safe.

    Returns:
        (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)
    """
    parts = []
    names = {}
    values = {}
    for name, value in assignments.items():
        parts.append(f"#{name} = :{name}")
        names[f"#{name}"] = name
        values[f":{name}"] = value
    return f"SET {', '.join(parts)}", names, values


def to_dynamo(value: Any) -> Any:
    """
    Convert numbers for boto3, which only accepts Decimal within DynamoDB's
    precision.

    Integers wider than 38 digits are rounded to 38 significant digits.
    Magnitudes past 1E+126 still fail the write.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int) and abs(value) >= 10 ** 38:
        return NUMBER_CONTEXT.create_decimal(value)
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Convert boto3 Decimals back to int/float."""
    if isinstance(value, Decimal):
        return to_number(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


def _is_conditional_check_failed(exc: Exception) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"
