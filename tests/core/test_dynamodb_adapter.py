"""
Tests for DynamoDB table adapter.

Uses mocking to avoid actual AWS calls.
"""

import pytest
from decimal import Decimal
from unittest.mock import patch, MagicMock

pytest.importorskip("boto3")

from botocore.exceptions import ClientError  # noqa: E402


def client_error(code, operation="UpdateItem"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def mock_resource():
    """Patch boto3.resource and return the mocked resource."""
    with patch("tasktable.db.dynamodb.boto3.resource") as mock_factory:
        resource = MagicMock()
        mock_factory.return_value = resource
        yield resource


@pytest.fixture
async def dynamodb_adapter(mock_resource):
    from tasktable.db.dynamodb import DynamoDBAdapter

    adapter = DynamoDBAdapter(table="Tasks", region="eu-west-1")
    await adapter.connect()
    return adapter


class TestUpdateExpression:
    """Tests for build_update_expression()."""

    def test_set_expression_names_only_staged_fields(self):
        from tasktable.db.dynamodb import build_update_expression

        expression, names, values = build_update_expression({
            "priority": 5,
            "updatedAt": "2026-01-02T00:00:00.000000Z",
        })

        assert expression == "SET #priority = :priority, #updatedAt = :updatedAt"
        assert names == {"#priority": "priority", "#updatedAt": "updatedAt"}
        assert values == {":priority": 5, ":updatedAt": "2026-01-02T00:00:00.000000Z"}


class TestNumberConversion:
    """Tests for Decimal conversion helpers."""

    def test_to_dynamo_converts_floats_only(self):
        from tasktable.db.dynamodb import to_dynamo

        result = to_dynamo({"priority": 2.5, "completed": True, "tags": ["a"], "n": 3})

        assert result == {"priority": Decimal("2.5"), "completed": True, "tags": ["a"], "n": 3}

    def test_to_dynamo_rounds_wide_integers_to_table_precision(self):
        from boto3.dynamodb.types import TypeSerializer
        from tasktable.db.dynamodb import to_dynamo

        wide = 10 ** 39 + 1
        result = to_dynamo({"priority": wide, "n": 10 ** 37})

        assert isinstance(result["priority"], Decimal)
        assert len(result["priority"].as_tuple().digits) <= 38
        assert result["priority"] == Decimal(10 ** 39)
        assert result["n"] == 10 ** 37
        assert TypeSerializer().serialize(result["priority"])["N"]

    def test_from_dynamo_restores_numbers(self):
        from tasktable.db.dynamodb import from_dynamo

        result = from_dynamo({"priority": Decimal("3"), "metadata": {"x": Decimal("1.5")}})

        assert result == {"priority": 3, "metadata": {"x": 1.5}}
        assert isinstance(result["priority"], int)


class TestDynamoDBAdapter:
    """Tests for DynamoDBAdapter operations."""

    @pytest.mark.asyncio
    async def test_connect_uses_region(self):
        from tasktable.db.dynamodb import DynamoDBAdapter

        with patch("tasktable.db.dynamodb.boto3.resource") as mock_factory:
            adapter = DynamoDBAdapter(table="Tasks", region="eu-west-1",
                                      endpoint_url="http://localhost:8000")
            await adapter.connect()

        mock_factory.assert_called_once_with(
            "dynamodb", region_name="eu-west-1", endpoint_url="http://localhost:8000",
        )

    @pytest.mark.asyncio
    async def test_put(self, dynamodb_adapter, mock_resource):
        table = mock_resource.Table.return_value

        await dynamodb_adapter.put({"id": "t1", "title": "Test", "priority": 3})

        table.put_item.assert_called_once_with(Item={"id": "t1", "title": "Test", "priority": 3})

    @pytest.mark.asyncio
    async def test_scan_follows_pages(self, dynamodb_adapter, mock_resource):
        table = mock_resource.Table.return_value
        table.scan.side_effect = [
            {"Items": [{"id": "t1", "priority": Decimal("3")}], "LastEvaluatedKey": {"id": "t1"}},
            {"Items": [{"id": "t2", "priority": Decimal("5")}]},
        ]

        items = await dynamodb_adapter.scan_all()

        assert items == [{"id": "t1", "priority": 3}, {"id": "t2", "priority": 5}]
        assert table.scan.call_count == 2
        assert table.scan.call_args_list[1].kwargs == {"ExclusiveStartKey": {"id": "t1"}}

    @pytest.mark.asyncio
    async def test_conditional_update(self, dynamodb_adapter, mock_resource):
        table = mock_resource.Table.return_value
        table.update_item.return_value = {
            "Attributes": {"id": "t1", "title": "Test", "priority": Decimal("5")},
        }

        result = await dynamodb_adapter.conditional_update("t1", {"priority": 5})

        assert result == {"id": "t1", "title": "Test", "priority": 5}
        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"id": "t1"}
        assert kwargs["UpdateExpression"] == "SET #priority = :priority"
        assert kwargs["ConditionExpression"] == "attribute_exists(#id)"
        assert kwargs["ExpressionAttributeNames"] == {"#priority": "priority", "#id": "id"}
        assert kwargs["ReturnValues"] == "ALL_NEW"

    @pytest.mark.asyncio
    async def test_conditional_update_missing(self, dynamodb_adapter, mock_resource):
        from tasktable.db.interface import ConditionFailed

        table = mock_resource.Table.return_value
        table.update_item.side_effect = client_error("ConditionalCheckFailedException")

        with pytest.raises(ConditionFailed):
            await dynamodb_adapter.conditional_update("missing", {"title": "x"})

    @pytest.mark.asyncio
    async def test_conditional_update_other_error_propagates(self, dynamodb_adapter, mock_resource):
        table = mock_resource.Table.return_value
        table.update_item.side_effect = client_error("ProvisionedThroughputExceededException")

        with pytest.raises(ClientError):
            await dynamodb_adapter.conditional_update("t1", {"title": "x"})

    @pytest.mark.asyncio
    async def test_conditional_delete_missing(self, dynamodb_adapter, mock_resource):
        from tasktable.db.interface import ConditionFailed

        table = mock_resource.Table.return_value
        table.delete_item.side_effect = client_error("ConditionalCheckFailedException", "DeleteItem")

        with pytest.raises(ConditionFailed):
            await dynamodb_adapter.conditional_delete("missing")

        assert table.delete_item.call_args.kwargs["ConditionExpression"] == "attribute_exists(#id)"

    @pytest.mark.asyncio
    async def test_ensure_table_existing(self, dynamodb_adapter, mock_resource):
        client = mock_resource.meta.client
        client.describe_table.return_value = {"Table": {"TableStatus": "ACTIVE"}}

        assert await dynamodb_adapter.ensure_table() is False
        client.create_table.assert_not_called()

    @pytest.mark.asyncio
    async def test_ensure_table_creates_with_key_only(self, dynamodb_adapter, mock_resource):
        client = mock_resource.meta.client
        client.describe_table.side_effect = client_error("ResourceNotFoundException", "DescribeTable")
        client.create_table.return_value = {"TableDescription": {"TableStatus": "CREATING"}}

        assert await dynamodb_adapter.ensure_table() is True

        kwargs = client.create_table.call_args.kwargs
        assert kwargs["AttributeDefinitions"] == [{"AttributeName": "id", "AttributeType": "S"}]
        assert kwargs["KeySchema"] == [{"AttributeName": "id", "KeyType": "HASH"}]
        assert kwargs["BillingMode"] == "PAY_PER_REQUEST"
        client.get_waiter.assert_called_once_with("table_exists")

    @pytest.mark.asyncio
    async def test_ping(self, dynamodb_adapter, mock_resource):
        client = mock_resource.meta.client
        client.describe_table.return_value = {"Table": {"TableStatus": "ACTIVE"}}

        assert await dynamodb_adapter.ping() is True
