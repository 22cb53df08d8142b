"""DynamoDB service wrapper for table operations with prefixed table names."""

from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

_serializer = TypeSerializer()


def from_dynamodb(value: Any) -> Any:
    """Convert values read through the resource API back to plain Python.

    Numbers come back as ``Decimal``; integral ones become ``int``.
    """
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(v) for v in value]
    return value


def serialize_item(item: dict[str, Any]) -> dict[str, Any]:
    """Serialize a plain item to low-level DynamoDB JSON, dropping None values."""
    return {k: _serializer.serialize(v) for k, v in strip_none(item).items()}


def strip_none(item: dict[str, Any]) -> dict[str, Any]:
    """Remove None values recursively; DynamoDB items should not store nulls."""
    cleaned: dict[str, Any] = {}
    for key, value in item.items():
        if value is None:
            continue
        if isinstance(value, dict):
            value = strip_none(value)
        elif isinstance(value, list):
            value = [strip_none(v) if isinstance(v, dict) else v for v in value]
        cleaned[key] = value
    return cleaned


class DynamoDBService:
    """Service for DynamoDB operations with environment-aware table names."""

    def __init__(self, table_prefix: str, region_name: str | None = None) -> None:
        """Initialize DynamoDB service.

        Args:
            table_prefix: Prefix prepended to every table name
                (e.g. ``backoffice-dev`` gives ``backoffice-dev-bookings``).
            region_name: AWS region. Defaults to the boto3 resolution chain.
        """
        self.name_prefix = table_prefix
        self._dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self._client = boto3.client("dynamodb", region_name=region_name)

    def table_name(self, table: str) -> str:
        """Get full table name with prefix."""
        return f"{self.name_prefix}-{table}"

    def _get_table(self, table: str) -> Any:
        return self._dynamodb.Table(self.table_name(table))

    # Generic CRUD operations

    def get_item(
        self,
        table: str,
        key: dict[str, Any],
        consistent_read: bool = False,
    ) -> dict[str, Any] | None:
        """Get a single item by key.

        Args:
            table: Table name without prefix
            key: Primary key dict
            consistent_read: Use a strongly consistent read

        Returns:
            Item dict or None if not found
        """
        response = self._get_table(table).get_item(Key=key, ConsistentRead=consistent_read)
        item = response.get("Item")
        return from_dynamodb(item) if item else None

    def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition_expression: str | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        expression_attribute_values: dict[str, Any] | None = None,
    ) -> bool:
        """Put an item into the table.

        Args:
            table: Table name without prefix
            item: Item to store
            condition_expression: Optional condition for write
            expression_attribute_names: Names used by the condition
            expression_attribute_values: Values used by the condition

        Returns:
            True if successful, False if condition failed
        """
        try:
            kwargs: dict[str, Any] = {"Item": strip_none(item)}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if expression_attribute_values:
                kwargs["ExpressionAttributeValues"] = expression_attribute_values

            self._get_table(table).put_item(**kwargs)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise

    def update_item(
        self,
        table: str,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_values: dict[str, Any] | None = None,
        expression_attribute_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
    ) -> dict[str, Any] | None:
        """Update an item with expressions.

        Args:
            table: Table name without prefix
            key: Primary key dict
            update_expression: DynamoDB update expression
            expression_attribute_values: Values for expression
            expression_attribute_names: Names for expression (for reserved words)
            condition_expression: Optional condition for update

        Returns:
            Updated attributes or None if condition failed
        """
        try:
            kwargs: dict[str, Any] = {
                "Key": key,
                "UpdateExpression": update_expression,
                "ReturnValues": "ALL_NEW",
            }
            if expression_attribute_values:
                kwargs["ExpressionAttributeValues"] = expression_attribute_values
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            response = self._get_table(table).update_item(**kwargs)
            attrs = response.get("Attributes")
            return from_dynamodb(attrs) if attrs else None
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return None
            raise

    def delete_item(self, table: str, key: dict[str, Any]) -> dict[str, Any] | None:
        """Delete an item by key.

        Args:
            table: Table name without prefix
            key: Primary key dict

        Returns:
            The deleted item, or None if it did not exist
        """
        response = self._get_table(table).delete_item(Key=key, ReturnValues="ALL_OLD")
        attrs = response.get("Attributes")
        return from_dynamodb(attrs) if attrs else None

    def query(
        self,
        table: str,
        key_condition: Any,
        index_name: str | None = None,
        filter_expression: Any | None = None,
        scan_index_forward: bool = True,
    ) -> list[dict[str, Any]]:
        """Query table or GSI, following pagination.

        Args:
            table: Table name without prefix
            key_condition: Boto3 Key condition
            index_name: GSI name (optional)
            filter_expression: Additional filter (optional)
            scan_index_forward: Sort order (True=ascending)

        Returns:
            List of items
        """
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": scan_index_forward,
        }
        if index_name:
            kwargs["IndexName"] = index_name
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: list[dict[str, Any]] = []
        table_resource = self._get_table(table)
        while True:
            response = table_resource.query(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return from_dynamodb(items)

    def query_by_gsi(
        self,
        table: str,
        index_name: str,
        partition_key_name: str,
        partition_key_value: str,
        sort_key_condition: Any | None = None,
        filter_expression: Any | None = None,
    ) -> list[dict[str, Any]]:
        """Query a GSI by partition key.

        Args:
            table: Table name without prefix
            index_name: GSI name
            partition_key_name: Name of partition key attribute
            partition_key_value: Value to query
            sort_key_condition: Optional sort key condition
            filter_expression: Optional non-key filter

        Returns:
            List of items
        """
        key_condition = Key(partition_key_name).eq(partition_key_value)
        if sort_key_condition is not None:
            key_condition = key_condition & sort_key_condition

        return self.query(
            table,
            key_condition,
            index_name=index_name,
            filter_expression=filter_expression,
        )

    def scan(self, table: str, filter_expression: Any | None = None) -> list[dict[str, Any]]:
        """Scan a whole table, following pagination.

        Tables in this service are small back-office collections, so listing
        and statistics read them in full.

        Args:
            table: Table name without prefix
            filter_expression: Optional boto3 Attr condition

        Returns:
            List of items
        """
        kwargs: dict[str, Any] = {}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: list[dict[str, Any]] = []
        table_resource = self._get_table(table)
        while True:
            response = table_resource.scan(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return from_dynamodb(items)

    def transact_write(self, items: list[dict[str, Any]]) -> bool:
        """Execute transactional write for multiple items.

        Args:
            items: List of TransactWriteItem dicts in low-level format

        Returns:
            True if successful, False if transaction was cancelled
        """
        try:
            self._client.transact_write_items(TransactItems=items)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                return False
            raise
