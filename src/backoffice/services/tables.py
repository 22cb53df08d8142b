"""DynamoDB table definitions.

Shared by the table creation script and the test suite so both create the
same keys and indexes. ``TableName`` values are unprefixed.
"""

from typing import Any

EMAIL_INDEX = "email-index"
VERIFICATION_TOKEN_INDEX = "verification_token-index"


def _simple_table(name: str, key: str) -> dict[str, Any]:
    return {
        "TableName": name,
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": key, "AttributeType": "S"}],
        "BillingMode": "PAY_PER_REQUEST",
    }


def _email_indexed_table(name: str, key: str, extra_indexes: tuple[str, ...] = ()) -> dict[str, Any]:
    attributes = [key, "email", *extra_indexes]
    indexes = [
        {
            "IndexName": f"{attr}-index",
            "KeySchema": [{"AttributeName": attr, "KeyType": "HASH"}],
            "Projection": {"ProjectionType": "ALL"},
        }
        for attr in ("email", *extra_indexes)
    ]
    return {
        "TableName": name,
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": attr, "AttributeType": "S"} for attr in attributes
        ],
        "GlobalSecondaryIndexes": indexes,
        "BillingMode": "PAY_PER_REQUEST",
    }


TABLE_DEFINITIONS: list[dict[str, Any]] = [
    _simple_table("bookings", "booking_id"),
    # One row per customer email holding its active booking slots
    _simple_table("booking-guards", "email"),
    _simple_table("orders", "order_id"),
    _simple_table("products", "product_id"),
    _simple_table("contacts", "contact_id"),
    _email_indexed_table("subscriptions", "subscription_id", ("verification_token",)),
    _email_indexed_table("users", "user_id"),
    _simple_table("payment-webhook-events", "event_id"),
]


def prefixed_definitions(table_prefix: str) -> list[dict[str, Any]]:
    """Return the table definitions with ``TableName`` prefixed."""
    return [
        {**definition, "TableName": f"{table_prefix}-{definition['TableName']}"}
        for definition in TABLE_DEFINITIONS
    ]
