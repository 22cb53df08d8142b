"""Create the DynamoDB tables for an environment.

Usage:
    backoffice-create-tables --env dev
    backoffice-create-tables --env dev --endpoint-url http://localhost:8000
"""

import argparse
import os
import sys
from typing import Any

import boto3
from botocore.exceptions import ClientError

from backoffice.services.tables import prefixed_definitions


def create_tables(dynamodb: Any, table_prefix: str) -> list[str]:
    """Create every missing table and wait until it is active.

    Args:
        dynamodb: boto3 DynamoDB client
        table_prefix: Prefix such as ``backoffice-dev``

    Returns:
        Names of the tables that were created
    """
    created = []
    for definition in prefixed_definitions(table_prefix):
        name = definition["TableName"]
        try:
            dynamodb.create_table(**definition)
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceInUseException":
                print(f"  - {name} already exists")
                continue
            raise
        dynamodb.get_waiter("table_exists").wait(TableName=name)
        print(f"  ✓ {name}")
        created.append(name)
    return created


def main(argv: list[str] | None = None) -> int:
    """Run the table creation script."""
    parser = argparse.ArgumentParser(description="Create back-office DynamoDB tables")
    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default="dev",
        help="Target environment (default: dev)",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        help="Table prefix (default: backoffice-{env})",
    )
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_DEFAULT_REGION", "eu-west-1"),
        help="AWS region (default: eu-west-1 or AWS_DEFAULT_REGION env var)",
    )
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint, e.g. DynamoDB Local")
    args = parser.parse_args(argv)

    prefix = args.prefix or f"backoffice-{args.env}"
    client = boto3.client("dynamodb", region_name=args.region, endpoint_url=args.endpoint_url)

    print(f"Creating tables with prefix {prefix} (region: {args.region})")
    try:
        created = create_tables(client, prefix)
    except ClientError as e:
        print(f"  ❌ Failed to create tables: {e}")
        return 1

    print(f"\n✅ {len(created)} table(s) created")
    return 0


if __name__ == "__main__":
    sys.exit(main())
