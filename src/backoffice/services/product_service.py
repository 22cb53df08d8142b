"""Product catalogue service."""

import logging
from typing import Any

from pydantic import ValidationError

from backoffice.models import (
    BackofficeError,
    CategoryStats,
    ErrorCode,
    OrderItem,
    Product,
    ProductCategory,
    ProductCreate,
    ProductStats,
    ProductUpdate,
)
from backoffice.models.errors import validation_details
from backoffice.models.product import ProductFields
from backoffice.utils.ids import new_id
from backoffice.utils.timestamps import from_storage, to_storage, utc_now

from .dynamodb import DynamoDBService

logger = logging.getLogger(__name__)


def _to_item(product: Product) -> dict[str, Any]:
    item = product.model_dump(mode="json")
    item["created_at"] = to_storage(product.created_at)
    item["updated_at"] = to_storage(product.updated_at)
    return item


def _from_item(item: dict[str, Any]) -> Product:
    data = dict(item)
    data["created_at"] = from_storage(item["created_at"])
    data["updated_at"] = from_storage(item["updated_at"])
    return Product.model_validate(data)


class ProductService:
    """Service for managing products and their stock."""

    TABLE = "products"

    def __init__(self, db: DynamoDBService) -> None:
        self.db = db

    def create_product(self, data: ProductCreate) -> Product:
        now = utc_now()
        product = Product(
            product_id=new_id("PRD"),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.db.put_item(
            self.TABLE,
            _to_item(product),
            condition_expression="attribute_not_exists(product_id)",
        )
        logger.info("Product created: %s (%s)", product.product_id, product.name)
        return product

    def list_products(
        self,
        category: ProductCategory | None = None,
        featured: bool | None = None,
    ) -> list[Product]:
        """List products, newest first, optionally filtered."""
        products = [_from_item(item) for item in self.db.scan(self.TABLE)]
        if category is not None:
            products = [p for p in products if p.category == category]
        if featured is not None:
            products = [p for p in products if p.featured == featured]
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    def get_product(self, product_id: str) -> Product:
        """Get a product by ID.

        Raises:
            BackofficeError: PRODUCT_NOT_FOUND
        """
        item = self.db.get_item(self.TABLE, {"product_id": product_id})
        if not item:
            raise BackofficeError(ErrorCode.PRODUCT_NOT_FOUND, details={"product_id": product_id})
        return _from_item(item)

    def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        """Apply a partial update and re-check product rules on the result.

        Raises:
            BackofficeError: PRODUCT_NOT_FOUND, VALIDATION_FAILED
        """
        current = self.get_product(product_id)
        merged = {
            **current.model_dump(include=set(ProductFields.model_fields)),
            **data.model_dump(exclude_unset=True),
        }
        try:
            fields = ProductFields.model_validate(merged)
        except ValidationError as e:
            raise BackofficeError(
                ErrorCode.VALIDATION_FAILED, details=validation_details(e)
            ) from e

        updated = current.model_copy(update={**fields.model_dump(), "updated_at": utc_now()})
        saved = self.db.put_item(
            self.TABLE,
            _to_item(updated),
            condition_expression="attribute_exists(product_id)",
        )
        if not saved:
            raise BackofficeError(ErrorCode.PRODUCT_NOT_FOUND, details={"product_id": product_id})
        return updated

    def delete_product(self, product_id: str) -> None:
        if self.db.delete_item(self.TABLE, {"product_id": product_id}) is None:
            raise BackofficeError(ErrorCode.PRODUCT_NOT_FOUND, details={"product_id": product_id})
        logger.info("Product deleted: %s", product_id)

    def check_availability(self, items: list[OrderItem]) -> None:
        """Verify every ordered product exists with enough stock.

        Raises:
            BackofficeError: PRODUCT_UNAVAILABLE naming the first failing item
        """
        needed: dict[str, int] = {}
        names: dict[str, str] = {}
        for item in items:
            needed[item.product_id] = needed.get(item.product_id, 0) + item.quantity
            names[item.product_id] = item.name

        for product_id, quantity in needed.items():
            stored = self.db.get_item(self.TABLE, {"product_id": product_id})
            if not stored:
                raise BackofficeError(
                    ErrorCode.PRODUCT_UNAVAILABLE,
                    details={"product_id": product_id},
                    message=f"Product {names[product_id]} not found",
                )
            if stored.get("stock", 0) < quantity:
                raise BackofficeError(
                    ErrorCode.PRODUCT_UNAVAILABLE,
                    details={"product_id": product_id, "available": str(stored.get("stock", 0))},
                    message=(
                        f"Insufficient stock for {names[product_id]}. "
                        f"Available: {stored.get('stock', 0)}"
                    ),
                )

    def reserve_stock(self, items: list[OrderItem]) -> bool:
        """Atomically decrement stock and increment sales for ordered items.

        Returns:
            False if any product ran out of stock in the meantime
        """
        needed: dict[str, int] = {}
        for item in items:
            needed[item.product_id] = needed.get(item.product_id, 0) + item.quantity

        now = to_storage(utc_now())
        table_name = self.db.table_name(self.TABLE)
        transact_items = [
            {
                "Update": {
                    "TableName": table_name,
                    "Key": {"product_id": {"S": product_id}},
                    "UpdateExpression": (
                        "SET #stock = #stock - :q, sales_count = sales_count + :q, "
                        "updated_at = :now"
                    ),
                    "ConditionExpression": "attribute_exists(product_id) AND #stock >= :q",
                    "ExpressionAttributeNames": {"#stock": "stock"},
                    "ExpressionAttributeValues": {
                        ":q": {"N": str(quantity)},
                        ":now": {"S": now},
                    },
                }
            }
            for product_id, quantity in needed.items()
        ]
        return self.db.transact_write(transact_items)

    def product_stats(self) -> ProductStats:
        """Product count, stock and sales per category."""
        products = self.list_products()
        by_category: dict[ProductCategory, CategoryStats] = {}
        for product in products:
            stats = by_category.setdefault(
                product.category,
                CategoryStats(category=product.category, products=0, stock=0, sales=0),
            )
            stats.products += 1
            stats.stock += product.stock
            stats.sales += product.sales_count
        return ProductStats(
            total_products=len(products),
            featured=sum(1 for p in products if p.featured),
            categories=sorted(by_category.values(), key=lambda s: -s.products),
        )
