"""Unit tests for ProductService."""

import pytest
from pydantic import ValidationError

from backoffice.models import (
    BackofficeError,
    ErrorCode,
    OrderItem,
    ProductCategory,
    ProductCreate,
    ProductUpdate,
)
from backoffice.services.product_service import ProductService


@pytest.fixture
def product_service(dynamodb) -> ProductService:
    return ProductService(dynamodb)


@pytest.fixture
def shirt(product_service, product_data):
    return product_service.create_product(ProductCreate(**product_data))


def order_item(product, quantity: int) -> OrderItem:
    return OrderItem(
        product_id=product.product_id, name=product.name, price=product.price, quantity=quantity
    )


class TestProductRules:
    def test_discount_must_be_below_price(self, product_data):
        product_data["discount_price"] = product_data["price"]
        with pytest.raises(ValidationError, match="must be below regular price"):
            ProductCreate(**product_data)

    def test_clothing_requires_sizes(self, product_data):
        product_data["sizes"] = []
        with pytest.raises(ValidationError, match="Sizes are required"):
            ProductCreate(**product_data)

    def test_other_categories_do_not_need_sizes(self, product_data):
        product_data.update(category="books", sizes=[])
        assert ProductCreate(**product_data).category == ProductCategory.BOOKS


class TestProductCrud:
    def test_create_and_get(self, product_service, shirt):
        fetched = product_service.get_product(shirt.product_id)
        assert fetched.name == "Linen Shirt"
        assert fetched.price == 4999
        assert fetched.sales_count == 0
        assert [s.value for s in fetched.sizes] == ["S", "M", "L"]

    def test_get_unknown(self, product_service):
        with pytest.raises(BackofficeError) as exc_info:
            product_service.get_product("PRD-MISSING")
        assert exc_info.value.code == ErrorCode.PRODUCT_NOT_FOUND

    def test_list_filters(self, product_service, shirt, product_data):
        product_data.update(name="Lamp", category="home", sizes=[], featured=False)
        lamp = product_service.create_product(ProductCreate(**product_data))

        assert {p.product_id for p in product_service.list_products()} == {
            shirt.product_id,
            lamp.product_id,
        }
        homes = product_service.list_products(category=ProductCategory.HOME)
        assert [p.product_id for p in homes] == [lamp.product_id]
        featured = product_service.list_products(featured=True)
        assert [p.product_id for p in featured] == [shirt.product_id]

    def test_partial_update(self, product_service, shirt):
        updated = product_service.update_product(shirt.product_id, ProductUpdate(stock=3))
        assert updated.stock == 3
        assert updated.name == shirt.name
        assert product_service.get_product(shirt.product_id).stock == 3

    def test_update_revalidates_merged_product(self, product_service, shirt):
        with pytest.raises(BackofficeError) as exc_info:
            product_service.update_product(shirt.product_id, ProductUpdate(price=1000))
        assert exc_info.value.code == ErrorCode.VALIDATION_FAILED

    def test_delete(self, product_service, shirt):
        product_service.delete_product(shirt.product_id)
        with pytest.raises(BackofficeError):
            product_service.get_product(shirt.product_id)
        with pytest.raises(BackofficeError) as exc_info:
            product_service.delete_product(shirt.product_id)
        assert exc_info.value.code == ErrorCode.PRODUCT_NOT_FOUND


class TestStock:
    def test_availability_passes(self, product_service, shirt):
        product_service.check_availability([order_item(shirt, 10)])

    def test_insufficient_stock(self, product_service, shirt):
        with pytest.raises(BackofficeError) as exc_info:
            product_service.check_availability([order_item(shirt, 11)])
        assert exc_info.value.code == ErrorCode.PRODUCT_UNAVAILABLE
        assert exc_info.value.message == "Insufficient stock for Linen Shirt. Available: 10"

    def test_quantities_of_repeated_lines_are_summed(self, product_service, shirt):
        with pytest.raises(BackofficeError):
            product_service.check_availability([order_item(shirt, 6), order_item(shirt, 5)])

    def test_unknown_product(self, product_service):
        item = OrderItem(product_id="PRD-GONE", name="Ghost", price=100, quantity=1)
        with pytest.raises(BackofficeError) as exc_info:
            product_service.check_availability([item])
        assert exc_info.value.message == "Product Ghost not found"

    def test_reserve_stock(self, product_service, shirt):
        assert product_service.reserve_stock([order_item(shirt, 4)])
        stored = product_service.get_product(shirt.product_id)
        assert stored.stock == 6
        assert stored.sales_count == 4

    def test_reserve_is_all_or_nothing(self, product_service, shirt, product_data):
        product_data.update(name="Lamp", category="home", sizes=[], stock=1)
        lamp = product_service.create_product(ProductCreate(**product_data))

        assert not product_service.reserve_stock([order_item(shirt, 2), order_item(lamp, 2)])
        assert product_service.get_product(shirt.product_id).stock == 10
        assert product_service.get_product(lamp.product_id).stock == 1


def test_product_stats(product_service, shirt, product_data):
    product_data.update(name="Lamp", category="home", sizes=[], stock=4, featured=False)
    product_service.create_product(ProductCreate(**product_data))
    product_data.update(name="Rug", stock=1)
    product_service.create_product(ProductCreate(**product_data))

    stats = product_service.product_stats()
    assert stats.total_products == 3
    assert stats.featured == 1
    assert stats.categories[0].category == ProductCategory.HOME
    assert stats.categories[0].products == 2
    assert stats.categories[0].stock == 5
