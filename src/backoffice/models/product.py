"""Product catalogue models."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from .enums import ProductCategory, ProductSize


class ProductFields(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    price: int = Field(..., ge=0, description="Price in minor units")
    discount_price: int | None = Field(default=None, ge=0)
    category: ProductCategory
    stock: int = Field(default=0, ge=0)
    sizes: list[ProductSize] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    featured: bool = False

    @model_validator(mode="after")
    def _check_rules(self) -> "ProductFields":
        if self.discount_price is not None and self.discount_price >= self.price:
            raise ValueError(
                f"Discount price ({self.discount_price}) must be below regular price"
            )
        if self.category == ProductCategory.CLOTHING and not self.sizes:
            raise ValueError("Sizes are required for clothing products")
        return self


class ProductCreate(ProductFields):
    pass


class ProductUpdate(BaseModel):
    """Partial product update; merged onto the stored product and re-validated."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    price: int | None = Field(default=None, ge=0)
    discount_price: int | None = Field(default=None, ge=0)
    category: ProductCategory | None = None
    stock: int | None = Field(default=None, ge=0)
    sizes: list[ProductSize] | None = None
    colors: list[str] | None = None
    featured: bool | None = None


class Product(ProductFields):
    product_id: str
    sales_count: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime


class CategoryStats(BaseModel):
    category: ProductCategory
    products: int
    stock: int
    sales: int


class ProductStats(BaseModel):
    total_products: int
    featured: int
    categories: list[CategoryStats]
