"""Order models.

Prices are integers in minor currency units (cents).
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from .enums import OrderStatus, PaymentMethod, PaymentStatus, ProductSize


class OrderCustomer(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    address: str = Field(..., min_length=1, max_length=500)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class OrderItem(BaseModel):
    """A line item referencing a product."""

    product_id: str = Field(..., min_length=1, examples=["PRD-1A2B3C4D5E6F"])
    name: str = Field(..., min_length=1, max_length=100)
    price: int = Field(..., ge=0, description="Unit price in minor units")
    size: ProductSize | None = None
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class OrderPayment(BaseModel):
    status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: str | None = None
    client_secret: str | None = None
    paid_at: datetime | None = None


class Order(BaseModel):
    order_id: str
    customer: OrderCustomer
    payment_method: PaymentMethod
    items: list[OrderItem]
    total_price: int = Field(..., ge=0)
    commodity_price: int | None = Field(default=None, ge=0)
    currency: str = "usd"
    payment: OrderPayment = Field(default_factory=OrderPayment)
    order_status: OrderStatus = OrderStatus.PROCESSING
    created_at: datetime
    updated_at: datetime


class OrderCreate(BaseModel):
    """Data required to place an order.

    ``payment_method_id`` is an optional provider payment method token; when
    present the charge is confirmed immediately.
    """

    customer: OrderCustomer
    payment_method: PaymentMethod
    items: list[OrderItem] = Field(..., min_length=1)
    total_price: int = Field(..., ge=0)
    commodity_price: int | None = Field(default=None, ge=0)
    payment_method_id: str | None = Field(default=None, examples=["pm_card_visa"])

    def items_total(self) -> int:
        return sum(item.line_total for item in self.items)


class OrderUpdate(BaseModel):
    order_status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None


class OrderStatistics(BaseModel):
    """Order totals; revenue counts paid orders only."""

    total_orders: int = Field(..., ge=0)
    total_revenue: int = Field(..., ge=0, description="Revenue in minor units")
    avg_order_value: float = Field(..., ge=0)
