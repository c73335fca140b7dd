from pydantic import BaseModel, Field, StringConstraints
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from shared.core.order_status import OrderStatus

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Cents and hundredths of a percent only, matching the Numeric columns
Percent = Annotated[Decimal, Field(ge=0, le=100, max_digits=5, decimal_places=2)]
Money = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]

class CustomerCreate(BaseModel):
    name: RequiredText
    email: RequiredText
    phone: Optional[str] = None
    address: Optional[str] = None

class CustomerRead(BaseModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        populate_by_name = True

class OrderItemCreate(BaseModel):
    name: str = ""
    quantity: int = Field(1, ge=1)
    unit_price: Money = Decimal("0")
    discount_percent: Percent = Decimal("0")

class OrderCreate(BaseModel):
    customer_id: RequiredText
    status: OrderStatus = OrderStatus.PENDING
    order_discount_percent: Percent = Decimal("0")
    items: list[OrderItemCreate] = []

class OrderItemRead(BaseModel):
    name: str
    quantity: int
    unit_price: float
    discount_percent: float

class OrderRead(BaseModel):
    id: str = Field(alias="_id")
    customer_id: str
    customer_name: Optional[str] = None
    status: str
    order_discount_percent: float
    items: list[OrderItemRead]
    # Derived from the items on every read
    subtotal: float
    discount_total: float
    total: float
    created_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
