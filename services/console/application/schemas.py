from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional
from shared.core.pricing import compute_order_totals, OrderTotals

class CustomerRecord(BaseModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "ignore"

class OrderItemRecord(BaseModel):
    name: str = ""
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal = Decimal("0")

    class Config:
        extra = "ignore"

class OrderRecord(BaseModel):
    id: str = Field(alias="_id")
    customer_id: str
    customer_name: Optional[str] = None
    status: str
    order_discount_percent: Decimal = Decimal("0")
    items: list[OrderItemRecord] = []
    # Computed by the backend
    subtotal: Optional[Decimal] = None
    discount_total: Optional[Decimal] = None
    total: Optional[Decimal] = None

    class Config:
        populate_by_name = True
        extra = "ignore"

    @property
    def display_customer(self) -> str:
        return self.customer_name or self.customer_id

    def recomputed_totals(self) -> OrderTotals:
        """Totals from the embedded items, used for per-line prices"""
        return compute_order_totals(self.items, self.order_discount_percent)
