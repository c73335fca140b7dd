from enum import Enum


class OrderStatus(str, Enum):
    """Lifecycle states an order can be created with"""
    PENDING = "Pending"
    PAID = "Paid"
    SHIPPED = "Shipped"
    CANCELLED = "Cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
