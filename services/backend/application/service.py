from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional
from services.backend.domain.models import Customer, Order, OrderItem
from shared.core.logging_config import get_logger
from shared.core.pricing import compute_order_totals
from .schemas import CustomerCreate, OrderCreate

logger = get_logger(__name__)

class DuplicateEmailError(Exception):
    """Another customer already uses this email address"""

class UnknownCustomerError(Exception):
    """The order references a customer that does not exist"""

def customer_to_dict(customer: Customer) -> dict:
    return {
        "_id": customer.public_id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "created_at": customer.created_at,
    }

def order_to_dict(order: Order) -> dict:
    """Serialize an order, pricing it from its stored items."""
    totals = compute_order_totals(order.items, order.order_discount_percent)
    return {
        "_id": order.public_id,
        "customer_id": order.customer_id,
        "customer_name": order.customer_name_snapshot,
        "status": order.status,
        "order_discount_percent": float(order.order_discount_percent),
        "items": [
            {
                "name": item.name,
                "quantity": item.quantity,
                "unit_price": float(item.unit_price),
                "discount_percent": float(item.discount_percent),
            }
            for item in order.items
        ],
        "subtotal": float(totals.subtotal),
        "discount_total": float(totals.discount_total),
        "total": float(totals.total),
        "created_at": order.created_at,
    }

class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def list(self):
        return self.db.query(Customer).order_by(Customer.id.desc()).all()

    def get(self, public_id: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.public_id == public_id).first()

    def create(self, data: CustomerCreate) -> Customer:
        email = data.email.strip()
        clash = self.db.query(Customer).filter(func.lower(Customer.email) == email.lower()).first()
        if clash:
            raise DuplicateEmailError(email)

        obj = Customer(
            name=data.name,
            email=email,
            phone=data.phone,
            address=data.address,
        )
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        logger.info(f"Customer created: {obj.public_id}")
        return obj

class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def list(self):
        return self.db.query(Order).order_by(Order.id.desc()).all()

    def get(self, public_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.public_id == public_id).first()

    def create(self, data: OrderCreate) -> Order:
        customer = CustomerService(self.db).get(data.customer_id)
        if customer is None:
            raise UnknownCustomerError(data.customer_id)

        order = Order(
            customer_id=customer.public_id,
            customer_name_snapshot=customer.name,
            status=data.status.value,
            order_discount_percent=data.order_discount_percent,
        )
        for position, item in enumerate(data.items):
            order.items.append(OrderItem(
                position=position,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                discount_percent=item.discount_percent,
            ))

        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info(
            f"Order created: {order.public_id}",
            extra={'extra_fields': {'customer_id': order.customer_id, 'items': len(order.items)}}
        )
        return order
