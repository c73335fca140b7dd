from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from services.backend.infrastructure.db import get_db
from services.backend.application.service import (
    CustomerService,
    OrderService,
    DuplicateEmailError,
    UnknownCustomerError,
    customer_to_dict,
    order_to_dict,
)
from services.backend.application.schemas import CustomerCreate, CustomerRead, OrderCreate, OrderRead

customers_router = APIRouter(prefix="/customers", tags=["customers"])
orders_router = APIRouter(prefix="/orders", tags=["orders"])

@customers_router.get("", response_model=list[CustomerRead])
def list_customers(db: Session = Depends(get_db)):
    """List customers, newest first"""
    return [customer_to_dict(c) for c in CustomerService(db).list()]

@customers_router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: str, db: Session = Depends(get_db)):
    customer = CustomerService(db).get(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer_to_dict(customer)

@customers_router.post("", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    try:
        customer = CustomerService(db).create(payload)
    except DuplicateEmailError:
        raise HTTPException(status_code=409, detail="A customer with this email already exists")
    return customer_to_dict(customer)

@orders_router.get("", response_model=list[OrderRead])
def list_orders(db: Session = Depends(get_db)):
    """List orders, newest first, with totals computed from their items"""
    return [order_to_dict(o) for o in OrderService(db).list()]

@orders_router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: str, db: Session = Depends(get_db)):
    order = OrderService(db).get(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_to_dict(order)

@orders_router.post("", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).create(payload)
    except UnknownCustomerError:
        raise HTTPException(status_code=404, detail="Customer not found")
    return order_to_dict(order)
