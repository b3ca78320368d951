"""
Database schema models (SQLAlchemy)

Declares the tables once; scripts/init_db.py creates them. Runtime queries
are plain SQL in gestionale.repositories.
"""
from .customer import Customer
from .product import Product
from .order import Order, OrderItem, ORDER_STATUS_VALUES

__all__ = [
    "Customer",
    "Product",
    "Order",
    "OrderItem",
    "ORDER_STATUS_VALUES",
]
